"""Parsers for multi-line log blocks."""

import re
from types import MappingProxyType
from typing import Optional

from mafialog.config.logging import get_logger
from mafialog.core.models import (
    NO_STATS,
    Consumable,
    ConsumableKind,
    FamiliarChange,
    LevelData,
    MeatGain,
    MPGain,
    NamedTurn,
    PlayerSnapshot,
    Turn,
)
from mafialog.core.timeline import Timeline
from mafialog.data.counters import Counter, lookup_limited_use
from mafialog.data.paths import AscensionPath, GameMode
from mafialog.data.stats import CharacterClass, StatClass
from mafialog.parser.context import ParseContext
from mafialog.parser.line_parsers import (
    EffectAcquisitionLineParser,
    ItemAcquisitionLineParser,
    LearnedSkillLineParser,
    LevelLineParser,
    LineParser,
    MeatGainType,
    MeatLineParser,
    MeatSpentLineParser,
    MPGainLineParser,
    MPGainType,
    NotesLineParser,
    StatLineParser,
    TookChoiceLineParser,
    apply_first_match,
    parse_amount,
    parse_stat_line,
)
from mafialog.parser.patterns import (
    ADVENTURE_GAIN_PATTERN,
    ADVENTURE_LOSS_PATTERN,
    ASCENSION_DATA_PATTERN,
    BANISH_ITEMS,
    BANISH_SKILLS,
    COMBAT_ITEM_PATTERN,
    COMBAT_LOSS_PATTERN,
    COMBAT_RUNAWAY_PATTERN,
    COMBAT_SKILL_PATTERN,
    COMBAT_WIN_SUFFIX,
    CONSUMABLE_PATTERN,
    EFFECT_PATTERN,
    ENCOUNTER_PATTERN,
    GENE_TONIC_PATTERN,
    HYBRID_INTRINSIC_PATTERN,
    MAJOR_YELLOW_RAY_PATTERN,
    MEAT_PATTERN,
    MP_PATTERN,
    ROUND_PREFIX,
    RUNAWAY_EQUIPMENT,
    RUNAWAY_FAMILIARS,
    SERVICE_CHOICE_PATTERN,
    SINGLE_ITEM_PATTERN,
    SINGLE_ITEM_PREFIX,
    SNAPSHOT_ADVENTURES_PATTERN,
    SNAPSHOT_CLASS_PATTERN,
    SNAPSHOT_EQUIPMENT_PATTERN,
    SNAPSHOT_FAMILIAR_PATTERN,
    SNAPSHOT_LEVEL_PATTERN,
    SNAPSHOT_MEAT_PATTERN,
    SNAPSHOT_STAT_PATTERN,
    SUMMON_CLIP_ART_LINE,
    TURN_MARKER_PATTERN,
)

logger = get_logger(__name__)


class BlockParser:
    """Base class for parsers that need a whole block at once."""

    def parse_block(self, lines: list[str], timeline: Timeline) -> None:
        raise NotImplementedError


def create_encounter_line_parsers(
    include_notes: bool = True,
    effect_parser: Optional[EffectAcquisitionLineParser] = None,
) -> list[LineParser]:
    """Line parsers for the non-round lines of an encounter block."""
    parsers: list[LineParser] = [
        ItemAcquisitionLineParser(),
        MeatLineParser(MeatGainType.ENCOUNTER),
        MeatSpentLineParser(),
        StatLineParser(),
        MPGainLineParser(MPGainType.ENCOUNTER),
        effect_parser or EffectAcquisitionLineParser(),
        LearnedSkillLineParser(),
        TookChoiceLineParser(),
        LevelLineParser(),
    ]
    if include_notes:
        parsers.append(NotesLineParser())
    return parsers


class EncounterBlockParser(BlockParser):
    """
    A turn marker and everything that happened on that turn.

    Round lines decide the combat outcome and are read before the turn is
    handed to the timeline, since the timeline's merge rules depend on
    whether the turn was a free runaway. All other lines are applied after
    the turn was added, so they land on whatever turn it was merged into.
    """

    def __init__(self, context: ParseContext, include_notes: bool = True) -> None:
        self.context = context
        self.effect_parser = EffectAcquisitionLineParser()
        self.line_parsers = create_encounter_line_parsers(include_notes, self.effect_parser)

    def parse_block(self, lines: list[str], timeline: Timeline) -> None:
        match = TURN_MARKER_PATTERN.match(lines[0])
        if not match:
            raise ValueError(f"Encounter block does not start with a turn marker: {lines[0]!r}")

        area_name = match.group("area")
        encounter_name = area_name
        for line in lines[1:]:
            encounter_match = ENCOUNTER_PATTERN.match(line)
            if encounter_match:
                encounter_name = encounter_match.group("name")
                break

        turn = Turn(
            area_name,
            encounter_name,
            int(match.group("turn")),
            timeline.current_day_number,
            used_equipment=self.context.current_equipment,
            used_familiar=self.context.current_familiar,
        )

        pending_uses: list[tuple[Counter, str]] = []
        lost = False
        other_lines = []
        for line in lines[1:]:
            if line.startswith(ROUND_PREFIX):
                if self._parse_round(line, turn, pending_uses):
                    lost = True
            elif not ENCOUNTER_PATTERN.match(line):
                other_lines.append(line)

        timeline.add_turn(turn)

        for counter, use in pending_uses:
            timeline.add_limited_use(counter, use)
        if lost:
            timeline.add_lost_combat(NamedTurn(encounter_name, turn.turn_number))

        self.effect_parser.encounter_name = encounter_name
        try:
            for line in other_lines:
                hybrid = HYBRID_INTRINSIC_PATTERN.match(line)
                if hybrid:
                    timeline.add_hybrid_content(
                        NamedTurn(hybrid.group("intrinsic"), timeline.last_turn.turn_number)
                    )
                    continue
                apply_first_match(self.line_parsers, line, timeline)
        finally:
            self.effect_parser.encounter_name = None

    def _parse_round(
        self,
        line: str,
        turn: Turn,
        pending_uses: list[tuple[Counter, str]],
    ) -> bool:
        """
        Apply one combat round line to the turn.

        Returns:
            True if the round lost the fight
        """
        match = COMBAT_SKILL_PATTERN.match(line)
        if match:
            skill = match.group("skill")
            turn.add_skill_cast(skill)
            if skill.lower() in BANISH_SKILLS:
                turn.is_banished = True
            limited = lookup_limited_use(skill)
            if limited:
                pending_uses.append(limited)
            return False

        match = COMBAT_ITEM_PATTERN.match(line)
        if match:
            item = match.group("item")
            turn.add_combat_item_used(item)
            if item.lower() in BANISH_ITEMS:
                turn.is_banished = True
            return False

        if COMBAT_RUNAWAY_PATTERN.match(line):
            turn.record_runaway(self._has_runaway_source(turn))
            return False

        if MAJOR_YELLOW_RAY_PATTERN.match(line):
            turn.is_disintegrated = True
            return False

        return COMBAT_LOSS_PATTERN.match(line) is not None

    @staticmethod
    def _has_runaway_source(turn: Turn) -> bool:
        if turn.used_familiar.familiar_name.lower() in RUNAWAY_FAMILIARS:
            return True
        return any(turn.used_equipment.is_equipped(item) for item in RUNAWAY_EQUIPMENT)


CONSUMABLE_KINDS = MappingProxyType({
    "eat": ConsumableKind.FOOD,
    "drink": ConsumableKind.BOOZE,
    "chew": ConsumableKind.SPLEEN,
    "use": ConsumableKind.OTHER,
})

DIABOLIC_PIZZA = "diabolic pizza"


class ConsumableBlockParser(BlockParser):
    """Food, booze, spleen and other items used outside of combat."""

    def __init__(self, include_notes: bool = True) -> None:
        self.item_parser = ItemAcquisitionLineParser()
        self.effect_parser = EffectAcquisitionLineParser()
        self.other_parsers: list[LineParser] = [
            LevelLineParser(),
            LearnedSkillLineParser(),
            TookChoiceLineParser(),
        ]
        if include_notes:
            self.other_parsers.append(NotesLineParser())

    def parse_block(self, lines: list[str], timeline: Timeline) -> None:
        match = CONSUMABLE_PATTERN.match(lines[0])
        if not match:
            raise ValueError(f"Consumable block does not start with a consumable: {lines[0]!r}")

        name = match.group("item")
        kind = CONSUMABLE_KINDS[match.group("verb")]
        is_pizza = name.lower() == DIABOLIC_PIZZA

        stat_gain = NO_STATS
        adventures = 0
        meat = 0
        mp = 0

        turn = timeline.get_last_turn_spent()
        for line in lines[1:]:
            line_stats = parse_stat_line(line)
            if line_stats is not None:
                stat_gain = stat_gain.plus(line_stats)
                continue

            adventure_match = ADVENTURE_GAIN_PATTERN.match(line)
            if adventure_match:
                adventures += self._amount(adventure_match.group("amount"), line)
                continue

            meat_match = MEAT_PATTERN.match(line)
            if meat_match:
                amount = self._amount(meat_match.group("amount"), line)
                if meat_match.group("verb") == "lose":
                    turn.add_meat(MeatGain(spent_meat=amount))
                else:
                    meat += amount
                    turn.add_meat(MeatGain(other_meat=amount))
                continue

            mp_match = MP_PATTERN.match(line)
            if mp_match:
                amount = self._amount(mp_match.group("amount"), line)
                mp += amount
                turn.add_mp_gain(MPGain(consumable_mp=amount))
                continue

            if is_pizza:
                effect_match = EFFECT_PATTERN.match(line)
                if effect_match:
                    timeline.add_pizza_event(
                        effect_match.group("effect"), int(effect_match.group("duration"))
                    )
                    continue

            if self.item_parser.parse_line(line, timeline):
                continue
            if self.effect_parser.parse_line(line, timeline):
                continue
            apply_first_match(self.other_parsers, line, timeline)

        turn.add_consumable_used(
            Consumable(
                name,
                int(match.group("amount")),
                kind,
                turn.turn_number,
                turn.day_number,
                stat_gain=stat_gain,
                adventure_gain=adventures,
                meat_gain=meat,
                mp_gain=mp,
            )
        )

    @staticmethod
    def _amount(text: str, line: str) -> int:
        try:
            return parse_amount(text)
        except ValueError:
            logger.warning(f"Malformed amount in consumable block, ignored: {line!r}")
            return 0


SNAPSHOT_SLOTS = MappingProxyType({
    "Hat": "hat",
    "Weapon": "weapon",
    "Off-hand": "offhand",
    "Back": "back",
    "Shirt": "shirt",
    "Pants": "pants",
    "Acc1": "acc1",
    "Acc2": "acc2",
    "Acc3": "acc3",
    "Fam Equip": "familiar_equip",
    "Familiar Equip": "familiar_equip",
})


class PlayerSnapshotBlockParser(BlockParser):
    """
    Character state dumps.

    The snapshot is authoritative for the worn loadout and familiar, so it
    resets the shared context instead of going through the usual switches.
    """

    def __init__(self, context: ParseContext) -> None:
        self.context = context

    def parse_block(self, lines: list[str], timeline: Timeline) -> None:
        last_turn = timeline.get_last_turn_spent()
        turn_number = last_turn.turn_number
        snapshot = PlayerSnapshot(turn_number, last_turn.day_number)

        equipment = self.context.current_equipment
        equipment_seen = False
        familiar: Optional[FamiliarChange] = None

        for line in lines[1:]:
            match = SNAPSHOT_CLASS_PATTERN.match(line)
            if match:
                snapshot.character_class = match.group("value")
                continue
            match = SNAPSHOT_LEVEL_PATTERN.match(line)
            if match:
                snapshot.level = int(match.group("value"))
                continue
            match = SNAPSHOT_STAT_PATTERN.match(line)
            if match:
                self._apply_stat(snapshot, match)
                continue
            match = SNAPSHOT_ADVENTURES_PATTERN.match(line)
            if match:
                snapshot.adventures_left = int(match.group("value"))
                continue
            match = SNAPSHOT_MEAT_PATTERN.match(line)
            if match:
                snapshot.meat = parse_amount(match.group("value"))
                continue
            match = SNAPSHOT_FAMILIAR_PATTERN.match(line)
            if match:
                familiar = FamiliarChange(match.group("value"), turn_number)
                snapshot.familiar = familiar.familiar_name
                continue
            match = SNAPSHOT_EQUIPMENT_PATTERN.match(line)
            if match:
                equipment = equipment.with_slot(
                    SNAPSHOT_SLOTS[match.group("slot")], match.group("item"), turn_number
                )
                equipment_seen = True

        if familiar is not None:
            self.context.current_familiar = familiar
            timeline.add_familiar_change(familiar)
        if equipment_seen:
            snapshot.equipment = equipment
            self.context.set_current_equipment(equipment)
            timeline.add_equipment_change(equipment)

        if snapshot.character_class != "not defined":
            character_class = CharacterClass.from_string(snapshot.character_class)
            if character_class is not CharacterClass.NOT_DEFINED:
                timeline.set_character_class(character_class)
        if snapshot.level > timeline.last_level.level_number:
            timeline.add_level(LevelData(snapshot.level, turn_number))

        timeline.add_player_snapshot(snapshot)

    @staticmethod
    def _apply_stat(snapshot: PlayerSnapshot, match: re.Match) -> None:
        buffed = int(match.group("buffed"))
        base = int(match.group("base")) if match.group("base") else buffed
        stat = match.group("stat")
        if stat == "Mus":
            snapshot.muscle, snapshot.buffed_muscle = base, buffed
        elif stat == "Mys":
            snapshot.mysticality, snapshot.buffed_mysticality = base, buffed
        else:
            snapshot.moxie, snapshot.buffed_moxie = base, buffed


class AscensionDataBlockParser(BlockParser):
    """Ascension number, game mode, path and class from the ascension header."""

    def parse_block(self, lines: list[str], timeline: Timeline) -> None:
        match = ASCENSION_DATA_PATTERN.match(lines[0])
        if match:
            timeline.ascension_number = int(match.group("number"))

        text = " ".join(lines[1:])
        for game_mode in (GameMode.CASUAL, GameMode.SOFTCORE, GameMode.HARDCORE):
            if game_mode.value in text:
                timeline.set_game_mode(game_mode)
                break

        path = AscensionPath.find_in(text)
        if path is not AscensionPath.NOT_DEFINED:
            timeline.set_ascension_path(path)

        for character_class in CharacterClass:
            if character_class is CharacterClass.NOT_DEFINED:
                continue
            if re.search(rf"\b{re.escape(character_class.class_name)}\b", text):
                timeline.set_character_class(character_class)
                break

        logger.debug(
            f"Ascension #{timeline.ascension_number}: {timeline.game_mode} "
            f"{timeline.ascension_path} {timeline.character_class}"
        )


class HybridDataBlockParser(BlockParser):
    """
    Gene tonics and hybrid intrinsics.

    A used tonic is recorded both as hybrid content and as a consumable of
    the current turn.
    """

    def __init__(self, line_parsers: list[LineParser]) -> None:
        self.line_parsers = line_parsers

    def parse_block(self, lines: list[str], timeline: Timeline) -> None:
        for line in lines:
            tonic = GENE_TONIC_PATTERN.match(line)
            if tonic:
                turn = timeline.get_last_turn_spent()
                timeline.add_hybrid_content(NamedTurn(tonic.group("tonic"), turn.turn_number))
                turn.add_consumable_used(
                    Consumable(
                        tonic.group("tonic"),
                        int(tonic.group("amount")),
                        ConsumableKind.OTHER,
                        turn.turn_number,
                        turn.day_number,
                    )
                )
                continue
            intrinsic = HYBRID_INTRINSIC_PATTERN.match(line)
            if intrinsic:
                turn = timeline.get_last_turn_spent()
                timeline.add_hybrid_content(
                    NamedTurn(intrinsic.group("intrinsic"), turn.turn_number)
                )
                continue
            apply_first_match(self.line_parsers, line, timeline)


COMMUNITY_SERVICES = MappingProxyType({
    "1": "Donate Blood",
    "2": "Feed the Children (But Not Too Much)",
    "3": "Build Playground Mazes",
    "4": "Feed Conspirators",
    "5": "Breed More Collies",
    "6": "Reduce Gazelle Population",
    "7": "Make Sausage",
    "8": "Be a Living Statue",
    "9": "Make Margaritas",
    "10": "Clean Steam Tunnels",
    "11": "Coil Wire",
    "30": "Donate Body",
})
DONATE_BODY = "Donate Body"
UNKNOWN_SERVICE = "unknown"


class ServiceBlockParser(BlockParser):
    """
    Community Service choices.

    A service costs many adventures at once but is logged as a single
    choice, so one turn is synthesized per adventure spent.
    """

    def __init__(self) -> None:
        self.item_parser = ItemAcquisitionLineParser()

    def parse_block(self, lines: list[str], timeline: Timeline) -> None:
        match = SERVICE_CHOICE_PATTERN.match(lines[0])
        if not match:
            raise ValueError(f"Service block does not start with a service choice: {lines[0]!r}")
        service = COMMUNITY_SERVICES.get(match.group("service"), UNKNOWN_SERVICE)

        adventures = 0
        if service not in (DONATE_BODY, UNKNOWN_SERVICE):
            for line in lines[1:]:
                adventure_match = ADVENTURE_LOSS_PATTERN.search(line)
                if adventure_match:
                    adventures = parse_amount(adventure_match.group("amount"))
                    break
            else:
                logger.warning(f"No adventure cost found for service {service!r}")

        equipment = timeline.last_equipment_change
        familiar = timeline.last_familiar_change
        day_number = timeline.current_day_number
        turn_number = timeline.next_turn_number
        area_name = f"Community Service: {service}"
        for _ in range(adventures):
            timeline.add_turn(
                Turn(
                    area_name,
                    service,
                    turn_number,
                    day_number,
                    used_equipment=equipment,
                    used_familiar=familiar,
                )
            )
            turn_number += 1

        for line in lines[1:]:
            self.item_parser.parse_line(line, timeline)


BARBICANS = MappingProxyType({
    StatClass.MUSCLE: "babar",
    StatClass.MYSTICALITY: "barbecue",
    StatClass.MOXIE: "barbershop",
})
DRAWBRIDGES = MappingProxyType({
    "draftsman's driving gloves": "draftsman",
    "nouveau nosering": "art",
    "brutal brogues": "brutalist",
})
MURDERHOLES = MappingProxyType({
    "bastille braggadocio": "gesture",
    "bastille budgeteer": "cannon",
    "bastille bourgeoisie": "catapult",
})
BASTILLE_RIG = "Bastille Battalion control rig"
UNKNOWN_PART = "?"


class BastilleBlockParser(BlockParser):
    """
    Bastille Battalion configuration.

    The log never states the chosen configuration; it is read back from
    which stat, item and effect the rig handed out.
    """

    def parse_block(self, lines: list[str], timeline: Timeline) -> None:
        barbican = UNKNOWN_PART
        drawbridge = UNKNOWN_PART
        murderhole = UNKNOWN_PART
        stat_gain = NO_STATS

        for line in lines[1:]:
            match = EFFECT_PATTERN.match(line)
            if match:
                murderhole = MURDERHOLES.get(match.group("effect").lower(), murderhole)
                continue
            match = SINGLE_ITEM_PATTERN.match(line)
            if match:
                drawbridge = DRAWBRIDGES.get(match.group("item").lower(), drawbridge)
                continue
            line_stats = parse_stat_line(line)
            if line_stats is not None and not line_stats.is_empty:
                stat_gain = line_stats
                barbican = BARBICANS.get(line_stats.dominant_stat, UNKNOWN_PART)

        label = f"{barbican} {drawbridge} {murderhole}"
        turn = timeline.get_last_turn_spent()
        # The stats only count towards totals through a consumable
        turn.add_consumable_used(
            Consumable(
                BASTILLE_RIG,
                1,
                ConsumableKind.OTHER,
                turn.turn_number,
                turn.day_number,
                stat_gain=stat_gain,
            )
        )
        timeline.add_limited_use(Counter.BASTILLE, label, stat_gain)


class CombingBlockParser(BlockParser):
    """Beach Comb effects."""

    def parse_block(self, lines: list[str], timeline: Timeline) -> None:
        match = EFFECT_PATTERN.match(lines[1])
        if not match:
            return
        effect = match.group("effect")
        limited = lookup_limited_use(effect)
        if limited is None:
            logger.warning(f"Unknown beach comb effect: {effect!r}")
            return
        counter, use = limited
        timeline.add_limited_use(counter, use)


class ClipArtBlockParser(BlockParser):
    """A Summon Clip Art cast and the item it created."""

    @staticmethod
    def is_clip_art_block(lines: list[str]) -> bool:
        return lines[0].lower() == SUMMON_CLIP_ART_LINE.lower()

    def parse_block(self, lines: list[str], timeline: Timeline) -> None:
        # A summon without a result does not use up a summon
        if len(lines) < 2:
            return
        if not lines[1].startswith(SINGLE_ITEM_PREFIX):
            logger.warning(f"Summon Clip Art without an item line: {lines[1]!r}")
            return
        clip_art = lines[1][len(SINGLE_ITEM_PREFIX):].strip()
        turn = timeline.get_last_turn_spent()
        turn.add_dropped_item(clip_art)
        turn.add_skill_cast("summon clip art")
        timeline.add_limited_use(Counter.CLIP_ART, clip_art)

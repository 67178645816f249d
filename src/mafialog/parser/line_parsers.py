"""Single-line parsers applied to the current turn of a timeline."""

from enum import Enum, auto
from typing import Optional

from mafialog.config.logging import get_logger
from mafialog.core.models import (
    DayChange,
    FamiliarChange,
    LevelData,
    MeatGain,
    MPGain,
    NamedTurn,
    Pull,
    Statgain,
)
from mafialog.core.timeline import Timeline
from mafialog.data.counters import (
    DAYCARE_SPA_EFFECTS,
    FORTUNE_TELLER_EFFECTS,
    Counter,
    lookup_limited_use,
)
from mafialog.data.stats import StatClass, get_stat_class
from mafialog.parser.context import ParseContext
from mafialog.parser.patterns import (
    CHECKPOINT_LINE,
    DATE_LINE_PATTERN,
    DAY_CHANGE_NOTE,
    DAY_CHANGE_PATTERN,
    EFFECT_PATTERN,
    EQUIP_PATTERN,
    FAMILIAR_PATTERN,
    LEARNED_SKILL_PATTERN,
    LEVEL_UP_PATTERN,
    MAJOR_YELLOW_RAY_PATTERN,
    MEAT_PATTERN,
    MEAT_SPENT_PATTERN,
    MP_PATTERN,
    MULTI_ITEM_PATTERN,
    NOTES_PATTERN,
    OUTFIT_CHECKPOINT_LINE,
    PIZZA_PATTERN,
    PULL_PATTERN,
    SINGLE_ITEM_PATTERN,
    SKILL_CAST_PATTERN,
    STAT_PATTERN,
    TOOK_CHOICE_PATTERN,
    UNEQUIP_PATTERN,
)

logger = get_logger(__name__)

YELLOW_RAY_EFFECT = "everything looks yellow"
ON_THE_TRAIL_EFFECT = "on the trail"
POOL_MP_EFFECT = "mental a-cue-ity"
POOL_MP_AMOUNT = 100

SLOT_NAMES = {
    "off-hand": "offhand",
    "familiar": "familiar_equip",
}


def parse_amount(text: str) -> int:
    """Parse a log amount such as "1,234"."""
    return int(text.replace(",", ""))


class LineParser:
    """
    Base class for parsers that handle exactly one line shape.

    Subclasses implement is_compatible() as a cheap test and apply_to() for
    the actual timeline mutation.
    """

    def is_compatible(self, line: str) -> bool:
        raise NotImplementedError

    def apply_to(self, line: str, timeline: Timeline) -> None:
        raise NotImplementedError

    def parse_line(self, line: str, timeline: Timeline) -> bool:
        """
        Apply this parser if it recognises the line.

        Returns:
            True if the line was claimed
        """
        if not self.is_compatible(line):
            return False
        self.apply_to(line, timeline)
        return True


class ItemAcquisitionLineParser(LineParser):
    """Single and stacked item drops."""

    def is_compatible(self, line: str) -> bool:
        return bool(SINGLE_ITEM_PATTERN.match(line) or MULTI_ITEM_PATTERN.match(line))

    def apply_to(self, line: str, timeline: Timeline) -> None:
        turn = timeline.get_last_turn_spent()
        match = SINGLE_ITEM_PATTERN.match(line)
        if match:
            turn.add_dropped_item(match.group("item"))
            return
        match = MULTI_ITEM_PATTERN.match(line)
        try:
            amount = parse_amount(match.group("amount"))
        except ValueError:
            logger.warning(f"Malformed item amount, line skipped: {line!r}")
            return
        turn.add_dropped_item(match.group("item"), amount)


class SkillCastLineParser(LineParser):
    """Out-of-combat skill casts, e.g. "cast 2 Ode to Booze"."""

    def is_compatible(self, line: str) -> bool:
        return SKILL_CAST_PATTERN.match(line) is not None

    def apply_to(self, line: str, timeline: Timeline) -> None:
        match = SKILL_CAST_PATTERN.match(line)
        casts = int(match.group("casts"))
        skill = match.group("skill")
        turn = timeline.get_last_turn_spent()
        turn.add_skill_cast(skill, casts)
        limited = lookup_limited_use(skill)
        if limited:
            counter, use = limited
            for _ in range(casts):
                timeline.add_limited_use(counter, use)


class FamiliarChangeLineParser(LineParser):
    """Familiar switches, which also swap familiar equipment."""

    def __init__(self, context: ParseContext) -> None:
        self.context = context

    def is_compatible(self, line: str) -> bool:
        return FAMILIAR_PATTERN.match(line) is not None

    def apply_to(self, line: str, timeline: Timeline) -> None:
        match = FAMILIAR_PATTERN.match(line)
        change = FamiliarChange(match.group("familiar"), timeline.next_turn_number)
        timeline.add_familiar_change(change)
        timeline.add_equipment_change(self.context.switch_familiar(change))


class MeatGainType(Enum):
    """Where meat gained by a line should be booked."""

    ENCOUNTER = auto()
    OTHER = auto()


class MeatLineParser(LineParser):
    """Meat gained or lost."""

    def __init__(self, gain_type: MeatGainType = MeatGainType.OTHER) -> None:
        self.gain_type = gain_type

    def is_compatible(self, line: str) -> bool:
        return MEAT_PATTERN.match(line) is not None

    def apply_to(self, line: str, timeline: Timeline) -> None:
        match = MEAT_PATTERN.match(line)
        try:
            amount = parse_amount(match.group("amount"))
        except ValueError:
            logger.warning(f"Malformed meat amount, line skipped: {line!r}")
            return
        if match.group("verb") == "lose":
            meat = MeatGain(spent_meat=amount)
        elif self.gain_type is MeatGainType.ENCOUNTER:
            meat = MeatGain(encounter_meat=amount)
        else:
            meat = MeatGain(other_meat=amount)
        timeline.get_last_turn_spent().add_meat(meat)


class MeatSpentLineParser(LineParser):
    """Meat spent in shops."""

    def is_compatible(self, line: str) -> bool:
        return MEAT_SPENT_PATTERN.match(line) is not None

    def apply_to(self, line: str, timeline: Timeline) -> None:
        match = MEAT_SPENT_PATTERN.match(line)
        try:
            amount = parse_amount(match.group("amount"))
        except ValueError:
            logger.warning(f"Malformed meat amount, line skipped: {line!r}")
            return
        timeline.get_last_turn_spent().add_meat(MeatGain(spent_meat=amount))


def parse_stat_line(line: str) -> Optional[Statgain]:
    """
    Read a substat gain or loss.

    Returns:
        The signed gain, or None if the line is not a valid substat line.
        Malformed amounts are logged.
    """
    match = STAT_PATTERN.match(line)
    if not match:
        return None
    stat_class = get_stat_class(match.group("substat"))
    if stat_class is None:
        return None
    try:
        amount = parse_amount(match.group("amount"))
    except ValueError:
        logger.warning(f"Malformed stat amount, line skipped: {line!r}")
        return None
    if match.group("verb") == "lose":
        amount = -amount
    return Statgain.of(stat_class, amount)


class StatLineParser(LineParser):
    """Substat gains and losses, mapped through the substat table."""

    def is_compatible(self, line: str) -> bool:
        match = STAT_PATTERN.match(line)
        return match is not None and get_stat_class(match.group("substat")) is not None

    def apply_to(self, line: str, timeline: Timeline) -> None:
        stat_gain = parse_stat_line(line)
        if stat_gain is not None:
            timeline.get_last_turn_spent().add_stat_gain(stat_gain)


class MPGainType(Enum):
    """Where MP restored by a line should be booked."""

    ENCOUNTER = auto()
    NOT_ENCOUNTER = auto()
    CONSUMABLE = auto()


class MPGainLineParser(LineParser):
    """MP restored, e.g. "You gain 12 Mana Points"."""

    def __init__(self, gain_type: MPGainType = MPGainType.NOT_ENCOUNTER) -> None:
        self.gain_type = gain_type

    def is_compatible(self, line: str) -> bool:
        return MP_PATTERN.match(line) is not None

    def apply_to(self, line: str, timeline: Timeline) -> None:
        match = MP_PATTERN.match(line)
        try:
            amount = parse_amount(match.group("amount"))
        except ValueError:
            logger.warning(f"Malformed MP amount, line skipped: {line!r}")
            return
        if self.gain_type is MPGainType.ENCOUNTER:
            mp_gain = MPGain(encounter_mp=amount)
        elif self.gain_type is MPGainType.CONSUMABLE:
            mp_gain = MPGain(consumable_mp=amount)
        else:
            mp_gain = MPGain(out_of_encounter_mp=amount)
        timeline.get_last_turn_spent().add_mp_gain(mp_gain)


class EquipmentLineParser(LineParser):
    """Equip, unequip and outfit checkpoint lines."""

    def __init__(self, context: ParseContext) -> None:
        self.context = context

    def is_compatible(self, line: str) -> bool:
        return (
            line == CHECKPOINT_LINE
            or line == OUTFIT_CHECKPOINT_LINE
            or EQUIP_PATTERN.match(line) is not None
            or UNEQUIP_PATTERN.match(line) is not None
        )

    def apply_to(self, line: str, timeline: Timeline) -> None:
        turn_number = timeline.next_turn_number

        if line == CHECKPOINT_LINE:
            self.context.push_checkpoint()
            return
        if line == OUTFIT_CHECKPOINT_LINE:
            restored = self.context.pop_checkpoint(turn_number)
            if restored is not None:
                timeline.add_equipment_change(restored)
            return

        match = EQUIP_PATTERN.match(line)
        if match:
            item = match.group("item")
        else:
            match = UNEQUIP_PATTERN.match(line)
            item = "none"
        slot = SLOT_NAMES.get(match.group("slot"), match.group("slot"))
        timeline.add_equipment_change(self.context.equip(slot, item, turn_number))


class PullLineParser(LineParser):
    """Items pulled from storage."""

    def is_compatible(self, line: str) -> bool:
        return PULL_PATTERN.match(line) is not None

    def apply_to(self, line: str, timeline: Timeline) -> None:
        match = PULL_PATTERN.match(line)
        turn = timeline.get_last_turn_spent()
        timeline.add_pull(
            Pull(match.group("item"), int(match.group("amount")), turn.turn_number, turn.day_number)
        )


class EffectAcquisitionLineParser(LineParser):
    """Effects that mark something about the turn they are gained on."""

    def __init__(self) -> None:
        # Set while the lines of an encounter block are parsed
        self.encounter_name: Optional[str] = None

    def _effect_name(self, line: str) -> Optional[str]:
        match = EFFECT_PATTERN.match(line)
        if match:
            return match.group("effect").lower()
        if MAJOR_YELLOW_RAY_PATTERN.match(line):
            return YELLOW_RAY_EFFECT
        return None

    def is_compatible(self, line: str) -> bool:
        effect = self._effect_name(line)
        return effect is not None and (
            effect in (YELLOW_RAY_EFFECT, ON_THE_TRAIL_EFFECT, POOL_MP_EFFECT)
            or effect in DAYCARE_SPA_EFFECTS
            or effect in FORTUNE_TELLER_EFFECTS
        )

    def apply_to(self, line: str, timeline: Timeline) -> None:
        effect = self._effect_name(line)
        turn = timeline.get_last_turn_spent()
        if effect == YELLOW_RAY_EFFECT:
            turn.is_disintegrated = True
        elif effect == ON_THE_TRAIL_EFFECT:
            encounter_name = self.encounter_name or turn.encounter_name
            timeline.add_hunted_combat(NamedTurn(encounter_name, turn.turn_number))
        elif effect == POOL_MP_EFFECT:
            turn.add_mp_gain(MPGain(encounter_mp=POOL_MP_AMOUNT))
        elif effect in DAYCARE_SPA_EFFECTS:
            timeline.add_limited_use(Counter.DAYCARE_SPA, DAYCARE_SPA_EFFECTS[effect])
        elif effect in FORTUNE_TELLER_EFFECTS:
            timeline.add_limited_use(Counter.FORTUNE_TELLER, FORTUNE_TELLER_EFFECTS[effect])


class DayChangeLineParser(LineParser):
    """
    Day boundaries.

    Explicit "===Day N===" markers start a day. A change of the in-game date
    between two date lines with no marker in between starts one too, and
    leaves a note on the new day's first turn.
    """

    def __init__(self) -> None:
        self._last_kol_date: Optional[str] = None
        self._marker_since_date = False

    def is_compatible(self, line: str) -> bool:
        return (
            line == DAY_CHANGE_NOTE
            or DAY_CHANGE_PATTERN.match(line) is not None
            or DATE_LINE_PATTERN.match(line) is not None
        )

    def apply_to(self, line: str, timeline: Timeline) -> None:
        if line == DAY_CHANGE_NOTE:
            return

        match = DAY_CHANGE_PATTERN.match(line)
        if match:
            day_number = int(match.group("day"))
            if day_number > timeline.current_day_number:
                timeline.add_day_change(DayChange(day_number, timeline.next_turn_number))
            self._marker_since_date = True
            return

        kol_date = DATE_LINE_PATTERN.match(line).group("kol_date")
        if (
            self._last_kol_date is not None
            and kol_date != self._last_kol_date
            and not self._marker_since_date
        ):
            logger.info(f"In-game date changed to {kol_date} without a day marker")
            timeline.add_day_change(
                DayChange(timeline.current_day_number + 1, timeline.next_turn_number)
            )
            timeline.get_last_turn_spent().add_notes(DAY_CHANGE_NOTE)
        self._last_kol_date = kol_date
        self._marker_since_date = False


class LearnedSkillLineParser(LineParser):
    """Newly learned skills."""

    def is_compatible(self, line: str) -> bool:
        return LEARNED_SKILL_PATTERN.match(line) is not None

    def apply_to(self, line: str, timeline: Timeline) -> None:
        skill = LEARNED_SKILL_PATTERN.match(line).group("skill")
        turn = timeline.get_last_turn_spent()
        timeline.add_learned_skill(NamedTurn(skill, turn.turn_number))


class TookChoiceLineParser(LineParser):
    """Choice adventure options that use up a daily resource."""

    def is_compatible(self, line: str) -> bool:
        match = TOOK_CHOICE_PATTERN.match(line)
        return match is not None and lookup_limited_use(match.group("choice")) is not None

    def apply_to(self, line: str, timeline: Timeline) -> None:
        choice = TOOK_CHOICE_PATTERN.match(line).group("choice")
        counter, use = lookup_limited_use(choice)
        timeline.add_limited_use(counter, use)


class PizzaLineParser(LineParser):
    """Diabolic pizza crafting from four ingredients."""

    def is_compatible(self, line: str) -> bool:
        return PIZZA_PATTERN.match(line) is not None

    def apply_to(self, line: str, timeline: Timeline) -> None:
        ingredients = PIZZA_PATTERN.match(line).group("ingredients")
        timeline.add_pizza_event(f"Crafted: {ingredients}")


class LevelLineParser(LineParser):
    """Level ups."""

    def is_compatible(self, line: str) -> bool:
        return LEVEL_UP_PATTERN.match(line) is not None

    def apply_to(self, line: str, timeline: Timeline) -> None:
        turn = timeline.get_last_turn_spent()
        timeline.add_level(LevelData(timeline.last_level.level_number + 1, turn.turn_number))


class NotesLineParser(LineParser):
    """Notes the player attached to the log."""

    def is_compatible(self, line: str) -> bool:
        return NOTES_PATTERN.match(line) is not None

    def apply_to(self, line: str, timeline: Timeline) -> None:
        timeline.get_last_turn_spent().add_notes(NOTES_PATTERN.match(line).group("notes"))


def create_other_block_parsers(
    context: ParseContext, include_notes: bool = True
) -> list[LineParser]:
    """
    Line parsers for OTHER blocks, in priority order.

    Some line shapes overlap, so the order decides which parser claims a line.
    """
    parsers: list[LineParser] = [
        ItemAcquisitionLineParser(),
        SkillCastLineParser(),
        FamiliarChangeLineParser(context),
        MeatLineParser(MeatGainType.OTHER),
        MeatSpentLineParser(),
        StatLineParser(),
        MPGainLineParser(MPGainType.NOT_ENCOUNTER),
        EquipmentLineParser(context),
        PullLineParser(),
        EffectAcquisitionLineParser(),
        DayChangeLineParser(),
        LearnedSkillLineParser(),
        TookChoiceLineParser(),
        PizzaLineParser(),
        LevelLineParser(),
    ]
    if include_notes:
        parsers.append(NotesLineParser())
    return parsers


def apply_first_match(parsers: list[LineParser], line: str, timeline: Timeline) -> bool:
    """Offer a line to each parser in turn until one claims it."""
    for parser in parsers:
        if parser.parse_line(line, timeline):
            return True
    return False

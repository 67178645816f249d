"""Tests for multi-line block parsers."""

import logging

import pytest

from mafialog.core.models import ConsumableKind, FamiliarChange, FreeRunaways, Statgain
from mafialog.core.summary import finalize_timeline
from mafialog.data.counters import Counter
from mafialog.parser.block_parsers import (
    AscensionDataBlockParser,
    BastilleBlockParser,
    ClipArtBlockParser,
    CombingBlockParser,
    ConsumableBlockParser,
    EncounterBlockParser,
    HybridDataBlockParser,
    PlayerSnapshotBlockParser,
    ServiceBlockParser,
)
from mafialog.data.paths import AscensionPath, GameMode
from mafialog.data.stats import CharacterClass
from mafialog.parser.context import ParseContext
from mafialog.parser.line_parsers import create_other_block_parsers


@pytest.fixture
def context():
    return ParseContext()


class TestEncounterBlock:
    def test_fight(self, context, timeline):
        EncounterBlockParser(context).parse_block(
            [
                "[12] The Haunted Pantry",
                "Encounter: possessed can of tomatoes",
                "Round 0: Brad wins initiative!",
                "Round 1: Brad casts SAUCEGEYSER!",
                "Round 2: Brad uses the seal tooth!",
                "Round 3: Brad wins the fight!",
                "After Battle: You gain 15 Meat",
                "You acquire an item: tomato",
                "After Battle: You gain 3 Wizardliness",
                "You gain 4 Mana Points",
            ],
            timeline,
        )

        turn = timeline.last_turn
        assert turn.turn_number == 12
        assert turn.area_name == "The Haunted Pantry"
        assert turn.encounter_name == "possessed can of tomatoes"
        assert turn.skills_cast["saucegeyser"] == 1
        assert turn.combat_items_used["seal tooth"] == 1
        assert turn.meat.encounter_meat == 15
        assert turn.dropped_items["tomato"] == 1
        assert turn.stat_gain == Statgain(mysticality=3)
        assert turn.mp_gain.encounter_mp == 4

    def test_banish_and_lost_combat(self, context, timeline):
        EncounterBlockParser(context).parse_block(
            [
                "[20] The Haunted Pantry",
                "Encounter: fiendish can of asparagus",
                "Round 1: Brad casts SNOKEBOMB!",
            ],
            timeline,
        )
        assert timeline.last_turn.is_banished

        EncounterBlockParser(context).parse_block(
            [
                "[21] The Haunted Pantry",
                "Encounter: tomb rat king",
                "Round 4: Brad loses the fight!",
            ],
            timeline,
        )
        [lost] = timeline.lost_combats
        assert (lost.data, lost.turn_number) == ("tomb rat king", 21)

    def test_free_runaway_with_bandersnatch(self, context, timeline):
        context.current_familiar = FamiliarChange("Frumious Bandersnatch", 0)
        parser = EncounterBlockParser(context)
        parser.parse_block(
            ["[10] The Haunted Pantry", "Encounter: bad monster"],
            timeline,
        )
        parser.parse_block(
            ["[11] The Haunted Pantry", "Encounter: bad monster", "Round 1: Brad runs away!"],
            timeline,
        )
        parser.parse_block(
            ["[11] The Sleazy Back Alley", "Encounter: big creepy spider"],
            timeline,
        )

        pantry = timeline.turns[1]
        assert pantry.turn_number == 10
        assert pantry.runaways == FreeRunaways(attempted=1, successful=1)

    def test_runaway_without_following_turn_is_only_attempted(self, context, timeline):
        context.current_familiar = FamiliarChange("Frumious Bandersnatch", 0)
        EncounterBlockParser(context).parse_block(
            ["[10] The Haunted Pantry", "Encounter: bad monster", "Round 1: Brad runs away!"],
            timeline,
        )
        finalize_timeline(timeline)

        pantry = timeline.turns[1]
        assert pantry.runaways == FreeRunaways(attempted=1, successful=0)
        assert timeline.summary.runaways == FreeRunaways(attempted=1, successful=0)

    def test_hunted_combat_uses_own_encounter_after_merge(self, context, timeline):
        parser = EncounterBlockParser(context)
        parser.parse_block(
            ["[30] The Haunted Pantry", "Encounter: possessed can of tomatoes"],
            timeline,
        )
        parser.parse_block(
            [
                "[30] The Haunted Pantry",
                "Encounter: fiendish can of asparagus",
                "You acquire an effect: On the Trail (40)",
            ],
            timeline,
        )

        assert timeline.last_turn.encounter_name == "possessed can of tomatoes"
        [hunted] = timeline.hunted_combats
        assert (hunted.data, hunted.turn_number) == ("fiendish can of asparagus", 30)
        assert parser.effect_parser.encounter_name is None

    def test_combat_limited_use(self, context, timeline):
        EncounterBlockParser(context).parse_block(
            [
                "[7] The Haunted Pantry",
                "Encounter: possessed can of tomatoes",
                "Round 1: Brad casts CHEAT CODE: REPLACE ENEMY!",
            ],
            timeline,
        )
        [use] = timeline.limited_uses
        assert use.counter is Counter.CHEAT_CODE
        assert use.turn == 7

    def test_hybrid_intrinsic_in_encounter(self, context, timeline):
        EncounterBlockParser(context).parse_block(
            [
                "[30] The Haunted Pantry",
                "Encounter: fish-hybrid thing",
                "You acquire an intrinsic: Human-Fish Hybrid",
            ],
            timeline,
        )
        assert timeline.hybrid_content[0].data == "Human-Fish Hybrid"
        assert timeline.hybrid_content[0].turn_number == 30

    def test_missing_turn_marker(self, context, timeline):
        with pytest.raises(ValueError):
            EncounterBlockParser(context).parse_block(["Encounter: nothing"], timeline)

    def test_turn_uses_current_loadout(self, context, timeline):
        context.equip("hat", "helmet turtle", 0)
        context.current_familiar = FamiliarChange("Mosquito", 0)
        EncounterBlockParser(context).parse_block(["[1] The Haunted Pantry"], timeline)

        turn = timeline.last_turn
        assert turn.used_equipment.hat == "helmet turtle"
        assert turn.used_familiar.familiar_name == "Mosquito"
        assert turn.encounter_name == "The Haunted Pantry"


class TestConsumableBlock:
    def test_food(self, timeline, make_turn):
        timeline.add_turn(make_turn("The Haunted Pantry", 4))
        ConsumableBlockParser().parse_block(
            [
                "eat 1 Boris's key lime pie",
                "You gain 6 Adventures",
                "You gain 20 Mysteriousness",
                "You gain 10 Mana Points",
            ],
            timeline,
        )

        turn = timeline.last_turn
        [consumable] = turn.consumables_used
        assert consumable.name == "Boris's key lime pie"
        assert consumable.kind is ConsumableKind.FOOD
        assert consumable.adventure_gain == 6
        assert consumable.stat_gain == Statgain(mysticality=20)
        assert consumable.mp_gain == 10
        assert turn.mp_gain.consumable_mp == 10
        assert turn.total_stat_gain == Statgain(mysticality=20)

    def test_kinds(self, timeline):
        parser = ConsumableBlockParser()
        parser.parse_block(["drink 1 dusty bottle of Marsala"], timeline)
        parser.parse_block(["chew 1 agua de vida"], timeline)
        parser.parse_block(["use 2 chewing gum on a string", "You acquire an item: seal tooth"], timeline)

        kinds = [c.kind for c in timeline.last_turn.consumables_used]
        assert kinds == [ConsumableKind.BOOZE, ConsumableKind.SPLEEN, ConsumableKind.OTHER]
        assert timeline.last_turn.dropped_items["seal tooth"] == 1

    def test_diabolic_pizza_effect(self, timeline):
        ConsumableBlockParser().parse_block(
            ["eat 1 diabolic pizza", "You acquire an effect: Certainty (20)"],
            timeline,
        )
        [event] = timeline.last_turn.pizza_events
        assert (event.description, event.duration) == ("Certainty", 20)


class TestPlayerSnapshotBlock:
    def test_snapshot(self, context, timeline):
        PlayerSnapshotBlockParser(context).parse_block(
            [
                "Player Snapshot",
                "Class: Sauceror",
                "Lv: 3",
                "Mus: 12 (10)",
                "Mys: 30",
                "Mox: 14 (12)",
                "Advs: 120",
                "Meat: 1,234",
                "Familiar: Mosquito (5 lbs)",
                "Hat: Helmet Turtle",
                "Acc1: ring of conflict",
            ],
            timeline,
        )

        snapshot = timeline.last_player_snapshot
        assert snapshot.level == 3
        assert (snapshot.muscle, snapshot.buffed_muscle) == (10, 12)
        assert snapshot.mysticality == 30
        assert snapshot.meat == 1234
        assert snapshot.adventures_left == 120
        assert timeline.character_class is CharacterClass.SAUCEROR
        assert timeline.last_level.level_number == 3
        assert timeline.last_familiar_change.familiar_name == "Mosquito"
        assert timeline.last_equipment_change.hat == "Helmet Turtle"
        assert context.current_equipment.acc1 == "ring of conflict"


class TestAscensionDataBlock:
    def test_ascension_header(self, timeline):
        AscensionDataBlockParser().parse_block(
            ["Ascension #12:", "Normal Hardcore Dark Gyffte Vampyre"],
            timeline,
        )
        assert timeline.ascension_number == 12
        assert timeline.game_mode is GameMode.HARDCORE
        assert timeline.ascension_path is AscensionPath.DARK_GYFFTE
        assert timeline.character_class is CharacterClass.VAMPYRE


class TestHybridDataBlock:
    def test_gene_tonic(self, context, timeline):
        HybridDataBlockParser(create_other_block_parsers(context)).parse_block(
            [
                "use 1 Gene Tonic: Fish",
                "You acquire an intrinsic: Human-Fish Hybrid",
                "You acquire an item: seal tooth",
            ],
            timeline,
        )
        assert [h.data for h in timeline.hybrid_content] == [
            "Gene Tonic: Fish",
            "Human-Fish Hybrid",
        ]
        assert timeline.last_turn.dropped_items["seal tooth"] == 1
        [tonic] = timeline.last_turn.consumables_used
        assert tonic.name == "Gene Tonic: Fish"
        assert (tonic.amount, tonic.kind) == (1, ConsumableKind.OTHER)


class TestServiceBlock:
    def test_turns_are_synthesized(self, timeline, make_turn):
        timeline.add_turn(make_turn("The Haunted Pantry", 10))
        ServiceBlockParser().parse_block(
            [
                "Took choice 1089/1: Donate Blood",
                "choice.php?whichchoice=1089&option=1",
                "You lose 3 Adventures",
                "You acquire an item: a light that never goes out",
            ],
            timeline,
        )

        service_turns = timeline.turns[2:]
        assert [t.turn_number for t in service_turns] == [11, 12, 13]
        assert {t.area_name for t in service_turns} == {"Community Service: Donate Blood"}
        assert service_turns[-1].dropped_items["a light that never goes out"] == 1

    def test_donate_body_costs_nothing(self, timeline):
        ServiceBlockParser().parse_block(
            ["Took choice 1089/30: Donate Body", "You lose 1 Adventure"],
            timeline,
        )
        assert len(timeline.turns) == 1

    def test_missing_cost_is_logged(self, timeline, caplog):
        with caplog.at_level(logging.WARNING):
            ServiceBlockParser().parse_block(["Took choice 1089/7: Make Sausage"], timeline)
        assert len(timeline.turns) == 1
        assert "No adventure cost" in caplog.text


class TestBastilleBlock:
    def test_configuration_label(self, timeline, make_turn):
        timeline.add_turn(make_turn("The Haunted Pantry", 4))
        BastilleBlockParser().parse_block(
            [
                "use 1 Bastille Battalion control rig",
                "You acquire an item: Nouveau Nosering",
                "You acquire an effect: Bastille Budgeteer (5)",
                "You gain 5 Muscleboundness",
            ],
            timeline,
        )

        [use] = timeline.limited_uses
        assert use.counter is Counter.BASTILLE
        assert use.use == "babar art cannon"
        assert use.stat_gain == Statgain(muscle=5)
        # Counted once, through the rig consumable
        assert timeline.last_turn.total_stat_gain == Statgain(muscle=5)

    def test_unrecognized_parts(self, timeline):
        BastilleBlockParser().parse_block(["use 1 Bastille Battalion control rig"], timeline)
        [use] = timeline.limited_uses
        assert use.use == "? ? ?"


class TestCombingBlock:
    def test_known_effect(self, timeline):
        CombingBlockParser().parse_block(
            ["Combing the beach head (5, 3)", "You acquire an effect: Hot-Headed (50)"],
            timeline,
        )
        [use] = timeline.limited_uses
        assert use.counter is Counter.BEACH_HEAD_HOT

    def test_unknown_effect(self, timeline, caplog):
        with caplog.at_level(logging.WARNING):
            CombingBlockParser().parse_block(
                ["Combing the beach head (5, 3)", "You acquire an effect: Sandy (10)"],
                timeline,
            )
        assert timeline.limited_uses == []
        assert "Unknown beach comb effect" in caplog.text


class TestClipArtBlock:
    def test_summon(self, timeline):
        lines = ["cast 1 Summon Clip Art", "You acquire an item: box of Familiar Jacks"]
        parser = ClipArtBlockParser()
        assert parser.is_clip_art_block(lines)

        parser.parse_block(lines, timeline)

        turn = timeline.last_turn
        assert turn.dropped_items["box of Familiar Jacks"] == 1
        assert turn.skills_cast["summon clip art"] == 1
        [use] = timeline.limited_uses
        assert (use.counter, use.use) == (Counter.CLIP_ART, "box of Familiar Jacks")

    def test_lone_summon_is_skipped(self, timeline):
        ClipArtBlockParser().parse_block(["cast 1 Summon Clip Art"], timeline)
        assert timeline.limited_uses == []
        assert timeline.last_turn.skills_cast == {}

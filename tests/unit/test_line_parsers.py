"""Tests for single-line parsers."""

import logging

import pytest

from mafialog.core.models import MeatGain, Statgain
from mafialog.core.timeline import START_OF_DAY
from mafialog.data.counters import Counter
from mafialog.parser.context import ParseContext
from mafialog.parser.line_parsers import (
    DayChangeLineParser,
    EffectAcquisitionLineParser,
    EquipmentLineParser,
    FamiliarChangeLineParser,
    ItemAcquisitionLineParser,
    MeatGainType,
    MeatLineParser,
    MPGainLineParser,
    SkillCastLineParser,
    StatLineParser,
    TookChoiceLineParser,
    apply_first_match,
    create_other_block_parsers,
    parse_amount,
    parse_stat_line,
)
from mafialog.parser.patterns import DAY_CHANGE_NOTE


@pytest.fixture
def pantry_timeline(timeline, make_turn):
    """Timeline whose current turn is a Haunted Pantry adventure on turn 5."""
    timeline.add_turn(make_turn("The Haunted Pantry", 5))
    return timeline


@pytest.fixture
def context():
    return ParseContext()


@pytest.fixture
def parsers(context):
    return create_other_block_parsers(context)


def _current(timeline):
    return timeline.last_turn


class TestParseAmount:
    def test_thousands_separator(self):
        assert parse_amount("1,234") == 1234

    def test_malformed(self):
        with pytest.raises(ValueError):
            parse_amount("1x2")


class TestItemAcquisition:
    def test_single_item(self, pantry_timeline):
        ItemAcquisitionLineParser().parse_line("You acquire an item: seal tooth", pantry_timeline)
        assert _current(pantry_timeline).dropped_items["seal tooth"] == 1

    def test_stacked_items(self, pantry_timeline):
        ItemAcquisitionLineParser().parse_line(
            "You acquire disassembled clover (3)", pantry_timeline
        )
        assert _current(pantry_timeline).dropped_items["disassembled clover"] == 3

    def test_effect_is_not_an_item(self):
        parser = ItemAcquisitionLineParser()
        assert not parser.is_compatible("You acquire an effect: Ode to Booze (5)")


class TestStats:
    @pytest.mark.parametrize(
        "line, expected",
        [
            ("You gain 12 Strongness", Statgain(muscle=12)),
            ("After Battle: You gain 4 Enchantedness", Statgain(mysticality=4)),
            ("You lose 3 Cheek", Statgain(moxie=-3)),
        ],
    )
    def test_stat_lines(self, line, expected):
        assert parse_stat_line(line) == expected

    def test_unknown_substat(self):
        assert parse_stat_line("You gain 3 Fishiness") is None
        assert not StatLineParser().is_compatible("You gain 3 Fishiness")

    def test_malformed_amount_is_skipped(self, pantry_timeline, caplog):
        with caplog.at_level(logging.WARNING):
            claimed = StatLineParser().parse_line("You gain 1x2 Strongness", pantry_timeline)

        assert claimed
        assert _current(pantry_timeline).stat_gain.is_empty
        assert "Malformed stat amount" in caplog.text

    def test_gain_is_added_to_turn(self, pantry_timeline):
        parser = StatLineParser()
        parser.parse_line("You gain 12 Strongness", pantry_timeline)
        parser.parse_line("You gain 3 Strongness", pantry_timeline)
        assert _current(pantry_timeline).stat_gain == Statgain(muscle=15)


class TestMeatAndMP:
    def test_meat_outside_encounter(self, pantry_timeline):
        MeatLineParser().parse_line("You gain 1,234 Meat", pantry_timeline)
        assert _current(pantry_timeline).meat == MeatGain(other_meat=1234)

    def test_meat_in_encounter(self, pantry_timeline):
        MeatLineParser(MeatGainType.ENCOUNTER).parse_line(
            "After Battle: You gain 55 Meat", pantry_timeline
        )
        assert _current(pantry_timeline).meat.encounter_meat == 55

    def test_meat_lost(self, pantry_timeline):
        MeatLineParser().parse_line("You lose 50 Meat", pantry_timeline)
        assert _current(pantry_timeline).meat.spent_meat == 50

    def test_meat_spent(self, parsers, pantry_timeline):
        apply_first_match(parsers, "You spent 500 Meat", pantry_timeline)
        assert _current(pantry_timeline).meat.spent_meat == 500

    def test_mp(self, pantry_timeline):
        MPGainLineParser().parse_line("You gain 15 Mana Points", pantry_timeline)
        assert _current(pantry_timeline).mp_gain.out_of_encounter_mp == 15


class TestSkillCast:
    def test_cast_is_counted(self, pantry_timeline):
        SkillCastLineParser().parse_line("cast 2 The Ode to Booze", pantry_timeline)
        assert _current(pantry_timeline).skills_cast["the ode to booze"] == 2
        assert pantry_timeline.limited_uses == []

    def test_limited_skill_records_each_cast(self, pantry_timeline):
        SkillCastLineParser().parse_line("cast 3 Become a Bat", pantry_timeline)

        uses = pantry_timeline.limited_uses
        assert len(uses) == 3
        assert {(u.counter, u.use) for u in uses} == {(Counter.VAMPYRIC_CLOAKE, "Bat")}


class TestTookChoice:
    def test_pillkeeper_choice(self, pantry_timeline):
        claimed = TookChoiceLineParser().parse_line(
            "Took choice 1395/4: whatever", pantry_timeline
        )

        assert claimed
        [use] = pantry_timeline.limited_uses
        assert use.counter is Counter.PILLKEEPER
        assert use.use == "Rainbowolin"
        assert (use.day, use.turn) == (1, 5)

    def test_unrelated_choice_is_not_claimed(self, pantry_timeline):
        parser = TookChoiceLineParser()
        assert not parser.parse_line("Took choice 502/2: Follow the ruts", pantry_timeline)

    def test_choice_needs_colon(self, pantry_timeline):
        parser = TookChoiceLineParser()
        assert not parser.parse_line("Took choice 1395/4 without a colon", pantry_timeline)
        assert pantry_timeline.limited_uses == []


class TestEffects:
    def test_yellow_ray_disintegrates(self, pantry_timeline):
        EffectAcquisitionLineParser().parse_line(
            "You acquire an effect: Everything Looks Yellow (99)", pantry_timeline
        )
        assert _current(pantry_timeline).is_disintegrated

    def test_on_the_trail_records_hunted_combat(self, pantry_timeline):
        EffectAcquisitionLineParser().parse_line(
            "You acquire an effect: On the Trail (40)", pantry_timeline
        )
        [hunted] = pantry_timeline.hunted_combats
        assert hunted.data == "The Haunted Pantry"
        assert hunted.turn_number == 5

    def test_daycare_spa(self, pantry_timeline):
        EffectAcquisitionLineParser().parse_line(
            "You acquire an effect: Muddled (100)", pantry_timeline
        )
        [use] = pantry_timeline.limited_uses
        assert (use.counter, use.use) == (Counter.DAYCARE_SPA, "Mud bath")

    def test_ordinary_effect_not_claimed(self):
        assert not EffectAcquisitionLineParser().is_compatible(
            "You acquire an effect: Ode to Booze (5)"
        )


class TestLoadout:
    def test_equip_and_unequip(self, context, timeline):
        parser = EquipmentLineParser(context)
        parser.parse_line("equip hat helmet turtle", timeline)
        assert timeline.last_equipment_change.hat == "helmet turtle"

        parser.parse_line("unequip hat", timeline)
        assert timeline.last_equipment_change.hat == "none"

    def test_offhand_slot_name(self, context, timeline):
        EquipmentLineParser(context).parse_line("equip off-hand stuffed shoulder parrot", timeline)
        assert timeline.last_equipment_change.offhand == "stuffed shoulder parrot"

    def test_outfit_checkpoint_restores_loadout(self, context, timeline):
        parser = EquipmentLineParser(context)
        parser.parse_line("equip hat helmet turtle", timeline)
        parser.parse_line("checkpoint", timeline)
        parser.parse_line("equip hat fedora", timeline)
        assert timeline.last_equipment_change.hat == "fedora"

        parser.parse_line("outfit checkpoint", timeline)
        assert timeline.last_equipment_change.hat == "helmet turtle"
        assert context.current_equipment.hat == "helmet turtle"

    def test_familiar_keeps_its_equipment(self, context, timeline):
        familiar_parser = FamiliarChangeLineParser(context)
        equipment_parser = EquipmentLineParser(context)

        familiar_parser.parse_line("familiar Mosquito (5 lbs)", timeline)
        equipment_parser.parse_line("equip familiar sugar shield", timeline)
        familiar_parser.parse_line("familiar Baby Gravy Fairy (3 lbs)", timeline)
        assert context.current_equipment.familiar_equip == "none"
        assert timeline.last_familiar_change.familiar_name == "Baby Gravy Fairy"

        familiar_parser.parse_line("familiar Mosquito (5 lbs)", timeline)
        assert context.current_equipment.familiar_equip == "sugar shield"
        assert timeline.last_equipment_change.familiar_equip == "sugar shield"

    def test_change_applies_to_next_turn(self, context, pantry_timeline):
        EquipmentLineParser(context).parse_line("equip hat helmet turtle", pantry_timeline)
        assert pantry_timeline.last_equipment_change.turn_number == 6


class TestDayChange:
    def test_day_marker(self, pantry_timeline):
        DayChangeLineParser().parse_line("===Day 2===", pantry_timeline)
        assert pantry_timeline.last_day_change.day_number == 2
        assert pantry_timeline.last_day_change.turn_number == 6

    def test_date_change_without_marker(self, pantry_timeline):
        parser = DayChangeLineParser()
        parser.parse_line("February 21, 2020 - Boozember 3", pantry_timeline)
        parser.parse_line("February 21, 2020 - Boozember 4", pantry_timeline)

        assert pantry_timeline.current_day_number == 2
        start_of_day = pantry_timeline.last_turn
        assert start_of_day.area_name == START_OF_DAY
        assert DAY_CHANGE_NOTE in start_of_day.notes

    def test_date_change_after_marker(self, pantry_timeline):
        parser = DayChangeLineParser()
        parser.parse_line("February 21, 2020 - Boozember 3", pantry_timeline)
        parser.parse_line("===Day 2===", pantry_timeline)
        parser.parse_line("February 21, 2020 - Boozember 4", pantry_timeline)

        assert pantry_timeline.current_day_number == 2
        assert pantry_timeline.last_turn.area_name == "The Haunted Pantry"

    def test_same_date_is_not_a_day_change(self, pantry_timeline):
        parser = DayChangeLineParser()
        parser.parse_line("February 21, 2020 - Boozember 3", pantry_timeline)
        parser.parse_line("February 21, 2020 - Boozember 3", pantry_timeline)
        assert pantry_timeline.current_day_number == 1


class TestOtherBlockParsers:
    def test_item_parser_claims_first(self, parsers, pantry_timeline):
        assert apply_first_match(parsers, "You acquire an item: seal tooth", pantry_timeline)
        assert _current(pantry_timeline).dropped_items["seal tooth"] == 1

    def test_pull(self, parsers, pantry_timeline):
        apply_first_match(parsers, "pull: 2 ring of conflict", pantry_timeline)
        [pull] = pantry_timeline.pulls
        assert (pull.item_name, pull.amount, pull.turn_number) == ("ring of conflict", 2, 5)

    def test_level(self, parsers, pantry_timeline):
        apply_first_match(parsers, "You gain a Level!", pantry_timeline)
        assert pantry_timeline.last_level.level_number == 2
        assert pantry_timeline.last_level.turn_number == 5

    def test_learned_skill(self, parsers, pantry_timeline):
        apply_first_match(parsers, "You learned a new skill: Snokebomb", pantry_timeline)
        assert pantry_timeline.learned_skills[0].data == "Snokebomb"

    def test_pizza(self, parsers, pantry_timeline):
        apply_first_match(
            parsers, "pizza bran muffin, cheap wine, sea salt, tofu", pantry_timeline
        )
        [event] = _current(pantry_timeline).pizza_events
        assert event.description == "Crafted: bran muffin, cheap wine, sea salt, tofu"

    def test_notes(self, parsers, pantry_timeline):
        apply_first_match(parsers, "Notes: burned the first free fight", pantry_timeline)
        assert _current(pantry_timeline).notes == "burned the first free fight"

    def test_notes_can_be_disabled(self, context, pantry_timeline):
        parsers = create_other_block_parsers(context, include_notes=False)
        assert not apply_first_match(parsers, "Notes: ignored", pantry_timeline)
        assert _current(pantry_timeline).notes == ""

    def test_unknown_line(self, parsers, pantry_timeline):
        assert not apply_first_match(parsers, "Visiting the Mysterious Island", pantry_timeline)

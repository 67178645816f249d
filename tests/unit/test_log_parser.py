"""Tests for whole-log parsing."""

from pathlib import Path

import pytest

from mafialog.config.settings import Settings
from mafialog.data.counters import Counter
from mafialog.data.paths import AscensionPath, GameMode
from mafialog.data.stats import CharacterClass
from mafialog.parser.ascension_end import AscensionEndDetector, is_final_dark_gyffte_battle
from mafialog.parser.block_reader import LogBlock, LogBlockType
from mafialog.parser.log_parser import (
    MafiaLogParser,
    get_block_dump_path,
    parse_log,
    parse_log_text,
)

SORCERESS_FIGHT = """\
[400] The Naughty Sorceress' Chamber
Encounter: Naughty Sorceress (3)
Round 0: Brad wins initiative!
Round 5: Brad wins the fight!

[401] The Haunted Pantry
Encounter: possessed can of tomatoes
"""


class TestParseSampleLog:
    def test_run_metadata(self, parsed_timeline):
        assert parsed_timeline.ascension_number == 12
        assert parsed_timeline.game_mode is GameMode.SOFTCORE
        assert parsed_timeline.ascension_path is AscensionPath.STANDARD
        assert parsed_timeline.character_class is CharacterClass.SAUCEROR
        assert parsed_timeline.log_name == "Brad-20200221"

    def test_turns(self, parsed_timeline):
        turns = [(t.turn_number, t.day_number, t.area_name) for t in parsed_timeline.turns]
        assert turns == [
            (0, 1, "Ascension Start"),
            (1, 1, "The Haunted Pantry"),
            (2, 1, "The Haunted Pantry"),
            (3, 2, "The Sleazy Back Alley"),
        ]

    def test_summary(self, parsed_timeline):
        summary = parsed_timeline.summary
        assert summary.total_turns == 3
        assert summary.turns_per_day == {1: 2, 2: 1}
        assert summary.meat.encounter_meat == 37
        assert summary.stat_gain.mysticality == 23
        assert summary.skills_cast["saucegeyser"] == 3
        assert summary.dropped_items["tomato"] == 1
        assert len(summary.consumables_used) == 1

    def test_loadout(self, parsed_timeline):
        pantry = parsed_timeline.turns[1]
        assert pantry.used_familiar.familiar_name == "Mosquito"
        assert pantry.used_equipment.hat == "helmet turtle"
        assert parsed_timeline.last_equipment_change.hat == "helmet turtle"

    def test_days_levels_and_pulls(self, parsed_timeline):
        assert [(d.day_number, d.turn_number) for d in parsed_timeline.day_changes] == [
            (1, 0),
            (2, 3),
        ]
        assert parsed_timeline.last_level.level_number == 2
        [pull] = parsed_timeline.pulls
        assert (pull.item_name, pull.turn_number, pull.day_number) == ("ring of conflict", 3, 2)

    def test_limited_uses(self, parsed_timeline):
        [use] = parsed_timeline.limited_uses
        assert (use.counter, use.use, use.turn) == (Counter.PILLKEEPER, "Rainbowolin", 2)
        assert parsed_timeline.summary.limited_use_summary.get_uses(1, Counter.PILLKEEPER) == 1

    def test_parse_from_file(self, sample_log_file):
        timeline = parse_log(sample_log_file)
        assert timeline.log_name == "Brad-20200221"
        assert timeline.summary.total_turns == 3


class TestSpecialBlocks:
    def test_clip_art_block(self):
        timeline = parse_log_text(
            "cast 1 Summon Clip Art\nYou acquire an item: box of Familiar Jacks\n"
        )
        [use] = timeline.limited_uses
        assert (use.counter, use.use) == (Counter.CLIP_ART, "box of Familiar Jacks")

    def test_gene_tonic_block(self):
        timeline = parse_log_text(
            "[5] The Haunted Pantry\n\n"
            "use 1 Gene Tonic: Fish\nYou acquire an intrinsic: Human-Fish Hybrid\n"
        )
        assert [h.turn_number for h in timeline.hybrid_content] == [5, 5]
        assert [c.name for c in timeline.turns[-1].consumables_used] == ["Gene Tonic: Fish"]

    def test_notes_setting(self):
        text = "[5] The Haunted Pantry\n\nNotes: remember this\n"
        with_notes = parse_log_text(text)
        without_notes = parse_log_text(text, Settings(include_notes=False))

        assert with_notes.turns[-1].notes == "remember this"
        assert without_notes.turns[-1].notes == ""


class TestAscensionEnd:
    def test_parse_stops_after_final_boss(self):
        timeline = parse_log_text(SORCERESS_FIGHT)
        assert timeline.turns[-1].turn_number == 400

    def test_old_ascension_counting_reads_everything(self):
        timeline = parse_log_text(SORCERESS_FIGHT, Settings(old_ascension_counting=True))
        assert timeline.turns[-1].turn_number == 401

    def test_lost_boss_fight_does_not_end(self):
        detector = AscensionEndDetector()
        block = LogBlock(
            LogBlockType.ENCOUNTER,
            [
                "[400] The Naughty Sorceress' Chamber",
                "Encounter: Naughty Sorceress (3)",
                "Round 7: Brad loses the fight!",
            ],
        )
        assert not detector.is_ascension_end(block)

    def test_donate_body(self):
        detector = AscensionEndDetector()
        block = LogBlock(LogBlockType.SERVICE, ["Took choice 1089/30: Donate Body"])
        assert detector.is_ascension_end(block)

    def test_freeing_king_ralph(self):
        detector = AscensionEndDetector()
        block = LogBlock(LogBlockType.OTHER, ["[999] Tower", "Tower: Freeing King Ralph"])
        assert detector.is_ascension_end(block)

    def test_dark_gyffte_final_battle(self):
        lines = [
            "[512] The Naughty Sorceress' Chamber",
            "Encounter: darB",
            "Round 0: Brad wins initiative!",
            "Round 9: Brad wins the fight!",
        ]
        assert is_final_dark_gyffte_battle(lines)
        assert AscensionEndDetector().is_ascension_end(LogBlock(LogBlockType.ENCOUNTER, lines))


class TestMafiaLogParser:
    def test_parser_is_single_use(self, sample_log_text):
        parser = MafiaLogParser()
        parser.parse_text(sample_log_text)
        with pytest.raises(RuntimeError):
            parser.parse_text(sample_log_text)

    def test_parse_needs_path(self):
        with pytest.raises(RuntimeError):
            MafiaLogParser().parse()

    def test_debug_writes_block_dump(self, sample_log_file):
        MafiaLogParser(sample_log_file, Settings(debug=True)).parse()

        dump_path = sample_log_file.with_name("Brad-BlockDump20200221.txt")
        assert dump_path.exists()
        dump = dump_path.read_text(encoding="utf-8")
        assert dump.startswith("-------- BLOCK: ASCENSION_DATA --------\nAscension #12:\n")
        assert "-------- BLOCK: CONSUMABLE --------" in dump


class TestBlockDumpPath:
    def test_dated_log(self):
        path = get_block_dump_path(Path("logs/Brad-20200221.txt"))
        assert path == Path("logs/Brad-BlockDump20200221.txt")

    def test_undated_log(self):
        assert get_block_dump_path(Path("run.txt")) == Path("run-BlockDump.txt")

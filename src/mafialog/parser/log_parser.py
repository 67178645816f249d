"""Session log parser - dispatches log blocks to their parsers."""

import re
from pathlib import Path
from typing import Iterable, Optional, TextIO, Union

from mafialog.config.logging import get_logger
from mafialog.config.settings import Settings
from mafialog.core.summary import finalize_timeline
from mafialog.core.timeline import Timeline
from mafialog.parser.ascension_end import AscensionEndDetector
from mafialog.parser.block_parsers import (
    AscensionDataBlockParser,
    BastilleBlockParser,
    BlockParser,
    ClipArtBlockParser,
    CombingBlockParser,
    ConsumableBlockParser,
    EncounterBlockParser,
    HybridDataBlockParser,
    PlayerSnapshotBlockParser,
    ServiceBlockParser,
)
from mafialog.parser.block_reader import LogBlock, LogBlockType, read_blocks
from mafialog.parser.context import ParseContext
from mafialog.parser.line_parsers import apply_first_match, create_other_block_parsers

logger = get_logger(__name__)

# Dated logs are named "<player>-<yyyymmdd>.txt"
DATED_LOG_NAME = re.compile(r"^(?P<stem>.*)-(?P<date>\d*)$")


def get_block_dump_path(log_path: Path) -> Path:
    """
    Path of the debug block dump written next to a log.

    "Brad-20200221.txt" dumps to "Brad-BlockDump20200221.txt"; names without
    a date get "-BlockDump" appended to the stem.
    """
    match = DATED_LOG_NAME.match(log_path.stem)
    if match:
        name = f"{match.group('stem')}-BlockDump{match.group('date')}.txt"
    else:
        name = f"{log_path.stem}-BlockDump.txt"
    return log_path.with_name(name)


class MafiaLogParser:
    """
    Parses one condensed session log into a Timeline.

    All block and line parsers share one ParseContext, so equipment and
    familiar state stays consistent across them. A parser instance is good
    for a single parse.
    """

    def __init__(
        self,
        log_path: Optional[Union[str, Path]] = None,
        settings: Optional[Settings] = None,
        log_name: Optional[str] = None,
    ) -> None:
        """
        Initialize a parser.

        Args:
            log_path: Session log to read (None when parsing text directly)
            settings: Parse flags (defaults if None)
            log_name: Name for the timeline, defaults to the log file stem
        """
        self.log_path = Path(log_path) if log_path is not None else None
        self.settings = settings or Settings()
        if log_name is None and self.log_path is not None:
            log_name = self.log_path.stem
        self.log_name = log_name

        self.timeline = Timeline(
            is_detailed=True,
            mafia_turn_iteration=self.settings.mafia_turn_iteration,
            log_name=log_name,
        )
        self.context = ParseContext()
        self.end_detector = AscensionEndDetector(self.settings.old_ascension_counting)

        include_notes = self.settings.include_notes
        self.line_parsers = create_other_block_parsers(self.context, include_notes)
        self.clip_art_parser = ClipArtBlockParser()
        self.block_parsers: dict[LogBlockType, BlockParser] = {
            LogBlockType.ENCOUNTER: EncounterBlockParser(self.context, include_notes),
            LogBlockType.CONSUMABLE: ConsumableBlockParser(include_notes),
            LogBlockType.PLAYER_SNAPSHOT: PlayerSnapshotBlockParser(self.context),
            LogBlockType.ASCENSION_DATA: AscensionDataBlockParser(),
            LogBlockType.HYBRID_DATA: HybridDataBlockParser(self.line_parsers),
            LogBlockType.SERVICE: ServiceBlockParser(),
            LogBlockType.COMBING: CombingBlockParser(),
            LogBlockType.BASTILLE: BastilleBlockParser(),
        }
        self._parsed = False

    def parse(self) -> Timeline:
        """
        Parse the log file and finalize the timeline.

        Returns:
            The finalized timeline

        Raises:
            RuntimeError: If no log path was given or the parser was already used
            OSError: If the log cannot be read
        """
        if self.log_path is None:
            raise RuntimeError("No log path given, use parse_text() instead")
        with open(self.log_path, "r", encoding="utf-8", errors="replace") as f:
            if self.settings.debug:
                dump_path = get_block_dump_path(self.log_path)
                logger.debug(f"Writing block dump to {dump_path}")
                with open(dump_path, "w", encoding="utf-8") as dump:
                    return self._parse_lines(f, dump)
            return self._parse_lines(f, None)

    def parse_text(self, text: str) -> Timeline:
        """Parse a log held in memory and finalize the timeline."""
        return self._parse_lines(text.splitlines(), None)

    def _parse_lines(self, lines: Iterable[str], dump: Optional[TextIO]) -> Timeline:
        if self._parsed:
            raise RuntimeError("This parser has already been used")
        self._parsed = True

        for block in read_blocks(lines):
            is_end = self.end_detector.is_ascension_end(block)
            if dump is not None:
                self._dump_block(block, dump)
            self.parse_block(block)
            if is_end:
                logger.info(
                    f"Ascension end found in {self.log_name} at turn "
                    f"{self.timeline.last_turn.turn_number}"
                )
                break

        finalize_timeline(self.timeline)
        return self.timeline

    def parse_block(self, block: LogBlock) -> None:
        """Dispatch one block to its parser."""
        if block.block_type is LogBlockType.OTHER:
            if self.clip_art_parser.is_clip_art_block(block.lines):
                self.clip_art_parser.parse_block(block.lines, self.timeline)
                return
            for line in block.lines:
                apply_first_match(self.line_parsers, line, self.timeline)
            return
        self.block_parsers[block.block_type].parse_block(block.lines, self.timeline)

    @staticmethod
    def _dump_block(block: LogBlock, dump: TextIO) -> None:
        dump.write(f"-------- BLOCK: {block.block_type.name} --------\n")
        for line in block.lines:
            dump.write(line)
            dump.write("\n")


def parse_log(
    log_path: Union[str, Path],
    settings: Optional[Settings] = None,
) -> Timeline:
    """Parse a session log file into a finalized timeline."""
    return MafiaLogParser(log_path, settings).parse()


def parse_log_text(
    text: str,
    settings: Optional[Settings] = None,
    log_name: Optional[str] = None,
) -> Timeline:
    """Parse session log text into a finalized timeline."""
    return MafiaLogParser(settings=settings, log_name=log_name).parse_text(text)

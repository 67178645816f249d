"""Batch driver - parses condensed logs and writes JSON output."""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional

from mafialog.api.schemas import TimelineExport
from mafialog.config.logging import get_logger
from mafialog.config.settings import Settings
from mafialog.core.timeline import Timeline
from mafialog.parser.log_parser import MafiaLogParser

logger = get_logger(__name__)

BLOCK_DUMP_MARKER = "-BlockDump"
OUTPUT_SUFFIX = ".json"


@dataclass(frozen=True)
class ParseError:
    """A log that failed to parse, and how far it got."""

    log_name: str
    last_turn_number: int
    last_area_name: str
    message: str = ""


def parsed_log_name(log_file_name: str, suffix: str = OUTPUT_SUFFIX) -> str:
    """
    Output file name for a condensed log.

    "Brad-20200221.txt" becomes "Brad_ascend20200221.json". Names without a
    date part keep their stem.
    """
    stem = Path(log_file_name).stem
    user_name, sep, date = stem.rpartition("-")
    if not sep:
        return stem + suffix
    return f"{user_name}_ascend{date}{suffix}"


def find_logs(logs_dir: Path) -> list[Path]:
    """Condensed logs in a directory, oldest first by name."""
    return sorted(
        path
        for path in Path(logs_dir).glob("*.txt")
        if BLOCK_DUMP_MARKER not in path.stem
    )


def write_timeline(timeline: Timeline, output_path: Path) -> None:
    """Write a finalized timeline as JSON."""
    export = TimelineExport.from_timeline(timeline)
    output_path.write_text(export.model_dump_json(indent=2), encoding="utf-8")


class LogsProcessor:
    """
    Parses a batch of logs independently of each other.

    A failing log is recorded in the error list and the batch moves on.
    """

    def __init__(
        self,
        settings: Settings,
        on_parsed: Optional[Callable[[Path, Timeline], None]] = None,
    ) -> None:
        """
        Initialize the processor.

        Args:
            settings: Parse flags and output directory
            on_parsed: Callback for each successfully parsed log
        """
        self.settings = settings
        self._on_parsed = on_parsed

    def process(
        self,
        log_paths: Optional[Iterable[Path]] = None,
        logs_to_parse: Optional[int] = None,
    ) -> list[ParseError]:
        """
        Parse logs and write one JSON file per log.

        Args:
            log_paths: Logs to parse (defaults to every log in settings.logs_dir)
            logs_to_parse: Parse at most this many logs

        Returns:
            Logs that failed to parse

        Raises:
            ValueError: If the output path is not a directory, no logs were
                given and no logs directory is set, or logs_to_parse is below 1
        """
        if logs_to_parse is not None and logs_to_parse <= 0:
            raise ValueError("The number of logs to parse must not be below 1")

        if log_paths is None:
            if self.settings.logs_dir is None:
                raise ValueError("No logs given and no logs directory configured")
            log_paths = find_logs(self.settings.logs_dir)
        log_paths = [Path(p) for p in log_paths]
        if logs_to_parse is not None:
            log_paths = log_paths[:logs_to_parse]

        output_dir = self.settings.output_dir
        if output_dir.exists() and not output_dir.is_dir():
            raise ValueError(f"Output path is not a directory: {output_dir}")
        output_dir.mkdir(parents=True, exist_ok=True)

        errors: list[ParseError] = []
        for log_path in log_paths:
            error = self.process_log(log_path)
            if error is not None:
                errors.append(error)

        logger.info(f"Parsed {len(log_paths) - len(errors)} of {len(log_paths)} logs")
        return errors

    def process_log(self, log_path: Path) -> Optional[ParseError]:
        """
        Parse a single log and write its output.

        The output file is recreated empty before parsing begins, so a failed
        parse never leaves the previous run's output behind.

        Returns:
            None on success, otherwise the error record
        """
        output_path = self.settings.output_dir / parsed_log_name(log_path.name)
        output_path.write_text("", encoding="utf-8")

        parser = MafiaLogParser(log_path, self.settings)
        try:
            timeline = parser.parse()
            logger.info(f"Writing {output_path}...")
            write_timeline(timeline, output_path)
        except Exception as e:
            logger.exception(f"Failed to parse {log_path.name}")
            last_turn = parser.timeline.last_turn
            return ParseError(
                log_name=log_path.name,
                last_turn_number=last_turn.turn_number,
                last_area_name=last_turn.area_name,
                message=str(e),
            )

        if self._on_parsed:
            self._on_parsed(log_path, timeline)
        return None

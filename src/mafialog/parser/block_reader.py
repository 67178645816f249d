"""Split a session log into typed blocks."""

from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Iterable, Iterator, Union

from mafialog.parser.patterns import (
    ASCENSION_DATA_PATTERN,
    BASTILLE_LINE,
    BEACH_HEAD_MARKER,
    CONSUMABLE_PATTERN,
    EFFECT_PATTERN,
    GENE_TONIC_PATTERN,
    HYBRID_INTRINSIC_PATTERN,
    PLAYER_SNAPSHOT_LINE,
    SERVICE_CHOICE_PATTERN,
    TURN_MARKER_PATTERN,
)


class LogBlockType(Enum):
    """Kind of block, decided by its opening lines."""

    ENCOUNTER = auto()
    CONSUMABLE = auto()
    PLAYER_SNAPSHOT = auto()
    ASCENSION_DATA = auto()
    HYBRID_DATA = auto()
    SERVICE = auto()
    COMBING = auto()
    BASTILLE = auto()
    OTHER = auto()


@dataclass
class LogBlock:
    """Consecutive non-blank log lines."""

    block_type: LogBlockType
    lines: list[str] = field(default_factory=list)


def _is_combing_block(lines: list[str]) -> bool:
    return (
        len(lines) == 2
        and BEACH_HEAD_MARKER in lines[0].lower()
        and EFFECT_PATTERN.match(lines[1]) is not None
    )


def _is_hybrid_block(lines: list[str]) -> bool:
    if GENE_TONIC_PATTERN.match(lines[0]):
        return True
    if TURN_MARKER_PATTERN.match(lines[0]):
        return False
    return any(HYBRID_INTRINSIC_PATTERN.match(line) for line in lines)


def classify_block(lines: list[str]) -> LogBlockType:
    """
    Decide the type of a block.

    Markers are checked from most to least specific; anything unrecognised
    is OTHER, so classification never fails.

    Args:
        lines: Non-empty list of stripped block lines

    Returns:
        The block type
    """
    if not lines:
        return LogBlockType.OTHER

    first = lines[0]

    if first == BASTILLE_LINE:
        return LogBlockType.BASTILLE
    if SERVICE_CHOICE_PATTERN.match(first):
        return LogBlockType.SERVICE
    if _is_combing_block(lines):
        return LogBlockType.COMBING
    if ASCENSION_DATA_PATTERN.match(first):
        return LogBlockType.ASCENSION_DATA
    if first == PLAYER_SNAPSHOT_LINE:
        return LogBlockType.PLAYER_SNAPSHOT
    if _is_hybrid_block(lines):
        return LogBlockType.HYBRID_DATA
    if TURN_MARKER_PATTERN.match(first):
        return LogBlockType.ENCOUNTER
    if CONSUMABLE_PATTERN.match(first):
        return LogBlockType.CONSUMABLE

    return LogBlockType.OTHER


def read_blocks(lines: Iterable[str]) -> Iterator[LogBlock]:
    """
    Lazily yield blocks from raw log lines.

    Blocks are separated by one or more blank lines.

    Args:
        lines: Raw log lines, with or without line endings

    Yields:
        Typed blocks in log order
    """
    current: list[str] = []
    for raw_line in lines:
        line = raw_line.strip()
        if line:
            current.append(line)
            continue
        if current:
            yield LogBlock(classify_block(current), current)
            current = []
    if current:
        yield LogBlock(classify_block(current), current)


def read_blocks_from_text(text: str) -> Iterator[LogBlock]:
    """Yield blocks from a whole log held in memory."""
    return read_blocks(text.splitlines())


def read_blocks_from_file(path: Union[str, Path]) -> Iterator[LogBlock]:
    """Yield blocks from a log file, reading it line by line."""
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        yield from read_blocks(f)

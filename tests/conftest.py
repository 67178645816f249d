"""Global test fixtures."""

import logging

import pytest

from mafialog.config.logging import LOGGER_NAME
from mafialog.core.models import Turn
from mafialog.core.timeline import Timeline
from mafialog.parser.log_parser import parse_log_text

SAMPLE_LOG = """\
Ascension #12:
Normal Softcore Standard Sauceror

familiar Mosquito (5 lbs)
equip hat helmet turtle

[1] The Haunted Pantry
Encounter: possessed can of tomatoes
Round 0: Brad wins initiative!
Round 1: Brad casts SAUCEGEYSER!
Round 2: Brad wins the fight!
After Battle: You gain 15 Meat
You acquire an item: tomato
After Battle: You gain 3 Wizardliness

eat 1 Boris's key lime pie
You gain 6 Adventures
You gain 20 Mysteriousness

[2] The Haunted Pantry
Encounter: drunken half-orc hobo
Round 0: Brad wins initiative!
Round 1: Brad casts SAUCEGEYSER!
Round 2: Brad wins the fight!
After Battle: You gain 22 Meat
You acquire an item: chunk of hobo gristle

Took choice 1395/4: Rainbowolin

===Day 2===

[3] The Sleazy Back Alley
Encounter: big creepy spider
Round 0: Brad wins initiative!
Round 1: Brad casts SAUCEGEYSER!
Round 2: Brad wins the fight!
You gain a Level!

pull: 1 ring of conflict
"""


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Drop handlers installed by CLI tests so they don't leak into later tests."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def timeline():
    """Empty detailed timeline using mafia turn iteration."""
    return Timeline(log_name="test")


@pytest.fixture
def make_turn():
    """Factory for single turns."""

    def _make_turn(area: str, turn_number: int, day_number: int = 1, **kwargs) -> Turn:
        return Turn(area, kwargs.pop("encounter_name", area), turn_number, day_number, **kwargs)

    return _make_turn


@pytest.fixture
def sample_log_text():
    return SAMPLE_LOG


@pytest.fixture
def parsed_timeline():
    """Finalized timeline of the sample log."""
    return parse_log_text(SAMPLE_LOG, log_name="Brad-20200221")


@pytest.fixture
def sample_log_file(tmp_path):
    """Sample log written to a dated file in its own logs directory."""
    logs_dir = tmp_path / "logs"
    logs_dir.mkdir()
    log_path = logs_dir / "Brad-20200221.txt"
    log_path.write_text(SAMPLE_LOG, encoding="utf-8")
    return log_path

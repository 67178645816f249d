"""Configuration and settings management."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional


# Keys used by the legacy key/value settings store
DEBUG_KEY = "Debug"
INCLUDE_NOTES_KEY = "Include mafia log notes"
OLD_ASCENSION_COUNTING_KEY = "Using old ascension counting"
MAFIA_TURN_ITERATION_KEY = "Mafia turn iteration"

TRUE_VALUES = {"true", "1", "yes", "on"}


def get_default_output_dir() -> Path:
    """
    Get the default directory parsed logs are written to.

    Uses %LOCALAPPDATA%/mafialog/parsed on Windows.
    """
    local_app_data = os.environ.get("LOCALAPPDATA")
    if local_app_data:
        return Path(local_app_data) / "mafialog" / "parsed"
    # Fallback
    return Path.home() / ".mafialog" / "parsed"


def _as_bool(value: object, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in TRUE_VALUES


@dataclass
class Settings:
    """Parser settings."""

    # Directory holding the (already condensed) session logs
    logs_dir: Optional[Path] = None

    # Directory parsed output is written to
    output_dir: Path = field(default_factory=get_default_output_dir)

    # Carry "Notes:" lines from the session log onto turns
    include_notes: bool = True

    # Write every classified block to a side-channel dump file
    debug: bool = False

    # Fold duplicate turn numbers the way mafia itself iterates them
    mafia_turn_iteration: bool = True

    # Disable the per-path ascension end rules
    old_ascension_counting: bool = False

    def __post_init__(self) -> None:
        """Normalise path fields."""
        if self.logs_dir is not None:
            self.logs_dir = Path(self.logs_dir)
        self.output_dir = Path(self.output_dir)

    @classmethod
    def from_args(
        cls,
        logs_dir: Optional[str] = None,
        output_dir: Optional[str] = None,
        no_notes: bool = False,
        debug: bool = False,
        old_ascension_counting: bool = False,
        natural_turn_iteration: bool = False,
    ) -> "Settings":
        """
        Create settings from CLI arguments.

        Args:
            logs_dir: Directory with session logs
            output_dir: Override output directory
            no_notes: Drop mafia log notes
            debug: Enable block dumps
            old_ascension_counting: Use the single universal ascension end rule
            natural_turn_iteration: Disable mafia turn iteration
        """
        return cls(
            logs_dir=Path(logs_dir) if logs_dir else None,
            output_dir=Path(output_dir) if output_dir else get_default_output_dir(),
            include_notes=not no_notes,
            debug=debug,
            mafia_turn_iteration=not natural_turn_iteration,
            old_ascension_counting=old_ascension_counting,
        )

    @classmethod
    def from_mapping(cls, values: Mapping[str, object]) -> "Settings":
        """
        Create settings from a key/value settings store.

        Unknown keys are ignored, missing keys keep their defaults.

        Args:
            values: Mapping using the legacy setting names
        """
        settings = cls()
        settings.debug = _as_bool(values.get(DEBUG_KEY), settings.debug)
        settings.include_notes = _as_bool(
            values.get(INCLUDE_NOTES_KEY), settings.include_notes
        )
        settings.old_ascension_counting = _as_bool(
            values.get(OLD_ASCENSION_COUNTING_KEY), settings.old_ascension_counting
        )
        settings.mafia_turn_iteration = _as_bool(
            values.get(MAFIA_TURN_ITERATION_KEY), settings.mafia_turn_iteration
        )
        return settings

    def validate(self) -> list[str]:
        """
        Validate settings.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []

        if self.logs_dir and not self.logs_dir.exists():
            errors.append(f"Logs directory not found: {self.logs_dir}")

        if self.logs_dir and self.logs_dir.exists() and not self.logs_dir.is_dir():
            errors.append(f"Logs path is not a directory: {self.logs_dir}")

        if self.output_dir.exists() and not self.output_dir.is_dir():
            errors.append(f"Output path is not a directory: {self.output_dir}")

        return errors

"""Timeline of one ascension: turns, days, levels and loadout history."""

from typing import TYPE_CHECKING, Optional, TypeVar, Union

from mafialog.config.logging import get_logger
from mafialog.core.models import (
    NO_EQUIPMENT,
    NO_FAMILIAR,
    NO_STATS,
    DayChange,
    EquipmentChange,
    FamiliarChange,
    LevelData,
    LimitedUse,
    NamedTurn,
    PizzaEvent,
    PlayerSnapshot,
    Pull,
    Statgain,
    Turn,
    TurnInterval,
)
from mafialog.data.counters import Counter
from mafialog.data.paths import AscensionPath, GameMode
from mafialog.data.stats import CharacterClass

if TYPE_CHECKING:
    from mafialog.core.summary import LogSummaryData

logger = get_logger(__name__)

ASCENSION_START = "Ascension Start"
START_OF_DAY = "Start of Day"

# Learned skills on one turn are joined up to this many per entry
MAX_SKILLS_PER_ENTRY = 5

V = TypeVar("V")


def _last_before(mapping: dict[int, V], number: int) -> Optional[V]:
    """Value with the greatest key strictly below number."""
    keys = [key for key in mapping if key < number]
    return mapping[max(keys)] if keys else None


def _first_from(mapping: dict[int, V], number: int) -> Optional[V]:
    """Value with the smallest key at or above number."""
    keys = [key for key in mapping if key >= number]
    return mapping[min(keys)] if keys else None


def _sorted_values(mapping: dict[int, V]) -> list[V]:
    return [mapping[key] for key in sorted(mapping)]


class Timeline:
    """
    Shared mutable model of one ascension.

    A detailed timeline is built from single turns; a non-detailed one only
    holds turn intervals. All turn merging rules live in add_turn() and
    handle_parse_finished().
    """

    def __init__(
        self,
        is_detailed: bool = True,
        mafia_turn_iteration: bool = True,
        log_name: Optional[str] = None,
    ) -> None:
        """
        Initialize an empty timeline.

        Args:
            is_detailed: Built from single turns rather than turn intervals
            mafia_turn_iteration: Fold duplicate turn numbers the way mafia iterates them
            log_name: Name of the log this timeline was parsed from
        """
        self.is_detailed = is_detailed
        self.mafia_turn_iteration = mafia_turn_iteration
        self.log_name = log_name
        self.is_sub_interval = False

        self.character_class = CharacterClass.NOT_DEFINED
        self.game_mode = GameMode.NOT_DEFINED
        self.ascension_path = AscensionPath.NOT_DEFINED
        self.ascension_number: Optional[int] = None

        self._turns: list[Turn] = []
        self._intervals: list[TurnInterval] = []
        self._day_changes: dict[int, DayChange] = {}
        self._levels: dict[int, LevelData] = {}
        self._equipment_changes: dict[int, EquipmentChange] = {}
        self._familiar_changes: dict[int, FamiliarChange] = {}
        self._player_snapshots: dict[int, PlayerSnapshot] = {}
        self._pulls: list[Pull] = []
        self._learned_skills: list[NamedTurn] = []
        self._hybrid_content: list[NamedTurn] = []
        self._hunted_combats: list[NamedTurn] = []
        self._lost_combats: list[NamedTurn] = []
        self._summary: Optional["LogSummaryData"] = None

        # An ascension always starts on day 1, at level 1, with nothing
        # equipped and no familiar
        self.add_day_change(DayChange(1, 0))
        self._levels[1] = LevelData(1, 0)
        self._equipment_changes[0] = NO_EQUIPMENT
        self._familiar_changes[0] = NO_FAMILIAR

        first: Union[Turn, TurnInterval]
        if is_detailed:
            first = Turn(
                ASCENSION_START,
                ASCENSION_START,
                0,
                1,
                used_equipment=NO_EQUIPMENT,
                used_familiar=NO_FAMILIAR,
                is_free_turn=True,
            )
            self._turns.append(first)
        else:
            first = TurnInterval(ASCENSION_START, start=0, end=0)
            self._intervals.append(first)
        self._last = first
        self._penultimate = first

    # ------------------------------------------------------------------
    # Turn appending

    def add_turn(self, turn: Turn) -> None:
        """
        Append a single turn, merging it with earlier turns where needed.

        A turn with the same number, area and day as the last turn is the
        same adventure logged twice and is folded into the last turn. A turn
        that only shares the number means the last turn did not cost an
        adventure; in mafia turn iteration mode that free last turn is folded
        back into the penultimate turn when both were spent in the same area
        on the same day.

        Raises:
            ValueError: If turn is None
            RuntimeError: If this timeline only holds turn intervals
        """
        if turn is None:
            raise ValueError("Turn must not be None")
        if not self.is_detailed:
            raise RuntimeError("This timeline is not detailed, only add turn intervals")

        last = self._last
        penultimate = self._penultimate

        if (
            turn.turn_number == last.turn_number
            and turn.area_name == last.area_name
            and turn.day_number == last.day_number
        ):
            last.absorb(turn)
            last.is_free_turn = turn.is_free_turn
            if turn.ran_away and turn.runaway_equipment_equipped:
                last.add_free_runaways(1)
            return

        if turn.turn_number == last.turn_number:
            # The last turn did not advance the turn counter
            last.is_free_turn = True
            if (
                self.mafia_turn_iteration
                and penultimate is not last
                and last.day_number == penultimate.day_number
                and last.area_name == penultimate.area_name
            ):
                self._fold_last_into_penultimate()
            else:
                self._penultimate = last
        else:
            self._penultimate = last

        self._last = turn
        self._turns.append(turn)

    def _fold_last_into_penultimate(self) -> None:
        last = self._last
        penultimate = self._penultimate
        penultimate.absorb(last)
        if last.ran_away and last.runaway_equipment_equipped:
            penultimate.add_free_runaways(1)
        self._turns.pop()
        self._last = penultimate

    def add_turn_interval(self, interval: TurnInterval) -> None:
        """
        Append a turn interval to a non-detailed timeline.

        Raises:
            ValueError: If interval is None
            RuntimeError: If this timeline is detailed
        """
        if interval is None:
            raise ValueError("Turn interval must not be None")
        if self.is_detailed:
            raise RuntimeError("This timeline is detailed, only add single turns")
        self._penultimate = self._last
        self._last = interval
        self._intervals.append(interval)

    def handle_parse_finished(self) -> None:
        """Apply the last/penultimate merge check that no later append will trigger."""
        if not self.is_detailed:
            return
        last = self._last
        penultimate = self._penultimate
        if (
            last is not penultimate
            and last.turn_number == penultimate.turn_number
            and last.area_name == penultimate.area_name
            and self._turns
            and self._turns[-1] is last
        ):
            self._fold_last_into_penultimate()

    def get_last_turn_spent(self) -> Union[Turn, TurnInterval]:
        """
        The turn new data should be attached to.

        If the current day is ahead of the last turn's day, a free
        "Start of Day" turn is appended first and returned.
        """
        last = self._last
        if (
            self.is_detailed
            and isinstance(last, Turn)
            and self.current_day_number > last.day_number
        ):
            turn_number = last.turn_number if last.is_free_turn else last.turn_number + 1
            start_of_day = Turn(
                START_OF_DAY,
                START_OF_DAY,
                turn_number,
                self.current_day_number,
                used_equipment=self.last_equipment_change,
                used_familiar=self.last_familiar_change,
                is_free_turn=True,
            )
            self._penultimate = last
            self._last = start_of_day
            self._turns.append(start_of_day)
        return self._last

    @property
    def last_turn(self) -> Union[Turn, TurnInterval]:
        """Last recorded turn, without any start-of-day synthesis."""
        return self._last

    @property
    def next_turn_number(self) -> int:
        """Turn number an adventure-costing action logged now would get."""
        last = self._last
        if isinstance(last, TurnInterval):
            return last.end_turn + 1
        return last.turn_number if last.is_free_turn else last.turn_number + 1

    # ------------------------------------------------------------------
    # Other mutators

    def add_day_change(self, day_change: DayChange) -> None:
        """
        Record the start of a day.

        Skipped day numbers are backfilled at the same turn number so that
        every day from 1 up to the newest is present.
        """
        if day_change is None:
            raise ValueError("Day change must not be None")
        if day_change.turn_number < 0:
            raise ValueError("Turn number cannot be negative")

        if self._day_changes:
            highest = max(self._day_changes)
            for day_number in range(highest + 1, day_change.day_number):
                logger.debug(
                    f"Backfilling missing day {day_number} at turn {day_change.turn_number}"
                )
                self._day_changes[day_number] = DayChange(day_number, day_change.turn_number)
        self._day_changes[day_change.day_number] = day_change

    def add_equipment_change(self, change: EquipmentChange) -> None:
        """
        Record a loadout change.

        Only the last change of a turn is kept, and a change to the loadout
        already in use is dropped.
        """
        if change is None:
            raise ValueError("Equipment change must not be None")
        self._equipment_changes.pop(change.turn_number, None)
        if not self._equipment_changes or not self.last_equipment_change.equals_ignore_turn(change):
            self._equipment_changes[change.turn_number] = change

    def add_familiar_change(self, change: FamiliarChange) -> None:
        """Record a familiar change, with the same compaction as equipment."""
        if change is None:
            raise ValueError("Familiar change must not be None")
        self._familiar_changes.pop(change.turn_number, None)
        if (
            not self._familiar_changes
            or self.last_familiar_change.familiar_name != change.familiar_name
        ):
            self._familiar_changes[change.turn_number] = change

    def set_equipment_changes(self, changes: list[EquipmentChange]) -> None:
        """Replace the equipment history, re-applying compaction."""
        if changes is None:
            raise ValueError("Equipment changes must not be None")
        self._equipment_changes.clear()
        for change in sorted(changes, key=lambda c: c.turn_number):
            self.add_equipment_change(change)

    def set_familiar_changes(self, changes: list[FamiliarChange]) -> None:
        """Replace the familiar history, re-applying compaction."""
        if changes is None:
            raise ValueError("Familiar changes must not be None")
        self._familiar_changes.clear()
        for change in sorted(changes, key=lambda c: c.turn_number):
            self.add_familiar_change(change)

    def add_level(self, level: LevelData) -> None:
        if level is None:
            raise ValueError("Level must not be None")
        self._levels[level.level_number] = level

    def add_player_snapshot(self, snapshot: PlayerSnapshot) -> None:
        if snapshot is None:
            raise ValueError("Player snapshot must not be None")
        self._player_snapshots[snapshot.turn_number] = snapshot

    def add_pull(self, pull: Pull) -> None:
        if pull is None:
            raise ValueError("Pull must not be None")
        self._pulls.append(pull)

    def add_hunted_combat(self, combat: NamedTurn) -> None:
        if combat is None:
            raise ValueError("Hunted combat must not be None")
        self._hunted_combats.append(combat)

    def add_lost_combat(self, combat: NamedTurn) -> None:
        if combat is None:
            raise ValueError("Lost combat must not be None")
        self._lost_combats.append(combat)

    def add_learned_skill(self, learned: NamedTurn) -> None:
        """
        Record a newly learned skill.

        Skills learned on the same turn share one entry, joined with "; ",
        until the entry holds MAX_SKILLS_PER_ENTRY skills.
        """
        if learned is None or learned.data is None:
            raise ValueError("Learned skill must not be None and needs a description")
        for index, existing in enumerate(self._learned_skills):
            if existing.turn_number != learned.turn_number:
                continue
            if existing.data.count(";") < MAX_SKILLS_PER_ENTRY - 1:
                del self._learned_skills[index]
                self._learned_skills.append(
                    NamedTurn(f"{existing.data}; {learned.data}", learned.turn_number)
                )
                return
        self._learned_skills.append(learned)

    def add_hybrid_content(self, hybrid: NamedTurn) -> None:
        """
        Record a hybridization event.

        A repeat of an event on the same turn bumps a trailing "(N)" count
        instead of adding a second entry.
        """
        if hybrid is None or hybrid.data is None:
            raise ValueError("Hybrid data must not be None and needs a description")
        for index, existing in enumerate(self._hybrid_content):
            if existing.turn_number != hybrid.turn_number:
                continue
            if not existing.data.startswith(hybrid.data):
                continue
            open_paren = existing.data.find("(")
            close_paren = existing.data.find(")", open_paren + 1) if open_paren >= 0 else -1
            if open_paren >= 0 and close_paren > open_paren:
                try:
                    count = int(existing.data[open_paren + 1:close_paren]) + 1
                    data = f"{existing.data[:open_paren].rstrip()} ({count})"
                except ValueError:
                    logger.warning(f"Unexpected hybrid entry format: {existing.data!r}")
                    data = f"{existing.data} +1"
            else:
                data = f"{hybrid.data} (2)"
            del self._hybrid_content[index]
            self._hybrid_content.append(NamedTurn(data, hybrid.turn_number))
            return
        self._hybrid_content.append(hybrid)

    def add_limited_use(
        self,
        counter: Counter,
        use: str,
        stat_gain: Statgain = NO_STATS,
    ) -> LimitedUse:
        """
        Attach a limited use to the current turn.

        Raises:
            ValueError: If counter or use is None
            RuntimeError: If this timeline only holds turn intervals
        """
        if counter is None or use is None:
            raise ValueError("Counter and use must not be None")
        if not self.is_detailed:
            raise RuntimeError("Limited uses can only be added to a detailed timeline")
        turn = self.get_last_turn_spent()
        limited_use = LimitedUse(turn.day_number, turn.turn_number, counter, use, stat_gain)
        turn.add_limited_use(limited_use)
        return limited_use

    def add_pizza_event(self, description: str, duration: int = 0) -> PizzaEvent:
        """
        Attach a pizza event to the current turn.

        Raises:
            ValueError: If description is None
            RuntimeError: If this timeline only holds turn intervals
        """
        if description is None:
            raise ValueError("Pizza description must not be None")
        if not self.is_detailed:
            raise RuntimeError("Pizza events can only be added to a detailed timeline")
        turn = self.get_last_turn_spent()
        event = PizzaEvent(turn.day_number, turn.turn_number, description, duration)
        turn.add_pizza_event(event)
        return event

    def set_character_class(self, character_class: Union[CharacterClass, str]) -> None:
        if character_class is None:
            raise ValueError("Character class must not be None")
        if isinstance(character_class, str):
            character_class = CharacterClass.from_string(character_class)
        self.character_class = character_class

    def set_game_mode(self, game_mode: GameMode) -> None:
        if game_mode is None:
            raise ValueError("Game mode must not be None")
        self.game_mode = game_mode

    def set_ascension_path(self, path: AscensionPath) -> None:
        if path is None:
            raise ValueError("Ascension path must not be None")
        self.ascension_path = path

    # ------------------------------------------------------------------
    # Queries

    @property
    def turns(self) -> tuple[Turn, ...]:
        if not self.is_detailed:
            raise RuntimeError("Only detailed timelines contain single turns")
        return tuple(self._turns)

    @property
    def has_intervals(self) -> bool:
        return bool(self._intervals)

    @property
    def intervals(self) -> tuple[TurnInterval, ...]:
        if not self._intervals:
            raise RuntimeError("Turn intervals have to be created before they can be accessed")
        return tuple(self._intervals)

    @property
    def day_changes(self) -> list[DayChange]:
        return _sorted_values(self._day_changes)

    @property
    def last_day_change(self) -> DayChange:
        return self._day_changes[max(self._day_changes)]

    @property
    def current_day_number(self) -> int:
        return max(self._day_changes) if self._day_changes else 1

    def get_current_day(self, turn_number: int) -> DayChange:
        """Day the given turn number falls on."""
        if turn_number < 0:
            raise ValueError("Turn number cannot be negative")
        changes = self.day_changes
        current = changes[0]
        for day in changes:
            if day.turn_number > turn_number:
                break
            current = day
        return current

    @property
    def levels(self) -> list[LevelData]:
        return _sorted_values(self._levels)

    @property
    def last_level(self) -> LevelData:
        return self._levels[max(self._levels)]

    def get_current_level(self, turn_number: int) -> LevelData:
        """Level the character had on the given turn."""
        if turn_number < 0:
            raise ValueError("Turn number cannot be negative")
        levels = self.levels
        current = levels[0]
        for level in levels:
            if level.turn_number > turn_number:
                break
            current = level
        return current

    @property
    def equipment_changes(self) -> list[EquipmentChange]:
        return _sorted_values(self._equipment_changes)

    @property
    def last_equipment_change(self) -> EquipmentChange:
        if not self._equipment_changes:
            return NO_EQUIPMENT
        return self._equipment_changes[max(self._equipment_changes)]

    def get_last_equipment_change_before_turn(self, turn_number: int) -> Optional[EquipmentChange]:
        return _last_before(self._equipment_changes, turn_number)

    def get_first_equipment_change_after_turn(self, turn_number: int) -> Optional[EquipmentChange]:
        return _first_from(self._equipment_changes, turn_number)

    @property
    def familiar_changes(self) -> list[FamiliarChange]:
        return _sorted_values(self._familiar_changes)

    @property
    def last_familiar_change(self) -> FamiliarChange:
        if not self._familiar_changes:
            return NO_FAMILIAR
        return self._familiar_changes[max(self._familiar_changes)]

    def get_last_familiar_change_before_turn(self, turn_number: int) -> Optional[FamiliarChange]:
        return _last_before(self._familiar_changes, turn_number)

    def get_first_familiar_change_after_turn(self, turn_number: int) -> Optional[FamiliarChange]:
        return _first_from(self._familiar_changes, turn_number)

    @property
    def player_snapshots(self) -> list[PlayerSnapshot]:
        return _sorted_values(self._player_snapshots)

    @property
    def last_player_snapshot(self) -> Optional[PlayerSnapshot]:
        if not self._player_snapshots:
            return None
        return self._player_snapshots[max(self._player_snapshots)]

    def get_last_player_snapshot_before_turn(self, turn_number: int) -> Optional[PlayerSnapshot]:
        return _last_before(self._player_snapshots, turn_number)

    def get_first_player_snapshot_after_turn(self, turn_number: int) -> Optional[PlayerSnapshot]:
        return _first_from(self._player_snapshots, turn_number)

    @property
    def pulls(self) -> tuple[Pull, ...]:
        return tuple(self._pulls)

    @property
    def learned_skills(self) -> tuple[NamedTurn, ...]:
        return tuple(self._learned_skills)

    @property
    def hybrid_content(self) -> tuple[NamedTurn, ...]:
        return tuple(self._hybrid_content)

    @property
    def hunted_combats(self) -> tuple[NamedTurn, ...]:
        return tuple(self._hunted_combats)

    @property
    def lost_combats(self) -> tuple[NamedTurn, ...]:
        return tuple(self._lost_combats)

    @property
    def limited_uses(self) -> list[LimitedUse]:
        """All limited uses, sorted by counter, use and turn."""
        if self.is_detailed:
            uses = [use for turn in self._turns for use in turn.limited_uses]
        else:
            uses = [use for interval in self._intervals for use in interval.limited_uses]
        return sorted(uses)

    @property
    def copied_turns(self) -> list[TurnInterval]:
        """Intervals spent fighting copied monsters."""
        return [interval for interval in self.intervals if interval.is_copied_monster]

    @property
    def has_summary(self) -> bool:
        return self._summary is not None

    @property
    def summary(self) -> "LogSummaryData":
        if self._summary is None:
            raise RuntimeError("The log summary has to be created before it can be accessed")
        return self._summary

    # ------------------------------------------------------------------
    # Summary and sub-intervals

    def create_log_summary(self) -> "LogSummaryData":
        """Group turns into intervals and compute the summary."""
        from mafialog.core.summary import LogSummaryData, build_turn_intervals

        if self.is_detailed:
            self._intervals = build_turn_intervals(self._turns)
        self._summary = LogSummaryData.from_timeline(self)
        return self._summary

    def get_sub_interval_log_data(self, start_turn: int, end_turn: int) -> "Timeline":
        """
        Build a new timeline restricted to [start_turn, end_turn].

        State in effect before start_turn (familiar, equipment, level, day,
        player snapshot) is carried in so the result stands on its own.

        Raises:
            ValueError: If end_turn is not greater than start_turn or zero
        """
        if end_turn <= start_turn:
            raise ValueError("The end turn must be greater than the start turn")
        if end_turn <= 0:
            raise ValueError("The end turn must be greater than zero")

        sub = Timeline(self.is_detailed, self.mafia_turn_iteration, self.log_name)
        sub.is_sub_interval = True
        sub.character_class = self.character_class
        sub.game_mode = self.game_mode
        sub.ascension_path = self.ascension_path
        sub.ascension_number = self.ascension_number
        sub._turns.clear()
        sub._intervals.clear()
        sub._day_changes.clear()
        sub._levels.clear()
        sub._familiar_changes.clear()
        sub._equipment_changes.clear()

        if self.is_detailed:
            for turn in self._turns:
                if turn.turn_number > end_turn:
                    break
                if turn.turn_number >= start_turn:
                    sub._turns.append(turn)
            if sub._turns:
                sub._last = sub._turns[-1]
                sub._penultimate = sub._turns[-2] if len(sub._turns) > 1 else sub._last
        else:
            for interval in self._intervals:
                if interval.start_turn > end_turn:
                    break
                if interval.end_turn >= start_turn:
                    sub._intervals.append(interval)

        familiar_before = self.get_last_familiar_change_before_turn(start_turn)
        if familiar_before is not None:
            sub.add_familiar_change(familiar_before)
        for change in self.familiar_changes:
            if change.turn_number > end_turn:
                break
            if change.turn_number >= start_turn:
                sub.add_familiar_change(change)

        for day in self.day_changes:
            if day.turn_number > end_turn:
                break
            if start_turn <= day.turn_number < end_turn:
                sub._day_changes[day.day_number] = day
        # The day in progress at start_turn is needed when the range does not
        # begin exactly on a day change
        if sub._day_changes:
            previous_day = self._day_changes.get(min(sub._day_changes) - 1)
        else:
            previous_day = self.get_current_day(start_turn)
        if previous_day is not None:
            sub._day_changes[previous_day.day_number] = previous_day

        level_before = None
        for level in self.levels:
            if level.turn_number > end_turn:
                break
            if level.turn_number < start_turn:
                level_before = level
            else:
                sub.add_level(level)
        if level_before is not None:
            sub.add_level(level_before)

        snapshot_before = self.get_last_player_snapshot_before_turn(start_turn)
        if snapshot_before is not None:
            sub.add_player_snapshot(snapshot_before)
        for snapshot in self.player_snapshots:
            if snapshot.turn_number > end_turn:
                break
            if start_turn <= snapshot.turn_number < end_turn:
                sub.add_player_snapshot(snapshot)

        equipment_before = self.get_last_equipment_change_before_turn(start_turn)
        if equipment_before is not None:
            sub.add_equipment_change(equipment_before)
        for change in self.equipment_changes:
            if change.turn_number > end_turn:
                break
            if start_turn < change.turn_number < end_turn:
                sub.add_equipment_change(change)

        included_days = set(sub._day_changes)
        for pull in self._pulls:
            if pull.turn_number > end_turn:
                break
            if pull.turn_number >= start_turn and pull.day_number in included_days:
                sub.add_pull(pull)

        for combat in self._hunted_combats:
            if combat.turn_number > end_turn:
                break
            if combat.turn_number >= start_turn:
                sub.add_hunted_combat(combat)

        for combat in self._lost_combats:
            if combat.turn_number > end_turn:
                break
            if combat.turn_number >= start_turn:
                sub.add_lost_combat(combat)

        sub._learned_skills = [
            s for s in self._learned_skills if start_turn <= s.turn_number <= end_turn
        ]
        sub._hybrid_content = [
            h for h in self._hybrid_content if start_turn <= h.turn_number <= end_turn
        ]

        sub.create_log_summary()
        return sub

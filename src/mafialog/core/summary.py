"""Post-parse passes and aggregate summaries."""

import collections
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable

from mafialog.config.logging import get_logger
from mafialog.core.models import (
    NO_STATS,
    Consumable,
    DayChange,
    FreeRunaways,
    LimitedUse,
    MeatGain,
    MPGain,
    PizzaEvent,
    Statgain,
    Turn,
    TurnInterval,
)
from mafialog.data.counters import Counter, daily_use_weight

if TYPE_CHECKING:
    from mafialog.core.timeline import Timeline

logger = get_logger(__name__)


def build_turn_intervals(turns: Iterable[Turn]) -> list[TurnInterval]:
    """
    Group consecutive turns spent in the same area.

    An interval is free only if none of its turns cost an adventure.
    """
    intervals: list[TurnInterval] = []
    current = None
    for turn in turns:
        if current is None or current.area_name != turn.area_name:
            current = TurnInterval(turn.area_name, is_free=True)
            intervals.append(current)
        current.add_turn(turn)
        if not turn.is_free_turn:
            current.is_free = False
    return intervals


class LimitedUseSummary:
    """
    Daily use counts per counter.

    Days without any use between day 1 and the last day with a use are
    present with an empty mapping.
    """

    def __init__(self, limited_uses: Iterable[LimitedUse]) -> None:
        self.summary: dict[int, dict[Counter, int]] = {}
        next_day = 1
        for use in limited_uses:
            while next_day <= use.day:
                self.summary.setdefault(next_day, {})
                next_day += 1
            day_uses = self.summary.setdefault(use.day, {})
            day_uses[use.counter] = day_uses.get(use.counter, 0) + daily_use_weight(
                use.counter, use.use
            )

    def get_uses(self, day: int, counter: Counter) -> int:
        return self.summary.get(day, {}).get(counter, 0)

    def is_over_limit(self, day: int, counter: Counter) -> bool:
        return self.get_uses(day, counter) > counter.limit


@dataclass
class LogSummaryData:
    """Read-only totals computed once the timeline is complete."""

    dropped_items: collections.Counter = field(default_factory=collections.Counter)
    skills_cast: collections.Counter = field(default_factory=collections.Counter)
    combat_items_used: collections.Counter = field(default_factory=collections.Counter)
    consumables_used: list[Consumable] = field(default_factory=list)
    pizza_events: list[PizzaEvent] = field(default_factory=list)
    meat: MeatGain = field(default_factory=MeatGain)
    stat_gain: Statgain = NO_STATS
    mp_gain: MPGain = field(default_factory=MPGain)
    total_turns: int = 0
    free_turns: int = 0
    attempted_runaways: int = 0
    free_runaways: int = 0
    disintegrated_combats: int = 0
    banished_combats: int = 0
    turns_per_area: dict[str, int] = field(default_factory=dict)
    turns_per_day: dict[int, int] = field(default_factory=dict)
    limited_use_summary: LimitedUseSummary = field(
        default_factory=lambda: LimitedUseSummary([])
    )

    @property
    def runaways(self) -> FreeRunaways:
        return FreeRunaways(self.attempted_runaways, self.free_runaways)

    @classmethod
    def from_timeline(cls, timeline: "Timeline") -> "LogSummaryData":
        """Aggregate every interval of a timeline in one pass."""
        summary = cls()
        intervals = timeline.intervals if timeline.has_intervals else ()
        turns_per_area: collections.Counter = collections.Counter()
        turns_per_day: collections.Counter = collections.Counter()

        for interval in intervals:
            summary.dropped_items.update(interval.dropped_items)
            summary.skills_cast.update(interval.skills_cast)
            summary.combat_items_used.update(interval.combat_items_used)
            summary.consumables_used.extend(interval.consumables_used)
            summary.meat = summary.meat.plus(interval.meat)
            summary.stat_gain = summary.stat_gain.plus(interval.stat_gain)
            summary.mp_gain = summary.mp_gain.plus(interval.mp_gain)
            summary.attempted_runaways += interval.attempted_runaways
            summary.free_runaways += interval.free_runaways
            summary.total_turns += interval.total_turns
            turns_per_area[interval.area_name] += interval.total_turns

            for turn in interval.turns:
                summary.pizza_events.extend(turn.pizza_events)
                if turn.is_free_turn:
                    summary.free_turns += 1
                else:
                    turns_per_day[turn.day_number] += 1
                if turn.is_disintegrated:
                    summary.disintegrated_combats += 1
                if turn.is_banished:
                    summary.banished_combats += 1

        summary.turns_per_area = dict(turns_per_area)
        summary.turns_per_day = dict(sorted(turns_per_day.items()))
        summary.limited_use_summary = LimitedUseSummary(
            sorted(timeline.limited_uses, key=lambda use: (use.day, use.turn))
        )
        return summary


def rebuild_day_changes(timeline: "Timeline") -> None:
    """
    Recreate day changes from the day numbers of the final turns.

    Turn numbers recorded while streaming can drift when free runaways or
    other free turns end a day.
    """
    current_day = 1
    for turn in timeline.turns:
        while current_day < turn.day_number:
            current_day += 1
            timeline.add_day_change(DayChange(current_day, turn.turn_number))


def rebuild_loadout_changes(timeline: "Timeline") -> None:
    """Recreate familiar and equipment histories from the final turns."""
    turns = timeline.turns
    timeline.set_familiar_changes([turn.used_familiar for turn in turns])
    timeline.set_equipment_changes([turn.used_equipment for turn in turns])


def finalize_timeline(timeline: "Timeline") -> LogSummaryData:
    """
    Run the corrective post-parse passes and build the summary.

    Returns:
        The freshly created summary
    """
    timeline.handle_parse_finished()
    if timeline.is_detailed:
        rebuild_day_changes(timeline)
        rebuild_loadout_changes(timeline)
    summary = timeline.create_log_summary()
    logger.debug(
        f"Summary for {timeline.log_name}: {summary.total_turns} turns, "
        f"{summary.free_turns} free"
    )
    return summary

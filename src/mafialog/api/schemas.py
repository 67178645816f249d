"""Pydantic schemas for API responses and JSON output."""

from typing import Optional

from pydantic import BaseModel

from mafialog.core.models import (
    Consumable,
    EquipmentChange,
    LimitedUse,
    MeatGain,
    MPGain,
    PizzaEvent,
    Statgain,
    Turn,
    TurnInterval,
)
from mafialog.core.summary import LimitedUseSummary, LogSummaryData
from mafialog.core.timeline import Timeline


class StatgainModel(BaseModel):
    """Substat gains."""

    muscle: int = 0
    mysticality: int = 0
    moxie: int = 0

    @classmethod
    def from_statgain(cls, stat_gain: Statgain) -> "StatgainModel":
        return cls(
            muscle=stat_gain.muscle,
            mysticality=stat_gain.mysticality,
            moxie=stat_gain.moxie,
        )


class MeatModel(BaseModel):
    """Meat gained and spent."""

    encounter_meat: int = 0
    other_meat: int = 0
    spent_meat: int = 0

    @classmethod
    def from_meat(cls, meat: MeatGain) -> "MeatModel":
        return cls(
            encounter_meat=meat.encounter_meat,
            other_meat=meat.other_meat,
            spent_meat=meat.spent_meat,
        )


class MPModel(BaseModel):
    """MP restored by source."""

    encounter_mp: int = 0
    out_of_encounter_mp: int = 0
    consumable_mp: int = 0

    @classmethod
    def from_mp(cls, mp_gain: MPGain) -> "MPModel":
        return cls(
            encounter_mp=mp_gain.encounter_mp,
            out_of_encounter_mp=mp_gain.out_of_encounter_mp,
            consumable_mp=mp_gain.consumable_mp,
        )


class ConsumableModel(BaseModel):
    """A used consumable."""

    name: str
    amount: int
    kind: str  # FOOD, BOOZE, SPLEEN or OTHER
    turn_number: int
    day_number: int
    stat_gain: StatgainModel
    adventure_gain: int
    meat_gain: int
    mp_gain: int

    @classmethod
    def from_consumable(cls, consumable: Consumable) -> "ConsumableModel":
        return cls(
            name=consumable.name,
            amount=consumable.amount,
            kind=consumable.kind.name,
            turn_number=consumable.turn_number,
            day_number=consumable.day_number,
            stat_gain=StatgainModel.from_statgain(consumable.stat_gain),
            adventure_gain=consumable.adventure_gain,
            meat_gain=consumable.meat_gain,
            mp_gain=consumable.mp_gain,
        )


class LimitedUseModel(BaseModel):
    """One use of a daily limited resource."""

    day: int
    turn: int
    counter: str  # Counter display name
    use: str
    stat_gain: StatgainModel

    @classmethod
    def from_limited_use(cls, limited_use: LimitedUse) -> "LimitedUseModel":
        return cls(
            day=limited_use.day,
            turn=limited_use.turn,
            counter=limited_use.counter.display_name,
            use=limited_use.use,
            stat_gain=StatgainModel.from_statgain(limited_use.stat_gain),
        )


class PizzaEventModel(BaseModel):
    """Diabolic pizza crafted or eaten."""

    day: int
    turn: int
    description: str
    duration: int


def _pizza_events(events: list[PizzaEvent]) -> list[PizzaEventModel]:
    return [
        PizzaEventModel(day=e.day, turn=e.turn, description=e.description, duration=e.duration)
        for e in events
    ]


class EquipmentModel(BaseModel):
    """Loadout in effect from a turn onwards."""

    turn_number: int
    hat: str
    weapon: str
    offhand: str
    back: str
    shirt: str
    pants: str
    acc1: str
    acc2: str
    acc3: str
    familiar_equip: str

    @classmethod
    def from_change(cls, change: EquipmentChange) -> "EquipmentModel":
        return cls(
            turn_number=change.turn_number,
            hat=change.hat,
            weapon=change.weapon,
            offhand=change.offhand,
            back=change.back,
            shirt=change.shirt,
            pants=change.pants,
            acc1=change.acc1,
            acc2=change.acc2,
            acc3=change.acc3,
            familiar_equip=change.familiar_equip,
        )


class FamiliarModel(BaseModel):
    """Familiar in use from a turn onwards."""

    familiar_name: str
    turn_number: int


class DayModel(BaseModel):
    """Start of a day."""

    day_number: int
    turn_number: int


class LevelModel(BaseModel):
    """Turn a level was reached on."""

    level_number: int
    turn_number: int


class PullModel(BaseModel):
    """Item pulled from storage."""

    item_name: str
    amount: int
    turn_number: int
    day_number: int


class NamedTurnModel(BaseModel):
    """Text attached to a turn."""

    data: str
    turn_number: int


class TurnResponse(BaseModel):
    """Single turn."""

    turn_number: int
    day_number: int
    area_name: str
    encounter_name: str
    encounters: list[str]
    is_free_turn: bool
    is_disintegrated: bool
    is_banished: bool
    attempted_runaways: int
    free_runaways: int
    familiar: str
    meat: MeatModel
    stat_gain: StatgainModel  # Including consumables
    mp_gain: MPModel
    dropped_items: dict[str, int]
    skills_cast: dict[str, int]
    combat_items_used: dict[str, int]
    consumables: list[ConsumableModel]
    limited_uses: list[LimitedUseModel]
    notes: str = ""

    @classmethod
    def from_turn(cls, turn: Turn) -> "TurnResponse":
        return cls(
            turn_number=turn.turn_number,
            day_number=turn.day_number,
            area_name=turn.area_name,
            encounter_name=turn.encounter_name,
            encounters=list(turn.encounters),
            is_free_turn=turn.is_free_turn,
            is_disintegrated=turn.is_disintegrated,
            is_banished=turn.is_banished,
            attempted_runaways=turn.attempted_runaways,
            free_runaways=turn.free_runaways,
            familiar=turn.used_familiar.familiar_name,
            meat=MeatModel.from_meat(turn.meat),
            stat_gain=StatgainModel.from_statgain(turn.total_stat_gain),
            mp_gain=MPModel.from_mp(turn.mp_gain),
            dropped_items=dict(turn.dropped_items),
            skills_cast=dict(turn.skills_cast),
            combat_items_used=dict(turn.combat_items_used),
            consumables=[ConsumableModel.from_consumable(c) for c in turn.consumables_used],
            limited_uses=[LimitedUseModel.from_limited_use(u) for u in turn.limited_uses],
            notes=turn.notes,
        )


class TurnListResponse(BaseModel):
    """Paginated list of turns."""

    turns: list[TurnResponse]
    total: int
    page: int
    page_size: int


class IntervalResponse(BaseModel):
    """Consecutive turns spent in one area."""

    area_name: str
    start_turn: int
    end_turn: int
    total_turns: int
    is_free: bool
    is_copied_monster: bool
    meat: MeatModel
    stat_gain: StatgainModel
    mp_gain: MPModel
    dropped_items: dict[str, int]
    skills_cast: dict[str, int]

    @classmethod
    def from_interval(cls, interval: TurnInterval) -> "IntervalResponse":
        return cls(
            area_name=interval.area_name,
            start_turn=interval.start_turn,
            end_turn=interval.end_turn,
            total_turns=interval.total_turns,
            is_free=interval.is_free,
            is_copied_monster=interval.is_copied_monster,
            meat=MeatModel.from_meat(interval.meat),
            stat_gain=StatgainModel.from_statgain(interval.stat_gain),
            mp_gain=MPModel.from_mp(interval.mp_gain),
            dropped_items=dict(interval.dropped_items),
            skills_cast=dict(interval.skills_cast),
        )


class IntervalListResponse(BaseModel):
    """All turn intervals of a log."""

    intervals: list[IntervalResponse]
    total: int


class LimitedUseDayResponse(BaseModel):
    """Uses of each counter on one day."""

    day: int
    uses: dict[str, int]  # Counter display name -> uses
    over_limit: list[str]


class LimitedUsesResponse(BaseModel):
    """All limited uses plus their per-day totals."""

    uses: list[LimitedUseModel]
    per_day: list[LimitedUseDayResponse]

    @classmethod
    def from_timeline(
        cls, limited_uses: list[LimitedUse], summary: LimitedUseSummary
    ) -> "LimitedUsesResponse":
        per_day = []
        for day, counters in sorted(summary.summary.items()):
            per_day.append(
                LimitedUseDayResponse(
                    day=day,
                    uses={counter.display_name: uses for counter, uses in counters.items()},
                    over_limit=[
                        counter.display_name
                        for counter in counters
                        if summary.is_over_limit(day, counter)
                    ],
                )
            )
        return cls(
            uses=[LimitedUseModel.from_limited_use(u) for u in limited_uses],
            per_day=per_day,
        )


class SummaryResponse(BaseModel):
    """Totals of a log."""

    total_turns: int
    free_turns: int
    attempted_runaways: int
    free_runaways: int
    disintegrated_combats: int
    banished_combats: int
    meat: MeatModel
    stat_gain: StatgainModel
    mp_gain: MPModel
    dropped_items: dict[str, int]
    skills_cast: dict[str, int]
    combat_items_used: dict[str, int]
    consumables: list[ConsumableModel]
    pizza_events: list[PizzaEventModel]
    turns_per_area: dict[str, int]
    turns_per_day: dict[int, int]

    @classmethod
    def from_summary(cls, summary: LogSummaryData) -> "SummaryResponse":
        return cls(
            total_turns=summary.total_turns,
            free_turns=summary.free_turns,
            attempted_runaways=summary.attempted_runaways,
            free_runaways=summary.free_runaways,
            disintegrated_combats=summary.disintegrated_combats,
            banished_combats=summary.banished_combats,
            meat=MeatModel.from_meat(summary.meat),
            stat_gain=StatgainModel.from_statgain(summary.stat_gain),
            mp_gain=MPModel.from_mp(summary.mp_gain),
            dropped_items=dict(summary.dropped_items),
            skills_cast=dict(summary.skills_cast),
            combat_items_used=dict(summary.combat_items_used),
            consumables=[ConsumableModel.from_consumable(c) for c in summary.consumables_used],
            pizza_events=_pizza_events(summary.pizza_events),
            turns_per_area=dict(summary.turns_per_area),
            turns_per_day=dict(summary.turns_per_day),
        )


class SubIntervalResponse(BaseModel):
    """Summary and intervals of a turn range."""

    start: int
    end: int
    summary: SummaryResponse
    intervals: list[IntervalResponse]


class StatusResponse(BaseModel):
    """Server status."""

    status: str
    log_name: Optional[str] = None
    log_path: Optional[str] = None
    character_class: str
    ascension_path: str
    game_mode: str
    last_turn: int
    day_count: int


class TimelineExport(BaseModel):
    """Everything known about a parsed log, written by the batch driver."""

    log_name: Optional[str] = None
    ascension_number: Optional[int] = None
    character_class: str
    ascension_path: str
    game_mode: str
    summary: SummaryResponse
    intervals: list[IntervalResponse]
    turns: list[TurnResponse]
    days: list[DayModel]
    levels: list[LevelModel]
    equipment: list[EquipmentModel]
    familiars: list[FamiliarModel]
    pulls: list[PullModel]
    limited_uses: LimitedUsesResponse
    learned_skills: list[NamedTurnModel]
    hybrid_content: list[NamedTurnModel]
    hunted_combats: list[NamedTurnModel]
    lost_combats: list[NamedTurnModel]

    @classmethod
    def from_timeline(cls, timeline: Timeline) -> "TimelineExport":
        summary = timeline.summary
        return cls(
            log_name=timeline.log_name,
            ascension_number=timeline.ascension_number,
            character_class=str(timeline.character_class),
            ascension_path=str(timeline.ascension_path),
            game_mode=str(timeline.game_mode),
            summary=SummaryResponse.from_summary(summary),
            intervals=[IntervalResponse.from_interval(i) for i in timeline.intervals],
            turns=[TurnResponse.from_turn(t) for t in timeline.turns],
            days=days_of(timeline),
            levels=levels_of(timeline),
            equipment=[EquipmentModel.from_change(c) for c in timeline.equipment_changes],
            familiars=familiars_of(timeline),
            pulls=pulls_of(timeline),
            limited_uses=LimitedUsesResponse.from_timeline(
                timeline.limited_uses, summary.limited_use_summary
            ),
            learned_skills=_named_turns(timeline.learned_skills),
            hybrid_content=_named_turns(timeline.hybrid_content),
            hunted_combats=_named_turns(timeline.hunted_combats),
            lost_combats=_named_turns(timeline.lost_combats),
        )


def days_of(timeline: Timeline) -> list[DayModel]:
    return [
        DayModel(day_number=d.day_number, turn_number=d.turn_number)
        for d in timeline.day_changes
    ]


def levels_of(timeline: Timeline) -> list[LevelModel]:
    return [
        LevelModel(level_number=level.level_number, turn_number=level.turn_number)
        for level in timeline.levels
    ]


def familiars_of(timeline: Timeline) -> list[FamiliarModel]:
    return [
        FamiliarModel(familiar_name=f.familiar_name, turn_number=f.turn_number)
        for f in timeline.familiar_changes
    ]


def pulls_of(timeline: Timeline) -> list[PullModel]:
    return [
        PullModel(
            item_name=p.item_name,
            amount=p.amount,
            turn_number=p.turn_number,
            day_number=p.day_number,
        )
        for p in timeline.pulls
    ]


def _named_turns(entries) -> list[NamedTurnModel]:
    return [NamedTurnModel(data=e.data, turn_number=e.turn_number) for e in entries]

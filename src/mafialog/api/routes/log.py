"""Parsed log API routes."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from mafialog.api.schemas import (
    DayModel,
    EquipmentModel,
    FamiliarModel,
    IntervalListResponse,
    IntervalResponse,
    LevelModel,
    LimitedUsesResponse,
    PullModel,
    SubIntervalResponse,
    SummaryResponse,
    TurnListResponse,
    TurnResponse,
    days_of,
    familiars_of,
    levels_of,
    pulls_of,
)
from mafialog.core.timeline import Timeline

router = APIRouter(prefix="/api/log", tags=["log"])

# Validation limits
MAX_PAGE_SIZE = 500


def get_timeline() -> Timeline:
    """Dependency injection for the parsed timeline - set by app factory."""
    raise NotImplementedError("Timeline not configured")


@router.get("/summary", response_model=SummaryResponse)
def get_summary(timeline: Timeline = Depends(get_timeline)) -> SummaryResponse:
    """Get the totals of the whole log."""
    return SummaryResponse.from_summary(timeline.summary)


@router.get("/turns", response_model=TurnListResponse)
def list_turns(
    page: int = 1,
    page_size: int = 100,
    day: Optional[int] = None,
    area: Optional[str] = None,
    timeline: Timeline = Depends(get_timeline),
) -> TurnListResponse:
    """List turns with pagination, optionally filtered by day or area."""
    if page < 1:
        page = 1
    if page_size < 1:
        page_size = 1
    if page_size > MAX_PAGE_SIZE:
        raise HTTPException(status_code=400, detail=f"page_size cannot exceed {MAX_PAGE_SIZE}")

    turns = list(timeline.turns)
    if day is not None:
        turns = [t for t in turns if t.day_number == day]
    if area is not None:
        area_lower = area.lower()
        turns = [t for t in turns if t.area_name.lower() == area_lower]

    offset = (page - 1) * page_size
    return TurnListResponse(
        turns=[TurnResponse.from_turn(t) for t in turns[offset : offset + page_size]],
        total=len(turns),
        page=page,
        page_size=page_size,
    )


@router.get("/intervals", response_model=IntervalListResponse)
def list_intervals(
    copied_only: bool = False,
    timeline: Timeline = Depends(get_timeline),
) -> IntervalListResponse:
    """List turn intervals, optionally only fights against copied monsters."""
    intervals = timeline.copied_turns if copied_only else list(timeline.intervals)
    return IntervalListResponse(
        intervals=[IntervalResponse.from_interval(i) for i in intervals],
        total=len(intervals),
    )


@router.get("/limited-uses", response_model=LimitedUsesResponse)
def get_limited_uses(timeline: Timeline = Depends(get_timeline)) -> LimitedUsesResponse:
    """Get every limited use and the per-day totals."""
    return LimitedUsesResponse.from_timeline(
        timeline.limited_uses, timeline.summary.limited_use_summary
    )


@router.get("/days", response_model=list[DayModel])
def list_days(timeline: Timeline = Depends(get_timeline)) -> list[DayModel]:
    return days_of(timeline)


@router.get("/levels", response_model=list[LevelModel])
def list_levels(timeline: Timeline = Depends(get_timeline)) -> list[LevelModel]:
    return levels_of(timeline)


@router.get("/equipment", response_model=list[EquipmentModel])
def list_equipment(timeline: Timeline = Depends(get_timeline)) -> list[EquipmentModel]:
    return [EquipmentModel.from_change(c) for c in timeline.equipment_changes]


@router.get("/familiars", response_model=list[FamiliarModel])
def list_familiars(timeline: Timeline = Depends(get_timeline)) -> list[FamiliarModel]:
    return familiars_of(timeline)


@router.get("/pulls", response_model=list[PullModel])
def list_pulls(timeline: Timeline = Depends(get_timeline)) -> list[PullModel]:
    return pulls_of(timeline)


@router.get("/sub-interval", response_model=SubIntervalResponse)
def get_sub_interval(
    start: int,
    end: int,
    timeline: Timeline = Depends(get_timeline),
) -> SubIntervalResponse:
    """
    Get the summary of a turn range.

    State in effect before the range is carried in, so the summary covers
    exactly the turns from start to end.
    """
    try:
        sub = timeline.get_sub_interval_log_data(start, end)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    intervals = list(sub.intervals) if sub.has_intervals else []
    return SubIntervalResponse(
        start=start,
        end=end,
        summary=SummaryResponse.from_summary(sub.summary),
        intervals=[IntervalResponse.from_interval(i) for i in intervals],
    )

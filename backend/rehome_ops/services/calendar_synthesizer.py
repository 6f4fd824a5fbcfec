# backend/rehome_ops/services/calendar_synthesizer.py
"""
Calendar Synthesizer

Builds one CalendarDay per date of a displayed month from assignment and
block records that the caller already fetched. Pure: no store access, and
"today" is passed in so the classification is reproducible.

Flag semantics:
    is_today   date == today
    is_past    date <  today
    is_future  date >  today
Today is neither past nor future; consumers check ``is_today`` first.

``is_current_month`` is always true here. Callers that pad the grid with
neighbouring-month dates flag those themselves.
"""

from __future__ import annotations

import calendar
from datetime import date, timedelta
from typing import (
    AbstractSet,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    Tuple,
)

from ..schemas.schedule import CalendarDay, DaySchedule
from .interval_matcher import DayBlockLike


class AssignmentLike(Protocol):
    """Structural type for ScheduleAssignment rows (only ``city`` is read)."""

    city: str


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """First and last date of a month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Every date in ``[start, end]``, ascending."""
    for offset in range((end - start).days + 1):
        yield start + timedelta(days=offset)


def unique_cities(assignments: Iterable[AssignmentLike]) -> List[str]:
    """Deduplicated assigned cities, sorted for stable output."""
    return sorted({a.city for a in assignments if a.city})


def resolve_day_blocking(
    blocks: Sequence[DayBlockLike], city_universe: AbstractSet[str]
) -> Tuple[bool, List[str], Optional[str]]:
    """
    Collapse a date's full-day blocks into ``(is_fully_blocked, blocked_cities, reason)``.

    A single block for all cities, or one naming every city of the universe,
    makes the day fully blocked (and ``blocked_cities`` empty). Partial blocks
    only contribute their cities, even when together they name every city.
    """
    covering = [b for b in blocks if b.is_full_day]
    if not covering:
        return False, [], None

    partial: set[str] = set()
    reason: Optional[str] = None
    for block in covering:
        scope = block.scope
        if scope.covers(city_universe):
            return True, [], getattr(block, "reason", None) or reason
        partial |= scope.cities
        reason = reason or getattr(block, "reason", None)
    return False, sorted(partial), reason


def synthesize_month(
    year: int,
    month: int,
    assignments_by_date: Mapping[date, Sequence[AssignmentLike]],
    blocks_by_date: Mapping[date, Sequence[DayBlockLike]],
    city_universe: AbstractSet[str],
    today: date,
) -> List[CalendarDay]:
    """One CalendarDay per date of the month, ascending, no gaps."""
    first, last = month_bounds(year, month)
    days: List[CalendarDay] = []
    for day in iter_dates(first, last):
        fully_blocked, blocked_cities, reason = resolve_day_blocking(
            blocks_by_date.get(day, ()), city_universe
        )
        days.append(
            CalendarDay(
                date=day,
                assigned_cities=unique_cities(assignments_by_date.get(day, ())),
                is_today=day == today,
                is_current_month=True,
                is_past=day < today,
                is_future=day > today,
                is_fully_blocked=fully_blocked,
                blocked_cities=blocked_cities,
                blocked_reason=reason,
            )
        )
    return days


def summarize_month(
    year: int,
    month: int,
    assignments_by_date: Mapping[date, Sequence[AssignmentLike]],
) -> Dict[date, DaySchedule]:
    """Assignment summary for every date of the month that has assignments."""
    first, last = month_bounds(year, month)
    summary: Dict[date, DaySchedule] = {}
    for day in iter_dates(first, last):
        cities = unique_cities(assignments_by_date.get(day, ()))
        if not cities:
            continue
        summary[day] = DaySchedule(
            schedule_date=day,
            assigned_cities=cities,
            is_empty=False,
            total_scheduled_cities=len(cities),
        )
    return summary

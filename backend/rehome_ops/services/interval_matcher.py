# backend/rehome_ops/services/interval_matcher.py
"""
Interval Matcher

Pure decision functions over block records that were already fetched for a
date. Nothing here touches the store; callers (AvailabilityService) fetch and
validate first.

Intervals are half-open: ``[start, end)``. Two intervals that only touch at a
boundary do not overlap.
"""

from __future__ import annotations

from datetime import datetime, time
import re
from typing import Iterable, Optional, Protocol, Union

from ..core.constants import TIME_OF_DAY_FORMAT, TIME_OF_DAY_WITH_SECONDS_FORMAT
from ..domain.city_scope import CityScope

TimeLike = Union[time, str]

_TIME_OF_DAY_RE = re.compile(r"\d{2}:\d{2}(:\d{2})?")


class ScopedBlock(Protocol):
    @property
    def scope(self) -> CityScope: ...


class DayBlockLike(ScopedBlock, Protocol):
    is_full_day: bool


class SlotBlockLike(ScopedBlock, Protocol):
    start_time: time
    end_time: time


def parse_time_of_day(value: TimeLike) -> time:
    """
    Normalize a time-of-day to ``datetime.time`` at minute resolution.

    Accepts ``time`` objects or zero-padded ``HH:MM`` strings (``HH:MM:SS`` is
    tolerated, seconds are dropped).
    """
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0, tzinfo=None)
    if isinstance(value, str):
        text = value.strip()
        match = _TIME_OF_DAY_RE.fullmatch(text)
        if match is None:
            raise ValueError(f"Invalid time of day {value!r}, expected HH:MM")
        fmt = TIME_OF_DAY_WITH_SECONDS_FORMAT if match.group(1) else TIME_OF_DAY_FORMAT
        try:
            parsed = datetime.strptime(text, fmt).time()
        except ValueError as exc:
            raise ValueError(f"Invalid time of day {value!r}, expected HH:MM") from exc
        return parsed.replace(second=0)
    raise TypeError(f"Cannot convert {type(value).__name__} to time of day")


def intervals_overlap(start: time, end: time, block_start: time, block_end: time) -> bool:
    """Half-open intersection test: ``block_start < end and block_end > start``."""
    return block_start < end and block_end > start


def is_date_blocked(blocks: Iterable[DayBlockLike], city: Optional[str] = None) -> bool:
    """
    Decide whether a date is closed for booking.

    Only full-day blocks count. A block for all cities closes the date for
    everyone; a block naming cities closes it for those cities. Without a city
    the question is "is this date blocked at all", so any full-day block wins.
    """
    for block in blocks:
        if not block.is_full_day:
            continue
        if block.scope.applies_to(city):
            return True
    return False


def is_time_slot_blocked(
    blocks: Iterable[SlotBlockLike],
    start: TimeLike,
    end: TimeLike,
    city: Optional[str] = None,
) -> bool:
    """
    Decide whether ``[start, end)`` intersects any blocked window.

    Assumes ``start < end``; zero-length or inverted intervals must be rejected
    by the caller.
    """
    query_start = parse_time_of_day(start)
    query_end = parse_time_of_day(end)
    for block in blocks:
        if not block.scope.applies_to(city):
            continue
        if intervals_overlap(
            query_start,
            query_end,
            parse_time_of_day(block.start_time),
            parse_time_of_day(block.end_time),
        ):
            return True
    return False


def blocked_cities_for_date(blocks: Iterable[DayBlockLike]) -> Optional[CityScope]:
    """
    Combined scope of a date's full-day blocks.

    Returns None when nothing is blocked, the all-cities scope when any block
    covers every city, else the union of the named cities.
    """
    named: set = set()
    for block in blocks:
        if not block.is_full_day:
            continue
        scope = block.scope
        if scope.all_cities:
            return CityScope.everywhere()
        named |= scope.cities
    if not named:
        return None
    return CityScope.only(named)

# backend/rehome_ops/services/availability_service.py
"""
Availability Service for the Rehome operations console

Answers booking-gate and calendar questions:
- Is a date blocked (optionally for one city)?
- Is a time window blocked on a date?
- What does a month look like (assignments + blocks per day)?
- Is a city scheduled on a date?
- Can a customer book a date or flexible date range?

Reads fail closed: if the store cannot be read the caller gets a
StoreUnavailableException, never a "not blocked" answer.
"""

from collections import defaultdict
from datetime import date, time
import logging
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar

from sqlalchemy.orm import Session

from ..core.config import Settings, settings as default_settings
from ..core.exceptions import StoreUnavailableException, ValidationException
from ..core.timezone_utils import get_business_today
from ..repositories.factory import RepositoryFactory
from ..repositories.schedule_repository import ScheduleRepository
from ..schemas.schedule import (
    BlockedDateInfo,
    BookingDateValidation,
    CalendarDay,
    DaySchedule,
    ScheduleStatus,
)
from . import calendar_synthesizer, interval_matcher
from .base import BaseService
from .interval_matcher import TimeLike

logger = logging.getLogger(__name__)

R = TypeVar("R")


def group_by_date(records: Iterable[R]) -> Dict[date, List[R]]:
    """Bucket records by their ``date`` attribute."""
    grouped: Dict[date, List[R]] = defaultdict(list)
    for record in records:
        grouped[getattr(record, "date")].append(record)
    return dict(grouped)


class AvailabilityService(BaseService):
    """
    Read side of the scheduling engine.

    Fetches from the store adapter and delegates decisions to the pure
    interval matcher and calendar synthesizer.
    """

    def __init__(
        self,
        db: Session,
        repository: Optional[ScheduleRepository] = None,
        config: Optional[Settings] = None,
        today_provider: Optional[Callable[[], date]] = None,
    ):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_schedule_repository(db)
        self.config = config or default_settings
        self._today_provider = today_provider

    @property
    def city_universe(self) -> frozenset:
        return frozenset(self.config.city_universe)

    def today(self) -> date:
        if self._today_provider is not None:
            return self._today_provider()
        return get_business_today(self.config.business_timezone)

    # Validation helpers

    def _validate_month(self, year: int, month: int) -> None:
        if not 1 <= month <= 12:
            raise ValidationException(
                f"Month must be between 1 and 12, got {month}",
                code="INVALID_MONTH",
                details={"month": month},
            )
        current_year = self.today().year
        offset = self.config.max_calendar_year_offset
        if abs(year - current_year) > offset:
            raise ValidationException(
                f"Year {year} is outside the supported calendar range",
                code="INVALID_YEAR",
                details={"year": year, "max_offset": offset},
            )

    @staticmethod
    def _validate_interval(start: TimeLike, end: TimeLike) -> Tuple[time, time]:
        try:
            start_t = interval_matcher.parse_time_of_day(start)
            end_t = interval_matcher.parse_time_of_day(end)
        except (TypeError, ValueError) as exc:
            raise ValidationException(str(exc), code="INVALID_TIME") from exc
        if start_t >= end_t:
            raise ValidationException(
                "Start time must be before end time",
                code="INVALID_INTERVAL",
                details={"start": start_t.strftime("%H:%M"), "end": end_t.strftime("%H:%M")},
            )
        return start_t, end_t

    def _validate_date_range(self, start: date, end: date) -> None:
        if start > end:
            raise ValidationException(
                "Start date must not be after end date",
                code="INVALID_RANGE",
                details={"start": start.isoformat(), "end": end.isoformat()},
            )
        span = (end - start).days + 1
        max_days = self.config.schedule_horizon_max_days
        if span > max_days:
            raise ValidationException(
                f"Date range covers {span} dates; the limit is {max_days}",
                code="RANGE_BEYOND_HORIZON",
                details={"days": span, "max_days": max_days},
            )

    # Store reads

    def _load_full_day_blocks(self, start: date, end: Optional[date] = None):
        target = start.isoformat() if end is None else f"{start.isoformat()}..{end.isoformat()}"
        with self.store_operation("list_date_blocks", target=target):
            return self.repository.list_date_blocks(start, end, full_day_only=True)

    def _load_time_slot_blocks(self, day: date):
        with self.store_operation("list_time_slot_blocks", target=day.isoformat()):
            return self.repository.list_time_slot_blocks(day)

    def _load_assignments(self, start: date, end: Optional[date] = None, cities=None):
        target = start.isoformat() if end is None else f"{start.isoformat()}..{end.isoformat()}"
        with self.store_operation("list_schedule_assignments", target=target):
            return self.repository.list_schedule_assignments(start, end, cities=cities)

    # Public operations

    @BaseService.measure_operation("is_date_blocked")
    def is_date_blocked(self, day: date, city: Optional[str] = None) -> bool:
        """
        Whether ``day`` is closed for booking (for ``city`` when given).

        Raises:
            StoreUnavailableException: blocks could not be read
        """
        blocks = self._load_full_day_blocks(day)
        return interval_matcher.is_date_blocked(blocks, city)

    @BaseService.measure_operation("is_time_slot_blocked")
    def is_time_slot_blocked(
        self,
        day: date,
        start: TimeLike,
        end: TimeLike,
        city: Optional[str] = None,
    ) -> bool:
        """
        Whether ``[start, end)`` on ``day`` overlaps a blocked window.

        Raises:
            ValidationException: ``start >= end`` or malformed times
            StoreUnavailableException: blocks could not be read
        """
        start_t, end_t = self._validate_interval(start, end)
        blocks = self._load_time_slot_blocks(day)
        return interval_matcher.is_time_slot_blocked(blocks, start_t, end_t, city)

    @BaseService.measure_operation("get_calendar_month")
    def get_calendar_month(self, year: int, month: int) -> List[CalendarDay]:
        """
        One CalendarDay per date of the month.

        Both record sets must load; a failed read propagates rather than
        showing the month as unblocked.
        """
        self._validate_month(year, month)
        first, last = calendar_synthesizer.month_bounds(year, month)

        assignments = self._load_assignments(first, last)
        blocks = self._load_full_day_blocks(first, last)

        return calendar_synthesizer.synthesize_month(
            year,
            month,
            group_by_date(assignments),
            group_by_date(blocks),
            self.city_universe,
            self.today(),
        )

    @BaseService.measure_operation("get_month_schedule")
    def get_month_schedule(self, year: int, month: int) -> Dict[date, DaySchedule]:
        """Assignment summary for the dates of a month that have assignments."""
        self._validate_month(year, month)
        first, last = calendar_synthesizer.month_bounds(year, month)
        assignments = self._load_assignments(first, last)
        return calendar_synthesizer.summarize_month(year, month, group_by_date(assignments))

    def get_city_schedule_status(self, city: str, day: date) -> ScheduleStatus:
        """Whether ``city`` is scheduled on ``day`` and whether the day has any assignment."""
        assigned = {a.city for a in self._load_assignments(day)}
        return ScheduleStatus(is_scheduled=city in assigned, is_empty=not assigned)

    @BaseService.measure_operation("get_batch_schedule_status")
    def get_batch_schedule_status(
        self, lookups: Sequence[Tuple[str, date]]
    ) -> Dict[str, ScheduleStatus]:
        """
        Schedule status for many ``(city, date)`` pairs with a single store read.

        Results are keyed ``"<city>:<YYYY-MM-DD>"``.
        """
        if not lookups:
            return {}
        dates = {day for _, day in lookups}
        with self.store_operation("list_assignments_for_dates", target=f"{len(dates)} dates"):
            rows = self.repository.list_assignments_for_dates(dates)

        assigned: Dict[date, set] = defaultdict(set)
        for row in rows:
            assigned[row.date].add(row.city)

        results: Dict[str, ScheduleStatus] = {}
        for city, day in lookups:
            cities = assigned.get(day, set())
            results[f"{city}:{day.isoformat()}"] = ScheduleStatus(
                is_scheduled=city in cities, is_empty=not cities
            )
        return results

    @BaseService.measure_operation("get_blocked_dates_in_range")
    def get_blocked_dates_in_range(
        self, start: date, end: date, city: Optional[str] = None
    ) -> List[BlockedDateInfo]:
        """
        Blocked dates in ``[start, end]`` for ``city`` (or any city), with reasons.

        Raises:
            ValidationException: inverted range or more dates than the horizon allows
        """
        self._validate_date_range(start, end)
        by_date = group_by_date(self._load_full_day_blocks(start, end))

        blocked: List[BlockedDateInfo] = []
        for day in calendar_synthesizer.iter_dates(start, end):
            day_blocks = by_date.get(day, [])
            scope = interval_matcher.blocked_cities_for_date(day_blocks)
            if scope is None or not scope.applies_to(city):
                continue
            reason = next(
                (b.reason for b in day_blocks if b.reason and b.scope.applies_to(city)), None
            )
            blocked.append(BlockedDateInfo(date=day, reason=reason))
        return blocked

    def validate_booking_date(
        self,
        start: date,
        end: Optional[date] = None,
        city: Optional[str] = None,
    ) -> BookingDateValidation:
        """
        Booking gate for a fixed date or flexible range.

        Fails closed: when the store cannot be read the booking is refused.
        """
        self._validate_date_range(start, end or start)
        city_msg = f" for {city}" if city else ""

        try:
            blocked = self.get_blocked_dates_in_range(start, end or start, city)
        except StoreUnavailableException as exc:
            self.logger.error(
                "Booking date validation could not read blocks; refusing booking",
                extra={"start": start.isoformat(), "city": city, "operation": exc.operation},
            )
            return BookingDateValidation(
                is_valid=False,
                message=(
                    "We could not confirm availability for the selected date right now. "
                    "Please try again in a moment."
                ),
                reason="unavailable",
            )

        if not blocked:
            return BookingDateValidation(is_valid=True)

        first_blocked = blocked[0]
        pretty = _format_long_date(first_blocked.date)
        if end is None or first_blocked.date == start:
            message = (
                f"The selected date ({pretty}) is not available for booking{city_msg}. "
                "Please select a different date."
            )
        else:
            message = (
                f"One or more dates in your selected range are not available for "
                f"booking{city_msg}. The date {pretty} is blocked. "
                "Please select a different date range."
            )
        return BookingDateValidation(
            is_valid=False,
            message=message,
            blocked_date=first_blocked.date,
            reason=first_blocked.reason or "blocked",
        )


def _format_long_date(day: date) -> str:
    """``June 10, 2025`` without platform-specific strftime flags."""
    return f"{day.strftime('%B')} {day.day}, {day.year}"

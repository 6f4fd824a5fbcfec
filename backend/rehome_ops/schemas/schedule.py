# backend/rehome_ops/schemas/schedule.py
"""
Schedule schemas for the Rehome operations console.

Request models take an explicit ``all_cities`` flag; the stored empty-list
sentinel never appears in request payloads, so "no cities selected" is a
validation error instead of a silent global block.
"""

from datetime import date, time
from typing import Dict, List, Optional

from pydantic import Field, field_validator, model_validator

from ..core.constants import MAX_REASON_LENGTH
from ..domain.city_scope import CityScope
from ..models.schedule import DateBlock, TimeSlotBlock
from ._strict_base import StrictModel, StrictRequestModel

# Field names shadow the type inside partial-update models
DateType = date


def _clean_cities(value: Optional[List[str]]) -> Optional[List[str]]:
    if value is None:
        return None
    cleaned = [str(c).strip() for c in value if str(c).strip()]
    return list(dict.fromkeys(cleaned))


def _scope_from_fields(all_cities: Optional[bool], cities: Optional[List[str]]) -> Optional[CityScope]:
    """Build a scope from request fields; None when neither field was sent."""
    if all_cities is None and cities is None:
        return None
    if all_cities:
        if cities:
            raise ValueError("Do not list cities when all_cities is true")
        return CityScope.everywhere()
    if not cities:
        raise ValueError("Select at least one city or set all_cities to true")
    return CityScope.only(cities)


# Blocks


class DateBlockCreate(StrictRequestModel):
    """Schema for blocking a date."""

    date: date
    all_cities: bool = False
    cities: List[str] = Field(default_factory=list)
    reason: Optional[str] = Field(default=None, max_length=MAX_REASON_LENGTH)
    is_full_day: bool = True

    @field_validator("cities")
    @classmethod
    def normalize_cities(cls, v):
        return _clean_cities(v)

    @model_validator(mode="after")
    def _validate_scope(self) -> "DateBlockCreate":
        _scope_from_fields(self.all_cities, self.cities)
        return self

    @property
    def scope(self) -> CityScope:
        if self.all_cities:
            return CityScope.everywhere()
        return CityScope.only(self.cities)


class DateBlockUpdate(StrictRequestModel):
    """Schema for editing a date block; omitted fields are preserved."""

    date: Optional[DateType] = None
    all_cities: Optional[bool] = None
    cities: Optional[List[str]] = None
    reason: Optional[str] = Field(default=None, max_length=MAX_REASON_LENGTH)
    is_full_day: Optional[bool] = None

    @field_validator("cities")
    @classmethod
    def normalize_cities(cls, v):
        return _clean_cities(v)

    @model_validator(mode="after")
    def _validate_scope(self) -> "DateBlockUpdate":
        _scope_from_fields(self.all_cities, self.cities)
        return self

    @property
    def scope(self) -> Optional[CityScope]:
        return _scope_from_fields(self.all_cities, self.cities)


class DateBlockResponse(StrictModel):
    id: str
    date: date
    all_cities: bool
    cities: List[str]
    reason: Optional[str] = None
    is_full_day: bool

    @classmethod
    def from_model(cls, block: DateBlock) -> "DateBlockResponse":
        scope = block.scope
        return cls(
            id=block.id,
            date=block.date,
            all_cities=scope.all_cities,
            cities=scope.to_stored(),
            reason=block.reason,
            is_full_day=bool(block.is_full_day),
        )


class TimeSlotBlockCreate(StrictRequestModel):
    """Schema for blocking a window of time on a date."""

    date: date
    start_time: time
    end_time: time
    all_cities: bool = False
    cities: List[str] = Field(default_factory=list)
    reason: Optional[str] = Field(default=None, max_length=MAX_REASON_LENGTH)

    @field_validator("cities")
    @classmethod
    def normalize_cities(cls, v):
        return _clean_cities(v)

    @field_validator("end_time")
    @classmethod
    def validate_time_order(cls, v, info):
        """Ensure end time is after start time."""
        if info.data.get("start_time") and v <= info.data["start_time"]:
            raise ValueError("End time must be after start time")
        return v

    @model_validator(mode="after")
    def _validate_scope(self) -> "TimeSlotBlockCreate":
        _scope_from_fields(self.all_cities, self.cities)
        return self

    @property
    def scope(self) -> CityScope:
        if self.all_cities:
            return CityScope.everywhere()
        return CityScope.only(self.cities)


class TimeSlotBlockUpdate(StrictRequestModel):
    date: Optional[DateType] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    all_cities: Optional[bool] = None
    cities: Optional[List[str]] = None
    reason: Optional[str] = Field(default=None, max_length=MAX_REASON_LENGTH)

    @field_validator("cities")
    @classmethod
    def normalize_cities(cls, v):
        return _clean_cities(v)

    @model_validator(mode="after")
    def _validate_scope(self) -> "TimeSlotBlockUpdate":
        _scope_from_fields(self.all_cities, self.cities)
        return self

    @property
    def scope(self) -> Optional[CityScope]:
        return _scope_from_fields(self.all_cities, self.cities)


class TimeSlotBlockResponse(StrictModel):
    id: str
    date: date
    start_time: time
    end_time: time
    all_cities: bool
    cities: List[str]
    reason: Optional[str] = None

    @classmethod
    def from_model(cls, block: TimeSlotBlock) -> "TimeSlotBlockResponse":
        scope = block.scope
        return cls(
            id=block.id,
            date=block.date,
            start_time=block.start_time,
            end_time=block.end_time,
            all_cities=scope.all_cities,
            cities=scope.to_stored(),
            reason=block.reason,
        )


# Availability reads


class DateAvailabilityResponse(StrictModel):
    date: date
    city: Optional[str] = None
    is_blocked: bool


class TimeSlotAvailabilityResponse(StrictModel):
    date: date
    start_time: time
    end_time: time
    city: Optional[str] = None
    is_blocked: bool


class CalendarDay(StrictModel):
    """Synthesized view of one date in a displayed month (never persisted)."""

    date: date
    assigned_cities: List[str] = Field(default_factory=list)
    is_today: bool = False
    is_current_month: bool = True
    is_past: bool = False
    is_future: bool = False
    is_fully_blocked: bool = False
    blocked_cities: List[str] = Field(default_factory=list)
    blocked_reason: Optional[str] = None


class CalendarMonthResponse(StrictModel):
    year: int
    month: int
    days: List[CalendarDay]


class DaySchedule(StrictModel):
    """Assignment summary for one date."""

    schedule_date: date
    assigned_cities: List[str]
    is_empty: bool
    total_scheduled_cities: int


class MonthScheduleResponse(StrictModel):
    year: int
    month: int
    days: List[DaySchedule]


class ScheduleStatus(StrictModel):
    is_scheduled: bool
    is_empty: bool


class CityDateLookup(StrictRequestModel):
    city: str = Field(min_length=1)
    date: date


class BatchScheduleStatusRequest(StrictRequestModel):
    lookups: List[CityDateLookup] = Field(min_length=1)


class BatchScheduleStatusResponse(StrictModel):
    results: Dict[str, ScheduleStatus]


class BlockedDateInfo(StrictModel):
    date: date
    reason: Optional[str] = None


class BookingDateValidationRequest(StrictRequestModel):
    start_date: date
    end_date: Optional[DateType] = None
    city: Optional[str] = None

    @field_validator("end_date")
    @classmethod
    def validate_date_order(cls, v, info):
        if v is not None and info.data.get("start_date") and v < info.data["start_date"]:
            raise ValueError("end_date must not be before start_date")
        return v


class BookingDateValidation(StrictModel):
    is_valid: bool
    message: Optional[str] = None
    blocked_date: Optional[DateType] = None
    reason: Optional[str] = None


# Assignment edits


class DateAssignmentRequest(StrictRequestModel):
    """Desired city set for one date; ``expected_current`` enables conflict detection."""

    cities: List[str] = Field(default_factory=list)
    expected_current: Optional[List[str]] = None

    @field_validator("cities", "expected_current")
    @classmethod
    def normalize_cities(cls, v):
        return _clean_cities(v)


class AssignmentChangeResponse(StrictModel):
    date: date
    added: List[str]
    removed: List[str]


class BulkAssignRequest(StrictRequestModel):
    start_date: date
    end_date: date
    cities: List[str] = Field(min_length=1)

    @field_validator("cities")
    @classmethod
    def normalize_cities(cls, v):
        return _clean_cities(v)

    @field_validator("end_date")
    @classmethod
    def validate_date_order(cls, v, info):
        if info.data.get("start_date") and v < info.data["start_date"]:
            raise ValueError("end_date must not be before start_date")
        return v


class BulkAssignResult(StrictModel):
    """Outcome of a bulk range assignment; failed dates can be retried as-is."""

    succeeded_dates: List[date] = Field(default_factory=list)
    failed_dates: List[date] = Field(default_factory=list)
    skipped_dates: List[date] = Field(default_factory=list)
    errors: Dict[str, str] = Field(default_factory=dict)
    assignments_written: int = 0
    cancelled: bool = False

# backend/rehome_ops/routes/v1/schedule.py
"""
Schedule routes - API v1

Versioned scheduling endpoints under /api/v1/schedule.
All business logic delegated to AvailabilityService and ScheduleEditorService.

Endpoints:
    GET /blocked                          → Is a date blocked (optionally for a city)
    GET /time-slot-blocked                → Is a time window blocked on a date
    GET /blocked-dates                    → Blocked dates in a range (date pickers)
    GET /calendar/{year}/{month}          → Synthesized month calendar
    GET /month-schedule/{year}/{month}    → Assignment summary for a month
    GET /city-status                      → Is a city scheduled on a date
    POST /city-status/batch               → Batch city/date schedule lookup
    POST /validate-booking-date           → Booking gate for a date or range
    PUT /assignments/{date}               → Replace a date's assigned cities
    POST /assignments/bulk                → Assign cities to every date of a range
    POST /date-blocks                     → Block a date
    PATCH /date-blocks/{block_id}         → Edit a date block
    DELETE /date-blocks/{block_id}        → Remove a date block
    POST /time-slot-blocks                → Block a time window
    PATCH /time-slot-blocks/{block_id}    → Edit a time-slot block
    DELETE /time-slot-blocks/{block_id}   → Remove a time-slot block
"""

from datetime import date
import logging
from typing import List, NoReturn, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response, status
from fastapi.params import Path
from sqlalchemy.orm import Session

from ...core.exceptions import DomainException
from ...database import get_db
from ...schemas.schedule import (
    AssignmentChangeResponse,
    BatchScheduleStatusRequest,
    BatchScheduleStatusResponse,
    BlockedDateInfo,
    BookingDateValidation,
    BookingDateValidationRequest,
    BulkAssignRequest,
    BulkAssignResult,
    CalendarMonthResponse,
    DateAssignmentRequest,
    DateAvailabilityResponse,
    DateBlockCreate,
    DateBlockResponse,
    DateBlockUpdate,
    MonthScheduleResponse,
    ScheduleStatus,
    TimeSlotAvailabilityResponse,
    TimeSlotBlockCreate,
    TimeSlotBlockResponse,
    TimeSlotBlockUpdate,
)
from ...services.availability_service import AvailabilityService
from ...services.interval_matcher import parse_time_of_day
from ...services.schedule_editor import ScheduleEditorService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["schedule-v1"])

ULID_PATH_PATTERN = r"^[0-9A-HJKMNP-TV-Z]{26}$"
TIME_QUERY_PATTERN = r"^\d{2}:\d{2}$"


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    return AvailabilityService(db)


def get_schedule_editor_service(db: Session = Depends(get_db)) -> ScheduleEditorService:
    return ScheduleEditorService(db)


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


# =============================================================================
# Availability reads
# =============================================================================


@router.get("/blocked", response_model=DateAvailabilityResponse)
def is_date_blocked(
    day: date = Query(..., alias="date", description="Date to check (YYYY-MM-DD)"),
    city: Optional[str] = Query(None, min_length=1),
    service: AvailabilityService = Depends(get_availability_service),
) -> DateAvailabilityResponse:
    """Whether the date is blocked for the city, or blocked at all when no city is given."""
    return DateAvailabilityResponse(
        date=day, city=city, is_blocked=service.is_date_blocked(day, city)
    )


@router.get("/time-slot-blocked", response_model=TimeSlotAvailabilityResponse)
def is_time_slot_blocked(
    day: date = Query(..., alias="date"),
    start: str = Query(..., pattern=TIME_QUERY_PATTERN, examples=["09:00"]),
    end: str = Query(..., pattern=TIME_QUERY_PATTERN, examples=["12:00"]),
    city: Optional[str] = Query(None, min_length=1),
    service: AvailabilityService = Depends(get_availability_service),
) -> TimeSlotAvailabilityResponse:
    """Whether ``[start, end)`` overlaps a blocked window on the date."""
    try:
        blocked = service.is_time_slot_blocked(day, start, end, city)
    except DomainException as exc:
        handle_domain_exception(exc)
    return TimeSlotAvailabilityResponse(
        date=day,
        start_time=parse_time_of_day(start),
        end_time=parse_time_of_day(end),
        city=city,
        is_blocked=blocked,
    )


@router.get("/blocked-dates", response_model=List[BlockedDateInfo])
def get_blocked_dates(
    start_date: date = Query(...),
    end_date: date = Query(...),
    city: Optional[str] = Query(None, min_length=1),
    service: AvailabilityService = Depends(get_availability_service),
) -> List[BlockedDateInfo]:
    return service.get_blocked_dates_in_range(start_date, end_date, city)


@router.get("/calendar/{year}/{month}", response_model=CalendarMonthResponse)
def get_calendar_month(
    year: int = Path(..., ge=1),
    month: int = Path(..., examples=[6]),
    service: AvailabilityService = Depends(get_availability_service),
) -> CalendarMonthResponse:
    """
    Synthesized calendar for one month.

    Returns 503 when the store cannot be read; the calendar is never shown
    as unblocked by default.
    """
    try:
        days = service.get_calendar_month(year, month)
    except DomainException as exc:
        handle_domain_exception(exc)
    return CalendarMonthResponse(year=year, month=month, days=days)


@router.get("/month-schedule/{year}/{month}", response_model=MonthScheduleResponse)
def get_month_schedule(
    year: int = Path(..., ge=1),
    month: int = Path(...),
    service: AvailabilityService = Depends(get_availability_service),
) -> MonthScheduleResponse:
    try:
        schedule = service.get_month_schedule(year, month)
    except DomainException as exc:
        handle_domain_exception(exc)
    return MonthScheduleResponse(
        year=year, month=month, days=[schedule[d] for d in sorted(schedule)]
    )


@router.get("/city-status", response_model=ScheduleStatus)
def get_city_schedule_status(
    city: str = Query(..., min_length=1),
    day: date = Query(..., alias="date"),
    service: AvailabilityService = Depends(get_availability_service),
) -> ScheduleStatus:
    return service.get_city_schedule_status(city, day)


@router.post("/city-status/batch", response_model=BatchScheduleStatusResponse)
def get_batch_schedule_status(
    payload: BatchScheduleStatusRequest = Body(...),
    service: AvailabilityService = Depends(get_availability_service),
) -> BatchScheduleStatusResponse:
    """Schedule status for many city/date pairs, keyed ``city:YYYY-MM-DD``."""
    lookups = [(item.city, item.date) for item in payload.lookups]
    return BatchScheduleStatusResponse(results=service.get_batch_schedule_status(lookups))


@router.post("/validate-booking-date", response_model=BookingDateValidation)
def validate_booking_date(
    payload: BookingDateValidationRequest = Body(...),
    service: AvailabilityService = Depends(get_availability_service),
) -> BookingDateValidation:
    """
    Booking gate used by the checkout flow.

    Always answers 200; a store outage yields ``is_valid=false`` rather than
    letting the booking through.
    """
    try:
        return service.validate_booking_date(payload.start_date, payload.end_date, payload.city)
    except DomainException as exc:
        handle_domain_exception(exc)


# =============================================================================
# Assignment edits
# =============================================================================


@router.post("/assignments/bulk", response_model=BulkAssignResult)
def bulk_assign_range(
    payload: BulkAssignRequest = Body(...),
    service: ScheduleEditorService = Depends(get_schedule_editor_service),
) -> BulkAssignResult:
    """
    Assign the cities to every date of the range.

    Dates commit independently; failed dates are listed and can be retried
    with the same request.
    """
    try:
        return service.bulk_assign_range(payload.start_date, payload.end_date, payload.cities)
    except DomainException as exc:
        handle_domain_exception(exc)


@router.put("/assignments/{schedule_date}", response_model=AssignmentChangeResponse)
def assign_cities_to_date(
    schedule_date: date,
    payload: DateAssignmentRequest = Body(...),
    service: ScheduleEditorService = Depends(get_schedule_editor_service),
) -> AssignmentChangeResponse:
    """Replace the date's assigned cities; send ``expected_current`` to detect concurrent edits."""
    try:
        change = service.assign_cities_to_date(
            schedule_date, payload.cities, expected_current=payload.expected_current
        )
    except DomainException as exc:
        handle_domain_exception(exc)
    return AssignmentChangeResponse(
        date=schedule_date, added=change["added"], removed=change["removed"]
    )


# =============================================================================
# Block management
# =============================================================================


@router.post("/date-blocks", response_model=DateBlockResponse, status_code=status.HTTP_201_CREATED)
def create_date_block(
    payload: DateBlockCreate = Body(...),
    service: ScheduleEditorService = Depends(get_schedule_editor_service),
) -> DateBlockResponse:
    try:
        block = service.create_date_block(payload)
    except DomainException as exc:
        handle_domain_exception(exc)
    return DateBlockResponse.from_model(block)


@router.patch("/date-blocks/{block_id}", response_model=DateBlockResponse)
def update_date_block(
    block_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    payload: DateBlockUpdate = Body(...),
    service: ScheduleEditorService = Depends(get_schedule_editor_service),
) -> DateBlockResponse:
    try:
        block = service.update_date_block(block_id, payload)
    except DomainException as exc:
        handle_domain_exception(exc)
    return DateBlockResponse.from_model(block)


@router.delete("/date-blocks/{block_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_date_block(
    block_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    service: ScheduleEditorService = Depends(get_schedule_editor_service),
) -> Response:
    try:
        service.delete_date_block(block_id)
    except DomainException as exc:
        handle_domain_exception(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/time-slot-blocks",
    response_model=TimeSlotBlockResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_time_slot_block(
    payload: TimeSlotBlockCreate = Body(...),
    service: ScheduleEditorService = Depends(get_schedule_editor_service),
) -> TimeSlotBlockResponse:
    try:
        block = service.create_time_slot_block(payload)
    except DomainException as exc:
        handle_domain_exception(exc)
    return TimeSlotBlockResponse.from_model(block)


@router.patch("/time-slot-blocks/{block_id}", response_model=TimeSlotBlockResponse)
def update_time_slot_block(
    block_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    payload: TimeSlotBlockUpdate = Body(...),
    service: ScheduleEditorService = Depends(get_schedule_editor_service),
) -> TimeSlotBlockResponse:
    try:
        block = service.update_time_slot_block(block_id, payload)
    except DomainException as exc:
        handle_domain_exception(exc)
    return TimeSlotBlockResponse.from_model(block)


@router.delete("/time-slot-blocks/{block_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_time_slot_block(
    block_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    service: ScheduleEditorService = Depends(get_schedule_editor_service),
) -> Response:
    try:
        service.delete_time_slot_block(block_id)
    except DomainException as exc:
        handle_domain_exception(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

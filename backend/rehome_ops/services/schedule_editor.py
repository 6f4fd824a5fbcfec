# backend/rehome_ops/services/schedule_editor.py
"""
Schedule Editor for the Rehome operations console

Write side of the scheduling engine:
- Reconcile one date's assigned cities against an operator's selection
- Assign a city set to every date of a range (bulk, per-date commits)
- Create, edit and remove date blocks and time-slot blocks

Blocking and assignment are independent: editing assignments never touches
blocks and vice versa.
"""

from dataclasses import dataclass
from datetime import date
import logging
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from ..core.config import Settings, settings as default_settings
from ..core.exceptions import (
    ConcurrentModificationException,
    NotFoundException,
    PartialBulkFailureException,
    StoreUnavailableException,
    ValidationException,
)
from ..models.schedule import DateBlock, ScheduleAssignment, TimeSlotBlock
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from ..repositories.schedule_repository import ScheduleRepository
from ..schemas.schedule import (
    BulkAssignResult,
    DateBlockCreate,
    DateBlockUpdate,
    TimeSlotBlockCreate,
    TimeSlotBlockUpdate,
)
from .base import BaseService
from .calendar_synthesizer import iter_dates

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssignmentDelta:
    """Cities to insert and cities to delete for one date."""

    to_add: Tuple[str, ...]
    to_remove: Tuple[str, ...]

    @property
    def is_empty(self) -> bool:
        return not self.to_add and not self.to_remove


def _normalize_cities(cities: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(c.strip() for c in cities if c and c.strip()))


def reconcile_date_assignment(current: Iterable[str], desired: Iterable[str]) -> AssignmentDelta:
    """
    Diff persisted cities against the desired selection.

    ``to_add = desired - current`` and ``to_remove = current - desired``, both
    sorted. Applying the delta and reconciling again yields an empty delta.
    """
    current_set = set(_normalize_cities(current))
    desired_set = set(_normalize_cities(desired))
    return AssignmentDelta(
        to_add=tuple(sorted(desired_set - current_set)),
        to_remove=tuple(sorted(current_set - desired_set)),
    )


class ScheduleEditorService(BaseService):
    """
    Service for editing city assignments and blocks.

    Every write runs inside ``transaction()``; store failures surface as
    StoreUnavailableException with the operation and date that failed.
    """

    def __init__(
        self,
        db: Session,
        repository: Optional[ScheduleRepository] = None,
        config: Optional[Settings] = None,
    ):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_schedule_repository(db)
        self.config = config or default_settings

    # Assignments

    def _current_assignments(self, day: date) -> List[ScheduleAssignment]:
        with self.store_operation("list_schedule_assignments", target=day.isoformat()):
            return self.repository.list_schedule_assignments(day)

    @BaseService.measure_operation("assign_cities_to_date")
    def assign_cities_to_date(
        self,
        day: date,
        desired_cities: Sequence[str],
        expected_current: Optional[Sequence[str]] = None,
    ) -> Dict[str, List[str]]:
        """
        Make the persisted city set for ``day`` equal ``desired_cities``.

        Args:
            day: Date being edited
            desired_cities: Full selection the operator wants (may be empty)
            expected_current: Cities the operator saw when the edit started;
                when given and different from the store, nothing is written

        Returns:
            ``{"added": [...], "removed": [...]}``

        Raises:
            ConcurrentModificationException: store diverged from ``expected_current``
            StoreUnavailableException: read or write failed; re-fetch before retrying
        """
        rows = self._current_assignments(day)
        current = {row.city for row in rows}

        if expected_current is not None and set(_normalize_cities(expected_current)) != current:
            raise ConcurrentModificationException(day, expected_current, current)

        delta = reconcile_date_assignment(current, desired_cities)
        if delta.is_empty:
            return {"added": [], "removed": []}

        removed_ids = [row.id for row in rows if row.city in set(delta.to_remove)]
        with self.store_operation("assign_cities_to_date", target=day.isoformat()):
            with self.transaction():
                for assignment_id in removed_ids:
                    self.repository.delete_schedule_assignment(assignment_id)
                if delta.to_add:
                    self.repository.insert_schedule_assignments(
                        [{"date": day, "city": city} for city in delta.to_add]
                    )

        self.log_operation(
            "assign_cities_to_date",
            date=day.isoformat(),
            added=list(delta.to_add),
            removed=list(delta.to_remove),
        )
        return {"added": list(delta.to_add), "removed": list(delta.to_remove)}

    def _validate_bulk_range(self, start: date, end: date) -> None:
        if start > end:
            raise ValidationException(
                "Start date must not be after end date",
                code="INVALID_RANGE",
                details={"start": start.isoformat(), "end": end.isoformat()},
            )
        if self.config.schedule_horizon_same_year and start.year != end.year:
            raise ValidationException(
                "Bulk assignment ranges must stay within one calendar year",
                code="RANGE_BEYOND_HORIZON",
                details={"start": start.isoformat(), "end": end.isoformat()},
            )
        span = (end - start).days + 1
        if span > self.config.schedule_horizon_max_days:
            raise ValidationException(
                f"Bulk assignment covers {span} dates; the limit is "
                f"{self.config.schedule_horizon_max_days}",
                code="RANGE_BEYOND_HORIZON",
                details={"days": span, "max_days": self.config.schedule_horizon_max_days},
            )

    def _assign_missing(self, day: date, cities: List[str]) -> int:
        """Insert the (day, city) pairs not yet stored; returns rows written."""
        with self.store_operation("bulk_assign_date", target=day.isoformat()):
            existing = {
                row.city
                for row in self.repository.list_schedule_assignments(day, cities=cities)
            }
            missing = [city for city in cities if city not in existing]
            if not missing:
                return 0
            with self.transaction():
                self.repository.insert_schedule_assignments(
                    [{"date": day, "city": city} for city in missing]
                )
            return len(missing)

    @BaseService.measure_operation("bulk_assign_range")
    def bulk_assign_range(
        self,
        start: date,
        end: date,
        cities: Sequence[str],
        should_continue: Optional[Callable[[], bool]] = None,
        raise_on_failure: bool = False,
    ) -> BulkAssignResult:
        """
        Assign ``cities`` to every date in ``[start, end]``.

        Each date commits on its own. Existing pairs are skipped, so re-running
        the same request writes nothing and failed dates can be retried as-is.
        ``should_continue`` is checked before each date; once it returns False
        the remaining dates are reported as skipped.

        Raises:
            ValidationException: bad range, range beyond horizon or no cities
            PartialBulkFailureException: only with ``raise_on_failure`` and at
                least one failed date
        """
        self._validate_bulk_range(start, end)
        city_list = _normalize_cities(cities)
        if not city_list:
            raise ValidationException("Select at least one city", code="EMPTY_CITY_SCOPE")

        result = BulkAssignResult()
        dates = list(iter_dates(start, end))
        for index, day in enumerate(dates):
            if should_continue is not None and not should_continue():
                result.skipped_dates = dates[index:]
                result.cancelled = True
                prometheus_metrics.record_bulk_assign_dates("skipped", len(result.skipped_dates))
                self.logger.info(
                    f"Bulk assignment cancelled with {len(dates) - index} dates remaining"
                )
                break
            try:
                with self.measure_operation_context("bulk_assign_date"):
                    written = self._assign_missing(day, city_list)
            except StoreUnavailableException as exc:
                # A failed read leaves the transaction aborted on PostgreSQL
                self.db.rollback()
                result.failed_dates.append(day)
                result.errors[day.isoformat()] = exc.message
                prometheus_metrics.record_bulk_assign_dates("failed")
                continue
            result.succeeded_dates.append(day)
            result.assignments_written += written
            prometheus_metrics.record_bulk_assign_dates("succeeded")

        self.log_operation(
            "bulk_assign_range",
            start=start.isoformat(),
            end=end.isoformat(),
            cities=city_list,
            succeeded=len(result.succeeded_dates),
            failed=len(result.failed_dates),
            skipped=len(result.skipped_dates),
            written=result.assignments_written,
        )
        if raise_on_failure and result.failed_dates:
            raise PartialBulkFailureException(result.succeeded_dates, result.failed_dates)
        return result

    # Date blocks

    def create_date_block(self, data: DateBlockCreate) -> DateBlock:
        with self.store_operation("insert_date_block", target=data.date.isoformat()):
            with self.transaction():
                block = self.repository.insert_date_block(
                    block_date=data.date,
                    cities=data.scope.to_stored(),
                    reason=data.reason,
                    is_full_day=data.is_full_day,
                )
        self.log_operation("create_date_block", block_id=block.id, date=data.date.isoformat())
        return block

    def _get_date_block_or_404(self, block_id: str) -> DateBlock:
        with self.store_operation("get_date_block", target=block_id):
            block = self.repository.get_date_block(block_id)
        if block is None:
            raise NotFoundException(
                f"Date block {block_id} not found", code="DATE_BLOCK_NOT_FOUND"
            )
        return block

    def update_date_block(self, block_id: str, data: DateBlockUpdate) -> DateBlock:
        """Apply the fields present in ``data``; omitted fields are kept."""
        self._get_date_block_or_404(block_id)
        fields = data.model_fields_set
        changes: Dict[str, object] = {}
        if "date" in fields and data.date is not None:
            changes["date"] = data.date
        if "reason" in fields:
            changes["reason"] = data.reason
        if "is_full_day" in fields and data.is_full_day is not None:
            changes["is_full_day"] = data.is_full_day
        scope = data.scope
        if scope is not None:
            changes["cities"] = scope.to_stored()

        with self.store_operation("update_date_block", target=block_id):
            with self.transaction():
                block = self.repository.update_date_block(block_id, **changes)
        if block is None:
            raise NotFoundException(
                f"Date block {block_id} not found", code="DATE_BLOCK_NOT_FOUND"
            )
        self.log_operation("update_date_block", block_id=block_id, fields=sorted(changes))
        return block

    def delete_date_block(self, block_id: str) -> None:
        with self.store_operation("delete_date_block", target=block_id):
            with self.transaction():
                deleted = self.repository.delete_date_block(block_id)
        if not deleted:
            raise NotFoundException(
                f"Date block {block_id} not found", code="DATE_BLOCK_NOT_FOUND"
            )
        self.log_operation("delete_date_block", block_id=block_id)

    # Time-slot blocks

    def create_time_slot_block(self, data: TimeSlotBlockCreate) -> TimeSlotBlock:
        with self.store_operation("insert_time_slot_block", target=data.date.isoformat()):
            with self.transaction():
                block = self.repository.insert_time_slot_block(
                    block_date=data.date,
                    start_time=data.start_time,
                    end_time=data.end_time,
                    cities=data.scope.to_stored(),
                    reason=data.reason,
                )
        self.log_operation(
            "create_time_slot_block", block_id=block.id, date=data.date.isoformat()
        )
        return block

    def update_time_slot_block(self, block_id: str, data: TimeSlotBlockUpdate) -> TimeSlotBlock:
        """Apply the fields present in ``data``; the merged window must stay non-empty."""
        with self.store_operation("get_time_slot_block", target=block_id):
            existing = self.repository.get_time_slot_block(block_id)
        if existing is None:
            raise NotFoundException(
                f"Time slot block {block_id} not found", code="TIME_SLOT_BLOCK_NOT_FOUND"
            )

        fields = data.model_fields_set
        changes: Dict[str, object] = {}
        if "date" in fields and data.date is not None:
            changes["date"] = data.date
        if "start_time" in fields and data.start_time is not None:
            changes["start_time"] = data.start_time
        if "end_time" in fields and data.end_time is not None:
            changes["end_time"] = data.end_time
        if "reason" in fields:
            changes["reason"] = data.reason
        scope = data.scope
        if scope is not None:
            changes["cities"] = scope.to_stored()

        start_time = changes.get("start_time", existing.start_time)
        end_time = changes.get("end_time", existing.end_time)
        if start_time >= end_time:  # type: ignore[operator]
            raise ValidationException(
                "Start time must be before end time",
                code="INVALID_INTERVAL",
                details={"start": str(start_time), "end": str(end_time)},
            )

        with self.store_operation("update_time_slot_block", target=block_id):
            with self.transaction():
                block = self.repository.update_time_slot_block(block_id, **changes)
        if block is None:
            raise NotFoundException(
                f"Time slot block {block_id} not found", code="TIME_SLOT_BLOCK_NOT_FOUND"
            )
        self.log_operation("update_time_slot_block", block_id=block_id, fields=sorted(changes))
        return block

    def delete_time_slot_block(self, block_id: str) -> None:
        with self.store_operation("delete_time_slot_block", target=block_id):
            with self.transaction():
                deleted = self.repository.delete_time_slot_block(block_id)
        if not deleted:
            raise NotFoundException(
                f"Time slot block {block_id} not found", code="TIME_SLOT_BLOCK_NOT_FOUND"
            )
        self.log_operation("delete_time_slot_block", block_id=block_id)

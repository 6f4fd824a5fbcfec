# backend/rehome_ops/repositories/schedule_repository.py
"""
Schedule Repository for the Rehome operations console

Store adapter over the three scheduling record sets:
- blocked_dates (DateBlock)
- blocked_timeslots (TimeSlotBlock)
- city_schedules (ScheduleAssignment)

Reads accept a single date or an inclusive date range. Writes flush but never
commit; the calling service owns the transaction.
"""

from datetime import date, time
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..models.schedule import DateBlock, ScheduleAssignment, TimeSlotBlock
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


def _bounds(start: date, end: Optional[date]) -> Tuple[date, date]:
    return start, (end if end is not None else start)


class ScheduleRepository:
    """Data access for date blocks, time-slot blocks and city assignments."""

    def __init__(self, db: Session):
        self.db = db
        self.date_blocks: BaseRepository[DateBlock] = BaseRepository(db, DateBlock)
        self.time_slot_blocks: BaseRepository[TimeSlotBlock] = BaseRepository(db, TimeSlotBlock)
        self.assignments: BaseRepository[ScheduleAssignment] = BaseRepository(
            db, ScheduleAssignment
        )
        self.logger = logging.getLogger(__name__)

    # Reads

    def list_date_blocks(
        self,
        start: date,
        end: Optional[date] = None,
        *,
        full_day_only: bool = False,
    ) -> List[DateBlock]:
        """Date blocks with ``start <= date <= end`` ordered by date."""
        first, last = _bounds(start, end)
        query = self.db.query(DateBlock).filter(DateBlock.date >= first, DateBlock.date <= last)
        if full_day_only:
            query = query.filter(DateBlock.is_full_day.is_(True))
        return self.date_blocks._execute_query(query.order_by(DateBlock.date, DateBlock.id))

    def list_time_slot_blocks(self, start: date, end: Optional[date] = None) -> List[TimeSlotBlock]:
        """Time-slot blocks with ``start <= date <= end`` ordered by date and start time."""
        first, last = _bounds(start, end)
        query = (
            self.db.query(TimeSlotBlock)
            .filter(TimeSlotBlock.date >= first, TimeSlotBlock.date <= last)
            .order_by(TimeSlotBlock.date, TimeSlotBlock.start_time)
        )
        return self.time_slot_blocks._execute_query(query)

    def list_schedule_assignments(
        self,
        start: date,
        end: Optional[date] = None,
        *,
        cities: Optional[Iterable[str]] = None,
    ) -> List[ScheduleAssignment]:
        """Assignments in the range, optionally restricted to ``cities``."""
        first, last = _bounds(start, end)
        query = self.db.query(ScheduleAssignment).filter(
            ScheduleAssignment.date >= first,
            ScheduleAssignment.date <= last,
        )
        if cities is not None:
            query = query.filter(ScheduleAssignment.city.in_(list(cities)))
        return self.assignments._execute_query(
            query.order_by(ScheduleAssignment.date, ScheduleAssignment.city)
        )

    def list_assignments_for_dates(self, dates: Iterable[date]) -> List[ScheduleAssignment]:
        """Assignments for an arbitrary set of dates in one query."""
        wanted = sorted(set(dates))
        if not wanted:
            return []
        query = self.db.query(ScheduleAssignment).filter(ScheduleAssignment.date.in_(wanted))
        return self.assignments._execute_query(query)

    # Assignment writes

    def insert_schedule_assignments(self, rows: List[Dict[str, Any]]) -> List[ScheduleAssignment]:
        """Insert ``{"date": ..., "city": ...}`` rows."""
        return self.assignments.bulk_create(rows)

    def delete_schedule_assignment(self, assignment_id: str) -> bool:
        return self.assignments.delete(assignment_id)

    # Block writes

    def insert_date_block(
        self, *, block_date: date, cities: List[str], reason: Optional[str], is_full_day: bool
    ) -> DateBlock:
        return self.date_blocks.create(
            date=block_date, cities=list(cities), reason=reason, is_full_day=is_full_day
        )

    def get_date_block(self, block_id: str) -> Optional[DateBlock]:
        return self.date_blocks.get_by_id(block_id)

    def update_date_block(self, block_id: str, **changes: Any) -> Optional[DateBlock]:
        return self.date_blocks.update(block_id, **changes)

    def delete_date_block(self, block_id: str) -> bool:
        return self.date_blocks.delete(block_id)

    def insert_time_slot_block(
        self,
        *,
        block_date: date,
        start_time: time,
        end_time: time,
        cities: List[str],
        reason: Optional[str],
    ) -> TimeSlotBlock:
        return self.time_slot_blocks.create(
            date=block_date,
            start_time=start_time,
            end_time=end_time,
            cities=list(cities),
            reason=reason,
        )

    def get_time_slot_block(self, block_id: str) -> Optional[TimeSlotBlock]:
        return self.time_slot_blocks.get_by_id(block_id)

    def update_time_slot_block(self, block_id: str, **changes: Any) -> Optional[TimeSlotBlock]:
        return self.time_slot_blocks.update(block_id, **changes)

    def delete_time_slot_block(self, block_id: str) -> bool:
        return self.time_slot_blocks.delete(block_id)


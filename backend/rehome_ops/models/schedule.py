# backend/rehome_ops/models/schedule.py
"""
Schedule models for the Rehome operations console.

Three independent record sets back the booking calendar:

Classes:
    DateBlock: A whole day taken off the calendar for some or all cities
    TimeSlotBlock: A sub-day interval taken off booking for some or all cities
    ScheduleAssignment: A city actively served on a date

Both block tables store ``cities`` as a JSON list where the empty list means
"all cities". Use the ``scope`` property rather than testing the list.
"""

from datetime import datetime, timezone
import logging

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Index,
    String,
    Time,
    UniqueConstraint,
)
from sqlalchemy.sql import func

from ..core.constants import MAX_CITY_NAME_LENGTH, MAX_REASON_LENGTH
from ..core.ulid_helper import generate_ulid
from ..database import Base
from ..domain.city_scope import CityScope

logger = logging.getLogger(__name__)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class DateBlock(Base):
    """Full-day (or day-level city) block"""

    __tablename__ = "blocked_dates"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    date = Column(Date, nullable=False, index=True)
    cities = Column(JSON, nullable=False, default=list)
    reason = Column(String(MAX_REASON_LENGTH), nullable=True)
    is_full_day = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), nullable=True, default=_now_utc, onupdate=_now_utc
    )

    @property
    def scope(self) -> CityScope:
        return CityScope.from_stored(self.cities)

    def __repr__(self) -> str:
        who = "all cities" if self.scope.all_cities else ", ".join(self.scope.to_stored())
        return f"<DateBlock {self.date} [{who}] - {self.reason or 'No reason'}>"


class TimeSlotBlock(Base):
    """Blocked time-of-day window on a date"""

    __tablename__ = "blocked_timeslots"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    cities = Column(JSON, nullable=False, default=list)
    reason = Column(String(MAX_REASON_LENGTH), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), nullable=True, default=_now_utc, onupdate=_now_utc
    )

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="chk_blocked_timeslot_order"),
    )

    @property
    def scope(self) -> CityScope:
        return CityScope.from_stored(self.cities)

    def __repr__(self) -> str:
        return (
            f"<TimeSlotBlock {self.date} {self.start_time:%H:%M}-{self.end_time:%H:%M} "
            f"- {self.reason or 'No reason'}>"
        )


class ScheduleAssignment(Base):
    """City scheduled for service on a date"""

    __tablename__ = "city_schedules"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    date = Column(Date, nullable=False)
    city = Column(String(MAX_CITY_NAME_LENGTH), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("date", "city", name="unique_city_schedule_date_city"),
        Index("idx_city_schedules_date", "date"),
    )

    def __repr__(self) -> str:
        return f"<ScheduleAssignment {self.date} {self.city}>"

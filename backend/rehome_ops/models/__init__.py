"""
Database models for the Rehome operations console.

Only the scheduling record sets live here; listings, pricing and
transport requests are owned by other services.
"""

from .schedule import DateBlock, ScheduleAssignment, TimeSlotBlock

__all__ = [
    "DateBlock",
    "ScheduleAssignment",
    "TimeSlotBlock",
]

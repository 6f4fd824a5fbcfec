# backend/rehome_ops/repositories/factory.py
"""
Repository Factory for the Rehome operations console

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

# Avoid circular imports
if TYPE_CHECKING:
    from .schedule_repository import ScheduleRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation so services can swap implementations
    (tests inject mocks through service constructors instead).
    """

    @staticmethod
    def create_schedule_repository(db: Session) -> "ScheduleRepository":
        """Create the store adapter for blocks and city assignments."""
        from .schedule_repository import ScheduleRepository

        return ScheduleRepository(db)

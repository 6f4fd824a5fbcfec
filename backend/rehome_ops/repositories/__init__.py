"""Repository layer: data access for the scheduling record sets."""

from .base_repository import BaseRepository
from .factory import RepositoryFactory
from .schedule_repository import ScheduleRepository

__all__ = ["BaseRepository", "RepositoryFactory", "ScheduleRepository"]

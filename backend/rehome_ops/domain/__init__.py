"""Plain domain values shared by models, services and schemas."""

from .city_scope import CityScope

__all__ = ["CityScope"]

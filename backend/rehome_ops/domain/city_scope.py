"""
City scope of a block record.

Stored records use an empty city list to mean "every city". That sentinel is
easy to confuse with "no cities chosen yet", so code that reasons about
blocks goes through :class:`CityScope` instead of inspecting the raw list.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import AbstractSet, FrozenSet, Iterable, List, Optional


@dataclass(frozen=True)
class CityScope:
    """Either every city (``all_cities``) or a concrete, non-empty set of cities."""

    all_cities: bool
    cities: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if self.all_cities and self.cities:
            raise ValueError("An all-cities scope cannot name specific cities")
        if not self.all_cities and not self.cities:
            raise ValueError("A specific-cities scope needs at least one city")

    @classmethod
    def everywhere(cls) -> "CityScope":
        return cls(all_cities=True)

    @classmethod
    def only(cls, cities: Iterable[str]) -> "CityScope":
        return cls(all_cities=False, cities=frozenset(cities))

    @classmethod
    def from_stored(cls, stored: Optional[Iterable[str]]) -> "CityScope":
        """Decode a persisted city list; empty (or missing) means all cities."""
        names = frozenset(c for c in (stored or []) if c)
        if not names:
            return cls.everywhere()
        return cls.only(names)

    def to_stored(self) -> List[str]:
        """Encode for persistence, keeping the empty-list sentinel."""
        if self.all_cities:
            return []
        return sorted(self.cities)

    def applies_to(self, city: Optional[str]) -> bool:
        """
        Whether a block with this scope affects ``city``.

        With no city given the question is "does this block affect anyone",
        which is always true for a stored block.
        """
        if self.all_cities or city is None:
            return True
        return city in self.cities

    def covers(self, universe: AbstractSet[str]) -> bool:
        """True when the scope blocks every city of ``universe``."""
        if self.all_cities:
            return True
        if not universe:
            return False
        return self.cities >= universe

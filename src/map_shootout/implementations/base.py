"""Capability contract for map implementations under test.

The harness never assumes anything about a map's internal structure,
ordering or thread safety. It only needs a name and a way to build an empty
map for each key domain.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, MutableMapping
from typing import Any

from map_shootout.core.schemas import KeyDomain

MapFactory = Callable[[], MutableMapping[Any, int]]


class MapImplementation(ABC):
    """A named family of map implementations.

    Subclasses return a new, empty map on every call; maps are never shared
    between benchmark cases.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name, unique within a run."""

    @abstractmethod
    def create_string_map(self) -> MutableMapping[str, int]:
        """Create an empty map keyed by strings."""

    @abstractmethod
    def create_integer_map(self) -> MutableMapping[int, int]:
        """Create an empty map keyed by signed 64-bit integers."""

    def map_factory(self, domain: KeyDomain) -> MapFactory:
        """Return the constructor matching ``domain``."""
        if domain is KeyDomain.STRING:
            return self.create_string_map
        return self.create_integer_map

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"

"""Built-in map implementations: two hash tables and one sorted map."""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import MutableMapping

from sortedcontainers import SortedDict

from map_shootout.implementations.base import MapImplementation


class DictImplementation(MapImplementation):
    """The built-in hash table, ``dict``."""

    @property
    def name(self) -> str:
        return "dict"

    def create_string_map(self) -> MutableMapping[str, int]:
        return {}

    def create_integer_map(self) -> MutableMapping[int, int]:
        return {}


class OrderedDictImplementation(MapImplementation):
    """``collections.OrderedDict``: a hash table plus a linked list of entries."""

    @property
    def name(self) -> str:
        return "OrderedDict"

    def create_string_map(self) -> MutableMapping[str, int]:
        return OrderedDict()

    def create_integer_map(self) -> MutableMapping[int, int]:
        return OrderedDict()


class SortedDictImplementation(MapImplementation):
    """``sortedcontainers.SortedDict``: a dict plus a sorted list of its keys."""

    @property
    def name(self) -> str:
        return "SortedDict"

    def create_string_map(self) -> MutableMapping[str, int]:
        return SortedDict()

    def create_integer_map(self) -> MutableMapping[int, int]:
        return SortedDict()


DICT = DictImplementation()
ORDERED_DICT = OrderedDictImplementation()
SORTED_DICT = SortedDictImplementation()

BUILTIN_IMPLEMENTATIONS: dict[str, MapImplementation] = {
    impl.name: impl for impl in (DICT, ORDERED_DICT, SORTED_DICT)
}

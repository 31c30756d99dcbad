"""Implementations module - map capability contract and built-in families.

Example:
    ```python
    from map_shootout.implementations import resolve_implementations

    implementations = resolve_implementations(["dict", "mypkg.maps:TreeMap"])
    ```
"""

from __future__ import annotations

from map_shootout.implementations.base import MapFactory, MapImplementation
from map_shootout.implementations.builtin import (
    BUILTIN_IMPLEMENTATIONS,
    DICT,
    ORDERED_DICT,
    SORTED_DICT,
    DictImplementation,
    OrderedDictImplementation,
    SortedDictImplementation,
)
from map_shootout.implementations.registry import (
    resolve_implementation,
    resolve_implementations,
)

__all__ = [
    "BUILTIN_IMPLEMENTATIONS",
    "DICT",
    "DictImplementation",
    "MapFactory",
    "MapImplementation",
    "ORDERED_DICT",
    "OrderedDictImplementation",
    "SORTED_DICT",
    "SortedDictImplementation",
    "resolve_implementation",
    "resolve_implementations",
]

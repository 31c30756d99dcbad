"""Catalog of benchmark workloads.

Each workload is plain data: a kind tag, the label written to the result
stream, a ``setup`` callable that prepares a fresh map outside the measured
window, and a ``measure`` callable that performs the single timed operation.

``setup`` receives the map, the case's key set, the optional key set of
absent keys, and a shuffle function. It returns the keys the measured
operation walks (or None when the operation needs no keys), so all per-case
state lives in the case itself rather than in the workload.
"""

from __future__ import annotations

from collections.abc import Callable, MutableMapping, Sequence
from dataclasses import dataclass
from typing import Any

from map_shootout.core.constants import FILL_VALUE
from map_shootout.core.schemas import WorkloadKind

Shuffler = Callable[[list[Any]], None]
SetupFn = Callable[
    [MutableMapping[Any, int], Sequence[Any], "Sequence[Any] | None", Shuffler],
    "Sequence[Any] | None",
]
MeasureFn = Callable[[MutableMapping[Any, int], "Sequence[Any] | None"], None]


@dataclass(frozen=True)
class Workload:
    """A named benchmark kind with its setup and measured operation."""

    kind: WorkloadKind
    label: str
    setup: SetupFn
    measure: MeasureFn

    @property
    def needs_different_keys(self) -> bool:
        """Whether cases of this workload require a set of absent keys."""
        return self.kind is WorkloadKind.READ_MISS


def populate(container: MutableMapping[Any, int], keys: Sequence[Any]) -> None:
    """Store every key with the fixed fill value."""
    for key in keys:
        container[key] = FILL_VALUE


# -----------------------------------------------------------------------------
# Setup procedures (never measured)
# -----------------------------------------------------------------------------


def setup_empty(
    container: MutableMapping[Any, int],
    keys: Sequence[Any],
    different_keys: Sequence[Any] | None,
    shuffle: Shuffler,
) -> Sequence[Any]:
    """Leave the map empty; the measured operation inserts ``keys`` in order."""
    return keys


def setup_shuffled(
    container: MutableMapping[Any, int],
    keys: Sequence[Any],
    different_keys: Sequence[Any] | None,
    shuffle: Shuffler,
) -> list[Any]:
    """Populate the map and return a shuffled copy of ``keys``."""
    order = list(keys)
    shuffle(order)
    populate(container, keys)
    return order


def setup_misses(
    container: MutableMapping[Any, int],
    keys: Sequence[Any],
    different_keys: Sequence[Any] | None,
    shuffle: Shuffler,
) -> Sequence[Any]:
    """Populate the map; the measured operation looks up the absent keys."""
    if different_keys is None:
        raise TypeError("read-miss workloads require a set of different keys")
    populate(container, keys)
    return different_keys


def setup_half_deleted(
    container: MutableMapping[Any, int],
    keys: Sequence[Any],
    different_keys: Sequence[Any] | None,
    shuffle: Shuffler,
) -> list[Any]:
    """Populate the map, delete a random half and return the survivors reshuffled.

    ``len(keys) // 2`` keys are deleted, so an odd count leaves the larger
    part in the map.
    """
    populate(container, keys)
    order = list(keys)
    shuffle(order)
    half = len(order) // 2
    for key in order[:half]:
        container.pop(key, None)
    survivors = order[half:]
    shuffle(survivors)
    return survivors


def setup_populated(
    container: MutableMapping[Any, int],
    keys: Sequence[Any],
    different_keys: Sequence[Any] | None,
    shuffle: Shuffler,
) -> None:
    """Populate the map; the measured operation needs no key list."""
    populate(container, keys)
    return None


# -----------------------------------------------------------------------------
# Measured operations
# -----------------------------------------------------------------------------


def measure_inserts(container: MutableMapping[Any, int], keys: Sequence[Any] | None) -> None:
    for key in keys or ():
        container[key] = FILL_VALUE


def measure_deletes(container: MutableMapping[Any, int], keys: Sequence[Any] | None) -> None:
    # pop() rather than del: a repeated key must not abort the measurement
    for key in keys or ():
        container.pop(key, None)


def measure_reads(container: MutableMapping[Any, int], keys: Sequence[Any] | None) -> None:
    get = container.get
    for key in keys or ():
        get(key)


def measure_iteration(container: MutableMapping[Any, int], keys: Sequence[Any] | None) -> None:
    for _entry in container.items():
        pass


_CATALOG: dict[WorkloadKind, tuple[SetupFn, MeasureFn]] = {
    WorkloadKind.INSERT: (setup_empty, measure_inserts),
    WorkloadKind.FULL_INSERT: (setup_empty, measure_inserts),
    WorkloadKind.DELETE: (setup_shuffled, measure_deletes),
    WorkloadKind.READ: (setup_shuffled, measure_reads),
    WorkloadKind.FULL_READ: (setup_shuffled, measure_reads),
    WorkloadKind.READ_MISS: (setup_misses, measure_reads),
    WorkloadKind.READ_AFTER_HALF_DELETE: (setup_half_deleted, measure_reads),
    WorkloadKind.FULL_ITERATION: (setup_populated, measure_iteration),
}


def workload_for(kind: WorkloadKind, label: str | None = None) -> Workload:
    """Build the catalog workload for ``kind``.

    Args:
        kind: Workload tag
        label: Label for the result stream; defaults to the kind's value

    Raises:
        ValueError: If ``kind`` is not a known workload kind
    """
    kind = WorkloadKind(kind)
    setup, measure = _CATALOG[kind]
    return Workload(kind=kind, label=label or kind.value, setup=setup, measure=measure)

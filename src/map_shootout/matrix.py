"""Construction of the benchmark matrix.

The matrix is the cross product of dataset sizes, key types, map
implementations and workloads, exposed as a lazily produced tree of named
groups so that an external driver can discover and run each case on its own:

    Large String Tests / 3000000 keys / dict / inserts

Key sets are generated when the group that needs them is first iterated and
then shared read-only by every implementation of the same (size, key type)
cell, so timing differences reflect the maps and not the data.

- Large string keys are generated once at the largest size; smaller sizes
  are prefixes of that sequence.
- Small string keys are the large keys truncated to their first code points,
  keeping positional correspondence.
- Integer keys are regenerated per size, once for the non-negative range and
  once for the full signed range.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from typing import Any, Union

from map_shootout.core.constants import (
    INT64_MIN,
    LARGE_STRING_LENGTH,
    SMALL_STRING_LENGTH,
)
from map_shootout.core.schemas import KeyType, ShootoutConfig, WorkloadKind, dataset_sizes
from map_shootout.implementations.base import MapFactory, MapImplementation
from map_shootout.keys.generator import KeyGenerator
from map_shootout.lifecycle import BenchmarkCase
from map_shootout.monitoring.memory import MemoryProbe, RssMemoryProbe
from map_shootout.results.sink import check_field
from map_shootout.workloads import Shuffler, Workload, workload_for

logger = logging.getLogger(__name__)


class IntegerRange(str, Enum):
    """Integer key domain a workload draws its key set from."""

    NON_NEGATIVE = "non_negative"  # [0, INT64_MAX)
    FULL = "full"  # [INT64_MIN, INT64_MAX)


STRING_WORKLOADS: tuple[tuple[WorkloadKind, str], ...] = (
    (WorkloadKind.INSERT, "inserts"),
    (WorkloadKind.DELETE, "deletes"),
    (WorkloadKind.READ, "reads"),
    (WorkloadKind.READ_MISS, "readMisses"),
    (WorkloadKind.READ_AFTER_HALF_DELETE, "readsAfterDeletingHalf"),
)

INTEGER_WORKLOADS: tuple[tuple[WorkloadKind, str, IntegerRange], ...] = (
    (WorkloadKind.INSERT, "randomShuffleInserts", IntegerRange.NON_NEGATIVE),
    (WorkloadKind.FULL_INSERT, "randomShuffleFullInserts", IntegerRange.FULL),
    (WorkloadKind.DELETE, "randomShuffleFullDeletes", IntegerRange.FULL),
    (WorkloadKind.READ, "randomShuffleReads", IntegerRange.NON_NEGATIVE),
    (WorkloadKind.FULL_READ, "randomShuffleFullReads", IntegerRange.FULL),
    (WorkloadKind.READ_MISS, "randomShuffleFullReadMisses", IntegerRange.FULL),
    (
        WorkloadKind.READ_AFTER_HALF_DELETE,
        "randomShuffleFullReadsAfterDeletingHalf",
        IntegerRange.FULL,
    ),
    (WorkloadKind.FULL_ITERATION, "randomFullIteration", IntegerRange.FULL),
)

GROUP_TITLES: dict[KeyType, str] = {
    KeyType.LARGE_STRING: "Large String Tests",
    KeyType.SMALL_STRING: "Small String Tests",
    KeyType.INT64: "Integer Tests",
}


@dataclass(frozen=True)
class MatrixGroup:
    """A named group of matrix nodes, produced on iteration.

    Each iteration calls ``produce`` again, so a group can be walked more
    than once; key sets already generated by the builder are reused.
    """

    name: str
    produce: Callable[[], Iterator[MatrixNode]] = field(repr=False, compare=False)

    def __iter__(self) -> Iterator[MatrixNode]:
        return self.produce()


MatrixNode = Union[MatrixGroup, BenchmarkCase]


def iter_cases(
    node: MatrixNode, path: tuple[str, ...] = ()
) -> Iterator[tuple[tuple[str, ...], BenchmarkCase]]:
    """Flatten a matrix tree into ``(path, case)`` pairs, depth first."""
    if isinstance(node, BenchmarkCase):
        yield (*path, node.name), node
        return
    for child in node:
        yield from iter_cases(child, (*path, node.name))


class MatrixBuilder:
    """Builds the benchmark matrix for a set of implementations.

    Example:
        ```python
        builder = MatrixBuilder([DICT, ORDERED_DICT], KeyGenerator(seed=1))
        for path, case in iter_cases(builder.build()):
            case.run(sink)
        ```
    """

    def __init__(
        self,
        implementations: Sequence[MapImplementation],
        key_generator: KeyGenerator | None = None,
        *,
        sizes: Sequence[int] | None = None,
        key_types: Sequence[KeyType] | None = None,
        large_string_length: int = LARGE_STRING_LENGTH,
        small_string_length: int = SMALL_STRING_LENGTH,
        shuffle: Shuffler | None = None,
        memory_probe: MemoryProbe | None = None,
        gc_hint: bool = True,
        name: str = "Map Shootout",
    ) -> None:
        """Initialize the builder.

        Args:
            implementations: Implementations to compare; names must be unique
            key_generator: Source of key sets
            sizes: Dataset sizes in run order; defaults to :func:`dataset_sizes`
            key_types: Key types in run order; defaults to all
            large_string_length: Code points per large string key
            small_string_length: Code points kept for small string keys
            shuffle: In-place shuffle shared by every case
            memory_probe: Memory probe shared by every case
            gc_hint: Request a garbage collection before each measurement
            name: Name of the root group

        Raises:
            TypeError: If ``implementations`` is None
            ValueError: If the configuration cannot produce a valid matrix
        """
        if implementations is None:
            raise TypeError("implementations must not be None")
        if not implementations:
            raise ValueError("At least one implementation is required")
        names = [impl.name for impl in implementations]
        if len(set(names)) != len(names):
            raise ValueError(f"Implementation names must be unique: {names}")
        for impl_name in names:
            check_field(impl_name, "Implementation name")

        sizes = list(sizes) if sizes is not None else dataset_sizes()
        if not sizes or any(size < 1 for size in sizes):
            raise ValueError(f"Dataset sizes must be positive: {sizes}")
        if not 1 <= small_string_length <= large_string_length:
            raise ValueError(
                f"Invalid string lengths: small={small_string_length}, "
                f"large={large_string_length}"
            )

        self._implementations = list(implementations)
        self._generator = key_generator if key_generator is not None else KeyGenerator()
        self._sizes = sizes
        self._key_types = list(key_types) if key_types is not None else list(KeyType)
        self._large_string_length = large_string_length
        self._small_string_length = small_string_length
        self._shuffle = shuffle if shuffle is not None else random.Random().shuffle
        self._memory_probe = memory_probe if memory_probe is not None else RssMemoryProbe()
        self._gc_hint = gc_hint
        self._name = name

        self._string_keys: dict[KeyType, tuple[str, ...]] = {}

    @classmethod
    def from_config(
        cls,
        config: ShootoutConfig,
        implementations: Sequence[MapImplementation],
        memory_probe: MemoryProbe | None = None,
    ) -> MatrixBuilder:
        """Create a builder from a validated configuration.

        A configured seed seeds both key generation and shuffling.
        """
        return cls(
            implementations,
            KeyGenerator(seed=config.seed),
            sizes=config.dataset_sizes,
            key_types=config.key_types,
            large_string_length=config.large_string_length,
            small_string_length=config.small_string_length,
            shuffle=random.Random(config.seed).shuffle,
            memory_probe=memory_probe,
            gc_hint=config.gc_hint,
            name=config.name,
        )

    @property
    def sizes(self) -> list[int]:
        return list(self._sizes)

    @property
    def implementations(self) -> list[MapImplementation]:
        return list(self._implementations)

    def expected_case_count(self) -> int:
        """Number of cases the matrix will produce."""
        per_cell = sum(
            len(INTEGER_WORKLOADS) if key_type is KeyType.INT64 else len(STRING_WORKLOADS)
            for key_type in self._key_types
        )
        return per_cell * len(self._sizes) * len(self._implementations)

    def build(self) -> MatrixGroup:
        """Return the root of the matrix tree. Nothing is generated yet."""
        return MatrixGroup(self._name, self._produce_key_type_groups)

    # -------------------------------------------------------------------------
    # Key sets
    # -------------------------------------------------------------------------

    def string_key_set(self, key_type: KeyType) -> tuple[str, ...]:
        """Largest string key set for ``key_type``, generated on first use."""
        if key_type not in self._string_keys:
            if key_type is KeyType.LARGE_STRING:
                max_size = max(self._sizes)
                logger.info(
                    f"Generating {max_size} string keys of "
                    f"{self._large_string_length} code points"
                )
                keys = self._generator.generate_string_keys(self._large_string_length, max_size)
            elif key_type is KeyType.SMALL_STRING:
                length = self._small_string_length
                large = self.string_key_set(KeyType.LARGE_STRING)
                keys = tuple(key[:length] for key in large)
            else:
                raise ValueError(f"{key_type.value} is not a string key type")
            self._string_keys[key_type] = keys
        return self._string_keys[key_type]

    def _string_length(self, key_type: KeyType) -> int:
        if key_type is KeyType.SMALL_STRING:
            return self._small_string_length
        return self._large_string_length

    # -------------------------------------------------------------------------
    # Group production
    # -------------------------------------------------------------------------

    def _produce_key_type_groups(self) -> Iterator[MatrixNode]:
        for key_type in self._key_types:
            if key_type is KeyType.INT64:
                produce = self._produce_integer_size_groups
            else:
                produce = partial(self._produce_string_size_groups, key_type)
            yield MatrixGroup(GROUP_TITLES[key_type], produce)

    def _produce_string_size_groups(self, key_type: KeyType) -> Iterator[MatrixNode]:
        all_keys = self.string_key_set(key_type)
        for size in self._sizes:
            keys = all_keys[:size]
            yield MatrixGroup(
                f"{size} keys", partial(self._produce_string_implementations, key_type, keys)
            )

    def _produce_string_implementations(
        self, key_type: KeyType, keys: tuple[str, ...]
    ) -> Iterator[MatrixNode]:
        # One set of absent keys per cell, shared by every implementation
        different_keys = self._generator.generate_string_keys(
            self._string_length(key_type), len(keys)
        )
        for impl in self._implementations:
            yield MatrixGroup(
                impl.name,
                partial(self._produce_string_cases, impl, key_type, keys, different_keys),
            )

    def _produce_string_cases(
        self,
        impl: MapImplementation,
        key_type: KeyType,
        keys: tuple[str, ...],
        different_keys: tuple[str, ...],
    ) -> Iterator[MatrixNode]:
        factory = impl.map_factory(key_type.domain)
        for kind, label in STRING_WORKLOADS:
            workload = workload_for(kind, label)
            yield self._case(
                impl,
                factory,
                workload,
                key_type.value,
                keys,
                different_keys if workload.needs_different_keys else None,
            )

    def _produce_integer_size_groups(self) -> Iterator[MatrixNode]:
        for size in self._sizes:
            key_sets = {
                IntegerRange.NON_NEGATIVE: self._generator.generate_integer_keys(0, size),
                IntegerRange.FULL: self._generator.generate_integer_keys(INT64_MIN, size),
            }
            yield MatrixGroup(
                f"{size} keys", partial(self._produce_integer_implementations, key_sets)
            )

    def _produce_integer_implementations(
        self, key_sets: dict[IntegerRange, tuple[int, ...]]
    ) -> Iterator[MatrixNode]:
        size = len(key_sets[IntegerRange.FULL])
        different_keys = self._generator.generate_integer_keys(INT64_MIN, size)
        for impl in self._implementations:
            yield MatrixGroup(
                impl.name,
                partial(self._produce_integer_cases, impl, key_sets, different_keys),
            )

    def _produce_integer_cases(
        self,
        impl: MapImplementation,
        key_sets: dict[IntegerRange, tuple[int, ...]],
        different_keys: tuple[int, ...],
    ) -> Iterator[MatrixNode]:
        factory = impl.map_factory(KeyType.INT64.domain)
        for kind, label, key_range in INTEGER_WORKLOADS:
            workload = workload_for(kind, label)
            yield self._case(
                impl,
                factory,
                workload,
                KeyType.INT64.value,
                key_sets[key_range],
                different_keys if workload.needs_different_keys else None,
            )

    def _case(
        self,
        impl: MapImplementation,
        factory: MapFactory,
        workload: Workload,
        key_label: str,
        keys: Sequence[Any],
        different_keys: Sequence[Any] | None,
    ) -> BenchmarkCase:
        return BenchmarkCase(
            implementation=impl,
            map_factory=factory,
            workload=workload,
            key_label=key_label,
            keys=keys,
            different_keys=different_keys,
            shuffle=self._shuffle,
            memory_probe=self._memory_probe,
            gc_hint=self._gc_hint,
        )

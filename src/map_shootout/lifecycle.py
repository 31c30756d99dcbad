"""Per-case benchmark lifecycle.

A :class:`BenchmarkCase` runs strictly in order:

1. Init: build a fresh map and run the workload's setup (not measured)
2. Measure: hint a garbage collection, then read memory and the clock
   immediately around the workload's single measured operation
3. Teardown: clear the map and any key list the setup produced
4. Emit: hand one :class:`BenchmarkResult` to the sink

The garbage-collection hint only reduces the chance that deferred
reclamation lands inside the measured window. Neither the timing nor the
memory delta is corrected for it, and the memory delta may be zero or
negative.
"""

from __future__ import annotations

import gc
import logging
import random
import time
from collections.abc import MutableMapping, Sequence
from enum import Enum
from typing import TYPE_CHECKING, Any

from map_shootout.core.schemas import BenchmarkResult
from map_shootout.monitoring.memory import MemoryProbe, RssMemoryProbe
from map_shootout.results.sink import check_field
from map_shootout.workloads import Shuffler, Workload

if TYPE_CHECKING:
    from map_shootout.implementations.base import MapFactory, MapImplementation
    from map_shootout.results.sink import ResultSink

logger = logging.getLogger(__name__)


class CaseState(str, Enum):
    """Lifecycle states of a benchmark case."""

    PENDING = "pending"
    INIT = "init"
    MEASURE = "measure"
    TEARDOWN = "teardown"
    EMITTED = "emitted"  # terminal
    FAILED = "failed"  # terminal


class BenchmarkCase:
    """One implementation running one workload over one key set.

    Cases are built once during matrix construction and run exactly once.
    Contract violations (missing dependencies, a miss key set whose size
    differs from the key set) raise at construction, before anything is
    measured.

    Example:
        ```python
        case = BenchmarkCase(
            implementation=DICT,
            map_factory=DICT.create_integer_map,
            workload=workload_for(WorkloadKind.READ, "reads"),
            key_label="int64",
            keys=keys,
        )
        with ResultSink.open("data.tsv") as sink:
            result = case.run(sink)
        ```
    """

    def __init__(
        self,
        implementation: MapImplementation,
        map_factory: MapFactory,
        workload: Workload,
        key_label: str,
        keys: Sequence[Any],
        different_keys: Sequence[Any] | None = None,
        *,
        shuffle: Shuffler | None = None,
        memory_probe: MemoryProbe | None = None,
        gc_hint: bool = True,
    ) -> None:
        """Initialize the case.

        Args:
            implementation: Implementation under test; supplies the result name
            map_factory: Zero-argument constructor of an empty map
            workload: Setup and measured operation
            key_label: Key type label written to the result stream
            keys: Key set shared read-only with the other cases of the cell
            different_keys: Absent keys; required by read-miss workloads
            shuffle: In-place shuffle used by the setup
            memory_probe: Source of process memory usage
            gc_hint: Request a garbage collection before measuring

        Raises:
            TypeError: If a required dependency is None
            ValueError: If ``different_keys`` and ``keys`` differ in size, or a
                name written to the result stream contains a separator
        """
        for arg_name, value in (
            ("implementation", implementation),
            ("map_factory", map_factory),
            ("workload", workload),
            ("key_label", key_label),
            ("keys", keys),
        ):
            if value is None:
                raise TypeError(f"{arg_name} must not be None")

        check_field(key_label, "Key label")
        check_field(workload.label, "Workload label")
        check_field(implementation.name, "Implementation name")

        if workload.needs_different_keys and different_keys is None:
            raise TypeError(f"Workload {workload.label!r} requires different_keys")
        if different_keys is not None and len(different_keys) != len(keys):
            raise ValueError(
                f"key count mismatch: {len(keys)} keys but {len(different_keys)} different keys"
            )

        self._implementation = implementation
        self._map_factory = map_factory
        self._workload = workload
        self._key_label = key_label
        self._keys = keys
        self._different_keys = different_keys
        self._shuffle = shuffle if shuffle is not None else random.Random().shuffle
        self._memory_probe = memory_probe if memory_probe is not None else RssMemoryProbe()
        self._gc_hint = gc_hint

        self._state = CaseState.PENDING
        self._container: MutableMapping[Any, int] | None = None
        self._operation_keys: Sequence[Any] | None = None

    @property
    def name(self) -> str:
        """Display name; the workload label."""
        return self._workload.label

    @property
    def implementation(self) -> MapImplementation:
        return self._implementation

    @property
    def workload(self) -> Workload:
        return self._workload

    @property
    def key_label(self) -> str:
        return self._key_label

    @property
    def dataset_size(self) -> int:
        return len(self._keys)

    @property
    def state(self) -> CaseState:
        return self._state

    def run(self, sink: ResultSink) -> BenchmarkResult:
        """Execute the case and emit its result.

        Args:
            sink: Destination of the result row

        Returns:
            The emitted result

        Raises:
            RuntimeError: If the case has already run
            Exception: Anything raised by the map or the workload; the case
                is torn down and marked failed before the error propagates
        """
        if sink is None:
            raise TypeError("sink must not be None")
        if self._state is not CaseState.PENDING:
            raise RuntimeError(f"Case {self.name!r} already ran (state={self._state.value})")

        logger.debug(
            f"Running {self._key_label}/{self.name}/{self._implementation.name} "
            f"with {self.dataset_size} keys"
        )
        try:
            self._state = CaseState.INIT
            self._init()
            self._state = CaseState.MEASURE
            elapsed_ns, memory_delta_bytes = self._measure()
        except Exception:
            self._state = CaseState.FAILED
            raise
        finally:
            self._teardown()

        try:
            result = BenchmarkResult(
                key_label=self._key_label,
                workload_label=self._workload.label,
                implementation=self._implementation.name,
                dataset_size=self.dataset_size,
                elapsed_ns=elapsed_ns,
                memory_delta_bytes=memory_delta_bytes,
            )
            sink.emit(result)
        except Exception:
            self._state = CaseState.FAILED
            raise
        self._state = CaseState.EMITTED
        return result

    def _init(self) -> None:
        self._container = self._map_factory()
        self._operation_keys = self._workload.setup(
            self._container, self._keys, self._different_keys, self._shuffle
        )

    def _measure(self) -> tuple[int, int]:
        """Time the measured operation and return (elapsed ns, memory delta bytes)."""
        container = self._container
        operation_keys = self._operation_keys
        measure = self._workload.measure

        if self._gc_hint:
            gc.collect()

        start_memory = self._memory_probe.current_bytes()
        start_ns = time.perf_counter_ns()
        measure(container, operation_keys)
        end_ns = time.perf_counter_ns()
        end_memory = self._memory_probe.current_bytes()

        return end_ns - start_ns, end_memory - start_memory

    def _teardown(self) -> None:
        if self._state is not CaseState.FAILED:
            self._state = CaseState.TEARDOWN

        # Only lists built by the setup are cleared; shared key sets are read-only
        operation_keys = self._operation_keys
        if (
            isinstance(operation_keys, list)
            and operation_keys is not self._keys
            and operation_keys is not self._different_keys
        ):
            operation_keys.clear()
        self._operation_keys = None

        container, self._container = self._container, None
        if container is None:
            return
        try:
            container.clear()
        except Exception:
            if self._state is not CaseState.FAILED:
                self._state = CaseState.FAILED
                raise
            # The error that failed the case is already propagating
            logger.warning(
                f"Clearing the map of failed case {self.name!r} also raised", exc_info=True
            )

    def __repr__(self) -> str:
        return (
            f"BenchmarkCase(key_label={self._key_label!r}, workload={self.name!r}, "
            f"implementation={self._implementation.name!r}, size={self.dataset_size}, "
            f"state={self._state.value!r})"
        )

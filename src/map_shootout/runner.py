"""Sequential driver for the benchmark matrix.

The runner walks the matrix tree depth first and runs every case in order,
one at a time: overlapping cases would distort each other's timing and
memory readings. A case that raises is logged and counted as failed; the
run continues with the next case. Nothing is retried.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field

from map_shootout.core.schemas import ShootoutConfig
from map_shootout.implementations.base import MapImplementation
from map_shootout.implementations.registry import resolve_implementations
from map_shootout.lifecycle import BenchmarkCase
from map_shootout.matrix import MatrixBuilder, MatrixGroup, MatrixNode
from map_shootout.monitoring.memory import MemoryProbe
from map_shootout.results.sink import ResultSink

logger = logging.getLogger(__name__)

PATH_SEPARATOR = " / "


@dataclass
class RunSummary:
    """Outcome counts of a shootout run."""

    run_id: str
    completed: int = 0
    failed: int = 0
    skipped: int = 0
    failures: list[str] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return self.failed == 0


class ShootoutRunner:
    """Runs a configured shootout and writes results to a sink.

    Example:
        ```python
        config = load_config("shootout.yaml")
        runner = ShootoutRunner(config)
        with ResultSink.open(config.output_path) as sink:
            summary = runner.run(sink)
        ```
    """

    def __init__(
        self,
        config: ShootoutConfig,
        implementations: Sequence[MapImplementation] | None = None,
        memory_probe: MemoryProbe | None = None,
    ) -> None:
        """Initialize the runner.

        Args:
            config: Validated shootout configuration
            implementations: Implementations to use instead of resolving
                ``config.implementations``
            memory_probe: Memory probe to use instead of process RSS
        """
        self.config = config
        if implementations is None:
            implementations = resolve_implementations(config.implementations)
        self.implementations = list(implementations)
        self.builder = MatrixBuilder.from_config(config, self.implementations, memory_probe)

    def run(self, sink: ResultSink, filters: Sequence[str] = ()) -> RunSummary:
        """Run every case of the matrix.

        Args:
            sink: Destination of result rows
            filters: If given, only cases whose path contains one of these
                substrings are run; the rest are counted as skipped

        Returns:
            RunSummary with completed, failed and skipped counts
        """
        if sink is None:
            raise TypeError("sink must not be None")

        summary = RunSummary(run_id=str(uuid.uuid4())[:8])
        start = time.monotonic()
        logger.info(
            f"[{summary.run_id}] Starting {self.config.name}: "
            f"{len(self.implementations)} implementations, "
            f"{len(self.builder.sizes)} dataset sizes, "
            f"{self.builder.expected_case_count()} cases"
        )

        self._run_node(self.builder.build(), (), sink, list(filters), summary)

        summary.duration_seconds = time.monotonic() - start
        logger.info(
            f"[{summary.run_id}] Finished in {summary.duration_seconds:.1f}s: "
            f"{summary.completed} completed, {summary.failed} failed, {summary.skipped} skipped"
        )
        return summary

    def _run_node(
        self,
        node: MatrixNode,
        path: tuple[str, ...],
        sink: ResultSink,
        filters: list[str],
        summary: RunSummary,
    ) -> None:
        if isinstance(node, MatrixGroup):
            group_path = (*path, node.name)
            # Root, key type and size groups are worth a progress line
            if len(group_path) <= 3:
                logger.info(f"[{summary.run_id}] {PATH_SEPARATOR.join(group_path)}")
            for child in node:
                self._run_node(child, group_path, sink, filters, summary)
            return

        self._run_case(node, (*path, node.name), sink, filters, summary)

    def _run_case(
        self,
        case: BenchmarkCase,
        path: tuple[str, ...],
        sink: ResultSink,
        filters: list[str],
        summary: RunSummary,
    ) -> None:
        case_path = PATH_SEPARATOR.join(path)
        if filters and not any(f in case_path for f in filters):
            summary.skipped += 1
            return

        try:
            result = case.run(sink)
        except Exception as e:
            logger.error(f"[{summary.run_id}] Case failed: {case_path}: {e}", exc_info=True)
            summary.failed += 1
            summary.failures.append(case_path)
            return

        summary.completed += 1
        logger.debug(
            f"[{summary.run_id}] {case_path}: {result.elapsed_ns / 1e6:.2f} ms, "
            f"memory delta {result.memory_delta_bytes} bytes"
        )

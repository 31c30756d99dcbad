"""Map Shootout - micro-benchmarks comparing map implementations."""

from __future__ import annotations

from map_shootout.core.schemas import (
    BenchmarkResult,
    KeyDomain,
    KeyType,
    ShootoutConfig,
    WorkloadKind,
    dataset_sizes,
)
from map_shootout.implementations.base import MapImplementation
from map_shootout.keys.generator import KeyGenerator
from map_shootout.lifecycle import BenchmarkCase, CaseState
from map_shootout.matrix import MatrixBuilder, MatrixGroup, iter_cases
from map_shootout.results.sink import ResultSink
from map_shootout.workloads import Workload, workload_for

__version__ = "0.1.0"

__all__ = [
    "BenchmarkCase",
    "BenchmarkResult",
    "CaseState",
    "dataset_sizes",
    "iter_cases",
    "KeyDomain",
    "KeyGenerator",
    "KeyType",
    "MapImplementation",
    "MatrixBuilder",
    "MatrixGroup",
    "ResultSink",
    "ShootoutConfig",
    "Workload",
    "workload_for",
    "WorkloadKind",
    "__version__",
]

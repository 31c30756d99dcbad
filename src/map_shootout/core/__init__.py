"""Core module - configuration and schemas."""

from __future__ import annotations

from map_shootout.core.config import load_config, save_config
from map_shootout.core.constants import (
    FILL_VALUE,
    INT64_MAX,
    INT64_MIN,
    MAX_CODE_POINT,
    RESULT_COLUMNS,
)
from map_shootout.core.schemas import (
    BenchmarkResult,
    KeyDomain,
    KeyType,
    ShootoutConfig,
    WorkloadKind,
    dataset_sizes,
)

__all__ = [
    "BenchmarkResult",
    "FILL_VALUE",
    "INT64_MAX",
    "INT64_MIN",
    "KeyDomain",
    "KeyType",
    "load_config",
    "MAX_CODE_POINT",
    "RESULT_COLUMNS",
    "save_config",
    "ShootoutConfig",
    "WorkloadKind",
    "dataset_sizes",
]

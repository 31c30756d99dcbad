"""Shared constants for the map shootout.

Centralized constants to avoid duplication between the matrix builder,
the configuration schema and the key generator.
"""

from __future__ import annotations

# Signed 64-bit integer bounds (integer keys are drawn from [min, INT64_MAX))
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

# Highest Unicode code point; string keys draw code points from [0, MAX_CODE_POINT)
MAX_CODE_POINT = 0x10FFFF

# Dataset sizes run from MAX_DATASET_SIZE down to (excluding) zero
MAX_DATASET_SIZE = 3_000_000
DATASET_SIZE_STEP = 200_000

# Key lengths in code points
LARGE_STRING_LENGTH = 64
SMALL_STRING_LENGTH = 16

# Value stored for every key when populating a map
FILL_VALUE = 1

# Column order of the tab-separated result stream
RESULT_COLUMNS = (
    "key_label",
    "workload_label",
    "implementation",
    "dataset_size",
    "elapsed_ns",
    "memory_delta_bytes",
)

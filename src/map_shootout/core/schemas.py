"""Pydantic schemas for the map shootout.

This module defines the data contracts shared across the harness: key
types, workload kinds, the run configuration and the per-case result row.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator, model_validator

from map_shootout.core.constants import (
    DATASET_SIZE_STEP,
    LARGE_STRING_LENGTH,
    MAX_DATASET_SIZE,
    RESULT_COLUMNS,
    SMALL_STRING_LENGTH,
)


class KeyDomain(str, Enum):
    """Key domains a map implementation must be able to hold."""

    STRING = "string"
    INTEGER = "integer"


class KeyType(str, Enum):
    """Key types benchmarked by the shootout.

    The value doubles as the key label written to the result stream.
    """

    LARGE_STRING = "largeString"  # 64 code points
    SMALL_STRING = "smallString"  # first 16 code points of a large key
    INT64 = "int64"  # signed 64-bit integers

    @property
    def domain(self) -> KeyDomain:
        if self is KeyType.INT64:
            return KeyDomain.INTEGER
        return KeyDomain.STRING


class WorkloadKind(str, Enum):
    """Closed set of benchmark kinds."""

    INSERT = "insert"
    FULL_INSERT = "full_insert"
    DELETE = "delete"
    READ = "read"
    FULL_READ = "full_read"
    READ_MISS = "read_miss"
    READ_AFTER_HALF_DELETE = "read_after_half_delete"
    FULL_ITERATION = "full_iteration"


def dataset_sizes(max_size: int = MAX_DATASET_SIZE, step: int = DATASET_SIZE_STEP) -> list[int]:
    """Sizes from ``max_size`` down to (excluding) zero, largest first.

    Example:
        >>> dataset_sizes(1000, 300)
        [1000, 700, 400, 100]
    """
    if max_size < 1:
        raise ValueError(f"max_size must be positive, got {max_size}")
    if step < 1:
        raise ValueError(f"step must be positive, got {step}")
    return list(range(max_size, 0, -step))


class ShootoutConfig(BaseModel):
    """Top-level shootout configuration.

    This is the main configuration loaded from YAML/JSON files.

    Attributes:
        name: Human-readable run name
        output_path: File the tab-separated result stream is written to
        max_size: Largest dataset size; the first size group
        size_step: Decrement between consecutive dataset sizes
        large_string_length: Code points per large string key
        small_string_length: Code points kept when truncating to small keys
        key_types: Key types to benchmark, in run order
        implementations: Built-in names or ``module:attribute`` import paths
        seed: Optional seed for key generation and shuffling
        gc_hint: Request a garbage collection before each measurement
    """

    name: str = Field(default="Map Shootout", description="Run name")
    description: str = Field(default="", description="Optional description")
    output_path: Path = Field(default=Path("data.tsv"), description="TSV result file")
    max_size: int = Field(default=MAX_DATASET_SIZE, ge=1, description="Largest dataset size")
    size_step: int = Field(default=DATASET_SIZE_STEP, ge=1, description="Dataset size decrement")
    large_string_length: int = Field(default=LARGE_STRING_LENGTH, ge=1)
    small_string_length: int = Field(default=SMALL_STRING_LENGTH, ge=1)
    key_types: list[KeyType] = Field(default_factory=lambda: list(KeyType))
    implementations: list[str] = Field(
        default_factory=lambda: ["dict", "OrderedDict", "SortedDict"],
        min_length=1,
        description="Map implementations to compare",
    )
    seed: int | None = Field(default=None, description="Seed for reproducible key sets")
    gc_hint: bool = Field(default=True, description="Collect garbage before measuring")

    @field_validator("key_types")
    @classmethod
    def validate_key_types(cls, v: list[KeyType]) -> list[KeyType]:
        """Reject repeated key types; each would rerun the same matrix."""
        if len(set(v)) != len(v):
            raise ValueError("key_types must not contain duplicates")
        return v

    @field_validator("implementations")
    @classmethod
    def validate_implementations(cls, v: list[str]) -> list[str]:
        stripped = [name.strip() for name in v]
        if any(not name for name in stripped):
            raise ValueError("implementation names must not be empty")
        return stripped

    @model_validator(mode="after")
    def check_string_lengths(self) -> ShootoutConfig:
        """Small keys are prefixes of large keys, so they cannot be longer."""
        if self.small_string_length > self.large_string_length:
            raise ValueError(
                f"small_string_length ({self.small_string_length}) exceeds "
                f"large_string_length ({self.large_string_length})"
            )
        return self

    @property
    def dataset_sizes(self) -> list[int]:
        """Dataset sizes in run order, largest first."""
        return dataset_sizes(self.max_size, self.size_step)


class BenchmarkResult(BaseModel):
    """Result of running a single benchmark case.

    One row of the result stream. ``memory_delta_bytes`` is advisory and may
    be zero or negative.
    """

    key_label: str = Field(..., min_length=1)
    workload_label: str = Field(..., min_length=1)
    implementation: str = Field(..., min_length=1)
    dataset_size: int = Field(..., ge=0)
    elapsed_ns: int = Field(..., ge=0)
    memory_delta_bytes: int

    model_config = {"frozen": True}

    def to_row(self) -> list[str]:
        """Fields in result-stream column order, as text."""
        return [str(getattr(self, column)) for column in RESULT_COLUMNS]

    @classmethod
    def from_row(cls, fields: list[str]) -> BenchmarkResult:
        """Parse a row previously produced by :meth:`to_row`."""
        if len(fields) != len(RESULT_COLUMNS):
            raise ValueError(
                f"Expected {len(RESULT_COLUMNS)} fields, got {len(fields)}: {fields!r}"
            )
        return cls.model_validate(dict(zip(RESULT_COLUMNS, fields, strict=True)))

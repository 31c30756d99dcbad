"""Loading and aggregation of result streams.

Result files are the headerless TSV streams written by
:class:`~map_shootout.results.sink.ResultSink`. Several runs may be
concatenated into one file; aggregation averages repeated rows.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path

import pandas as pd

from map_shootout.core.constants import RESULT_COLUMNS
from map_shootout.core.schemas import BenchmarkResult

logger = logging.getLogger(__name__)

GROUP_COLUMNS = ["key_label", "workload_label", "implementation", "dataset_size"]
INTEGER_COLUMNS = ["dataset_size", "elapsed_ns", "memory_delta_bytes"]


def load_results(path: Path | str) -> pd.DataFrame:
    """Load a result stream into a DataFrame with the fixed column names.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If a row is missing fields or has non-integer measurements
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Results file not found: {path}")
    if path.stat().st_size == 0:
        return pd.DataFrame(columns=list(RESULT_COLUMNS))

    df = pd.read_csv(
        path,
        sep="\t",
        header=None,
        names=list(RESULT_COLUMNS),
        dtype=str,
        quoting=csv.QUOTE_NONE,
        index_col=False,
        keep_default_na=False,
        na_values=[],
    )

    missing = df.isna().any(axis=1)
    if missing.any():
        first = int(missing.idxmax()) + 1
        raise ValueError(f"Malformed result row {first} in {path}: missing fields")

    for column in INTEGER_COLUMNS:
        try:
            df[column] = pd.to_numeric(df[column], errors="raise").astype("int64")
        except (ValueError, TypeError) as e:
            raise ValueError(f"Non-integer value in column {column!r} of {path}: {e}") from e

    logger.debug(f"Loaded {len(df)} result rows from {path}")
    return df


def results_to_dataframe(results: list[BenchmarkResult]) -> pd.DataFrame:
    """Convert in-memory results to the same frame layout as :func:`load_results`."""
    rows = [r.model_dump() for r in results]
    return pd.DataFrame(rows, columns=list(RESULT_COLUMNS))


def summarize(df: pd.DataFrame) -> pd.DataFrame:
    """Aggregate rows per (key label, workload, implementation, size).

    Returns:
        DataFrame with ``runs``, ``mean_elapsed_ms``, ``min_elapsed_ms`` and
        ``mean_memory_delta_mb`` columns, in first-seen order
    """
    if df.empty:
        return pd.DataFrame(
            columns=GROUP_COLUMNS
            + ["runs", "mean_elapsed_ms", "min_elapsed_ms", "mean_memory_delta_mb"]
        )

    summary = (
        df.groupby(GROUP_COLUMNS, sort=False)
        .agg(
            runs=("elapsed_ns", "size"),
            mean_elapsed_ns=("elapsed_ns", "mean"),
            min_elapsed_ns=("elapsed_ns", "min"),
            mean_memory_delta_bytes=("memory_delta_bytes", "mean"),
        )
        .reset_index()
    )
    summary["mean_elapsed_ms"] = summary.pop("mean_elapsed_ns") / 1e6
    summary["min_elapsed_ms"] = summary.pop("min_elapsed_ns") / 1e6
    summary["mean_memory_delta_mb"] = summary.pop("mean_memory_delta_bytes") / (1024 * 1024)
    return summary


def compare_implementations(df: pd.DataFrame) -> pd.DataFrame:
    """Pivot mean elapsed milliseconds with one column per implementation."""
    summary = summarize(df)
    if summary.empty:
        return summary
    return summary.pivot_table(
        index=["key_label", "workload_label", "dataset_size"],
        columns="implementation",
        values="mean_elapsed_ms",
        sort=False,
    )


class ResultsStorage:
    """Access to a single result file.

    Example:
        ```python
        storage = ResultsStorage("data.tsv")
        print(storage.summary())
        ```
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path).resolve()

    def load(self) -> pd.DataFrame:
        return load_results(self.path)

    def load_results(self) -> list[BenchmarkResult]:
        """Load rows as validated BenchmarkResult objects."""
        df = self.load()
        return [
            BenchmarkResult(
                key_label=row.key_label,
                workload_label=row.workload_label,
                implementation=row.implementation,
                dataset_size=int(row.dataset_size),
                elapsed_ns=int(row.elapsed_ns),
                memory_delta_bytes=int(row.memory_delta_bytes),
            )
            for row in df.itertuples(index=False)
        ]

    def summary(self) -> pd.DataFrame:
        return summarize(self.load())

    def comparison(self) -> pd.DataFrame:
        return compare_implementations(self.load())

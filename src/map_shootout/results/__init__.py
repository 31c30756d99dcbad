"""Results module - Result emission and aggregation."""

from __future__ import annotations

from map_shootout.results.sink import ResultSink, format_row
from map_shootout.results.storage import (
    ResultsStorage,
    compare_implementations,
    load_results,
    results_to_dataframe,
    summarize,
)

__all__ = [
    "ResultSink",
    "ResultsStorage",
    "compare_implementations",
    "format_row",
    "load_results",
    "results_to_dataframe",
    "summarize",
]

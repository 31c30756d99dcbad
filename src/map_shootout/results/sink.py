"""Tab-separated result stream.

Every benchmark case produces exactly one line with the columns

    key_label  workload_label  implementation  dataset_size  elapsed_ns  memory_delta_bytes

There is no header row. The stream is flushed after every line so the rows of
completed cases survive a crash later in the run.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TextIO

from map_shootout.core.schemas import BenchmarkResult

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = "\t"
LINE_TERMINATOR = "\n"


def check_field(value: str, what: str = "Result field") -> str:
    """Return ``value`` if it can be written as one field of a row.

    Raises:
        ValueError: If ``value`` contains a separator or line break
    """
    if FIELD_SEPARATOR in value or "\n" in value or "\r" in value:
        raise ValueError(f"{what} contains a separator or line break: {value!r}")
    return value


def format_row(result: BenchmarkResult) -> str:
    """Serialize a result as one line, including the line terminator.

    Raises:
        ValueError: If a text field contains a separator or line break
    """
    fields = [check_field(field) for field in result.to_row()]
    return FIELD_SEPARATOR.join(fields) + LINE_TERMINATOR


class ResultSink:
    """Writer of result rows to a text stream.

    The sink is an explicit handle: the runner creates one per run and passes
    it to every case. It does not own the stream unless created with
    :meth:`open`.

    Example:
        ```python
        with ResultSink.open("data.tsv") as sink:
            case.run(sink)
        ```
    """

    def __init__(self, stream: TextIO) -> None:
        if stream is None:
            raise TypeError("stream must not be None")
        self._stream = stream
        self._rows_written = 0

    @property
    def rows_written(self) -> int:
        """Number of rows emitted so far."""
        return self._rows_written

    def emit(self, result: BenchmarkResult) -> None:
        """Write one result row and flush."""
        self._stream.write(format_row(result))
        self._stream.flush()
        self._rows_written += 1

    @classmethod
    @contextmanager
    def open(cls, path: Path | str, append: bool = False) -> Iterator[ResultSink]:
        """Open a sink over a file, closing it on exit.

        Args:
            path: Output file; parent directories are created
            append: Append to an existing file instead of truncating it
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "a" if append else "w", encoding="utf-8", newline="") as stream:
            sink = cls(stream)
            yield sink
        logger.info(f"Wrote {sink.rows_written} result rows to {path}")

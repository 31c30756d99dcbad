"""Process memory probes.

A probe reports the current memory footprint of this process. The lifecycle
reads it immediately before and after a measured operation; the difference is
an advisory delta, since the interpreter and allocator release memory on
their own schedule.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import psutil


class MemoryProbe(ABC):
    """Abstract source of the process's current memory usage."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier for logs."""

    @abstractmethod
    def current_bytes(self) -> int:
        """Return the current memory usage in bytes."""


class RssMemoryProbe(MemoryProbe):
    """Resident set size of the current process, as reported by psutil."""

    def __init__(self, process: psutil.Process | None = None) -> None:
        self._process = process if process is not None else psutil.Process()

    @property
    def name(self) -> str:
        return "rss"

    def current_bytes(self) -> int:
        return int(self._process.memory_info().rss)

"""Shared fixtures for map shootout tests."""

from __future__ import annotations

import io
import random

import pytest

from map_shootout.monitoring.memory import MemoryProbe
from map_shootout.results.sink import ResultSink


class FakeMemoryProbe(MemoryProbe):
    """Memory probe returning a scripted sequence of readings."""

    def __init__(self, readings: list[int] | None = None) -> None:
        self._readings = list(readings or [])
        self.calls = 0

    @property
    def name(self) -> str:
        return "fake"

    def current_bytes(self) -> int:
        self.calls += 1
        if self._readings:
            return self._readings.pop(0)
        return 0


@pytest.fixture
def memory_probe() -> FakeMemoryProbe:
    return FakeMemoryProbe()


@pytest.fixture
def stream() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def sink(stream: io.StringIO) -> ResultSink:
    return ResultSink(stream)


@pytest.fixture
def shuffle():
    return random.Random(1234).shuffle

"""Monitoring module - Process memory measurement."""

from __future__ import annotations

from map_shootout.monitoring.memory import MemoryProbe, RssMemoryProbe

__all__ = ["MemoryProbe", "RssMemoryProbe"]

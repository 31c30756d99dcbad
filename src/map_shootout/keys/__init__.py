"""Keys module - Key set generation."""

from __future__ import annotations

from map_shootout.keys.generator import (
    EXCLUDED_CODE_POINT_RANGES,
    KeyGenerator,
    is_valid_code_point,
    valid_code_point_mask,
)

__all__ = [
    "EXCLUDED_CODE_POINT_RANGES",
    "KeyGenerator",
    "is_valid_code_point",
    "valid_code_point_mask",
]

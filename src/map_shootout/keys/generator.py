"""Pseudo-random key generation for the map shootout.

String keys are built from uniformly drawn Unicode code points, redrawing any
code point that falls into a private-use, surrogate or noncharacter band so
that every key is well-formed text that any map implementation can hold.
Integer keys are uniform signed 64-bit values.

Generation is vectorized with numpy: code points are drawn in batches,
filtered with a boolean mask, then decoded from UTF-32 in one step.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from map_shootout.core.constants import INT64_MAX, INT64_MIN, MAX_CODE_POINT

if TYPE_CHECKING:
    from numpy.typing import NDArray

logger = logging.getLogger(__name__)

# Inclusive code point bands that string keys never contain
EXCLUDED_CODE_POINT_RANGES: tuple[tuple[int, int], ...] = (
    (0xE000, 0xF8FF),  # BMP private use area (6,400 code points)
    (0xF0000, 0xFFFFF),  # Supplementary Private Use Area-A
    (0x100000, 0x10FFFF),  # Supplementary Private Use Area-B
    (0xD800, 0xDFFF),  # UTF-16 surrogates
    (0xFDD0, 0xFDEF),  # noncharacters
    (0xFFFE, 0xFFFF),  # noncharacters
)

# Keys decoded per batch; bounds the size of intermediate code point arrays
DEFAULT_BATCH_SIZE = 8192


def is_valid_code_point(code_point: int) -> bool:
    """Return True if ``code_point`` may appear in a generated string key."""
    return not any(low <= code_point <= high for low, high in EXCLUDED_CODE_POINT_RANGES)


def valid_code_point_mask(code_points: NDArray[np.uint32]) -> NDArray[np.bool_]:
    """Vectorized :func:`is_valid_code_point`."""
    excluded = np.zeros(code_points.shape, dtype=bool)
    for low, high in EXCLUDED_CODE_POINT_RANGES:
        excluded |= (code_points >= low) & (code_points <= high)
    return ~excluded


class KeyGenerator:
    """Generator of string and 64-bit integer key sequences.

    Key sequences are returned as tuples so they can be shared read-only
    between every benchmark case of a matrix cell.

    Example:
        ```python
        generator = KeyGenerator(seed=42)
        words = generator.generate_string_keys(length=16, count=1000)
        numbers = generator.generate_integer_keys(min_value=0, count=1000)
        ```
    """

    def __init__(self, seed: int | None = None, batch_size: int = DEFAULT_BATCH_SIZE) -> None:
        """Initialize the generator.

        Args:
            seed: Optional seed; None draws fresh entropy from the OS
            batch_size: Number of string keys built per vectorized batch
        """
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self._rng = np.random.default_rng(seed)
        self._batch_size = batch_size

    def generate_string_keys(self, length: int, count: int) -> tuple[str, ...]:
        """Generate ``count`` strings of exactly ``length`` code points.

        Args:
            length: Number of code points per key
            count: Number of keys

        Returns:
            Tuple of generated keys
        """
        if length < 0:
            raise ValueError(f"length must not be negative, got {length}")
        if count < 0:
            raise ValueError(f"count must not be negative, got {count}")

        logger.debug(f"Generating {count} string keys of {length} code points")
        keys: list[str] = []
        for start in range(0, count, self._batch_size):
            batch = min(self._batch_size, count - start)
            code_points = self._draw_code_points(batch * length)
            # Surrogates are excluded, so every code point encodes as UTF-32
            text = code_points.astype("<u4").tobytes().decode("utf-32-le")
            keys.extend(text[i * length : (i + 1) * length] for i in range(batch))
        return tuple(keys)

    def generate_integer_keys(self, min_value: int, count: int) -> tuple[int, ...]:
        """Generate ``count`` signed 64-bit integers uniform over ``[min_value, INT64_MAX)``.

        ``min_value=0`` produces non-negative keys; ``min_value=INT64_MIN``
        covers the full signed range.
        """
        if count < 0:
            raise ValueError(f"count must not be negative, got {count}")
        if not INT64_MIN <= min_value < INT64_MAX:
            raise ValueError(f"min_value must lie in [{INT64_MIN}, {INT64_MAX}), got {min_value}")

        logger.debug(f"Generating {count} integer keys from [{min_value}, {INT64_MAX})")
        values = self._rng.integers(min_value, INT64_MAX, size=count, dtype=np.int64)
        return tuple(values.tolist())

    def _draw_code_points(self, needed: int) -> NDArray[np.uint32]:
        """Draw ``needed`` valid code points, redrawing rejected ones."""
        chunks: list[NDArray[np.uint32]] = []
        remaining = needed
        while remaining > 0:
            # Roughly 1 in 8 draws is rejected; oversample to usually finish in one pass
            draw = self._rng.integers(
                0, MAX_CODE_POINT, size=remaining + remaining // 4 + 16, dtype=np.uint32
            )
            accepted = draw[valid_code_point_mask(draw)][:remaining]
            chunks.append(accepted)
            remaining -= len(accepted)
        if not chunks:
            return np.empty(0, dtype=np.uint32)
        return np.concatenate(chunks)

"""
Nearest-level quantisation onto an evenly spaced palette.

Levels are ``low + i * step`` for ``i`` in ``0 .. level_count - 1`` with
``step = (high - low) / (level_count - 1)``. A sample exactly halfway between
two levels goes to the higher one.
"""
import math
import numbers

import numpy as np
import numpy.typing as npt

from ..constants import SAMPLE_MAX, SAMPLE_MIN
from ..errors import InvalidParameter


def check_level_count(level_count: int) -> int:
    if isinstance(level_count, bool) or not isinstance(level_count, numbers.Integral):
        raise InvalidParameter(f"Level count must be an integer, got {level_count!r}")
    if level_count < 2:
        raise InvalidParameter(f"Level count must be at least 2, got {level_count}")
    return int(level_count)


def level_step(level_count: int, low: float = SAMPLE_MIN, high: float = SAMPLE_MAX) -> float:
    """Distance between two adjacent palette levels."""
    return (high - low) / (check_level_count(level_count) - 1)


def palette_levels(
    level_count: int,
    low: float = SAMPLE_MIN,
    high: float = SAMPLE_MAX
) -> npt.NDArray[np.float64]:
    step = level_step(level_count, low, high)
    return low + np.arange(level_count, dtype=np.float64) * step


def quantize(
    sample: float,
    level_count: int,
    low: float = SAMPLE_MIN,
    high: float = SAMPLE_MAX
) -> tuple[float, float]:
    """
    Map a sample to its nearest palette level.

    Args:
        sample: Real-valued sample, may lie outside [low, high].
        level_count: Number of palette levels (>= 2).
        low: Lowest palette level.
        high: Highest palette level.

    Returns:
        (level, error) where error is ``sample - level``.
    """
    step = level_step(level_count, low, high)
    index = math.floor((sample - low) / step + 0.5)
    index = min(max(index, 0), level_count - 1)
    level = low + index * step
    return level, sample - level


def quantize_array(
    samples: npt.NDArray[np.float64],
    level_count: int,
    low: float = SAMPLE_MIN,
    high: float = SAMPLE_MAX
) -> npt.NDArray[np.float64]:
    """Vectorised form of :func:`quantize` returning only the levels."""
    step = level_step(level_count, low, high)
    index = np.floor((samples - low) / step + 0.5)
    index = np.clip(index, 0, level_count - 1)
    return low + index * step

import math
from typing import Optional

import numpy as np
import numpy.typing as npt
from numba import jit

from ...constants import SAMPLE_MAX, SAMPLE_MIN
from ...core.quantize import check_level_count, level_step
from ..kernels import Kernel


@jit(nopython=True, nogil=True)
def _spread_error_jit(
    work: npt.NDArray[np.float64],
    x: int,
    y: int,
    error: float,
    dx: npt.NDArray[np.int64],
    dy: npt.NDArray[np.int64],
    weights: npt.NDArray[np.float64],
    divisor: float,
    direction: int
) -> None:
    """Add ``error * weight / divisor`` to every in-bounds kernel target."""
    height, width = work.shape
    for k in range(dx.shape[0]):
        tx = x + dx[k] * direction
        ty = y + dy[k]
        # Targets outside the buffer lose their share
        if 0 <= tx < width and ty < height:
            work[ty, tx] += error * weights[k] / divisor


@jit(nopython=True, nogil=True)
def _error_diffusion_jit(
    work: npt.NDArray[np.float64],
    out: npt.NDArray[np.float64],
    dx: npt.NDArray[np.int64],
    dy: npt.NDArray[np.int64],
    weights: npt.NDArray[np.float64],
    divisor: float,
    low: float,
    step: float,
    level_count: int,
    serpentine: bool
) -> None:
    """
    Core error diffusion loop optimized with Numba.

    ``work`` holds the pre-quantisation samples and receives diffused error.
    Finalised levels go to ``out`` only, so a quantised pixel is never read
    back as a diffusion target.
    """
    height, width = work.shape
    top = level_count - 1

    for y in range(height):
        reverse = serpentine and (y % 2 == 1)
        direction = -1 if reverse else 1

        for i in range(width):
            x = width - 1 - i if reverse else i
            old_value = work[y, x]

            index = math.floor((old_value - low) / step + 0.5)
            if index < 0:
                index = 0
            elif index > top:
                index = top
            new_value = low + index * step

            out[y, x] = new_value
            _spread_error_jit(work, x, y, old_value - new_value, dx, dy, weights, divisor, direction)


def spread_error(
    work: npt.NDArray[np.float64],
    x: int,
    y: int,
    error: float,
    kernel: Kernel,
    reverse: bool = False
) -> None:
    """
    Distribute one residual from (x, y) into ``work`` in place.

    Exposed for inspection: this is the exact step the diffusion loop runs
    after quantising each pixel. ``reverse`` mirrors the kernel for a
    right-to-left row.
    """
    _spread_error_jit(
        work, int(x), int(y), float(error),
        kernel.dx, kernel.dy, kernel.weights, float(kernel.divisor),
        -1 if reverse else 1
    )


def error_diffusion_dither(
    samples: npt.NDArray[np.floating],
    kernel: Kernel,
    level_count: int = 2,
    serpentine: Optional[bool] = None,
    low: float = SAMPLE_MIN,
    high: float = SAMPLE_MAX
) -> npt.NDArray[np.float64]:
    """
    Apply error diffusion to a single channel.

    Pixels are visited row by row. Each one is quantised to the nearest palette
    level and its residual is pushed to the unvisited neighbours named by the
    kernel. Accumulated values are never clamped, only the emitted level is.

    Args:
        samples: 2D array of samples, left untouched.
        kernel: Diffusion kernel from the kernel table.
        level_count: Number of evenly spaced output levels (>= 2).
        serpentine: Alternate scan direction per row. None uses the kernel's default.
        low: Lowest palette level.
        high: Highest palette level.

    Returns:
        New float64 array of the same shape holding only palette levels.
    """
    level_count = check_level_count(level_count)
    step = level_step(level_count, low, high)
    if serpentine is None:
        serpentine = kernel.serpentine

    work = np.array(samples, dtype=np.float64, order='C')
    out = np.empty_like(work)

    _error_diffusion_jit(
        work,
        out,
        kernel.dx,
        kernel.dy,
        kernel.weights,
        float(kernel.divisor),
        float(low),
        float(step),
        level_count,
        bool(serpentine)
    )

    return out

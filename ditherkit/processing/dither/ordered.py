import numpy as np
import numpy.typing as npt

from ...constants import SAMPLE_MAX, SAMPLE_MIN
from ...core.quantize import check_level_count, level_step, quantize_array
from ..kernels import ThresholdMatrix


def tile_matrix(matrix: ThresholdMatrix, height: int, width: int) -> npt.NDArray[np.float64]:
    """Repeat the matrix so pixel (x, y) holds ``values[y % mh, x % mw]``."""
    mh, mw = matrix.values.shape
    tiled = np.tile(matrix.values, (height // mh + 1, width // mw + 1))
    return tiled[:height, :width]


def ordered_dither(
    samples: npt.NDArray[np.floating],
    matrix: ThresholdMatrix,
    level_count: int = 2,
    low: float = SAMPLE_MIN,
    high: float = SAMPLE_MAX
) -> npt.NDArray[np.float64]:
    """
    Apply ordered dithering using a threshold matrix.

    With two levels a pixel becomes ``high`` when it reaches the scaled
    threshold, else ``low``. With more levels the threshold offsets the sample
    by up to half a level step either way before it is quantised. A cell with
    a high threshold rounds up first, so within one step a cell behaves like
    the binary rule at ``1 - t``. Every pixel is independent, so the whole
    channel is processed in one vectorised pass.
    """
    level_count = check_level_count(level_count)
    img = np.asarray(samples, dtype=np.float64)
    height, width = img.shape
    tiled = tile_matrix(matrix, height, width)

    if level_count == 2:
        thresholds = low + tiled * (high - low)
        return np.where(img >= thresholds, high, low)

    step = level_step(level_count, low, high)
    return quantize_array(img + (tiled - 0.5) * step, level_count, low, high)

from typing import Optional, Union

import numpy as np
import numpy.typing as npt

from ...constants import SAMPLE_MAX, SAMPLE_MIN
from ...core.quantize import check_level_count, level_step, quantize_array

SeedLike = Optional[Union[int, np.random.SeedSequence]]


def random_dither(
    samples: npt.NDArray[np.floating],
    level_count: int = 2,
    seed: SeedLike = None,
    low: float = SAMPLE_MIN,
    high: float = SAMPLE_MAX
) -> npt.NDArray[np.float64]:
    """
    Apply random dithering.

    Each pixel gets an independent uniform offset in [-step/2, step/2) before
    it is quantised. Pass an integer seed (or a SeedSequence) for reproducible
    output; None draws fresh OS entropy.
    """
    level_count = check_level_count(level_count)
    img = np.asarray(samples, dtype=np.float64)
    step = level_step(level_count, low, high)

    rng = np.random.default_rng(seed)
    noise = rng.uniform(-step / 2.0, step / 2.0, size=img.shape)

    return quantize_array(img + noise, level_count, low, high)


def threshold_dither(
    samples: npt.NDArray[np.floating],
    level_count: int = 2,
    low: float = SAMPLE_MIN,
    high: float = SAMPLE_MAX
) -> npt.NDArray[np.float64]:
    """Plain nearest-level quantisation with no diffusion or noise."""
    return quantize_array(np.asarray(samples, dtype=np.float64), check_level_count(level_count), low, high)

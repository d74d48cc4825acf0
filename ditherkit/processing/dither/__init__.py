from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional, Union

import numpy as np
import numpy.typing as npt

from ...constants import DEFAULT_LEVELS, DitherMode
from ...core.buffer import PixelBuffer
from ...core.quantize import check_level_count
from ..kernels import KERNEL_TABLE, Kernel, ThresholdMatrix

from .error_diffusion import error_diffusion_dither, spread_error
from .ordered import ordered_dither
from .random import random_dither, threshold_dither

__all__ = [
    'dither',
    'uses_serpentine',
    'error_diffusion_dither',
    'ordered_dither',
    'random_dither',
    'threshold_dither',
    'spread_error',
]

ChannelFn = Callable[[npt.NDArray[np.float64], Optional[np.random.SeedSequence]], npt.NDArray[np.float64]]


def uses_serpentine(mode: Union[str, DitherMode]) -> bool:
    """Whether a mode scans serpentine by default. Only diffusion modes can."""
    entry = KERNEL_TABLE[DitherMode.from_name(mode)]
    return isinstance(entry, Kernel) and entry.serpentine


def _channel_function(
    mode: DitherMode,
    level_count: int,
    serpentine: Optional[bool],
    low: float,
    high: float
) -> ChannelFn:
    """
    Bind the engine for a mode to its table entry and palette.
    """
    entry = KERNEL_TABLE[mode]

    match mode:
        case DitherMode.RANDOM:
            return lambda samples, seed: random_dither(samples, level_count, seed, low, high)
        case DitherMode.THRESHOLD:
            return lambda samples, seed: threshold_dither(samples, level_count, low, high)
        case _ if isinstance(entry, ThresholdMatrix):
            return lambda samples, seed: ordered_dither(samples, entry, level_count, low, high)
        case _ if isinstance(entry, Kernel):
            return lambda samples, seed: error_diffusion_dither(
                samples, entry, level_count, serpentine, low, high
            )
        case _:
            raise AssertionError(f"No engine registered for {mode}")


def dither(
    buffer: PixelBuffer,
    mode: Union[str, DitherMode],
    level_count: int = DEFAULT_LEVELS,
    seed: Optional[int] = None,
    serpentine: Optional[bool] = None,
    workers: int = 1
) -> PixelBuffer:
    """
    Dither every channel of a buffer with the same mode.

    Channels are processed independently with no error shared between them,
    so they may run on separate threads. The input buffer is never modified.

    Args:
        buffer: Source samples.
        mode: Mode name or DitherMode member.
        level_count: Number of evenly spaced output levels (>= 2).
        seed: Seed for the random mode. Each channel gets its own stream
              spawned from it, so output does not depend on ``workers``.
        serpentine: Override the diffusion scan policy. None keeps the
                    kernel's default.
        workers: Number of threads used across channels.

    Returns:
        New PixelBuffer whose samples are all palette levels.
    """
    mode = DitherMode.from_name(mode)
    level_count = check_level_count(level_count)

    run_channel = _channel_function(mode, level_count, serpentine, buffer.low, buffer.high)

    channel_seeds: list[Optional[np.random.SeedSequence]] = [None] * buffer.channels
    if mode is DitherMode.RANDOM:
        channel_seeds = list(np.random.SeedSequence(seed).spawn(buffer.channels))

    inputs = [buffer.channel(c).copy() for c in range(buffer.channels)]

    if workers > 1 and buffer.channels > 1:
        with ThreadPoolExecutor(max_workers=min(workers, buffer.channels)) as pool:
            results = list(pool.map(run_channel, inputs, channel_seeds))
    else:
        results = [run_channel(samples, s) for samples, s in zip(inputs, channel_seeds)]

    return buffer.copy(np.stack(results, axis=-1))

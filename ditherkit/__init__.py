"""Reduced-palette dithering: error diffusion, ordered and random engines."""

from .constants import DEFAULT_LEVELS, DEFAULT_MODE, MODE_NAMES, DitherMode
from .core.buffer import PixelBuffer
from .core.quantize import palette_levels, quantize
from .errors import DimensionMismatch, DitherError, InvalidParameter, UnknownMode
from .processing.dither import dither
from .processing.kernels import KERNEL_TABLE, Kernel, ThresholdMatrix

__version__ = '0.1.0'

__all__ = [
    'DEFAULT_LEVELS',
    'DEFAULT_MODE',
    'MODE_NAMES',
    'DitherMode',
    'PixelBuffer',
    'quantize',
    'palette_levels',
    'dither',
    'KERNEL_TABLE',
    'Kernel',
    'ThresholdMatrix',
    'DitherError',
    'InvalidParameter',
    'UnknownMode',
    'DimensionMismatch',
]

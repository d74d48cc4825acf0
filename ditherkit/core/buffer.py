from dataclasses import dataclass
from typing import Optional

import numpy as np
import numpy.typing as npt

from ..constants import SAMPLE_MAX, SAMPLE_MIN
from ..errors import DimensionMismatch


@dataclass(eq=False)
class PixelBuffer:
    """
    Row-major grid of real-valued samples shaped (height, width, channels).

    Samples are float64 and never clamped, so accumulated diffusion error keeps
    its full precision. ``low`` and ``high`` describe the nominal sample range
    the palette levels are spread across.
    """
    width: int
    height: int
    channels: int
    data: npt.NDArray[np.float64]
    low: float = SAMPLE_MIN
    high: float = SAMPLE_MAX

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise DimensionMismatch(
                f"Buffer dimensions must be positive, got {self.width}x{self.height}"
            )
        if self.channels not in (1, 3):
            raise DimensionMismatch(f"Channel count must be 1 or 3, got {self.channels}")
        if not self.high > self.low:
            raise DimensionMismatch(f"Sample range is empty: [{self.low}, {self.high}]")

        data = np.asarray(self.data, dtype=np.float64)
        expected = (self.height, self.width, self.channels)
        if data.ndim == 2 and self.channels == 1:
            data = data[:, :, np.newaxis]
        if data.shape != expected:
            raise DimensionMismatch(f"Sample store has shape {data.shape}, expected {expected}")
        self.data = data

    @classmethod
    def from_array(
        cls,
        array: npt.ArrayLike,
        low: float = SAMPLE_MIN,
        high: float = SAMPLE_MAX
    ) -> 'PixelBuffer':
        """Wrap a (H, W) grayscale or (H, W, C) array. The samples are copied."""
        arr = np.array(array, dtype=np.float64)
        if arr.ndim == 2:
            arr = arr[:, :, np.newaxis]
        if arr.ndim != 3:
            raise DimensionMismatch(f"Expected a 2D or 3D array, got {arr.ndim} dimensions")
        height, width, channels = arr.shape
        return cls(width, height, channels, arr, low, high)

    @classmethod
    def filled(
        cls,
        width: int,
        height: int,
        value: float,
        channels: int = 1,
        low: float = SAMPLE_MIN,
        high: float = SAMPLE_MAX
    ) -> 'PixelBuffer':
        if width <= 0 or height <= 0:
            raise DimensionMismatch(f"Buffer dimensions must be positive, got {width}x{height}")
        data = np.full((height, width, channels), float(value), dtype=np.float64)
        return cls(width, height, channels, data, low, high)

    @property
    def shape(self) -> tuple[int, int, int]:
        return self.height, self.width, self.channels

    def channel(self, index: int) -> npt.NDArray[np.float64]:
        """Return a view of one channel as a (H, W) array."""
        return self.data[:, :, index]

    def copy(self, data: Optional[npt.NDArray[np.float64]] = None) -> 'PixelBuffer':
        """Copy this buffer, or build one of the same geometry around ``data``."""
        new_data = self.data.copy() if data is None else data
        return PixelBuffer(self.width, self.height, self.channels, new_data, self.low, self.high)

    def to_array(self) -> npt.NDArray[np.float64]:
        """Samples as (H, W) for grayscale or (H, W, C) for color."""
        if self.channels == 1:
            return self.data[:, :, 0].copy()
        return self.data.copy()

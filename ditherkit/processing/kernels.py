from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Union

import numpy as np
import numpy.typing as npt

from ..constants import DitherMode
from ..errors import InvalidParameter


@dataclass(frozen=True)
class Kernel:
    """
    Error-diffusion kernel.

    ``offsets`` holds (dx, dy, weight) triples relative to the current pixel for
    a left-to-right scan. Every offset must land on a pixel visited later: either
    a lower row (dy > 0) or further right on the same row (dy == 0, dx > 0).
    Serpentine scans mirror dx on right-to-left rows, which keeps that property.
    """
    name: str
    offsets: tuple[tuple[int, int, float], ...]
    divisor: float
    serpentine: bool = False
    dx: npt.NDArray[np.int64] = field(init=False, repr=False, compare=False)
    dy: npt.NDArray[np.int64] = field(init=False, repr=False, compare=False)
    weights: npt.NDArray[np.float64] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not self.offsets:
            raise InvalidParameter(f"Kernel '{self.name}' has no offsets")
        if not self.divisor > 0:
            raise InvalidParameter(f"Kernel '{self.name}' divisor must be positive, got {self.divisor}")
        for dx, dy, weight in self.offsets:
            if dy < 0 or (dy == 0 and dx <= 0):
                raise InvalidParameter(
                    f"Kernel '{self.name}' offset ({dx}, {dy}) points at an already visited pixel"
                )
            if weight < 0:
                raise InvalidParameter(f"Kernel '{self.name}' has negative weight {weight}")

        # Contiguous arrays for the jitted diffusion loop
        object.__setattr__(self, 'dx', _frozen(np.array([o[0] for o in self.offsets], dtype=np.int64)))
        object.__setattr__(self, 'dy', _frozen(np.array([o[1] for o in self.offsets], dtype=np.int64)))
        object.__setattr__(self, 'weights', _frozen(np.array([o[2] for o in self.offsets], dtype=np.float64)))

    @property
    def reach(self) -> int:
        """Number of rows below the current one that receive error."""
        return int(self.dy.max())


@dataclass(frozen=True, eq=False)
class ThresholdMatrix:
    """
    Ordered-dither threshold matrix.

    ``values`` are normalised to the open interval (0, 1) so the same matrix
    serves any sample range or level count. Pixel (x, y) reads
    ``values[y % height, x % width]``.
    """
    name: str
    values: npt.NDArray[np.float64]

    def __post_init__(self):
        values = np.array(self.values, dtype=np.float64)
        if values.ndim != 2 or values.size == 0:
            raise InvalidParameter(f"Threshold matrix '{self.name}' must be a non-empty 2D array")
        if np.any(values <= 0.0) or np.any(values >= 1.0):
            raise InvalidParameter(f"Threshold matrix '{self.name}' values must lie strictly inside (0, 1)")
        object.__setattr__(self, 'values', _frozen(values))

    @property
    def height(self) -> int:
        return self.values.shape[0]

    @property
    def width(self) -> int:
        return self.values.shape[1]

    @classmethod
    def from_indices(cls, name: str, indices: npt.ArrayLike) -> 'ThresholdMatrix':
        """Build a matrix from a permutation of 0 .. n-1, centring each cell."""
        arr = np.asarray(indices, dtype=np.float64)
        return cls(name, (arr + 0.5) / arr.size)


def _frozen(arr: np.ndarray) -> np.ndarray:
    arr.setflags(write=False)
    return arr


# Kernels
#           X   7
#       3   5   1      (/16)
FLOYD_STEINBERG = Kernel('floyd-steinberg', (
    (1, 0, 7),
    (-1, 1, 3), (0, 1, 5), (1, 1, 1),
), 16)

# Only 6/8 of the error is spread, the rest is dropped on purpose
#           X   1   1
#       1   1   1
#           1          (/8)
ATKINSON = Kernel('atkinson', (
    (1, 0, 1), (2, 0, 1),
    (-1, 1, 1), (0, 1, 1), (1, 1, 1),
    (0, 2, 1),
), 8)

JARVIS_JUDICE_NINKE = Kernel('jarvis-judice-ninke', (
    (1, 0, 7), (2, 0, 5),
    (-2, 1, 3), (-1, 1, 5), (0, 1, 7), (1, 1, 5), (2, 1, 3),
    (-2, 2, 1), (-1, 2, 3), (0, 2, 5), (1, 2, 3), (2, 2, 1),
), 48)

STUCKI = Kernel('stucki', (
    (1, 0, 8), (2, 0, 4),
    (-2, 1, 2), (-1, 1, 4), (0, 1, 8), (1, 1, 4), (2, 1, 2),
    (-2, 2, 1), (-1, 2, 2), (0, 2, 4), (1, 2, 2), (2, 2, 1),
), 42)

BURKES = Kernel('burkes', (
    (1, 0, 8), (2, 0, 4),
    (-2, 1, 2), (-1, 1, 4), (0, 1, 8), (1, 1, 4), (2, 1, 2),
), 32)

SIERRA = Kernel('sierra', (
    (1, 0, 5), (2, 0, 3),
    (-2, 1, 2), (-1, 1, 4), (0, 1, 5), (1, 1, 4), (2, 1, 2),
    (-1, 2, 2), (0, 2, 3), (1, 2, 2),
), 32)

SIERRA_TWO_ROW = Kernel('sierra-two-row', (
    (1, 0, 4), (2, 0, 3),
    (-2, 1, 1), (-1, 1, 2), (0, 1, 3), (1, 1, 2), (2, 1, 1),
), 16)

SIERRA_LITE = Kernel('sierra-lite', (
    (1, 0, 2),
    (-1, 1, 1), (0, 1, 1),
), 4)

# Whole residual carried to the right-hand neighbour, rows are independent
ONE_DIMENSIONAL = Kernel('one-dimensional', (
    (1, 0, 1),
), 1)

# Matrices
BAYER_2x2 = ThresholdMatrix.from_indices('bayer-2x2', [
    [0, 2],
    [3, 1],
])

BAYER_4x4 = ThresholdMatrix.from_indices('bayer-4x4', [
    [ 0,  8,  2, 10],
    [12,  4, 14,  6],
    [ 3, 11,  1,  9],
    [15,  7, 13,  5],
])

BAYER_8x8 = ThresholdMatrix.from_indices('bayer-8x8', [
    [ 0, 32,  8, 40,  2, 34, 10, 42],
    [48, 16, 56, 24, 50, 18, 58, 26],
    [12, 44,  4, 36, 14, 46,  6, 38],
    [60, 28, 52, 20, 62, 30, 54, 22],
    [ 3, 35, 11, 43,  1, 33,  9, 41],
    [51, 19, 59, 27, 49, 17, 57, 25],
    [15, 47,  7, 39, 13, 45,  5, 37],
    [63, 31, 55, 23, 61, 29, 53, 21],
])


KernelEntry = Optional[Union[Kernel, ThresholdMatrix]]

# Random and threshold modes need no table data
KERNEL_TABLE: Mapping[DitherMode, KernelEntry] = MappingProxyType({
    DitherMode.FLOYD_STEINBERG: FLOYD_STEINBERG,
    DitherMode.ATKINSON: ATKINSON,
    DitherMode.JARVIS_JUDICE_NINKE: JARVIS_JUDICE_NINKE,
    DitherMode.STUCKI: STUCKI,
    DitherMode.BURKES: BURKES,
    DitherMode.SIERRA: SIERRA,
    DitherMode.SIERRA_LITE: SIERRA_LITE,
    DitherMode.SIERRA_TWO_ROW: SIERRA_TWO_ROW,
    DitherMode.ONE_DIMENSIONAL: ONE_DIMENSIONAL,
    DitherMode.BAYER_2X2: BAYER_2x2,
    DitherMode.BAYER_4X4: BAYER_4x4,
    DitherMode.BAYER_8X8: BAYER_8x8,
    DitherMode.RANDOM: None,
    DitherMode.THRESHOLD: None,
})


def lookup(mode: Union[str, DitherMode]) -> KernelEntry:
    """Return the kernel or matrix registered for a mode name."""
    return KERNEL_TABLE[DitherMode.from_name(mode)]

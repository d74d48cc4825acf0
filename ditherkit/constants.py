from enum import Enum

from .errors import UnknownMode

# Native sample range of decoded 8-bit images
SAMPLE_MIN: float = 0.0
SAMPLE_MAX: float = 255.0

# Defaults shared by the CLI, pipeline and TUI
DEFAULT_LEVELS: int = 2
DEFAULT_MODE: str = 'floyd-steinberg'

IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.webp', '.bmp', '.tif', '.tiff'}


class DitherMode(str, Enum):
    FLOYD_STEINBERG = 'floyd-steinberg'
    ATKINSON = 'atkinson'
    JARVIS_JUDICE_NINKE = 'jarvis-judice-ninke'
    STUCKI = 'stucki'
    BURKES = 'burkes'
    SIERRA = 'sierra'
    SIERRA_LITE = 'sierra-lite'
    SIERRA_TWO_ROW = 'sierra-two-row'
    ONE_DIMENSIONAL = 'one-dimensional'
    BAYER_2X2 = 'bayer-2x2'
    BAYER_4X4 = 'bayer-4x4'
    BAYER_8X8 = 'bayer-8x8'
    RANDOM = 'random'
    THRESHOLD = 'threshold'

    @classmethod
    def from_name(cls, name: 'str | DitherMode') -> 'DitherMode':
        """
        Resolve a mode from its registry name.

        Matching ignores case and accepts '_' for '-', so 'Floyd_Steinberg'
        and 'floyd-steinberg' are the same mode.
        """
        if isinstance(name, cls):
            return name
        key = str(name).strip().lower().replace('_', '-')
        try:
            return cls(key)
        except ValueError:
            raise UnknownMode(str(name)) from None


MODE_NAMES: tuple[str, ...] = tuple(mode.value for mode in DitherMode)

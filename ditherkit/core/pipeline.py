import logging
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from pathlib import Path
from typing import Iterable, Optional, Union

import numpy as np
from PIL import Image

from ..constants import DEFAULT_LEVELS, DEFAULT_MODE, DitherMode
from ..processing.dither import dither
from .buffer import PixelBuffer
from .utils import get_output_filename

logger = logging.getLogger(__name__)


def buffer_from_image(img: Image.Image, grayscale: bool = False) -> PixelBuffer:
    """
    Decode a PIL image into a float sample buffer.

    Grayscale gives one channel ('L'); otherwise the image is brought to 'RGB'
    and gives three. Alpha is dropped.
    """
    target_mode = 'L' if grayscale else 'RGB'
    if img.mode != target_mode:
        img = img.convert(target_mode)
    return PixelBuffer.from_array(np.asarray(img, dtype=np.float64))


def image_from_buffer(buffer: PixelBuffer) -> Image.Image:
    """Round samples to 8-bit and wrap them as an 'L' or 'RGB' image."""
    arr = np.clip(np.rint(buffer.to_array()), 0, 255).astype(np.uint8)
    return Image.fromarray(arr, 'L' if buffer.channels == 1 else 'RGB')


def apply_dither(
    img: Image.Image,
    mode: Union[str, DitherMode] = DEFAULT_MODE,
    levels: int = DEFAULT_LEVELS,
    seed: Optional[int] = None,
    serpentine: Optional[bool] = None,
    grayscale: bool = False,
    workers: int = 1
) -> Image.Image:
    """
    Dither a PIL Image and return the quantised image.
    """
    mode = DitherMode.from_name(mode)
    source = buffer_from_image(img, grayscale=grayscale)
    logger.debug(
        "Dithering %dx%d image (%d channel(s)) with %s, %d levels",
        source.width, source.height, source.channels, mode.value, levels
    )
    result = dither(source, mode, levels, seed=seed, serpentine=serpentine, workers=workers)
    return image_from_buffer(result)


def dither_image(
    input_path: Union[str, Path],
    output_path: Optional[Union[str, Path]] = None,
    mode: Union[str, DitherMode] = DEFAULT_MODE,
    levels: int = DEFAULT_LEVELS,
    seed: Optional[int] = None,
    serpentine: Optional[bool] = None,
    grayscale: bool = False,
    workers: int = 1
) -> Path:
    """
    Dither an image file and write the result.

    Args:
        input_path: Path to input image file
        output_path: Optional path for output file. If None, generated from input filename.
        mode: Dithering mode name.
        levels: Number of output levels per channel (>= 2).
        seed: Random seed for reproducible results in random mode.
        serpentine: Override the scan policy of error diffusion modes.
        grayscale: Convert to a single luminance channel before dithering.
        workers: Threads used across color channels.

    Returns:
        Path to output file
    """
    mode = DitherMode.from_name(mode)

    try:
        img = Image.open(input_path)
        img.load()
    except Exception as e:
        raise ValueError(f"Failed to open image: {e}")

    result = apply_dither(
        img,
        mode=mode,
        levels=levels,
        seed=seed,
        serpentine=serpentine,
        grayscale=grayscale,
        workers=workers
    )

    final_output_path: Path
    if output_path is None:
        final_output_path = get_output_filename(input_path, mode.value)
    else:
        final_output_path = Path(output_path)

    # Save with appropriate format
    if final_output_path.suffix.lower() in ['.jpg', '.jpeg']:
        result.save(final_output_path, 'JPEG', quality=95)
    elif final_output_path.suffix.lower() == '.png':
        result.save(final_output_path, 'PNG')
    else:
        result.save(final_output_path)

    logger.info("Wrote %s", final_output_path)
    return final_output_path


def dither_files(
    input_paths: Iterable[Union[str, Path]],
    workers: int = 1,
    **options
) -> list[Path]:
    """
    Dither several images, each on its own worker thread.

    Outputs are named automatically. The first failure cancels every image that
    has not started yet and is re-raised; results are returned in input order.
    """
    if 'output_path' in options:
        raise TypeError("dither_files() names outputs itself; output_path is not accepted")

    paths = [Path(p) for p in input_paths]
    mode = DitherMode.from_name(options.get('mode', DEFAULT_MODE))

    # Reserve output names up front so concurrent jobs never pick the same file
    reserved: set[Path] = set()
    outputs = []
    for path in paths:
        output = get_output_filename(path, mode.value, reserved)
        reserved.add(output)
        outputs.append(output)

    with ThreadPoolExecutor(max_workers=max(1, workers)) as pool:
        futures = [
            pool.submit(dither_image, path, output, **options)
            for path, output in zip(paths, outputs)
        ]
        _, pending = wait(futures, return_when=FIRST_EXCEPTION)

        for path, future in zip(paths, futures):
            if future.done() and not future.cancelled() and future.exception() is not None:
                for other in pending:
                    other.cancel()
                logger.error("Batch aborted while processing %s", path)
                raise future.exception()

    return [future.result() for future in futures]

from pathlib import Path
from typing import AbstractSet, Union


def get_output_filename(
    input_path: Union[str, Path],
    mode: str = 'dither',
    reserved: AbstractSet[Path] = frozenset()
) -> Path:
    """
    Generate output filename with a -<mode> suffix, avoiding overwrites.

    Args:
        input_path: Path to input image
        mode: Mode name appended to the stem
        reserved: Paths already promised to other jobs, treated as existing

    Returns:
        Path object for output file
    """
    path = Path(input_path)
    stem = path.stem
    suffix = path.suffix
    directory = path.parent

    output_path = directory / f"{stem}-{mode}{suffix}"

    # If file exists, append number
    counter = 1
    while output_path.exists() or output_path in reserved:
        output_path = directory / f"{stem}-{mode}-{counter}{suffix}"
        counter += 1

    return output_path

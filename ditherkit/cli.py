import logging
import sys
from typing import Optional

import click

from .constants import DEFAULT_LEVELS, DEFAULT_MODE, MODE_NAMES
from .core.pipeline import dither_files, dither_image


class ModeChoice(click.Choice):
    """Mode choice that also accepts '_' in place of '-'."""

    def convert(self, value, param, ctx):
        if isinstance(value, str):
            value = value.strip().replace('_', '-')
        return super().convert(value, param, ctx)


@click.command()
@click.argument('images', nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option(
    '--mode', '-m',
    type=ModeChoice(MODE_NAMES, case_sensitive=False),
    default=DEFAULT_MODE,
    show_default=True,
    help='Dithering mode to use.'
)
@click.option(
    '--levels', '-l',
    type=click.IntRange(min=2),
    default=DEFAULT_LEVELS,
    show_default=True,
    help='Number of output levels per channel (2 = 1-bit).'
)
@click.option(
    '--seed',
    type=int,
    default=None,
    help='Random seed for reproducible results in random mode.'
)
@click.option(
    '--serpentine/--raster',
    default=None,
    help='Scan order for error diffusion modes. Defaults to the mode\'s own policy.'
)
@click.option(
    '--grayscale/--color',
    default=False,
    show_default=True,
    help='Dither a single luminance channel instead of R, G and B separately.'
)
@click.option(
    '--workers', '-j',
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help='Worker threads (across images in a batch, across channels for one image).'
)
@click.option(
    '--output', '-o',
    type=click.Path(dir_okay=False, writable=True),
    default=None,
    help='Output file path. Only valid with a single image. Defaults to automatic naming.'
)
@click.option(
    '--verbose', '-v',
    is_flag=True,
    help='Log progress to stderr.'
)
def main(
    images: tuple[str, ...],
    mode: str,
    levels: int,
    seed: Optional[int],
    serpentine: Optional[bool],
    grayscale: bool,
    workers: int,
    output: Optional[str],
    verbose: bool
) -> None:
    """Reduce IMAGES to a few tone levels with dithering.

    Each IMAGE is a path to an input image file (PNG, JPG, ...). Results are
    written next to the input as <name>-<mode><ext> unless --output is given.

    Modes:

    - Error diffusion: floyd-steinberg, atkinson, jarvis-judice-ninke, stucki,
      burkes, sierra, sierra-lite, sierra-two-row, one-dimensional

    - Ordered: bayer-2x2, bayer-4x4, bayer-8x8

    - Other: random (use --seed to reproduce), threshold (no dithering)
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s'
    )

    if output is not None and len(images) > 1:
        click.secho("Error: --output can only be used with a single image", fg='red', err=True)
        sys.exit(2)

    options = dict(mode=mode, levels=levels, seed=seed, serpentine=serpentine, grayscale=grayscale)

    try:
        if len(images) == 1:
            output_paths = [dither_image(images[0], output_path=output, workers=workers, **options)]
        else:
            output_paths = dither_files(images, workers=workers, **options)
    except Exception as e:
        click.secho(f"Error: {e}", fg='red', err=True)
        sys.exit(1)

    for output_path in output_paths:
        click.secho(f"✓ Dithered image saved to: {output_path}", fg='green')


if __name__ == '__main__':
    main()

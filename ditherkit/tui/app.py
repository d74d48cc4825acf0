from pathlib import Path
from typing import Optional

import click
from textual.app import App

from .screens import DitheringScreen, FileSelectionScreen


class DitherApp(App):
    TITLE = "ditherkit"

    def __init__(self, initial_image: Optional[str] = None):
        super().__init__()
        self.initial_image = initial_image

    def on_mount(self):
        if self.initial_image:
            self.push_screen(DitheringScreen(Path(self.initial_image)))
        else:
            self.push_screen(FileSelectionScreen())


@click.command()
@click.argument('image', required=False, type=click.Path(exists=True, dir_okay=False))
def main(image: Optional[str]) -> None:
    """Interactive dithering preview. Opens IMAGE, or lists images in the current directory."""
    saved = DitherApp(image).run()
    if saved is not None:
        click.secho(f"✓ Dithered image saved to: {saved}", fg='green')


if __name__ == '__main__':
    main()

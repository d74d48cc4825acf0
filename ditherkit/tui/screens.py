import logging
from pathlib import Path
from typing import Any, Optional, Tuple, cast

import numpy as np
from PIL import Image
from rich.style import Style
from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Vertical, VerticalScroll
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Input, Label, ListItem, ListView, Select, Static, Switch

from ..constants import DEFAULT_LEVELS, DEFAULT_MODE, IMAGE_EXTENSIONS, MODE_NAMES
from ..core.pipeline import apply_dither
from ..core.utils import get_output_filename

logger = logging.getLogger(__name__)

NO_FILES_LABEL = "No image files found in current directory"

SCAN_CHOICES = {
    'mode default': None,
    'serpentine': True,
    'raster': False,
}


class FileSelectionScreen(Screen):
    CSS = """
    FileSelectionScreen {
        align: center middle;
    }
    #picker {
        width: 70%;
        height: 75%;
        border: round $secondary;
    }
    #picker-title, #picker-hint {
        width: 100%;
        content-align: center middle;
        text-style: bold;
    }
    #file-list {
        height: 1fr;
    }
    """

    BINDINGS = [
        Binding("q", "app.quit", "Quit"),
    ]

    def __init__(self, directory: Path = Path('.')):
        super().__init__()
        self.directory = directory

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="picker"):
            yield Label("Pick an image", id="picker-title")
            yield ListView(id="file-list")
        yield Label("ditherkit-tui <image> skips this list", id="picker-hint")
        yield Footer()

    def list_images(self) -> list[Path]:
        """Image files in the directory, skipping our own preview outputs."""
        return sorted(
            f for f in self.directory.iterdir()
            if f.is_file() and f.suffix.lower() in IMAGE_EXTENSIONS
            and not f.stem.endswith('-preview')
        )

    def on_mount(self):
        files = self.list_images()

        list_view = self.query_one("#file-list", ListView)
        for f in files:
            list_view.append(ListItem(Label(f.name), name=f.name))

        if not files:
            list_view.append(ListItem(Label(NO_FILES_LABEL)))

    def on_list_view_selected(self, event: ListView.Selected):
        filename = event.item.name
        if not filename:
            return

        file_path = (self.directory / filename).resolve()
        self.app.push_screen(DitheringScreen(file_path))


class DitheringScreen(Screen):
    CSS = """
    #controls {
        dock: left;
        width: 34;
        padding: 0 1;
        border-right: tall $secondary;
    }
    #controls Label {
        margin-top: 1;
    }
    #controls .title {
        text-style: bold reverse;
        width: 100%;
    }
    #btn-save {
        margin-top: 2;
        width: 100%;
    }
    #canvas {
        align: center middle;
        overflow: auto;
    }
    """

    BINDINGS = [
        Binding("s", "save_output", "Save"),
        Binding("r", "refresh_preview", "Redraw"),
        Binding("escape", "back", "Back"),
        Binding("q", "app.quit", "Quit"),
    ]

    def __init__(self, image_path: Path):
        super().__init__()
        self.image_path = image_path

        self.original_image = Image.open(self.image_path)
        if self.original_image.mode not in ('RGB', 'L'):
            self.original_image = self.original_image.convert('RGB')

        self.preview_path = self.image_path.parent / f"{self.image_path.stem}-preview.png"
        self.update_timer = None

    def compose(self) -> ComposeResult:
        yield Header()

        with VerticalScroll(id="controls"):
            yield Label(self.image_path.name, classes="title")

            yield Label("Mode")
            yield Select.from_values(MODE_NAMES, value=DEFAULT_MODE, id="mode")

            yield Label("Levels per channel")
            yield Input(value=str(DEFAULT_LEVELS), type="integer", id="levels")

            yield Label("Scan order")
            yield Select.from_values(list(SCAN_CHOICES), value='mode default', id="scan")

            yield Label("Grayscale")
            yield Switch(value=True, id="grayscale")

            yield Label("Seed")
            yield Input(placeholder="unseeded", type="integer", id="seed")

            yield Button("Save (s)", id="btn-save", variant="success")

        with Container(id="canvas"):
            yield Static(id="preview")

        yield Footer()

    def on_mount(self):
        self.update_preview()

    def on_input_changed(self, event: Input.Changed):
        if self.update_timer is not None:
            self.update_timer.stop()
        self.update_timer = self.set_timer(0.4, self.update_preview)

    def on_switch_changed(self, event: Switch.Changed):
        self.update_preview()

    def on_select_changed(self, event: Select.Changed):
        self.update_preview()

    def on_button_pressed(self, event: Button.Pressed):
        if event.button.id == "btn-save":
            self.action_save_output()

    def action_refresh_preview(self):
        self.update_preview()

    def action_back(self):
        if len(self.app.screen_stack) > 2:
            self.app.pop_screen()
        else:
            self.app.exit()

    def _get_dither_params(self) -> dict[str, Any]:
        """Read the dithering options from the sidebar widgets."""
        mode_val = self.query_one("#mode", Select).value
        mode = str(mode_val) if mode_val != Select.BLANK else DEFAULT_MODE

        try:
            levels = max(2, int(self.query_one("#levels", Input).value))
        except ValueError:
            levels = DEFAULT_LEVELS

        scan_val = self.query_one("#scan", Select).value
        serpentine = SCAN_CHOICES.get(str(scan_val)) if scan_val != Select.BLANK else None

        seed_str = self.query_one("#seed", Input).value
        try:
            seed: Optional[int] = int(seed_str) if seed_str.strip() else None
        except ValueError:
            seed = None

        return {
            "mode": mode,
            "levels": levels,
            "serpentine": serpentine,
            "grayscale": self.query_one("#grayscale", Switch).value,
            "seed": seed,
        }

    def _get_preview_target_size(self) -> Tuple[int, int]:
        """Fit the image to the preview area, two pixel rows per character cell."""
        container = self.query_one("#canvas")
        width = max(20, (container.size.width or 80) - 4)
        height = max(10, (container.size.height or 40) - 2)

        img_w, img_h = self.original_image.size
        scale = min(width / img_w, height * 2 / img_h)

        new_w = int(img_w * scale)
        new_h = int(img_h * scale)
        if new_h % 2 != 0:
            new_h -= 1

        return max(1, new_w), max(2, new_h)

    def update_preview(self):
        try:
            params = self._get_dither_params()
            target_w, target_h = self._get_preview_target_size()

            # Dither at preview resolution, the error pattern is what we want to see
            preview_input = self.original_image.resize((target_w, target_h), Image.Resampling.BILINEAR)
            result_img = apply_dither(preview_input, **params)
            result_img.save(self.preview_path)

            self.query_one("#preview", Static).update(self.image_to_blocks(result_img))
        except Exception as e:
            logger.debug("Preview update failed: %s", e)
            self.notify(f"Preview failed: {e}", severity="error")

    def image_to_blocks(self, img: Image.Image) -> Text:
        """Render an image as half-block characters, top pixel as foreground."""
        pixels = np.asarray(img.convert('RGB'))
        height, width = pixels.shape[:2]

        text = Text()
        for y in range(0, height, 2):
            for x in range(width):
                r1, g1, b1 = cast(Tuple[int, int, int], tuple(int(v) for v in pixels[y, x]))
                if y + 1 < height:
                    r2, g2, b2 = cast(Tuple[int, int, int], tuple(int(v) for v in pixels[y + 1, x]))
                else:
                    r2, g2, b2 = 0, 0, 0

                text.append("▀", style=Style(color=f"rgb({r1},{g1},{b1})", bgcolor=f"rgb({r2},{g2},{b2})"))
            text.append("\n")

        return text

    def action_save_output(self):
        """Save to the derived output filename and quit."""
        try:
            self.notify("Generating full resolution output...")
            params = self._get_dither_params()
            result_img = apply_dither(self.original_image, **params)

            final_path = get_output_filename(self.image_path, params["mode"])
            result_img.save(final_path)

            self.app.exit(final_path)
        except Exception as e:
            self.notify(f"Error saving: {e}", severity="error")

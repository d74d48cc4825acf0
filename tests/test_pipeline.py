import numpy as np
import pytest
from PIL import Image

from ditherkit.core.buffer import PixelBuffer
from ditherkit.core.pipeline import (
    apply_dither,
    buffer_from_image,
    dither_files,
    dither_image,
    image_from_buffer,
)
from ditherkit.core.utils import get_output_filename
from ditherkit.errors import UnknownMode


def _gradient_image(mode: str = 'RGB') -> Image.Image:
    ramp = np.tile(np.linspace(0, 255, 32).astype(np.uint8), (16, 1))
    if mode == 'L':
        return Image.fromarray(ramp, 'L')
    return Image.fromarray(np.dstack([ramp, ramp[:, ::-1], np.full_like(ramp, 128)]), 'RGB')


def test_buffer_from_rgb_image():
    buf = buffer_from_image(_gradient_image())
    assert buf.shape == (16, 32, 3)
    assert buf.data.dtype == np.float64


def test_buffer_from_image_grayscale():
    buf = buffer_from_image(_gradient_image(), grayscale=True)
    assert buf.channels == 1


def test_alpha_is_dropped():
    img = Image.new('RGBA', (4, 3), (10, 20, 30, 40))
    buf = buffer_from_image(img)
    assert buf.channels == 3
    assert buf.data[0, 0].tolist() == [10.0, 20.0, 30.0]


def test_image_from_buffer_rounds_and_clips():
    buf = PixelBuffer.from_array([[127.5, 300.0, -4.0]])
    img = image_from_buffer(buf)
    assert img.mode == 'L'
    assert np.asarray(img).tolist() == [[128, 255, 0]]


def test_apply_dither_keeps_size_and_mode():
    img = _gradient_image()
    result = apply_dither(img, mode='atkinson')
    assert result.size == img.size
    assert result.mode == 'RGB'
    assert set(np.unique(np.asarray(result))) <= {0, 255}


def test_apply_dither_levels():
    result = apply_dither(_gradient_image('L'), mode='bayer-4x4', levels=4, grayscale=True)
    assert result.mode == 'L'
    assert set(np.unique(np.asarray(result))) <= {0, 85, 170, 255}


def test_apply_dither_unknown_mode():
    with pytest.raises(UnknownMode):
        apply_dither(_gradient_image(), mode='spiral')


def test_dither_image_auto_names_output(tmp_path):
    src = tmp_path / "photo.png"
    _gradient_image().save(src)

    first = dither_image(src, mode='stucki')
    second = dither_image(src, mode='stucki')

    assert first == tmp_path / "photo-stucki.png"
    assert second == tmp_path / "photo-stucki-1.png"
    assert Image.open(first).size == (32, 16)


def test_dither_image_explicit_output(tmp_path):
    src = tmp_path / "photo.png"
    _gradient_image().save(src)
    out = tmp_path / "out.jpg"

    assert dither_image(src, out, mode='random', seed=4) == out
    assert Image.open(out).format == 'JPEG'


def test_dither_image_rejects_unreadable_file(tmp_path):
    bogus = tmp_path / "not-an-image.png"
    bogus.write_text("hello")
    with pytest.raises(ValueError, match="Failed to open image"):
        dither_image(bogus)


def test_dither_files_batch(tmp_path):
    sources = []
    for name in ("a.png", "b.png", "c.png"):
        path = tmp_path / name
        _gradient_image().save(path)
        sources.append(path)

    outputs = dither_files(sources, workers=3, mode='burkes', grayscale=True)

    assert outputs == [tmp_path / "a-burkes.png", tmp_path / "b-burkes.png", tmp_path / "c-burkes.png"]
    assert all(Image.open(p).mode == 'L' for p in outputs)


def test_dither_files_same_input_twice_gets_distinct_outputs(tmp_path):
    src = tmp_path / "a.png"
    _gradient_image().save(src)
    outputs = dither_files([src, src], workers=2, mode='threshold')
    assert outputs == [tmp_path / "a-threshold.png", tmp_path / "a-threshold-1.png"]


def test_dither_files_raises_first_failure(tmp_path):
    good = tmp_path / "good.png"
    _gradient_image().save(good)
    bad = tmp_path / "bad.png"
    bad.write_text("nope")

    with pytest.raises(ValueError, match="Failed to open image"):
        dither_files([bad, good], workers=1)


def test_dither_files_rejects_output_path(tmp_path):
    with pytest.raises(TypeError):
        dither_files([tmp_path / "x.png"], output_path=tmp_path / "y.png")


def test_output_filename_skips_existing(tmp_path):
    (tmp_path / "cat-sierra.jpg").touch()
    assert get_output_filename(tmp_path / "cat.jpg", 'sierra') == tmp_path / "cat-sierra-1.jpg"


def test_output_filename_respects_reserved(tmp_path):
    reserved = {tmp_path / "cat-sierra.jpg", tmp_path / "cat-sierra-1.jpg"}
    assert get_output_filename(tmp_path / "cat.jpg", 'sierra', reserved) == tmp_path / "cat-sierra-2.jpg"

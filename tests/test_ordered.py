import numpy as np
import pytest

from ditherkit.processing.dither.ordered import ordered_dither, tile_matrix
from ditherkit.processing.kernels import BAYER_2x2, BAYER_4x4, BAYER_8x8, ThresholdMatrix


def test_tiling_wraps_around():
    tiled = tile_matrix(BAYER_2x2, 3, 5)
    assert tiled.shape == (3, 5)
    for y in range(3):
        for x in range(5):
            assert tiled[y, x] == BAYER_2x2.values[y % 2, x % 2]


def test_bayer_2x2_flat_gray():
    img = np.full((4, 4), 128.0)
    result = ordered_dither(img, BAYER_2x2)
    # Thresholds are 31.875, 159.375 / 223.125, 95.625
    assert result.tolist() == [
        [255.0, 0.0, 255.0, 0.0],
        [0.0, 255.0, 0.0, 255.0],
        [255.0, 0.0, 255.0, 0.0],
        [0.0, 255.0, 0.0, 255.0],
    ]


def test_binary_compares_against_scaled_threshold():
    """A sample exactly on the threshold goes high."""
    threshold = BAYER_2x2.values[0, 0] * 255.0
    result = ordered_dither(np.array([[threshold, threshold - 0.01]]), BAYER_2x2)
    assert result[0, 0] == 255.0
    # Second pixel reads the 0.625 cell
    assert result[0, 1] == 0.0


def test_multi_level_perturbs_within_one_step():
    img = np.full((2, 2), 100.0)
    result = ordered_dither(img, BAYER_2x2, level_count=3)
    # Offsets are (t - 0.5) * 127.5: -47.8, +15.9 / +47.8, -15.9
    assert result.tolist() == [
        [0.0, 127.5],
        [127.5, 127.5],
    ]


@pytest.mark.parametrize("matrix", [BAYER_2x2, BAYER_4x4, BAYER_8x8], ids=lambda m: m.name)
def test_multi_level_step_is_binary_rule_on_mirrored_matrix(matrix):
    """Between two adjacent levels a cell at threshold t rounds up where the binary rule at 1 - t goes high."""
    img = np.arange(0.5, 127.5, 2.0).reshape(8, 8)
    mirrored = ThresholdMatrix(f"{matrix.name}-mirrored", 1.0 - matrix.values)
    multi = ordered_dither(img, matrix, level_count=3)
    binary = ordered_dither(img, mirrored, level_count=2, low=0.0, high=127.5)
    assert np.array_equal(multi, binary)


@pytest.mark.parametrize("matrix", [BAYER_2x2, BAYER_4x4, BAYER_8x8], ids=lambda m: m.name)
def test_gradient_tone_tracks_input(matrix):
    img = np.tile(np.linspace(0, 255, 64), (64, 1))
    result = ordered_dither(img, matrix)
    assert set(np.unique(result)) <= {0.0, 255.0}
    # Averaged over blocks one tile wide, the output follows the ramp
    block_means = result.reshape(64, -1, matrix.width).mean(axis=(0, 2))
    ramp_means = img[0].reshape(-1, matrix.width).mean(axis=1)
    assert np.corrcoef(block_means, ramp_means)[0, 1] > 0.95


def test_bayer_8x8_covers_64_gray_levels():
    """Each step of 4 gray levels lights one more cell of the tile."""
    counts = []
    for value in range(0, 256, 4):
        out = ordered_dither(np.full((8, 8), float(value)), BAYER_8x8)
        counts.append(int((out == 255.0).sum()))
    assert counts == sorted(counts)
    assert counts[0] == 0
    assert counts[-1] == 63


def test_input_not_modified():
    img = np.full((3, 3), 77.0)
    ordered_dither(img, BAYER_4x4, level_count=5)
    assert np.all(img == 77.0)

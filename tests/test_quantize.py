import numpy as np
import pytest

from ditherkit.core.quantize import palette_levels, quantize, quantize_array
from ditherkit.errors import InvalidParameter


def test_binary_levels_are_range_ends():
    assert list(palette_levels(2)) == [0.0, 255.0]


def test_multi_level_palette_is_evenly_spaced():
    assert list(palette_levels(4)) == [0.0, 85.0, 170.0, 255.0]
    assert list(palette_levels(3)) == [0.0, 127.5, 255.0]


def test_quantize_returns_level_and_signed_error():
    assert quantize(128.0, 2) == (255.0, -127.0)
    assert quantize(100.0, 2) == (0.0, 100.0)
    assert quantize(100.0, 4) == (85.0, 15.0)


def test_binary_midpoint_goes_high():
    """Ties resolve toward the higher level."""
    assert quantize(127.5, 2) == (255.0, -127.5)
    level, _ = quantize(127.49, 2)
    assert level == 0.0


def test_multi_level_tie_goes_high():
    # Halfway between 85 and 170
    assert quantize(127.5, 4) == (170.0, -42.5)


def test_out_of_range_samples_clamp_level_but_keep_error():
    """Accumulated error can push samples past the range; only the level is bound."""
    assert quantize(300.0, 2) == (255.0, 45.0)
    assert quantize(-20.0, 2) == (0.0, -20.0)


def test_custom_range():
    assert quantize(0.6, 2, low=0.0, high=1.0) == (1.0, pytest.approx(-0.4))


@pytest.mark.parametrize("levels", [1, 0, -3])
def test_level_count_below_two_is_rejected(levels):
    with pytest.raises(InvalidParameter):
        quantize(10.0, levels)


@pytest.mark.parametrize("levels", [2.5, 2.0, None, "4"])
def test_non_integer_level_count_is_rejected(levels):
    with pytest.raises(InvalidParameter):
        quantize(10.0, levels)


def test_numpy_integer_level_count_is_accepted():
    assert quantize(100.0, np.int64(4)) == (85.0, 15.0)


def test_vectorised_matches_scalar():
    samples = np.linspace(-40.0, 300.0, 157)
    for levels in (2, 3, 5, 16):
        expected = [quantize(s, levels)[0] for s in samples]
        assert np.array_equal(quantize_array(samples, levels), expected)

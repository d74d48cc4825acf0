import numpy as np
import pytest

from ditherkit.processing.dither.random import random_dither, threshold_dither


def test_same_seed_reproduces():
    img = np.full((32, 32), 128.0)
    assert np.array_equal(random_dither(img, seed=1234), random_dither(img, seed=1234))


def test_different_seed_differs():
    img = np.full((32, 32), 128.0)
    assert not np.array_equal(random_dither(img, seed=1), random_dither(img, seed=2))


def test_output_in_palette():
    img = np.random.default_rng(0).uniform(0, 255, size=(20, 20))
    result = random_dither(img, level_count=4, seed=5)
    assert set(np.unique(result)) <= {0.0, 85.0, 170.0, 255.0}


def test_noise_never_flips_range_ends():
    """Half-step noise can't push black to white or white to black."""
    assert np.all(random_dither(np.zeros((16, 16)), seed=9) == 0.0)
    assert np.all(random_dither(np.full((16, 16), 255.0), seed=9) == 255.0)


def test_mean_tone_is_preserved():
    img = np.full((64, 64), 64.0)
    result = random_dither(img, seed=42)
    assert result.mean() == pytest.approx(64.0, abs=10.0)


def test_seed_sequence_accepted():
    img = np.full((8, 8), 128.0)
    seq = np.random.SeedSequence(77)
    assert np.array_equal(random_dither(img, seed=seq), random_dither(img, seed=np.random.SeedSequence(77)))


def test_threshold_is_plain_quantisation():
    img = np.array([[0.0, 127.0, 127.5, 200.0]])
    assert threshold_dither(img).tolist() == [[0.0, 0.0, 255.0, 255.0]]
    assert threshold_dither(img, level_count=3).tolist() == [[0.0, 127.5, 127.5, 255.0]]

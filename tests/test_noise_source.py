import numpy as np
import pytest

from surface_components.noise_source import NOISE_TYPES, NoiseSource

XS, YS = np.meshgrid(np.linspace(0, 10, 17), np.linspace(0, 10, 9))


def test_none_is_silent():
    source = NoiseSource("none", seed=1)
    assert source.sample(1.3, 2.7) == 0.0
    assert not source.sample_grid(XS, YS).any()


@pytest.mark.parametrize("noise_type", ["perlin", "simplex", "voronoi"])
def test_same_seed_same_samples(noise_type):
    first = NoiseSource(noise_type, seed=42).sample_grid(XS, YS)
    second = NoiseSource(noise_type, seed=42).sample_grid(XS, YS)
    np.testing.assert_array_equal(first, second)


@pytest.mark.parametrize("noise_type", ["perlin", "simplex", "voronoi"])
def test_samples_are_bounded_and_varied(noise_type):
    values = NoiseSource(noise_type, seed=7).sample_grid(XS + 0.37, YS + 0.61)
    assert values.shape == XS.shape
    assert np.all(np.abs(values) <= 1.5)
    assert values.std() > 0


@pytest.mark.parametrize("noise_type", ["simplex", "voronoi"])
def test_different_seeds_differ(noise_type):
    first = NoiseSource(noise_type, seed=1).sample_grid(XS + 0.37, YS + 0.61)
    second = NoiseSource(noise_type, seed=2).sample_grid(XS + 0.37, YS + 0.61)
    assert not np.allclose(first, second)


def test_grid_matches_point_samples():
    source = NoiseSource("voronoi", seed=3)
    grid = source.sample_grid(XS, YS)
    assert grid[2, 5] == pytest.approx(source.sample(XS[2, 5], YS[2, 5]))


def test_missing_seed_is_drawn_and_recorded():
    source = NoiseSource("perlin")
    assert isinstance(source.seed, int)
    replay = NoiseSource("perlin", seed=source.seed)
    assert replay.sample(0.3, 0.7) == source.sample(0.3, 0.7)


def test_unknown_noise_type():
    assert "voronoi" in NOISE_TYPES
    with pytest.raises(ValueError):
        NoiseSource("worley", seed=0)

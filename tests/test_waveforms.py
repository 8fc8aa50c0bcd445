import numpy as np
import pytest

from surface_components.waveforms import (
    TWO_PI, WAVE_FUNCTIONS, get_wave_function, square_wave, triangle_wave, sawtooth_wave,
)

SAMPLES = np.linspace(-20, 20, 2001)


@pytest.mark.parametrize("wave_type", sorted(WAVE_FUNCTIONS))
def test_output_stays_in_unit_range(wave_type):
    values = get_wave_function(wave_type)(SAMPLES)
    assert values.min() >= -1.0
    assert values.max() <= 1.0


@pytest.mark.parametrize("wave_type", sorted(WAVE_FUNCTIONS))
def test_periodic_over_two_pi(wave_type):
    wave = get_wave_function(wave_type)
    np.testing.assert_allclose(wave(SAMPLES), wave(SAMPLES + TWO_PI), atol=1e-9)


@pytest.mark.parametrize("wave_type", sorted(WAVE_FUNCTIONS))
def test_seam_matches_start(wave_type):
    wave = get_wave_function(wave_type)
    # 2*pi*5 is what the builder feeds in at u=1 with frequency 5
    assert wave(TWO_PI * 5) == pytest.approx(wave(0.0), abs=1e-9)


def test_square_never_zero():
    assert square_wave(0.0) == 1.0
    assert square_wave(np.pi) == -1.0
    assert square_wave(np.pi / 2) == 1.0
    assert square_wave(3 * np.pi / 2) == -1.0
    assert set(np.unique(square_wave(SAMPLES))) == {-1.0, 1.0}


def test_triangle_extremes():
    assert triangle_wave(0.0) == pytest.approx(-1.0)
    assert triangle_wave(np.pi) == pytest.approx(1.0)
    assert triangle_wave(np.pi / 2) == pytest.approx(0.0)


def test_sawtooth_ramp():
    assert sawtooth_wave(0.0) == pytest.approx(-1.0)
    assert sawtooth_wave(np.pi) == pytest.approx(0.0)
    assert sawtooth_wave(-np.pi / 2) == pytest.approx(0.5)


def test_scalar_in_scalar_out():
    assert isinstance(get_wave_function("sine")(1.0), float)


def test_unknown_wave_type():
    with pytest.raises(ValueError):
        get_wave_function("noise")

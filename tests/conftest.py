import pytest

from vase_params import VaseParameters


@pytest.fixture
def plain_params():
    """A smooth cone: no waves, twist, noise or formula shaping"""
    return VaseParameters(
        height=120.0,
        top_diameter=60.0,
        bottom_diameter=90.0,
        radial_amplitude=0.0,
        vertical_amplitude=0.0,
        twist_angle=0.0,
        surface_noise_type="none",
        surface_noise_amount=0.0,
        radial_segments=16,
        vertical_segments=6,
        radius_formula="r",
        vertical_deformation_formula="y",
    )


@pytest.fixture
def small_params():
    return VaseParameters(radial_segments=12, vertical_segments=8)

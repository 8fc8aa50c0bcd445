import logging
import math
import numpy as np

from vase_params import VaseParameters
from surface_components.formula_evaluator import CompiledFormula, FormulaEvaluationError
from surface_components.noise_source import NoiseSource
from surface_components.vase_mesh import VaseMesh
from surface_components.waveforms import get_wave_function

logger = logging.getLogger(__name__)

# Noise coordinates are stretched so that scale=1 gives ~10 bumps around the vase
NOISE_DOMAIN_SCALE = 10.0


def twist_amount(height_factor, twist_angle, twist_rate="linear"):
    """Accumulated twist in degrees at a height fraction"""
    if twist_rate == "linear":
        return height_factor * twist_angle
    if twist_rate == "exponential":
        return np.power(height_factor, 2) * twist_angle
    raise ValueError(f"Unknown twist rate: {twist_rate!r}")


def grid_indices(radial_segments: int, vertical_segments: int) -> np.ndarray:
    """
    Two outward-facing triangles per grid quad.

    Vertex (i, j) lives at j * (radial_segments + 1) + i, so every ring
    carries a duplicate seam vertex at i == radial_segments.
    """
    row = radial_segments + 1
    i, j = np.meshgrid(np.arange(radial_segments), np.arange(vertical_segments))
    a = (j * row + i).ravel()
    b = a + 1
    d = a + row
    c = d + 1

    faces = np.empty((2 * a.size, 3), dtype=np.int64)
    faces[0::2] = np.stack([a, d, b], axis=1)
    faces[1::2] = np.stack([b, d, c], axis=1)
    return faces


class SurfaceBuilder:
    """Samples the vase surface on a (radial, vertical) grid."""

    def __init__(self, params: VaseParameters, radius_formula: CompiledFormula,
                 vertical_formula: CompiledFormula, noise_source: NoiseSource):
        self.params = params
        self.radius_formula = radius_formula
        self.vertical_formula = vertical_formula
        self.noise_source = noise_source
        self.formula_failures = 0

    def sample_grid(self):
        """Pre-formula quantities for every grid point, each shaped (rows, cols)"""
        p = self.params
        u = np.arange(p.radial_segments + 1) / p.radial_segments
        v = np.arange(p.vertical_segments + 1) / p.vertical_segments
        uu, vv = np.meshgrid(u, v)

        angle = uu * 2 * np.pi
        base_radius = p.bottom_diameter / 2 + (p.top_diameter / 2 - p.bottom_diameter / 2) * vv

        radial_wave = get_wave_function(p.radial_wave_type)
        radius = base_radius + p.radial_amplitude * radial_wave(angle * p.radial_frequency)

        vertical_wave = get_wave_function(p.vertical_wave_type)
        vertical_offset = p.vertical_amplitude * vertical_wave(vv * p.vertical_frequency * 2 * np.pi)

        direction = 1.0 if p.twist_direction == "clockwise" else -1.0
        twisted_angle = angle + direction * twist_amount(vv, p.twist_angle, p.twist_rate) * np.pi / 180

        if p.surface_noise_type == "none":
            noise_offset = np.zeros_like(uu)
        else:
            # the seam column reuses u=0 so the ring closes
            noise_u = uu.copy()
            noise_u[:, -1] = 0.0
            stretch = p.surface_noise_scale * NOISE_DOMAIN_SCALE
            noise_offset = self.noise_source.sample_grid(noise_u * stretch, vv * stretch)
            noise_offset = noise_offset * p.surface_noise_amount

        return {
            'height_factor': vv,
            'radius': radius,
            'vertical_offset': vertical_offset,
            'twisted_angle': twisted_angle,
            'noise_offset': noise_offset,
        }

    def build(self) -> VaseMesh:
        p = self.params
        grid = self.sample_grid()

        radius = grid['radius'].ravel()
        vertical_offset = grid['vertical_offset'].ravel()
        twisted_angle = grid['twisted_angle'].ravel()
        noise_offset = grid['noise_offset'].ravel()
        base_y = p.height * grid['height_factor'].ravel()

        vertices = np.empty((radius.size, 3), dtype=float)
        scope = {"r": 0.0, "y": 0.0, "height": float(p.height), "angle": 0.0, "pi": math.pi}
        self.formula_failures = 0

        for k in range(radius.size):
            scope["r"] = float(radius[k])
            scope["y"] = float(base_y[k])
            scope["angle"] = float(twisted_angle[k])
            cos_a = math.cos(scope["angle"])
            sin_a = math.sin(scope["angle"])

            try:
                r = self.radius_formula.evaluate(scope)
                vertical_deformation = self.vertical_formula.evaluate(scope)
            except FormulaEvaluationError as e:
                self._record_failure(k, e)
                vertices[k] = (scope["r"] * cos_a,
                               base_y[k] + vertical_offset[k],
                               scope["r"] * sin_a)
                continue

            y = base_y[k] + vertical_deformation + vertical_offset[k]
            r += noise_offset[k]
            vertices[k] = (r * cos_a, y, r * sin_a)

        if self.formula_failures:
            logger.warning(f"Formula evaluation failed at {self.formula_failures} of "
                           f"{radius.size} points, used base geometry there")

        faces = grid_indices(p.radial_segments, p.vertical_segments)
        return VaseMesh(vertices=vertices, faces=faces)

    def _record_failure(self, index, error):
        if self.formula_failures == 0:
            row = self.params.radial_segments + 1
            logger.warning(f"Error evaluating formula at grid point "
                           f"(i={index % row}, j={index // row}): {error}")
        self.formula_failures += 1


def build_surface(params: VaseParameters, radius_formula: CompiledFormula,
                  vertical_formula: CompiledFormula, noise_source: NoiseSource) -> VaseMesh:
    return SurfaceBuilder(params, radius_formula, vertical_formula, noise_source).build()

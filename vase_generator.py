import logging
import os
import numpy as np
from stl import mesh, Mode
from typing import Optional

from vase_params import VaseParameters
from surface_components.formula_evaluator import FormulaCache
from surface_components.noise_source import NoiseSource
from surface_components.normal_computer import compute_vertex_normals
from surface_components.surface_builder import build_surface
from surface_components.tab_extruder import extrude_tabs
from surface_components.vase_mesh import VaseMesh

logger = logging.getLogger(__name__)


class VaseMeshGenerator:
    """
    Runs a full generation pass: formulas, surface grid, rim tabs, normals.

    The formula cache is the only state kept between calls. Noise is
    rebuilt on every call from ``seed`` (or the generator default), so two
    calls with the same parameters and seed return identical meshes.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self.formula_cache = FormulaCache()
        self.last_noise_seed = None

    def generate(self, params: VaseParameters, seed: Optional[int] = None) -> VaseMesh:
        params.validate()

        radius_formula, vertical_formula = self.formula_cache.get(
            params.radius_formula, params.vertical_deformation_formula)

        noise_seed = seed if seed is not None else self.seed
        noise_source = NoiseSource(params.surface_noise_type, seed=noise_seed)
        self.last_noise_seed = noise_source.seed

        vase = build_surface(params, radius_formula, vertical_formula, noise_source)

        if params.has_tabs:
            vase = extrude_tabs(vase, params.radial_segments, params.vertical_segments,
                                top_tab_height=params.top_tab_height,
                                bottom_tab_height=params.bottom_tab_height)

        vase = compute_vertex_normals(vase)
        logger.info(f"Generated vase: {vase.vertex_count:,} vertices, {vase.face_count:,} faces")
        return vase

    @staticmethod
    def to_stl_mesh(vase: VaseMesh) -> mesh.Mesh:
        stl_mesh = mesh.Mesh(np.zeros(vase.face_count, dtype=mesh.Mesh.dtype))
        stl_mesh.vectors[:] = vase.triangles()
        return stl_mesh

    def save_stl(self, vase: VaseMesh, path: str, ascii: bool = False) -> str:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        stl_mesh = self.to_stl_mesh(vase)
        stl_mesh.save(path, mode=Mode.ASCII if ascii else Mode.BINARY)

        if not os.path.exists(path):
            raise RuntimeError(f"STL file was not created at: {path}")
        logger.info(f"Saved vase STL: {path} ({os.path.getsize(path):,} bytes)")
        return path

import logging
import numpy as np
from typing import Optional
from noise import pnoise2, snoise2
from scipy.spatial import cKDTree

logger = logging.getLogger(__name__)

NOISE_NONE = 'none'
NOISE_PERLIN = 'perlin'
NOISE_SIMPLEX = 'simplex'
NOISE_VORONOI = 'voronoi'

NOISE_TYPES = [NOISE_NONE, NOISE_PERLIN, NOISE_SIMPLEX, NOISE_VORONOI]

# Voronoi feature points are scattered over one cell and tiled around it
VORONOI_CELL_SIZE = 10.0
VORONOI_POINT_COUNT = 64


class NoiseSource:
    """Seeded 2D coherent noise, built once per surface generation."""

    def __init__(self, noise_type=NOISE_NONE, seed: Optional[int] = None,
                 octaves=1, persistence=0.5):
        if noise_type not in NOISE_TYPES:
            raise ValueError(f"Unknown noise type: {noise_type!r}")

        if seed is None:
            seed = int(np.random.default_rng().integers(0, 2**31 - 1))
            logger.debug(f"No noise seed given, drew {seed}")

        self.noise_type = noise_type
        self.seed = int(seed)
        self.octaves = octaves
        self.persistence = persistence
        self.rng = np.random.default_rng(self.seed)

        # perlin permutes through base, simplex is shifted in its domain
        self.base = self.seed % 256
        self.offset_x, self.offset_y = self.rng.uniform(-1000.0, 1000.0, size=2)

        if noise_type == NOISE_VORONOI:
            self._init_voronoi()

    def _init_voronoi(self):
        points = self.rng.random((VORONOI_POINT_COUNT, 2)) * VORONOI_CELL_SIZE
        shifts = np.array([(dx, dy) for dx in (-1, 0, 1) for dy in (-1, 0, 1)]) * VORONOI_CELL_SIZE
        tiled = (points[None, :, :] + shifts[:, None, :]).reshape(-1, 2)
        self.voronoi_tree = cKDTree(tiled)
        # Typical feature point spacing, scales distances into [-1, 1]
        self.voronoi_radius = VORONOI_CELL_SIZE / np.sqrt(VORONOI_POINT_COUNT)

    def sample(self, x: float, y: float) -> float:
        """Noise value at (x, y), roughly in [-1, 1]"""
        if self.noise_type == NOISE_NONE:
            return 0.0

        if self.noise_type == NOISE_PERLIN:
            return float(pnoise2(x, y, octaves=self.octaves,
                                 persistence=self.persistence, base=self.base))

        if self.noise_type == NOISE_SIMPLEX:
            return float(snoise2(x + self.offset_x, y + self.offset_y,
                                 octaves=self.octaves, persistence=self.persistence))

        # voronoi: distance to the nearest feature point
        point = np.mod([x, y], VORONOI_CELL_SIZE)
        distance, _ = self.voronoi_tree.query(point)
        return float(np.clip(distance / self.voronoi_radius, 0.0, 1.0) * 2 - 1)

    def sample_grid(self, xs, ys) -> np.ndarray:
        """Samples for every (x, y) pair; xs and ys share a shape"""
        xs = np.asarray(xs, dtype=float)
        ys = np.asarray(ys, dtype=float)
        if self.noise_type == NOISE_NONE:
            return np.zeros(xs.shape)

        if self.noise_type == NOISE_VORONOI:
            points = np.mod(np.stack([xs.ravel(), ys.ravel()], axis=1), VORONOI_CELL_SIZE)
            distances, _ = self.voronoi_tree.query(points)
            values = np.clip(distances / self.voronoi_radius, 0.0, 1.0) * 2 - 1
            return values.reshape(xs.shape)

        values = [self.sample(x, y) for x, y in zip(xs.ravel(), ys.ravel())]
        return np.array(values, dtype=float).reshape(xs.shape)

import numpy as np
from dataclasses import dataclass, replace
from typing import Optional, Tuple


@dataclass(frozen=True)
class VaseMesh:
    """Flat vertex/face buffers plus per-vertex normals once computed"""

    vertices: np.ndarray                 # (N, 3) float positions, y is up
    faces: np.ndarray                    # (M, 3) vertex indices
    normals: Optional[np.ndarray] = None  # (N, 3) unit normals

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def face_count(self) -> int:
        return len(self.faces)

    @property
    def bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        return self.vertices.min(axis=0), self.vertices.max(axis=0)

    def with_normals(self, normals: np.ndarray) -> "VaseMesh":
        return replace(self, normals=normals)

    def triangles(self) -> np.ndarray:
        """(M, 3, 3) corner positions per face"""
        return self.vertices[self.faces]

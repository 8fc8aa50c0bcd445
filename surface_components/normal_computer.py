import numpy as np

from surface_components.vase_mesh import VaseMesh


def face_normals(vertices: np.ndarray, faces: np.ndarray) -> np.ndarray:
    """Unnormalised face normals, their length is twice the triangle area"""
    v0 = vertices[faces[:, 0]]
    v1 = vertices[faces[:, 1]]
    v2 = vertices[faces[:, 2]]
    return np.cross(v1 - v0, v2 - v0)


def compute_vertex_normals(mesh: VaseMesh) -> VaseMesh:
    """Area-weighted average of the adjacent face normals at every vertex"""
    normals = np.zeros_like(mesh.vertices, dtype=float)
    if len(mesh.faces):
        per_face = face_normals(mesh.vertices, mesh.faces)
        for corner in range(3):
            np.add.at(normals, mesh.faces[:, corner], per_face)

    lengths = np.linalg.norm(normals, axis=1, keepdims=True)
    # Unused or fully degenerate vertices keep a zero normal
    np.divide(normals, lengths, out=normals, where=lengths > 0)
    return mesh.with_normals(normals)

import numpy as np

from surface_components.vase_mesh import VaseMesh


def _ring_wall(lower_start: int, upper_start: int, radial_segments: int) -> np.ndarray:
    # Same outward winding as the surface grid, lower ring below upper ring
    i = np.arange(radial_segments)
    a = lower_start + i
    b = a + 1
    d = upper_start + i
    c = d + 1

    faces = np.empty((2 * radial_segments, 3), dtype=np.int64)
    faces[0::2] = np.stack([a, d, b], axis=1)
    faces[1::2] = np.stack([b, d, c], axis=1)
    return faces


def extrude_tabs(mesh: VaseMesh, radial_segments: int, vertical_segments: int,
                 top_tab_height: float = 0.0, bottom_tab_height: float = 0.0) -> VaseMesh:
    """
    Add straight rims below the first ring and/or above the last ring.

    The new rings are plain copies of the grid rings shifted along y, so
    they carry whatever the formulas did to the rim but add no shaping of
    their own. Existing vertices and faces keep their indices and a new
    mesh is returned.
    """
    row = radial_segments + 1
    vertex_blocks = [mesh.vertices]
    face_blocks = [mesh.faces]
    next_index = len(mesh.vertices)

    if bottom_tab_height > 0:
        ring = mesh.vertices[:row].copy()
        ring[:, 1] -= bottom_tab_height
        vertex_blocks.append(ring)
        # the new ring sits below the original bottom ring
        face_blocks.append(_ring_wall(next_index, 0, radial_segments))
        next_index += row

    if top_tab_height > 0:
        top_start = vertical_segments * row
        ring = mesh.vertices[top_start:top_start + row].copy()
        ring[:, 1] += top_tab_height
        vertex_blocks.append(ring)
        face_blocks.append(_ring_wall(top_start, next_index, radial_segments))
        next_index += row

    return VaseMesh(vertices=np.concatenate(vertex_blocks, axis=0),
                    faces=np.concatenate(face_blocks, axis=0))

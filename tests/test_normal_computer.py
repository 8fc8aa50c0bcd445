import numpy as np
import pytest

from surface_components.normal_computer import compute_vertex_normals, face_normals
from surface_components.vase_mesh import VaseMesh


def test_single_triangle():
    mesh = VaseMesh(vertices=np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]]),
                    faces=np.array([[0, 1, 2]]))
    result = compute_vertex_normals(mesh)
    np.testing.assert_allclose(result.normals, [[0, 0, 1]] * 3)
    assert mesh.normals is None


def test_face_normal_length_is_twice_area():
    vertices = np.array([[0.0, 0.0, 0.0], [2.0, 0.0, 0.0], [0.0, 3.0, 0.0]])
    normal = face_normals(vertices, np.array([[0, 1, 2]]))[0]
    assert np.linalg.norm(normal) == pytest.approx(6.0)


def test_shared_vertex_is_area_weighted():
    vertices = np.array([
        [0.0, 0.0, 0.0],
        [1.0, 0.0, 0.0],
        [0.0, 1.0, 0.0],   # small triangle in the xy plane
        [0.0, 0.0, -3.0],  # large triangle in the xz plane
    ])
    faces = np.array([[0, 1, 2], [0, 3, 1]])
    normals = compute_vertex_normals(VaseMesh(vertices, faces)).normals

    # cross products have length 1 and 3
    expected = np.array([0.0, 0.0, 1.0]) + np.array([0.0, -3.0, 0.0])
    expected /= np.linalg.norm(expected)
    np.testing.assert_allclose(normals[0], expected)
    np.testing.assert_allclose(np.linalg.norm(normals, axis=1), 1.0)


def test_unreferenced_vertex_keeps_zero_normal():
    vertices = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [5.0, 5.0, 5.0]])
    normals = compute_vertex_normals(VaseMesh(vertices, np.array([[0, 1, 2]]))).normals
    np.testing.assert_array_equal(normals[3], [0.0, 0.0, 0.0])


def test_normals_cover_tab_vertices(plain_params):
    from vase_generator import VaseMeshGenerator
    from dataclasses import replace

    params = replace(plain_params, top_tab_height=4.0, bottom_tab_height=4.0)
    mesh = VaseMeshGenerator(seed=0).generate(params)
    assert mesh.normals.shape == mesh.vertices.shape
    np.testing.assert_allclose(np.linalg.norm(mesh.normals, axis=1), 1.0)

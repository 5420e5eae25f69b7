"""Tests for the half-edge mesh."""
import numpy as np
import pytest

from brushgeom.hull import HalfEdgeMesh, HorizonError


P0 = (0.0, 0.0, 0.0)
P1 = (1.0, 0.0, 0.0)
P2 = (0.0, 1.0, 0.0)
BELOW = (0.0, 0.0, -1.0)
ABOVE = (0.2, 0.2, 0.5)


@pytest.fixture
def tetra():
    return HalfEdgeMesh.from_tetrahedron(P0, P1, P2, BELOW)


@pytest.fixture
def bipyramid(tetra):
    """Tetrahedron with a second apex attached over its base."""
    new_faces = tetra.attach_point_for_faces(ABOVE, tetra.faces_seeing(ABOVE))
    return tetra, new_faces


def _centroid(mesh):
    return mesh.vertex_positions().mean(axis=0)


class TestTetrahedron:

    def test_counts(self, tetra):
        assert tetra.face_count == 4
        assert tetra.vertex_count == 4
        assert len(tetra.edges) == 12
        assert not tetra.is_empty

    def test_closed(self, tetra):
        assert tetra.is_closed()

    def test_faces_point_outward(self, tetra):
        center = _centroid(tetra)
        for face in tetra.faces.values():
            assert face.directed_distance_to(center) < 0.0
            assert np.linalg.norm(face.normal) == pytest.approx(1.0)

    def test_base_face_normal(self, tetra):
        assert tetra.face(0).normal == pytest.approx([0.0, 0.0, 1.0])

    def test_apex_in_front_raises(self):
        with pytest.raises(ValueError):
            HalfEdgeMesh.from_tetrahedron(P0, P1, P2, (0.0, 0.0, 1.0))

    def test_flat_apex_raises(self):
        with pytest.raises(ValueError):
            HalfEdgeMesh.from_tetrahedron(P0, P1, P2, (1.0, 1.0, 0.0))

    def test_empty_mesh(self):
        mesh = HalfEdgeMesh.empty()
        assert mesh.is_empty
        assert mesh.face_count == 0
        assert mesh.vertex_positions().shape == (0, 3)
        vertices, triangles = mesh.to_arrays()
        assert triangles.shape == (0, 3)


class TestVisibility:

    def test_point_above_sees_only_base(self, tetra):
        assert tetra.faces_seeing(ABOVE) == [0]

    def test_interior_point_sees_nothing(self, tetra):
        assert tetra.faces_seeing((0.1, 0.1, -0.1)) == []

    def test_point_on_face_is_not_visible(self, tetra):
        assert not tetra.face(0).can_see((0.3, 0.3, 0.0))

    def test_epsilon_band(self):
        mesh = HalfEdgeMesh.from_tetrahedron(P0, P1, P2, BELOW, epsilon=0.1)
        assert not mesh.face(0).can_see((0.2, 0.2, 0.05))
        assert mesh.face(0).can_see((0.2, 0.2, 0.15))


class TestAttach:
    """Replacing light faces with a fan to the new point."""

    def test_fan_replaces_light_faces(self, bipyramid):
        mesh, new_faces = bipyramid
        assert len(new_faces) == 3
        assert mesh.face_count == 6
        assert mesh.vertex_count == 5
        assert not mesh.contains_face(0)
        assert all(mesh.contains_face(fid) for fid in new_faces)

    def test_stays_closed_and_outward(self, bipyramid):
        mesh, _ = bipyramid
        assert mesh.is_closed()
        center = _centroid(mesh)
        for face in mesh.faces.values():
            assert face.directed_distance_to(center) < 0.0

    def test_new_faces_meet_at_point(self, bipyramid):
        mesh, new_faces = bipyramid
        apex = max(mesh.vertices)
        assert mesh.vertices[apex].position == pytest.approx(ABOVE)
        for fid in new_faces:
            assert apex in mesh.face(fid).vertices

    def test_two_light_faces(self, tetra):
        # Far out along +x and +z, in front of the base and the slanted face
        point = (2.0, 0.1, 1.0)
        light = tetra.faces_seeing(point)
        assert len(light) == 2
        new_faces = tetra.attach_point_for_faces(point, light)
        assert len(new_faces) == 4
        assert tetra.face_count == 6
        assert tetra.is_closed()

    def test_interior_vertex_removed(self, bipyramid):
        mesh, _ = bipyramid
        # The far point sees all three upper faces; the first apex is then
        # surrounded by light faces only and disappears.
        point = (0.2, 0.2, 5.0)
        light = mesh.faces_seeing(point)
        first_apex = max(mesh.vertices)
        mesh.attach_point_for_faces(point, light)
        assert first_apex not in mesh.vertices
        assert mesh.vertex_count == 5
        assert mesh.is_closed()

    def test_to_arrays(self, bipyramid):
        mesh, _ = bipyramid
        vertices, triangles = mesh.to_arrays()
        assert vertices.shape == (5, 3)
        assert triangles.shape == (6, 3)
        assert triangles.max() == 4


class TestHorizonErrors:
    """Invalid light sets are rejected without touching the mesh."""

    def test_no_faces(self, tetra):
        with pytest.raises(HorizonError):
            tetra.attach_point_for_faces(ABOVE, [])
        assert tetra.face_count == 4

    def test_unknown_face(self, tetra):
        with pytest.raises(HorizonError):
            tetra.attach_point_for_faces(ABOVE, [0, 99])
        assert tetra.contains_face(0)

    def test_every_face_lit(self, tetra):
        with pytest.raises(HorizonError):
            tetra.attach_point_for_faces(ABOVE, list(tetra.faces))
        assert tetra.face_count == 4
        assert tetra.is_closed()

    def test_faces_touching_at_one_vertex(self, bipyramid):
        mesh, new_faces = bipyramid
        # Upper face over edge v0-v1 and lower face (v1, v3, v2) share only v1
        upper = next(f for f in new_faces if {0, 1} <= set(mesh.face(f).vertices))
        lower = next(
            fid for fid, f in mesh.faces.items()
            if fid not in new_faces and set(f.vertices) == {1, 2, 3}
        )
        before = (mesh.face_count, mesh.vertex_count, len(mesh.edges))
        with pytest.raises(HorizonError):
            mesh.attach_point_for_faces((5.0, 5.0, 5.0), [upper, lower])
        assert (mesh.face_count, mesh.vertex_count, len(mesh.edges)) == before
        assert mesh.is_closed()

    def test_is_runtime_error(self, tetra):
        with pytest.raises(RuntimeError):
            tetra.attach_point_for_faces(ABOVE, [])

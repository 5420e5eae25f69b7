"""Tests for plane-intersection vertex reconstruction."""
import numpy as np
import pytest

from brushgeom.conversion import (
    Brush,
    Entity,
    Map,
    MapWriter,
    Plane,
    VertexBuffer,
    brush_half_planes,
    brush_vertices,
    map_vertex_buffer,
    parse_map,
    unique_vertices,
)
from brushgeom.settings import GeometrySettings


def _sorted_unique(vertices):
    return sorted(tuple(round(c, 6) + 0.0 for c in v) for v in unique_vertices(vertices))


class TestBrushVertices:
    """Corner reconstruction for single brushes."""

    def test_unit_cube_corners(self, unit_cube_brush, unit_cube_corners):
        vertices = brush_vertices(unit_cube_brush.planes)
        assert _sorted_unique(vertices) == unit_cube_corners

    def test_unit_cube_keeps_every_ordering(self, unit_cube_brush):
        # 8 corners, each reached by 3! orderings of its three planes
        assert len(brush_vertices(unit_cube_brush.planes)) == 48

    def test_tetrahedron(self, tetra_brush):
        vertices = brush_vertices(tetra_brush.planes)
        assert len(vertices) == 24
        expected = [(0.0, 0.0, 0.0), (0.0, 0.0, 1.0), (0.0, 1.0, 0.0), (1.0, 0.0, 0.0)]
        assert _sorted_unique(vertices) == expected

    def test_vertices_lie_inside_every_plane(self, unit_cube_brush):
        settings = GeometrySettings()
        for v in brush_vertices(unit_cube_brush.planes, settings):
            for plane in unit_cube_brush.planes:
                assert plane.signed_distance(v) >= -settings.vertex_epsilon

    def test_cube_from_map_text(self, cube_map_text):
        brush = parse_map(cube_map_text).entities[0].brushes[0]
        corners = _sorted_unique(brush.vertices())
        assert len(corners) == 8
        for corner in corners:
            assert all(abs(c) == pytest.approx(64.0) for c in corner)

    def test_brush_method_matches_function(self, unit_cube_brush):
        assert unit_cube_brush.vertices() == brush_vertices(unit_cube_brush.planes)

    def test_repeated_calls_are_identical(self, unit_cube_brush):
        assert brush_vertices(unit_cube_brush.planes) == brush_vertices(unit_cube_brush.planes)

    def test_cut_corner_adds_vertices(self, unit_cube_brush):
        # Chop the (1, 1, 1) corner off the cube
        cut = Plane.from_normal_distance((1, 1, 1), 2.5 / np.sqrt(3.0))
        brush = Brush(planes=list(unit_cube_brush.planes) + [cut])
        corners = _sorted_unique(brush_vertices(brush.planes))
        assert (1.0, 1.0, 1.0) not in corners
        assert (0.5, 1.0, 1.0) in corners
        assert (1.0, 0.5, 1.0) in corners
        assert (1.0, 1.0, 0.5) in corners
        assert len(corners) == 10


class TestDegenerateInput:
    """Inputs that cannot bound a solid."""

    def test_too_few_planes(self, unit_cube_brush):
        assert brush_vertices(unit_cube_brush.planes[:3]) == []

    def test_empty_plane_list(self):
        assert brush_vertices([]) == []

    def test_degenerate_planes_are_ignored(self, unit_cube_brush, unit_cube_corners):
        broken = Plane((0, 0, 0), (1, 1, 1), (2, 2, 2))
        planes = list(unit_cube_brush.planes) + [broken]
        vertices = brush_vertices(planes)
        assert len(vertices) == 48
        assert _sorted_unique(vertices) == unit_cube_corners

    def test_degenerate_planes_count_against_minimum(self, unit_cube_brush):
        broken = Plane((0, 0, 0), (0, 0, 0), (0, 0, 0))
        assert brush_vertices(unit_cube_brush.planes[:3] + [broken]) == []

    def test_parallel_planes_only(self):
        planes = [
            Plane.from_normal_distance((0, 0, 1), 1.0),
            Plane.from_normal_distance((0, 0, -1), 0.0),
            Plane.from_normal_distance((0, 0, 1), 2.0),
            Plane.from_normal_distance((0, 0, -1), -1.0),
        ]
        assert brush_vertices(planes) == []

    def test_disjoint_half_spaces(self, unit_cube_brush):
        # A plane whose inside lies entirely beyond the cube's top face
        beyond = Plane.from_normal_distance((0, 0, -1), -5.0)
        planes = list(unit_cube_brush.planes) + [beyond]
        assert brush_vertices(planes) == []


class TestUniqueVertices:

    def test_keeps_first_occurrence_order(self):
        points = [(1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (1.0, 0.0, 0.0001), (0.0, 1.0, 0.0)]
        assert unique_vertices(points) == [(1.0, 0.0, 0.0), (0.0, 1.0, 0.0)]

    def test_precision(self):
        points = [(0.0, 0.0, 0.0), (0.0, 0.0, 0.01)]
        assert len(unique_vertices(points, decimals=1)) == 1
        assert len(unique_vertices(points, decimals=3)) == 2


class TestMapVertexBuffer:
    """Flattening a whole map."""

    def test_cube_map_layout(self, cube_map_text):
        buffer = map_vertex_buffer(parse_map(cube_map_text))
        assert isinstance(buffer, VertexBuffer)
        assert buffer.vertices.dtype == np.float32
        assert buffer.vertices.shape == (48, 3)
        assert buffer.groups == [range(0, 48)]

    def test_groups_follow_map_order(self, unit_cube_brush, tetra_brush):
        writer = MapWriter()
        far_box = writer.create_box_brush((10, 10, 10), (12, 12, 12))
        game_map = Map(entities=[
            Entity(properties={"classname": "worldspawn"}, brushes=[unit_cube_brush, tetra_brush]),
            Entity(properties={"classname": "info_player_start"}),
            Entity(properties={"classname": "func_wall"}, brushes=[far_box]),
        ])
        buffer = map_vertex_buffer(game_map)
        assert buffer.groups == [range(0, 48), range(48, 72), range(72, 120)]
        assert buffer.vertex_count == 120
        far = buffer.brush_vertices(2)
        assert far.min() == pytest.approx(10.0)
        assert far.max() == pytest.approx(12.0)

    def test_empty_brush_gets_empty_range(self, unit_cube_brush):
        game_map = Map(entities=[
            Entity(brushes=[Brush(planes=unit_cube_brush.planes[:2]), unit_cube_brush]),
        ])
        buffer = map_vertex_buffer(game_map)
        assert buffer.groups == [range(0, 0), range(0, 48)]
        assert len(buffer.brush_vertices(0)) == 0

    def test_empty_map(self):
        buffer = map_vertex_buffer(Map())
        assert buffer.is_empty
        assert buffer.vertices.shape == (0, 3)
        assert buffer.groups == []


class TestHalfPlanes:

    def test_cube_half_planes(self, cube_map_text):
        half_planes = brush_half_planes(parse_map(cube_map_text))
        assert len(half_planes) == 6
        normals = sorted(tuple(round(c) + 0 for c in n) for _, n in half_planes)
        assert normals == [
            (-1, 0, 0), (0, -1, 0), (0, 0, -1),
            (0, 0, 1), (0, 1, 0), (1, 0, 0),
        ]

    def test_point_is_first_plane_point(self, cube_map_text):
        game_map = parse_map(cube_map_text)
        point, _ = brush_half_planes(game_map)[0]
        assert point == game_map.entities[0].brushes[0].planes[0].p1

    def test_degenerate_planes_skipped(self):
        brush = Brush(planes=[Plane((0, 0, 0), (1, 1, 1), (2, 2, 2))])
        assert brush_half_planes(Map(entities=[Entity(brushes=[brush])])) == []

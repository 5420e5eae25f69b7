"""
Shared test fixtures for brush geometry and convex hull tests.
"""
import itertools
import sys
from pathlib import Path

import numpy as np
import pytest

# Make the package importable without installing it
sys.path.insert(0, str(Path(__file__).parent.parent))

from brushgeom.conversion.map_writer import Brush, MapWriter
from brushgeom.conversion.plane_math import Plane


CUBE_MAP = """
// Game: Generic
// Format: Standard
// entity 0
{
"classname" "worldspawn"
// brush 0
{
( -64 -16 -64 ) ( -64 -16 -63 ) ( -64 -17 -64 ) __TB_empty 0 0 90 1 1
( 64 -64 64 ) ( 64 -64 65 ) ( 65 -64 64 ) __TB_empty 0 0 0 1 1
( -64 -16 -64 ) ( -64 -17 -64 ) ( -63 -16 -64 ) __TB_empty 0 0 0 1 -1
( 64 -48 64 ) ( 65 -48 64 ) ( 64 -49 64 ) __TB_empty 0 0 0 1 -1
( -64 64 -64 ) ( -63 64 -64 ) ( -64 64 -63 ) __TB_empty 0 0 0 1 1
( 64 -48 64 ) ( 64 -49 64 ) ( 64 -48 65 ) __TB_empty 0 0 90 1 1
}
}
"""


@pytest.fixture
def cube_map_text():
    """A worldspawn holding one 128-unit cube centred on the origin."""
    return CUBE_MAP


@pytest.fixture
def unit_cube_brush():
    """Axis-aligned unit cube from (0, 0, 0) to (1, 1, 1)."""
    return MapWriter().create_box_brush((0, 0, 0), (1, 1, 1))


@pytest.fixture
def unit_cube_corners():
    return sorted(itertools.product((0.0, 1.0), repeat=3))


@pytest.fixture
def tetra_brush():
    """Tetrahedron with corners at the origin and the three unit axes."""
    # Outward normals: -x, -y, -z and (1, 1, 1)
    return Brush(planes=[
        Plane.from_normal_distance((-1, 0, 0), 0.0),
        Plane.from_normal_distance((0, -1, 0), 0.0),
        Plane.from_normal_distance((0, 0, -1), 0.0),
        Plane.from_normal_distance((1, 1, 1), 1.0 / np.sqrt(3.0)),
    ])


@pytest.fixture
def cube_cloud():
    """Corners of a 2-unit cube plus points strictly inside it."""
    corners = [np.array(c, dtype=float) for c in itertools.product((-1.0, 1.0), repeat=3)]
    interior = [
        np.array([0.0, 0.0, 0.0]),
        np.array([0.5, -0.25, 0.1]),
        np.array([-0.7, 0.3, 0.6]),
        np.array([0.2, 0.8, -0.9]),
        np.array([-0.4, -0.6, -0.3]),
    ]
    return corners, interior


@pytest.fixture
def sphere_cloud():
    """200 points on a sphere of radius 10 plus 100 inside it (seeded)."""
    rng = np.random.default_rng(1234)
    surface = rng.normal(size=(200, 3))
    surface = 10.0 * surface / np.linalg.norm(surface, axis=1, keepdims=True)
    inner = rng.uniform(-5.0, 5.0, size=(100, 3))
    return np.vstack([surface, inner])

"""
Convex hull construction.

Public API:
    - build_convex_hull(): Hull of a point cloud as a HalfEdgeMesh
    - ConvexHullBuilder: Same, with injected GeometrySettings
    - HalfEdgeMesh: Closed triangle mesh keyed by stable ids
    - HorizonError: Raised when a point cannot be attached to a mesh
"""

from .half_edge_mesh import HalfEdgeMesh, HorizonError, Face, HalfEdge, Vertex
from .convex_hull import ConvexHullBuilder, build_convex_hull, extreme_points, seed_tetrahedron

__all__ = [
    'HalfEdgeMesh',
    'HorizonError',
    'Face',
    'HalfEdge',
    'Vertex',
    'ConvexHullBuilder',
    'build_convex_hull',
    'extreme_points',
    'seed_tetrahedron',
]

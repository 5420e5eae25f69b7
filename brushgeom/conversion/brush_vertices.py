"""
Brush vertex reconstruction.

Turns a brush's half-space representation into explicit corner points via
plane-plane-plane intersection, then flattens a whole map into the vertex
buffer layout the renderer uploads (one float32 array plus one index range
per brush).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from brushgeom.conversion.map_writer import Map
from brushgeom.conversion.plane_math import Plane, Vec3
from brushgeom.settings import DEFAULT_SETTINGS, GeometrySettings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Plane-plane-plane intersection
# ---------------------------------------------------------------------------

def _intersect_three_planes(
    n1: np.ndarray, d1: float,
    n2: np.ndarray, d2: float,
    n3: np.ndarray, d3: float,
    det_epsilon: float,
) -> Optional[np.ndarray]:
    """Solve n_i . x = d_i by Cramer's rule, or None if the triple is singular."""
    det = np.linalg.det(np.column_stack((n1, n2, n3)))
    if abs(det) < det_epsilon:
        return None
    return (
        d1 * np.cross(n2, n3)
        + d2 * np.cross(n3, n1)
        + d3 * np.cross(n1, n2)
    ) / det


def brush_vertices(planes: Sequence[Plane],
                   settings: Optional[GeometrySettings] = None) -> List[Vec3]:
    """Compute the corner points of the convex solid bounded by ``planes``.

    Every ordered triple of distinct planes with pairwise different normals is
    intersected; candidates lying more than ``settings.vertex_epsilon`` outside
    any plane are discarded.

    The result is NOT deduplicated: a corner where three planes meet shows up
    once per ordering of those planes (and more often where additional planes
    pass through it).  Callers that need unique corners use unique_vertices().

    Degenerate planes are ignored.  Fewer than 4 usable planes yields [].
    """
    settings = settings or DEFAULT_SETTINGS
    usable = [p for p in planes if not p.is_degenerate]
    if len(usable) < len(planes):
        logger.debug("Ignoring %d degenerate plane(s)", len(planes) - len(usable))
    if len(usable) < 4:
        return []

    # Intersections use inward normals so d_i matches signed_distance()
    normals = [np.array(p.inward_normal, dtype=np.float64) for p in usable]
    dists = [float(np.dot(np.array(p.p1), n)) for p, n in zip(usable, normals)]
    normal_keys = [p.inward_normal for p in usable]

    candidates: List[np.ndarray] = []
    count = len(usable)
    for i in range(count):
        for j in range(count):
            if i == j or normal_keys[i] == normal_keys[j]:
                continue
            for k in range(count):
                if i == k or j == k:
                    continue
                if normal_keys[i] == normal_keys[k] or normal_keys[j] == normal_keys[k]:
                    continue
                pt = _intersect_three_planes(
                    normals[i], dists[i],
                    normals[j], dists[j],
                    normals[k], dists[k],
                    settings.determinant_epsilon,
                )
                if pt is not None:
                    candidates.append(pt)

    if not candidates:
        return []

    # Keep points on or inside every half-space: dot(v - p, n_in) >= -eps
    pts = np.array(candidates)
    n_mat = np.array(normals)
    depth = pts @ n_mat.T - np.array(dists)
    keep = np.all(depth >= -settings.vertex_epsilon, axis=1)

    return [tuple(float(c) for c in pt) for pt in pts[keep]]


def unique_vertices(vertices: Iterable[Vec3], decimals: int = 3) -> List[Vec3]:
    """Drop repeated points, comparing coordinates rounded to ``decimals``.

    First occurrence wins, so the output keeps input order.
    """
    seen = set()
    result: List[Vec3] = []
    for v in vertices:
        key = tuple(round(float(c), decimals) for c in v)
        if key in seen:
            continue
        seen.add(key)
        result.append(tuple(float(c) for c in v))
    return result


# ---------------------------------------------------------------------------
# Whole-map helpers
# ---------------------------------------------------------------------------

@dataclass
class VertexBuffer:
    """Flattened brush vertices for upload.

    ``vertices`` has shape (N, 3), dtype float32.  ``groups[i]`` is the index
    range of brush ``i`` (in map order, entities first) inside ``vertices``.
    """
    vertices: np.ndarray
    groups: List[range] = field(default_factory=list)

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def is_empty(self) -> bool:
        return len(self.vertices) == 0

    def brush_vertices(self, index: int) -> np.ndarray:
        group = self.groups[index]
        return self.vertices[group.start:group.stop]


def map_vertex_buffer(game_map: Map,
                      settings: Optional[GeometrySettings] = None) -> VertexBuffer:
    """Reconstruct every brush of every entity into one vertex buffer."""
    settings = settings or DEFAULT_SETTINGS
    chunks: List[List[Vec3]] = []
    groups: List[range] = []
    offset = 0
    for ei, bi, brush in game_map.iter_brushes():
        verts = brush_vertices(brush.planes, settings)
        if not verts:
            logger.warning("Entity %d brush %d produced no vertices", ei, bi)
        groups.append(range(offset, offset + len(verts)))
        chunks.append(verts)
        offset += len(verts)

    flat = [v for chunk in chunks for v in chunk]
    vertices = np.array(flat, dtype=np.float32).reshape(-1, 3)
    logger.info("Built vertex buffer: %d vertices for %d brushes", len(vertices), len(groups))
    return VertexBuffer(vertices=vertices, groups=groups)


def brush_half_planes(game_map: Map) -> List[Tuple[Vec3, Vec3]]:
    """(point on plane, outward normal) for every usable plane in the map."""
    half_planes: List[Tuple[Vec3, Vec3]] = []
    for _, _, brush in game_map.iter_brushes():
        for plane in brush.planes:
            if plane.is_degenerate:
                continue
            half_planes.append((plane.p1, plane.normal))
    return half_planes

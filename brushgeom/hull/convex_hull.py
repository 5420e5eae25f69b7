"""
Incremental 3D convex hull.

Seeds a tetrahedron from the axis-extreme points (scanning the whole input
when the extremes are flat), then repeatedly takes the point furthest outside
some face, removes every face that can see it and patches the hole with a fan
of triangles from that point to the horizon.

Usage:
    from brushgeom.hull import build_convex_hull

    mesh = build_convex_hull(points)
    if mesh.is_empty:
        ...  # fewer than 4 points, or all points coplanar
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from brushgeom.hull.half_edge_mesh import HalfEdgeMesh, HorizonError
from brushgeom.settings import DEFAULT_SETTINGS, GeometrySettings

logger = logging.getLogger(__name__)

# (index into the input list, coordinates)
IndexedPoint = Tuple[int, np.ndarray]


def _segment_to_point_dist_sq(a: np.ndarray, b: np.ndarray, target: np.ndarray) -> float:
    """Squared distance from ``target`` to the segment a-b."""
    line = b - a
    a_to_target = target - a
    t = float(np.dot(a_to_target, line))
    if t <= 0.0:
        return float(np.dot(a_to_target, a_to_target))
    length_sq = float(np.dot(line, line))
    if t >= length_sq:
        b_to_target = target - b
        return float(np.dot(b_to_target, b_to_target))
    return float(np.dot(a_to_target, a_to_target)) - t * t / length_sq


def _line_to_point_dist_sq(a: np.ndarray, b: np.ndarray, target: np.ndarray) -> float:
    """Squared distance from ``target`` to the infinite line through a and b."""
    line = b - a
    cross = np.cross(line, target - a)
    return float(np.dot(cross, cross)) / float(np.dot(line, line))


def _triangle_normal(a: np.ndarray, b: np.ndarray, c: np.ndarray) -> np.ndarray:
    return np.cross(b - a, c - a)


def _tetrahedron_volume(p0: IndexedPoint, p1: IndexedPoint,
                        p2: IndexedPoint, p3: IndexedPoint) -> float:
    normal = _triangle_normal(p0[1], p1[1], p2[1])
    return abs(float(np.dot(p3[1] - p0[1], normal))) / 6.0


def _furthest(candidates: Sequence[IndexedPoint], key: Callable[[np.ndarray], float],
              exclude: Tuple[int, ...]) -> Optional[IndexedPoint]:
    """First candidate with the largest positive ``key``; None if none is positive."""
    best = None
    best_dist = 0.0
    for cand in candidates:
        if cand[0] in exclude:
            continue
        dist = key(cand[1])
        if dist > best_dist:
            best_dist = dist
            best = cand
    return best


def extreme_points(points: Sequence[np.ndarray]) -> List[IndexedPoint]:
    """Min/max points along X, Y and Z, in that order.

    One pass over the input.  A tracker only moves on a strictly better
    coordinate, so among equal values the first point scanned wins.  That
    makes the choice depend on input order for ties, which is accepted.
    """
    trackers: List[IndexedPoint] = [(0, points[0])] * 6
    for i, pt in enumerate(points):
        for axis in range(3):
            lo, hi = 2 * axis, 2 * axis + 1
            if pt[axis] < trackers[lo][1][axis]:
                trackers[lo] = (i, pt)
            if pt[axis] > trackers[hi][1][axis]:
                trackers[hi] = (i, pt)
    return trackers


def _tetrahedron_order(p0: IndexedPoint, p1: IndexedPoint,
                       p2: IndexedPoint, p3: IndexedPoint) -> List[IndexedPoint]:
    """Order seeds so p3 lies behind the (p0, p1, p2) face."""
    normal = _triangle_normal(p0[1], p1[1], p2[1])
    if np.dot(p3[1] - p0[1], normal) < 0.0:
        return [p0, p1, p2, p3]
    return [p1, p0, p2, p3]


def seed_tetrahedron(points: Sequence[np.ndarray],
                     volume_epsilon: float = 0.0) -> Optional[List[IndexedPoint]]:
    """Pick four points spanning a tetrahedron.

    p0/p1: the furthest-apart pair of axis extremes.
    p2: the extreme furthest from segment p0-p1.
    p3: the extreme furthest from the centroid of p0, p1, p2.

    Ties among the extremes go to the first one found.  When the extremes do
    not give four distinct points with volume above ``volume_epsilon`` (one
    hull corner is not extreme on any axis), p2 and p3 are searched over all
    points instead: p2 furthest from the line p0-p1, p3 furthest from the
    plane through p0, p1, p2.

    Returns:
        The four seeds wound for HalfEdgeMesh.from_tetrahedron(), or None
        when every point lies on one plane (or one line, or one spot).
    """
    boundaries = extreme_points(points)

    p0, p1 = boundaries[0], boundaries[1]
    dist_max = float(np.sum((p0[1] - p1[1]) ** 2))
    for ia, a in enumerate(boundaries):
        for b in boundaries[ia + 1:]:
            dist = float(np.sum((a[1] - b[1]) ** 2))
            if dist > dist_max:
                dist_max = dist
                p0, p1 = a, b

    if dist_max == 0.0:
        logger.debug("All points coincide")
        return None

    used = (p0[0], p1[0])
    p2 = _furthest(boundaries, lambda p: _segment_to_point_dist_sq(p0[1], p1[1], p), used)
    if p2 is not None:
        center = (p0[1] + p1[1] + p2[1]) / 3.0
        p3 = _furthest(boundaries, lambda p: float(np.sum((p - center) ** 2)), used + (p2[0],))
        if p3 is not None and _tetrahedron_volume(p0, p1, p2, p3) > volume_epsilon:
            return _tetrahedron_order(p0, p1, p2, p3)

    indexed = list(enumerate(points))
    p2 = _furthest(indexed, lambda p: _line_to_point_dist_sq(p0[1], p1[1], p), used)
    if p2 is None:
        logger.debug("All points are collinear")
        return None

    normal = _triangle_normal(p0[1], p1[1], p2[1])
    p3 = _furthest(indexed, lambda p: abs(float(np.dot(p - p0[1], normal))), used + (p2[0],))
    volume = 0.0 if p3 is None else _tetrahedron_volume(p0, p1, p2, p3)
    if volume <= volume_epsilon:
        logger.debug("Seed tetrahedron is flat (volume %.3g)", volume)
        return None

    return _tetrahedron_order(p0, p1, p2, p3)


class ConvexHullBuilder:
    """
    Builds convex hulls of point clouds.

    Holds only settings; every build() call works on its own mesh and point
    list, so one builder can serve many independent point sets.
    """

    def __init__(self, settings: Optional[GeometrySettings] = None):
        self.settings = settings or DEFAULT_SETTINGS

    def build(self, points) -> HalfEdgeMesh:
        """Compute the convex hull of ``points``.

        Args:
            points: Sequence of 3D points (anything np.asarray accepts as (N, 3))

        Returns:
            Closed outward-facing HalfEdgeMesh.  An empty mesh
            (``mesh.is_empty``) when there are fewer than 4 points or the
            input is flat.
        """
        eps = self.settings.hull_epsilon
        pts = [np.asarray(p, dtype=np.float64) for p in points]
        if len(pts) < 4:
            logger.debug("Convex hull needs 4 points, got %d", len(pts))
            return HalfEdgeMesh.empty(eps)

        seeds = seed_tetrahedron(pts, volume_epsilon=eps)
        if seeds is None:
            logger.info("Degenerate point set (%d points); returning empty hull", len(pts))
            return HalfEdgeMesh.empty(eps)

        mesh = HalfEdgeMesh.from_tetrahedron(*(p for _, p in seeds), epsilon=eps)

        # Working set holds indices into pts. Remove seeds highest first so
        # earlier positions stay valid.
        remaining = list(range(len(pts)))
        for idx in sorted({i for i, _ in seeds}, reverse=True):
            del remaining[idx]

        remaining = [i for i in remaining if mesh.faces_seeing(pts[i])]

        queue = deque(mesh.faces.keys())
        dropped = 0
        while queue:
            face_id = queue.popleft()
            if not mesh.contains_face(face_id):
                continue
            face = mesh.face(face_id)

            visible = [i for i in remaining if face.can_see(pts[i])]
            if not visible:
                continue

            best = max(visible, key=lambda i: face.directed_distance_to(pts[i]))
            remaining.remove(best)
            apex = pts[best]

            light = mesh.faces_seeing(apex)
            lit = {i for i in remaining
                   if any(mesh.face(fid).can_see(pts[i]) for fid in light)}

            try:
                new_faces = mesh.attach_point_for_faces(apex, light)
            except HorizonError as e:
                dropped += 1
                logger.warning("Skipping hull point %d %s: %s", best, apex.tolist(), e)
                # Other points outside this face still need a visit
                queue.append(face_id)
                continue

            # Lit points that no face can see any more are inside the hull.
            # New faces are checked first; a lit point may also sit outside a
            # dark face still waiting in the queue.
            remaining = [
                i for i in remaining
                if i not in lit
                or any(mesh.face(fid).can_see(pts[i]) for fid in new_faces)
                or mesh.faces_seeing(pts[i])
            ]
            queue.extend(new_faces)

        logger.debug("Convex hull: %d vertices, %d faces, %d point(s) dropped",
                      mesh.vertex_count, mesh.face_count, dropped)
        return mesh


def build_convex_hull(points, settings: Optional[GeometrySettings] = None) -> HalfEdgeMesh:
    """Convex hull of ``points``; see ConvexHullBuilder.build()."""
    return ConvexHullBuilder(settings).build(points)

"""
Half-edge mesh for closed triangulated polytopes.

Vertices, half-edges and faces live in dictionaries keyed by integer ids
that are never reused.  Callers hold ids, never objects, so "is this face
still part of the mesh" is a dictionary lookup.

Faces are triangles wound counter-clockwise when seen from outside; the
face normal ``cross(b - a, c - a)`` points out of the solid.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set, Tuple

import numpy as np

logger = logging.getLogger(__name__)

DEFAULT_EPSILON = 1e-5


class HorizonError(RuntimeError):
    """Raised when a point cannot be attached to the mesh.

    The light faces passed to attach_point_for_faces() did not bound a
    region whose border is one simple closed loop of edges.
    """


@dataclass
class Vertex:
    id: int
    position: np.ndarray


@dataclass
class HalfEdge:
    """Directed edge ``origin -> next.origin`` on the boundary of ``face``."""
    id: int
    origin: int
    face: int
    next: int = -1
    twin: int = -1


@dataclass
class Face:
    """
    Triangular face with a cached plane.

    Attributes:
        id: Stable face id
        edges: The three boundary half-edge ids, in winding order
        vertices: Vertex ids at the corners, in winding order
        normal: Outward unit normal
        anchor: A point on the face (its first corner)
        epsilon: Visibility tolerance
    """
    id: int
    edges: Tuple[int, int, int]
    vertices: Tuple[int, int, int]
    normal: np.ndarray
    anchor: np.ndarray
    epsilon: float = DEFAULT_EPSILON

    def directed_distance_to(self, point) -> float:
        """Signed distance from the face plane, positive outside."""
        return float(np.dot(np.asarray(point, dtype=np.float64) - self.anchor, self.normal))

    def can_see(self, point) -> bool:
        """True if ``point`` lies strictly outside the face plane."""
        return self.directed_distance_to(point) > self.epsilon


def _triangle_normal(a: np.ndarray, b: np.ndarray, c: np.ndarray) -> np.ndarray:
    n = np.cross(b - a, c - a)
    ln = np.linalg.norm(n)
    if ln == 0.0:
        return n
    return n / ln


class HalfEdgeMesh:
    """
    Closed, outward-oriented triangle mesh.

    Build one with from_tetrahedron() and grow it with
    attach_point_for_faces().  empty() is the "no hull" result.
    """

    def __init__(self, epsilon: float = DEFAULT_EPSILON):
        self.epsilon = epsilon
        self.vertices: Dict[int, Vertex] = {}
        self.edges: Dict[int, HalfEdge] = {}
        self.faces: Dict[int, Face] = {}
        self._next_vertex = 0
        self._next_edge = 0
        self._next_face = 0

    # ---------------------------------------------------------------
    # Constructors
    # ---------------------------------------------------------------

    @classmethod
    def empty(cls, epsilon: float = DEFAULT_EPSILON) -> "HalfEdgeMesh":
        return cls(epsilon)

    @classmethod
    def from_tetrahedron(cls, p0, p1, p2, p3,
                         epsilon: float = DEFAULT_EPSILON) -> "HalfEdgeMesh":
        """Build a closed tetrahedron.

        ``p3`` must lie behind the plane of (p0, p1, p2) whose normal is
        ``cross(p1 - p0, p2 - p0)``.

        Raises:
            ValueError: If p3 is on or in front of that plane
        """
        pts = [np.asarray(p, dtype=np.float64) for p in (p0, p1, p2, p3)]
        side = np.dot(pts[3] - pts[0], np.cross(pts[1] - pts[0], pts[2] - pts[0]))
        if side >= 0.0:
            raise ValueError("Tetrahedron apex must lie behind the base triangle")

        mesh = cls(epsilon)
        v = [mesh._add_vertex(p) for p in pts]
        face_ids = [
            mesh._add_face(v[0], v[1], v[2]),
            mesh._add_face(v[0], v[3], v[1]),
            mesh._add_face(v[1], v[3], v[2]),
            mesh._add_face(v[2], v[3], v[0]),
        ]
        mesh._link_twins(face_ids)
        return mesh

    # ---------------------------------------------------------------
    # Queries
    # ---------------------------------------------------------------

    @property
    def is_empty(self) -> bool:
        return not self.faces

    @property
    def face_count(self) -> int:
        return len(self.faces)

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    def contains_face(self, face_id: int) -> bool:
        return face_id in self.faces

    def face(self, face_id: int) -> Face:
        return self.faces[face_id]

    def destination(self, edge_id: int) -> int:
        edge = self.edges[edge_id]
        return self.edges[edge.next].origin

    def faces_seeing(self, point) -> List[int]:
        """Ids of every face that can see ``point``."""
        return [fid for fid, f in self.faces.items() if f.can_see(point)]

    def is_closed(self) -> bool:
        """Every half-edge has a twin running the opposite way on another face."""
        for edge in self.edges.values():
            twin = self.edges.get(edge.twin)
            if twin is None or twin.twin != edge.id or twin.face == edge.face:
                return False
            if twin.origin != self.destination(edge.id):
                return False
        return all(len(f.edges) == 3 for f in self.faces.values())

    def vertex_positions(self) -> np.ndarray:
        """Vertex coordinates as an (N, 3) array, ordered by vertex id."""
        if not self.vertices:
            return np.zeros((0, 3), dtype=np.float64)
        return np.array([self.vertices[vid].position for vid in sorted(self.vertices)])

    def triangles(self) -> List[Tuple[int, int, int]]:
        """Faces as index triples into vertex_positions()."""
        index = {vid: i for i, vid in enumerate(sorted(self.vertices))}
        return [
            tuple(index[vid] for vid in self.faces[fid].vertices)
            for fid in sorted(self.faces)
        ]

    def to_arrays(self) -> Tuple[np.ndarray, np.ndarray]:
        """(vertices (N, 3) float64, triangles (M, 3) int64)."""
        tris = np.array(self.triangles(), dtype=np.int64).reshape(-1, 3)
        return self.vertex_positions(), tris

    # ---------------------------------------------------------------
    # Mutation
    # ---------------------------------------------------------------

    def attach_point_for_faces(self, point, face_ids: Iterable[int]) -> List[int]:
        """Replace ``face_ids`` by a fan of triangles from ``point`` to their border.

        Args:
            point: New vertex position, outside every face in face_ids
            face_ids: The light faces (all faces that can see point)

        Returns:
            Ids of the newly created faces, one per horizon edge

        Raises:
            HorizonError: If face_ids is empty, names a missing face, or
                their border is not a single simple loop.  The mesh is
                left unchanged in that case.
        """
        light: Set[int] = set(face_ids)
        if not light:
            raise HorizonError("No light faces given")
        missing = [fid for fid in light if fid not in self.faces]
        if missing:
            raise HorizonError(f"Unknown face id(s): {sorted(missing)}")
        if len(light) == len(self.faces):
            raise HorizonError("Every face is lit; point has no horizon")

        horizon = self._horizon_loop(light)

        # Vertices touched only by light faces disappear with them
        horizon_vertices = {self.edges[e].origin for e in horizon}
        doomed_vertices: Set[int] = set()
        for fid in light:
            face = self.faces.pop(fid)
            for eid in face.edges:
                del self.edges[eid]
            doomed_vertices.update(v for v in face.vertices if v not in horizon_vertices)
        for vid in doomed_vertices:
            del self.vertices[vid]

        apex = self._add_vertex(np.asarray(point, dtype=np.float64))
        new_faces: List[int] = []
        for eid in horizon:
            u, w, outer = horizon[eid]
            fid = self._add_face(u, w, apex)
            base = self.faces[fid].edges[0]
            self.edges[base].twin = outer
            self.edges[outer].twin = base
            new_faces.append(fid)

        # Consecutive fan faces share the edge to the apex
        for a, b in zip(new_faces, new_faces[1:] + new_faces[:1]):
            _, a_up, _ = self.faces[a].edges    # w_a -> apex
            _, _, b_down = self.faces[b].edges  # apex -> u_b, and u_b == w_a
            self.edges[a_up].twin = b_down
            self.edges[b_down].twin = a_up

        logger.debug("Attached vertex %d: removed %d faces, added %d",
                      apex, len(light), len(new_faces))
        return new_faces

    # ---------------------------------------------------------------
    # Internals
    # ---------------------------------------------------------------

    def _horizon_loop(self, light: Set[int]) -> Dict[int, Tuple[int, int, int]]:
        """Ordered horizon of the light region.

        Returns an insertion-ordered dict ``edge_id -> (origin, destination,
        twin_id)`` walking the loop so each edge starts where the previous
        one ended.
        """
        by_origin: Dict[int, int] = {}
        for fid in light:
            for eid in self.faces[fid].edges:
                edge = self.edges[eid]
                if self.edges[edge.twin].face in light:
                    continue
                if edge.origin in by_origin:
                    raise HorizonError(
                        f"Horizon passes through vertex {edge.origin} twice"
                    )
                by_origin[edge.origin] = eid

        if len(by_origin) < 3:
            raise HorizonError(f"Horizon has only {len(by_origin)} edge(s)")

        start = next(iter(by_origin.values()))
        loop: Dict[int, Tuple[int, int, int]] = {}
        eid = start
        while True:
            edge = self.edges[eid]
            dest = self.destination(eid)
            loop[eid] = (edge.origin, dest, edge.twin)
            nxt = by_origin.get(dest)
            if nxt is None:
                raise HorizonError(f"Horizon is open at vertex {dest}")
            if nxt == start:
                break
            if nxt in loop:
                raise HorizonError("Horizon loop does not return to its start")
            eid = nxt

        if len(loop) != len(by_origin):
            raise HorizonError(
                f"Horizon splits into several loops ({len(loop)} of {len(by_origin)} edges)"
            )
        return loop

    def _add_vertex(self, position: np.ndarray) -> int:
        vid = self._next_vertex
        self._next_vertex += 1
        self.vertices[vid] = Vertex(vid, np.asarray(position, dtype=np.float64))
        return vid

    def _add_face(self, a: int, b: int, c: int) -> int:
        """Add triangle a -> b -> c with its three half-edges (twins unset)."""
        fid = self._next_face
        self._next_face += 1

        eids = []
        for origin in (a, b, c):
            eid = self._next_edge
            self._next_edge += 1
            self.edges[eid] = HalfEdge(eid, origin, fid)
            eids.append(eid)
        for i in range(3):
            self.edges[eids[i]].next = eids[(i + 1) % 3]

        pa, pb, pc = (self.vertices[v].position for v in (a, b, c))
        self.faces[fid] = Face(
            id=fid,
            edges=(eids[0], eids[1], eids[2]),
            vertices=(a, b, c),
            normal=_triangle_normal(pa, pb, pc),
            anchor=pa,
            epsilon=self.epsilon,
        )
        return fid

    def _link_twins(self, face_ids: Iterable[int]) -> None:
        """Pair up half-edges of the given faces by their endpoints."""
        by_ends: Dict[Tuple[int, int], int] = {}
        for fid in face_ids:
            for eid in self.faces[fid].edges:
                by_ends[(self.edges[eid].origin, self.destination(eid))] = eid
        for (u, w), eid in by_ends.items():
            twin: Optional[int] = by_ends.get((w, u))
            if twin is not None:
                self.edges[eid].twin = twin

"""
Half-plane geometry for brush faces.

A brush face is stored the way the MAP format writes it: three points plus
texture attributes.  The points are wound clockwise when viewed from outside
the brush, so ``cross(p3 - p1, p2 - p1)`` points out of the solid.

Texture attributes are carried along untouched; nothing in the geometry
code reads them.
"""

from __future__ import annotations
import math
from dataclasses import dataclass, field
from typing import Optional, Tuple

Vec3 = Tuple[float, float, float]

EPSILON = 1e-6


def _cross(a: Vec3, b: Vec3) -> Vec3:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def _dot(a: Vec3, b: Vec3) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def _sub(a: Vec3, b: Vec3) -> Vec3:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def _length(v: Vec3) -> float:
    return math.sqrt(v[0] * v[0] + v[1] * v[1] + v[2] * v[2])


def _scale(v: Vec3, s: float) -> Vec3:
    return (v[0] * s, v[1] * s, v[2] * s)


def _add(a: Vec3, b: Vec3) -> Vec3:
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def _as_vec3(p) -> Vec3:
    return (float(p[0]), float(p[1]), float(p[2]))


@dataclass(frozen=True)
class Plane:
    """
    Represents a brush face plane defined by three points.

    The solid lies behind the plane: ``normal`` points away from the brush
    and ``signed_distance`` is positive for points inside the half-space.
    A plane whose points are collinear (or coincident) is *degenerate*;
    its normal is ``None`` and the vertex reconstructor ignores it.
    """

    p1: Vec3
    p2: Vec3
    p3: Vec3
    texture: str = "__TB_empty"
    x_offset: float = 0.0
    y_offset: float = 0.0
    rotation: float = 0.0
    x_scale: float = 1.0
    y_scale: float = 1.0

    # Derived in __post_init__
    _normal: Optional[Vec3] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        p1, p2, p3 = _as_vec3(self.p1), _as_vec3(self.p2), _as_vec3(self.p3)
        object.__setattr__(self, "p1", p1)
        object.__setattr__(self, "p2", p2)
        object.__setattr__(self, "p3", p3)

        n = _cross(_sub(p3, p1), _sub(p2, p1))
        ln = _length(n)
        if ln >= EPSILON and math.isfinite(ln):
            object.__setattr__(self, "_normal", (n[0] / ln, n[1] / ln, n[2] / ln))

    # ---------------------------------------------------------------
    # Constructors
    # ---------------------------------------------------------------

    @classmethod
    def from_normal_distance(cls, normal: Vec3, dist: float, texture: str = "__TB_empty",
                             **tex_kwargs) -> "Plane":
        """Build a plane from an outward normal and ``dot(normal, x) == dist``.

        Generates three points on the plane with the winding the MAP format
        expects for that outward normal.
        """
        ln = _length(normal)
        if ln < EPSILON:
            raise ValueError(f"Cannot build a plane from zero-length normal {normal}")
        n = _scale(normal, 1.0 / ln)

        # Find a reference vector not parallel to normal
        if abs(n[2]) < 0.9:
            ref = (0.0, 0.0, 1.0)
        else:
            ref = (1.0, 0.0, 0.0)

        u = _cross(n, ref)
        u = _scale(u, 1.0 / _length(u))
        v = _cross(n, u)

        origin = _scale(n, dist)
        # cross(u, v) == n, so (origin, origin + v, origin + u) winds outward
        return cls(origin, _add(origin, _scale(v, 64.0)), _add(origin, _scale(u, 64.0)),
                   texture, **tex_kwargs)

    # ---------------------------------------------------------------
    # Geometry
    # ---------------------------------------------------------------

    @property
    def points(self) -> Tuple[Vec3, Vec3, Vec3]:
        return (self.p1, self.p2, self.p3)

    @property
    def is_degenerate(self) -> bool:
        """True when the three points do not span a plane."""
        return self._normal is None

    @property
    def normal(self) -> Optional[Vec3]:
        """Outward unit normal, ``normalize(cross(p3 - p1, p2 - p1))``."""
        return self._normal

    @property
    def inward_normal(self) -> Optional[Vec3]:
        if self._normal is None:
            return None
        return _scale(self._normal, -1.0)

    @property
    def distance(self) -> float:
        """Plane constant ``d`` with ``dot(normal, x) == d`` on the plane."""
        if self._normal is None:
            return math.nan
        return _dot(self._normal, self.p1)

    def signed_distance(self, point) -> float:
        """Distance of ``point`` into the solid side of the plane.

        Positive inside the brush, zero on the plane, negative outside.
        Degenerate planes return NaN.
        """
        if self._normal is None:
            return math.nan
        return -_dot(_sub(_as_vec3(point), self.p1), self._normal)

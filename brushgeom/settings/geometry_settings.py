"""
GeometrySettings dataclass: tolerance constants for brush and hull geometry.

Every tolerance used by the reconstructor and hull builder lives here so it
can be injected at construction instead of read from module globals.
"""

from __future__ import annotations
import math
from dataclasses import dataclass, fields, replace
from typing import Any, Dict


@dataclass(frozen=True)
class GeometrySettings:
    """
    Tunable constants for the geometry pipeline.

    Attributes:
        vertex_epsilon: How far outside a brush plane a candidate vertex may
            lie and still be kept (map units).  Absorbs float slop at edges
            shared by several planes.
        determinant_epsilon: Plane triples whose normal matrix has a smaller
            absolute determinant are treated as having no single intersection.
        hull_epsilon: A hull face only "sees" a point further than this
            outside its plane.  Keeps near-coplanar points on the surface.
        default_texture: Texture name used for brushes built in code.
    """

    vertex_epsilon: float = 0.2
    determinant_epsilon: float = 1e-6
    hull_epsilon: float = 1e-5
    default_texture: str = "__TB_empty"

    def with_overrides(self, **overrides: Any) -> "GeometrySettings":
        """Return a copy with the given fields replaced."""
        return replace(self, **overrides)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GeometrySettings":
        """Create settings from a dictionary, ignoring unknown keys.

        Missing keys keep their defaults.  Tolerances may be given as numbers
        or numeric strings.

        Raises:
            TypeError: If a tolerance is not numeric or the texture is not a string
            ValueError: If a tolerance is not a finite, non-negative number
        """
        defaults = cls()
        texture = data.get("default_texture", defaults.default_texture)
        if not isinstance(texture, str):
            raise TypeError(f"default_texture must be a string, not {type(texture).__name__}")
        return cls(
            vertex_epsilon=_tolerance(data, "vertex_epsilon", defaults.vertex_epsilon),
            determinant_epsilon=_tolerance(data, "determinant_epsilon", defaults.determinant_epsilon),
            hull_epsilon=_tolerance(data, "hull_epsilon", defaults.hull_epsilon),
            default_texture=texture,
        )


def _tolerance(data: Dict[str, Any], key: str, default: float) -> float:
    value = data.get(key, default)
    if isinstance(value, bool):
        raise TypeError(f"{key} must be a number, not bool")
    value = float(value)
    if not math.isfinite(value) or value < 0.0:
        raise ValueError(f"{key} must be a finite non-negative number, got {value}")
    return value


DEFAULT_SETTINGS = GeometrySettings()

"""
MAP data model and writer.

Holds the Map / Entity / Brush tree produced by the parser and writes it
back out in the same standard (idTech 1) text format.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, TextIO, Tuple, Union

from brushgeom.conversion.plane_math import Plane, Vec3
from brushgeom.settings import DEFAULT_SETTINGS, GeometrySettings

logger = logging.getLogger(__name__)


@dataclass
class Brush:
    """
    Represents a brush (convex solid).

    A brush is a convex polyhedron defined by the intersection of
    multiple half-spaces (planes). Each plane faces outward from
    the solid interior of the brush.
    """
    planes: List[Plane] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.planes)

    def __iter__(self):
        return iter(self.planes)

    def vertices(self, settings: Optional[GeometrySettings] = None) -> List[Vec3]:
        """Corner points of the solid, possibly repeated. See brush_vertices()."""
        from brushgeom.conversion.brush_vertices import brush_vertices
        return brush_vertices(self.planes, settings)


@dataclass
class Entity:
    """
    Represents an entity in the map.

    Entities can be point entities (like lights, spawns) or
    brush entities (like doors, triggers, worldspawn).
    """
    properties: Dict[str, str] = field(default_factory=dict)
    brushes: List[Brush] = field(default_factory=list)

    @property
    def classname(self) -> Optional[str]:
        return self.properties.get("classname")


@dataclass
class Map:
    """Ordered list of entities; the root of a parsed .map file."""
    entities: List[Entity] = field(default_factory=list)

    @classmethod
    def from_str(cls, text: str) -> "Map":
        """Parse MAP text.

        Raises:
            MapParseError: If the text does not follow the MAP grammar
        """
        from brushgeom.conversion.map_parser import parse_map
        return parse_map(text)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "Map":
        """Read and parse a UTF-8 .map file.

        Raises:
            OSError: If the file cannot be read
            MapParseError: If the contents do not parse
        """
        text = Path(path).read_text(encoding="utf-8")
        logger.debug("Loaded %d characters from %s", len(text), path)
        return cls.from_str(text)

    def worldspawn(self) -> Optional[Entity]:
        return next((e for e in self.entities if e.classname == "worldspawn"), None)

    @property
    def brush_count(self) -> int:
        return sum(len(e.brushes) for e in self.entities)

    def iter_brushes(self):
        """Yield (entity_index, brush_index, brush) for every brush."""
        for ei, entity in enumerate(self.entities):
            for bi, brush in enumerate(entity.brushes):
                yield ei, bi, brush


def _format_number(value: float) -> str:
    """Write integral values without a fractional part."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


class MapWriter:
    """
    Writes standard idTech MAP format text.

    MAP Format Notes:
    - Brushes are convex solids defined by plane intersections
    - Planes are defined by three points, clockwise seen from outside
    - Texture alignment uses offset, rotation, and scale parameters
    """

    def __init__(self, settings: Optional[GeometrySettings] = None):
        self.settings = settings or DEFAULT_SETTINGS
        self.grid_snap = 1.0  # Snap box corners to grid

    def create_box_brush(self, min_point: Vec3, max_point: Vec3,
                         texture: Optional[str] = None) -> Brush:
        """
        Create a box-shaped brush with 6 faces.

        Args:
            min_point: Minimum corner (x, y, z)
            max_point: Maximum corner (x, y, z)
            texture: Texture name to use, defaults to settings.default_texture

        Returns:
            Box brush with 6 planes
        """
        texture = texture or self.settings.default_texture
        x1, y1, z1 = self._snap_to_grid(*min_point)
        x2, y2, z2 = self._snap_to_grid(*max_point)

        planes = [
            # Left face (X = x1 plane)
            Plane((x1, y1, z1), (x1, y2, z1), (x1, y1, z2), texture),

            # Right face (X = x2 plane)
            Plane((x2, y1, z1), (x2, y1, z2), (x2, y2, z1), texture),

            # Front face (Y = y1 plane)
            Plane((x1, y1, z1), (x1, y1, z2), (x2, y1, z1), texture),

            # Back face (Y = y2 plane)
            Plane((x1, y2, z1), (x2, y2, z1), (x1, y2, z2), texture),

            # Bottom face (Z = z1 plane)
            Plane((x1, y1, z1), (x2, y1, z1), (x1, y2, z1), texture),

            # Top face (Z = z2 plane)
            Plane((x1, y1, z2), (x1, y2, z2), (x2, y1, z2), texture),
        ]

        return Brush(planes=planes)

    def write(self, game_map: Map) -> str:
        """Serialize a map to text that parse_map() reads back."""
        lines: List[str] = []
        for entity_idx, entity in enumerate(game_map.entities):
            lines.append(f"// entity {entity_idx}")
            lines.extend(self._entity_lines(entity))
        return "\n".join(lines) + "\n" if lines else ""

    def write_to_file(self, game_map: Map, filename: Union[str, Path]) -> None:
        """
        Write the map to a MAP format file.

        Raises:
            ValueError: If the map has no entities
        """
        if not game_map.entities:
            raise ValueError("No entities to write. Add at least a worldspawn entity.")

        with open(filename, 'w', encoding='utf-8') as file:
            self._write_header(game_map, file)
            file.write(self.write(game_map))

    def _write_header(self, game_map: Map, file: TextIO) -> None:
        file.write("// Game: Generic\n")
        file.write("// Format: Standard\n")
        file.write(f"// Total entities: {len(game_map.entities)}\n")
        file.write(f"// Total brushes: {game_map.brush_count}\n")

    def _entity_lines(self, entity: Entity) -> List[str]:
        lines = ["{"]
        for key, value in entity.properties.items():
            lines.append(f'"{key}" "{value}"')
        for brush_idx, brush in enumerate(entity.brushes):
            lines.append(f"// brush {brush_idx}")
            lines.append("{")
            for plane in brush.planes:
                lines.append(self._plane_line(plane))
            lines.append("}")
        lines.append("}")
        return lines

    def _plane_line(self, plane: Plane) -> str:
        """
        Format a single plane.

        Format: ( x1 y1 z1 ) ( x2 y2 z2 ) ( x3 y3 z3 ) texture x_off y_off rot x_scale y_scale
        """
        pts = " ".join(
            "( " + " ".join(_format_number(c) for c in p) + " )"
            for p in plane.points
        )
        attrs = " ".join(_format_number(v) for v in (
            plane.x_offset, plane.y_offset, plane.rotation, plane.x_scale, plane.y_scale,
        ))
        return f"{pts} {plane.texture} {attrs}"

    def _snap_to_grid(self, x: float, y: float, z: float) -> Tuple[float, float, float]:
        if self.grid_snap <= 0:
            return (x, y, z)

        return (
            round(x / self.grid_snap) * self.grid_snap,
            round(y / self.grid_snap) * self.grid_snap,
            round(z / self.grid_snap) * self.grid_snap
        )

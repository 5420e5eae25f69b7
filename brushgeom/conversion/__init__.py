"""
MAP text to brush geometry.

Handles parsing standard .map text into Map / Entity / Brush / Plane
objects, reconstructing brush corner points, and writing maps back out.
"""

from .plane_math import Plane
from .map_writer import Brush, Entity, Map, MapWriter
from .map_parser import MapParseError, MapParser, parse_map
from .brush_vertices import (
    VertexBuffer,
    brush_half_planes,
    brush_vertices,
    map_vertex_buffer,
    unique_vertices,
)

__all__ = [
    'Plane',
    'Brush',
    'Entity',
    'Map',
    'MapWriter',
    'MapParseError',
    'MapParser',
    'parse_map',
    'VertexBuffer',
    'brush_half_planes',
    'brush_vertices',
    'map_vertex_buffer',
    'unique_vertices',
]

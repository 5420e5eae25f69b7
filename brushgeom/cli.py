"""
Command line front end.

Loads a .map file, reconstructs every brush and prints a summary.  Exit
codes: 0 ok, 1 parse or validation failure, 2 unreadable file.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from brushgeom.conversion.brush_vertices import (
    brush_half_planes,
    brush_vertices,
    map_vertex_buffer,
    unique_vertices,
)
from brushgeom.conversion.map_parser import MapParseError
from brushgeom.conversion.map_writer import Map
from brushgeom.hull import build_convex_hull
from brushgeom.settings import load_settings
from brushgeom.validation import ValidationError, validate_map

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="brushgeom",
        description="Reconstruct brush geometry from a .map file.",
    )
    parser.add_argument("map_path", help="Path to a standard-format .map file")
    parser.add_argument("--settings", metavar="FILE",
                        help="JSON file with geometry tolerances")
    parser.add_argument("--half-planes", action="store_true",
                        help="Print (point, outward normal) for every plane")
    parser.add_argument("--hull", action="store_true",
                        help="Build the convex hull of all brush vertices")
    parser.add_argument("--validate", action="store_true",
                        help="Print a validation report")
    parser.add_argument("--strict", action="store_true",
                        help="Exit with status 1 if validation finds errors")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    settings = load_settings(args.settings) if args.settings else load_settings()

    try:
        game_map = Map.load(args.map_path)
    except (OSError, UnicodeDecodeError) as e:
        logger.error("Cannot read %s: %s", args.map_path, e)
        return 2
    except MapParseError as e:
        logger.error("Failed to parse map at %s:\n%s", args.map_path, e)
        return 1

    print(f"{args.map_path}: {len(game_map.entities)} entities, {game_map.brush_count} brushes")

    for ei, bi, brush in game_map.iter_brushes():
        raw = brush_vertices(brush.planes, settings)
        print(f"  entity {ei} brush {bi}: {len(brush.planes)} planes, "
              f"{len(raw)} vertices ({len(unique_vertices(raw))} unique)")

    if args.half_planes:
        for point, normal in brush_half_planes(game_map):
            print(f"  point={point} normal=({normal[0]:.4f}, {normal[1]:.4f}, {normal[2]:.4f})")

    if args.hull:
        buffer = map_vertex_buffer(game_map, settings)
        mesh = build_convex_hull(buffer.vertices, settings)
        if mesh.is_empty:
            print("hull: empty (fewer than 4 points or all coplanar)")
        else:
            print(f"hull: {mesh.vertex_count} vertices, {mesh.face_count} faces")

    if args.validate or args.strict:
        try:
            result = validate_map(game_map, settings, fail_fast=args.strict)
        except ValidationError as e:
            print(e.result.report())
            return 1
        print(result.report())

    return 0


if __name__ == "__main__":
    sys.exit(main())

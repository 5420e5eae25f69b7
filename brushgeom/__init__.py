"""
brushgeom - brush geometry from Quake-family .map files.

Parses .map text, reconstructs brush vertices from their bounding planes,
and builds convex hulls of arbitrary point clouds.
"""

__version__ = "0.1.0"

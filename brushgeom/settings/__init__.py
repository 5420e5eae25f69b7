"""
Geometry settings.

Usage:
    from brushgeom.settings import DEFAULT_SETTINGS, load_settings

    settings = load_settings("brushgeom.json").with_overrides(vertex_epsilon=0.05)
"""

from .geometry_settings import GeometrySettings, DEFAULT_SETTINGS
from .settings_storage import get_settings_path, save_settings, load_settings

__all__ = [
    'GeometrySettings',
    'DEFAULT_SETTINGS',
    'get_settings_path',
    'save_settings',
    'load_settings',
]

"""
Settings persistence layer.

Handles save/load of GeometrySettings to JSON files, by default under
~/.config/brushgeom/settings.json
"""

from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Optional, Union

from .geometry_settings import GeometrySettings, DEFAULT_SETTINGS

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def get_settings_path() -> Path:
    """
    Get the default settings file location.

    Returns:
        Path to ~/.config/brushgeom/settings.json (the file may not exist)
    """
    return Path.home() / ".config" / "brushgeom" / "settings.json"


def save_settings(settings: GeometrySettings, file_path: Optional[PathLike] = None) -> Path:
    """
    Save settings as JSON.

    Args:
        settings: The GeometrySettings to save
        file_path: Target file, defaults to get_settings_path()

    Returns:
        Path to the saved file

    Raises:
        OSError: If the file cannot be written
    """
    path = Path(file_path) if file_path is not None else get_settings_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, 'w', encoding='utf-8') as f:
        json.dump(settings.to_dict(), f, indent=2, ensure_ascii=False)

    return path


def load_settings(file_path: Optional[PathLike] = None) -> GeometrySettings:
    """
    Load settings from a JSON file.

    Missing files give the defaults.  Unreadable or malformed files are
    logged and also give the defaults.

    Args:
        file_path: Source file, defaults to get_settings_path()

    Returns:
        GeometrySettings loaded from the file, or DEFAULT_SETTINGS
    """
    path = Path(file_path) if file_path is not None else get_settings_path()

    if not path.exists():
        return DEFAULT_SETTINGS

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise TypeError(f"expected a JSON object, got {type(data).__name__}")
        return GeometrySettings.from_dict(data)
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        logger.warning("Ignoring invalid settings file %s: %s", path, e)
        return DEFAULT_SETTINGS

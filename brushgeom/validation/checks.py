"""
Map and brush validation checks.

Validates parsed maps before geometry is built:
- Open brush detection (BRUSH-001)
- Degenerate plane detection (BRUSH-002)
- Empty brush volume (BRUSH-003)
- Missing worldspawn (MAP-001)
"""

import logging
from typing import List, Optional

from brushgeom.conversion.brush_vertices import brush_vertices
from brushgeom.conversion.map_writer import Brush, Map
from brushgeom.settings import DEFAULT_SETTINGS, GeometrySettings

from .core import ValidationError, ValidationIssue, ValidationResult
from .rules import BRUSH_001, BRUSH_002, BRUSH_003, MAP_001

logger = logging.getLogger(__name__)


def validate_brush(
    brush: Brush,
    entity_index: Optional[int] = None,
    brush_index: Optional[int] = None,
    settings: Optional[GeometrySettings] = None
) -> List[ValidationIssue]:
    """Validate a single brush.

    Checks:
    - At least 4 planes (BRUSH-001)
    - Every plane is non-degenerate (BRUSH-002)
    - The planes enclose a volume (BRUSH-003), only if 4+ planes

    Args:
        brush: Brush to check
        entity_index: Index of the owning entity, recorded on each issue
        brush_index: Index of the brush inside that entity
        settings: Tolerances used to rebuild the vertices

    Returns:
        List of ValidationIssue
    """
    at = {"entity": entity_index, "brush": brush_index}
    issues: List[ValidationIssue] = []

    if len(brush.planes) < 4:
        issues.append(BRUSH_001.issue(plane_count=len(brush.planes), **at))

    for j, plane in enumerate(brush.planes):
        if plane.is_degenerate:
            points = ", ".join(str(p) for p in plane.points)
            issues.append(BRUSH_002.issue(plane=j, points=points, **at))

    if len(brush.planes) >= 4 and not brush_vertices(brush.planes, settings):
        issues.append(BRUSH_003.issue(plane_count=len(brush.planes), **at))

    return issues


def validate_map(
    game_map: Map,
    settings: Optional[GeometrySettings] = None,
    fail_fast: bool = False
) -> ValidationResult:
    """Validate every brush of every entity plus map structure.

    Args:
        game_map: Parsed map
        settings: Tolerances for vertex reconstruction
        fail_fast: If True, raise ValidationError when any FAIL issue is found

    Returns:
        ValidationResult with all issues

    Raises:
        ValidationError: If fail_fast and the result failed
    """
    settings = settings or DEFAULT_SETTINGS
    result = ValidationResult()

    if game_map.entities and game_map.worldspawn() is None:
        result.add_issue(MAP_001.issue(entity_count=len(game_map.entities)))

    for ei, bi, brush in game_map.iter_brushes():
        result.extend(validate_brush(brush, ei, bi, settings))

    for issue in result.warnings:
        logger.warning(str(issue))

    if fail_fast and result.failed:
        logger.error("Map validation failed: %d error(s)", len(result.errors))
        raise ValidationError(result)

    return result

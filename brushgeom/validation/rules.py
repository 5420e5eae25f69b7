"""
Validation rule definitions.

A rule pairs a code with a severity and two message templates.  Checks call
``rule.issue(...)`` with the template fields plus where in the map the
problem sits.  Codes are prefixed by category:
- BRUSH: Brush geometry
- MAP: Map structure
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from .core import Severity, ValidationIssue


@dataclass(frozen=True)
class ValidationRule:
    """Definition of a validation rule.

    Attributes:
        code: Unique rule code, "CATEGORY-NNN"
        severity: Severity given to every issue of this rule
        message_template: str.format template for the issue message
        remediation_template: str.format template for the suggested fix
        description: What the rule guards against
    """
    code: str
    severity: Severity
    message_template: str
    remediation_template: Optional[str] = None
    description: Optional[str] = None

    @property
    def category(self) -> str:
        return self.code.split("-", 1)[0]

    def issue(self, entity: Optional[int] = None, brush: Optional[int] = None,
              plane: Optional[int] = None, **fields) -> ValidationIssue:
        """Build an issue for this rule.

        Args:
            entity, brush, plane: Where the problem is, None when not applicable
            **fields: Values for the message and remediation templates

        Raises:
            KeyError: If a template field is missing
        """
        remediation = None
        if self.remediation_template:
            remediation = self.remediation_template.format(**fields)
        return ValidationIssue(
            severity=self.severity,
            code=self.code,
            message=self.message_template.format(**fields),
            remediation=remediation,
            entity=entity,
            brush=brush,
            plane=plane,
        )


# =============================================================================
# BRUSH RULES
# =============================================================================

BRUSH_001 = ValidationRule(
    code="BRUSH-001",
    severity=Severity.FAIL,
    message_template="Open brush with only {plane_count} planes (minimum 4 required)",
    remediation_template="Add more planes to close the brush volume",
    description="Brushes must have at least 4 planes to form a closed volume"
)

BRUSH_002 = ValidationRule(
    code="BRUSH-002",
    severity=Severity.WARN,
    message_template="Degenerate plane, points do not span a plane: {points}",
    remediation_template="Ensure the three plane points are distinct and not collinear",
    description="Three points defining a plane must not be collinear; the plane is ignored"
)

BRUSH_003 = ValidationRule(
    code="BRUSH-003",
    severity=Severity.WARN,
    message_template="Brush produces no vertices ({plane_count} planes)",
    remediation_template="Check plane winding; the half-spaces do not enclose a volume",
    description="The planes of a brush must bound a non-empty region"
)

# =============================================================================
# MAP RULES
# =============================================================================

MAP_001 = ValidationRule(
    code="MAP-001",
    severity=Severity.WARN,
    message_template="No worldspawn entity found among {entity_count} entities",
    remediation_template='Add an entity with "classname" "worldspawn"',
    description="Every map should contain a worldspawn entity"
)

ALL_RULES: Dict[str, ValidationRule] = {rule.code: rule for rule in (BRUSH_001, BRUSH_002, BRUSH_003, MAP_001)}


def rules_in_category(category: str) -> List[ValidationRule]:
    """Rules whose code starts with ``category`` (e.g. "BRUSH")."""
    return [rule for rule in ALL_RULES.values() if rule.category == category]

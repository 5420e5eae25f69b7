"""
Core data structures for map validation.

- Severity: how bad a finding is
- ValidationIssue: one finding, pinned to an entity / brush / plane
- ValidationResult: all findings for a map plus the pass/fail verdict
- ValidationError: raised by fail-fast validation
"""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, List, Optional, Tuple


class Severity(Enum):
    """Validation issue severity levels.

    - INFO: Informational only
    - WARN: Geometry still loads, possibly missing pieces
    - FAIL: Geometry cannot be built from this input
    """
    INFO = auto()
    WARN = auto()
    FAIL = auto()

    def __str__(self) -> str:
        return self.name


@dataclass
class ValidationIssue:
    """A single finding.

    Attributes:
        severity: INFO, WARN or FAIL
        code: Rule code (e.g., "BRUSH-001")
        message: Human-readable description
        remediation: Optional suggested fix
        entity: Entity index in the map, None for map-wide issues
        brush: Brush index inside the entity
        plane: Plane index inside the brush
    """
    severity: Severity
    code: str
    message: str
    remediation: Optional[str] = None
    entity: Optional[int] = None
    brush: Optional[int] = None
    plane: Optional[int] = None

    @property
    def location(self) -> str:
        """Text such as "entity 0, brush 2, plane 1"; unset parts are left out."""
        parts = []
        for label, index in (("entity", self.entity), ("brush", self.brush), ("plane", self.plane)):
            if index is not None:
                parts.append(f"{label} {index}")
        return ", ".join(parts)

    def format(self) -> str:
        where = self.location or "map"
        line = f"[{self.severity}] {self.code} {where}: {self.message}"
        if self.remediation:
            line += f" (fix: {self.remediation})"
        return line

    def __str__(self) -> str:
        return self.format()


@dataclass
class ValidationResult:
    """All findings for one map.

    ``passed`` is True as long as no FAIL issue was recorded; warnings and
    infos never fail a map.
    """
    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.failed

    @property
    def failed(self) -> bool:
        return any(i.severity == Severity.FAIL for i in self.issues)

    @property
    def warnings(self) -> List[ValidationIssue]:
        return self._with_severity(Severity.WARN)

    @property
    def errors(self) -> List[ValidationIssue]:
        return self._with_severity(Severity.FAIL)

    @property
    def infos(self) -> List[ValidationIssue]:
        return self._with_severity(Severity.INFO)

    def _with_severity(self, severity: Severity) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == severity]

    def add_issue(self, issue: ValidationIssue) -> None:
        self.issues.append(issue)

    def extend(self, issues: List[ValidationIssue]) -> None:
        self.issues.extend(issues)

    def merge(self, other: 'ValidationResult') -> 'ValidationResult':
        """Append another result's issues; returns self for chaining."""
        self.issues.extend(other.issues)
        return self

    def codes(self) -> Counter:
        """How often each rule code fired."""
        return Counter(i.code for i in self.issues)

    def by_brush(self) -> Dict[Tuple[Optional[int], Optional[int]], List[ValidationIssue]]:
        """Issues keyed by (entity, brush); map-wide issues under (None, None)."""
        grouped: Dict[Tuple[Optional[int], Optional[int]], List[ValidationIssue]] = {}
        for issue in self.issues:
            grouped.setdefault((issue.entity, issue.brush), []).append(issue)
        return grouped

    def report(self) -> str:
        """Multi-line report, FAIL issues first."""
        if not self.issues:
            return "Validation passed: No issues found"

        status = "PASSED" if self.passed else "FAILED"
        counts = ", ".join(
            f"{len(self._with_severity(s))} {s.name.lower()}"
            for s in (Severity.FAIL, Severity.WARN, Severity.INFO)
        )
        lines = [f"Validation {status}: {len(self.issues)} issue(s) ({counts})"]
        for severity in (Severity.FAIL, Severity.WARN, Severity.INFO):
            lines.extend(f"  {issue}" for issue in self._with_severity(severity))
        return "\n".join(lines)


class ValidationError(Exception):
    """Raised by fail-fast validation when a FAIL issue is found.

    Attributes:
        result: The complete ValidationResult
    """

    def __init__(self, result: ValidationResult):
        self.result = result
        super().__init__(result.report())

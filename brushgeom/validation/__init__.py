"""
Map validation package.

Public API:
    - ValidationResult, ValidationIssue, Severity: Core result types
    - ValidationError: Exception raised on FAIL issues when fail_fast=True
    - validate_map(), validate_brush(): Checks for parsed maps
"""

from .core import (
    Severity,
    ValidationIssue,
    ValidationResult,
    ValidationError,
)
from .rules import ValidationRule, ALL_RULES, rules_in_category
from .checks import validate_brush, validate_map

__all__ = [
    'Severity',
    'ValidationIssue',
    'ValidationResult',
    'ValidationError',
    'ValidationRule',
    'ALL_RULES',
    'rules_in_category',
    'validate_brush',
    'validate_map',
]

"""
Validation module for graph invariants.
"""

from flowbridge.validation.graph_validator import (
    GraphValidationResult,
    GraphValidator,
    ValidationIssue,
    ValidationSeverity,
    validate_graph,
)
from flowbridge.validation.graph_fixer import (
    FixResult,
    GraphAutoFixer,
    enforce_invariants,
)

__all__ = [
    "GraphValidator",
    "GraphValidationResult",
    "ValidationIssue",
    "ValidationSeverity",
    "validate_graph",
    "GraphAutoFixer",
    "FixResult",
    "enforce_invariants",
]

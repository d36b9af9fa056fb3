"""
Graph Auto-Fixer - Rule-based repair of invariant violations.

Every fix removes or detaches the offending element; nothing is fabricated.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from flowbridge.ir.graph import Graph, NodeKind
from flowbridge.validation.graph_validator import (
    GraphValidationResult,
    GraphValidator,
    ValidationSeverity,
)

logger = logging.getLogger(__name__)


@dataclass
class FixResult:
    """Result of a fix operation"""
    success: bool
    issues_fixed: List[str] = field(default_factory=list)
    issues_remaining: List[str] = field(default_factory=list)
    changes_made: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "issues_fixed": self.issues_fixed,
            "issues_remaining": self.issues_remaining,
            "changes_made": self.changes_made,
        }


class GraphAutoFixer:
    """
    Applies deterministic fixes until the graph validates.

    Usage:
        result = GraphAutoFixer().fix(graph)   # graph is modified in place
    """

    AUTO_FIXABLE = {
        "DUPLICATE_NODE_ID",
        "MISSING_SOURCE_NODE",
        "MISSING_TARGET_NODE",
        "DUPLICATE_EDGE",
        "SELF_PARENT",
        "MISSING_PARENT",
        "PARENT_NOT_GROUP",
        "PARENT_CYCLE",
    }

    def __init__(self, max_iterations: int = 3):
        self.max_iterations = max_iterations
        self.validator = GraphValidator()

    def fix(self, graph: Graph, validation: Optional[GraphValidationResult] = None) -> FixResult:
        changes: List[str] = []
        fixed: List[str] = []

        for iteration in range(self.max_iterations):
            if validation is None or iteration > 0:
                validation = self.validator.validate(graph)
            codes = validation.codes() & self.AUTO_FIXABLE
            if not codes:
                break
            fixed.extend(sorted(codes))
            changes.extend(self._fix_duplicate_nodes(graph))
            changes.extend(self._fix_dangling_edges(graph))
            changes.extend(self._fix_duplicate_edges(graph))
            changes.extend(self._fix_parents(graph))

        validation = self.validator.validate(graph)
        remaining = [
            i.code for i in validation.issues
            if i.severity == ValidationSeverity.ERROR
        ]
        for change in changes:
            logger.warning("[VALIDATOR] %s", change)
        return FixResult(
            success=not remaining,
            issues_fixed=sorted(set(fixed)),
            issues_remaining=remaining,
            changes_made=changes,
        )

    def _fix_duplicate_nodes(self, graph: Graph) -> List[str]:
        changes = []
        seen = set()
        kept = []
        for node in graph.nodes:
            if node.id in seen:
                changes.append(f"Removed duplicate node '{node.id}'")
                continue
            seen.add(node.id)
            kept.append(node)
        graph.nodes = kept
        return changes

    def _fix_dangling_edges(self, graph: Graph) -> List[str]:
        changes = []
        node_ids = {n.id for n in graph.nodes}
        kept = []
        for edge in graph.edges:
            if edge.source not in node_ids or edge.target not in node_ids:
                changes.append(f"Removed dangling edge {edge.source} -> {edge.target}")
                continue
            kept.append(edge)
        graph.edges = kept
        return changes

    def _fix_duplicate_edges(self, graph: Graph) -> List[str]:
        changes = []
        seen = set()
        kept = []
        for edge in graph.edges:
            key = (edge.source, edge.target, edge.label or "", edge.arrow_kind)
            if edge.dialect_data.order is None and key in seen:
                changes.append(f"Removed duplicate edge {edge.source} -> {edge.target}")
                continue
            seen.add(key)
            kept.append(edge)
        graph.edges = kept
        return changes

    def _fix_parents(self, graph: Graph) -> List[str]:
        changes = []
        index = graph.node_index()
        for node in graph.nodes:
            if node.parent is None:
                continue
            parent = index.get(node.parent)
            if node.parent == node.id or parent is None or parent.kind != NodeKind.GROUP:
                changes.append(f"Detached '{node.id}' from invalid parent '{node.parent}'")
                node.parent = None

        # break cycles by detaching the first node whose chain returns to it
        for node in graph.nodes:
            seen = set()
            cursor = node
            while cursor is not None and cursor.parent is not None:
                if cursor.parent == node.id:
                    changes.append(f"Detached '{node.id}' to break a parent cycle")
                    node.parent = None
                    break
                if cursor.id in seen:
                    break
                seen.add(cursor.id)
                cursor = index.get(cursor.parent)
        return changes


def enforce_invariants(graph: Graph) -> FixResult:
    """Validate and repair ``graph`` in place."""
    return GraphAutoFixer().fix(graph)

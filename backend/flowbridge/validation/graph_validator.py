"""
Graph Validator - Checks the structural invariants of a diagram graph.

Catches issues like:
- Duplicate node IDs
- Edges whose source/target does not exist
- Duplicate edges
- Invalid group parentage (self parent, missing parent, non-group parent, cycles)
- Empty labels
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set

from flowbridge.ir.graph import Graph, NodeKind
from flowbridge.ir.payloads import PiePayload, SequencePayload, StatePayload

logger = logging.getLogger(__name__)


class ValidationSeverity(Enum):
    ERROR = "error"      # Graph breaks a model invariant
    WARNING = "warning"  # Graph is usable but suspicious
    INFO = "info"


@dataclass
class ValidationIssue:
    """A single validation issue found in the graph"""
    severity: ValidationSeverity
    code: str           # Machine-readable issue code
    message: str        # Human-readable description
    node_id: Optional[str] = None
    edge_info: Optional[str] = None
    suggestion: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "severity": self.severity.value,
            "code": self.code,
            "message": self.message,
            "node_id": self.node_id,
            "edge_info": self.edge_info,
            "suggestion": self.suggestion,
        }


@dataclass
class GraphValidationResult:
    """Result of graph validation"""
    is_valid: bool
    issues: List[ValidationIssue] = field(default_factory=list)
    stats: Dict[str, int] = field(default_factory=dict)

    @property
    def error_count(self) -> int:
        return sum(1 for i in self.issues if i.severity == ValidationSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for i in self.issues if i.severity == ValidationSeverity.WARNING)

    def codes(self) -> Set[str]:
        return {i.code for i in self.issues}

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "error_count": self.error_count,
            "warning_count": self.warning_count,
            "issues": [i.to_dict() for i in self.issues],
            "stats": self.stats,
        }

    def get_summary(self) -> str:
        status = "valid" if self.is_valid else "invalid"
        return f"{status} | Errors: {self.error_count}, Warnings: {self.warning_count}"


def _label_optional(node) -> bool:
    payload = node.dialect_data
    if isinstance(payload, SequencePayload) and (payload.is_anchor or payload.is_terminal):
        return True
    if isinstance(payload, StatePayload) and payload.marker in ("start", "end", "fork", "join"):
        return True
    return isinstance(payload, PiePayload)


class GraphValidator:
    """
    Validates a graph against the model invariants.

    Usage:
        result = GraphValidator().validate(graph)
        if not result.is_valid:
            for issue in result.issues:
                logger.warning(issue.message)
    """

    def __init__(self, strict_mode: bool = False):
        self.strict_mode = strict_mode

    def validate(self, graph: Graph) -> GraphValidationResult:
        issues: List[ValidationIssue] = []
        node_ids = {n.id for n in graph.nodes}

        issues.extend(self._check_duplicate_node_ids(graph))
        issues.extend(self._check_missing_edge_references(graph, node_ids))
        issues.extend(self._check_duplicate_edges(graph))
        issues.extend(self._check_parents(graph))
        issues.extend(self._check_empty_labels(graph))

        has_errors = any(i.severity == ValidationSeverity.ERROR for i in issues)
        has_warnings = any(i.severity == ValidationSeverity.WARNING for i in issues)
        is_valid = not has_errors and not (self.strict_mode and has_warnings)

        stats = {
            "nodes": len(graph.nodes),
            "edges": len(graph.edges),
            "groups": sum(1 for n in graph.nodes if n.kind == NodeKind.GROUP),
        }
        if issues:
            logger.debug("[VALIDATOR] %d issue(s): %s", len(issues), sorted({i.code for i in issues}))
        return GraphValidationResult(is_valid=is_valid, issues=issues, stats=stats)

    def _check_duplicate_node_ids(self, graph: Graph) -> List[ValidationIssue]:
        issues = []
        seen: Dict[str, int] = defaultdict(int)
        for node in graph.nodes:
            seen[node.id] += 1
        for node_id, count in seen.items():
            if count > 1:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="DUPLICATE_NODE_ID",
                    message=f"Duplicate node ID '{node_id}' appears {count} times",
                    node_id=node_id,
                    suggestion="Ensure each node has a unique ID",
                ))
        return issues

    def _check_missing_edge_references(self, graph: Graph, node_ids: Set[str]) -> List[ValidationIssue]:
        issues = []
        for edge in graph.edges:
            if edge.source not in node_ids:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="MISSING_SOURCE_NODE",
                    message=f"Edge references non-existent source node '{edge.source}'",
                    edge_info=f"{edge.source} -> {edge.target}",
                    suggestion=f"Add node '{edge.source}' or remove the edge",
                ))
            if edge.target not in node_ids:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="MISSING_TARGET_NODE",
                    message=f"Edge references non-existent target node '{edge.target}'",
                    edge_info=f"{edge.source} -> {edge.target}",
                    suggestion=f"Add node '{edge.target}' or remove the edge",
                ))
        return issues

    def _check_duplicate_edges(self, graph: Graph) -> List[ValidationIssue]:
        issues = []
        seen = set()
        for edge in graph.edges:
            if edge.dialect_data.order is not None:
                # sequence messages may legitimately repeat
                continue
            key = (edge.source, edge.target, edge.label or "", edge.arrow_kind)
            if key in seen:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.WARNING,
                    code="DUPLICATE_EDGE",
                    message=f"Duplicate edge {edge.source} -> {edge.target}",
                    edge_info=f"{edge.source} -> {edge.target}",
                    suggestion="Remove the repeated edge",
                ))
            seen.add(key)
        return issues

    def _check_parents(self, graph: Graph) -> List[ValidationIssue]:
        issues = []
        index = graph.node_index()
        for node in graph.nodes:
            if node.parent is None:
                continue
            if node.parent == node.id:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="SELF_PARENT",
                    message=f"Node '{node.id}' is its own parent",
                    node_id=node.id,
                ))
                continue
            parent = index.get(node.parent)
            if parent is None:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="MISSING_PARENT",
                    message=f"Node '{node.id}' has non-existent parent '{node.parent}'",
                    node_id=node.id,
                ))
                continue
            if parent.kind != NodeKind.GROUP:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="PARENT_NOT_GROUP",
                    message=f"Parent '{parent.id}' of '{node.id}' is not a group",
                    node_id=node.id,
                ))
                continue

            seen = {node.id}
            cursor = parent
            while cursor is not None and cursor.parent is not None:
                if cursor.id in seen:
                    break
                seen.add(cursor.id)
                if cursor.parent == node.id:
                    issues.append(ValidationIssue(
                        severity=ValidationSeverity.ERROR,
                        code="PARENT_CYCLE",
                        message=f"Parent chain of '{node.id}' loops back to itself",
                        node_id=node.id,
                    ))
                    break
                cursor = index.get(cursor.parent)
        return issues

    def _check_empty_labels(self, graph: Graph) -> List[ValidationIssue]:
        issues = []
        for node in graph.nodes:
            if _label_optional(node):
                continue
            if not node.label or not node.label.strip():
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.INFO,
                    code="EMPTY_LABEL",
                    message=f"Node '{node.id}' has empty label",
                    node_id=node.id,
                    suggestion="Add a descriptive label to the node",
                ))
        return issues


def validate_graph(graph: Graph) -> GraphValidationResult:
    return GraphValidator().validate(graph)

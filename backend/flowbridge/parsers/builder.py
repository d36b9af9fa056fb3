"""
Shared reducer state for every dialect parser.

The builder owns the graph invariants so individual dialect reducers only
translate tokens: nodes are created on first reference, duplicate edges are
rejected, and parent links that would self-parent or form a cycle are refused.
"""

import logging
from typing import Dict, List, Optional, Set, Tuple

from flowbridge.ir.graph import ArrowKind, Dialect, Edge, EdgeData, Graph, Node, NodeKind
from flowbridge.ir.style import StyleOverride

logger = logging.getLogger(__name__)

EdgeKey = Tuple[str, str, str, ArrowKind]


class GraphBuilder:
    def __init__(self, dialect: Dialect, default_kind: NodeKind = NodeKind.RECTANGLE):
        self.graph = Graph(dialect=dialect)
        self.default_kind = default_kind
        self._nodes: Dict[str, Node] = {}
        self._edge_keys: Set[EdgeKey] = set()
        self._group_stack: List[str] = []
        self._pending_styles: List[Tuple[str, StyleOverride]] = []

    # -------------------------
    # Nodes
    # -------------------------

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def get(self, node_id: str) -> Optional[Node]:
        return self._nodes.get(node_id)

    def ensure_node(
        self,
        node_id: str,
        kind: Optional[NodeKind] = None,
        label: Optional[str] = None,
        payload=None,
    ) -> Node:
        """
        Return the node, creating it with default kind and ``label = id`` on
        first reference. Explicit kind/label refine an existing node.
        """
        node = self._nodes.get(node_id)
        if node is None:
            node = Node(
                id=node_id,
                kind=kind or self.default_kind,
                label=label if label is not None else node_id,
                dialect_data=payload,
            )
            self._nodes[node_id] = node
            self.graph.nodes.append(node)
            self._attach_to_current_group(node)
            return node

        if kind is not None:
            node.kind = kind
        if label is not None:
            node.label = label
        if payload is not None and node.dialect_data is None:
            node.dialect_data = payload
        self._attach_to_current_group(node)
        return node

    # -------------------------
    # Groups
    # -------------------------

    @property
    def current_group(self) -> Optional[str]:
        return self._group_stack[-1] if self._group_stack else None

    def open_group(self, group_id: str, label: Optional[str] = None) -> Node:
        group = self.ensure_node(group_id, kind=NodeKind.GROUP, label=label)
        self._group_stack.append(group_id)
        return group

    def close_group(self) -> None:
        if self._group_stack:
            self._group_stack.pop()
        else:
            logger.debug("[PARSER] Unbalanced 'end' ignored")

    def _attach_to_current_group(self, node: Node) -> None:
        group_id = self.current_group
        if group_id is None or node.parent is not None or node.id == group_id:
            return
        self.set_parent(node.id, group_id)

    def set_parent(self, node_id: str, parent_id: str) -> bool:
        if node_id == parent_id:
            logger.warning("[PARSER] Refusing to make %s its own parent", node_id)
            return False

        # Walk up from the new parent; meeting node_id means a cycle.
        seen = set()
        cursor: Optional[str] = parent_id
        while cursor is not None and cursor not in seen:
            if cursor == node_id:
                logger.warning("[PARSER] Refusing parent %s for %s: cycle", parent_id, node_id)
                return False
            seen.add(cursor)
            parent = self._nodes.get(cursor)
            cursor = parent.parent if parent else None

        self._nodes[node_id].parent = parent_id
        return True

    # -------------------------
    # Edges
    # -------------------------

    def add_edge(
        self,
        source: str,
        target: str,
        arrow_kind: ArrowKind = ArrowKind.SOLID,
        label: Optional[str] = None,
        arrow: Optional[str] = None,
        edge_id: Optional[str] = None,
        dedupe: bool = True,
        **data,
    ) -> Optional[Edge]:
        """Add an edge between existing nodes; repeated edges are dropped unless dedupe is off."""
        if source not in self._nodes or target not in self._nodes:
            logger.debug("[PARSER] Dropping edge %s -> %s: unknown endpoint", source, target)
            return None

        key = (source, target, label or "", arrow_kind)
        if dedupe and key in self._edge_keys:
            logger.debug("[PARSER] Duplicate edge %s -> %s ignored", source, target)
            return None
        self._edge_keys.add(key)

        edge = Edge(
            id=edge_id or f"{source}-{target}-{len(self.graph.edges)}",
            source=source,
            target=target,
            label=label or None,
            arrow_kind=arrow_kind,
            dialect_data=EdgeData(arrow=arrow, **data),
        )
        self.graph.edges.append(edge)
        return edge

    # -------------------------
    # Styles
    # -------------------------

    def defer_style(self, node_id: str, style: StyleOverride) -> None:
        self._pending_styles.append((node_id, style))

    def build(self) -> Graph:
        # style directives apply after structure; unknown ids are ignored
        for node_id, style in self._pending_styles:
            node = self._nodes.get(node_id)
            if node is None:
                logger.debug("[PARSER] Style for unknown node %s ignored", node_id)
                continue
            node.style = node.style.merged(style)
        self._pending_styles = []
        return self.graph

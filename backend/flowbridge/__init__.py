"""
flowbridge - bidirectional converter between Mermaid text and an editable
node/edge graph.

    graph = flowbridge.parse(text)
    text = flowbridge.serialize(graph)

Neither call raises: malformed input degrades to a best-effort graph or text.
"""

import logging

from flowbridge.compiler import compile_to_mermaid, parse_mermaid
from flowbridge.dsl.detector import detect_dialect
from flowbridge.ir import (
    ArrowKind,
    Dialect,
    Edge,
    EdgeData,
    Graph,
    Node,
    NodeKind,
    Position,
    Size,
    StyleOverride,
)

logger = logging.getLogger(__name__)

__version__ = "0.1.0"

ERROR_NODE_ID = "parse_error"


def _error_graph(message: str) -> Graph:
    node = Node(
        id=ERROR_NODE_ID,
        kind=NodeKind.RECTANGLE,
        label=f"Could not read diagram\n{message}",
        size=Size(320, 90),
    )
    return Graph(nodes=[node], dialect=Dialect.FLOWCHART)


def parse(text: str) -> Graph:
    """Parse Mermaid text (with optional sidecar comments) into a graph."""
    try:
        return parse_mermaid(text or "")
    except Exception as e:
        logger.exception("[PARSER] Parse failed: %s", e)
        return _error_graph(str(e))


def serialize(graph: Graph) -> str:
    """Render a graph back to Mermaid text with sidecar comments."""
    try:
        return compile_to_mermaid(graph)
    except Exception as e:
        logger.exception("[SERIALIZER] Serialize failed: %s", e)
        # best effort: header plus one bare declaration per node
        lines = ["graph TD"]
        for node in getattr(graph, "nodes", None) or []:
            lines.append(f"    {node.id}")
        return "\n".join(lines) + "\n"


__all__ = [
    "ArrowKind",
    "Dialect",
    "Edge",
    "EdgeData",
    "Graph",
    "Node",
    "NodeKind",
    "Position",
    "Size",
    "StyleOverride",
    "detect_dialect",
    "parse",
    "serialize",
]

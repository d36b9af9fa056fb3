"""
Default style table.

Parsers, renderers and the sidecar codec all consult this module to decide
what counts as a "default" value, so only real user overrides are persisted.
"""

from typing import Dict, Tuple

from flowbridge.ir.graph import ArrowKind, Dialect, Edge, Node, NodeKind
from flowbridge.ir.payloads import SequencePayload, StatePayload
from flowbridge.ir.style import StyleOverride


BASE_NODE = StyleOverride(
    fill="#1e293b",
    stroke_color="#0ea5e9",
    stroke_style="solid",
    stroke_width=2,
    handle_color="#00DC82",
)

GROUP_NODE = StyleOverride(
    fill="rgba(0, 0, 0, 0)",
    stroke_color="#94a3b8",
    stroke_style="dashed",
    stroke_width=2,
)

PARTICIPANT_NODE = StyleOverride(
    fill="#1f2937",
    stroke_color="#3b82f6",
    stroke_style="solid",
    stroke_width=2,
    text_color="#ffffff",
    handle_color="#00DC82",
)

NOTE_NODE = StyleOverride(
    fill="#fef3c7",
    stroke_color="#d97706",
    stroke_style="solid",
    stroke_width=1,
    text_color="#000000",
)

ANCHOR_NODE = StyleOverride(
    fill="transparent",
    stroke_color="transparent",
    stroke_style="solid",
    stroke_width=0,
)

PSEUDO_STATE_NODE = StyleOverride(
    fill="#0ea5e9",
    stroke_color="#0ea5e9",
    stroke_style="solid",
    stroke_width=2,
)


VISUAL_STYLE: Dict[Dialect, Dict[str, StyleOverride]] = {
    Dialect.FLOWCHART: {
        "node": BASE_NODE,
        "group": GROUP_NODE,
    },
    Dialect.ER: {
        "node": BASE_NODE,
    },
    Dialect.STATE: {
        "node": BASE_NODE,
        "group": GROUP_NODE,
        "pseudo": PSEUDO_STATE_NODE,
    },
    Dialect.SEQUENCE: {
        "node": PARTICIPANT_NODE,
        "participant": PARTICIPANT_NODE,
        "note": NOTE_NODE,
        "anchor": ANCHOR_NODE,
    },
    Dialect.PIE: {
        "node": BASE_NODE,
    },
    Dialect.MINDMAP: {
        "node": BASE_NODE,
    },
    Dialect.UNSUPPORTED: {
        "node": BASE_NODE,
    },
}


EDGE_STYLE: Dict[ArrowKind, StyleOverride] = {
    ArrowKind.SOLID: StyleOverride(stroke_color="#0ea5e9", stroke_width=2, stroke_style="solid"),
    ArrowKind.OPEN: StyleOverride(stroke_color="#0ea5e9", stroke_width=2, stroke_style="solid"),
    ArrowKind.DOTTED: StyleOverride(stroke_color="#0ea5e9", stroke_width=2, stroke_style="dashed"),
    ArrowKind.THICK: StyleOverride(stroke_color="#0ea5e9", stroke_width=3, stroke_style="solid"),
    ArrowKind.RELATION: StyleOverride(stroke_color="#0ea5e9", stroke_width=2, stroke_style="solid"),
    ArrowKind.SEQUENCE_SYNC: StyleOverride(stroke_color="#3b82f6", stroke_width=2, stroke_style="solid"),
    ArrowKind.SEQUENCE_REPLY: StyleOverride(stroke_color="#3b82f6", stroke_width=2, stroke_style="dashed"),
    ArrowKind.SEQUENCE_ASYNC: StyleOverride(stroke_color="#3b82f6", stroke_width=2, stroke_style="solid"),
}

LIFELINE_STYLE = StyleOverride(stroke_color="#4b5563", stroke_width=2, stroke_style="dashed")


# (width, height) per kind, used when a node has no explicit size
NODE_SIZE: Dict[NodeKind, Tuple[float, float]] = {
    NodeKind.RECTANGLE: (180, 70),
    NodeKind.ROUNDED: (180, 70),
    NodeKind.CIRCLE: (80, 80),
    NodeKind.DIAMOND: (140, 100),
    NodeKind.CYLINDER: (120, 90),
    NodeKind.ENTITY: (200, 50),
    NodeKind.GROUP: (300, 200),
}

ER_ATTRIBUTE_ROW = 24
PARTICIPANT_SIZE = (180, 50)
PSEUDO_STATE_SIZE = (30, 30)


def _role(node: Node) -> str:
    payload = node.dialect_data
    if isinstance(payload, SequencePayload):
        if payload.is_anchor or payload.is_terminal:
            return "anchor"
        if payload.is_note:
            return "note"
        return "participant"
    if isinstance(payload, StatePayload) and payload.marker in ("start", "end"):
        return "pseudo"
    if node.kind == NodeKind.GROUP:
        return "group"
    return "node"


def default_node_style(dialect: Dialect, node: Node) -> StyleOverride:
    table = VISUAL_STYLE.get(dialect, VISUAL_STYLE[Dialect.FLOWCHART])
    return table.get(_role(node), table["node"])


def default_edge_style(edge: Edge) -> StyleOverride:
    if edge.dialect_data.is_lifeline:
        return LIFELINE_STYLE
    return EDGE_STYLE.get(edge.arrow_kind, EDGE_STYLE[ArrowKind.SOLID])


def effective_node_style(dialect: Dialect, node: Node) -> StyleOverride:
    return default_node_style(dialect, node).merged(node.style)


def default_size(node: Node) -> Tuple[float, float]:
    """Cell size for layout when the node carries no explicit size."""
    if node.size is not None:
        return node.size.width, node.size.height

    payload = node.dialect_data
    if isinstance(payload, SequencePayload):
        if payload.is_anchor or payload.is_terminal:
            return 0.0, 0.0
        if not payload.is_note:
            return PARTICIPANT_SIZE
    if isinstance(payload, StatePayload) and payload.marker in ("start", "end"):
        return PSEUDO_STATE_SIZE

    width, height = NODE_SIZE.get(node.kind, NODE_SIZE[NodeKind.RECTANGLE])
    if node.kind == NodeKind.ENTITY:
        attributes = getattr(payload, "attributes", None) or []
        height += ER_ATTRIBUTE_ROW * len(attributes)
    return width, height

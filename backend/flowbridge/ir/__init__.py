# Graph model shared by parsers, layout and renderers

from flowbridge.ir.graph import (
    ArrowKind,
    Dialect,
    DialectPayload,
    Edge,
    EdgeData,
    Graph,
    Node,
    NodeKind,
    Position,
    Size,
    infer_dialect,
)
from flowbridge.ir.payloads import (
    ErAttribute,
    ErPayload,
    MindmapPayload,
    PiePayload,
    SequencePayload,
    StatePayload,
    UnsupportedPayload,
)
from flowbridge.ir.style import StyleOverride

__all__ = [
    "ArrowKind",
    "Dialect",
    "DialectPayload",
    "Edge",
    "EdgeData",
    "ErAttribute",
    "ErPayload",
    "Graph",
    "MindmapPayload",
    "Node",
    "NodeKind",
    "PiePayload",
    "Position",
    "SequencePayload",
    "Size",
    "StatePayload",
    "StyleOverride",
    "UnsupportedPayload",
    "infer_dialect",
]

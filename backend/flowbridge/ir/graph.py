from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Union

from flowbridge.ir.payloads import (
    ErPayload,
    MindmapPayload,
    PiePayload,
    SequencePayload,
    StatePayload,
    UnsupportedPayload,
)
from flowbridge.ir.style import StyleOverride

DIRECTIONS = ("TD", "TB", "BT", "LR", "RL")


class Dialect(str, Enum):
    FLOWCHART = "flowchart"
    SEQUENCE = "sequence"
    ER = "er"
    STATE = "state"
    PIE = "pie"
    MINDMAP = "mindmap"
    UNSUPPORTED = "unsupported"


class NodeKind(str, Enum):
    RECTANGLE = "rectangle"
    ROUNDED = "rounded"
    CIRCLE = "circle"
    DIAMOND = "diamond"
    CYLINDER = "cylinder"
    ENTITY = "entity"
    GROUP = "group"


class ArrowKind(str, Enum):
    SOLID = "solid"                     # -->
    OPEN = "open"                       # ---
    DOTTED = "dotted"                   # -.->
    THICK = "thick"                     # ==>
    SEQUENCE_SYNC = "sequence_sync"     # ->>
    SEQUENCE_REPLY = "sequence_reply"   # -->>
    SEQUENCE_ASYNC = "sequence_async"   # -)
    RELATION = "relation"               # ||--o{


DialectPayload = Union[
    ErPayload,
    SequencePayload,
    StatePayload,
    PiePayload,
    MindmapPayload,
    UnsupportedPayload,
]


@dataclass
class Position:
    x: float = 0.0
    y: float = 0.0


@dataclass
class Size:
    width: float
    height: float


@dataclass
class Node:
    id: str
    kind: NodeKind = NodeKind.RECTANGLE
    label: str = ""
    position: Position = field(default_factory=Position)
    size: Optional[Size] = None
    style: StyleOverride = field(default_factory=StyleOverride)
    parent: Optional[str] = None        # id of the enclosing Group node
    dialect_data: Optional[DialectPayload] = None


@dataclass
class EdgeData:
    order: Optional[int] = None
    is_lifeline: bool = False
    participants: List[str] = field(default_factory=list)
    arrow: Optional[str] = None         # arrow token exactly as written


@dataclass
class Edge:
    id: str
    source: str
    target: str
    source_handle: Optional[str] = None
    target_handle: Optional[str] = None
    label: Optional[str] = None
    arrow_kind: ArrowKind = ArrowKind.SOLID
    style: StyleOverride = field(default_factory=StyleOverride)
    dialect_data: EdgeData = field(default_factory=EdgeData)


@dataclass
class Graph:
    nodes: List[Node] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)
    dialect: Optional[Dialect] = None
    direction: str = "TD"
    title: Optional[str] = None
    show_data: bool = False

    def node_index(self) -> Dict[str, Node]:
        return {node.id: node for node in self.nodes}

    def get_node(self, node_id: str) -> Optional[Node]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def children_of(self, parent_id: Optional[str]) -> List[Node]:
        return [n for n in self.nodes if n.parent == parent_id]


def infer_dialect(graph: Graph) -> Dialect:
    """
    Best guess for graphs whose dialect was never set (built by an editor
    rather than returned from parse).
    """
    if graph.dialect is not None:
        return graph.dialect

    payloads = [n.dialect_data for n in graph.nodes if n.dialect_data is not None]

    if any(isinstance(p, UnsupportedPayload) for p in payloads):
        return Dialect.UNSUPPORTED
    if any(isinstance(p, SequencePayload) for p in payloads):
        return Dialect.SEQUENCE
    if any(n.kind == NodeKind.ENTITY for n in graph.nodes):
        return Dialect.ER
    if any(isinstance(p, PiePayload) for p in payloads):
        return Dialect.PIE
    if any(isinstance(p, MindmapPayload) for p in payloads):
        return Dialect.MINDMAP
    if any(isinstance(p, StatePayload) for p in payloads):
        return Dialect.STATE
    return Dialect.FLOWCHART

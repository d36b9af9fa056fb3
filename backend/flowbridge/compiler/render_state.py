from typing import Dict, List, Optional, Set

from flowbridge.dsl.mermaid import encode_label
from flowbridge.ir.graph import Edge, Graph, Node, NodeKind
from flowbridge.ir.payloads import StatePayload
from flowbridge.parsers.state import PSEUDO

INDENT = "    "
DECLARED_MARKERS = ("choice", "fork", "join")


def _marker(node: Node) -> Optional[str]:
    if isinstance(node.dialect_data, StatePayload):
        return node.dialect_data.marker
    return None


def is_pseudo_state(node: Node) -> bool:
    return _marker(node) in ("start", "end")


def state_declaration(node: Node) -> str:
    marker = _marker(node)
    if marker in DECLARED_MARKERS:
        return f"state {node.id} <<{marker}>>"
    if node.label and node.label != node.id:
        return f'state "{encode_label(node.label)}" as {node.id}'
    return node.id


def _composite_header(node: Node) -> str:
    if node.label and node.label != node.id:
        return f'state "{encode_label(node.label)}" as {node.id} {{'
    return f"state {node.id} {{"


def render_state(graph: Graph) -> List[str]:
    lines = ["stateDiagram-v2"]
    if graph.direction and graph.direction not in ("TD", "TB"):
        lines.append(INDENT + f"direction {graph.direction}")

    index = graph.node_index()
    children: Dict[Optional[str], List[Node]] = {}
    for node in graph.nodes:
        children.setdefault(node.parent, []).append(node)

    # transitions live in the block of the composite both endpoints share
    transitions: Dict[Optional[str], List[Edge]] = {}
    referenced: Set[str] = set()
    for edge in graph.edges:
        source = index.get(edge.source)
        target = index.get(edge.target)
        if source is None or target is None:
            continue
        scope = source.parent if source.parent == target.parent else None
        transitions.setdefault(scope, []).append(edge)
        referenced.update((edge.source, edge.target))

    def endpoint(node_id: str) -> str:
        return PSEUDO if is_pseudo_state(index[node_id]) else node_id

    def emit(scope: Optional[str], depth: int) -> None:
        pad = INDENT * depth
        for node in children.get(scope, []):
            if is_pseudo_state(node):
                continue
            if node.kind == NodeKind.GROUP:
                lines.append(pad + _composite_header(node))
                emit(node.id, depth + 1)
                lines.append(pad + "}")
                continue
            declaration = state_declaration(node)
            needed = scope is not None or declaration != node.id or node.id not in referenced
            if needed:
                lines.append(pad + declaration)

        for edge in transitions.get(scope, []):
            line = f"{endpoint(edge.source)} --> {endpoint(edge.target)}"
            if edge.label:
                line += f" : {encode_label(edge.label)}"
            lines.append(pad + line)

    emit(None, 1)
    return lines

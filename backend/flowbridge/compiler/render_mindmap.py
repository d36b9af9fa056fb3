from typing import Dict, List, Set

from flowbridge.dsl.mermaid import encode_label
from flowbridge.ir.graph import Graph, Node, NodeKind
from flowbridge.ir.payloads import MindmapPayload

SHAPES = {
    NodeKind.CIRCLE: ("((", "))"),
    NodeKind.ROUNDED: ("(", ")"),
    NodeKind.RECTANGLE: ("[", "]"),
    NodeKind.DIAMOND: ("{{", "}}"),
}


def node_text(node: Node) -> str:
    payload = node.dialect_data if isinstance(node.dialect_data, MindmapPayload) else None
    label = encode_label(node.label or node.id)
    if payload is not None and payload.bare and node.kind == NodeKind.RECTANGLE:
        text = label
    else:
        opener, closer = SHAPES.get(node.kind, ("[", "]"))
        text = f"{node.id}{opener}{label}{closer}"
    if payload is not None and payload.css_class:
        text += f" :::{payload.css_class}"
    return text


def render_mindmap(graph: Graph) -> List[str]:
    lines = ["mindmap"]
    if not graph.nodes:
        return lines

    index = graph.node_index()
    children: Dict[str, List[str]] = {n.id: [] for n in graph.nodes}
    has_parent: Set[str] = set()
    for edge in graph.edges:
        if edge.source in index and edge.target in index and edge.target not in has_parent:
            children[edge.source].append(edge.target)
            has_parent.add(edge.target)

    roots = [n.id for n in graph.nodes if n.id not in has_parent]
    if not roots:
        roots = [graph.nodes[0].id]
    written: Set[str] = set()

    def emit(node_id: str, depth: int) -> None:
        written.add(node_id)
        lines.append("  " * (depth + 1) + node_text(index[node_id]))
        for child in children[node_id]:
            if child not in written:
                emit(child, depth + 1)

    reachable: Set[str] = set()
    pending = list(roots)
    while pending:
        current = pending.pop()
        if current not in reachable:
            reachable.add(current)
            pending.extend(children[current])

    emit(roots[0], 0)
    # nodes cut off from every root hang under the first root
    for node in graph.nodes:
        if node.id not in reachable and node.id not in written:
            emit(node.id, 1)
    for root in roots[1:]:
        if root not in written:
            emit(root, 0)
    return lines

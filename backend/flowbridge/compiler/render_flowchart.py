from typing import Dict, List, Optional

from flowbridge.dsl.mermaid import format_label, format_number
from flowbridge.ir.graph import DIRECTIONS, Dialect, Edge, Graph, Node, NodeKind
from flowbridge.ir.style import dasharray_for
from flowbridge.parsers.flowchart import CANONICAL_ARROWS, arrow_kind
from flowbridge.visual.visual_style import default_node_style

INDENT = "    "

BRACKETS = {
    NodeKind.RECTANGLE: ("[", "]"),
    NodeKind.ROUNDED: ("(", ")"),
    NodeKind.CIRCLE: ("((", "))"),
    NodeKind.DIAMOND: ("{", "}"),
    NodeKind.CYLINDER: ("[(", ")]"),
    NodeKind.ENTITY: ("[", "]"),
}

# style attributes written as native "style ID ..." lines
NATIVE_STYLE_FIELDS = ("fill", "stroke_color", "text_color", "stroke_width", "stroke_style")


def node_declaration(node: Node) -> str:
    if node.label == node.id and node.kind == NodeKind.RECTANGLE:
        return node.id
    opener, closer = BRACKETS.get(node.kind, ("[", "]"))
    return f"{node.id}{opener}{format_label(node.label or node.id)}{closer}"


def arrow_token(edge: Edge) -> str:
    written = edge.dialect_data.arrow
    if written and arrow_kind(written) == edge.arrow_kind:
        return written
    return CANONICAL_ARROWS.get(edge.arrow_kind, "-->")


def edge_line(edge: Edge) -> str:
    arrow = arrow_token(edge)
    if edge.label:
        return f"{edge.source} {arrow}|{format_label(edge.label)}| {edge.target}"
    return f"{edge.source} {arrow} {edge.target}"


def style_line(node: Node) -> Optional[str]:
    diff = node.style.without_defaults(default_node_style(Dialect.FLOWCHART, node))
    props = []
    if diff.fill:
        props.append(f"fill:{diff.fill}")
    if diff.stroke_color:
        props.append(f"stroke:{diff.stroke_color}")
    if diff.text_color:
        props.append(f"color:{diff.text_color}")
    if diff.stroke_width is not None:
        props.append(f"stroke-width:{format_number(diff.stroke_width)}px")
    if diff.stroke_style:
        props.append(f"stroke-dasharray: {dasharray_for(diff.stroke_style)}")
    if not props:
        return None
    return f"style {node.id} {','.join(props)}"


def _group_header(group: Node) -> str:
    if not group.label or group.label == group.id:
        return f"subgraph {group.id}"
    return f"subgraph {group.id} [{format_label(group.label)}]"


def render_flowchart(graph: Graph) -> List[str]:
    direction = graph.direction if graph.direction in DIRECTIONS else "TD"
    lines = [f"graph {direction}"]

    children: Dict[Optional[str], List[Node]] = {}
    for node in graph.nodes:
        children.setdefault(node.parent, []).append(node)

    def declare(node: Node, depth: int) -> None:
        pad = INDENT * depth
        if node.kind != NodeKind.GROUP:
            lines.append(pad + node_declaration(node))
            return
        lines.append(pad + _group_header(node))
        for child in children.get(node.id, []):
            declare(child, depth + 1)
        lines.append(pad + "end")

    for node in children.get(None, []):
        declare(node, 1)

    for edge in graph.edges:
        lines.append(INDENT + edge_line(edge))

    for node in graph.nodes:
        line = style_line(node)
        if line:
            lines.append(INDENT + line)

    return lines

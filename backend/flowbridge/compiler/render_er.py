import re
from typing import List

from flowbridge.dsl.mermaid import encode_label
from flowbridge.ir.graph import Edge, Graph, Node
from flowbridge.ir.payloads import ErPayload
from flowbridge.parsers.er import DEFAULT_RELATION, RELATIONSHIP_RE

INDENT = "    "
_BARE_LABEL_RE = re.compile(r"^[A-Za-z0-9_-]+$")


def relation_label(label: str) -> str:
    encoded = encode_label(label)
    if _BARE_LABEL_RE.match(encoded):
        return encoded
    return f'"{encoded}"'


def relation_marker(edge: Edge) -> str:
    marker = edge.dialect_data.arrow
    if marker and RELATIONSHIP_RE.match(f"A {marker} B"):
        return marker
    return DEFAULT_RELATION


def entity_lines(node: Node) -> List[str]:
    attributes = node.dialect_data.attributes if isinstance(node.dialect_data, ErPayload) else []
    if not attributes:
        return [INDENT + node.id]

    lines = [INDENT + f"{node.id} {{"]
    for attribute in attributes:
        parts = [attribute.type, attribute.name]
        if attribute.constraint:
            parts.append(attribute.constraint)
        if attribute.comment:
            parts.append(f'"{encode_label(attribute.comment)}"')
        lines.append(INDENT * 2 + " ".join(parts))
    lines.append(INDENT + "}")
    return lines


def render_er(graph: Graph) -> List[str]:
    lines = ["erDiagram"]
    for node in graph.nodes:
        lines.extend(entity_lines(node))
    for edge in graph.edges:
        label = relation_label(edge.label) if edge.label else '""'
        lines.append(INDENT + f"{edge.source} {relation_marker(edge)} {edge.target} : {label}")
    return lines

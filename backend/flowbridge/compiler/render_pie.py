from typing import List

from flowbridge.dsl.mermaid import encode_label, format_number
from flowbridge.ir.graph import Graph
from flowbridge.ir.payloads import PiePayload

INDENT = "    "


def render_pie(graph: Graph) -> List[str]:
    title = encode_label(graph.title) if graph.title else None
    if graph.show_data:
        lines = ["pie showData"]
        if title:
            lines.append(INDENT + f"title {title}")
    else:
        lines = [f"pie title {title}" if title else "pie"]

    for node in graph.nodes:
        value = node.dialect_data.value if isinstance(node.dialect_data, PiePayload) else 0
        lines.append(INDENT + f'"{encode_label(node.label)}" : {format_number(value)}')
    return lines

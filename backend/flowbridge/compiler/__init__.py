import copy
import logging
from typing import Callable, Dict, List

from flowbridge.compiler.merge import merge_sidecar
from flowbridge.compiler.metadata import build_sidecar
from flowbridge.compiler.render_er import render_er
from flowbridge.compiler.render_flowchart import NATIVE_STYLE_FIELDS, render_flowchart
from flowbridge.compiler.render_mindmap import render_mindmap
from flowbridge.compiler.render_pie import render_pie
from flowbridge.compiler.render_sequence import render_sequence
from flowbridge.compiler.render_state import render_state
from flowbridge.dsl.detector import detect
from flowbridge.dsl.mermaid import split_lines
from flowbridge.dsl.sidecar import decode_sidecar, encode_sidecar
from flowbridge.ir.graph import Dialect, Graph, Node, NodeKind, Size, infer_dialect
from flowbridge.ir.payloads import UnsupportedPayload
from flowbridge.layout import apply_layout
from flowbridge.layout.sequence import layout_sequence
from flowbridge.parsers import parse_lines
from flowbridge.validation import enforce_invariants

logger = logging.getLogger(__name__)

PLACEHOLDER_ID = "unsupported"

RENDERERS: Dict[Dialect, Callable[[Graph], List[str]]] = {
    Dialect.FLOWCHART: render_flowchart,
    Dialect.SEQUENCE: render_sequence,
    Dialect.ER: render_er,
    Dialect.STATE: render_state,
    Dialect.PIE: render_pie,
    Dialect.MINDMAP: render_mindmap,
}


def unsupported_graph(dialect_name: str, source: str) -> Graph:
    """Single placeholder node standing in for a diagram type without a parser."""
    node = Node(
        id=PLACEHOLDER_ID,
        kind=NodeKind.RECTANGLE,
        label=f"Unsupported diagram type: {dialect_name}\nEdit the text view to change it.",
        size=Size(320, 90),
        dialect_data=UnsupportedPayload(dialect_name=dialect_name, source=source),
    )
    return Graph(nodes=[node], dialect=Dialect.UNSUPPORTED)


def parse_mermaid(text: str) -> Graph:
    """
    text → graph pipeline:
    detect → parse → (sequence geometry) → sidecar merge → invariants → layout
    """
    detection = detect(text)
    if detection.dialect == Dialect.UNSUPPORTED:
        return unsupported_graph(detection.keyword, text)

    lines = split_lines(text)
    sidecar = decode_sidecar(lines)
    graph = parse_lines(detection.dialect, lines)

    if detection.dialect == Dialect.SEQUENCE:
        # geometry is always derived; only sizes and styles are restored
        graph = layout_sequence(graph)
        merge_sidecar(graph, sidecar, use_positions=False)
        enforce_invariants(graph)
        return graph

    positioned = merge_sidecar(graph, sidecar)
    enforce_invariants(graph)
    apply_layout(graph, positioned)

    logger.info(
        "[PARSER] %s: %d nodes, %d edges",
        detection.dialect.value, len(graph.nodes), len(graph.edges),
    )
    return graph


def compile_to_mermaid(graph: Graph) -> str:
    """
    graph → text pipeline:
    copy → invariants → render → sidecar lines
    """
    dialect = infer_dialect(graph)
    if dialect == Dialect.UNSUPPORTED:
        for node in graph.nodes:
            if isinstance(node.dialect_data, UnsupportedPayload):
                return node.dialect_data.source
        return ""

    graph = copy.deepcopy(graph)
    graph.dialect = dialect
    enforce_invariants(graph)
    if dialect == Dialect.SEQUENCE:
        graph = layout_sequence(graph)

    lines = RENDERERS[dialect](graph)
    native = NATIVE_STYLE_FIELDS if dialect == Dialect.FLOWCHART else ()
    sidecar_lines = encode_sidecar(build_sidecar(graph, dialect, native))

    text = "\n".join(lines)
    if sidecar_lines:
        text += "\n\n" + "\n".join(sidecar_lines)
    return text + "\n"

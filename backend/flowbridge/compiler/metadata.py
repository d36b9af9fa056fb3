import logging
import math
from typing import Dict, Iterable

from flowbridge.dsl.sidecar import (
    EdgeLineStyle,
    EdgeOverrideEntry,
    LabelStyle,
    LayoutEntry,
    Sidecar,
    StyleEntry,
    style_to_entry,
)
from flowbridge.ir.graph import Dialect, Edge, Graph
from flowbridge.ir.style import StyleOverride, dasharray_for
from flowbridge.layout.sequence import is_synthetic
from flowbridge.visual.visual_style import default_edge_style, default_node_style

logger = logging.getLogger(__name__)


def _finite(*values: float) -> bool:
    return all(math.isfinite(value) for value in values)


def _without(style: StyleOverride, fields: Iterable[str]) -> StyleOverride:
    kept = dict(vars(style))
    for name in fields:
        kept[name] = None
    return StyleOverride(**kept)


def _edge_entry(edge: Edge, diff: StyleOverride, with_handles: bool) -> EdgeOverrideEntry:
    line = None
    if diff.stroke_color is not None or diff.stroke_width is not None or diff.stroke_style is not None:
        line = EdgeLineStyle(
            stroke=diff.stroke_color,
            stroke_width=diff.stroke_width,
            stroke_dasharray=dasharray_for(diff.stroke_style, ",") if diff.stroke_style else None,
        )
    return EdgeOverrideEntry(
        source=edge.source,
        target=edge.target,
        label=edge.label or None,
        source_handle=edge.source_handle if with_handles else None,
        target_handle=edge.target_handle if with_handles else None,
        style=line,
        label_style=LabelStyle(fill=diff.text_color) if diff.text_color else None,
        label_bg_style=LabelStyle(fill=diff.label_bg) if diff.label_bg else None,
    )


def build_sidecar(graph: Graph, dialect: Dialect, native_fields: Iterable[str] = ()) -> Sidecar:
    """
    Collect what the DSL cannot carry: rounded positions (sizes only for
    sequence diagrams), style attributes that differ from the dialect
    defaults and are not written natively, and edge handles/styles.
    """
    native_fields = tuple(native_fields)
    sequence = dialect == Dialect.SEQUENCE

    positions: Dict[str, LayoutEntry] = {}
    styles: Dict[str, StyleEntry] = {}
    for node in graph.nodes:
        if sequence and is_synthetic(node):
            continue

        size = node.size
        if size is not None and not _finite(size.width, size.height):
            size = None
        if sequence:
            if size is not None:
                positions[node.id] = LayoutEntry(w=round(size.width), h=round(size.height))
        elif not _finite(node.position.x, node.position.y):
            logger.warning("[SERIALIZER] Skipping non-finite position of %s", node.id)
        else:
            entry = LayoutEntry(x=round(node.position.x), y=round(node.position.y))
            if size is not None:
                entry.w = round(size.width)
                entry.h = round(size.height)
            positions[node.id] = entry

        diff = _without(node.style.without_defaults(default_node_style(dialect, node)), native_fields)
        if not diff.is_empty():
            styles[node.id] = style_to_entry(diff)

    edges = []
    for edge in graph.edges:
        if edge.dialect_data.is_lifeline:
            continue
        diff = edge.style.without_defaults(default_edge_style(edge))
        with_handles = not sequence and bool(edge.source_handle or edge.target_handle)
        if diff.is_empty() and not with_handles:
            continue
        edges.append(_edge_entry(edge, diff, with_handles))

    return Sidecar(positions=positions, styles=styles, edges=edges)

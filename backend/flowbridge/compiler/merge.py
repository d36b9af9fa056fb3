"""
Merge decoded sidecar data into a parsed graph.

Structure from the DSL always wins: the sidecar only fills in positions,
sizes, styles and edge handles, and only for ids the DSL produced.
"""

import logging
from typing import Dict, List, Optional, Set

from flowbridge.dsl.sidecar import EdgeOverrideEntry, Sidecar, entry_to_style
from flowbridge.ir.graph import Edge, Graph, Position, Size
from flowbridge.ir.style import StyleOverride, stroke_style_from_dasharray

logger = logging.getLogger(__name__)


def edge_style_from_entry(entry: EdgeOverrideEntry) -> StyleOverride:
    style = StyleOverride()
    if entry.style is not None:
        style.stroke_color = entry.style.stroke
        style.stroke_width = entry.style.stroke_width
        if entry.style.stroke_dasharray is not None:
            style.stroke_style = stroke_style_from_dasharray(entry.style.stroke_dasharray)
    if entry.label_style is not None:
        style.text_color = entry.label_style.fill
    if entry.label_bg_style is not None:
        style.label_bg = entry.label_bg_style.fill
    return style


def _match_edge(edge: Edge, entries: List[EdgeOverrideEntry], used: Set[int], same_label: bool) -> Optional[int]:
    candidates = [
        i for i, entry in enumerate(entries)
        if i not in used and entry.source == edge.source and entry.target == edge.target
    ]
    if not candidates:
        return None
    if not same_label:
        return candidates[0]
    for i in candidates:
        if (entries[i].label or "") == (edge.label or ""):
            return i
    return None


def merge_sidecar(graph: Graph, sidecar: Sidecar, use_positions: bool = True) -> Set[str]:
    """Apply sidecar data in place; returns the ids that received a saved position."""
    index = graph.node_index()
    positioned: Set[str] = set()
    stale = 0

    for node_id, entry in sidecar.positions.items():
        node = index.get(node_id)
        if node is None:
            stale += 1
            continue
        if use_positions and entry.x is not None and entry.y is not None:
            node.position = Position(entry.x, entry.y)
            positioned.add(node_id)
        if entry.w is not None and entry.h is not None:
            node.size = Size(entry.w, entry.h)

    for node_id, entry in sidecar.styles.items():
        node = index.get(node_id)
        if node is None:
            stale += 1
            continue
        node.style = node.style.merged(entry_to_style(entry))

    # equal labels claim their entries before any edge falls back to source/target only
    used: Set[int] = set()
    matches: Dict[int, int] = {}
    for same_label in (True, False):
        for position, edge in enumerate(graph.edges):
            if position in matches:
                continue
            match = _match_edge(edge, sidecar.edges, used, same_label)
            if match is not None:
                used.add(match)
                matches[position] = match

    for position, edge in enumerate(graph.edges):
        if position not in matches:
            continue
        entry = sidecar.edges[matches[position]]
        if entry.source_handle:
            edge.source_handle = entry.source_handle
        if entry.target_handle:
            edge.target_handle = entry.target_handle
        edge.style = edge.style.merged(edge_style_from_entry(entry))

    stale += len(sidecar.edges) - len(used)
    if stale:
        logger.debug("[SIDECAR] %d stale sidecar entries dropped", stale)
    return positioned

import logging
from typing import Dict, Set, Tuple

from flowbridge.ir.graph import Dialect, Graph, NodeKind, Position, Size, infer_dialect
from flowbridge.layout.layered import compute_layered_layout
from flowbridge.layout.sequence import layout_sequence
from flowbridge.layout.tree import tree_positions

logger = logging.getLogger(__name__)

# below this share of saved positions the whole graph is laid out again
LAYOUT_THRESHOLD = 0.5


def apply_layout(graph: Graph, positioned: Set[str]) -> Graph:
    """
    Fill in node positions. ``positioned`` holds the ids whose position came
    from saved layout data.
    """
    dialect = infer_dialect(graph)

    if dialect == Dialect.SEQUENCE:
        return layout_sequence(graph)
    if dialect == Dialect.UNSUPPORTED or not graph.nodes:
        return graph

    known = positioned & {n.id for n in graph.nodes}
    relayout_all = len(known) < len(graph.nodes) * LAYOUT_THRESHOLD

    group_sizes: Dict[str, Tuple[float, float]] = {}
    if dialect == Dialect.MINDMAP:
        computed = tree_positions(graph)
    else:
        computed, group_sizes = compute_layered_layout(graph)

    moved = 0
    for node in graph.nodes:
        if not relayout_all and node.id in known:
            continue
        x, y = computed[node.id]
        node.position = Position(x, y)
        moved += 1
        if node.kind == NodeKind.GROUP and node.id in group_sizes and (relayout_all or node.size is None):
            node.size = Size(*group_sizes[node.id])

    logger.info(
        "[LAYOUT] %s layout: %d/%d nodes had saved positions, %d placed",
        dialect.value, len(known), len(graph.nodes), moved,
    )
    return graph

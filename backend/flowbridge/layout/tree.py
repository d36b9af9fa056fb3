from typing import Dict, List, Set, Tuple

from flowbridge.ir.graph import Graph
from flowbridge.layout.layered import MARGIN, NODE_SEP
from flowbridge.visual.visual_style import default_size

LEVEL_STEP = 250
ROW_STEP = 100


def tree_positions(graph: Graph) -> Dict[str, Tuple[float, float]]:
    """
    Left-to-right tree: x by depth, leaves on consecutive rows, parents
    centered on their children.
    """
    children: Dict[str, List[str]] = {n.id: [] for n in graph.nodes}
    has_parent: Set[str] = set()
    for edge in graph.edges:
        if edge.source in children and edge.target in children and edge.target not in has_parent:
            children[edge.source].append(edge.target)
            has_parent.add(edge.target)

    roots = [n.id for n in graph.nodes if n.id not in has_parent]
    sizes = {n.id: default_size(n) for n in graph.nodes}
    centers: Dict[str, Tuple[float, float]] = {}
    visited: Set[str] = set()
    next_row = [0]

    def place(node_id: str, depth: int) -> float:
        visited.add(node_id)
        pending = [c for c in children[node_id] if c not in visited]
        ys = [place(child, depth + 1) for child in pending if child not in visited]
        if ys:
            y = (ys[0] + ys[-1]) / 2
        else:
            y = next_row[0] * ROW_STEP
            next_row[0] += 1
        centers[node_id] = (depth * LEVEL_STEP, y)
        return y

    for root in roots:
        if root not in visited:
            place(root, 0)
            next_row[0] += 1
    # nodes only reachable through a cycle
    for node in graph.nodes:
        if node.id not in visited:
            place(node.id, 0)
            next_row[0] += 1

    positions = {}
    for node_id, (x, y) in centers.items():
        _, height = sizes[node_id]
        positions[node_id] = (float(MARGIN + x), float(round(MARGIN + NODE_SEP + y - height / 2)))
    return positions

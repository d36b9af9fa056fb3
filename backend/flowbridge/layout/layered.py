"""
Layered (Sugiyama-style) layout for flowchart, ER and state graphs.

Each compound level is laid out on its own, children before parents, so a
group's cell size is known before its level is placed. Positions are top-left
corners; children are relative to their group's top-left.
"""

import logging
from collections import deque
from typing import Dict, List, Optional, Set, Tuple

from flowbridge.ir.graph import Graph, Node, NodeKind
from flowbridge.visual.visual_style import NODE_SIZE, default_size

logger = logging.getLogger(__name__)

NODE_SEP = 70
RANK_SEP = 70
EDGE_SEP = 30
MARGIN = 20

GROUP_PADDING = 20
GROUP_PADDING_TOP = 40

SWEEPS = 8

Point = Tuple[float, float]
Extent = Tuple[float, float]


# ============================================================
# Single level
# ============================================================

def _break_cycles(nodes: List[str], edges: List[Tuple[str, str]]) -> List[Tuple[str, str]]:
    """Reverse DFS back edges, visiting nodes and edges in their given order."""
    adjacency: Dict[str, List[str]] = {v: [] for v in nodes}
    for u, v in edges:
        adjacency[u].append(v)

    visited: Set[str] = set()
    on_stack: Set[str] = set()
    back_edges: Set[Tuple[str, str]] = set()

    for root in nodes:
        if root in visited:
            continue
        visited.add(root)
        on_stack.add(root)
        stack = [(root, iter(adjacency[root]))]
        while stack:
            current, successors = stack[-1]
            descended = False
            for nxt in successors:
                if nxt in on_stack:
                    back_edges.add((current, nxt))
                elif nxt not in visited:
                    visited.add(nxt)
                    on_stack.add(nxt)
                    stack.append((nxt, iter(adjacency[nxt])))
                    descended = True
                    break
            if not descended:
                stack.pop()
                on_stack.discard(current)

    return [(v, u) if (u, v) in back_edges else (u, v) for u, v in edges]


def _rank(nodes: List[str], edges: List[Tuple[str, str]]) -> Dict[str, int]:
    """Longest path from the sources, via a stable topological sort."""
    successors: Dict[str, List[str]] = {v: [] for v in nodes}
    indegree: Dict[str, int] = {v: 0 for v in nodes}
    for u, v in edges:
        successors[u].append(v)
        indegree[v] += 1

    rank = {v: 0 for v in nodes}
    queue = deque(v for v in nodes if indegree[v] == 0)
    while queue:
        u = queue.popleft()
        for v in successors[u]:
            rank[v] = max(rank[v], rank[u] + 1)
            indegree[v] -= 1
            if indegree[v] == 0:
                queue.append(v)
    return rank


def _count_crossings(order: List[List[str]], segments: List[Tuple[str, str]], rank: Dict[str, int]) -> int:
    position = {v: i for layer in order for i, v in enumerate(layer)}
    by_rank: Dict[int, List[Tuple[int, int]]] = {}
    for u, v in segments:
        by_rank.setdefault(rank[u], []).append((position[u], position[v]))

    crossings = 0
    for pairs in by_rank.values():
        for i in range(len(pairs)):
            for j in range(i + 1, len(pairs)):
                a1, b1 = pairs[i]
                a2, b2 = pairs[j]
                if (a1 - a2) * (b1 - b2) < 0:
                    crossings += 1
    return crossings


def _reorder(layer: List[str], neighbors: Dict[str, List[str]], fixed: List[str]) -> List[str]:
    fixed_position = {v: i for i, v in enumerate(fixed)}

    def barycenter(item: Tuple[int, str]) -> Tuple[float, int]:
        index, v = item
        linked = [fixed_position[n] for n in neighbors.get(v, []) if n in fixed_position]
        if not linked:
            return float(index), index
        return sum(linked) / len(linked), index

    return [v for _, v in sorted(enumerate(layer), key=barycenter)]


def layered_positions(
    nodes: List[str],
    sizes: Dict[str, Extent],
    edges: List[Tuple[str, str]],
    direction: str = "TB",
) -> Tuple[Dict[str, Point], Extent]:
    """
    Place one level of nodes. Returns top-left positions starting at the
    origin and the width/height of the placed content.
    """
    if not nodes:
        return {}, (0.0, 0.0)

    horizontal = direction in ("LR", "RL")
    cell = {v: (sizes[v][1], sizes[v][0]) if horizontal else sizes[v] for v in nodes}

    member = set(nodes)
    clean = []
    seen_pairs = set()
    for u, v in edges:
        if u == v or u not in member or v not in member or (u, v) in seen_pairs:
            continue
        seen_pairs.add((u, v))
        clean.append((u, v))

    dag = _break_cycles(nodes, clean)
    rank = _rank(nodes, dag)

    # split long edges with zero-size dummy nodes
    layers: Dict[int, List[str]] = {}
    for v in nodes:
        layers.setdefault(rank[v], []).append(v)

    dummies: Set[str] = set()
    segments: List[Tuple[str, str]] = []
    counter = 0
    for u, v in dag:
        previous = u
        for r in range(rank[u] + 1, rank[v]):
            # dummy ids never shadow a real node of this level
            dummy = f"__dummy_{counter}"
            while dummy in member:
                counter += 1
                dummy = f"__dummy_{counter}"
            counter += 1
            dummies.add(dummy)
            rank[dummy] = r
            cell[dummy] = (0.0, 0.0)
            layers.setdefault(r, []).append(dummy)
            segments.append((previous, dummy))
            previous = dummy
        segments.append((previous, v))

    max_rank = max(layers)
    order = [layers.get(r, []) for r in range(max_rank + 1)]

    upper: Dict[str, List[str]] = {}
    lower: Dict[str, List[str]] = {}
    for u, v in segments:
        lower.setdefault(u, []).append(v)
        upper.setdefault(v, []).append(u)

    best = [list(layer) for layer in order]
    best_crossings = _count_crossings(best, segments, rank)
    for sweep in range(SWEEPS):
        if best_crossings == 0:
            break
        if sweep % 2 == 0:
            for r in range(1, len(order)):
                order[r] = _reorder(order[r], upper, order[r - 1])
        else:
            for r in range(len(order) - 2, -1, -1):
                order[r] = _reorder(order[r], lower, order[r + 1])
        crossings = _count_crossings(order, segments, rank)
        if crossings < best_crossings:
            best = [list(layer) for layer in order]
            best_crossings = crossings

    # centered rank packing
    def gap(a: str, b: str) -> float:
        return EDGE_SEP if a in dummies or b in dummies else NODE_SEP

    rank_widths = []
    for layer in best:
        width = sum(cell[v][0] for v in layer)
        width += sum(gap(a, b) for a, b in zip(layer, layer[1:]))
        rank_widths.append(width)
    content_width = max(rank_widths) if rank_widths else 0.0

    positions: Dict[str, Point] = {}
    y = 0.0
    for layer, width in zip(best, rank_widths):
        rank_height = max((cell[v][1] for v in layer), default=0.0)
        x = (content_width - width) / 2
        for index, v in enumerate(layer):
            w, h = cell[v]
            if v not in dummies:
                positions[v] = (float(round(x)), float(round(y + (rank_height - h) / 2)))
            x += w
            if index + 1 < len(layer):
                x += gap(v, layer[index + 1])
        y += rank_height + RANK_SEP
    content_height = max(0.0, y - RANK_SEP)

    return _orient(positions, cell, direction, content_width, content_height)


def _orient(
    positions: Dict[str, Point],
    cell: Dict[str, Extent],
    direction: str,
    width: float,
    height: float,
) -> Tuple[Dict[str, Point], Extent]:
    if direction in ("LR", "RL"):
        oriented = {v: (y, x) for v, (x, y) in positions.items()}
        width, height = height, width
        if direction == "RL":
            oriented = {
                v: (width - x - cell[v][1], y) for v, (x, y) in oriented.items()
            }
        return oriented, (width, height)
    if direction == "BT":
        flipped = {v: (x, height - y - cell[v][1]) for v, (x, y) in positions.items()}
        return flipped, (width, height)
    return positions, (width, height)


# ============================================================
# Compound graph
# ============================================================

def _valid_parent(node: Node, index: Dict[str, Node]) -> Optional[str]:
    parent = index.get(node.parent) if node.parent else None
    if parent is None or parent.kind != NodeKind.GROUP or parent.id == node.id:
        return None
    return parent.id


def compute_layered_layout(graph: Graph) -> Tuple[Dict[str, Point], Dict[str, Extent]]:
    """
    Positions for every node (parent-relative for children) and the computed
    size of every group.
    """
    index = graph.node_index()
    parent_of = {n.id: _valid_parent(n, index) for n in graph.nodes}

    children: Dict[Optional[str], List[str]] = {}
    for node in graph.nodes:
        children.setdefault(parent_of[node.id], []).append(node.id)

    def ancestors(node_id: str) -> List[str]:
        chain = [node_id]
        seen = {node_id}
        parent = parent_of.get(node_id)
        while parent is not None and parent not in seen:
            chain.append(parent)
            seen.add(parent)
            parent = parent_of.get(parent)
        return chain

    chains = {n.id: ancestors(n.id) for n in graph.nodes}
    # a broken parent chain (cycle) is laid out at top level
    for node_id, chain in chains.items():
        if parent_of[node_id] is not None and parent_of.get(chain[-1]) is not None:
            children[parent_of[node_id]].remove(node_id)
            parent_of[node_id] = None
            children.setdefault(None, []).append(node_id)
            chains[node_id] = [node_id]

    def lifted(node_id: str, level: Optional[str]) -> Optional[str]:
        for candidate in chains.get(node_id, []):
            if parent_of.get(candidate) == level:
                return candidate
        return None

    positions: Dict[str, Point] = {}
    group_sizes: Dict[str, Extent] = {}

    def place(level: Optional[str]) -> Extent:
        members = children.get(level, [])
        sizes: Dict[str, Extent] = {}
        for member in members:
            node = index[member]
            if node.kind == NodeKind.GROUP:
                if children.get(member):
                    width, height = place(member)
                    group_sizes[member] = (
                        width + 2 * GROUP_PADDING,
                        height + GROUP_PADDING_TOP + GROUP_PADDING,
                    )
                else:
                    group_sizes[member] = NODE_SIZE[NodeKind.GROUP]
                sizes[member] = group_sizes[member]
            else:
                sizes[member] = default_size(node)

        level_edges = []
        for edge in graph.edges:
            source = lifted(edge.source, level)
            target = lifted(edge.target, level)
            if source and target and source != target:
                level_edges.append((source, target))

        placed, extent = layered_positions(members, sizes, level_edges, graph.direction)
        offset = (MARGIN, MARGIN) if level is None else (GROUP_PADDING, GROUP_PADDING_TOP)
        for member, (x, y) in placed.items():
            positions[member] = (x + offset[0], y + offset[1])
        return extent

    place(None)
    logger.debug("[LAYOUT] Layered layout placed %d nodes", len(positions))
    return positions, group_sizes

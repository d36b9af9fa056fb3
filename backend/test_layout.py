"""Layered layout tests"""

from flowbridge.compiler import parse_mermaid
from flowbridge.ir.graph import Dialect, Edge, Graph, Node, NodeKind, Position
from flowbridge.layout import LAYOUT_THRESHOLD, apply_layout
from flowbridge.layout.layered import (
    GROUP_PADDING,
    GROUP_PADDING_TOP,
    MARGIN,
    RANK_SEP,
    compute_layered_layout,
    layered_positions,
)
from flowbridge.visual.visual_style import NODE_SIZE


def make_node(id: str, kind: NodeKind = NodeKind.RECTANGLE, parent: str = None) -> Node:
    return Node(id=id, kind=kind, label=id, parent=parent)


def make_graph(nodes, edges, direction="TD") -> Graph:
    return Graph(
        nodes=nodes,
        edges=[Edge(id=f"e{i}", source=s, target=t) for i, (s, t) in enumerate(edges)],
        dialect=Dialect.FLOWCHART,
        direction=direction,
    )


def test_ranks_flow_top_to_bottom():
    graph = make_graph([make_node("A"), make_node("B"), make_node("C")], [("A", "B"), ("B", "C")])
    positions, _ = compute_layered_layout(graph)
    assert positions["A"] == (MARGIN, MARGIN)
    assert positions["B"][1] == MARGIN + 70 + RANK_SEP
    assert positions["A"][1] < positions["B"][1] < positions["C"][1]


def test_left_to_right_swaps_axes():
    graph = make_graph([make_node("A"), make_node("B")], [("A", "B")], direction="LR")
    positions, _ = compute_layered_layout(graph)
    assert positions["A"][1] == positions["B"][1]
    assert positions["A"][0] < positions["B"][0]


def test_bottom_to_top_flips():
    graph = make_graph([make_node("A"), make_node("B")], [("A", "B")], direction="BT")
    positions, _ = compute_layered_layout(graph)
    assert positions["A"][1] > positions["B"][1]


def test_cycles_and_self_loops_terminate():
    sizes = {v: (180, 70) for v in "ABC"}
    positions, (width, height) = layered_positions(
        ["A", "B", "C"], sizes, [("A", "B"), ("B", "C"), ("C", "A"), ("A", "A")]
    )
    assert set(positions) == {"A", "B", "C"}
    assert height > 0 and width > 0


def test_crossings_are_reduced():
    # A->D and B->C cross in declaration order
    sizes = {v: (100, 50) for v in "ABCD"}
    positions, _ = layered_positions(["A", "B", "C", "D"], sizes, [("A", "D"), ("B", "C")])
    assert (positions["A"][0] < positions["B"][0]) == (positions["D"][0] < positions["C"][0])


def test_layout_is_deterministic():
    text = "graph TD\nA --> B\nA --> C\nB --> D\nC --> D\nD --> A\nsubgraph G\n    E --> F\nend\nA --> E"
    first = [(n.id, n.position.x, n.position.y) for n in parse_mermaid(text).nodes]
    second = [(n.id, n.position.x, n.position.y) for n in parse_mermaid(text).nodes]
    assert first == second


def test_groups_wrap_their_children():
    graph = make_graph(
        [
            make_node("G", NodeKind.GROUP),
            make_node("A", parent="G"),
            make_node("B", parent="G"),
            make_node("Empty", NodeKind.GROUP),
            make_node("C"),
        ],
        [("A", "B"), ("B", "C")],
    )
    positions, group_sizes = compute_layered_layout(graph)

    # children are relative to the group's top-left corner
    assert positions["A"] == (GROUP_PADDING, GROUP_PADDING_TOP)
    width, height = group_sizes["G"]
    assert width == 180 + 2 * GROUP_PADDING
    assert height == 70 + RANK_SEP + 70 + GROUP_PADDING_TOP + GROUP_PADDING
    assert group_sizes["Empty"] == NODE_SIZE[NodeKind.GROUP]

    # edge B -> C is lifted to G -> C at the top level
    assert positions["G"][1] < positions["C"][1]


def test_threshold_keeps_saved_positions():
    graph = make_graph([make_node("A"), make_node("B"), make_node("C"), make_node("D")], [("A", "B")])
    graph.nodes[0].position = Position(500, 600)
    graph.nodes[1].position = Position(700, 800)

    # 2 of 4 saved: at the threshold, saved positions stay
    assert 2 >= 4 * LAYOUT_THRESHOLD
    apply_layout(graph, {"A", "B"})
    assert (graph.nodes[0].position.x, graph.nodes[0].position.y) == (500, 600)
    assert (graph.nodes[1].position.x, graph.nodes[1].position.y) == (700, 800)
    assert graph.nodes[2].position.x != 0 or graph.nodes[2].position.y != 0


def test_below_threshold_relayouts_everything():
    graph = make_graph([make_node("A"), make_node("B"), make_node("C")], [("A", "B")])
    graph.nodes[0].position = Position(500, 600)
    apply_layout(graph, {"A"})
    assert (graph.nodes[0].position.x, graph.nodes[0].position.y) == (MARGIN, MARGIN)


def test_group_gets_computed_size():
    graph = make_graph([make_node("G", NodeKind.GROUP), make_node("A", parent="G")], [])
    apply_layout(graph, set())
    assert graph.nodes[0].size.width == 180 + 2 * GROUP_PADDING


def test_dummy_nodes_never_shadow_real_ids():
    names = ["A", "B", "C", "__dummy_0", "__dummy_1"]
    sizes = {v: (100, 50) for v in names}
    positions, _ = layered_positions(names, sizes, [("A", "B"), ("B", "C"), ("A", "C")])
    assert set(positions) == set(names)

    graph = parse_mermaid("graph TD\n A --> B\n B --> C\n A --> C\n __dummy_0")
    assert [n.id for n in graph.nodes] == ["A", "B", "C", "__dummy_0"]

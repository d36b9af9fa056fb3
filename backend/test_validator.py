"""Graph validator and auto-fixer tests"""

from flowbridge.ir.graph import Dialect, Edge, EdgeData, Graph, Node, NodeKind
from flowbridge.ir.payloads import PiePayload
from flowbridge.validation import (
    GraphAutoFixer,
    GraphValidator,
    ValidationSeverity,
    enforce_invariants,
    validate_graph,
)


def make_node(id: str, label: str = None, kind: NodeKind = NodeKind.RECTANGLE, parent: str = None) -> Node:
    return Node(id=id, kind=kind, label=id if label is None else label, parent=parent)


def make_edge(source: str, target: str, label: str = None, order: int = None) -> Edge:
    return Edge(id=f"{source}-{target}", source=source, target=target, label=label, dialect_data=EdgeData(order=order))


def broken_graph() -> Graph:
    return Graph(
        nodes=[
            make_node("api", "API Gateway"),
            make_node("orders", "Order Service"),
            make_node("orders", "Order Service DUPLICATE"),   # Duplicate ID!
            make_node("db", "Orders DB", NodeKind.CYLINDER),
            make_node("blank", ""),
            make_node("loop", kind=NodeKind.GROUP, parent="loop"),   # Self parent!
            make_node("child", parent="db"),   # Parent is not a group
            make_node("orphan", parent="nowhere"),
        ],
        edges=[
            make_edge("api", "orders"),
            make_edge("api", "orders"),   # Duplicate edge!
            make_edge("orders", "missing"),   # Missing target!
        ],
        dialect=Dialect.FLOWCHART,
    )


def test_validator_reports_every_issue():
    result = GraphValidator().validate(broken_graph())
    assert not result.is_valid
    assert result.codes() == {
        "DUPLICATE_NODE_ID",
        "DUPLICATE_EDGE",
        "MISSING_TARGET_NODE",
        "SELF_PARENT",
        "PARENT_NOT_GROUP",
        "MISSING_PARENT",
        "EMPTY_LABEL",
    }
    assert result.warning_count == 1
    assert result.stats == {"nodes": 8, "edges": 3, "groups": 1}
    assert result.get_summary().startswith("invalid")


def test_empty_label_is_info_only():
    result = validate_graph(Graph(nodes=[make_node("a", "")]))
    assert result.is_valid
    assert [i.severity for i in result.issues] == [ValidationSeverity.INFO]


def test_pie_slices_may_have_empty_labels():
    node = Node(id="slice_", kind=NodeKind.CIRCLE, label="", dialect_data=PiePayload(value=1))
    assert validate_graph(Graph(nodes=[node])).issues == []


def test_parent_cycle_detected():
    graph = Graph(nodes=[
        make_node("G1", kind=NodeKind.GROUP, parent="G2"),
        make_node("G2", kind=NodeKind.GROUP, parent="G1"),
    ])
    assert "PARENT_CYCLE" in validate_graph(graph).codes()


def test_sequence_messages_may_repeat():
    graph = Graph(
        nodes=[make_node("a"), make_node("b")],
        edges=[make_edge("a", "b", "poll", order=0), make_edge("a", "b", "poll", order=1)],
    )
    assert "DUPLICATE_EDGE" not in validate_graph(graph).codes()


def test_fixer_repairs_graph():
    graph = broken_graph()
    result = GraphAutoFixer().fix(graph)

    assert result.success
    assert [n.id for n in graph.nodes] == ["api", "orders", "db", "blank", "loop", "child", "orphan"]
    assert graph.get_node("orders").label == "Order Service"
    assert [(e.source, e.target) for e in graph.edges] == [("api", "orders")]
    assert all(n.parent is None for n in graph.nodes)
    assert "DUPLICATE_NODE_ID" in result.issues_fixed
    assert result.changes_made
    # empty labels are reported, never rewritten
    assert graph.get_node("blank").label == ""


def test_fixer_breaks_parent_cycles():
    graph = Graph(nodes=[
        make_node("G1", kind=NodeKind.GROUP, parent="G2"),
        make_node("G2", kind=NodeKind.GROUP, parent="G1"),
        make_node("A", parent="G1"),
    ])
    result = enforce_invariants(graph)
    assert result.success
    assert "PARENT_CYCLE" not in validate_graph(graph).codes()
    assert graph.get_node("A").parent == "G1"


def test_valid_graph_is_untouched():
    graph = Graph(
        nodes=[make_node("G", kind=NodeKind.GROUP), make_node("A", parent="G"), make_node("B")],
        edges=[make_edge("A", "B")],
    )
    result = enforce_invariants(graph)
    assert result.success
    assert result.changes_made == []
    assert result.to_dict()["issues_remaining"] == []

"""Mindmap parser, renderer and tree layout tests"""

from flowbridge.compiler.render_mindmap import render_mindmap
from flowbridge.dsl.mermaid import split_lines
from flowbridge.ir.graph import ArrowKind, NodeKind
from flowbridge.layout.tree import LEVEL_STEP, tree_positions
from flowbridge.parsers import mindmap

SAMPLE = """mindmap
  root((Central))
    A[Branch]
      leaf text
      ::icon(fa fa-book)
    B(Other):::urgent
      C{{Hex}}
        :::calm
"""


def parse(text: str):
    return mindmap.parse(split_lines(text))


def test_indentation_builds_the_tree():
    graph = parse(SAMPLE)
    assert [n.id for n in graph.nodes] == ["root", "A", "leaf_text", "B", "C"]
    assert [(e.source, e.target) for e in graph.edges] == [
        ("root", "A"), ("A", "leaf_text"), ("root", "B"), ("B", "C"),
    ]
    assert all(e.arrow_kind == ArrowKind.OPEN for e in graph.edges)
    assert graph.direction == "LR"


def test_shapes_classes_and_bare_text():
    graph = parse(SAMPLE)
    index = graph.node_index()
    assert index["root"].kind == NodeKind.CIRCLE
    assert index["A"].kind == NodeKind.RECTANGLE
    assert index["B"].kind == NodeKind.ROUNDED
    assert index["C"].kind == NodeKind.DIAMOND

    leaf = index["leaf_text"]
    assert leaf.label == "leaf text"
    assert leaf.dialect_data.bare
    assert leaf.dialect_data.depth == 2

    assert index["B"].dialect_data.css_class == "urgent"
    assert index["C"].dialect_data.css_class == "calm"


def test_repeated_bare_text_gets_unique_ids():
    graph = parse("mindmap\n  root\n    same\n    same")
    assert [n.id for n in graph.nodes] == ["root", "same", "same_2"]


def test_render():
    assert render_mindmap(parse(SAMPLE)) == [
        "mindmap",
        "  root((Central))",
        "    A[Branch]",
        "      leaf text",
        "    B(Other) :::urgent",
        "      C{{Hex}} :::calm",
    ]


def test_tree_layout_left_to_right():
    graph = parse(SAMPLE)
    positions = tree_positions(graph)
    assert positions["A"][0] - positions["root"][0] == LEVEL_STEP
    assert positions["leaf_text"][0] - positions["A"][0] == LEVEL_STEP
    # leaves on consecutive rows, parents centered between them
    assert positions["leaf_text"][1] < positions["C"][1]
    assert positions == tree_positions(graph)

"""Pie chart parser and renderer tests"""

from flowbridge.compiler.render_pie import render_pie
from flowbridge.dsl.mermaid import split_lines
from flowbridge.ir.graph import NodeKind
from flowbridge.parsers import pie


def parse(text: str):
    return pie.parse(split_lines(text))


def test_title_on_header_and_slices():
    graph = parse('pie title Pets adopted\n    "Dogs" : 386\n    "Cats" : 85.5\n    "Rats" : 15')
    assert graph.title == "Pets adopted"
    assert not graph.show_data
    assert [(n.id, n.label, n.dialect_data.value) for n in graph.nodes] == [
        ("slice_Dogs", "Dogs", 386.0),
        ("slice_Cats", "Cats", 85.5),
        ("slice_Rats", "Rats", 15.0),
    ]
    assert all(n.kind == NodeKind.CIRCLE for n in graph.nodes)


def test_show_data_and_separate_title():
    graph = parse('pie showData\n    title Budget\n    "Rent" : 1200')
    assert graph.show_data
    assert graph.title == "Budget"


def test_duplicate_labels_get_distinct_ids():
    graph = parse('pie\n    "Big Slice" : 1\n    "Big Slice" : 2\n    "Big-Slice" : 3')
    assert [n.id for n in graph.nodes] == ["slice_Big_Slice", "slice_Big_Slice_2", "slice_Big_Slice_3"]


def test_render():
    graph = parse('pie title Pets\n    "Dogs" : 386\n    "Cats" : 85.5')
    assert render_pie(graph) == [
        "pie title Pets",
        '    "Dogs" : 386',
        '    "Cats" : 85.5',
    ]

    graph.show_data = True
    assert render_pie(graph)[:2] == ["pie showData", "    title Pets"]

"""Entity-relationship parser and renderer tests"""

from flowbridge.compiler.render_er import render_er
from flowbridge.dsl.mermaid import split_lines
from flowbridge.ir.graph import ArrowKind, NodeKind
from flowbridge.parsers import er

SAMPLE = """erDiagram
    CUSTOMER {
        string name
        int id PK "customer number"
        int account_id PK, FK
    }
    CUSTOMER ||--o{ ORDER : places
    ORDER }|..|{ LINE-ITEM : "contains items"
    PRODUCT
    EMPTY { }
"""


def parse(text: str):
    return er.parse(split_lines(text))


def test_entities_and_attributes():
    graph = parse(SAMPLE)
    assert [n.id for n in graph.nodes] == ["CUSTOMER", "ORDER", "LINE-ITEM", "PRODUCT", "EMPTY"]
    assert all(n.kind == NodeKind.ENTITY for n in graph.nodes)

    attributes = graph.get_node("CUSTOMER").dialect_data.attributes
    assert [(a.type, a.name, a.constraint, a.comment) for a in attributes] == [
        ("string", "name", None, None),
        ("int", "id", "PK", "customer number"),
        ("int", "account_id", "PK, FK", None),
    ]


def test_relationships_keep_their_marker():
    graph = parse(SAMPLE)
    assert [(e.source, e.target, e.label, e.dialect_data.arrow) for e in graph.edges] == [
        ("CUSTOMER", "ORDER", "places", "||--o{"),
        ("ORDER", "LINE-ITEM", "contains items", "}|..|{"),
    ]
    assert all(e.arrow_kind == ArrowKind.RELATION for e in graph.edges)


def test_render_reproduces_structure():
    lines = render_er(parse(SAMPLE))
    assert lines == [
        "erDiagram",
        "    CUSTOMER {",
        "        string name",
        '        int id PK "customer number"',
        "        int account_id PK, FK",
        "    }",
        "    ORDER",
        "    LINE-ITEM",
        "    PRODUCT",
        "    EMPTY",
        "    CUSTOMER ||--o{ ORDER : places",
        '    ORDER }|..|{ LINE-ITEM : "contains items"',
    ]


def test_unlabelled_relationship_renders_empty_label():
    graph = parse("erDiagram\n    A ||--|| B")
    assert graph.edges[0].label is None
    assert render_er(graph)[-1] == '    A ||--|| B : ""'


def test_unknown_marker_falls_back_to_default():
    graph = parse("erDiagram\n    A ||--o{ B : has")
    graph.edges[0].dialect_data.arrow = "<->"
    assert render_er(graph)[-1] == "    A ||--o{ B : has"

"""Dialect detection tests"""

import pytest

from flowbridge.dsl.detector import detect, detect_dialect
from flowbridge.ir.graph import Dialect


@pytest.mark.parametrize("text, dialect", [
    ("graph TD\n    A --> B", Dialect.FLOWCHART),
    ("flowchart LR\n    A --> B", Dialect.FLOWCHART),
    ("sequenceDiagram\n    A->>B: hi", Dialect.SEQUENCE),
    ("erDiagram\n    A ||--o{ B : has", Dialect.ER),
    ("stateDiagram-v2\n    [*] --> Idle", Dialect.STATE),
    ("stateDiagram\n    [*] --> Idle", Dialect.STATE),
    ('pie title Pets\n    "Dogs" : 3', Dialect.PIE),
    ("mindmap\n  root((Root))", Dialect.MINDMAP),
    ("gantt\n    title Plan", Dialect.UNSUPPORTED),
    ("classDiagram\n    class A", Dialect.UNSUPPORTED),
])
def test_header_keyword(text, dialect):
    assert detect_dialect(text) == dialect


def test_empty_text_is_flowchart():
    assert detect_dialect("") == Dialect.FLOWCHART
    assert detect_dialect("   \n\n") == Dialect.FLOWCHART


def test_unknown_header_falls_back_to_flowchart():
    assert detect_dialect("A --> B") == Dialect.FLOWCHART


def test_skips_comments_directives_and_front_matter():
    text = "\n".join([
        "---",
        "title: Checkout",
        "---",
        "%%{init: {'theme': 'dark'}}%%",
        "%% a comment",
        "",
        "sequenceDiagram",
        "    A->>B: hi",
    ])
    result = detect(text)
    assert result.dialect == Dialect.SEQUENCE
    assert result.header_line == 6


def test_code_fences_are_stripped():
    text = "```mermaid\nerDiagram\n    CUSTOMER ||--o{ ORDER : places\n```"
    assert detect_dialect(text) == Dialect.ER


def test_unsupported_keeps_keyword():
    result = detect("gitGraph\n    commit")
    assert result.dialect == Dialect.UNSUPPORTED
    assert result.keyword == "gitGraph"
    assert result.to_dict()["dialect"] == "unsupported"

"""State diagram parser and renderer tests"""

from flowbridge.compiler.render_state import render_state
from flowbridge.dsl.mermaid import split_lines
from flowbridge.ir.graph import NodeKind
from flowbridge.parsers import state


def parse(text: str):
    return state.parse(split_lines(text))


def test_pseudo_states_are_scoped():
    graph = parse("\n".join([
        "stateDiagram-v2",
        "    [*] --> Idle",
        "    Idle --> Busy : start",
        "    state Busy {",
        "        [*] --> Working",
        "        Working --> [*]",
        "    }",
        "    Busy --> [*]",
    ]))
    ids = [n.id for n in graph.nodes]
    assert "__start__" in ids
    assert "__end__" in ids
    assert "Busy__start__" in ids
    assert "Busy__end__" in ids

    start = graph.get_node("__start__")
    assert start.kind == NodeKind.CIRCLE
    assert start.label == ""
    assert start.dialect_data.marker == "start"

    busy = graph.get_node("Busy")
    assert busy.kind == NodeKind.GROUP
    assert graph.get_node("Working").parent == "Busy"
    assert graph.get_node("Busy__start__").parent == "Busy"


def test_declarations():
    graph = parse("\n".join([
        "stateDiagram-v2",
        '    state "Waiting for input" as Wait',
        "    state Pick <<choice>>",
        "    state Split <<fork>>",
        "    Done : All finished",
        "    Plain",
    ]))
    assert graph.get_node("Wait").label == "Waiting for input"
    assert graph.get_node("Pick").kind == NodeKind.DIAMOND
    assert graph.get_node("Pick").dialect_data.marker == "choice"
    assert graph.get_node("Split").dialect_data.marker == "fork"
    assert graph.get_node("Done").label == "All finished"
    assert graph.get_node("Plain").kind == NodeKind.ROUNDED


def test_notes_are_skipped():
    graph = parse("\n".join([
        "stateDiagram-v2",
        "    A --> B",
        "    note right of A : inline note",
        "    note left of B",
        "        several lines",
        "        of text",
        "    end note",
        "    B --> C",
    ]))
    assert [n.id for n in graph.nodes] == ["A", "B", "C"]


def test_direction_only_at_top_level():
    graph = parse("stateDiagram-v2\n    direction LR\n    state G {\n        direction TB\n        X\n    }")
    assert graph.direction == "LR"


def test_render():
    graph = parse("\n".join([
        "stateDiagram-v2",
        "    direction LR",
        "    [*] --> Idle",
        "    Idle --> Busy : go",
        "    state Busy {",
        "        [*] --> Working",
        "    }",
        "    state Pick <<choice>>",
        "    Busy --> Pick",
    ]))
    assert render_state(graph) == [
        "stateDiagram-v2",
        "    direction LR",
        "    state Busy {",
        "        Working",
        "        [*] --> Working",
        "    }",
        "    state Pick <<choice>>",
        "    [*] --> Idle",
        "    Idle --> Busy : go",
        "    Busy --> Pick",
    ]

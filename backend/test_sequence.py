"""Sequence parser and lifeline layout tests"""

from flowbridge.dsl.mermaid import split_lines
from flowbridge.ir.graph import ArrowKind
from flowbridge.layout.sequence import (
    FIRST_ROW_OFFSET,
    LIFELINE_OFFSET,
    SPACING_X,
    START_Y,
    STEP_Y,
    is_participant,
    layout_sequence,
)
from flowbridge.parsers import sequence


def parse(text: str):
    return sequence.parse(split_lines(text))


def participants(graph):
    return [n for n in graph.nodes if is_participant(n)]


def test_participants_in_first_appearance_order():
    graph = parse("\n".join([
        "sequenceDiagram",
        "    participant API",
        "    actor User as End User",
        "    User->>API: Login",
        "    API->>DB: Query",
    ]))
    nodes = participants(graph)
    assert [n.dialect_data.participant_id for n in nodes] == ["API", "User", "DB"]
    assert nodes[1].label == "End User"
    assert nodes[1].dialect_data.is_actor


def test_message_arrows():
    graph = parse("\n".join([
        "sequenceDiagram",
        "A->>B: sync",
        "B-->>A: reply",
        "A-)B: async",
        "A-xB: lost",
        "B--)A: later",
        "A->B: plain",
    ]))
    assert [e.arrow_kind for e in graph.edges] == [
        ArrowKind.SEQUENCE_SYNC,
        ArrowKind.SEQUENCE_REPLY,
        ArrowKind.SEQUENCE_ASYNC,
        ArrowKind.SEQUENCE_SYNC,
        ArrowKind.SEQUENCE_ASYNC,
        ArrowKind.SEQUENCE_SYNC,
    ]
    assert [e.label for e in graph.edges] == ["sync", "reply", "async", "lost", "later", "plain"]


def test_activation_suffix_and_block_keywords():
    graph = parse("\n".join([
        "sequenceDiagram",
        "autonumber",
        "loop Every minute",
        "    A->>+B: ping",
        "    B-->>-A: pong",
        "end",
        "activate A",
    ]))
    assert [(e.dialect_data.participants, e.label) for e in graph.edges] == [
        (["A", "B"], "ping"),
        (["B", "A"], "pong"),
    ]


def test_repeated_messages_are_kept():
    graph = parse("sequenceDiagram\nA->>B: poll\nA->>B: poll")
    assert len(graph.edges) == 2
    assert [e.dialect_data.order for e in graph.edges] == [0, 1]


def test_notes_share_the_timeline():
    graph = parse("\n".join([
        "sequenceDiagram",
        "A->>B: first",
        "Note over A,B: shared",
        "Note left of A: aside",
        "B->>A: second",
    ]))
    notes = [n for n in graph.nodes if n.dialect_data.is_note]
    assert [(n.dialect_data.note_position, n.dialect_data.note_participants) for n in notes] == [
        ("over", ["A", "B"]),
        ("left_of", ["A"]),
    ]
    assert [n.dialect_data.order for n in notes] == [1, 2]
    assert graph.edges[1].dialect_data.order == 3


def test_layout_expands_anchors_and_lifelines():
    graph = layout_sequence(parse("sequenceDiagram\n    participant UI\n    participant API\n    UI->>API: Request"))

    ids = [n.id for n in graph.nodes]
    assert ids == [
        "participant_UI",
        "participant_API",
        "seq_0_src_UI",
        "seq_0_tgt_API",
        "end_UI",
        "end_API",
    ]

    message = graph.edges[0]
    assert (message.id, message.source, message.target) == ("msg_0", "seq_0_src_UI", "seq_0_tgt_API")
    assert (message.source_handle, message.target_handle) == ("right-source", "left-target")

    lifelines = [(e.source, e.target) for e in graph.edges if e.dialect_data.is_lifeline]
    assert lifelines == [
        ("participant_UI", "seq_0_src_UI"),
        ("participant_API", "seq_0_tgt_API"),
        ("seq_0_src_UI", "end_UI"),
        ("seq_0_tgt_API", "end_API"),
    ]

    index = graph.node_index()
    assert index["participant_API"].position.x == SPACING_X
    assert index["seq_0_src_UI"].position.x == LIFELINE_OFFSET
    assert index["seq_0_src_UI"].position.y == START_Y + FIRST_ROW_OFFSET
    assert index["end_UI"].position.y == START_Y + FIRST_ROW_OFFSET + STEP_Y


def test_backward_and_self_messages():
    graph = layout_sequence(parse("sequenceDiagram\nA->>B: go\nB-->>A: back\nA->>A: think"))
    index = graph.node_index()
    by_id = {e.id: e for e in graph.edges}

    assert (by_id["msg_1"].source_handle, by_id["msg_1"].target_handle) == ("left-source", "right-target")
    assert (by_id["msg_2"].source_handle, by_id["msg_2"].target_handle) == ("right-source", "right-target")

    src, tgt = index["seq_2_src_A"], index["seq_2_tgt_A"]
    assert tgt.position.y == src.position.y + STEP_Y / 2
    assert by_id["life_2_tgt_A"].source == "seq_2_src_A"
    assert by_id["life_2_tgt_A"].target == "seq_2_tgt_A"
    assert by_id["life_end_A"].source == "seq_2_tgt_A"


def test_participant_without_messages_still_has_a_lifeline():
    graph = layout_sequence(parse("sequenceDiagram\nparticipant A\nparticipant Idle\nA->>A: self"))
    ends = {e.target: e.source for e in graph.edges if e.dialect_data.is_lifeline and e.target.startswith("end_")}
    assert ends["end_Idle"] == "participant_Idle"


def test_layout_is_rerunnable():
    graph = layout_sequence(parse("sequenceDiagram\nA->>B: one\nNote right of B: n\nB->>A: two"))
    first = [(n.id, n.position.x, n.position.y) for n in graph.nodes]
    again = layout_sequence(graph)
    assert [(n.id, n.position.x, n.position.y) for n in again.nodes] == first
    assert len(again.edges) == len(graph.edges)


def test_note_geometry():
    graph = layout_sequence(parse("sequenceDiagram\nparticipant A\nparticipant B\nNote over A,B: wide\nNote right of A: side"))
    index = graph.node_index()
    wide = index["note_0"]
    assert wide.position.x == 45
    assert wide.size.width == SPACING_X + 90
    assert wide.size.height == 40
    side = index["note_1"]
    assert side.position.x == 190
    assert side.position.y == START_Y + FIRST_ROW_OFFSET + STEP_Y

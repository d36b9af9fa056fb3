from typing import List, Tuple, Union

from flowbridge.dsl.mermaid import encode_label
from flowbridge.ir.graph import Edge, Graph, Node
from flowbridge.ir.payloads import SequencePayload
from flowbridge.layout.sequence import is_participant, message_participants
from flowbridge.parsers.sequence import ARROW_KINDS, CANONICAL_ARROWS

INDENT = "    "

NOTE_KEYWORDS = {
    "left_of": "left of",
    "right_of": "right of",
    "over": "over",
}


def _arrow(edge: Edge) -> str:
    written = edge.dialect_data.arrow
    if written in ARROW_KINDS and ARROW_KINDS[written] == edge.arrow_kind:
        return written
    return CANONICAL_ARROWS.get(edge.arrow_kind, "->>")


def participant_line(node: Node) -> str:
    payload: SequencePayload = node.dialect_data
    keyword = "actor" if payload.is_actor else "participant"
    pid = payload.participant_id or node.id
    if node.label and node.label != pid:
        return f"{keyword} {pid} as {encode_label(node.label)}"
    return f"{keyword} {pid}"


def note_line(node: Node) -> str:
    payload: SequencePayload = node.dialect_data
    keyword = NOTE_KEYWORDS.get(payload.note_position or "over", "over")
    return f"Note {keyword} {','.join(payload.note_participants)}: {encode_label(node.label)}"


def render_sequence(graph: Graph) -> List[str]:
    lines = ["sequenceDiagram"]
    index = graph.node_index()

    participants = [
        node for _, node in sorted(
            enumerate(n for n in graph.nodes if is_participant(n)),
            key=lambda item: (item[1].position.x, item[1].dialect_data.order or 0, item[0]),
        )
    ]
    for node in participants:
        lines.append(INDENT + participant_line(node))

    events: List[Tuple[Tuple[int, int], Union[Edge, Node]]] = []
    for position, edge in enumerate(graph.edges):
        if edge.dialect_data.is_lifeline:
            continue
        order = edge.dialect_data.order
        events.append(((order if order is not None else 1_000_000 + position, position), edge))
    for position, node in enumerate(graph.nodes):
        payload = node.dialect_data
        if isinstance(payload, SequencePayload) and payload.is_note:
            order = payload.order
            events.append(((order if order is not None else 1_000_000 + position, position), node))
    events.sort(key=lambda item: item[0])

    for _, event in events:
        if isinstance(event, Node):
            lines.append(INDENT + note_line(event))
            continue
        source, target = message_participants(event, index)
        if source is None or target is None:
            continue
        label = encode_label(event.label or "")
        lines.append(INDENT + f"{source}{_arrow(event)}{target}: {label}".rstrip())

    return lines

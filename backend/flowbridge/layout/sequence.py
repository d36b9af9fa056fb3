"""
Sequence diagram geometry.

Participants sit in one row. Every message becomes two zero-size anchor nodes
on the source and target lifelines joined by a horizontal message edge; the
lifeline is drawn as vertical edges from each participant's previous anchor.
A terminal node closes every lifeline below the last row.

The expansion is rebuilt from scratch on every call, so it can be applied to a
freshly parsed graph as well as to one that was already expanded.
"""

import logging
from typing import Dict, List, Optional, Tuple, Union

from flowbridge.ir.graph import ArrowKind, Edge, EdgeData, Graph, Node, NodeKind, Position, Size
from flowbridge.ir.payloads import SequencePayload

logger = logging.getLogger(__name__)

SPACING_X = 300
STEP_Y = 100
START_Y = 50
FIRST_ROW_OFFSET = 80
LIFELINE_OFFSET = 90

NOTE_WIDTH = 150
NOTE_OVER_WIDTH = 130
NOTE_HEIGHT = 40

MESSAGE_HANDLES = {
    "forward": ("right-source", "left-target"),
    "backward": ("left-source", "right-target"),
    "self": ("right-source", "right-target"),
}
LIFELINE_HANDLES = ("bottom-source", "top-target")


def _payload(node: Optional[Node]) -> Optional[SequencePayload]:
    if node is not None and isinstance(node.dialect_data, SequencePayload):
        return node.dialect_data
    return None


def is_synthetic(node: Node) -> bool:
    payload = _payload(node)
    return payload is not None and (payload.is_anchor or payload.is_terminal)


def is_participant(node: Node) -> bool:
    payload = _payload(node)
    return payload is not None and not (payload.is_note or payload.is_anchor or payload.is_terminal)


def participant_of(node: Optional[Node]) -> Optional[str]:
    payload = _payload(node)
    if payload is None or payload.is_note:
        return None
    return payload.participant_id


def message_participants(edge: Edge, index: Dict[str, Node]) -> Tuple[Optional[str], Optional[str]]:
    source = participant_of(index.get(edge.source))
    target = participant_of(index.get(edge.target))
    if (source is None or target is None) and len(edge.dialect_data.participants) == 2:
        source = source or edge.dialect_data.participants[0]
        target = target or edge.dialect_data.participants[1]
    return source, target


def _order_key(position: int, order: Optional[int]) -> Tuple[int, int]:
    return (order if order is not None else 1_000_000 + position, position)


def _anchor(node_id: str, participant_id: str, x: float, y: float, terminal: bool = False) -> Node:
    return Node(
        id=node_id,
        kind=NodeKind.CIRCLE,
        label="",
        position=Position(x, y),
        size=Size(0, 0),
        dialect_data=SequencePayload(
            participant_id=participant_id,
            is_anchor=not terminal,
            is_terminal=terminal,
        ),
    )


def _lifeline(edge_id: str, source: str, target: str) -> Edge:
    return Edge(
        id=edge_id,
        source=source,
        target=target,
        source_handle=LIFELINE_HANDLES[0],
        target_handle=LIFELINE_HANDLES[1],
        arrow_kind=ArrowKind.OPEN,
        dialect_data=EdgeData(is_lifeline=True),
    )


def _note_geometry(note: SequencePayload, column: Dict[str, int]) -> Tuple[float, float]:
    known = [column[p] for p in note.note_participants if p in column]
    if not known:
        return 0.0, NOTE_WIDTH
    first_x = known[0] * SPACING_X

    if note.note_position == "over":
        if len(known) > 1:
            min_x = min(known) * SPACING_X
            max_x = max(known) * SPACING_X
            return min_x + 45, (max_x - min_x) + 90
        return first_x + 25, NOTE_OVER_WIDTH
    if note.note_position == "left_of":
        return first_x - 160, NOTE_WIDTH
    return first_x + 190, NOTE_WIDTH


def layout_sequence(graph: Graph) -> Graph:
    index = graph.node_index()

    # columns follow x, then declaration order
    participants = [n for n in graph.nodes if is_participant(n)]
    participants = [
        n for _, n in sorted(
            enumerate(participants),
            key=lambda item: (item[1].position.x, _order_key(item[0], item[1].dialect_data.order)),
        )
    ]
    column: Dict[str, int] = {}
    for slot, node in enumerate(participants):
        pid = node.dialect_data.participant_id or node.id
        node.dialect_data.participant_id = pid
        node.dialect_data.order = slot
        column[pid] = slot
        node.position = Position(slot * SPACING_X, START_Y)

    # messages and notes share one timeline
    events: List[Tuple[Tuple[int, int], Union[Edge, Node]]] = []
    for position, edge in enumerate(graph.edges):
        if edge.dialect_data.is_lifeline:
            continue
        source, target = message_participants(edge, index)
        if source not in column or target not in column:
            logger.debug("[LAYOUT] Dropping message %s: unknown participant", edge.id)
            continue
        edge.dialect_data.participants = [source, target]
        events.append((_order_key(position, edge.dialect_data.order), edge))
    for position, node in enumerate(graph.nodes):
        payload = _payload(node)
        if payload is not None and payload.is_note:
            events.append((_order_key(len(graph.edges) + position, payload.order), node))
    events.sort(key=lambda item: item[0])

    nodes: List[Node] = list(participants)
    edges: List[Edge] = []
    previous = {pid: participants[slot].id for pid, slot in column.items()}
    y = START_Y + FIRST_ROW_OFFSET

    for i, (_, event) in enumerate(events):
        if isinstance(event, Node):
            x, width = _note_geometry(event.dialect_data, column)
            event.id = f"note_{i}"
            event.dialect_data.order = i
            event.position = Position(x, y)
            if event.size is None:
                event.size = Size(width, NOTE_HEIGHT)
            nodes.append(event)
            y += STEP_Y
            continue

        source, target = event.dialect_data.participants
        source_x = column[source] * SPACING_X + LIFELINE_OFFSET
        target_x = column[target] * SPACING_X + LIFELINE_OFFSET
        source_anchor = _anchor(f"seq_{i}_src_{source}", source, source_x, y)
        target_y = y + STEP_Y / 2 if source == target else y
        target_anchor = _anchor(f"seq_{i}_tgt_{target}", target, target_x, target_y)
        nodes.extend([source_anchor, target_anchor])

        if source == target:
            handles = MESSAGE_HANDLES["self"]
        elif source_x < target_x:
            handles = MESSAGE_HANDLES["forward"]
        else:
            handles = MESSAGE_HANDLES["backward"]

        event.id = f"msg_{i}"
        event.source = source_anchor.id
        event.target = target_anchor.id
        event.source_handle, event.target_handle = handles
        event.dialect_data.order = i
        edges.append(event)

        edges.append(_lifeline(f"life_{i}_src_{source}", previous[source], source_anchor.id))
        if source != target:
            edges.append(_lifeline(f"life_{i}_tgt_{target}", previous[target], target_anchor.id))
        else:
            edges.append(_lifeline(f"life_{i}_tgt_{target}", source_anchor.id, target_anchor.id))
        previous[source] = source_anchor.id
        previous[target] = target_anchor.id
        y += STEP_Y

    for node in participants:
        pid = node.dialect_data.participant_id
        terminal = _anchor(f"end_{pid}", pid, column[pid] * SPACING_X + LIFELINE_OFFSET, y, terminal=True)
        nodes.append(terminal)
        edges.append(_lifeline(f"life_end_{pid}", previous[pid], terminal.id))

    graph.nodes = nodes
    graph.edges = edges
    logger.debug("[LAYOUT] Sequence layout: %d participants, %d events", len(participants), len(events))
    return graph

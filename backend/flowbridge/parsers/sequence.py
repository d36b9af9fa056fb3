"""
Sequence dialect.

The reducer only records participants, notes and participant-to-participant
message edges. Anchors, lifelines and terminals are derived afterwards by
``flowbridge.layout.sequence``.
"""

import logging
import re
from typing import Dict, List

from flowbridge.dsl.mermaid import decode_label, is_comment, strip_terminator, unquote
from flowbridge.dsl.tokens import Header, MessageDecl, NoteDecl, ParticipantDecl, Token
from flowbridge.ir.graph import ArrowKind, Dialect, Graph, NodeKind
from flowbridge.ir.payloads import SequencePayload
from flowbridge.parsers.builder import GraphBuilder

logger = logging.getLogger(__name__)

HEADER_RE = re.compile(r"^sequenceDiagram\b")
PARTICIPANT_RE = re.compile(
    r'^(participant|actor)\s+("[^"]+"|[^\s"]+)(?:\s+as\s+(.+))?$', re.IGNORECASE
)
MESSAGE_RE = re.compile(
    r"^(?P<source>[^\s:+<>-][^\s:<>-]*)\s*"
    r"(?P<arrow>-->>|->>|--x|-x|--\)|-\)|-->|->)\s*"
    r"[+-]?\s*(?P<target>[^\s:+<>-][^\s:<>-]*)\s*"
    r"(?::\s*(?P<label>.*))?$"
)
NOTE_RE = re.compile(
    r"^note\s+(left of|right of|over)\s+([^:]+?)\s*:\s*(.*)$", re.IGNORECASE
)

SKIPPED_KEYWORDS = {
    "loop", "alt", "else", "opt", "par", "and", "rect", "end", "critical",
    "break", "box", "activate", "deactivate", "autonumber", "title",
    "create", "destroy", "link", "links", "option",
}

ARROW_KINDS: Dict[str, ArrowKind] = {
    "->>": ArrowKind.SEQUENCE_SYNC,
    "->": ArrowKind.SEQUENCE_SYNC,
    "-x": ArrowKind.SEQUENCE_SYNC,
    "-->>": ArrowKind.SEQUENCE_REPLY,
    "-->": ArrowKind.SEQUENCE_REPLY,
    "--x": ArrowKind.SEQUENCE_REPLY,
    "-)": ArrowKind.SEQUENCE_ASYNC,
    "--)": ArrowKind.SEQUENCE_ASYNC,
}

CANONICAL_ARROWS = {
    ArrowKind.SEQUENCE_SYNC: "->>",
    ArrowKind.SEQUENCE_REPLY: "-->>",
    ArrowKind.SEQUENCE_ASYNC: "-)",
}

NOTE_POSITIONS = {
    "left of": "left_of",
    "right of": "right_of",
    "over": "over",
}


def participant_node_id(participant_id: str) -> str:
    return f"participant_{participant_id}"


def note_node_id(index: int) -> str:
    return f"note_{index}"


def tokenize(lines: List[str]) -> List[Token]:
    tokens: List[Token] = []
    for raw in lines:
        line = strip_terminator(raw)
        if not line or is_comment(line):
            continue

        if HEADER_RE.match(line):
            tokens.append(Header(keyword="sequenceDiagram"))
            continue

        participant = PARTICIPANT_RE.match(line)
        if participant:
            alias = participant.group(3)
            tokens.append(ParticipantDecl(
                id=unquote(participant.group(2)),
                label=decode_label(alias) if alias else None,
                is_actor=participant.group(1).lower() == "actor",
            ))
            continue

        note = NOTE_RE.match(line)
        if note:
            names = [p.strip() for p in note.group(2).split(",") if p.strip()]
            tokens.append(NoteDecl(
                position=NOTE_POSITIONS[note.group(1).lower()],
                participants=names,
                text=decode_label(note.group(3)),
            ))
            continue

        first_word = line.split()[0].lower()
        if first_word in SKIPPED_KEYWORDS:
            continue

        message = MESSAGE_RE.match(line)
        if message:
            label = message.group("label")
            tokens.append(MessageDecl(
                source=message.group("source"),
                target=message.group("target"),
                arrow=message.group("arrow"),
                label=decode_label(label) if label else "",
            ))
            continue

        logger.debug("[PARSER] Skipping unrecognized sequence line: %r", line)
    return tokens


def reduce(tokens: List[Token]) -> Graph:
    builder = GraphBuilder(Dialect.SEQUENCE)
    order: Dict[str, int] = {}

    def participant(pid: str, label=None, is_actor: bool = False):
        node_id = participant_node_id(pid)
        if pid not in order:
            order[pid] = len(order)
            return builder.ensure_node(
                node_id,
                kind=NodeKind.RECTANGLE,
                label=label if label is not None else pid,
                payload=SequencePayload(participant_id=pid, is_actor=is_actor, order=order[pid]),
            )
        node = builder.ensure_node(node_id, label=label)
        if is_actor:
            node.dialect_data.is_actor = True
        return node

    index = 0
    for token in tokens:
        if isinstance(token, ParticipantDecl):
            participant(token.id, token.label, token.is_actor)
        elif isinstance(token, MessageDecl):
            source = participant(token.source)
            target = participant(token.target)
            builder.add_edge(
                source.id,
                target.id,
                arrow_kind=ARROW_KINDS[token.arrow],
                label=token.label,
                arrow=token.arrow,
                edge_id=f"msg_{index}",
                dedupe=False,
                order=index,
                participants=[token.source, token.target],
            )
            index += 1
        elif isinstance(token, NoteDecl):
            for pid in token.participants:
                participant(pid)
            builder.ensure_node(
                note_node_id(index),
                kind=NodeKind.RECTANGLE,
                label=token.text,
                payload=SequencePayload(
                    is_note=True,
                    note_position=token.position,
                    note_participants=list(token.participants),
                    order=index,
                ),
            )
            index += 1

    return builder.build()


def parse(lines: List[str]) -> Graph:
    return reduce(tokenize(lines))

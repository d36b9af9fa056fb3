"""
State dialect.

``[*]`` is scoped to the enclosing composite: at top level it becomes
``__start__`` / ``__end__``, inside ``state G { ... }`` it becomes
``G__start__`` / ``G__end__``.
"""

import logging
import re
from typing import List, Optional

from flowbridge.dsl.mermaid import decode_label, is_comment, strip_terminator
from flowbridge.dsl.tokens import (
    DirectionDecl,
    GroupEnd,
    GroupStart,
    Header,
    StateDecl,
    Token,
    TransitionDecl,
)
from flowbridge.ir.graph import DIRECTIONS, ArrowKind, Dialect, Graph, NodeKind
from flowbridge.ir.payloads import StatePayload
from flowbridge.parsers.builder import GraphBuilder

logger = logging.getLogger(__name__)

PSEUDO = "[*]"
_STATE = r"(?:\[\*\]|[A-Za-z0-9_.-]+)"

HEADER_RE = re.compile(r"^stateDiagram(?:-v2)?\b")
DIRECTION_RE = re.compile(r"^direction\s+([A-Za-z]{2})$")
TRANSITION_RE = re.compile(rf"^({_STATE})\s*-->\s*({_STATE})\s*(?::\s*(.*))?$")
ALIAS_RE = re.compile(r'^state\s+"([^"]*)"\s+as\s+([A-Za-z0-9_.-]+)\s*(\{)?$')
MARKER_RE = re.compile(r"^state\s+([A-Za-z0-9_.-]+)\s*<<(choice|fork|join)>>$")
COMPOSITE_RE = re.compile(r"^state\s+([A-Za-z0-9_.-]+)\s*\{$")
STATE_RE = re.compile(r"^state\s+([A-Za-z0-9_.-]+)$")
DESCRIPTION_RE = re.compile(r"^([A-Za-z0-9_.-]+)\s*:\s*(.+)$")
BARE_RE = re.compile(r"^([A-Za-z0-9_.-]+)$")
NOTE_START_RE = re.compile(r"^note\s+(?:left|right)\s+of\s+\S+\s*$", re.IGNORECASE)
NOTE_INLINE_RE = re.compile(r"^note\s+(?:left|right)\s+of\s+\S+\s*:", re.IGNORECASE)

MARKER_KINDS = {
    "start": NodeKind.CIRCLE,
    "end": NodeKind.CIRCLE,
    "choice": NodeKind.DIAMOND,
    "fork": NodeKind.RECTANGLE,
    "join": NodeKind.RECTANGLE,
}


def pseudo_state_id(scope: Optional[str], marker: str) -> str:
    return f"{scope or ''}__{marker}__"


def tokenize(lines: List[str]) -> List[Token]:
    tokens: List[Token] = []
    in_note = False

    for raw in lines:
        line = strip_terminator(raw)
        if not line or is_comment(line):
            continue

        if in_note:
            if line.lower() == "end note":
                in_note = False
            continue
        if NOTE_INLINE_RE.match(line):
            continue
        if NOTE_START_RE.match(line):
            in_note = True
            continue

        if HEADER_RE.match(line):
            tokens.append(Header(keyword=line.split()[0]))
            continue

        if line == "}":
            tokens.append(GroupEnd())
            continue

        direction = DIRECTION_RE.match(line)
        if direction:
            tokens.append(DirectionDecl(direction=direction.group(1).upper()))
            continue

        transition = TRANSITION_RE.match(line)
        if transition:
            label = transition.group(3)
            tokens.append(TransitionDecl(
                source=transition.group(1),
                target=transition.group(2),
                label=decode_label(label) if label else None,
            ))
            continue

        alias = ALIAS_RE.match(line)
        if alias:
            label = decode_label(alias.group(1))
            if alias.group(3):
                tokens.append(GroupStart(id=alias.group(2), label=label))
            else:
                tokens.append(StateDecl(id=alias.group(2), label=label))
            continue

        marker = MARKER_RE.match(line)
        if marker:
            tokens.append(StateDecl(id=marker.group(1), marker=marker.group(2)))
            continue

        composite = COMPOSITE_RE.match(line)
        if composite:
            tokens.append(GroupStart(id=composite.group(1)))
            continue

        for pattern in (STATE_RE, BARE_RE):
            match = pattern.match(line)
            if match:
                tokens.append(StateDecl(id=match.group(1)))
                break
        else:
            description = DESCRIPTION_RE.match(line)
            if description:
                tokens.append(StateDecl(id=description.group(1), label=decode_label(description.group(2))))
            else:
                logger.debug("[PARSER] Skipping unrecognized state line: %r", line)

    return tokens


def reduce(tokens: List[Token]) -> Graph:
    builder = GraphBuilder(Dialect.STATE, default_kind=NodeKind.ROUNDED)

    def state(state_id: str, role: str):
        if state_id == PSEUDO:
            marker = "start" if role == "source" else "end"
            return builder.ensure_node(
                pseudo_state_id(builder.current_group, marker),
                kind=NodeKind.CIRCLE,
                label="",
                payload=StatePayload(marker=marker),
            )
        return builder.ensure_node(state_id, payload=StatePayload())

    for token in tokens:
        if isinstance(token, DirectionDecl):
            if builder.current_group is None and token.direction in DIRECTIONS:
                builder.graph.direction = token.direction
        elif isinstance(token, GroupStart):
            group = builder.open_group(token.id, token.label)
            if group.dialect_data is None:
                group.dialect_data = StatePayload()
        elif isinstance(token, GroupEnd):
            builder.close_group()
        elif isinstance(token, StateDecl):
            node = builder.ensure_node(
                token.id,
                kind=MARKER_KINDS.get(token.marker) if token.marker else None,
                label=token.label,
                payload=StatePayload(),
            )
            if token.marker:
                node.dialect_data.marker = token.marker
        elif isinstance(token, TransitionDecl):
            source = state(token.source, "source")
            target = state(token.target, "target")
            builder.add_edge(
                source.id,
                target.id,
                arrow_kind=ArrowKind.SOLID,
                label=token.label,
                arrow="-->",
            )

    return builder.build()


def parse(lines: List[str]) -> Graph:
    return reduce(tokenize(lines))

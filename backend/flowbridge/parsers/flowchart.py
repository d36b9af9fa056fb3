"""
Flowchart / graph dialect.

    graph TD
        A[Start] --> B{Check}
        B -- Yes --> C[Done]
        subgraph G [Group]
            D((Hub))
        end
        style A fill:#ff0000
"""

import logging
import re
from typing import List, Optional, Tuple

from flowbridge.dsl.mermaid import decode_label, is_comment, mermaid_id, strip_terminator, unquote
from flowbridge.dsl.tokens import (
    EdgeDecl,
    GroupEnd,
    GroupStart,
    Header,
    NodeDecl,
    NodeRef,
    StyleDecl,
    Token,
)
from flowbridge.ir.graph import DIRECTIONS, ArrowKind, Dialect, Graph, NodeKind
from flowbridge.parsers.builder import GraphBuilder
from flowbridge.parsers.styles import parse_style_props, style_from_props

logger = logging.getLogger(__name__)

HEADER_RE = re.compile(r"^(graph|flowchart|flowchart-elk)\b\s*([A-Za-z]{2})?\s*;?\s*$")
SUBGRAPH_RE = re.compile(r"^subgraph\b\s*(.*)$")
SUBGRAPH_ID_RE = re.compile(r'^([A-Za-z0-9_.-]+)\s*(?:\[(.*)\]|"(.*)")?\s*$')
STYLE_RE = re.compile(r"^style\s+([A-Za-z0-9_]+)\s+(.+)$")
SKIPPED_KEYWORDS = ("classDef", "class", "click", "linkStyle", "direction")

_ID_RE = re.compile(r"[A-Za-z0-9_]+")
_CLASS_RE = re.compile(r":::[A-Za-z0-9_-]+")
_AMP_RE = re.compile(r"\s*&\s*")

# longest opener first
SHAPES: List[Tuple[str, str, NodeKind]] = [
    ("(((", ")))", NodeKind.CIRCLE),
    ("((", "))", NodeKind.CIRCLE),
    ("([", "])", NodeKind.ROUNDED),
    ("[(", ")]", NodeKind.CYLINDER),
    ("[[", "]]", NodeKind.RECTANGLE),
    ("{{", "}}", NodeKind.DIAMOND),
    ("[", "]", NodeKind.RECTANGLE),
    ("(", ")", NodeKind.ROUNDED),
    ("{", "}", NodeKind.DIAMOND),
    (">", "]", NodeKind.RECTANGLE),
]

LINK_RE = re.compile(
    r"\s*(?:"
    r"(?P<text_open>--|==|-\.)\s*(?P<text>[^\s|>=.-][^|]*?)\s*"
    r"(?P<text_arrow>-{2,}>|-{3,}|={2,}>|={3,}|\.-+>|\.-+)"
    r"|(?P<arrow><?(?:-{2,}>|-{3,}|-\.+->|-\.+-|={2,}>|={3,}|--[ox]|==[ox]))"
    r')(?:\s*\|(?P<pipe>"[^"]*"|[^|]*)\|)?\s*'
)

CANONICAL_ARROWS = {
    ArrowKind.SOLID: "-->",
    ArrowKind.OPEN: "---",
    ArrowKind.DOTTED: "-.->",
    ArrowKind.THICK: "==>",
}


def arrow_kind(token: str) -> ArrowKind:
    if "=" in token:
        return ArrowKind.THICK
    if "." in token:
        return ArrowKind.DOTTED
    if token.endswith(">") or token.endswith("o") or token.endswith("x"):
        return ArrowKind.SOLID
    return ArrowKind.OPEN


def _normalize_text_arrow(token: str) -> str:
    # "-. text .->" closes with ".->"; the bare form is "-.->"
    if token.startswith("."):
        return "-" + token
    return token


# ============================================================
# Tokenizer
# ============================================================

def _read_node(text: str, pos: int) -> Tuple[Optional[NodeRef], int]:
    while pos < len(text) and text[pos].isspace():
        pos += 1
    match = _ID_RE.match(text, pos)
    if not match:
        return None, pos
    node_id = match.group(0)
    pos = match.end()

    ref = NodeRef(id=node_id)
    for opener, closer, kind in SHAPES:
        if not text.startswith(opener, pos):
            continue
        start = pos + len(opener)
        body_start = start
        while body_start < len(text) and text[body_start] == " ":
            body_start += 1
        if body_start < len(text) and text[body_start] == '"':
            quote_end = text.find('"', body_start + 1)
            if quote_end == -1:
                return None, pos
            end = text.find(closer, quote_end + 1)
        else:
            end = text.find(closer, start)
        if end == -1:
            return None, pos

        raw = text[start:end].strip()
        if kind == NodeKind.RECTANGLE and opener == "[" and len(raw) >= 2 and raw[0] in "/\\" and raw[-1] in "/\\":
            raw = raw[1:-1]
        ref.kind = kind
        ref.label = decode_label(raw)
        pos = end + len(closer)
        break

    class_match = _CLASS_RE.match(text, pos)
    if class_match:
        pos = class_match.end()
    return ref, pos


def _read_node_group(text: str, pos: int) -> Tuple[Optional[List[NodeRef]], int]:
    ref, pos = _read_node(text, pos)
    if ref is None:
        return None, pos
    refs = [ref]
    while True:
        amp = _AMP_RE.match(text, pos)
        if not amp:
            break
        ref, next_pos = _read_node(text, amp.end())
        if ref is None:
            return None, pos
        refs.append(ref)
        pos = next_pos
    return refs, pos


def _tokenize_statement(text: str) -> Optional[List[Token]]:
    """Node declarations or an edge chain; None when the line does not fully parse."""
    groups, pos = _read_node_group(text, 0)
    if groups is None:
        return None

    tokens: List[Token] = []
    chain = [groups]
    links = []
    while text[pos:].strip():
        match = LINK_RE.match(text, pos)
        if not match or match.end() == pos:
            return None
        if match.group("arrow"):
            arrow = match.group("arrow")
            label = match.group("pipe")
        else:
            arrow = _normalize_text_arrow(match.group("text_arrow"))
            label = match.group("pipe") if match.group("pipe") is not None else match.group("text")
        group, pos = _read_node_group(text, match.end())
        if group is None:
            return None
        links.append((arrow, decode_label(label) if label is not None else None))
        chain.append(group)

    if not links:
        return [NodeDecl(ref=ref) for ref in groups]

    for index, (arrow, label) in enumerate(links):
        for source in chain[index]:
            for target in chain[index + 1]:
                tokens.append(EdgeDecl(source=source, target=target, arrow=arrow, label=label))
    return tokens


def _tokenize_subgraph(rest: str) -> Optional[GroupStart]:
    rest = rest.strip()
    if not rest:
        return None
    match = SUBGRAPH_ID_RE.match(rest)
    if match:
        label = match.group(2) if match.group(2) is not None else match.group(3)
        return GroupStart(id=match.group(1), label=decode_label(label) if label is not None else None)
    title = unquote(rest)
    return GroupStart(id=mermaid_id(title), label=decode_label(title))


def tokenize(lines: List[str]) -> List[Token]:
    tokens: List[Token] = []
    for raw in lines:
        line = strip_terminator(raw)
        if not line or is_comment(line):
            continue

        header = HEADER_RE.match(line)
        if header:
            tokens.append(Header(keyword=header.group(1), direction=header.group(2)))
            continue

        if line == "end":
            tokens.append(GroupEnd())
            continue

        subgraph = SUBGRAPH_RE.match(line)
        if subgraph:
            start = _tokenize_subgraph(subgraph.group(1))
            if start is not None:
                tokens.append(start)
            else:
                logger.debug("[PARSER] Skipping subgraph without id: %r", line)
            continue

        style = STYLE_RE.match(line)
        if style:
            tokens.append(StyleDecl(id=style.group(1), props=parse_style_props(style.group(2))))
            continue

        first_word = line.split()[0]
        if first_word in SKIPPED_KEYWORDS:
            continue

        statement = _tokenize_statement(line)
        if statement is None:
            logger.debug("[PARSER] Skipping unrecognized flowchart line: %r", line)
            continue
        tokens.extend(statement)
    return tokens


# ============================================================
# Reducer
# ============================================================

def reduce(tokens: List[Token]) -> Graph:
    builder = GraphBuilder(Dialect.FLOWCHART)

    for token in tokens:
        if isinstance(token, Header):
            if token.direction and token.direction.upper() in DIRECTIONS:
                builder.graph.direction = token.direction.upper()
            elif token.direction:
                logger.debug("[PARSER] Ignoring unknown direction %r", token.direction)
        elif isinstance(token, NodeDecl):
            builder.ensure_node(token.ref.id, token.ref.kind, token.ref.label)
        elif isinstance(token, EdgeDecl):
            source = builder.ensure_node(token.source.id, token.source.kind, token.source.label)
            target = builder.ensure_node(token.target.id, token.target.kind, token.target.label)
            builder.add_edge(
                source.id,
                target.id,
                arrow_kind=arrow_kind(token.arrow),
                label=token.label,
                arrow=token.arrow,
            )
        elif isinstance(token, GroupStart):
            builder.open_group(token.id, token.label)
        elif isinstance(token, GroupEnd):
            builder.close_group()
        elif isinstance(token, StyleDecl):
            builder.defer_style(token.id, style_from_props(token.props))

    return builder.build()


def parse(lines: List[str]) -> Graph:
    return reduce(tokenize(lines))

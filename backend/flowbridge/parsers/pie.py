import logging
import re
from typing import Dict, List

from flowbridge.dsl.mermaid import decode_label, is_comment, mermaid_id, strip_terminator
from flowbridge.dsl.tokens import Header, SliceDecl, Token, TitleDecl
from flowbridge.ir.graph import Dialect, Graph, NodeKind
from flowbridge.ir.payloads import PiePayload
from flowbridge.parsers.builder import GraphBuilder

logger = logging.getLogger(__name__)

HEADER_RE = re.compile(r"^pie\b\s*(showData\b)?\s*(?:title\s+(.*))?$")
TITLE_RE = re.compile(r"^title\s+(.*)$")
SLICE_RE = re.compile(r"""^("[^"]*"|'[^']*')\s*:\s*(-?\d+(?:\.\d+)?)\s*$""")


def slice_id(label: str, taken: Dict[str, int]) -> str:
    base = f"slice_{mermaid_id(label)}"
    count = taken.get(base, 0) + 1
    taken[base] = count
    return base if count == 1 else f"{base}_{count}"


def tokenize(lines: List[str]) -> List[Token]:
    tokens: List[Token] = []
    for raw in lines:
        line = strip_terminator(raw)
        if not line or is_comment(line):
            continue

        header = HEADER_RE.match(line)
        if header:
            title = header.group(2)
            tokens.append(Header(
                keyword="pie",
                title=decode_label(title) if title else None,
                show_data=bool(header.group(1)),
            ))
            continue

        title = TITLE_RE.match(line)
        if title:
            tokens.append(TitleDecl(text=decode_label(title.group(1))))
            continue

        piece = SLICE_RE.match(line)
        if piece:
            tokens.append(SliceDecl(label=decode_label(piece.group(1)), value=float(piece.group(2))))
            continue

        logger.debug("[PARSER] Skipping unrecognized pie line: %r", line)
    return tokens


def reduce(tokens: List[Token]) -> Graph:
    builder = GraphBuilder(Dialect.PIE, default_kind=NodeKind.CIRCLE)
    taken: Dict[str, int] = {}

    for token in tokens:
        if isinstance(token, Header):
            builder.graph.show_data = token.show_data
            if token.title:
                builder.graph.title = token.title
        elif isinstance(token, TitleDecl):
            builder.graph.title = token.text
        elif isinstance(token, SliceDecl):
            builder.ensure_node(
                slice_id(token.label, taken),
                kind=NodeKind.CIRCLE,
                label=token.label,
                payload=PiePayload(value=token.value),
            )

    return builder.build()


def parse(lines: List[str]) -> Graph:
    return reduce(tokenize(lines))

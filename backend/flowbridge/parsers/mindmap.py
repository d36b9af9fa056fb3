"""
Mindmap dialect: indentation defines the tree.

    mindmap
      root((Central))
        A[Branch]
          leaf text
        B(Other):::urgent
"""

import logging
import re
from typing import Dict, List, Optional, Tuple

from flowbridge.dsl.mermaid import decode_label, is_comment, mermaid_id
from flowbridge.dsl.tokens import ClassTag, Header, MindmapItem, NodeRef, Token
from flowbridge.ir.graph import ArrowKind, Dialect, Graph, NodeKind
from flowbridge.ir.payloads import MindmapPayload
from flowbridge.parsers.builder import GraphBuilder

logger = logging.getLogger(__name__)

HEADER_RE = re.compile(r"^mindmap\b")
ICON_RE = re.compile(r"^::icon\(.*\)$")
CLASS_ONLY_RE = re.compile(r"^:::\s*(.+)$")
CLASS_SUFFIX_RE = re.compile(r"\s*:::\s*([A-Za-z0-9_ -]+)$")
ID_RE = re.compile(r"^([^\s(\[{)]*)")

SHAPES: List[Tuple[str, str, NodeKind]] = [
    ("((", "))", NodeKind.CIRCLE),
    ("))", "((", NodeKind.CIRCLE),
    ("{{", "}}", NodeKind.DIAMOND),
    ("(", ")", NodeKind.ROUNDED),
    (")", "(", NodeKind.ROUNDED),
    ("[", "]", NodeKind.RECTANGLE),
]


def _indent(raw: str) -> int:
    expanded = raw.expandtabs(4)
    return len(expanded) - len(expanded.lstrip(" "))


def _read_item(text: str) -> Tuple[NodeRef, bool]:
    """Return the node reference and whether it was written as bare text."""
    match = ID_RE.match(text)
    node_id = match.group(1) if match else ""
    rest = text[len(node_id):].strip()

    for opener, closer, kind in SHAPES:
        if rest.startswith(opener) and rest.endswith(closer) and len(rest) >= len(opener) + len(closer):
            label = decode_label(rest[len(opener):len(rest) - len(closer)])
            return NodeRef(id=node_id or "", kind=kind, label=label), False

    label = decode_label(text)
    return NodeRef(id="", kind=NodeKind.RECTANGLE, label=label), True


def tokenize(lines: List[str]) -> List[Token]:
    tokens: List[Token] = []
    for raw in lines:
        line = raw.strip()
        if not line or is_comment(line):
            continue

        if HEADER_RE.match(line):
            tokens.append(Header(keyword="mindmap"))
            continue
        if ICON_RE.match(line):
            continue

        only_class = CLASS_ONLY_RE.match(line)
        if only_class:
            tokens.append(ClassTag(css_class=only_class.group(1).strip()))
            continue

        css_class: Optional[str] = None
        suffix = CLASS_SUFFIX_RE.search(line)
        if suffix:
            css_class = suffix.group(1).strip()
            line = line[:suffix.start()].rstrip()
        if not line:
            continue

        ref, bare = _read_item(line)
        tokens.append(MindmapItem(indent=_indent(raw), ref=ref, bare=bare, css_class=css_class))
    return tokens


def _unique_id(candidate: str, builder: GraphBuilder, taken: Dict[str, int]) -> str:
    base = mermaid_id(candidate) or "node"
    if not builder.has_node(base):
        return base
    count = taken.get(base, 1) + 1
    while builder.has_node(f"{base}_{count}"):
        count += 1
    taken[base] = count
    return f"{base}_{count}"


def reduce(tokens: List[Token]) -> Graph:
    builder = GraphBuilder(Dialect.MINDMAP)
    builder.graph.direction = "LR"
    stack: List[Tuple[int, str]] = []
    taken: Dict[str, int] = {}
    last = None

    for token in tokens:
        if isinstance(token, ClassTag):
            if last is not None:
                last.dialect_data.css_class = token.css_class
            continue
        if not isinstance(token, MindmapItem):
            continue

        while stack and stack[-1][0] >= token.indent:
            stack.pop()
        parent_id = stack[-1][1] if stack else None

        node_id = token.ref.id or _unique_id(token.ref.label or "node", builder, taken)
        if builder.has_node(node_id):
            node_id = _unique_id(node_id, builder, taken)

        last = builder.ensure_node(
            node_id,
            kind=token.ref.kind,
            label=token.ref.label,
            payload=MindmapPayload(depth=len(stack), css_class=token.css_class, bare=token.bare),
        )
        if parent_id is not None:
            builder.add_edge(parent_id, node_id, arrow_kind=ArrowKind.OPEN)
        stack.append((token.indent, node_id))

    return builder.build()


def parse(lines: List[str]) -> Graph:
    return reduce(tokenize(lines))

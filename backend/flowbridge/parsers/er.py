import logging
import re
from typing import List

from flowbridge.dsl.mermaid import decode_label, is_comment
from flowbridge.dsl.tokens import (
    AttributeDecl,
    EntityEnd,
    EntityStart,
    Header,
    RelationshipDecl,
    Token,
)
from flowbridge.ir.graph import ArrowKind, Dialect, Graph, NodeKind
from flowbridge.ir.payloads import ErAttribute, ErPayload
from flowbridge.parsers.builder import GraphBuilder

logger = logging.getLogger(__name__)

_NAME = r"[A-Za-z0-9_-]+"

HEADER_RE = re.compile(r"^erDiagram\b")
ENTITY_OPEN_RE = re.compile(rf"^({_NAME})\s*\{{\s*(\}})?$")
ENTITY_BARE_RE = re.compile(rf"^({_NAME})$")
ATTRIBUTE_RE = re.compile(
    r"^(\S+)\s+(\S+)"
    r"(?:\s+((?:PK|FK|UK)(?:\s*,\s*(?:PK|FK|UK))*))?"
    r'(?:\s+"([^"]*)")?$'
)
RELATIONSHIP_RE = re.compile(
    rf"^({_NAME})\s*"
    r"((?:\|o|\|\||\}o|\}\|)(?:--|\.\.)(?:o\||\|\||o\{|\|\{))"
    rf"\s*({_NAME})\s*(?::\s*(.*))?$"
)

DEFAULT_RELATION = "||--o{"


def tokenize(lines: List[str]) -> List[Token]:
    tokens: List[Token] = []
    in_entity = False

    for raw in lines:
        line = raw.strip()
        if not line or is_comment(line):
            continue

        if in_entity:
            if line == "}":
                tokens.append(EntityEnd())
                in_entity = False
                continue
            attribute = ATTRIBUTE_RE.match(line)
            if attribute:
                tokens.append(AttributeDecl(
                    type=attribute.group(1),
                    name=attribute.group(2),
                    constraint=attribute.group(3),
                    comment=decode_label(attribute.group(4)) if attribute.group(4) is not None else None,
                ))
            else:
                logger.debug("[PARSER] Skipping unrecognized attribute: %r", line)
            continue

        if HEADER_RE.match(line):
            tokens.append(Header(keyword="erDiagram"))
            continue

        entity = ENTITY_OPEN_RE.match(line)
        if entity:
            tokens.append(EntityStart(id=entity.group(1)))
            if entity.group(2):
                tokens.append(EntityEnd())
            else:
                in_entity = True
            continue

        relationship = RELATIONSHIP_RE.match(line)
        if relationship:
            label = relationship.group(4)
            tokens.append(RelationshipDecl(
                source=relationship.group(1),
                marker=relationship.group(2),
                target=relationship.group(3),
                label=decode_label(label) if label else None,
            ))
            continue

        bare = ENTITY_BARE_RE.match(line)
        if bare:
            tokens.append(EntityStart(id=bare.group(1)))
            tokens.append(EntityEnd())
            continue

        logger.debug("[PARSER] Skipping unrecognized ER line: %r", line)

    return tokens


def reduce(tokens: List[Token]) -> Graph:
    builder = GraphBuilder(Dialect.ER, default_kind=NodeKind.ENTITY)
    current = None

    def entity(entity_id: str):
        node = builder.ensure_node(entity_id, kind=NodeKind.ENTITY, payload=ErPayload())
        return node

    for token in tokens:
        if isinstance(token, EntityStart):
            current = entity(token.id)
        elif isinstance(token, EntityEnd):
            current = None
        elif isinstance(token, AttributeDecl) and current is not None:
            current.dialect_data.attributes.append(ErAttribute(
                type=token.type,
                name=token.name,
                constraint=token.constraint,
                comment=token.comment,
            ))
        elif isinstance(token, RelationshipDecl):
            source = entity(token.source)
            target = entity(token.target)
            builder.add_edge(
                source.id,
                target.id,
                arrow_kind=ArrowKind.RELATION,
                label=token.label,
                arrow=token.marker,
            )

    return builder.build()


def parse(lines: List[str]) -> Graph:
    return reduce(tokenize(lines))

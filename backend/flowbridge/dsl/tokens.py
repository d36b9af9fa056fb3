"""
Typed intermediate representation produced by the dialect tokenizers.

Tokenizers only recognise grammar; reducers (``flowbridge.parsers``) turn the
token stream into a graph and own every graph invariant.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from flowbridge.ir.graph import NodeKind


@dataclass
class NodeRef:
    id: str
    kind: Optional[NodeKind] = None     # None: bare reference, no shape given
    label: Optional[str] = None


@dataclass
class Header:
    keyword: str
    direction: Optional[str] = None
    title: Optional[str] = None
    show_data: bool = False


@dataclass
class DirectionDecl:
    direction: str


@dataclass
class NodeDecl:
    ref: NodeRef


@dataclass
class EdgeDecl:
    source: NodeRef
    target: NodeRef
    arrow: str
    label: Optional[str] = None


@dataclass
class GroupStart:
    id: str
    label: Optional[str] = None


@dataclass
class GroupEnd:
    pass


@dataclass
class StyleDecl:
    id: str
    props: Dict[str, str] = field(default_factory=dict)


# ---------- sequence ----------

@dataclass
class ParticipantDecl:
    id: str
    label: Optional[str] = None
    is_actor: bool = False


@dataclass
class MessageDecl:
    source: str
    target: str
    arrow: str
    label: str = ""


@dataclass
class NoteDecl:
    position: str                       # left_of | right_of | over
    participants: List[str]
    text: str = ""


# ---------- entity relation ----------

@dataclass
class EntityStart:
    id: str


@dataclass
class EntityEnd:
    pass


@dataclass
class AttributeDecl:
    type: str
    name: str
    constraint: Optional[str] = None
    comment: Optional[str] = None


@dataclass
class RelationshipDecl:
    source: str
    target: str
    marker: str
    label: Optional[str] = None


# ---------- state ----------

@dataclass
class StateDecl:
    id: str
    label: Optional[str] = None
    marker: Optional[str] = None        # choice | fork | join


@dataclass
class TransitionDecl:
    source: str
    target: str
    label: Optional[str] = None


# ---------- pie ----------

@dataclass
class TitleDecl:
    text: str


@dataclass
class SliceDecl:
    label: str
    value: float


# ---------- mindmap ----------

@dataclass
class MindmapItem:
    indent: int
    ref: NodeRef
    bare: bool = False
    css_class: Optional[str] = None


@dataclass
class ClassTag:
    css_class: str


Token = Union[
    Header,
    DirectionDecl,
    NodeDecl,
    EdgeDecl,
    GroupStart,
    GroupEnd,
    StyleDecl,
    ParticipantDecl,
    MessageDecl,
    NoteDecl,
    EntityStart,
    EntityEnd,
    AttributeDecl,
    RelationshipDecl,
    StateDecl,
    TransitionDecl,
    TitleDecl,
    SliceDecl,
    MindmapItem,
    ClassTag,
]

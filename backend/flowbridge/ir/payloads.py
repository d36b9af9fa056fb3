"""
Dialect-specific node payloads.

Flowchart nodes carry no payload; every other dialect attaches one of the
dataclasses below to ``Node.dialect_data``. ``type`` is the tag used when the
graph is rendered to JSON.
"""

from dataclasses import dataclass, field
from typing import ClassVar, List, Optional


@dataclass
class ErAttribute:
    type: str
    name: str
    constraint: Optional[str] = None    # PK | FK | UK | "PK, FK"
    comment: Optional[str] = None


@dataclass
class ErPayload:
    type: ClassVar[str] = "er"
    attributes: List[ErAttribute] = field(default_factory=list)


@dataclass
class SequencePayload:
    type: ClassVar[str] = "sequence"
    participant_id: Optional[str] = None
    is_actor: bool = False
    is_note: bool = False
    note_position: Optional[str] = None   # left_of | right_of | over
    note_participants: List[str] = field(default_factory=list)
    order: Optional[int] = None
    is_anchor: bool = False
    is_terminal: bool = False


@dataclass
class StatePayload:
    type: ClassVar[str] = "state"
    marker: Optional[str] = None          # start | end | choice | fork | join


@dataclass
class PiePayload:
    type: ClassVar[str] = "pie"
    value: float = 0.0


@dataclass
class MindmapPayload:
    type: ClassVar[str] = "mindmap"
    depth: int = 0
    css_class: Optional[str] = None
    bare: bool = False                    # written as plain text, no id/shape


@dataclass
class UnsupportedPayload:
    type: ClassVar[str] = "unsupported"
    dialect_name: str = ""
    source: str = ""


PAYLOAD_TYPES = {
    cls.type: cls
    for cls in (
        ErPayload,
        SequencePayload,
        StatePayload,
        PiePayload,
        MindmapPayload,
        UnsupportedPayload,
    )
}

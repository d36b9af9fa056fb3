from dataclasses import fields, is_dataclass
from enum import Enum
from typing import Any, Dict, Optional

from flowbridge.ir.graph import ArrowKind, Dialect, Edge, EdgeData, Graph, Node, NodeKind, Position, Size
from flowbridge.ir.payloads import PAYLOAD_TYPES, ErAttribute, ErPayload
from flowbridge.ir.style import StyleOverride


PRIMITIVE_TYPES = (str, int, float, bool, type(None))


def serialize_value(obj: Any):
    """
    Turn model objects into JSON-compatible structures.
    Enums become their values; payloads carry a ``type`` tag.
    """
    if isinstance(obj, Enum):
        return obj.value

    if isinstance(obj, PRIMITIVE_TYPES):
        return obj

    if isinstance(obj, (list, tuple)):
        return [serialize_value(item) for item in obj]

    if isinstance(obj, dict):
        return {k: serialize_value(v) for k, v in obj.items()}

    if is_dataclass(obj):
        data = {f.name: serialize_value(getattr(obj, f.name)) for f in fields(obj)}
        tag = getattr(type(obj), "type", None)
        if isinstance(tag, str):
            data = {"type": tag, **data}
        return data

    return str(obj)


def graph_to_dict(graph: Graph) -> Dict[str, Any]:
    return serialize_value(graph)


def _style(data: Optional[dict]) -> StyleOverride:
    if not data:
        return StyleOverride()
    known = {f.name for f in fields(StyleOverride)}
    return StyleOverride(**{k: v for k, v in data.items() if k in known})


def _payload(data: Optional[dict]):
    if not data:
        return None
    cls = PAYLOAD_TYPES.get(data.get("type"))
    if cls is None:
        return None
    known = {f.name for f in fields(cls)}
    values = {k: v for k, v in data.items() if k in known}
    if cls is ErPayload:
        values["attributes"] = [
            ErAttribute(**a) for a in values.get("attributes") or []
        ]
    return cls(**values)


def _node_from_dict(data: dict) -> Node:
    position = data.get("position") or {}
    size = data.get("size")
    return Node(
        id=str(data["id"]),
        kind=NodeKind(data.get("kind") or NodeKind.RECTANGLE.value),
        label=data.get("label") or "",
        position=Position(float(position.get("x", 0)), float(position.get("y", 0))),
        size=Size(float(size["width"]), float(size["height"])) if size else None,
        style=_style(data.get("style")),
        parent=data.get("parent"),
        dialect_data=_payload(data.get("dialect_data")),
    )


def _edge_from_dict(data: dict, index: int) -> Edge:
    edge_data = data.get("dialect_data") or {}
    return Edge(
        id=str(data.get("id") or f"{data['source']}-{data['target']}-{index}"),
        source=str(data["source"]),
        target=str(data["target"]),
        source_handle=data.get("source_handle"),
        target_handle=data.get("target_handle"),
        label=data.get("label"),
        arrow_kind=ArrowKind(data.get("arrow_kind") or ArrowKind.SOLID.value),
        style=_style(data.get("style")),
        dialect_data=EdgeData(
            order=edge_data.get("order"),
            is_lifeline=bool(edge_data.get("is_lifeline", False)),
            participants=list(edge_data.get("participants") or []),
            arrow=edge_data.get("arrow"),
        ),
    )


def graph_from_dict(data: Dict[str, Any]) -> Graph:
    """Inverse of graph_to_dict. Unknown keys are ignored."""
    dialect = data.get("dialect")
    return Graph(
        nodes=[_node_from_dict(n) for n in data.get("nodes") or []],
        edges=[_edge_from_dict(e, i) for i, e in enumerate(data.get("edges") or [])],
        dialect=Dialect(dialect) if dialect else None,
        direction=data.get("direction") or "TD",
        title=data.get("title"),
        show_data=bool(data.get("show_data", False)),
    )

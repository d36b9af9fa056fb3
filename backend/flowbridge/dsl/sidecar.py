"""
Sidecar metadata codec.

Layout, style and edge data the Mermaid grammar cannot express travel in
trailing comment lines::

    %% layout: {"v":1,"data":{"A":{"x":40,"y":20}}}
    %% styles: {"v":1,"data":{"A":{"strokeColor":"#00ff00"}}}
    %% edges: {"v":1,"data":[{"source":"A","target":"B","sourceHandle":"right"}]}

Older text stores the bare map/array without the ``{"v", "data"}`` envelope;
both forms decode. Decoding never raises: a broken payload empties its own
channel only.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from flowbridge.dsl.mermaid import COMMENT_MARKER
from flowbridge.ir.style import StyleOverride

logger = logging.getLogger(__name__)

SIDECAR_VERSION = 1
SIDECAR_TAGS = ("layout", "styles", "edges")

_TAG_RE = re.compile(r"^\s*%%\s*(layout|styles|edges)\s*:(.*)$")


# ============================================================
# Wire models
# ============================================================

class LayoutEntry(BaseModel):
    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    x: Optional[float] = None
    y: Optional[float] = None
    w: Optional[float] = None
    h: Optional[float] = None


def _alias(*names: str):
    return Field(
        default=None,
        validation_alias=AliasChoices(*names),
        serialization_alias=names[0],
    )


class StyleEntry(BaseModel):
    """Node style overrides; keys keep the historical camelCase names."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True, allow_inf_nan=False)

    fill: Optional[str] = _alias("color", "fill")
    stroke_color: Optional[str] = _alias("strokeColor", "stroke_color")
    stroke_style: Optional[str] = _alias("strokeStyle", "stroke_style")
    stroke_width: Optional[float] = _alias("strokeWidth", "stroke_width")
    text_color: Optional[str] = _alias("textColor", "text_color")
    label_bg: Optional[str] = _alias("labelBgColor", "label_bg")
    image_ref: Optional[str] = _alias("imageUrl", "image_ref")
    image_size: Optional[float] = _alias("imageSize", "image_size")
    handle_color: Optional[str] = _alias("handleColor", "handle_color")
    group_shape: Optional[str] = _alias("groupShape", "group_shape")


class EdgeLineStyle(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, allow_inf_nan=False)

    stroke: Optional[str] = None
    stroke_width: Optional[float] = _alias("strokeWidth", "stroke_width")
    stroke_dasharray: Optional[Union[str, float]] = _alias("strokeDasharray", "stroke_dasharray")


class LabelStyle(BaseModel):
    model_config = ConfigDict(extra="ignore")

    fill: Optional[str] = None


class EdgeOverrideEntry(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    source: str
    target: str
    label: Optional[str] = None
    source_handle: Optional[str] = _alias("sourceHandle", "source_handle")
    target_handle: Optional[str] = _alias("targetHandle", "target_handle")
    style: Optional[EdgeLineStyle] = None
    label_style: Optional[LabelStyle] = _alias("labelStyle", "label_style")
    label_bg_style: Optional[LabelStyle] = _alias("labelBgStyle", "label_bg_style")


@dataclass
class Sidecar:
    positions: Dict[str, LayoutEntry] = field(default_factory=dict)
    styles: Dict[str, StyleEntry] = field(default_factory=dict)
    edges: List[EdgeOverrideEntry] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.positions or self.styles or self.edges)


# ============================================================
# Model <-> wire conversions
# ============================================================

def style_to_entry(style: StyleOverride) -> StyleEntry:
    return StyleEntry(**{k: v for k, v in vars(style).items() if v is not None})


def entry_to_style(entry: StyleEntry) -> StyleOverride:
    return StyleOverride(**entry.model_dump())


# ============================================================
# Decode
# ============================================================

def is_sidecar_line(line: str) -> bool:
    return _TAG_RE.match(line) is not None


def _first_key_wins(pairs):
    out = {}
    for key, value in pairs:
        if key not in out:
            out[key] = value
    return out


def _load_json(text: str) -> Any:
    """
    Parse a payload, tolerating junk around the JSON value.
    Returns None when nothing parseable is found.
    """
    text = text.strip()
    if not text:
        return None
    try:
        return json.loads(text, object_pairs_hook=_first_key_wins)
    except ValueError:
        pass

    starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
    if not starts:
        return None
    start = min(starts)
    closer = "}" if text[start] == "{" else "]"
    end = text.rfind(closer)
    if end <= start:
        return None
    try:
        return json.loads(text[start:end + 1], object_pairs_hook=_first_key_wins)
    except ValueError:
        return None


def _unwrap(payload: Any) -> Any:
    if (
        isinstance(payload, dict)
        and "v" in payload
        and "data" in payload
        and isinstance(payload["v"], int)
        and not isinstance(payload["v"], bool)
    ):
        if payload["v"] > SIDECAR_VERSION:
            logger.info("[SIDECAR] Payload version %s is newer than %s; reading known fields",
                        payload["v"], SIDECAR_VERSION)
        return payload["data"]
    return payload


M = TypeVar("M", bound=BaseModel)


def _decode_map(raw: Optional[str], model: Type[M], tag: str) -> Dict[str, M]:
    if raw is None:
        return {}
    payload = _unwrap(_load_json(raw))
    if not isinstance(payload, dict):
        logger.warning("[SIDECAR] Malformed '%s' payload ignored", tag)
        return {}

    entries: Dict[str, M] = {}
    for key, value in payload.items():
        try:
            entries[str(key)] = model.model_validate(value)
        except ValidationError:
            logger.debug("[SIDECAR] Dropping invalid '%s' entry for %s", tag, key)
    return entries


def _decode_edges(raw: Optional[str]) -> List[EdgeOverrideEntry]:
    if raw is None:
        return []
    payload = _unwrap(_load_json(raw))
    if not isinstance(payload, list):
        logger.warning("[SIDECAR] Malformed 'edges' payload ignored")
        return []

    entries: List[EdgeOverrideEntry] = []
    for value in payload:
        try:
            entries.append(EdgeOverrideEntry.model_validate(value))
        except ValidationError:
            logger.debug("[SIDECAR] Dropping invalid edge entry %r", value)
    return entries


def decode_sidecar(lines: List[str]) -> Sidecar:
    """Collect the tagged comment lines; the first line per tag wins."""
    raw: Dict[str, str] = {}
    for line in lines:
        match = _TAG_RE.match(line)
        if match and match.group(1) not in raw:
            raw[match.group(1)] = match.group(2)

    return Sidecar(
        positions=_decode_map(raw.get("layout"), LayoutEntry, "layout"),
        styles=_decode_map(raw.get("styles"), StyleEntry, "styles"),
        edges=_decode_edges(raw.get("edges")),
    )


# ============================================================
# Encode
# ============================================================

def _compact(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, dict):
        return {k: _compact(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_compact(v) for v in value]
    return value


def _dump(data: Any) -> str:
    envelope = {"v": SIDECAR_VERSION, "data": _compact(data)}
    return json.dumps(envelope, separators=(",", ":"), ensure_ascii=False)


def encode_sidecar(sidecar: Sidecar) -> List[str]:
    """Render the non-empty channels as comment lines, node maps keyed in id order."""
    lines: List[str] = []

    if sidecar.positions:
        data = {
            node_id: entry.model_dump(exclude_none=True)
            for node_id, entry in sorted(sidecar.positions.items())
        }
        lines.append(f"{COMMENT_MARKER} layout: {_dump(data)}")

    if sidecar.styles:
        data = {
            node_id: entry.model_dump(by_alias=True, exclude_none=True)
            for node_id, entry in sorted(sidecar.styles.items())
        }
        lines.append(f"{COMMENT_MARKER} styles: {_dump(data)}")

    if sidecar.edges:
        data = [
            entry.model_dump(by_alias=True, exclude_none=True)
            for entry in sidecar.edges
        ]
        lines.append(f"{COMMENT_MARKER} edges: {_dump(data)}")

    return lines

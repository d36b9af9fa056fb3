import re
from typing import Dict, Optional

from flowbridge.dsl.mermaid import split_style_props
from flowbridge.ir.style import StyleOverride, stroke_style_from_dasharray

_NUMBER_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)")


def parse_style_props(text: str) -> Dict[str, str]:
    """``fill:#f00,stroke-width:2px`` → {"fill": "#f00", "stroke-width": "2px"}"""
    props: Dict[str, str] = {}
    for part in split_style_props(text.rstrip(";")):
        if ":" not in part:
            continue
        key, value = part.split(":", 1)
        key = key.strip().lower()
        if key and key not in props:
            props[key] = value.strip()
    return props


def _width(value: str) -> Optional[float]:
    match = _NUMBER_RE.match(value)
    if not match:
        return None
    return float(match.group(1))


def style_from_props(props: Dict[str, str]) -> StyleOverride:
    style = StyleOverride()
    if props.get("fill"):
        style.fill = props["fill"]
    if props.get("stroke"):
        style.stroke_color = props["stroke"]
    if props.get("color"):
        style.text_color = props["color"]
    if props.get("stroke-width"):
        style.stroke_width = _width(props["stroke-width"])
    if "stroke-dasharray" in props:
        style.stroke_style = stroke_style_from_dasharray(props["stroke-dasharray"])
    return style

from dataclasses import dataclass, fields, replace
from typing import Optional


STROKE_STYLES = ("solid", "dashed", "dotted")


@dataclass
class StyleOverride:
    """
    Visual attributes a user changed away from the dialect default.
    None on a field means "use the default for this node/edge kind".
    """
    fill: Optional[str] = None
    stroke_color: Optional[str] = None
    stroke_style: Optional[str] = None      # solid | dashed | dotted
    stroke_width: Optional[float] = None
    text_color: Optional[str] = None
    label_bg: Optional[str] = None
    image_ref: Optional[str] = None
    image_size: Optional[float] = None
    handle_color: Optional[str] = None
    group_shape: Optional[str] = None       # rectangle | rounded

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    def merged(self, other: Optional["StyleOverride"]) -> "StyleOverride":
        """Overlay the non-empty attributes of *other* on top of this style."""
        if other is None:
            return replace(self)
        updates = {
            f.name: getattr(other, f.name)
            for f in fields(other)
            if getattr(other, f.name) is not None
        }
        return replace(self, **updates)

    def without_defaults(self, default: "StyleOverride") -> "StyleOverride":
        """Drop every attribute that equals the dialect default."""
        kept = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if _same(value, getattr(default, f.name)):
                continue
            kept[f.name] = value
        return StyleOverride(**kept)


def _same(a, b) -> bool:
    if isinstance(a, str) and isinstance(b, str):
        return a.replace(" ", "").lower() == b.replace(" ", "").lower()
    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        return float(a) == float(b)
    return a == b


def stroke_style_from_dasharray(value) -> str:
    text = str(value).strip().lower() if value is not None else ""
    if text in ("", "0", "none", "0 0", "0,0"):
        return "solid"
    if text.replace(",", " ").split() == ["1", "2"]:
        return "dotted"
    return "dashed"


def dasharray_for(stroke_style: str, separator: str = " ") -> str:
    if stroke_style == "dashed":
        return f"5{separator}5"
    if stroke_style == "dotted":
        return f"1{separator}2"
    return "0"

import re
from typing import List

COMMENT_MARKER = "%%"

_FENCE_RE = re.compile(r"```(?:mermaid)?", re.IGNORECASE)
_BR_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_UNSAFE_LABEL_RE = re.compile(r'[\[\](){}|"<>;#]')

# characters that end a statement or a pipe label; written as entity codes
_ENTITY_CODES = {"#": "#35;", ";": "#59;", "|": "#124;"}
_ENTITY_ESCAPE_RE = re.compile(r"[#;|]")
_ENTITY_DECODE_RE = re.compile(r"#(35|59|124|quot);")
_ENTITY_CHARS = {"35": "#", "59": ";", "124": "|", "quot": "'"}
_ENTITY_TAIL_RE = re.compile(r"#(?:\d+|quot);$")


def strip_fences(code: str) -> str:
    """Remove markdown code fences wrapped around a diagram."""
    if not code:
        return ""
    return _FENCE_RE.sub("", code)


def split_lines(code: str) -> List[str]:
    return [line.rstrip("\r") for line in strip_fences(code).split("\n")]


def is_comment(line: str) -> bool:
    return line.lstrip().startswith(COMMENT_MARKER)


def strip_terminator(line: str) -> str:
    """Drop trailing statement semicolons, leaving an entity code at the end intact."""
    line = line.strip()
    while line.endswith(";") and not _ENTITY_TAIL_RE.search(line):
        line = line[:-1].rstrip()
    return line


def mermaid_id(text: str) -> str:
    """
    Convert any human-readable string into a Mermaid-safe ID.
    Deterministic and collision-safe.
    """
    return re.sub(r"[^a-zA-Z0-9_]", "_", text)


def unquote(text: str) -> str:
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ("'", '"'):
        return text[1:-1]
    return text


def decode_label(text: str) -> str:
    """DSL label text → model label (line breaks restored)."""
    text = unquote(text)
    text = _BR_RE.sub("\n", text)
    text = _ENTITY_DECODE_RE.sub(lambda m: _ENTITY_CHARS[m.group(1)], text)
    return text.strip(" \t")


def encode_label(text: str) -> str:
    """Model label → DSL-safe text (quotes normalized, newlines tokenized)."""
    if text is None:
        return ""
    text = _ENTITY_ESCAPE_RE.sub(lambda m: _ENTITY_CODES[m.group(0)], text)
    return text.replace('"', "'").replace("\r\n", "\n").replace("\n", "<br/>")


def needs_quotes(text: str) -> bool:
    if not text:
        return True
    if text != text.strip():
        return True
    return _UNSAFE_LABEL_RE.search(text) is not None


def format_label(text: str) -> str:
    """Encode a label, quoting it only when the bare form would not re-parse."""
    encoded = encode_label(text)
    if needs_quotes(encoded):
        return f'"{encoded}"'
    return encoded


def format_number(value: float) -> str:
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def split_style_props(text: str) -> List[str]:
    """Split ``fill:#fff,stroke:rgba(0, 0, 0, 0)`` on commas outside parentheses."""
    parts: List[str] = []
    depth = 0
    current = ""
    for ch in text:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(0, depth - 1)
        if ch == "," and depth == 0:
            parts.append(current)
            current = ""
            continue
        current += ch
    if current:
        parts.append(current)
    return [p.strip() for p in parts if p.strip()]

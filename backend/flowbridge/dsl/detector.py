import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from flowbridge.dsl.mermaid import is_comment, split_lines
from flowbridge.ir.graph import Dialect

logger = logging.getLogger(__name__)


@dataclass
class DialectDetectionResult:
    dialect: Dialect
    keyword: str = ""
    header_line: Optional[int] = None   # index of the header line, if any

    def to_dict(self) -> dict:
        return {
            "dialect": self.dialect.value,
            "keyword": self.keyword,
            "header_line": self.header_line,
        }


class DialectDetector:
    """
    Classifies diagram text by its leading keyword.

    Supported dialects are tested first, in priority order. Known Mermaid
    diagram types that have no parser are reported as UNSUPPORTED; anything
    else falls back to the flowchart dialect.
    """

    # Order matters: the first match wins.
    DIALECT_KEYWORDS: List[Tuple[str, Dialect]] = [
        ("pie", Dialect.PIE),
        ("mindmap", Dialect.MINDMAP),
        ("erDiagram", Dialect.ER),
        ("sequenceDiagram", Dialect.SEQUENCE),
        ("stateDiagram-v2", Dialect.STATE),
        ("stateDiagram", Dialect.STATE),
        ("flowchart-elk", Dialect.FLOWCHART),
        ("flowchart", Dialect.FLOWCHART),
        ("graph", Dialect.FLOWCHART),
    ]

    UNSUPPORTED_KEYWORDS = {
        "classDiagram",
        "classDiagram-v2",
        "gitGraph",
        "journey",
        "gantt",
        "timeline",
        "quadrantChart",
        "requirementDiagram",
        "C4Context",
        "C4Container",
        "C4Component",
        "C4Dynamic",
        "C4Deployment",
        "sankey-beta",
        "xychart-beta",
        "block-beta",
        "packet-beta",
        "architecture-beta",
        "kanban",
        "zenuml",
    }

    def detect(self, text: str) -> DialectDetectionResult:
        lines = split_lines(text)
        index, first = self._first_significant_line(lines)
        if first is None:
            return DialectDetectionResult(dialect=Dialect.FLOWCHART)

        token = first.split()[0] if first.split() else ""
        # "graph TD;" / "pie title X"
        token = token.rstrip(";")

        for keyword, dialect in self.DIALECT_KEYWORDS:
            if token == keyword:
                return DialectDetectionResult(dialect=dialect, keyword=keyword, header_line=index)

        if token in self.UNSUPPORTED_KEYWORDS:
            logger.info("[DETECTOR] Unsupported diagram type: %s", token)
            return DialectDetectionResult(dialect=Dialect.UNSUPPORTED, keyword=token, header_line=index)

        return DialectDetectionResult(dialect=Dialect.FLOWCHART)

    @staticmethod
    def _first_significant_line(lines: List[str]) -> Tuple[Optional[int], Optional[str]]:
        in_front_matter = False
        for index, raw in enumerate(lines):
            line = raw.strip()
            if not line:
                continue
            if line == "---":
                in_front_matter = not in_front_matter
                continue
            if in_front_matter:
                continue
            if is_comment(line):
                continue
            return index, line
        return None, None


_DETECTOR = DialectDetector()


def detect_dialect(text: str) -> Dialect:
    return _DETECTOR.detect(text).dialect


def detect(text: str) -> DialectDetectionResult:
    return _DETECTOR.detect(text)


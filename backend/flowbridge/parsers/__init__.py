from typing import Callable, Dict, List

from flowbridge.ir.graph import Dialect, Graph
from flowbridge.parsers import er, flowchart, mindmap, pie, sequence, state
from flowbridge.parsers.builder import GraphBuilder

PARSERS: Dict[Dialect, Callable[[List[str]], Graph]] = {
    Dialect.FLOWCHART: flowchart.parse,
    Dialect.SEQUENCE: sequence.parse,
    Dialect.ER: er.parse,
    Dialect.STATE: state.parse,
    Dialect.PIE: pie.parse,
    Dialect.MINDMAP: mindmap.parse,
}


def parse_lines(dialect: Dialect, lines: List[str]) -> Graph:
    return PARSERS[dialect](lines)

# Visual defaults module
# Single source of truth for default styles and cell sizes per dialect

from flowbridge.visual.visual_style import (
    EDGE_STYLE,
    VISUAL_STYLE,
    default_edge_style,
    default_node_style,
    default_size,
    effective_node_style,
)

__all__ = [
    "EDGE_STYLE",
    "VISUAL_STYLE",
    "default_edge_style",
    "default_node_style",
    "default_size",
    "effective_node_style",
]

"""WorkflowDraw diagram editor module built with PySide6 and QML.

The model turns pointer gestures into diagram edits: placing shapes,
snapping typed connectors to shape ports, rubber-band selection, dragging
and grouping. Depth is the single source of truth for both paint order and
hit-testing, so what is drawn on top is what gets clicked.
"""

from .config import EditorSettings
from .constants import DEPTH_MAX, DEPTH_TOP, SHAPE_PRESETS
from .geometry import closest_port, decoration_for, find_top_entity_at, ports_for
from .layers import LayerAllocator
from .model import DiagramModel
from .render_order import paint_order
from .types import (
    CanvasPoint,
    ConnectorKind,
    DiagramConnector,
    DiagramShape,
    LabelShape,
    ShapeKind,
    ToolMode,
)
from .ui import create_workflowdraw_window, main

__all__ = [
    "CanvasPoint",
    "ConnectorKind",
    "DEPTH_MAX",
    "DEPTH_TOP",
    "DiagramConnector",
    "DiagramModel",
    "DiagramShape",
    "EditorSettings",
    "LabelShape",
    "LayerAllocator",
    "SHAPE_PRESETS",
    "ShapeKind",
    "ToolMode",
    "closest_port",
    "create_workflowdraw_window",
    "decoration_for",
    "find_top_entity_at",
    "main",
    "paint_order",
    "ports_for",
]

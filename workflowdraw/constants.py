"""Constants and presets for WorkflowDraw diagrams."""

from typing import Any, Dict


# Depth is a z-order: lower values paint later and win hit-testing.
DEPTH_TOP = -1
DEPTH_FLOOR = 0
DEPTH_MAX = 99

FONT_SIZE_MIN = 8
FONT_SIZE_MAX = 72

DEFAULT_SHAPE_WIDTH = 120.0
DEFAULT_SHAPE_HEIGHT = 80.0
DEFAULT_FONT_SIZE = 12

# Connector decoration geometry.
ARROW_BARB = 15.0
ARROW_HALF_ANGLE_DEG = 40.0
DIAMOND_HALF_LENGTH = 10.0
DIAMOND_HALF_WIDTH = 10.0


SHAPE_PRESETS: Dict[str, Dict[str, Any]] = {
    "rect": {
        "fill": "#f6f0f0",
        "stroke": "#000000",
        "label_color": "#ffffff",
    },
    "oval": {
        "fill": "#f6f0f0",
        "stroke": "#000000",
        "label_color": "#ffffff",
    },
    "group": {
        "fill": "transparent",
        "stroke": "#ff00ff",
        "label_color": "#ffffff",
    },
}

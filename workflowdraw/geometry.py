"""Geometry helpers: ports, hit-testing, rubber bands and decorations.

Nothing here imports Qt so the helpers can be used and tested on their own.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .constants import (
    ARROW_BARB,
    ARROW_HALF_ANGLE_DEG,
    DIAMOND_HALF_LENGTH,
    DIAMOND_HALF_WIDTH,
)
from .types import CanvasPoint, ConnectorKind, DiagramShape, ShapeKind

Rect = Tuple[float, float, float, float]


# --- Ports --------------------------------------------------------------------
def _edge_midpoints(shape: DiagramShape) -> List[CanvasPoint]:
    cx = shape.x + shape.width / 2
    cy = shape.y + shape.height / 2
    return [
        CanvasPoint(cx, shape.y),
        CanvasPoint(cx, shape.bottom),
        CanvasPoint(shape.x, cy),
        CanvasPoint(shape.right, cy),
    ]


def _rect_ports(shape: DiagramShape) -> List[CanvasPoint]:
    cx = shape.x + shape.width / 2
    cy = shape.y + shape.height / 2
    return [
        CanvasPoint(shape.x, shape.y),
        CanvasPoint(cx, shape.y),
        CanvasPoint(shape.right, shape.y),
        CanvasPoint(shape.x, cy),
        CanvasPoint(shape.right, cy),
        CanvasPoint(shape.x, shape.bottom),
        CanvasPoint(cx, shape.bottom),
        CanvasPoint(shape.right, shape.bottom),
    ]


PORT_BUILDERS: Dict[ShapeKind, Callable[[DiagramShape], List[CanvasPoint]]] = {
    ShapeKind.RECT: _rect_ports,
    ShapeKind.OVAL: _edge_midpoints,
    ShapeKind.GROUP: _edge_midpoints,
}


def ports_for(shape: DiagramShape) -> List[CanvasPoint]:
    """Return the connection ports of a shape in a fixed order."""
    return PORT_BUILDERS[shape.kind](shape)


def closest_port(shape: DiagramShape, x: float, y: float) -> CanvasPoint:
    """Return the port nearest to ``(x, y)``; the first one wins ties."""
    ports = ports_for(shape)
    closest = ports[0]
    best = math.hypot(closest.x - x, closest.y - y)
    for port in ports[1:]:
        distance = math.hypot(port.x - x, port.y - y)
        if distance < best:
            best = distance
            closest = port
    return closest


# --- Hit-testing ----------------------------------------------------------------
def find_top_entity_at(
    shapes: Sequence[DiagramShape], x: float, y: float
) -> Optional[DiagramShape]:
    """Return the top-level shape under ``(x, y)`` with the smallest depth.

    ``shapes`` is in insertion order; among equal depths the most recently
    inserted shape wins, matching what ends up painted on top.
    """
    top: Optional[DiagramShape] = None
    for shape in reversed(shapes):
        if not shape.contains(x, y):
            continue
        if top is None or shape.depth < top.depth:
            top = shape
    return top


# --- Rubber band ----------------------------------------------------------------
def normalized_rect(x1: float, y1: float, x2: float, y2: float) -> Rect:
    """Return ``(x, y, width, height)`` for the box spanned by two corners."""
    return (min(x1, x2), min(y1, y2), abs(x1 - x2), abs(y1 - y2))


def rect_contains(outer: Rect, shape: DiagramShape) -> bool:
    ox, oy, ow, oh = outer
    return (
        shape.x >= ox
        and shape.y >= oy
        and shape.right <= ox + ow
        and shape.bottom <= oy + oh
    )


def shapes_inside(rect: Rect, shapes: Iterable[DiagramShape]) -> List[DiagramShape]:
    """Return the shapes whose whole bounding box lies inside ``rect``."""
    return [shape for shape in shapes if rect_contains(rect, shape)]


# --- Decorations ----------------------------------------------------------------
@dataclass(frozen=True)
class Decoration:
    """Polygon drawn at the end of a connector."""

    points: Tuple[CanvasPoint, ...]
    filled: bool

    def to_list(self) -> List[Dict[str, float]]:
        return [{"x": pt.x, "y": pt.y} for pt in self.points]


def _arrow_head(start: CanvasPoint, end: CanvasPoint) -> Tuple[CanvasPoint, ...]:
    theta = math.atan2(end.y - start.y, end.x - start.x)
    phi = math.radians(ARROW_HALF_ANGLE_DEG)
    return (
        end,
        CanvasPoint(
            end.x - ARROW_BARB * math.cos(theta + phi),
            end.y - ARROW_BARB * math.sin(theta + phi),
        ),
        CanvasPoint(
            end.x - ARROW_BARB * math.cos(theta - phi),
            end.y - ARROW_BARB * math.sin(theta - phi),
        ),
    )


def _diamond(start: CanvasPoint, end: CanvasPoint) -> Tuple[CanvasPoint, ...]:
    dx = end.x - start.x
    dy = end.y - start.y
    length = math.hypot(dx, dy)
    ux, uy = dx / length, dy / length
    back = CanvasPoint(
        end.x - 2 * DIAMOND_HALF_LENGTH * ux,
        end.y - 2 * DIAMOND_HALF_LENGTH * uy,
    )
    cx = (end.x + back.x) / 2
    cy = (end.y + back.y) / 2
    # Perpendicular to the connector direction.
    px, py = -uy, ux
    return (
        end,
        CanvasPoint(cx + DIAMOND_HALF_WIDTH * px, cy + DIAMOND_HALF_WIDTH * py),
        back,
        CanvasPoint(cx - DIAMOND_HALF_WIDTH * px, cy - DIAMOND_HALF_WIDTH * py),
    )


DECORATION_BUILDERS: Dict[
    ConnectorKind, Tuple[Callable[[CanvasPoint, CanvasPoint], Tuple[CanvasPoint, ...]], bool]
] = {
    ConnectorKind.ASSOCIATION: (_arrow_head, True),
    ConnectorKind.GENERALIZATION: (_arrow_head, False),
    ConnectorKind.COMPOSITION: (_diamond, False),
}


def decoration_for(kind: ConnectorKind, start: CanvasPoint, end: CanvasPoint) -> Decoration:
    """Return the end decoration polygon for a connector of ``kind``."""
    builder, filled = DECORATION_BUILDERS[kind]
    if start == end:
        return Decoration(points=(), filled=filled)
    return Decoration(points=builder(start, end), filled=filled)

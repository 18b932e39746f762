"""Data types for WorkflowDraw diagrams.

This module contains the core data structures used throughout the
WorkflowDraw editor: shapes (rectangles, ovals and groups), connectors and
the enums that tag their variants.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Tuple

from .constants import DEPTH_MAX, DEPTH_TOP, FONT_SIZE_MAX, FONT_SIZE_MIN


class ToolMode(Enum):
    """Toolbar modes that decide how pointer events are interpreted."""

    SELECT = "select"
    RECT = "rect"
    OVAL = "oval"
    ASSOCIATION = "association"
    GENERALIZATION = "generalization"
    COMPOSITION = "composition"

    @property
    def connector_kind(self) -> Optional["ConnectorKind"]:
        """Connector kind drawn by this mode, or None for non-connect modes."""
        try:
            return ConnectorKind(self.value)
        except ValueError:
            return None


class ShapeKind(Enum):
    """Supported shape variants."""

    RECT = "rect"
    OVAL = "oval"
    GROUP = "group"


class ConnectorKind(Enum):
    """Connector variants; they differ only in their end decoration."""

    ASSOCIATION = "association"
    GENERALIZATION = "generalization"
    COMPOSITION = "composition"


class LabelShape(Enum):
    """Background drawn behind a shape's label text."""

    RECTANGLE = "rectangle"
    OVAL = "oval"


@dataclass(frozen=True)
class CanvasPoint:
    """An absolute point on the canvas."""

    x: float
    y: float

    def offset_from(self, x: float, y: float) -> Tuple[float, float]:
        """Return this point relative to the origin ``(x, y)``."""
        return (self.x - x, self.y - y)


def clamp_depth(depth: int) -> int:
    """Clamp a depth into the reserved top depth .. DEPTH_MAX range."""
    return max(DEPTH_TOP, min(DEPTH_MAX, int(depth)))


def clamp_font_size(size: int) -> int:
    """Clamp a label font size into the range the label dialog allows."""
    return max(FONT_SIZE_MIN, min(FONT_SIZE_MAX, int(size)))


@dataclass(eq=False)
class DiagramShape:
    """A rectangle, oval or group placed on the canvas.

    Groups keep their children in ``children`` and their bounds always equal
    the bounding box of those children. Positions only change through
    :meth:`move_by` once a shape exists, so group bounds and connector
    endpoints can be kept in sync by the callers.
    """

    id: str
    kind: ShapeKind
    x: float
    y: float
    width: float = 120.0
    height: float = 80.0
    depth: int = DEPTH_MAX
    show_ports: bool = False
    label: str = ""
    label_shape: LabelShape = LabelShape.RECTANGLE
    label_color: str = "#ffffff"
    font_size: int = 12
    children: List["DiagramShape"] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.width = max(0.0, float(self.width))
        self.height = max(0.0, float(self.height))
        self.depth = clamp_depth(self.depth)
        self.font_size = clamp_font_size(self.font_size)
        if self.kind is ShapeKind.GROUP:
            if not self.children:
                raise ValueError("A group needs at least one child")
            self.update_bounds()

    @property
    def is_group(self) -> bool:
        return self.kind is ShapeKind.GROUP

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def set_depth(self, depth: int) -> None:
        self.depth = clamp_depth(depth)

    def contains(self, x: float, y: float) -> bool:
        return self.x <= x <= self.right and self.y <= y <= self.bottom

    def bounds(self) -> Tuple[float, float, float, float]:
        return (self.x, self.y, self.width, self.height)

    def move_by(self, dx: float, dy: float) -> None:
        """Translate the shape; groups translate every descendant."""
        if self.is_group:
            for child in self.children:
                child.move_by(dx, dy)
            self.update_bounds()
        else:
            self.x += dx
            self.y += dy

    def update_bounds(self) -> None:
        if not self.is_group:
            return
        min_x = min(child.x for child in self.children)
        min_y = min(child.y for child in self.children)
        max_x = max(child.right for child in self.children)
        max_y = max(child.bottom for child in self.children)
        self.x = min_x
        self.y = min_y
        self.width = max_x - min_x
        self.height = max_y - min_y

    def leaves(self) -> Iterator["DiagramShape"]:
        """Yield every non-group descendant (or the shape itself)."""
        if not self.is_group:
            yield self
            return
        for child in self.children:
            yield from child.leaves()

    def descendants(self) -> Iterator["DiagramShape"]:
        for child in self.children:
            yield child
            yield from child.descendants()


@dataclass(eq=False)
class DiagramConnector:
    """A typed connection between two shapes.

    The offsets from each entity's origin are frozen when the connector is
    built; the absolute endpoints are always derived from them.
    """

    id: str
    kind: ConnectorKind
    start: DiagramShape
    end: DiagramShape
    start_offset: Tuple[float, float]
    end_offset: Tuple[float, float]
    start_point: CanvasPoint = CanvasPoint(0.0, 0.0)
    end_point: CanvasPoint = CanvasPoint(0.0, 0.0)
    depth: int = DEPTH_MAX

    @classmethod
    def between(
        cls,
        connector_id: str,
        kind: ConnectorKind,
        start: DiagramShape,
        start_port: CanvasPoint,
        end: DiagramShape,
        end_port: CanvasPoint,
    ) -> "DiagramConnector":
        connector = cls(
            id=connector_id,
            kind=kind,
            start=start,
            end=end,
            start_offset=start_port.offset_from(start.x, start.y),
            end_offset=end_port.offset_from(end.x, end.y),
        )
        connector.refresh()
        return connector

    def touches(self, shape: DiagramShape) -> bool:
        return self.start is shape or self.end is shape

    def refresh(self) -> None:
        """Recompute absolute endpoints and the derived depth."""
        self.start_point = CanvasPoint(
            self.start.x + self.start_offset[0],
            self.start.y + self.start_offset[1],
        )
        self.end_point = CanvasPoint(
            self.end.x + self.end_offset[0],
            self.end.y + self.end_offset[1],
        )
        self.recalc_depth()

    def recalc_depth(self) -> None:
        self.depth = min(self.start.depth, self.end.depth)

    def reattach(self, old: DiagramShape, new: DiagramShape) -> None:
        """Point the end currently on ``old`` at ``new``, keeping it in place."""
        if self.start is old:
            self.start = new
            self.start_offset = self.start_point.offset_from(new.x, new.y)
        if self.end is old:
            self.end = new
            self.end_offset = self.end_point.offset_from(new.x, new.y)
        self.refresh()

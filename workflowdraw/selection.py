"""Selection mixin for DiagramModel.

This module provides the select tool: click selection, rubber-band
selection and dragging the current selection around. It also owns the
depth bookkeeping that goes with selection, since selected shapes are
lifted to the reserved top depth.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple, TYPE_CHECKING

from PySide6.QtCore import Signal

from .constants import DEPTH_TOP
from .geometry import Rect, find_top_entity_at, normalized_rect, shapes_inside
from .layers import LayerAllocator
from .types import DiagramConnector, DiagramShape

if TYPE_CHECKING:
    from .model import DiagramModel

logger = logging.getLogger(__name__)


class SelectionMixin:
    """Mixin providing selection and group-drag operations."""

    # Signals (will be defined in DiagramModel)
    selectionChanged: Signal
    guidesChanged: Signal

    # Roles (will be defined in DiagramModel)
    XRole: int
    YRole: int
    WidthRole: int
    HeightRole: int
    DepthRole: int

    # Attributes expected from DiagramModel
    _shapes: List[DiagramShape]
    _connectors: List[DiagramConnector]
    _selected: List[DiagramShape]
    _layers: LayerAllocator
    _box_start: Optional[Tuple[float, float]]
    _box_end: Optional[Tuple[float, float]]
    _drag_anchor: Optional[Tuple[float, float]]
    _drag_origins: Dict[str, Tuple[float, float]]
    _set_port_flags: Callable[[Callable[[DiagramShape], bool]], None]
    _emit_rows_changed: Callable[[Sequence[DiagramShape], List[int]], None]
    _request_repaint: Callable[[], None]

    def _init_selection(self) -> None:
        """Initialize selection state. Call from DiagramModel.__init__."""
        self._selected = []
        self._box_start = None
        self._box_end = None
        self._drag_anchor = None
        self._drag_origins = {}

    @property
    def _is_group_dragging(self) -> bool:
        return self._drag_anchor is not None

    @property
    def _is_box_selecting(self) -> bool:
        return self._box_start is not None

    def _selection_rect(self) -> Optional[Rect]:
        if self._box_start is None or self._box_end is None:
            return None
        return normalized_rect(*self._box_start, *self._box_end)

    # --- Gesture handlers -------------------------------------------------------
    def _select_press(self, x: float, y: float) -> None:
        self._end_group_drag()
        self._clear_box()

        clicked = find_top_entity_at(self._shapes, x, y)
        if clicked is None:
            self._apply_selection([])
            self._box_start = (x, y)
            self._box_end = (x, y)
            self.guidesChanged.emit()
            self._request_repaint()
            return

        if clicked not in self._selected:
            self._apply_selection([clicked])
        self._begin_group_drag(x, y)
        self._request_repaint()

    def _select_drag(self, x: float, y: float) -> None:
        if self._is_group_dragging:
            anchor_x, anchor_y = self._drag_anchor
            self._move_selection(x - anchor_x, y - anchor_y)
        elif self._is_box_selecting:
            self._box_end = (x, y)
            self.guidesChanged.emit()
            self._request_repaint()

    def _select_release(self, x: float, y: float) -> None:
        if self._is_group_dragging:
            self._end_group_drag()
            self._request_repaint()
        elif self._is_box_selecting:
            self._box_end = (x, y)
            rect = self._selection_rect()
            chosen = shapes_inside(rect, self._shapes)
            logger.debug("Rubber band %s selected %d shape(s)", rect, len(chosen))
            self._clear_box()
            self._apply_selection(chosen)
            self._request_repaint()

    # --- Selection bookkeeping --------------------------------------------------
    def _apply_selection(self, shapes: Sequence[DiagramShape]) -> None:
        """Make ``shapes`` the selection and restack depths accordingly.

        Top-level shapes left at the reserved top depth but no longer
        selected take a fresh depth from the allocator; the new selection is
        lifted to the top. Connector depths are re-derived afterwards.
        """
        chosen = list(shapes)
        for shape in self._shapes:
            if shape.depth == DEPTH_TOP and shape not in chosen:
                shape.set_depth(self._layers.next_depth())
        for shape in chosen:
            shape.set_depth(DEPTH_TOP)

        changed = chosen != self._selected
        self._selected = chosen
        self._set_port_flags(lambda shape: shape in chosen)
        self._refresh_connector_depths()
        self._emit_rows_changed(self._shapes, [self.DepthRole])
        if changed:
            self.selectionChanged.emit()

    def _refresh_connector_depths(self) -> None:
        for connector in self._connectors:
            connector.recalc_depth()

    # --- Group drag -------------------------------------------------------------
    def _begin_group_drag(self, x: float, y: float) -> None:
        self._drag_anchor = (x, y)
        self._drag_origins = {shape.id: (shape.x, shape.y) for shape in self._selected}

    def _end_group_drag(self) -> None:
        self._drag_anchor = None
        self._drag_origins = {}

    def _move_selection(self, total_dx: float, total_dy: float) -> None:
        """Place every selected shape at its drag origin plus the same delta."""
        moved = []
        for shape in self._selected:
            origin_x, origin_y = self._drag_origins[shape.id]
            dx = origin_x + total_dx - shape.x
            dy = origin_y + total_dy - shape.y
            if dx or dy:
                shape.move_by(dx, dy)
                moved.append(shape)
        if not moved:
            return
        for connector in self._connectors:
            if any(connector.touches(shape) for shape in moved):
                connector.refresh()
        self._emit_rows_changed(
            moved, [self.XRole, self.YRole, self.WidthRole, self.HeightRole]
        )
        self._request_repaint()

    def _clear_box(self) -> None:
        changed = self._is_box_selecting
        self._box_start = None
        self._box_end = None
        if changed:
            self.guidesChanged.emit()

"""Connector drawing mixin for DiagramModel.

This module handles the connect tool modes: press on a shape to start a
link, drag to show a guide line, release on another shape to create the
connector. Moving the pointer without buttons highlights the ports of the
shape under the cursor.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, TYPE_CHECKING

from PySide6.QtCore import Signal

from .geometry import closest_port, find_top_entity_at
from .types import CanvasPoint, ConnectorKind, DiagramConnector, DiagramShape, ToolMode

if TYPE_CHECKING:
    from .model import DiagramModel

logger = logging.getLogger(__name__)


class ConnectMixin:
    """Mixin providing the link-dragging gesture."""

    # Signals (will be defined in DiagramModel)
    connectorsChanged: Signal
    guidesChanged: Signal

    # Attributes expected from DiagramModel
    _shapes: List[DiagramShape]
    _selected: List[DiagramShape]
    _connectors: List[DiagramConnector]
    _tool_mode: ToolMode
    _link_start: Optional[DiagramShape]
    _link_start_point: Optional[CanvasPoint]
    _link_drag_point: Optional[CanvasPoint]
    _next_id: Callable[[str], str]
    _set_port_flags: Callable[[Callable[[DiagramShape], bool]], None]
    _request_repaint: Callable[[], None]

    def _init_connecting(self) -> None:
        """Initialize link-drag state. Call from DiagramModel.__init__."""
        self._link_start = None
        self._link_start_point = None
        self._link_drag_point = None

    @property
    def _is_link_dragging(self) -> bool:
        return self._link_start is not None

    def _connectable_at(self, x: float, y: float) -> Optional[DiagramShape]:
        hit = find_top_entity_at(self._shapes, x, y)
        if hit is None or hit.is_group:
            return None
        return hit

    # --- Gesture handlers -------------------------------------------------------
    def _connect_press(self, x: float, y: float) -> None:
        self._reset_link_state()
        start = self._connectable_at(x, y)
        if start is None:
            logger.debug("No connectable shape at (%.1f, %.1f)", x, y)
            return
        self._link_start = start
        self._link_start_point = closest_port(start, x, y)
        self._link_drag_point = CanvasPoint(x, y)
        self.guidesChanged.emit()
        self._request_repaint()

    def _connect_drag(self, x: float, y: float) -> None:
        if not self._is_link_dragging:
            return
        self._link_drag_point = CanvasPoint(x, y)
        self.guidesChanged.emit()
        self._request_repaint()

    def _connect_release(self, x: float, y: float) -> None:
        if not self._is_link_dragging:
            return
        start = self._link_start
        start_point = self._link_start_point
        kind = self._tool_mode.connector_kind
        end = self._connectable_at(x, y)
        if end is None or end is start or kind is None:
            logger.debug("Connector aborted at (%.1f, %.1f)", x, y)
        else:
            self._add_connector(kind, start, start_point, end, closest_port(end, x, y))
        self._reset_link_state()
        self._set_port_flags(lambda shape: False)
        self._request_repaint()

    def _hover_ports(self, x: float, y: float) -> None:
        hovered = find_top_entity_at(self._shapes, x, y)
        self._set_port_flags(lambda shape: shape is hovered)

    # --- Helpers ----------------------------------------------------------------
    def _add_connector(
        self,
        kind: ConnectorKind,
        start: DiagramShape,
        start_port: CanvasPoint,
        end: DiagramShape,
        end_port: CanvasPoint,
    ) -> DiagramConnector:
        connector = DiagramConnector.between(
            self._next_id(kind.value), kind, start, start_port, end, end_port
        )
        self._connectors.append(connector)
        logger.debug(
            "Created %s %s from %s to %s (depth %d)",
            kind.value, connector.id, start.id, end.id, connector.depth,
        )
        self.connectorsChanged.emit()
        return connector

    def _reset_link_state(self) -> None:
        changed = self._is_link_dragging
        self._link_start = None
        self._link_start_point = None
        self._link_drag_point = None
        if changed:
            self.guidesChanged.emit()

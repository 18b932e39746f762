"""Core DiagramModel class for WorkflowDraw.

This module provides the main Qt model for diagram shapes and connectors,
and routes pointer events to the handlers of the active tool mode.
"""

from __future__ import annotations

import logging
from itertools import count
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Sequence

from PySide6.QtCore import (
    QAbstractListModel,
    QModelIndex,
    Property,
    Qt,
    Signal,
    Slot,
)

from .config import EditorSettings
from .connecting import ConnectMixin
from .constants import SHAPE_PRESETS
from .geometry import find_top_entity_at
from .grouping import GroupingMixin
from .layers import LayerAllocator
from .render_order import describe, paint_order
from .selection import SelectionMixin
from .types import (
    DiagramConnector,
    DiagramShape,
    LabelShape,
    ShapeKind,
    ToolMode,
    clamp_font_size,
)

logger = logging.getLogger(__name__)

PointerHandler = Callable[[float, float], None]


class GestureHandlers(NamedTuple):
    """Pointer handlers for one tool mode; ``None`` ignores the event."""

    press: Optional[PointerHandler] = None
    drag: Optional[PointerHandler] = None
    release: Optional[PointerHandler] = None
    move: Optional[PointerHandler] = None


class DiagramModel(
    ConnectMixin,
    SelectionMixin,
    GroupingMixin,
    QAbstractListModel,
):
    """Qt model exposing top-level diagram shapes to QML."""

    IdRole = Qt.UserRole + 1
    KindRole = Qt.UserRole + 2
    XRole = Qt.UserRole + 3
    YRole = Qt.UserRole + 4
    WidthRole = Qt.UserRole + 5
    HeightRole = Qt.UserRole + 6
    DepthRole = Qt.UserRole + 7
    ShowPortsRole = Qt.UserRole + 8
    LabelRole = Qt.UserRole + 9
    LabelShapeRole = Qt.UserRole + 10
    LabelColorRole = Qt.UserRole + 11
    FontSizeRole = Qt.UserRole + 12
    SelectedRole = Qt.UserRole + 13

    itemsChanged = Signal()
    connectorsChanged = Signal()
    selectionChanged = Signal()
    guidesChanged = Signal()
    toolModeChanged = Signal()
    repaintRequested = Signal()

    def __init__(
        self,
        settings: Optional[EditorSettings] = None,
        allocator: Optional[LayerAllocator] = None,
    ):
        super().__init__()
        self._settings = settings or EditorSettings()
        self._layers = allocator or LayerAllocator(self._settings.depth_seed)
        self._shapes: List[DiagramShape] = []
        self._connectors: List[DiagramConnector] = []
        self._tool_mode = ToolMode.SELECT
        self._id_source = count()

        # Initialize mixins
        self._init_connecting()
        self._init_selection()

        connect = GestureHandlers(
            self._connect_press,
            self._connect_drag,
            self._connect_release,
            self._hover_ports,
        )
        self._gestures: Dict[ToolMode, GestureHandlers] = {
            ToolMode.SELECT: GestureHandlers(
                self._select_press,
                self._select_drag,
                self._select_release,
            ),
            ToolMode.RECT: GestureHandlers(press=self._create_rect_at),
            ToolMode.OVAL: GestureHandlers(press=self._create_oval_at),
            ToolMode.ASSOCIATION: connect,
            ToolMode.GENERALIZATION: connect,
            ToolMode.COMPOSITION: connect,
        }

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}_{next(self._id_source)}"

    @property
    def layers(self) -> LayerAllocator:
        return self._layers

    @property
    def settings(self) -> EditorSettings:
        return self._settings

    # --- Qt model overrides -------------------------------------------------
    def rowCount(self, parent: QModelIndex | None = QModelIndex()) -> int:  # type: ignore[override]
        return len(self._shapes)

    def data(self, index: QModelIndex, role: int = Qt.DisplayRole):  # type: ignore[override]
        if not index.isValid() or not (0 <= index.row() < len(self._shapes)):
            return None

        shape = self._shapes[index.row()]
        if role == self.IdRole:
            return shape.id
        if role == self.KindRole:
            return shape.kind.value
        if role == self.XRole:
            return shape.x
        if role == self.YRole:
            return shape.y
        if role == self.WidthRole:
            return shape.width
        if role == self.HeightRole:
            return shape.height
        if role == self.DepthRole:
            return shape.depth
        if role == self.ShowPortsRole:
            return shape.show_ports
        if role == self.LabelRole:
            return shape.label
        if role == self.LabelShapeRole:
            return shape.label_shape.value
        if role == self.LabelColorRole:
            return shape.label_color
        if role == self.FontSizeRole:
            return shape.font_size
        if role == self.SelectedRole:
            return shape in self._selected
        return None

    def roleNames(self) -> Dict[int, bytes]:  # type: ignore[override]
        return {
            self.IdRole: b"shapeId",
            self.KindRole: b"kind",
            self.XRole: b"x",
            self.YRole: b"y",
            self.WidthRole: b"width",
            self.HeightRole: b"height",
            self.DepthRole: b"depth",
            self.ShowPortsRole: b"showPorts",
            self.LabelRole: b"label",
            self.LabelShapeRole: b"labelShape",
            self.LabelColorRole: b"labelColor",
            self.FontSizeRole: b"fontSize",
            self.SelectedRole: b"selected",
        }

    # --- Properties exposed to QML -----------------------------------------
    @Property(int, notify=itemsChanged)
    def count(self) -> int:
        return len(self._shapes)

    @Property(str, notify=toolModeChanged)
    def toolMode(self) -> str:
        return self._tool_mode.value

    @toolMode.setter  # type: ignore[no-redef]
    def toolMode(self, value: str) -> None:
        self.setToolMode(value)

    @Property(list, notify=connectorsChanged)
    def connectors(self) -> List[Dict[str, Any]]:
        return [describe(connector) for connector in self._connectors]

    @Property(list, notify=selectionChanged)
    def selectedIds(self) -> List[str]:
        return [shape.id for shape in self._selected]

    @Property(list, notify=repaintRequested)
    def paintOrder(self) -> List[Dict[str, Any]]:
        """Everything to draw, back to front."""
        return [
            describe(entity, selected=self._selected)
            for entity in paint_order(self._shapes, self._connectors, self._selected)
        ]

    @Property(bool, notify=guidesChanged)
    def isLinkDragging(self) -> bool:
        return self._is_link_dragging

    @Property(float, notify=guidesChanged)
    def linkStartX(self) -> float:
        return self._link_start_point.x if self._link_start_point else 0.0

    @Property(float, notify=guidesChanged)
    def linkStartY(self) -> float:
        return self._link_start_point.y if self._link_start_point else 0.0

    @Property(float, notify=guidesChanged)
    def linkDragX(self) -> float:
        return self._link_drag_point.x if self._link_drag_point else 0.0

    @Property(float, notify=guidesChanged)
    def linkDragY(self) -> float:
        return self._link_drag_point.y if self._link_drag_point else 0.0

    @Property(bool, notify=guidesChanged)
    def isBoxSelecting(self) -> bool:
        return self._is_box_selecting

    @Property("QVariant", notify=guidesChanged)
    def selectionRect(self) -> Dict[str, float]:
        rect = self._selection_rect()
        if rect is None:
            return {}
        x, y, width, height = rect
        return {"x": x, "y": y, "width": width, "height": height}

    # --- Tool mode ------------------------------------------------------------
    @Slot(str)
    def setToolMode(self, mode: str) -> None:
        """Switch the active tool; any gesture in progress is abandoned."""
        try:
            new_mode = ToolMode(mode.lower())
        except ValueError:
            logger.debug("Ignoring unknown tool mode %r", mode)
            return
        if new_mode is self._tool_mode:
            return
        self._reset_link_state()
        self._end_group_drag()
        self._clear_box()
        self._set_port_flags(lambda shape: shape in self._selected)
        self._tool_mode = new_mode
        logger.debug("Tool mode: %s", new_mode.value)
        self.toolModeChanged.emit()
        self._request_repaint()

    # --- Pointer events ---------------------------------------------------------
    @Slot(float, float)
    def pointerPressed(self, x: float, y: float) -> None:
        self._dispatch(self._gestures[self._tool_mode].press, x, y)

    @Slot(float, float)
    def pointerDragged(self, x: float, y: float) -> None:
        self._dispatch(self._gestures[self._tool_mode].drag, x, y)

    @Slot(float, float)
    def pointerReleased(self, x: float, y: float) -> None:
        self._dispatch(self._gestures[self._tool_mode].release, x, y)

    @Slot(float, float)
    def pointerMoved(self, x: float, y: float) -> None:
        self._dispatch(self._gestures[self._tool_mode].move, x, y)

    def _dispatch(self, handler: Optional[PointerHandler], x: float, y: float) -> None:
        if handler is not None:
            handler(float(x), float(y))

    # --- Shape management ----------------------------------------------------
    def _create_rect_at(self, x: float, y: float) -> None:
        self._create_shape(ShapeKind.RECT, x, y)

    def _create_oval_at(self, x: float, y: float) -> None:
        self._create_shape(ShapeKind.OVAL, x, y)

    def _create_shape(
        self,
        kind: ShapeKind,
        x: float,
        y: float,
        width: Optional[float] = None,
        height: Optional[float] = None,
    ) -> DiagramShape:
        shape = DiagramShape(
            id=self._next_id(kind.value),
            kind=kind,
            x=x,
            y=y,
            width=self._settings.shape_width if width is None else width,
            height=self._settings.shape_height if height is None else height,
            depth=self._layers.next_depth(),
            label_color=str(SHAPE_PRESETS[kind.value]["label_color"]),
            font_size=self._settings.label_font_size,
        )
        self._append_shape(shape)
        logger.debug("Created %s at (%.1f, %.1f) depth %d", shape.id, x, y, shape.depth)
        return shape

    def _append_shape(self, shape: DiagramShape) -> None:
        self.beginInsertRows(QModelIndex(), len(self._shapes), len(self._shapes))
        self._shapes.append(shape)
        self.endInsertRows()
        self.itemsChanged.emit()
        self._request_repaint()

    @Slot(float, float, result=str)
    def addRect(self, x: float, y: float) -> str:
        return self._create_shape(ShapeKind.RECT, x, y).id

    @Slot(float, float, result=str)
    def addOval(self, x: float, y: float) -> str:
        return self._create_shape(ShapeKind.OVAL, x, y).id

    @Slot(str, float, float, float, float, result=str)
    def addShape(self, kind: str, x: float, y: float, width: float, height: float) -> str:
        """Create a rectangle or oval with an explicit size."""
        try:
            shape_kind = ShapeKind(kind.lower())
        except ValueError:
            return ""
        if shape_kind is ShapeKind.GROUP:
            return ""
        return self._create_shape(shape_kind, x, y, width, height).id

    # --- Label styling --------------------------------------------------------
    def _update_label(self, shape_id: str, roles: List[int], **changes: Any) -> bool:
        for row, shape in enumerate(self._shapes):
            if shape.id != shape_id:
                continue
            if shape.is_group:
                logger.debug("Groups have no label of their own: %s", shape_id)
                return False
            if all(getattr(shape, name) == value for name, value in changes.items()):
                return True
            for name, value in changes.items():
                setattr(shape, name, value)
            index = self.index(row, 0)
            self.dataChanged.emit(index, index, roles)
            self.itemsChanged.emit()
            self._request_repaint()
            return True
        return False

    @Slot(str, str, result=bool)
    def setLabelText(self, shape_id: str, text: str) -> bool:
        return self._update_label(shape_id, [self.LabelRole], label=text)

    @Slot(str, str, result=bool)
    def setLabelShape(self, shape_id: str, label_shape: str) -> bool:
        try:
            value = LabelShape(label_shape.lower())
        except ValueError:
            logger.debug("Ignoring unknown label shape %r", label_shape)
            return False
        return self._update_label(shape_id, [self.LabelShapeRole], label_shape=value)

    @Slot(str, str, result=bool)
    def setLabelColor(self, shape_id: str, color: str) -> bool:
        return self._update_label(shape_id, [self.LabelColorRole], label_color=color)

    @Slot(str, int, result=bool)
    def setLabelFontSize(self, shape_id: str, size: int) -> bool:
        return self._update_label(
            shape_id, [self.FontSizeRole], font_size=clamp_font_size(size)
        )

    @Slot(str, str, str, str, int, result=bool)
    def setLabelStyle(
        self, shape_id: str, text: str, label_shape: str, color: str, size: int
    ) -> bool:
        """Apply every label attribute at once, as the label dialog does."""
        try:
            shape_value = LabelShape(label_shape.lower())
        except ValueError:
            logger.debug("Ignoring unknown label shape %r", label_shape)
            return False
        return self._update_label(
            shape_id,
            [self.LabelRole, self.LabelShapeRole, self.LabelColorRole, self.FontSizeRole],
            label=text,
            label_shape=shape_value,
            label_color=color,
            font_size=clamp_font_size(size),
        )

    @Slot(str, str, str, int, result=bool)
    def customizeSelectedLabel(
        self, text: str, label_shape: str, color: str, size: int
    ) -> bool:
        """Style the label of the single selected shape."""
        if len(self._selected) != 1:
            return False
        return self.setLabelStyle(self._selected[0].id, text, label_shape, color, size)

    @Slot(str, result="QVariant")
    def getLabelStyle(self, shape_id: str) -> Dict[str, Any]:
        shape = self.getShape(shape_id)
        if shape is None or shape.is_group:
            return {}
        return {
            "text": shape.label,
            "shape": shape.label_shape.value,
            "color": shape.label_color,
            "fontSize": shape.font_size,
        }

    # --- Utilities ----------------------------------------------------------
    def getShape(self, shape_id: str) -> Optional[DiagramShape]:
        """Find a shape by id, including shapes nested inside groups."""
        for shape in self._shapes:
            if shape.id == shape_id:
                return shape
            for nested in shape.descendants():
                if nested.id == shape_id:
                    return nested
        return None

    def getConnector(self, connector_id: str) -> Optional[DiagramConnector]:
        for connector in self._connectors:
            if connector.id == connector_id:
                return connector
        return None

    def getShapes(self) -> List[DiagramShape]:
        """Return the top-level shapes in insertion order."""
        return list(self._shapes)

    def getConnectors(self) -> List[DiagramConnector]:
        return list(self._connectors)

    def getSelection(self) -> List[DiagramShape]:
        return list(self._selected)

    def findTopEntityAt(self, x: float, y: float) -> Optional[DiagramShape]:
        return find_top_entity_at(self._shapes, x, y)

    @Slot(float, float, result=str)
    def entityIdAt(self, x: float, y: float) -> str:
        shape = self.findTopEntityAt(x, y)
        return shape.id if shape else ""

    def _set_port_flags(self, predicate: Callable[[DiagramShape], bool]) -> None:
        changed = []
        for shape in self._shapes:
            flag = bool(predicate(shape))
            if shape.show_ports != flag:
                shape.show_ports = flag
                changed.append(shape)
        if changed:
            self._emit_rows_changed(changed, [self.ShowPortsRole, self.SelectedRole])
            self._request_repaint()

    def _emit_rows_changed(self, shapes: Sequence[DiagramShape], roles: List[int]) -> None:
        if not shapes:
            return
        for row, shape in enumerate(self._shapes):
            if shape in shapes:
                index = self.index(row, 0)
                self.dataChanged.emit(index, index, roles)
        self.itemsChanged.emit()

    def _request_repaint(self) -> None:
        self.repaintRequested.emit()

"""Grouping mixin for DiagramModel.

This module turns the current selection into a composite group and breaks
a selected group back into its direct children.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Sequence, TYPE_CHECKING

from PySide6.QtCore import Signal, Slot

from .layers import LayerAllocator
from .types import DiagramConnector, DiagramShape, ShapeKind

if TYPE_CHECKING:
    from .model import DiagramModel

logger = logging.getLogger(__name__)


class GroupingMixin:
    """Mixin providing group/ungroup commands."""

    # Signals (will be defined in DiagramModel)
    itemsChanged: Signal
    connectorsChanged: Signal

    # Attributes expected from DiagramModel
    _shapes: List[DiagramShape]
    _connectors: List[DiagramConnector]
    _selected: List[DiagramShape]
    _layers: LayerAllocator
    _next_id: Callable[[str], str]
    _apply_selection: Callable[[Sequence[DiagramShape]], None]
    _end_group_drag: Callable[[], None]
    _reset_link_state: Callable[[], None]
    _clear_box: Callable[[], None]
    _request_repaint: Callable[[], None]
    beginResetModel: Callable[[], None]
    endResetModel: Callable[[], None]

    @Slot(result=str)
    def groupSelected(self) -> str:
        """Group the selected shapes and return the new group's id.

        Connectors between two grouped shapes are deleted. Connectors with a
        single end in the selection are moved onto the group without moving
        their endpoint.
        """
        if len(self._selected) < 2:
            logger.debug("Group needs at least two selected shapes")
            return ""

        self._reset_link_state()
        self._end_group_drag()
        self._clear_box()
        members =[shape for shape in self._shapes if shape in self._selected]

        kept: List[DiagramConnector] = []
        straddling: List[DiagramConnector] = []
        for connector in self._connectors:
            inside_start = connector.start in members
            inside_end = connector.end in members
            if inside_start and inside_end:
                continue
            kept.append(connector)
            if inside_start or inside_end:
                straddling.append(connector)

        group = DiagramShape(
            id=self._next_id(ShapeKind.GROUP.value),
            kind=ShapeKind.GROUP,
            x=0.0,
            y=0.0,
            depth=self._layers.next_depth(),
            children=members,
        )

        self.beginResetModel()
        self._shapes = [shape for shape in self._shapes if shape not in members]
        self._shapes.append(group)
        self.endResetModel()

        for connector in straddling:
            old = connector.start if connector.start in members else connector.end
            connector.reattach(old, group)
        removed = len(self._connectors) - len(kept)
        self._connectors = kept

        self._selected = []
        self._apply_selection([group])
        logger.debug(
            "Grouped %d shape(s) into %s, dropped %d connector(s), re-pointed %d",
            len(members), group.id, removed, len(straddling),
        )
        self.itemsChanged.emit()
        self.connectorsChanged.emit()
        self._request_repaint()
        return group.id

    @Slot(result=bool)
    def ungroupSelected(self) -> bool:
        """Replace the single selected group with its direct children."""
        if len(self._selected) != 1 or not self._selected[0].is_group:
            logger.debug("Ungroup needs exactly one selected group")
            return False

        self._reset_link_state()
        self._end_group_drag()
        self._clear_box()
        group = self._selected[0]
        children = list(group.children)
        self._connectors = [
            connector for connector in self._connectors if not connector.touches(group)
        ]

        self.beginResetModel()
        row = self._shapes.index(group)
        self._shapes[row:row + 1] = children
        self.endResetModel()

        self._selected = []
        self._apply_selection(children)
        logger.debug("Ungrouped %s into %d shape(s)", group.id, len(children))
        self.itemsChanged.emit()
        self.connectorsChanged.emit()
        self._request_repaint()
        return True

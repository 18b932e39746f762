"""Paint ordering for diagram shapes and connectors."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Sequence, Union

from .constants import SHAPE_PRESETS
from .geometry import decoration_for, ports_for
from .types import DiagramConnector, DiagramShape

Paintable = Union[DiagramShape, DiagramConnector]


def _by_descending_depth(entities: Iterable[Paintable]) -> List[Paintable]:
    # sorted() is stable, so equal depths keep insertion order.
    return sorted(entities, key=lambda entity: -entity.depth)


def paint_order(
    shapes: Sequence[DiagramShape],
    connectors: Sequence[DiagramConnector],
    selected: Sequence[DiagramShape],
) -> List[Paintable]:
    """Return everything to paint, back to front.

    Unselected shapes come first, then connectors, then the selection, each
    layer ordered by descending depth. Connectors therefore sit above every
    unselected shape and selected shapes are always topmost.
    """
    selected_ids = {id(shape) for shape in selected}
    unselected = [shape for shape in shapes if id(shape) not in selected_ids]
    chosen = [shape for shape in shapes if id(shape) in selected_ids]
    ordered: List[Paintable] = []
    ordered.extend(_by_descending_depth(unselected))
    ordered.extend(_by_descending_depth(connectors))
    ordered.extend(_by_descending_depth(chosen))
    return ordered


def describe(entity: Paintable, selected: Sequence[DiagramShape] = ()) -> Dict[str, Any]:
    """Return a plain dict snapshot of ``entity`` for the view layer."""
    if isinstance(entity, DiagramConnector):
        return _describe_connector(entity)
    return _describe_shape(entity, selected, show_ports=entity.show_ports)


def _describe_shape(
    shape: DiagramShape, selected: Sequence[DiagramShape], show_ports: bool
) -> Dict[str, Any]:
    preset = SHAPE_PRESETS[shape.kind.value]
    data: Dict[str, Any] = {
        "entity": "shape",
        "id": shape.id,
        "kind": shape.kind.value,
        "x": shape.x,
        "y": shape.y,
        "width": shape.width,
        "height": shape.height,
        "depth": shape.depth,
        "selected": any(shape is chosen for chosen in selected),
        "showPorts": show_ports,
        "ports": [{"x": pt.x, "y": pt.y} for pt in ports_for(shape)] if show_ports else [],
        "fill": preset["fill"],
        "stroke": preset["stroke"],
    }
    if shape.is_group:
        # Children never show their own ports while grouped.
        data["children"] = [
            _describe_shape(child, (), show_ports=False) for child in shape.children
        ]
    else:
        data.update({
            "label": shape.label,
            "labelShape": shape.label_shape.value,
            "labelColor": shape.label_color,
            "fontSize": shape.font_size,
        })
    return data


def _describe_connector(connector: DiagramConnector) -> Dict[str, Any]:
    decoration = decoration_for(connector.kind, connector.start_point, connector.end_point)
    return {
        "entity": "connector",
        "id": connector.id,
        "kind": connector.kind.value,
        "startId": connector.start.id,
        "endId": connector.end.id,
        "startX": connector.start_point.x,
        "startY": connector.start_point.y,
        "endX": connector.end_point.x,
        "endY": connector.end_point.y,
        "depth": connector.depth,
        "decoration": decoration.to_list(),
        "decorationFilled": decoration.filled,
    }

"""Tests for the Qt-free parts of workflowdraw: shapes, layers and geometry."""

import math

import pytest

from workflowdraw.config import EditorSettings
from workflowdraw.geometry import (
    closest_port,
    decoration_for,
    find_top_entity_at,
    normalized_rect,
    ports_for,
    shapes_inside,
)
from workflowdraw.layers import LayerAllocator
from workflowdraw.render_order import describe, paint_order
from workflowdraw.types import (
    CanvasPoint,
    ConnectorKind,
    DiagramConnector,
    DiagramShape,
    ShapeKind,
    ToolMode,
)


def make_shape(shape_id, kind=ShapeKind.RECT, x=0.0, y=0.0, width=50.0, height=30.0, depth=50):
    return DiagramShape(id=shape_id, kind=kind, x=x, y=y, width=width, height=height, depth=depth)


class TestDiagramShape:
    def test_defaults(self):
        shape = DiagramShape(id="rect_0", kind=ShapeKind.RECT, x=5.0, y=6.0)
        assert shape.width == 120.0
        assert shape.height == 80.0
        assert shape.show_ports is False
        assert shape.label == ""
        assert shape.font_size == 12

    def test_negative_size_clamps_to_zero(self):
        shape = make_shape("rect_0", width=-10.0, height=-1.0)
        assert shape.width == 0.0
        assert shape.height == 0.0

    def test_depth_is_clamped(self):
        shape = make_shape("rect_0", depth=500)
        assert shape.depth == 99
        shape.set_depth(-7)
        assert shape.depth == -1

    def test_contains_includes_edges(self):
        shape = make_shape("rect_0", x=10.0, y=10.0)
        assert shape.contains(10.0, 10.0)
        assert shape.contains(60.0, 40.0)
        assert not shape.contains(60.5, 40.0)

    def test_group_requires_children(self):
        with pytest.raises(ValueError):
            DiagramShape(id="group_0", kind=ShapeKind.GROUP, x=0.0, y=0.0)

    def test_group_bounds_are_union_of_children(self):
        a = make_shape("a", x=10.0, y=20.0, width=30.0, height=30.0)
        b = make_shape("b", kind=ShapeKind.OVAL, x=50.0, y=5.0, width=20.0, height=10.0)
        group = DiagramShape(id="group_0", kind=ShapeKind.GROUP, x=0.0, y=0.0, children=[a, b])
        assert group.bounds() == (10.0, 5.0, 60.0, 45.0)

    def test_group_move_reaches_every_leaf(self):
        a = make_shape("a", x=0.0, y=0.0)
        b = make_shape("b", x=100.0, y=0.0)
        c = make_shape("c", x=0.0, y=100.0)
        inner = DiagramShape(id="inner", kind=ShapeKind.GROUP, x=0.0, y=0.0, children=[a, b])
        outer = DiagramShape(id="outer", kind=ShapeKind.GROUP, x=0.0, y=0.0, children=[inner, c])

        outer.move_by(7.0, -3.0)

        assert (a.x, a.y) == (7.0, -3.0)
        assert (b.x, b.y) == (107.0, -3.0)
        assert (c.x, c.y) == (7.0, 97.0)
        assert inner.bounds() == (7.0, -3.0, 150.0, 30.0)
        assert outer.bounds() == (7.0, -3.0, 150.0, 130.0)
        assert [leaf.id for leaf in outer.leaves()] == ["a", "b", "c"]


class TestLayerAllocator:
    def test_counts_down_from_seed(self):
        layers = LayerAllocator()
        assert layers.next_depth() == 99
        assert layers.next_depth() == 98
        assert layers.current == 97

    def test_reset(self):
        layers = LayerAllocator(seed=10)
        layers.next_depth()
        layers.next_depth()
        layers.reset()
        assert layers.next_depth() == 10
        layers.reset(seed=3)
        assert layers.next_depth() == 3

    def test_stops_at_floor(self):
        layers = LayerAllocator(seed=1)
        assert [layers.next_depth() for _ in range(4)] == [1, 0, 0, 0]

    def test_seed_below_floor_rejected(self):
        with pytest.raises(ValueError):
            LayerAllocator(seed=-5)
        layers = LayerAllocator()
        with pytest.raises(ValueError):
            layers.reset(seed=-1)


class TestPorts:
    def test_rect_has_eight_ports(self):
        shape = make_shape("rect_0", x=10.0, y=10.0)
        assert ports_for(shape) == [
            CanvasPoint(10.0, 10.0),
            CanvasPoint(35.0, 10.0),
            CanvasPoint(60.0, 10.0),
            CanvasPoint(10.0, 25.0),
            CanvasPoint(60.0, 25.0),
            CanvasPoint(10.0, 40.0),
            CanvasPoint(35.0, 40.0),
            CanvasPoint(60.0, 40.0),
        ]

    def test_oval_has_four_edge_midpoints(self):
        shape = make_shape("oval_0", kind=ShapeKind.OVAL, x=20.0, y=20.0)
        assert ports_for(shape) == [
            CanvasPoint(45.0, 20.0),
            CanvasPoint(45.0, 50.0),
            CanvasPoint(20.0, 35.0),
            CanvasPoint(70.0, 35.0),
        ]

    def test_group_ports_follow_bounds(self):
        a = make_shape("a", x=0.0, y=0.0, width=10.0, height=10.0)
        b = make_shape("b", x=90.0, y=40.0, width=10.0, height=10.0)
        group = DiagramShape(id="g", kind=ShapeKind.GROUP, x=0.0, y=0.0, children=[a, b])
        assert ports_for(group) == [
            CanvasPoint(50.0, 0.0),
            CanvasPoint(50.0, 50.0),
            CanvasPoint(0.0, 25.0),
            CanvasPoint(100.0, 25.0),
        ]

    def test_closest_port(self):
        shape = make_shape("rect_0", x=10.0, y=10.0)
        assert closest_port(shape, 25.0, 25.0) == CanvasPoint(10.0, 25.0)
        assert closest_port(shape, 70.0, 45.0) == CanvasPoint(60.0, 40.0)

    def test_closest_port_tie_takes_first(self):
        shape = make_shape("rect_0", x=0.0, y=0.0, width=100.0, height=100.0)
        assert closest_port(shape, 50.0, 50.0) == CanvasPoint(50.0, 0.0)


class TestHitTesting:
    def test_smallest_depth_wins(self):
        rect = make_shape("rect_0", x=10.0, y=10.0, depth=99)
        oval = make_shape("oval_1", kind=ShapeKind.OVAL, x=20.0, y=20.0, depth=98)
        assert find_top_entity_at([rect, oval], 25.0, 25.0) is oval
        assert find_top_entity_at([oval, rect], 25.0, 25.0) is oval

    def test_only_containing_shapes_count(self):
        rect = make_shape("rect_0", x=10.0, y=10.0, depth=99)
        oval = make_shape("oval_1", kind=ShapeKind.OVAL, x=20.0, y=20.0, depth=1)
        assert find_top_entity_at([rect, oval], 12.0, 12.0) is rect
        assert find_top_entity_at([rect, oval], 500.0, 500.0) is None
        assert find_top_entity_at([], 0.0, 0.0) is None

    def test_equal_depth_prefers_latest(self):
        first = make_shape("first", depth=5)
        second = make_shape("second", depth=5)
        assert find_top_entity_at([first, second], 10.0, 10.0) is second


class TestRubberBand:
    def test_normalized_rect(self):
        assert normalized_rect(50.0, 60.0, 10.0, 20.0) == (10.0, 20.0, 40.0, 40.0)

    def test_full_containment_required(self):
        inside = make_shape("inside", x=0.0, y=0.0, width=100.0, height=100.0)
        overlapping = make_shape("overlap", x=1.0, y=0.0, width=100.0, height=100.0)
        chosen = shapes_inside((0.0, 0.0, 100.0, 100.0), [inside, overlapping])
        assert chosen == [inside]


class TestDecorations:
    def test_association_is_filled_arrow(self):
        decoration = decoration_for(
            ConnectorKind.ASSOCIATION, CanvasPoint(0.0, 0.0), CanvasPoint(100.0, 0.0)
        )
        assert decoration.filled is True
        tip, right, left = decoration.points
        assert tip == CanvasPoint(100.0, 0.0)
        barb_x = 100.0 - 15.0 * math.cos(math.radians(40.0))
        barb_y = 15.0 * math.sin(math.radians(40.0))
        assert right.x == pytest.approx(barb_x)
        assert right.y == pytest.approx(-barb_y)
        assert left.x == pytest.approx(barb_x)
        assert left.y == pytest.approx(barb_y)

    def test_generalization_is_hollow_triangle(self):
        decoration = decoration_for(
            ConnectorKind.GENERALIZATION, CanvasPoint(0.0, 0.0), CanvasPoint(0.0, 100.0)
        )
        assert decoration.filled is False
        assert len(decoration.points) == 3

    def test_composition_is_diamond(self):
        decoration = decoration_for(
            ConnectorKind.COMPOSITION, CanvasPoint(0.0, 0.0), CanvasPoint(100.0, 0.0)
        )
        assert decoration.filled is False
        xs = [pt.x for pt in decoration.points]
        ys = [pt.y for pt in decoration.points]
        assert xs == pytest.approx([100.0, 90.0, 80.0, 90.0])
        assert ys == pytest.approx([0.0, 10.0, 0.0, -10.0])

    def test_zero_length_has_no_decoration(self):
        point = CanvasPoint(5.0, 5.0)
        assert decoration_for(ConnectorKind.COMPOSITION, point, point).points == ()


class TestConnector:
    def test_endpoints_follow_frozen_offsets(self):
        start = make_shape("start", x=0.0, y=0.0, depth=99)
        end = make_shape("end", kind=ShapeKind.OVAL, x=200.0, y=0.0, depth=98)
        connector = DiagramConnector.between(
            "association_0",
            ConnectorKind.ASSOCIATION,
            start,
            closest_port(start, 55.0, 15.0),
            end,
            closest_port(end, 195.0, 15.0),
        )
        assert connector.start_offset == (50.0, 15.0)
        assert connector.end_offset == (0.0, 15.0)
        assert connector.depth == 98

        for _ in range(7):
            start.move_by(3.0, -2.0)
            connector.refresh()

        assert connector.start_point == CanvasPoint(start.x + 50.0, start.y + 15.0)
        assert connector.end_point == CanvasPoint(200.0, 15.0)

    def test_depth_tracks_endpoints(self):
        start = make_shape("start", depth=40)
        end = make_shape("end", x=100.0, depth=30)
        connector = DiagramConnector.between(
            "c", ConnectorKind.COMPOSITION, start, CanvasPoint(0.0, 0.0), end, CanvasPoint(100.0, 0.0)
        )
        assert connector.depth == 30
        start.set_depth(-1)
        connector.recalc_depth()
        assert connector.depth == -1


class TestPaintOrder:
    def test_layers_unselected_connectors_selected(self):
        back = make_shape("back", depth=99)
        front = make_shape("front", x=100.0, depth=98)
        chosen = make_shape("chosen", x=200.0, depth=-1)
        connector = DiagramConnector.between(
            "c", ConnectorKind.ASSOCIATION, back, CanvasPoint(50.0, 15.0), front, CanvasPoint(100.0, 15.0)
        )
        order = paint_order([chosen, front, back], [connector], [chosen])
        assert [entity.id for entity in order] == ["back", "front", "c", "chosen"]

    def test_describe_group_lists_children(self):
        a = make_shape("a")
        b = make_shape("b", x=100.0)
        a.show_ports = True
        group = DiagramShape(id="g", kind=ShapeKind.GROUP, x=0.0, y=0.0, children=[a, b])
        data = describe(group, selected=[group])
        assert data["selected"] is True
        assert [child["id"] for child in data["children"]] == ["a", "b"]
        assert all(child["showPorts"] is False for child in data["children"])
        assert "label" not in data


class TestToolMode:
    def test_connector_kind(self):
        assert ToolMode.ASSOCIATION.connector_kind is ConnectorKind.ASSOCIATION
        assert ToolMode.COMPOSITION.connector_kind is ConnectorKind.COMPOSITION
        assert ToolMode.SELECT.connector_kind is None
        assert ToolMode.RECT.connector_kind is None


class TestEditorSettings:
    def test_from_env(self):
        settings = EditorSettings.from_env({
            "WORKFLOWDRAW_DEPTH_SEED": "50",
            "WORKFLOWDRAW_SHAPE_WIDTH": "abc",
            "WORKFLOWDRAW_SHAPE_HEIGHT": " 40 ",
        })
        assert settings.depth_seed == 50
        assert settings.shape_width == 120.0
        assert settings.shape_height == 40.0
        assert settings.label_font_size == 12

    def test_seed_is_clamped(self):
        assert EditorSettings(depth_seed=500).depth_seed == 99
        assert EditorSettings(depth_seed=-3).depth_seed == 0

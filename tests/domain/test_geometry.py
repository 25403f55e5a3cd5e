from __future__ import annotations

import math

import pytest

from domain.geometry import (
    Orientation,
    distance,
    nodes_in_lasso,
    orientation,
    point_in_polygon,
    point_in_rect,
    rect_inside_polygon,
    rect_intersects_polygon,
    rects_overlap,
    segment_intersects_rect,
    segments_intersect,
)
from domain.models import NodeRect, Point, Rect

SQUARE = [Point(0, 0), Point(10, 0), Point(10, 10), Point(0, 10)]
L_SHAPE = [Point(0, 0), Point(10, 0), Point(10, 4), Point(4, 4), Point(4, 10), Point(0, 10)]


def test_distance_is_euclidean() -> None:
    assert distance(Point(0, 0), Point(3, 4)) == 5


def test_orientation_classifies_turns() -> None:
    assert orientation(Point(0, 0), Point(1, 1), Point(2, 2)) is Orientation.COLLINEAR
    assert orientation(Point(0, 0), Point(1, 0), Point(1, -1)) is Orientation.CLOCKWISE
    assert orientation(Point(0, 0), Point(1, 0), Point(1, 1)) is Orientation.COUNTERCLOCKWISE


def test_orientation_tolerates_float_jitter() -> None:
    assert orientation(Point(0, 0), Point(1, 1), Point(2, 2 + 1e-7)) is Orientation.COLLINEAR


@pytest.mark.parametrize(
    ("p1", "q1", "p2", "q2", "expected"),
    [
        (Point(0, 0), Point(2, 2), Point(0, 2), Point(2, 0), True),
        (Point(0, 0), Point(1, 0), Point(0, 1), Point(1, 1), False),
        (Point(0, 0), Point(2, 0), Point(1, 0), Point(3, 0), True),
        (Point(0, 0), Point(1, 0), Point(2, 0), Point(3, 0), False),
        (Point(0, 0), Point(2, 2), Point(2, 2), Point(3, 0), True),
    ],
)
def test_segments_intersect(p1: Point, q1: Point, p2: Point, q2: Point, expected: bool) -> None:
    assert segments_intersect(p1, q1, p2, q2) is expected


def test_segment_intersects_rect() -> None:
    rect = Rect(0, 0, 10, 10)
    assert segment_intersects_rect(Point(-5, 5), Point(15, 5), rect)
    assert segment_intersects_rect(Point(2, 2), Point(3, 3), rect)
    assert not segment_intersects_rect(Point(20, 20), Point(30, 30), rect)


def test_point_in_rect_includes_border() -> None:
    assert point_in_rect(Point(10, 10), Rect(0, 0, 10, 10))
    assert not point_in_rect(Point(10.1, 10), Rect(0, 0, 10, 10))


def test_point_in_polygon_handles_concave_shapes() -> None:
    assert point_in_polygon(Point(5, 5), SQUARE)
    assert not point_in_polygon(Point(15, 5), SQUARE)
    assert point_in_polygon(Point(2, 8), L_SHAPE)
    assert not point_in_polygon(Point(7, 7), L_SHAPE)


def test_rect_polygon_relations() -> None:
    assert rect_inside_polygon(Rect(1, 1, 2, 2), SQUARE)
    assert not rect_inside_polygon(Rect(8, 8, 5, 5), SQUARE)
    assert rect_intersects_polygon(Rect(8, 8, 5, 5), SQUARE)
    assert not rect_intersects_polygon(Rect(20, 20, 2, 2), SQUARE)


def test_polygon_inside_rect_counts_as_intersection() -> None:
    triangle = [Point(40, 40), Point(60, 40), Point(50, 60)]
    assert rect_intersects_polygon(Rect(0, 0, 100, 100), triangle)


def test_rects_exactly_padding_apart_do_not_overlap() -> None:
    first = Rect(0, 0, 100, 100)
    second = Rect(105, 0, 100, 100)
    assert not rects_overlap(first, second, 5)
    assert rects_overlap(first, second, 6)


def test_non_finite_inputs_propagate_without_raising() -> None:
    assert math.isnan(distance(Point(math.nan, 0), Point(0, 0)))
    assert math.isinf(distance(Point(math.inf, 0), Point(0, 0)))
    assert isinstance(orientation(Point(math.nan, 0), Point(1, 1), Point(2, 2)), Orientation)
    assert point_in_polygon(Point(math.nan, math.nan), SQUARE) is False
    assert segments_intersect(Point(math.nan, 0), Point(1, 1), Point(0, 1), Point(1, 0)) in {
        True,
        False,
    }


def test_huge_finite_coordinates_do_not_raise() -> None:
    assert distance(Point(1e200, 0), Point(0, 0)) == 1e200
    assert math.isinf(distance(Point(1e308, 0), Point(-1e308, 0)))
    assert isinstance(orientation(Point(1e200, 0), Point(0, 1e200), Point(-1e200, 0)), Orientation)


def test_point_in_polygon_with_near_flat_edge() -> None:
    sliver = [Point(0, 2.22e-16), Point(10, 10), Point(10, 0)]
    assert point_in_polygon(Point(5, 1e-16), sliver) in {True, False}


def test_nodes_in_lasso_modes() -> None:
    rects = [
        NodeRect(1, 1, 2, 2, id="inside"),
        NodeRect(8, 8, 5, 5, id="edge"),
        NodeRect(30, 30, 2, 2, id="outside"),
    ]
    assert nodes_in_lasso(rects, SQUARE, mode="contain") == ["inside"]
    assert nodes_in_lasso(rects, SQUARE, mode="intersect") == ["inside", "edge"]
    assert nodes_in_lasso(rects, SQUARE[:2]) == []
    with pytest.raises(ValueError):
        nodes_in_lasso(rects, SQUARE, mode="bogus")

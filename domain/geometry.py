from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from enum import Enum

from domain.models import NodeRect, Point, Rect

COLLINEAR_TOLERANCE = 1e-6


class Orientation(int, Enum):
    COLLINEAR = 0
    CLOCKWISE = 1
    COUNTERCLOCKWISE = 2


def distance(a: Point, b: Point) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


def orientation(p: Point, q: Point, r: Point) -> Orientation:
    value = (q.y - p.y) * (r.x - q.x) - (q.x - p.x) * (r.y - q.y)
    if abs(value) < COLLINEAR_TOLERANCE:
        return Orientation.COLLINEAR
    return Orientation.CLOCKWISE if value > 0 else Orientation.COUNTERCLOCKWISE


def on_segment(p: Point, q: Point, r: Point) -> bool:
    """Return True when q lies within the bounding box of segment pr."""
    return min(p.x, r.x) <= q.x <= max(p.x, r.x) and min(p.y, r.y) <= q.y <= max(p.y, r.y)


def segments_intersect(p1: Point, q1: Point, p2: Point, q2: Point) -> bool:
    o1 = orientation(p1, q1, p2)
    o2 = orientation(p1, q1, q2)
    o3 = orientation(p2, q2, p1)
    o4 = orientation(p2, q2, q1)

    if o1 != o2 and o3 != o4:
        return True
    if o1 is Orientation.COLLINEAR and on_segment(p1, p2, q1):
        return True
    if o2 is Orientation.COLLINEAR and on_segment(p1, q2, q1):
        return True
    if o3 is Orientation.COLLINEAR and on_segment(p2, p1, q2):
        return True
    if o4 is Orientation.COLLINEAR and on_segment(p2, q1, q2):
        return True
    return False


def rect_corners(rect: Rect) -> list[Point]:
    right = rect.x + rect.width
    bottom = rect.y + rect.height
    return [
        Point(rect.x, rect.y),
        Point(right, rect.y),
        Point(right, bottom),
        Point(rect.x, bottom),
    ]


def point_in_rect(point: Point, rect: Rect) -> bool:
    return (
        rect.x <= point.x <= rect.x + rect.width
        and rect.y <= point.y <= rect.y + rect.height
    )


def segment_intersects_rect(p1: Point, p2: Point, rect: Rect) -> bool:
    if point_in_rect(p1, rect) or point_in_rect(p2, rect):
        return True
    corners = rect_corners(rect)
    for idx, corner in enumerate(corners):
        following = corners[(idx + 1) % len(corners)]
        if segments_intersect(p1, p2, corner, following):
            return True
    return False


def point_in_polygon(point: Point, polygon: Sequence[Point]) -> bool:
    # Even-odd ray casting towards +x.
    inside = False
    count = len(polygon)
    j = count - 1
    for i in range(count):
        xi, yi = polygon[i].x, polygon[i].y
        xj, yj = polygon[j].x, polygon[j].y
        if (yi > point.y) != (yj > point.y):
            crossing_x = (xj - xi) * (point.y - yi) / (yj - yi) + xi
            if point.x < crossing_x:
                inside = not inside
        j = i
    return inside


def rect_inside_polygon(rect: Rect, polygon: Sequence[Point]) -> bool:
    return all(point_in_polygon(corner, polygon) for corner in rect_corners(rect))


def rect_intersects_polygon(rect: Rect, polygon: Sequence[Point]) -> bool:
    if any(point_in_polygon(corner, polygon) for corner in rect_corners(rect)):
        return True
    count = len(polygon)
    for idx in range(count):
        if segment_intersects_rect(polygon[idx], polygon[(idx + 1) % count], rect):
            return True
    return False


def rects_overlap(a: Rect, b: Rect, padding: float = 0.0) -> bool:
    """Padded AABB test; rectangles exactly ``padding`` apart do not overlap."""
    return (
        a.x < b.x + b.width + padding
        and a.x + a.width + padding > b.x
        and a.y < b.y + b.height + padding
        and a.y + a.height + padding > b.y
    )


def nodes_in_lasso(
    rects: Iterable[NodeRect],
    polygon: Sequence[Point],
    mode: str = "intersect",
) -> list[str]:
    if len(polygon) < 3:
        return []
    if mode == "contain":
        return [rect.id for rect in rects if rect_inside_polygon(rect, polygon)]
    if mode == "intersect":
        return [rect.id for rect in rects if rect_intersects_polygon(rect, polygon)]
    msg = f"Unknown lasso mode: {mode}"
    raise ValueError(msg)

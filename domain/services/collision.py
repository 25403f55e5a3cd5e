from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence

from domain.geometry import rects_overlap
from domain.models import CENTER_NODE_ID, GraphNode, LayoutResult, NodeRect, NodeType
from domain.services.dimensions import MeasureMap, has_measured_dimensions, node_dimensions

logger = logging.getLogger(__name__)

DEFAULT_PADDING = 12.0
DEFAULT_MAX_PASSES = 10

# Extra distance added to every push so float error cannot leave a pair touching.
_PUSH_SLACK = 0.5
# Integer snapping moves each coordinate by at most half a pixel, so a pair can
# drift one pixel closer; resolve against that margin when output is rounded.
_ROUNDING_MARGIN = 1.0


def rects_from_nodes(
    nodes: Iterable[GraphNode],
    measure: MeasureMap | None = None,
    center_node_id: str = CENTER_NODE_ID,
) -> dict[str, NodeRect]:
    rects: dict[str, NodeRect] = {}
    for node in nodes:
        size = node_dimensions(node, measure, center_node_id)
        rects[node.id] = NodeRect(
            x=node.position.x,
            y=node.position.y,
            width=size.width,
            height=size.height,
            id=node.id,
        )
    return rects


def find_overlaps(
    rects: Mapping[str, NodeRect] | Sequence[NodeRect],
    padding: float = DEFAULT_PADDING,
) -> list[tuple[str, str]]:
    items = list(rects.values()) if isinstance(rects, Mapping) else list(rects)
    overlaps: list[tuple[str, str]] = []
    for i, first in enumerate(items):
        for second in items[i + 1 :]:
            if rects_overlap(first, second, padding):
                overlaps.append((first.id, second.id))
    return overlaps


def resolve_collisions(
    nodes: Sequence[GraphNode],
    padding: float = DEFAULT_PADDING,
    max_passes: int = DEFAULT_MAX_PASSES,
    measure: MeasureMap | None = None,
    fixed_ids: Iterable[str] = (),
    center_node_id: str = CENTER_NODE_ID,
    round_output: bool = True,
) -> LayoutResult:
    """Push overlapping node rectangles apart along their axis of least penetration.

    Resolution is skipped with ``pending_measurement=True`` when any node other
    than the center has no real size yet: positions are never changed on the
    basis of a guessed size. Center, root, pinned and ``fixed_ids`` nodes never
    move; when one side of a pair is fixed the other side takes the full push.
    Nodes overlapping the center are pushed off it before the first pass and
    again once the pass budget is spent.
    """
    if any(
        not node.is_center(center_node_id) and not has_measured_dimensions(node, measure)
        for node in nodes
    ):
        return LayoutResult(nodes=[node.clone() for node in nodes], pending_measurement=True)

    fixed = set(fixed_ids) | {
        node.id
        for node in nodes
        if node.is_center(center_node_id) or node.pinned or node.type is NodeType.ROOT
    }
    sizes = {node.id: node_dimensions(node, measure, center_node_id) for node in nodes}
    positions: dict[str, list[float]] = {
        node.id: [node.position.x, node.position.y] for node in nodes
    }
    working_padding = padding + (_ROUNDING_MARGIN if round_output else 0.0)

    def rect_for(node_id: str) -> NodeRect:
        x, y = positions[node_id]
        size = sizes[node_id]
        return NodeRect(x=x, y=y, width=size.width, height=size.height, id=node_id)

    center = next((node for node in nodes if node.is_center(center_node_id)), None)

    passes = 0
    if center is not None:
        _clear_center(center.id, nodes, rect_for, working_padding, positions, fixed)
    for _ in range(max(1, max_passes)):
        pairs = find_overlaps([rect_for(node.id) for node in nodes], working_padding)
        if not pairs:
            break
        passes += 1
        moved = 0
        for first_id, second_id in pairs:
            if first_id in fixed and second_id in fixed:
                continue
            first, second = rect_for(first_id), rect_for(second_id)
            # Earlier pushes in this pass may already have separated the pair.
            if not rects_overlap(first, second, working_padding):
                continue
            _separate(first, second, working_padding, positions, fixed)
            moved += 1
        logger.debug("Collision pass %d moved %d pairs", passes, moved)
        if moved == 0:
            break
    if center is not None:
        _clear_center(center.id, nodes, rect_for, working_padding, positions, fixed)

    resolved: list[GraphNode] = []
    moved_count = 0
    total_delta = 0.0
    for node in nodes:
        x, y = positions[node.id]
        if round_output:
            x, y = float(round(x)), float(round(y))
        dx, dy = x - node.position.x, y - node.position.y
        if round(dx) != 0 or round(dy) != 0:
            moved_count += 1
        total_delta += abs(dx) + abs(dy)
        resolved.append(node.with_position(x, y) if (dx or dy) else node.clone())

    remaining = find_overlaps(rects_from_nodes(resolved, measure, center_node_id), padding)
    if remaining:
        logger.warning(
            "Remaining overlaps after %d collision passes: %d pairs -> %s",
            passes,
            len(remaining),
            remaining[:8],
        )
    return LayoutResult(
        nodes=resolved,
        pending_measurement=False,
        moved_count=moved_count,
        total_delta=total_delta,
        passes=passes,
        remaining_overlaps=remaining,
    )


def _clear_center(
    center_id: str,
    nodes: Sequence[GraphNode],
    rect_for: Callable[[str], NodeRect],
    padding: float,
    positions: dict[str, list[float]],
    fixed: set[str],
) -> None:
    for node in nodes:
        if node.id in fixed:
            continue
        center_rect, rect = rect_for(center_id), rect_for(node.id)
        if rects_overlap(center_rect, rect, padding):
            _separate(center_rect, rect, padding, positions, fixed)


def _separate(
    first: NodeRect,
    second: NodeRect,
    padding: float,
    positions: dict[str, list[float]],
    fixed: set[str],
) -> None:
    # first moves towards negative coordinates when "first before second" is cheaper.
    first_before_x = first.x + first.width + padding - second.x
    second_before_x = second.x + second.width + padding - first.x
    first_before_y = first.y + first.height + padding - second.y
    second_before_y = second.y + second.height + padding - first.y

    push_x = min(first_before_x, second_before_x)
    push_y = min(first_before_y, second_before_y)
    if push_x <= push_y:
        axis = 0
        low, high = (
            (first.id, second.id) if first_before_x <= second_before_x else (second.id, first.id)
        )
        distance = push_x + _PUSH_SLACK
    else:
        axis = 1
        low, high = (
            (first.id, second.id) if first_before_y <= second_before_y else (second.id, first.id)
        )
        distance = push_y + _PUSH_SLACK

    if low in fixed:
        positions[high][axis] += distance
    elif high in fixed:
        positions[low][axis] -= distance
    else:
        positions[low][axis] -= distance / 2
        positions[high][axis] += distance / 2

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Mapping

from domain.models import CENTER_NODE_ID, GraphNode, NodeType, Size

DEFAULT_NODE_SIZE = Size(280, 200)
DEFAULT_CENTER_SIZE = Size(360, 240)

_NUMERIC_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

MeasureMap = Mapping[str, Size]


def parse_dimension(value: object) -> float | None:
    """Parse a number or a numeric CSS-like string such as ``"240px"``."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else None
    if isinstance(value, str):
        match = _NUMERIC_PREFIX.match(value)
        if not match:
            return None
        number = float(match.group(1))
        return number if math.isfinite(number) else None
    return None


def fallback_size(node: GraphNode, center_node_id: str = CENTER_NODE_ID) -> Size:
    if node.is_center(center_node_id) or node.type is NodeType.ROOT:
        return DEFAULT_CENTER_SIZE
    return DEFAULT_NODE_SIZE


def _first_dimension(*candidates: object) -> float | None:
    for candidate in candidates:
        parsed = parse_dimension(candidate)
        if parsed is not None:
            return parsed
    return None


def node_dimensions(
    node: GraphNode,
    measure: MeasureMap | None = None,
    center_node_id: str = CENTER_NODE_ID,
) -> Size:
    measured = measure.get(node.id) if measure else None
    explicit = node.dimensions
    fallback = fallback_size(node, center_node_id)

    width = _first_dimension(
        measured.width if measured else None,
        explicit.width if explicit else None,
        node.style.get("width"),
    )
    height = _first_dimension(
        measured.height if measured else None,
        explicit.height if explicit else None,
        node.style.get("height"),
    )
    return Size(
        max(1, round(fallback.width if width is None else width)),
        max(1, round(fallback.height if height is None else height)),
    )


def _is_positive(value: object) -> bool:
    parsed = parse_dimension(value)
    return parsed is not None and parsed > 0


def has_measured_dimensions(node: GraphNode, measure: MeasureMap | None = None) -> bool:
    measured = measure.get(node.id) if measure else None
    if measured is not None and _is_positive(measured.width) and _is_positive(measured.height):
        return True
    explicit = node.dimensions
    if explicit is not None and _is_positive(explicit.width) and _is_positive(explicit.height):
        return True
    return _is_positive(node.style.get("width")) and _is_positive(node.style.get("height"))


def resolve_dimensions(
    nodes: Iterable[GraphNode],
    measure: MeasureMap | None = None,
    center_node_id: str = CENTER_NODE_ID,
) -> dict[str, Size]:
    return {node.id: node_dimensions(node, measure, center_node_id) for node in nodes}

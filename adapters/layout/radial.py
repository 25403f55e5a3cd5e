from __future__ import annotations

import logging
import math
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from domain.models import (
    CANONICAL_DOMAIN_ORDER,
    CENTER_NODE_ID,
    Domain,
    GraphNode,
    LayoutOptions,
    NodeType,
    Point,
    Size,
    ViewMode,
    domain_for_node_type,
)
from domain.ports.layout import LayoutEngine
from domain.services.dimensions import MeasureMap, node_dimensions

logger = logging.getLogger(__name__)

_NO_CENTER_POSITION = Point(400.0, 250.0)
_DATA_LABEL = re.compile(r"\b(database|db|storage|cache|queue|warehouse|data)\b", re.I)
_PROCESS_LANES = ("requirements", "services", "data", "docs", "other")


@dataclass(frozen=True)
class RadialLayoutConfig:
    base_radius: float = 420.0
    ring_spacing: float = 280.0
    min_radius: float = 260.0
    min_ring_spacing: float = 220.0
    fill_ratio: float = 0.82
    arc_gap: float = 48.0
    start_angle: float = 0.0
    viewport_margin: float = 160.0
    slot_counts: tuple[int, ...] = (6, 10, 14)
    packing_iterations: int = 32


@dataclass(frozen=True)
class _Frame:
    center: Point
    center_size: Size
    sector_arc: float
    sweep: float


class RadialDomainLayoutEngine(LayoutEngine):
    def __init__(self, config: RadialLayoutConfig | None = None) -> None:
        self.config = config or RadialLayoutConfig()

    def apply(self, nodes: Sequence[GraphNode], options: LayoutOptions) -> list[GraphNode]:
        center = next((node for node in nodes if node.id == options.center_node_id), None)
        if center is None:
            logger.warning("Center node %r not found, layout skipped.", options.center_node_id)
            return [node.clone() for node in nodes]

        pinned = {node.id for node in nodes if node.pinned} | set(options.pinned_ids)
        movable = [
            node for node in nodes if node.id != center.id and node.id not in pinned
        ]
        if not movable:
            return [node.clone() for node in nodes]

        if options.view_mode is ViewMode.PROCESS:
            positions = self._process_positions(center, movable, options)
        else:
            positions = self._radial_positions(center, movable, options)

        laid_out: list[GraphNode] = []
        for node in nodes:
            target = positions.get(node.id)
            laid_out.append(node.with_position(target.x, target.y) if target else node.clone())
        return laid_out

    def _radial_positions(
        self,
        center: GraphNode,
        movable: Sequence[GraphNode],
        options: LayoutOptions,
    ) -> dict[str, Point]:
        groups = self._group_by_domain(movable)
        sizes = {node.id: node_dimensions(node, options.measure) for node in movable}
        center_size = node_dimensions(center, options.measure, center.id)
        sector_arc = 2 * math.pi / len(groups)
        frame = _Frame(
            center=Point(
                center.position.x + center_size.width / 2,
                center.position.y + center_size.height / 2,
            ),
            center_size=center_size,
            sector_arc=sector_arc,
            sweep=sector_arc * self.config.fill_ratio,
        )
        radii = self._ring_radii(groups, sizes, frame, options.viewport)

        positions: dict[str, Point] = {}
        for sector_idx, (domain, domain_nodes) in enumerate(groups.items()):
            center_angle = self.config.start_angle + sector_idx * frame.sector_arc
            for ring, radius in radii.items():
                ring_nodes = [node for node in domain_nodes if node.effective_ring() == ring]
                if not ring_nodes:
                    continue
                for node_id, angle in self._ring_angles(
                    ring_nodes, sizes, radius, center_angle, frame.sweep
                ):
                    size = sizes[node_id]
                    positions[node_id] = Point(
                        frame.center.x + radius * math.cos(angle) - size.width / 2,
                        frame.center.y + radius * math.sin(angle) - size.height / 2,
                    )
            logger.debug("Placed %d nodes in sector %s", len(domain_nodes), domain.value)
        return positions

    def _group_by_domain(self, nodes: Sequence[GraphNode]) -> dict[Domain, list[GraphNode]]:
        buckets: dict[Domain, list[GraphNode]] = {}
        for node in nodes:
            buckets.setdefault(node.domain, []).append(node)
        return {domain: buckets[domain] for domain in CANONICAL_DOMAIN_ORDER if domain in buckets}

    def base_radii(self, ring_count: int, viewport: Size | None = None) -> list[float]:
        cfg = self.config
        radii = [cfg.base_radius + idx * cfg.ring_spacing for idx in range(ring_count)]
        if viewport is None or ring_count == 0:
            return radii
        min_axis = min(viewport.width or 0, viewport.height or 0)
        if min_axis <= 0:
            return radii
        limit = max(
            cfg.min_radius + (ring_count - 1) * cfg.min_ring_spacing,
            min_axis / 2 - cfg.viewport_margin,
        )
        if radii[-1] <= limit:
            return radii
        scale = limit / radii[-1]
        return [
            max(cfg.min_radius + idx * cfg.min_ring_spacing, float(round(radius * scale)))
            for idx, radius in enumerate(radii)
        ]

    def _ring_radii(
        self,
        groups: Mapping[Domain, Sequence[GraphNode]],
        sizes: Mapping[str, Size],
        frame: _Frame,
        viewport: Size | None,
    ) -> dict[int, float]:
        rings = sorted({node.effective_ring() for nodes in groups.values() for node in nodes})
        base = self.base_radii(rings[-1], viewport)
        center_half_diag = _diagonal(frame.center_size) / 2
        gap = self.config.arc_gap

        radii: dict[int, float] = {}
        previous: tuple[float, float] | None = None
        for ring in rings:
            members = [
                [node for node in nodes if node.effective_ring() == ring]
                for nodes in groups.values()
            ]
            max_diag = max(_diagonal(sizes[node.id]) for bucket in members for node in bucket)
            radius = max(
                base[ring - 1],
                center_half_diag + max_diag / 2 + gap,
                max_diag + gap,
            )
            if previous is not None:
                previous_radius, previous_diag = previous
                radius = max(radius, previous_radius + (previous_diag + max_diag) / 2 + gap)
            for bucket in members:
                if bucket:
                    diagonals = [_diagonal(sizes[node.id]) for node in bucket]
                    radius = self._packing_radius(diagonals, radius, frame.sweep)
            radii[ring] = radius
            previous = (radius, max_diag)
        return radii

    def _packing_radius(self, diagonals: Sequence[float], radius: float, sweep: float) -> float:
        """Grow ``radius`` until every node's arc span fits inside ``sweep``."""
        for _ in range(self.config.packing_iterations):
            total = sum(self._arc_span(diagonal, radius) for diagonal in diagonals)
            if total <= sweep:
                break
            radius = math.ceil(radius * (total / max(sweep, 1e-4)) + 1)
        return radius

    def _arc_span(self, diagonal: float, radius: float) -> float:
        ratio = (diagonal + self.config.arc_gap) / (2 * max(1.0, radius))
        return 2 * math.asin(min(1.0, max(0.0, ratio)))

    def _ring_angles(
        self,
        ring_nodes: Sequence[GraphNode],
        sizes: Mapping[str, Size],
        radius: float,
        center_angle: float,
        sweep: float,
    ) -> list[tuple[str, float]]:
        if len(ring_nodes) == 1:
            return [(ring_nodes[0].id, center_angle)]
        spans = [self._arc_span(_diagonal(sizes[node.id]), radius) for node in ring_nodes]
        spare_per_node = max(0.0, sweep - sum(spans)) / len(ring_nodes)
        cursor = center_angle - sweep / 2
        angles: list[tuple[str, float]] = []
        for node, span in zip(ring_nodes, spans):
            angles.append((node.id, cursor + spare_per_node / 2 + span / 2))
            cursor += span + spare_per_node
        return angles

    def _process_positions(
        self,
        center: GraphNode,
        movable: Sequence[GraphNode],
        options: LayoutOptions,
    ) -> dict[str, Point]:
        center_size = node_dimensions(center, options.measure, center.id)
        sizes = {node.id: node_dimensions(node, options.measure) for node in movable}
        avg_width = sum(size.width for size in sizes.values()) / len(sizes)
        avg_height = sum(size.height for size in sizes.values()) / len(sizes)
        gap_x = max(96.0, min(280.0, round(avg_width * 0.35) + options.padding))
        gap_y = max(56.0, min(200.0, round(avg_height * 0.2) + options.padding))

        lanes: dict[str, list[GraphNode]] = {lane: [] for lane in _PROCESS_LANES}
        for node in movable:
            lanes[_process_lane(node)].append(node)

        center_y = center.position.y + center_size.height / 2
        cursor_x = center.position.x + center_size.width + gap_x
        positions: dict[str, Point] = {}
        for lane in _PROCESS_LANES:
            members = lanes[lane]
            if not members:
                continue
            lane_width = max(sizes[node.id].width for node in members)
            stack_height = sum(sizes[node.id].height for node in members) + gap_y * (
                len(members) - 1
            )
            cursor_y = center_y - stack_height / 2
            for node in members:
                size = sizes[node.id]
                positions[node.id] = Point(cursor_x + (lane_width - size.width) / 2, cursor_y)
                cursor_y += size.height + gap_y
            cursor_x += lane_width + gap_x
        return positions

    def suggest_node_position(
        self,
        nodes: Sequence[GraphNode],
        center_node_id: str = CENTER_NODE_ID,
        domain: Domain | None = None,
        ring: int | None = None,
        node_type: NodeType | str | None = None,
        measure: MeasureMap | None = None,
    ) -> Point:
        """Pick the free-most slot for a new node on its domain sector and ring.

        Candidate slots are spread evenly across the sector; the slot whose
        top-left corner is farthest from every existing node wins, the first
        slot on ties. Without a center node a fixed fallback point is used.
        """
        center = next((node for node in nodes if node.id == center_node_id), None)
        if center is None:
            return _NO_CENTER_POSITION

        resolved_domain = domain or domain_for_node_type(node_type)
        resolved_ring = max(1, ring or 1)
        others = [node for node in nodes if node.id != center_node_id]
        active = {node.domain for node in others} | {resolved_domain}
        ordered = [item for item in CANONICAL_DOMAIN_ORDER if item in active]
        sector_arc = 2 * math.pi / len(ordered)
        sweep = sector_arc * self.config.fill_ratio
        center_angle = self.config.start_angle + ordered.index(resolved_domain) * sector_arc

        center_size = node_dimensions(center, measure, center_node_id)
        new_size = Size(280, 200)
        radius = self.base_radii(resolved_ring)[-1]
        slot_count = max(self._slot_count(resolved_ring - 1), 4)
        slot_arc = sweep / slot_count
        start = center_angle - sweep / 2
        origin_x = center.position.x + center_size.width / 2 - new_size.width / 2
        origin_y = center.position.y + center_size.height / 2 - new_size.height / 2

        best: Point | None = None
        best_distance = -math.inf
        for idx in range(slot_count):
            angle = start + slot_arc / 2 + idx * slot_arc
            candidate = Point(
                origin_x + radius * math.cos(angle), origin_y + radius * math.sin(angle)
            )
            nearest = min(
                (
                    math.hypot(candidate.x - node.position.x, candidate.y - node.position.y)
                    for node in others
                ),
                default=math.inf,
            )
            if nearest > best_distance:
                best_distance = nearest
                best = candidate
        return best or Point(origin_x + radius, origin_y)

    def _slot_count(self, ring_index: int) -> int:
        counts = self.config.slot_counts
        if ring_index < len(counts):
            return counts[ring_index]
        return counts[-1] + (ring_index - (len(counts) - 1)) * 4


def _diagonal(size: Size) -> float:
    return math.hypot(size.width, size.height)


def _process_lane(node: GraphNode) -> str:
    if node.type is NodeType.REQUIREMENT:
        return "requirements"
    if _DATA_LABEL.search(node.label or ""):
        return "data"
    if node.type in {NodeType.FRONTEND, NodeType.BACKEND}:
        return "services"
    if node.type is NodeType.DOC:
        return "docs"
    return "other"


def apply_domain_radial_layout(
    nodes: Sequence[GraphNode],
    options: LayoutOptions | None = None,
    config: RadialLayoutConfig | None = None,
) -> list[GraphNode]:
    return RadialDomainLayoutEngine(config).apply(nodes, options or LayoutOptions())

from __future__ import annotations

from adapters.layout.radial import RadialDomainLayoutEngine
from domain.models import LayoutOptions, Point, Size, WorkspaceDocument
from domain.services.collision import find_overlaps, rects_from_nodes, resolve_collisions
from domain.services.cycles import detect_cycle
from domain.services.dimensions import MeasureMap, parse_dimension

PADDING = 12


def _measure_from_style(document: WorkspaceDocument) -> MeasureMap:
    measure = {}
    for node in document.nodes:
        width = parse_dimension(node.style.get("width"))
        height = parse_dimension(node.style.get("height"))
        if width and height:
            measure[node.id] = Size(width, height)
    return measure


def _run(document: WorkspaceDocument):
    measure = _measure_from_style(document)
    options = LayoutOptions(viewport=Size(1600, 1000), measure=measure, padding=PADDING)
    laid_out = RadialDomainLayoutEngine().apply(document.nodes, options)
    return measure, laid_out, resolve_collisions(
        laid_out, padding=PADDING, max_passes=10, measure=measure
    )


def test_seed_workspace_is_acyclic(seed_document: WorkspaceDocument) -> None:
    assert detect_cycle(seed_document.nodes, seed_document.edges).has_cycle is False


def test_seed_layout_ends_without_overlaps(seed_document: WorkspaceDocument) -> None:
    measure, laid_out, result = _run(seed_document)

    assert len(measure) == len(seed_document.nodes)
    assert find_overlaps(rects_from_nodes(laid_out, measure), PADDING) == []
    assert result.pending_measurement is False
    assert result.remaining_overlaps == []
    assert find_overlaps(rects_from_nodes(result.nodes, measure), PADDING) == []
    assert {node.id: node.position for node in result.nodes}["center"] == Point(620, 380)


def test_seed_layout_is_reproducible(seed_document: WorkspaceDocument) -> None:
    _, _, first = _run(seed_document)
    _, _, second = _run(seed_document)
    assert [node.position for node in first.nodes] == [node.position for node in second.nodes]
    assert all(
        node.position.x == int(node.position.x) and node.position.y == int(node.position.y)
        for node in first.nodes
    )

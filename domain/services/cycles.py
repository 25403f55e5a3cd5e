from __future__ import annotations

from collections.abc import Iterable, Sequence

from domain.models import CycleCheckResult, GraphEdge, GraphNode


def build_adjacency(
    node_ids: Iterable[str], edges: Iterable[GraphEdge]
) -> dict[str, list[str]]:
    adjacency: dict[str, list[str]] = {node_id: [] for node_id in node_ids}
    for edge in edges:
        adjacency.setdefault(edge.source, []).append(edge.target)
    return adjacency


def find_invalid_references(
    nodes: Sequence[GraphNode], edges: Iterable[GraphEdge]
) -> list[str]:
    known = {node.id for node in nodes}
    return [edge.id for edge in edges if edge.source not in known or edge.target not in known]


def detect_cycle(
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    candidate_edge: GraphEdge | None = None,
) -> CycleCheckResult:
    """Depth-first cycle search over ``edges`` plus an optional candidate edge.

    Nodes and their outgoing edges are visited in input order, so the reported
    cycle is stable for a fixed ordering. The returned path starts and ends on
    the same node; a self loop ``a -> a`` is reported as ``["a", "a"]``.
    Edges pointing at unknown nodes are reported instead of searched.
    """
    all_edges = list(edges)
    if candidate_edge is not None:
        all_edges.append(candidate_edge)

    invalid = find_invalid_references(nodes, all_edges)
    if invalid:
        return CycleCheckResult(has_cycle=False, invalid_references=invalid)

    adjacency = build_adjacency((node.id for node in nodes), all_edges)
    visited: set[str] = set()
    for node in nodes:
        if node.id in visited:
            continue
        cycle = _search_from(node.id, adjacency, visited)
        if cycle:
            return CycleCheckResult(has_cycle=True, cycle=cycle)
    return CycleCheckResult(has_cycle=False)


def _search_from(
    start: str, adjacency: dict[str, list[str]], visited: set[str]
) -> list[str] | None:
    path: list[str] = [start]
    on_path: set[str] = {start}
    # Each frame holds the node and the index of its next neighbor to explore.
    frames: list[list] = [[start, 0]]
    visited.add(start)

    while frames:
        frame = frames[-1]
        node_id, cursor = frame
        neighbors = adjacency.get(node_id, [])
        if cursor >= len(neighbors):
            frames.pop()
            path.pop()
            on_path.discard(node_id)
            continue
        frame[1] = cursor + 1
        neighbor = neighbors[cursor]
        if neighbor in on_path:
            return path[path.index(neighbor) :] + [neighbor]
        if neighbor in visited:
            continue
        visited.add(neighbor)
        path.append(neighbor)
        on_path.add(neighbor)
        frames.append([neighbor, 0])
    return None


def would_create_cycle(
    nodes: Sequence[GraphNode], edges: Sequence[GraphEdge], candidate_edge: GraphEdge
) -> bool:
    return detect_cycle(nodes, edges, candidate_edge).has_cycle

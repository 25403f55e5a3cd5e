from __future__ import annotations

from collections.abc import Sequence

from domain.models import (
    CENTER_NODE_ID,
    GraphEdge,
    GraphNode,
    NodeType,
    RingCheckResult,
    RingIssue,
    RingViolation,
    Severity,
)


def check_ring_hierarchy(
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    center_node_id: str = CENTER_NODE_ID,
) -> RingCheckResult:
    """Check that stored rings follow the edge hierarchy outwards from the center.

    The center (or a root node) sits on ring 0 and every other node sits one
    ring beyond each of its parents. Edges pointing back to the same or an inner
    ring are reported on their source. Parentless nodes outside ring 1 are only
    warnings; every other violation is an error. Edges to unknown nodes are
    ignored here, ``detect_cycle`` reports them.
    """
    by_id = {node.id: node for node in nodes}
    parents: dict[str, list[GraphNode]] = {node.id: [] for node in nodes}
    children: dict[str, list[GraphNode]] = {node.id: [] for node in nodes}
    for edge in edges:
        source, target = by_id.get(edge.source), by_id.get(edge.target)
        if source is None or target is None:
            continue
        parents[target.id].append(source)
        children[source.id].append(target)

    violations: list[RingViolation] = []
    for node in nodes:
        is_center = node.is_center(center_node_id) or node.type is NodeType.ROOT
        if is_center:
            if node.ring != 0:
                violations.append(
                    RingViolation(
                        node_id=node.id,
                        issue=RingIssue.CENTER_NOT_RING_ZERO,
                        severity=Severity.ERROR,
                        ring=node.ring,
                        expected_ring=0,
                    )
                )
        elif node.ring is None:
            violations.append(
                RingViolation(
                    node_id=node.id,
                    issue=RingIssue.MISSING_RING,
                    severity=Severity.ERROR,
                    ring=None,
                    expected_ring=1,
                )
            )
            continue
        elif not parents[node.id]:
            if node.ring != 1:
                violations.append(
                    RingViolation(
                        node_id=node.id,
                        issue=RingIssue.ORPHAN,
                        severity=Severity.WARNING,
                        ring=node.ring,
                        expected_ring=1,
                    )
                )
        else:
            for parent in parents[node.id]:
                expected = (parent.ring or 0) + 1
                if node.ring != expected:
                    violations.append(
                        RingViolation(
                            node_id=node.id,
                            issue=RingIssue.PARENT_MISMATCH,
                            severity=Severity.ERROR,
                            ring=node.ring,
                            expected_ring=expected,
                            related_id=parent.id,
                        )
                    )

        ring = node.ring or 0
        for child in children[node.id]:
            if (child.ring or 0) <= ring:
                violations.append(
                    RingViolation(
                        node_id=node.id,
                        issue=RingIssue.REVERSAL,
                        severity=Severity.ERROR,
                        ring=node.ring,
                        expected_ring=ring,
                        related_id=child.id,
                    )
                )

    by_ring: dict[int, int] = {}
    for node in nodes:
        key = -1 if node.ring is None else node.ring
        by_ring[key] = by_ring.get(key, 0) + 1
    return RingCheckResult(violations=violations, by_ring=dict(sorted(by_ring.items())))

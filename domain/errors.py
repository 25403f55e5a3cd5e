from __future__ import annotations

from collections.abc import Sequence


class WorkspaceError(Exception):
    """Base class for rejected workspace edits."""


class UnknownNodeError(WorkspaceError):
    def __init__(self, node_id: str) -> None:
        super().__init__(f"Unknown node id: {node_id}")
        self.node_id = node_id


class DuplicateNodeError(WorkspaceError):
    def __init__(self, node_id: str) -> None:
        super().__init__(f"Duplicate node id: {node_id}")
        self.node_id = node_id


class InvalidEdgeReferenceError(WorkspaceError):
    def __init__(self, edge_ids: Sequence[str]) -> None:
        joined = ", ".join(edge_ids)
        super().__init__(f"Edges reference unknown nodes: {joined}")
        self.edge_ids = list(edge_ids)


class CycleRejectedError(WorkspaceError):
    def __init__(self, cycle: Sequence[str]) -> None:
        path = " -> ".join(cycle)
        super().__init__(f"Edge would create a cycle: {path}")
        self.cycle = list(cycle)


class UnknownEdgeError(WorkspaceError):
    def __init__(self, edge_id: str) -> None:
        super().__init__(f"Unknown edge id: {edge_id}")
        self.edge_id = edge_id

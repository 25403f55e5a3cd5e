from __future__ import annotations

import logging
from collections.abc import Sequence

from domain.errors import (
    CycleRejectedError,
    DuplicateNodeError,
    InvalidEdgeReferenceError,
    UnknownEdgeError,
    UnknownNodeError,
)
from domain.models import (
    CycleCheckResult,
    CycleStatus,
    GraphEdge,
    GraphNode,
    HistoryState,
    LayoutOptions,
    LayoutResult,
    WorkspaceDocument,
)
from domain.ports.layout import LayoutEngine
from domain.services.collision import DEFAULT_MAX_PASSES, resolve_collisions
from domain.services.cycles import detect_cycle
from domain.services.history import HistoryManager

logger = logging.getLogger(__name__)


class WorkspaceSession:
    """Editing session over one workspace graph.

    Each accepted command records exactly one history entry; rejected commands
    leave both the graph and the history untouched.
    """

    def __init__(
        self,
        document: WorkspaceDocument,
        layout_engine: LayoutEngine,
        history: HistoryManager | None = None,
    ) -> None:
        self.center_node_id = document.center_node_id
        self.layout_engine = layout_engine
        self.history = history or HistoryManager()
        self._nodes: list[GraphNode] = [node.clone() for node in document.nodes]
        self._edges: list[GraphEdge] = [edge.clone() for edge in document.edges]
        self.history.initialize(self.snapshot())

    @property
    def nodes(self) -> list[GraphNode]:
        return [node.clone() for node in self._nodes]

    @property
    def edges(self) -> list[GraphEdge]:
        return [edge.clone() for edge in self._edges]

    def snapshot(self) -> HistoryState:
        return HistoryState(nodes=self.nodes, edges=self.edges)

    def to_document(self) -> WorkspaceDocument:
        return WorkspaceDocument(
            center_node_id=self.center_node_id, nodes=self.nodes, edges=self.edges
        )

    def add_node(self, node: GraphNode) -> None:
        if any(existing.id == node.id for existing in self._nodes):
            raise DuplicateNodeError(node.id)
        self._nodes.append(node.clone())
        self._commit()

    def move_node(self, node_id: str, x: float, y: float) -> None:
        idx = self._node_index(node_id)
        self._nodes[idx] = self._nodes[idx].with_position(x, y)
        self._commit()

    def remove_node(self, node_id: str) -> None:
        idx = self._node_index(node_id)
        del self._nodes[idx]
        self._edges = [
            edge for edge in self._edges if node_id not in (edge.source, edge.target)
        ]
        self._commit()

    def check_edge(self, edge: GraphEdge) -> CycleCheckResult:
        return detect_cycle(self._nodes, self._edges, edge)

    def add_edge(self, edge: GraphEdge) -> None:
        self._raise_for(self.check_edge(edge))
        self._edges.append(edge.clone())
        self._commit()

    def remove_edge(self, edge_id: str) -> None:
        remaining = [edge for edge in self._edges if edge.id != edge_id]
        if len(remaining) == len(self._edges):
            raise UnknownEdgeError(edge_id)
        self._edges = remaining
        self._commit()

    def import_graph(self, nodes: Sequence[GraphNode], edges: Sequence[GraphEdge]) -> None:
        known = {node.id for node in self._nodes}
        for node in nodes:
            if node.id in known:
                raise DuplicateNodeError(node.id)
            known.add(node.id)
        merged_nodes = self._nodes + [node.clone() for node in nodes]
        merged_edges = self._edges + [edge.clone() for edge in edges]
        self._raise_for(detect_cycle(merged_nodes, merged_edges))
        self._nodes = merged_nodes
        self._edges = merged_edges
        self._commit()

    def relayout(
        self,
        options: LayoutOptions | None = None,
        max_passes: int = DEFAULT_MAX_PASSES,
    ) -> LayoutResult:
        options = options or LayoutOptions(center_node_id=self.center_node_id)
        laid_out = self.layout_engine.apply(self._nodes, options)
        result = resolve_collisions(
            laid_out,
            padding=options.padding,
            max_passes=max_passes,
            measure=options.measure,
            fixed_ids=options.pinned_ids,
            center_node_id=options.center_node_id,
        )
        if result.pending_measurement:
            logger.info("Layout applied without collision pass, node sizes pending.")
            self._nodes = laid_out
        else:
            self._nodes = [node.clone() for node in result.nodes]
        self._commit()
        return result

    def undo(self) -> bool:
        return self._restore(self.history.undo())

    def redo(self) -> bool:
        return self._restore(self.history.redo())

    def _restore(self, state: HistoryState | None) -> bool:
        if state is None:
            return False
        self._nodes = list(state.nodes)
        self._edges = list(state.edges)
        return True

    def _commit(self) -> None:
        self.history.push(HistoryState(nodes=self._nodes, edges=self._edges))

    def _node_index(self, node_id: str) -> int:
        for idx, node in enumerate(self._nodes):
            if node.id == node_id:
                return idx
        raise UnknownNodeError(node_id)

    @staticmethod
    def _raise_for(check: CycleCheckResult) -> None:
        if check.status is CycleStatus.INVALID_REFERENCE:
            raise InvalidEdgeReferenceError(check.invalid_references)
        if check.status is CycleStatus.CYCLE:
            raise CycleRejectedError(check.cycle or [])

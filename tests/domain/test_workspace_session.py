from __future__ import annotations

from collections.abc import Callable

import pytest

from adapters.layout.radial import RadialDomainLayoutEngine
from domain.errors import (
    CycleRejectedError,
    DuplicateNodeError,
    InvalidEdgeReferenceError,
    UnknownEdgeError,
    UnknownNodeError,
)
from domain.models import GraphEdge, GraphNode, LayoutOptions, Point, Size, WorkspaceDocument
from domain.services.collision import find_overlaps, rects_from_nodes
from domain.services.history import HistoryManager
from domain.services.workspace_session import WorkspaceSession


@pytest.fixture
def session(
    node_factory: Callable[..., GraphNode], edge_factory: Callable[[str, str], GraphEdge]
) -> WorkspaceSession:
    document = WorkspaceDocument(
        nodes=[
            node_factory("center", 0, 0, width=360, height=240, type="root"),
            node_factory("a", 500, 0, domain="tech"),
            node_factory("b", 700, 0, domain="tech"),
        ],
        edges=[edge_factory("center", "a"), edge_factory("a", "b")],
    )
    return WorkspaceSession(document, RadialDomainLayoutEngine())


def _ids(items: list[GraphNode] | list[GraphEdge]) -> list[str]:
    return [item.id for item in items]


def test_session_starts_with_single_history_entry(session: WorkspaceSession) -> None:
    assert len(session.history) == 1
    assert session.undo() is False


def test_add_node_can_be_undone_and_redone(
    session: WorkspaceSession, node_factory: Callable[..., GraphNode]
) -> None:
    session.add_node(node_factory("c", 900, 0))
    assert _ids(session.nodes) == ["center", "a", "b", "c"]

    assert session.undo() is True
    assert _ids(session.nodes) == ["center", "a", "b"]
    assert session.redo() is True
    assert _ids(session.nodes) == ["center", "a", "b", "c"]
    assert session.redo() is False


def test_duplicate_node_is_rejected_without_history(
    session: WorkspaceSession, node_factory: Callable[..., GraphNode]
) -> None:
    with pytest.raises(DuplicateNodeError):
        session.add_node(node_factory("a"))
    assert len(session.history) == 1


def test_cycle_edge_is_rejected(session: WorkspaceSession) -> None:
    with pytest.raises(CycleRejectedError) as excinfo:
        session.add_edge(GraphEdge(source="b", target="center"))
    assert excinfo.value.cycle == ["center", "a", "b", "center"]
    assert _ids(session.edges) == ["center-a", "a-b"]
    assert len(session.history) == 1


def test_edge_to_unknown_node_is_rejected(session: WorkspaceSession) -> None:
    with pytest.raises(InvalidEdgeReferenceError) as excinfo:
        session.add_edge(GraphEdge(source="a", target="ghost"))
    assert excinfo.value.edge_ids == ["a->ghost"]


def test_check_edge_does_not_change_graph(session: WorkspaceSession) -> None:
    check = session.check_edge(GraphEdge(source="b", target="a"))
    assert check.has_cycle is True
    assert len(session.edges) == 2


def test_valid_edge_is_added(session: WorkspaceSession) -> None:
    session.add_edge(GraphEdge(source="center", target="b"))
    assert _ids(session.edges) == ["center-a", "a-b", "center->b"]
    assert len(session.history) == 2


def test_remove_node_drops_incident_edges(session: WorkspaceSession) -> None:
    session.remove_node("a")
    assert _ids(session.nodes) == ["center", "b"]
    assert session.edges == []

    session.undo()
    assert _ids(session.edges) == ["center-a", "a-b"]


def test_unknown_ids_raise(session: WorkspaceSession) -> None:
    with pytest.raises(UnknownNodeError):
        session.remove_node("ghost")
    with pytest.raises(UnknownNodeError):
        session.move_node("ghost", 1, 1)
    with pytest.raises(UnknownEdgeError):
        session.remove_edge("ghost")


def test_move_and_remove_edge_record_history(session: WorkspaceSession) -> None:
    session.move_node("a", 10, 20)
    session.remove_edge("a-b")
    assert _ids(session.edges) == ["center-a"]
    assert {node.id: node.position for node in session.nodes}["a"] == Point(10, 20)
    assert session.history.history_info().history_length == 3


def test_import_graph_is_all_or_nothing(
    session: WorkspaceSession, node_factory: Callable[..., GraphNode]
) -> None:
    with pytest.raises(CycleRejectedError):
        session.import_graph(
            [node_factory("x"), node_factory("y")],
            [GraphEdge(source="x", target="y"), GraphEdge(source="y", target="x")],
        )
    assert _ids(session.nodes) == ["center", "a", "b"]

    session.import_graph([node_factory("x")], [GraphEdge(source="b", target="x")])
    assert _ids(session.nodes) == ["center", "a", "b", "x"]
    assert len(session.history) == 2


def test_returned_nodes_are_copies(session: WorkspaceSession) -> None:
    nodes = session.nodes
    nodes[1].position = Point(-1, -1)
    assert session.nodes[1].position == Point(500, 0)


def test_relayout_resolves_and_records_one_entry(session: WorkspaceSession) -> None:
    before = [node.position for node in session.nodes]
    result = session.relayout(LayoutOptions(viewport=Size(1600, 1000)))

    assert result.pending_measurement is False
    assert find_overlaps(rects_from_nodes(session.nodes), 12) == []
    assert len(session.history) == 2
    session.undo()
    assert [node.position for node in session.nodes] == before


def test_relayout_with_pending_sizes_keeps_layout(
    node_factory: Callable[..., GraphNode],
) -> None:
    document = WorkspaceDocument(
        nodes=[
            node_factory("center", 0, 0, width=360, height=240, type="root"),
            node_factory("a", 0, 0, width=None, height=None, domain="tech"),
        ]
    )
    session = WorkspaceSession(document, RadialDomainLayoutEngine(), HistoryManager(max_size=5))
    result = session.relayout()
    assert result.pending_measurement is True
    assert {node.id: node.position for node in session.nodes}["a"] != Point(0, 0)
    assert session.to_document().center_node_id == "center"

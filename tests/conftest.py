from __future__ import annotations

import os
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from domain.models import GraphEdge, GraphNode, Point, Size, WorkspaceDocument


def _clear_rws_env() -> None:
    for key in list(os.environ):
        if key.startswith("RWS_"):
            os.environ.pop(key, None)


_clear_rws_env()


@pytest.fixture(autouse=True)
def clear_rws_env() -> Generator[None, None, None]:
    _clear_rws_env()
    yield
    _clear_rws_env()


def _repo_root() -> Path:
    for parent in Path(__file__).resolve().parents:
        if (parent / "examples" / "workspaces").exists():
            return parent
    raise RuntimeError("Repository root not found")


@pytest.fixture
def seed_path() -> Path:
    return _repo_root() / "examples" / "workspaces" / "collision_seed.json"


@pytest.fixture
def seed_document(seed_path: Path) -> WorkspaceDocument:
    return WorkspaceDocument.model_validate_json(seed_path.read_text(encoding="utf-8"))


@pytest.fixture
def node_factory() -> Callable[..., GraphNode]:
    def _factory(
        node_id: str,
        x: float = 0.0,
        y: float = 0.0,
        width: float | None = 100,
        height: float | None = 100,
        **fields: object,
    ) -> GraphNode:
        dimensions = Size(width, height) if width is not None and height is not None else None
        return GraphNode(id=node_id, position=Point(x, y), dimensions=dimensions, **fields)

    return _factory


@pytest.fixture
def edge_factory() -> Callable[[str, str], GraphEdge]:
    def _factory(source: str, target: str) -> GraphEdge:
        return GraphEdge(id=f"{source}-{target}", source=source, target=target)

    return _factory

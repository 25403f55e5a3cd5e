from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from domain.models import WorkspaceDocument


class WorkspaceRepository(Protocol):
    def load_all_with_paths(self, directory: Path) -> Sequence[tuple[Path, WorkspaceDocument]]: ...

    def load_by_path(self, path: Path) -> WorkspaceDocument: ...

    def save(self, document: WorkspaceDocument, path: Path) -> None: ...

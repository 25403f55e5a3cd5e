from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

import orjson

from domain.models import WorkspaceDocument
from domain.ports.repositories import WorkspaceRepository

logger = logging.getLogger(__name__)


class FileSystemWorkspaceRepository(WorkspaceRepository):
    """Workspace documents stored as one indented JSON file each."""

    def load_all_with_paths(self, directory: Path) -> list[tuple[Path, WorkspaceDocument]]:
        return [(path, self.load_by_path(path)) for path in sorted(self._iter_paths(directory))]

    def load_by_path(self, path: Path) -> WorkspaceDocument:
        payload = orjson.loads(path.read_bytes())
        if not isinstance(payload, dict):
            msg = f"Workspace file must contain a JSON object: {path}"
            raise ValueError(msg)
        return WorkspaceDocument.model_validate(payload)

    def save(self, document: WorkspaceDocument, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        # Write next to the target and swap in, so readers never see a partial file.
        tmp_path = path.with_suffix(f"{path.suffix}.tmp")
        tmp_path.write_bytes(
            orjson.dumps(document.to_workspace_dict(), option=orjson.OPT_INDENT_2)
        )
        tmp_path.replace(path)
        logger.debug("Saved workspace with %d nodes to %s", len(document.nodes), path)

    def _iter_paths(self, directory: Path) -> Iterable[Path]:
        yield from directory.glob("*.json")

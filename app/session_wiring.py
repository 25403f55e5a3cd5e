from __future__ import annotations

from adapters.layout.radial import RadialDomainLayoutEngine
from app.config import AppSettings
from domain.models import WorkspaceDocument
from domain.services.history import HistoryManager
from domain.services.workspace_session import WorkspaceSession


def build_layout_engine(settings: AppSettings) -> RadialDomainLayoutEngine:
    return RadialDomainLayoutEngine(settings.layout.to_layout_config())


def build_workspace_session(
    document: WorkspaceDocument, settings: AppSettings
) -> WorkspaceSession:
    return WorkspaceSession(
        document,
        build_layout_engine(settings),
        HistoryManager(max_size=settings.history.max_size),
    )

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from domain.models import GraphNode, LayoutOptions


class LayoutEngine(Protocol):
    def apply(self, nodes: Sequence[GraphNode], options: LayoutOptions) -> list[GraphNode]:
        ...

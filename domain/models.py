from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, List, Mapping, Optional, Set, Union

from pydantic import BaseModel, Field, field_validator, model_validator

CENTER_NODE_ID = "center"
DEFAULT_HISTORY_SIZE = 50


class NodeType(str, Enum):
    ROOT = "root"
    FRONTEND = "frontend"
    BACKEND = "backend"
    REQUIREMENT = "requirement"
    DOC = "doc"


_NODE_TYPE_ALIASES = {"center": NodeType.ROOT}


def normalize_node_type(value: object) -> NodeType:
    if isinstance(value, NodeType):
        return value
    raw = str(value or "").strip().lower()
    if raw in _NODE_TYPE_ALIASES:
        return _NODE_TYPE_ALIASES[raw]
    try:
        return NodeType(raw)
    except ValueError as exc:
        allowed = ", ".join(item.value for item in NodeType)
        msg = f"Unknown node type: {value!r} (expected one of {allowed})"
        raise ValueError(msg) from exc


class Domain(str, Enum):
    BUSINESS = "business"
    PRODUCT = "product"
    TECH = "tech"
    DATA_AI = "data-ai"
    OPERATIONS = "operations"
    GENERAL = "general"


DOMAIN_DEFAULT = Domain.GENERAL

# Sector order around the center, starting east and going clockwise on screen.
CANONICAL_DOMAIN_ORDER = (
    Domain.TECH,
    Domain.DATA_AI,
    Domain.BUSINESS,
    Domain.OPERATIONS,
    Domain.PRODUCT,
    Domain.GENERAL,
)


def normalize_domain(value: object) -> Domain:
    if isinstance(value, Domain):
        return value
    raw = str(value or "").strip().lower().replace("_", "-")
    if not raw:
        return DOMAIN_DEFAULT
    try:
        return Domain(raw)
    except ValueError:
        return DOMAIN_DEFAULT


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Size:
    width: float
    height: float


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class NodeRect(Rect):
    id: str = ""


class GraphNode(BaseModel):
    id: str = Field(..., min_length=1)
    type: NodeType = NodeType.DOC
    position: Point = Point(0.0, 0.0)
    dimensions: Optional[Size] = None
    style: Dict[str, Union[float, str]] = Field(default_factory=dict)
    domain: Domain = DOMAIN_DEFAULT
    ring: Optional[int] = Field(default=None, ge=0)
    label: str = ""
    pinned: bool = False

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, value: object) -> NodeType:
        return normalize_node_type(value)

    @field_validator("domain", mode="before")
    @classmethod
    def normalize_domain_value(cls, value: object) -> Domain:
        return normalize_domain(value)

    def is_center(self, center_node_id: str = CENTER_NODE_ID) -> bool:
        return self.id == center_node_id

    def effective_ring(self) -> int:
        return self.ring if self.ring else 1

    def with_position(self, x: float, y: float) -> GraphNode:
        return self.model_copy(update={"position": Point(x, y), "style": dict(self.style)})

    def clone(self) -> GraphNode:
        # Point and Size are frozen, so only the mutable style mapping needs copying.
        return self.model_copy(update={"style": dict(self.style)})


class GraphEdge(BaseModel):
    id: str = ""
    source: str = Field(..., min_length=1)
    target: str = Field(..., min_length=1)
    label: str = ""

    @model_validator(mode="after")
    def default_id(self) -> GraphEdge:
        if not self.id:
            self.id = f"{self.source}->{self.target}"
        return self

    def clone(self) -> GraphEdge:
        return self.model_copy()


class WorkspaceDocument(BaseModel):
    center_node_id: str = CENTER_NODE_ID
    nodes: List[GraphNode] = Field(default_factory=list)
    edges: List[GraphEdge] = Field(default_factory=list)

    @field_validator("nodes", mode="after")
    @classmethod
    def ensure_unique_node_ids(cls, nodes: List[GraphNode]) -> List[GraphNode]:
        seen: Set[str] = set()
        for node in nodes:
            if node.id in seen:
                msg = f"Duplicate node id found: {node.id}"
                raise ValueError(msg)
            seen.add(node.id)
        return nodes

    def node_ids(self) -> Set[str]:
        return {node.id for node in self.nodes}

    def to_workspace_dict(self) -> dict:
        return self.model_dump(mode="json")


@dataclass(frozen=True)
class LayoutResult:
    nodes: List[GraphNode]
    pending_measurement: bool
    moved_count: int = 0
    total_delta: float = 0.0
    passes: int = 0
    remaining_overlaps: List[tuple[str, str]] = field(default_factory=list)


@dataclass(frozen=True)
class HistoryState:
    nodes: List[GraphNode]
    edges: List[GraphEdge]

    def clone(self) -> HistoryState:
        return HistoryState(
            nodes=[node.clone() for node in self.nodes],
            edges=[edge.clone() for edge in self.edges],
        )


class CycleStatus(str, Enum):
    OK = "ok"
    CYCLE = "cycle"
    INVALID_REFERENCE = "invalid_reference"


@dataclass(frozen=True)
class CycleCheckResult:
    has_cycle: bool
    cycle: Optional[List[str]] = None
    invalid_references: List[str] = field(default_factory=list)

    @property
    def status(self) -> CycleStatus:
        if self.invalid_references:
            return CycleStatus.INVALID_REFERENCE
        if self.has_cycle:
            return CycleStatus.CYCLE
        return CycleStatus.OK


class RingIssue(str, Enum):
    CENTER_NOT_RING_ZERO = "center_not_ring_zero"
    MISSING_RING = "missing_ring"
    ORPHAN = "orphan"
    PARENT_MISMATCH = "parent_mismatch"
    REVERSAL = "reversal"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class RingViolation:
    node_id: str
    issue: RingIssue
    severity: Severity
    ring: Optional[int]
    expected_ring: int
    related_id: Optional[str] = None


@dataclass(frozen=True)
class RingCheckResult:
    violations: List[RingViolation] = field(default_factory=list)
    by_ring: Dict[int, int] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return all(item.severity is not Severity.ERROR for item in self.violations)

    def invalid_node_ids(self) -> Set[str]:
        return {item.node_id for item in self.violations}

    def errors(self) -> List[RingViolation]:
        return [item for item in self.violations if item.severity is Severity.ERROR]


class ViewMode(str, Enum):
    RADIAL = "radial"
    PROCESS = "process"


@dataclass(frozen=True)
class LayoutOptions:
    center_node_id: str = CENTER_NODE_ID
    view_mode: ViewMode = ViewMode.RADIAL
    viewport: Optional[Size] = None
    measure: Optional[Mapping[str, Size]] = None
    padding: float = 12.0
    pinned_ids: FrozenSet[str] = frozenset()


_DOMAIN_BY_NODE_TYPE = {
    NodeType.FRONTEND: Domain.PRODUCT,
    NodeType.REQUIREMENT: Domain.PRODUCT,
    NodeType.BACKEND: Domain.TECH,
    NodeType.DOC: Domain.BUSINESS,
    NodeType.ROOT: Domain.BUSINESS,
}


def domain_for_node_type(node_type: object) -> Domain:
    try:
        resolved = normalize_node_type(node_type)
    except ValueError:
        return Domain.OPERATIONS
    return _DOMAIN_BY_NODE_TYPE.get(resolved, Domain.OPERATIONS)

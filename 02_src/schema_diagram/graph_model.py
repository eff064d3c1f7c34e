"""Node/edge data model published to the rendering surface."""

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass(frozen=True)
class Position:
    x: float = 0.0
    y: float = 0.0


@dataclass
class GraphNode:
    id: str
    kind: str
    position: Position = field(default_factory=Position)
    payload: Dict[str, Any] = field(default_factory=dict)


@dataclass
class GraphEdge:
    id: str
    source: str
    target: str
    label: str = ""


@dataclass
class GraphElements:
    nodes: List[GraphNode] = field(default_factory=list)
    edges: List[GraphEdge] = field(default_factory=list)


@dataclass(frozen=True)
class GraphSnapshot:
    nodes: List[GraphNode]
    edges: List[GraphEdge]
    generation: int

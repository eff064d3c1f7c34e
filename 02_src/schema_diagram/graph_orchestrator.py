"""Deterministic assembly of diagram nodes and edges."""

from dataclasses import asdict, replace
from typing import Any, Dict, List

from .graph_model import GraphEdge, GraphElements, GraphNode, Position


class GraphOrchestrator:
    """Owns identifiers and safe updates of one graph generation pass."""

    def __init__(self) -> None:
        self._nodes: Dict[str, GraphNode] = {}
        self._edges: Dict[str, GraphEdge] = {}

    def add_or_update_node(
        self,
        node_id: str,
        kind: str,
        position: Position,
        payload: Dict[str, Any],
    ) -> GraphNode:
        existing = self._nodes.get(node_id)
        if existing is not None:
            existing.payload.update(payload)
            return existing

        node = GraphNode(id=node_id, kind=kind, position=position, payload=dict(payload))
        self._nodes[node_id] = node
        return node

    def add_edge(self, source_id: str, target_id: str, label: str = "") -> GraphEdge:
        if source_id not in self._nodes:
            raise ValueError(f"Unknown source node: {source_id}")
        if target_id not in self._nodes:
            raise ValueError(f"Unknown target node: {target_id}")

        edge_id = self.edge_id(source_id, target_id)
        existing = self._edges.get(edge_id)
        if existing is not None:
            if label:
                existing.label = label
            return existing

        edge = GraphEdge(id=edge_id, source=source_id, target=target_id, label=label)
        self._edges[edge_id] = edge
        return edge

    def elements(self) -> GraphElements:
        return GraphElements(
            nodes=[replace(node, payload=dict(node.payload)) for node in self._nodes.values()],
            edges=[replace(edge) for edge in self._edges.values()],
        )

    @staticmethod
    def edge_id(source_id: str, target_id: str) -> str:
        return f"edge-{source_id}-{target_id}"


def elements_to_json(nodes: List[GraphNode], edges: List[GraphEdge]) -> Dict[str, Any]:
    return {
        "nodes": [asdict(node) for node in nodes],
        "edges": [asdict(edge) for edge in edges],
    }

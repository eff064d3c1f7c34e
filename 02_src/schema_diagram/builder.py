"""Schema to node/edge graph generation."""

import logging
from collections import defaultdict
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .collapsed_state import CollapsedState
from .config import DiagramConfig
from .graph_model import GraphEdge, GraphElements, GraphNode, Position
from .graph_orchestrator import GraphOrchestrator
from .paths import ITEMS, ROOT
from .schema_walk import (
    KIND_ARRAY,
    KIND_OBJECT,
    KIND_OPAQUE,
    KIND_PRIMITIVE,
    ROLE_PROPERTIES,
    SchemaCursor,
    declared_types,
    root_cursor,
    type_label,
)

logger = logging.getLogger(__name__)

LEVEL_SPACING = 150.0
BASE_X_SPACING = 200.0
SPACING_DECAY = 0.8
MORE_SEGMENT = "+more"

KIND_ROOT = "root"
KIND_SUMMARY = "summary"
PROPERTY_ROLE = "property"


class SchemaGraphBuilder:
    """Walks a schema depth-first and emits one node per visible structural path.

    The result depends only on the schema, the collapse snapshot and the
    config. Every emitted edge connects two emitted nodes.
    """

    def __init__(self, config: Optional[DiagramConfig] = None) -> None:
        self._config = config or DiagramConfig()

    @property
    def config(self) -> DiagramConfig:
        return self._config

    def build(self, schema: Any, collapsed: Optional[Mapping[str, Any]] = None) -> GraphElements:
        if schema is None:
            return GraphElements()
        if not isinstance(collapsed, CollapsedState):
            collapsed = CollapsedState(collapsed)

        orchestrator = GraphOrchestrator()
        self._visit(
            orchestrator, collapsed, root_cursor(schema), None, ROOT, Position(0.0, 0.0), False
        )
        elements = orchestrator.elements()
        if self._config.truncate_ancestral:
            elements = truncate_ancestral_boxes(elements)
        logger.debug(
            "Built %d nodes and %d edges (max_depth=%d)",
            len(elements.nodes),
            len(elements.edges),
            self._config.max_depth,
        )
        return elements

    def _visit(
        self,
        orchestrator: GraphOrchestrator,
        collapsed: CollapsedState,
        cursor: SchemaCursor,
        parent_id: Optional[str],
        role: str,
        position: Position,
        required: bool,
        folded: bool = False,
    ) -> None:
        path = cursor.path
        node = orchestrator.add_or_update_node(
            node_id=path,
            kind=self._node_kind(cursor),
            position=position,
            payload=self._payload(cursor, role, required),
        )
        if parent_id is not None:
            orchestrator.add_edge(parent_id, path, label=ITEMS if role == ITEMS else "")

        children = cursor.children()
        if not children:
            return
        if folded:
            node.payload["is_collapsed"] = True
            return
        reveal_folded = False
        if collapsed.is_collapsed(path):
            node.payload["is_collapsed"] = True
            if not path.is_root:
                return
            # A collapsed root still shows its own container, folded.
            reveal_folded = True
        if path.depth + 1 > self._config.max_depth:
            node.payload["has_more_levels"] = True
            return

        hidden: List[SchemaCursor] = []
        if cursor.role == ROLE_PROPERTIES:
            if self._config.group_properties:
                children, scalars = _split_scalars(children)
                if scalars:
                    node.payload["property_details"] = _property_details(
                        scalars, cursor.required_names()
                    )
            children, hidden = self._truncate(children, collapsed)

        slots = len(children) + (1 if hidden else 0)
        placements = _spread(position, path.depth + 1, slots)
        required_names = set(cursor.required_names())
        for child, child_position in zip(children, placements):
            if cursor.role == ROLE_PROPERTIES:
                child_role = PROPERTY_ROLE
            elif child.role == ROLE_PROPERTIES:
                child_role = ROLE_PROPERTIES
            else:
                child_role = ITEMS
            self._visit(
                orchestrator,
                collapsed,
                child,
                path,
                child_role,
                child_position,
                child.name in required_names,
                reveal_folded,
            )
        if hidden:
            summary_id = path.child(MORE_SEGMENT)
            orchestrator.add_or_update_node(
                node_id=summary_id,
                kind=KIND_SUMMARY,
                position=placements[-1],
                payload={
                    "label": f"+{len(hidden)} more",
                    "role": KIND_SUMMARY,
                    "hidden_count": len(hidden),
                    "hidden_names": [child.name for child in hidden],
                    "is_collapsed": False,
                    "has_more_levels": False,
                },
            )
            orchestrator.add_edge(path, summary_id)

    def _truncate(
        self, children: List[SchemaCursor], collapsed: CollapsedState
    ) -> Tuple[List[SchemaCursor], List[SchemaCursor]]:
        limit = self._config.max_individual_properties
        if limit < 1 or len(children) <= limit:
            return children, []

        keep = {child.path for child in children if collapsed.is_explicitly_expanded(child.path)}
        for child in children:
            if len(keep) >= limit:
                break
            keep.add(child.path)
        shown = [child for child in children if child.path in keep]
        hidden = [child for child in children if child.path not in keep]
        return shown, hidden

    @staticmethod
    def _node_kind(cursor: SchemaCursor) -> str:
        if cursor.path.is_root:
            return KIND_ROOT
        kind = cursor.kind
        if kind == KIND_PRIMITIVE:
            types = declared_types(cursor.fragment)
            for structured in (KIND_OBJECT, KIND_ARRAY):
                if structured in types:
                    return structured
        return kind

    def _payload(self, cursor: SchemaCursor, role: str, required: bool) -> Dict[str, Any]:
        fragment = cursor.fragment
        if cursor.role == ROLE_PROPERTIES:
            properties = fragment.get("properties") or {}
            return {
                "label": "Properties",
                "role": ROLE_PROPERTIES,
                "schema_type": KIND_OBJECT,
                "property_count": len(properties),
                "is_collapsed": False,
                "has_more_levels": False,
            }

        payload: Dict[str, Any] = {
            "label": cursor.name,
            "role": role,
            "schema_type": type_label(fragment),
            "required": required,
            "is_collapsed": False,
            "has_more_levels": False,
        }
        if not isinstance(fragment, Mapping):
            if cursor.kind != KIND_OPAQUE:
                payload["value"] = fragment
            return payload

        if role == ROOT:
            payload["label"] = str(fragment.get("title") or "Root Schema")
        description = fragment.get("description")
        if isinstance(description, str):
            payload["description"] = description
        properties = fragment.get("properties")
        if isinstance(properties, Mapping):
            payload["property_count"] = len(properties)
        for source_key, payload_key in (("minItems", "min_items"), ("maxItems", "max_items")):
            if source_key in fragment:
                payload[payload_key] = fragment[source_key]
        entries = _tuple_entries(fragment)
        if entries is not None:
            limit = self._config.max_individual_array_items
            shown = entries if limit < 1 else entries[:limit]
            payload["item_entries"] = [
                {"index": index, "type": type_label(entry)} for index, entry in enumerate(shown)
            ]
            payload["hidden_item_count"] = len(entries) - len(shown)
        return payload


def generate_nodes_and_edges(
    schema: Any,
    config: Optional[DiagramConfig] = None,
    collapsed: Optional[Mapping[str, Any]] = None,
) -> GraphElements:
    return SchemaGraphBuilder(config).build(schema, collapsed)


def truncate_ancestral_boxes(elements: GraphElements) -> GraphElements:
    """Compact pass-through chains above a deep expansion.

    A non-root node with exactly one incoming and one outgoing edge whose child
    is not collapsed is removed; the chain's parent is linked to its child and
    the child remembers the removed labels in ``truncated_ancestors``.
    """
    nodes_by_id = {node.id: node for node in elements.nodes}
    incoming: Dict[str, List[GraphEdge]] = defaultdict(list)
    outgoing: Dict[str, List[GraphEdge]] = defaultdict(list)
    for edge in elements.edges:
        incoming[edge.target].append(edge)
        outgoing[edge.source].append(edge)

    candidates = set()
    for node in elements.nodes:
        if node.id == ROOT or node.kind == KIND_SUMMARY:
            continue
        if len(incoming[node.id]) != 1 or len(outgoing[node.id]) != 1:
            continue
        child = nodes_by_id.get(outgoing[node.id][0].target)
        if child is not None and not child.payload.get("is_collapsed"):
            candidates.add(node.id)

    visited = set()
    chains: List[List[str]] = []
    for node in elements.nodes:
        if node.id not in candidates or node.id in visited:
            continue
        start = node.id
        while True:
            parent_id = incoming[start][0].source
            if parent_id in candidates and parent_id not in visited and parent_id != node.id:
                start = parent_id
            else:
                break
        chain: List[str] = []
        current = start
        while current in candidates and current not in visited:
            chain.append(current)
            visited.add(current)
            current = outgoing[current][0].target
        chains.append(chain)

    removed_nodes = set()
    removed_edges = set()
    new_edges: List[GraphEdge] = []
    truncated_labels: Dict[str, List[str]] = {}
    for chain in chains:
        parent_id = incoming[chain[0]][0].source
        child_id = outgoing[chain[-1]][0].target
        for node_id in chain:
            removed_nodes.add(node_id)
            removed_edges.update(edge.id for edge in incoming[node_id] + outgoing[node_id])
        new_edges.append(
            GraphEdge(
                id=GraphOrchestrator.edge_id(parent_id, child_id),
                source=parent_id,
                target=child_id,
                label="truncated",
            )
        )
        truncated_labels[child_id] = [
            str(nodes_by_id[node_id].payload.get("label", node_id)) for node_id in chain
        ]

    if not chains:
        return elements

    nodes: List[GraphNode] = []
    for node in elements.nodes:
        if node.id in removed_nodes:
            continue
        if node.id in truncated_labels:
            previous = list(node.payload.get("truncated_ancestors", []))
            node.payload["truncated_ancestors"] = previous + truncated_labels[node.id]
        nodes.append(node)
    edges = [edge for edge in elements.edges if edge.id not in removed_edges] + new_edges
    logger.debug("Truncated %d ancestral chains", len(chains))
    return GraphElements(nodes=nodes, edges=edges)


def _spread(parent: Position, depth: int, count: int) -> List[Position]:
    if count <= 0:
        return []
    spacing = BASE_X_SPACING * SPACING_DECAY ** max(depth - 1, 0)
    start = parent.x - (count - 1) * spacing / 2
    return [Position(start + index * spacing, depth * LEVEL_SPACING) for index in range(count)]


def _split_scalars(
    children: List[SchemaCursor],
) -> Tuple[List[SchemaCursor], List[SchemaCursor]]:
    structured = [child for child in children if child.kind in (KIND_OBJECT, KIND_ARRAY)]
    scalars = [child for child in children if child.kind not in (KIND_OBJECT, KIND_ARRAY)]
    return structured, scalars


def _property_details(scalars: List[SchemaCursor], required_names: List[str]) -> List[Dict[str, Any]]:
    details: List[Dict[str, Any]] = []
    for child in scalars:
        fragment = child.fragment if isinstance(child.fragment, Mapping) else {}
        details.append(
            {
                "name": child.name,
                "type": type_label(child.fragment),
                "required": child.name in required_names,
                "format": fragment.get("format"),
                "description": fragment.get("description"),
                "reference": fragment.get("$ref"),
            }
        )
    return details


def _tuple_entries(fragment: Mapping[str, Any]) -> Optional[List[Any]]:
    for key in ("prefixItems", "items"):
        value = fragment.get(key)
        if isinstance(value, list):
            return value
    return None

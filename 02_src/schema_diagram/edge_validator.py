"""Last-step filter that drops edges pointing at absent nodes."""

import logging
from typing import Iterable, List

from .graph_model import GraphEdge, GraphNode

logger = logging.getLogger(__name__)


def validate_edges(nodes: Iterable[GraphNode], edges: Iterable[GraphEdge]) -> List[GraphEdge]:
    node_ids = {node.id for node in nodes}
    edge_list = list(edges)
    valid = [edge for edge in edge_list if edge.source in node_ids and edge.target in node_ids]
    dropped = len(edge_list) - len(valid)
    if dropped:
        logger.info("Removed %d orphaned edges", dropped)
    return valid

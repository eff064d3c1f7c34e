"""Edge validation phase; must stay last before publication."""

from typing import Any, Dict

from ..edge_validator import validate_edges
from ..pipeline import PipelinePhase


class EdgeValidationPhase(PipelinePhase):
    phase_name = "edge_validation"

    def run(self, context: Dict[str, Any]) -> Dict[str, Any]:
        nodes = context.get("nodes", [])
        edges = context.get("edges", [])
        valid_edges = validate_edges(nodes, edges)
        report = {
            "node_count": len(nodes),
            "edge_count": len(valid_edges),
            "dropped_edge_count": len(edges) - len(valid_edges),
        }
        return {"edges": valid_edges, "report": report}

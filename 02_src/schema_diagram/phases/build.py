"""Graph generation phase."""

from typing import Any, Dict

from ..builder import SchemaGraphBuilder
from ..config import DiagramConfig
from ..pipeline import PipelinePhase


class GraphBuildPhase(PipelinePhase):
    phase_name = "build"

    def run(self, context: Dict[str, Any]) -> Dict[str, Any]:
        builder = SchemaGraphBuilder(context.get("diagram_config") or DiagramConfig())
        elements = builder.build(context.get("schema"), context.get("collapsed"))
        return {"nodes": elements.nodes, "edges": elements.edges}

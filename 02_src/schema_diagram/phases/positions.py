"""Overlay of remembered positions onto freshly built nodes."""

from typing import Any, Dict

from ..pipeline import PipelinePhase


class PositionOverlayPhase(PipelinePhase):
    phase_name = "position_overlay"

    def run(self, context: Dict[str, Any]) -> Dict[str, Any]:
        positions = context.get("positions")
        nodes = context.get("nodes", [])
        if positions is None:
            return {"nodes": list(nodes)}
        return {"nodes": positions.apply(nodes)}

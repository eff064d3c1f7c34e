"""Inputs and the build -> positions -> edge validation pipeline."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .collapsed_state import CollapsedState
from .config import DiagramConfig
from .fingerprint import fingerprint
from .graph_model import GraphElements
from .phases import EdgeValidationPhase, GraphBuildPhase, PositionOverlayPhase
from .pipeline import PipelinePhase, PipelineRunner
from .position_memory import PositionMemory


@dataclass(frozen=True)
class RegenerationInputs:
    schema: Any = None
    collapsed: CollapsedState = field(default_factory=CollapsedState)
    config: DiagramConfig = field(default_factory=DiagramConfig)
    error: bool = False

    @property
    def is_degenerate(self) -> bool:
        return self.schema is None or self.error

    def fingerprints(self) -> Tuple[Optional[str], ...]:
        return (
            # Property order drives child order, so it counts as a change.
            fingerprint(self.schema, sort_keys=False),
            fingerprint(self.collapsed),
            fingerprint(self.config),
            "error" if self.error else "ok",
        )


def build_default_phases() -> List[PipelinePhase]:
    return [
        GraphBuildPhase(),
        PositionOverlayPhase(),
        EdgeValidationPhase(),
    ]


class RegenerationPipeline:
    def __init__(self, phases: Optional[List[PipelinePhase]] = None) -> None:
        self._runner = PipelineRunner(phases=phases or build_default_phases())
        self.last_report: Dict[str, Any] = {}

    def run(
        self, inputs: RegenerationInputs, positions: Optional[PositionMemory] = None
    ) -> GraphElements:
        final_context = self._runner.run(
            {
                "schema": inputs.schema,
                "collapsed": inputs.collapsed,
                "diagram_config": inputs.config,
                "positions": positions,
            }
        )
        self.last_report = dict(final_context.get("report", {}))
        return GraphElements(
            nodes=list(final_context.get("nodes", [])),
            edges=list(final_context.get("edges", [])),
        )

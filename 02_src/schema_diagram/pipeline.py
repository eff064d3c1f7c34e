"""Pipeline abstractions and the LangGraph-backed sequential runner."""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, List, Optional

from langgraph.graph import END, START, StateGraph
from typing_extensions import TypedDict

from .collapsed_state import CollapsedState
from .config import DiagramConfig
from .graph_model import GraphEdge, GraphNode
from .position_memory import PositionMemory


class RegenerationState(TypedDict, total=False):
    schema: Any
    collapsed: CollapsedState
    diagram_config: DiagramConfig
    positions: Optional[PositionMemory]
    nodes: List[GraphNode]
    edges: List[GraphEdge]
    report: Dict[str, Any]


class PipelinePhase(ABC):
    phase_name: str

    @abstractmethod
    def run(self, context: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError


class PipelineRunner:
    """Runs phases in declaration order as a linear LangGraph workflow."""

    def __init__(self, phases: Iterable[PipelinePhase]) -> None:
        self.phases: List[PipelinePhase] = list(phases)
        if not self.phases:
            raise ValueError("PipelineRunner needs at least one phase.")
        self._workflow = self._build_workflow()

    def run(self, context: Dict[str, Any]) -> Dict[str, Any]:
        return dict(self._workflow.invoke(dict(context)))

    def _build_workflow(self):
        graph = StateGraph(RegenerationState)
        previous = START
        for phase in self.phases:
            graph.add_node(phase.phase_name, self._checked(phase))
            graph.add_edge(previous, phase.phase_name)
            previous = phase.phase_name
        graph.add_edge(previous, END)
        return graph.compile()

    @staticmethod
    def _checked(phase: PipelinePhase) -> Callable[[RegenerationState], Dict[str, Any]]:
        def run_phase(state: RegenerationState) -> Dict[str, Any]:
            phase_result = phase.run(dict(state))
            if not isinstance(phase_result, dict):
                raise TypeError(f"Phase '{phase.phase_name}' must return dict context.")
            return phase_result

        return run_phase

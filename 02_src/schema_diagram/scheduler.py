"""Debounced, reentrancy-safe regeneration of the published diagram."""

import logging
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Optional, Tuple

from .collapsed_state import CollapsedState
from .config import DiagramConfig
from .fingerprint import fingerprints_match
from .graph_model import GraphElements, GraphNode, GraphSnapshot
from .paths import ROOT_PATH
from .position_memory import PositionMemory
from .regeneration import RegenerationInputs, RegenerationPipeline
from .timers import TimerHandle, TimerService

logger = logging.getLogger(__name__)

Publisher = Callable[[GraphSnapshot], None]
ToggleProposer = Callable[[str, bool], None]
Fingerprints = Tuple[Optional[str], ...]


class SchedulerState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    BUILDING = "building"


def _same_inputs(left: Optional[Fingerprints], right: Optional[Fingerprints]) -> bool:
    if left is None or right is None or len(left) != len(right):
        return False
    return all(fingerprints_match(a, b) for a, b in zip(left, right))


class RegenerationScheduler:
    """Decides when to rebuild the diagram and publishes numbered snapshots.

    ``idle`` -> ``pending`` on an observed input change, with every further
    change restarting the debounce window. Timer expiry runs the pipeline
    synchronously in ``building`` and publishes with the next generation.
    Changes observed while ``building`` are replayed through the debounce once
    the build has been published. Absent or erroneous schemas publish an empty
    graph immediately.
    """

    def __init__(
        self,
        publish: Publisher,
        timers: TimerService,
        pipeline: Optional[RegenerationPipeline] = None,
        positions: Optional[PositionMemory] = None,
        propose_toggle: Optional[ToggleProposer] = None,
        debounce_seconds: float = 0.5,
    ) -> None:
        self._publish = publish
        self._timers = timers
        self._pipeline = pipeline or RegenerationPipeline()
        self._positions = positions
        self._propose_toggle = propose_toggle
        self._debounce_seconds = debounce_seconds

        self._state = SchedulerState.IDLE
        self._generation = 0
        self._timer: Optional[TimerHandle] = None
        self._latest: Optional[RegenerationInputs] = None
        self._observed: Optional[Fingerprints] = None
        self._last_built: Optional[Fingerprints] = None
        self._changed_while_building = False
        self._force = False
        self._root_proposed = False
        self._disposed = False
        self.last_snapshot: Optional[GraphSnapshot] = None

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    def observe(
        self,
        schema: Any = None,
        collapsed: Optional[Mapping[str, Any]] = None,
        config: Optional[DiagramConfig] = None,
        error: bool = False,
    ) -> None:
        if self._disposed:
            return
        if not isinstance(collapsed, CollapsedState):
            collapsed = CollapsedState(collapsed)
        inputs = RegenerationInputs(
            schema=schema,
            collapsed=collapsed,
            config=config or DiagramConfig(),
            error=error,
        )
        self._latest = inputs
        if self._state is SchedulerState.BUILDING:
            self._changed_while_building = True
            return
        self._propose_root_if_undecided(inputs)
        self._evaluate()

    def record_positions(self, nodes: Iterable[GraphNode]) -> None:
        if self._positions is not None:
            self._positions.record(nodes)

    def clear_stored_positions(self) -> None:
        if self._positions is not None:
            self._positions.clear()
        self._force = True
        if self._state is SchedulerState.BUILDING:
            self._changed_while_building = True
        elif self._latest is not None and not self._disposed:
            self._evaluate()

    def flush(self) -> None:
        """Run a pending build now instead of waiting for the debounce."""
        if self._state is SchedulerState.PENDING:
            self._cancel_timer()
            self._run_build()

    def dispose(self) -> None:
        self._cancel_timer()
        self._disposed = True
        if self._state is SchedulerState.PENDING:
            self._state = SchedulerState.IDLE

    def _propose_root_if_undecided(self, inputs: RegenerationInputs) -> None:
        if self._root_proposed or self._propose_toggle is None or inputs.is_degenerate:
            return
        if inputs.collapsed.root_decided:
            return
        self._root_proposed = True
        self._propose_toggle(ROOT_PATH, True)

    def _evaluate(self) -> None:
        inputs = self._latest
        if inputs is None or self._state is SchedulerState.BUILDING:
            return
        current = inputs.fingerprints()
        if self._state is SchedulerState.PENDING:
            changed = not _same_inputs(current, self._observed)
        else:
            changed = self._force or not _same_inputs(current, self._last_built)
        self._observed = current
        if not changed:
            return

        if inputs.is_degenerate:
            self._cancel_timer()
            self._state = SchedulerState.BUILDING
            self._changed_while_building = False
            self._force = False
            self._finish(inputs, GraphElements())
            return
        self._schedule()

    def _schedule(self) -> None:
        self._cancel_timer()
        self._state = SchedulerState.PENDING
        self._timer = self._timers.call_later(self._debounce_seconds, self._on_timer)

    def _on_timer(self) -> None:
        self._timer = None
        if self._state is SchedulerState.PENDING and not self._disposed:
            self._run_build()

    def _run_build(self) -> None:
        inputs = self._latest
        self._state = SchedulerState.BUILDING
        self._changed_while_building = False
        self._force = False
        if self._positions is not None:
            self._positions.flush()
        try:
            elements = self._pipeline.run(inputs, self._positions)
        except Exception:
            logger.exception("Diagram regeneration failed; publishing an empty graph")
            elements = GraphElements()
        self._finish(inputs, elements)

    def _finish(self, inputs: RegenerationInputs, elements: GraphElements) -> None:
        self._generation += 1
        self._last_built = inputs.fingerprints()
        self._observed = self._last_built
        snapshot = GraphSnapshot(
            nodes=list(elements.nodes),
            edges=list(elements.edges),
            generation=self._generation,
        )
        self.last_snapshot = snapshot
        if self._positions is not None:
            self._positions.remember(snapshot.nodes)
        logger.info(
            "Publishing generation %d with %d nodes and %d edges",
            snapshot.generation,
            len(snapshot.nodes),
            len(snapshot.edges),
        )
        try:
            self._publish(snapshot)
        except Exception:
            logger.exception("Diagram consumer failed while handling generation %d", snapshot.generation)
        finally:
            self._state = SchedulerState.IDLE

        if self._changed_while_building:
            self._changed_while_building = False
            self._evaluate()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

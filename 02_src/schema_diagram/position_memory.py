"""Remembered node coordinates that survive graph regeneration."""

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Optional

from .graph_model import GraphNode, Position
from .timers import TimerHandle, TimerService

logger = logging.getLogger(__name__)


class PositionMemory:
    """Last-known position per node id.

    ``record`` coalesces bursts of drag reports: they are buffered and committed
    after ``quiet_seconds`` without further reports. Without a timer service, or
    with a zero quiet period, reports commit immediately.
    """

    def __init__(self, timers: Optional[TimerService] = None, quiet_seconds: float = 0.25) -> None:
        self._timers = timers
        self._quiet_seconds = quiet_seconds
        self._store: Dict[str, Position] = {}
        self._pending: Dict[str, Position] = {}
        self._timer: Optional[TimerHandle] = None

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._store

    def get(self, node_id: str) -> Optional[Position]:
        return self._store.get(node_id)

    @property
    def has_pending(self) -> bool:
        return bool(self._pending)

    def record(self, nodes: Iterable[GraphNode]) -> None:
        for node in nodes:
            self._pending[node.id] = Position(node.position.x, node.position.y)
        if not self._pending:
            return
        if self._timers is None or self._quiet_seconds <= 0:
            self.flush()
            return
        self._cancel_timer()
        self._timer = self._timers.call_later(self._quiet_seconds, self._on_quiet)

    def remember(self, nodes: Iterable[GraphNode]) -> None:
        """Store positions immediately, bypassing the quiet period."""
        for node in nodes:
            self._store[node.id] = Position(node.position.x, node.position.y)

    def flush(self) -> None:
        self._cancel_timer()
        if self._pending:
            self._store.update(self._pending)
            logger.debug("Committed %d node positions", len(self._pending))
            self._pending = {}

    def apply(self, nodes: Iterable[GraphNode]) -> List[GraphNode]:
        positioned: List[GraphNode] = []
        for node in nodes:
            remembered = self._store.get(node.id)
            positioned.append(node if remembered is None else replace(node, position=remembered))
        return positioned

    def clear(self) -> None:
        self._cancel_timer()
        self._pending = {}
        self._store = {}

    def _on_quiet(self) -> None:
        self._timer = None
        self.flush()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

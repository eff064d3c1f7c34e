"""One-object wiring of the synchronization engine for a rendering integration."""

import asyncio
import logging
from typing import Any, Iterable, List, Mapping, Optional

from .bulk_fold import BulkFoldController, ExpandHint, Proposal, ToggleProposer
from .collapsed_state import CollapsedState
from .config import DiagramConfig, SyncSettings
from .graph_model import GraphNode, GraphSnapshot
from .paths import PathCodec
from .position_memory import PositionMemory
from .regeneration import RegenerationPipeline
from .scheduler import Publisher, RegenerationScheduler
from .timers import AsyncioTimerService, TimerService

logger = logging.getLogger(__name__)


class DiagramSynchronizer:
    """Keeps a published diagram in step with a schema and its collapse state.

    The caller owns the collapse state: it persists every ``propose_toggle``
    call and reports the resulting mapping back through :meth:`update`.
    """

    def __init__(
        self,
        publish: Publisher,
        propose_toggle: ToggleProposer,
        settings: Optional[SyncSettings] = None,
        timers: Optional[TimerService] = None,
        widget: Optional[ExpandHint] = None,
        pipeline: Optional[RegenerationPipeline] = None,
    ) -> None:
        self.settings = settings or SyncSettings()
        if timers is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError as error:
                raise RuntimeError(
                    "DiagramSynchronizer needs a timer service when no asyncio event loop is running"
                ) from error
            timers = AsyncioTimerService(loop)
        self._propose_toggle = propose_toggle
        self._schema: Any = None
        self._collapsed = CollapsedState()
        self._config = self.settings.diagram

        self.positions = PositionMemory(timers=timers, quiet_seconds=self.settings.position_quiet_seconds)
        self.scheduler = RegenerationScheduler(
            publish=publish,
            timers=timers,
            pipeline=pipeline,
            positions=self.positions,
            propose_toggle=propose_toggle,
            debounce_seconds=self.settings.debounce_seconds,
        )
        self.bulk = BulkFoldController(
            propose_toggle=propose_toggle,
            max_paths=self.settings.bulk_max_paths,
            sibling_slice=self.settings.bulk_sibling_slice,
            widget=widget,
            timers=timers,
            stagger_seconds=self.settings.bulk_stagger_seconds,
            batch_size=self.settings.bulk_batch_size,
        )

    @property
    def generation(self) -> int:
        return self.scheduler.generation

    @property
    def last_snapshot(self) -> Optional[GraphSnapshot]:
        return self.scheduler.last_snapshot

    def update(
        self,
        schema: Any,
        collapsed: Optional[Mapping[str, Any]] = None,
        config: Optional[DiagramConfig] = None,
        error: bool = False,
    ) -> None:
        self._schema = schema
        self._collapsed = collapsed if isinstance(collapsed, CollapsedState) else CollapsedState(collapsed)
        if config is not None:
            self._config = config
        self.scheduler.observe(schema, self._collapsed, self._config, error)

    def toggle(self, path: str, collapsed: bool) -> List[Proposal]:
        """Handle one user expand/collapse click on ``path``.

        The toggle itself is proposed first; the bulk controller then adjusts
        the descendants as part of the same action.
        """
        target = PathCodec.parse(path)
        self._propose_toggle(target, collapsed)
        self._collapsed = self._collapsed.with_toggle(target, collapsed)
        return self.bulk_toggle(target, expanding=not collapsed)

    def bulk_toggle(
        self, base_path: str, expanding: bool, max_relative_depth: Optional[int] = None
    ) -> List[Proposal]:
        if max_relative_depth is None:
            max_relative_depth = self.settings.bulk_expand_depth
        if self._schema is None:
            logger.info("Bulk toggle at %s ignored: no schema loaded", base_path)
            return []
        return self.bulk.bulk_toggle(
            base_path,
            self._schema,
            expanding=expanding,
            max_relative_depth=max_relative_depth,
            collapsed=self._collapsed,
        )

    def clear_stored_positions(self) -> None:
        self.scheduler.clear_stored_positions()

    def report_positions(self, nodes: Iterable[GraphNode]) -> None:
        self.scheduler.record_positions(nodes)

    def flush(self) -> None:
        self.positions.flush()
        self.scheduler.flush()

    def dispose(self) -> None:
        self.bulk.cancel()
        self.positions.flush()
        self.scheduler.dispose()

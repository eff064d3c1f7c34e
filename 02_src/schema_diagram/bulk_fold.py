"""Bounded multi-level expand/collapse proposals around a toggled path."""

import logging
from collections import deque
from typing import Any, Callable, Deque, List, Mapping, Optional, Tuple

from typing_extensions import Protocol

from .collapsed_state import CollapsedState
from .paths import PathCodec, StructuralPath
from .schema_walk import SchemaCursor, resolve
from .timers import TimerHandle, TimerService

logger = logging.getLogger(__name__)

Proposal = Tuple[StructuralPath, bool]
ToggleProposer = Callable[[str, bool], None]

DEFAULT_MAX_PATHS = 100
DEFAULT_SIBLING_SLICE = 20


class ExpandHint(Protocol):
    """Imperative tree widget that can visually open or close a node."""

    def expand(self, path: List[str], is_expand: bool) -> None:
        ...


class BulkFoldController:
    """Turns one expand/collapse action into a bounded list of toggle proposals.

    The toggled node counts as relative level 1: expanding with
    ``max_relative_depth=N`` opens descendants down to ``depth(base) + N - 1``.
    Prior expansions deeper than ``depth(base) + N`` are folded back first.
    At most ``max_paths`` proposals are produced per call and only the first
    ``sibling_slice`` properties of any container are walked.
    """

    def __init__(
        self,
        propose_toggle: ToggleProposer,
        max_paths: int = DEFAULT_MAX_PATHS,
        sibling_slice: int = DEFAULT_SIBLING_SLICE,
        widget: Optional[ExpandHint] = None,
        timers: Optional[TimerService] = None,
        stagger_seconds: float = 0.0,
        batch_size: int = 10,
    ) -> None:
        if max_paths < 1:
            raise ValueError("max_paths must be at least 1")
        if sibling_slice < 1:
            raise ValueError("sibling_slice must be at least 1")
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self._propose_toggle = propose_toggle
        self._max_paths = max_paths
        self._sibling_slice = sibling_slice
        self._widget = widget
        self._timers = timers
        self._stagger_seconds = stagger_seconds
        self._batch_size = batch_size
        self._handles: List[TimerHandle] = []
        self._outstanding = 0

    @property
    def has_pending_batches(self) -> bool:
        return self._outstanding > 0

    def bulk_toggle(
        self,
        base_path: str,
        schema: Any,
        expanding: bool,
        max_relative_depth: int,
        collapsed: Optional[Mapping[str, Any]] = None,
    ) -> List[Proposal]:
        """Plan and emit proposals; returns the full plan in emission order.

        ``schema`` is the whole document; ``base_path`` is resolved inside it.
        """
        self.cancel()
        if not isinstance(collapsed, CollapsedState):
            collapsed = CollapsedState(collapsed)
        base = PathCodec.parse(base_path)

        if expanding:
            proposals = self._cleanup(base, collapsed, base.depth + max_relative_depth)
            if max_relative_depth > 1:
                cursor = resolve(schema, base)
                if cursor is None:
                    logger.info("No schema found at %s; skipping bulk expand", base)
                else:
                    limit = base.depth + max_relative_depth - 1
                    proposals.extend(self._expansion(cursor, collapsed, limit, len(proposals)))
        else:
            proposals = self._cleanup(base, collapsed, base.depth)

        logger.debug(
            "Bulk %s at %s planned %d proposals",
            "expand" if expanding else "collapse",
            base,
            len(proposals),
        )
        self._emit(proposals)
        return proposals

    def cancel(self) -> None:
        for handle in self._handles:
            handle.cancel()
        self._handles = []
        self._outstanding = 0

    def _cleanup(self, base: StructuralPath, collapsed: CollapsedState, deeper_than: int) -> List[Proposal]:
        stale = [
            path
            for path in collapsed.expanded_paths()
            if path.is_descendant_of(base) and path.depth > deeper_than
        ]
        stale.sort(key=lambda path: (-path.depth, path))
        if len(stale) > self._max_paths:
            logger.info("Folding only %d of %d expanded paths under %s", self._max_paths, len(stale), base)
        return [(path, True) for path in stale[: self._max_paths]]

    def _expansion(
        self, base: SchemaCursor, collapsed: CollapsedState, max_depth: int, used: int
    ) -> List[Proposal]:
        proposals: List[Proposal] = []
        budget = self._max_paths - used
        queue: Deque[SchemaCursor] = deque([base])
        while queue and len(proposals) < budget:
            cursor = queue.popleft()
            children = cursor.children()
            if len(children) > self._sibling_slice:
                logger.info(
                    "Bulk expand limited to first %d of %d children at %s",
                    self._sibling_slice,
                    len(children),
                    cursor.path,
                )
                children = children[: self._sibling_slice]
            for child in children:
                if child.path.depth > max_depth:
                    break
                if len(proposals) >= budget:
                    logger.info("Bulk expand reached the cap of %d paths", self._max_paths)
                    break
                if not collapsed.is_explicitly_expanded(child.path):
                    proposals.append((child.path, False))
                queue.append(child)
        return proposals

    def _emit(self, proposals: List[Proposal]) -> None:
        if not proposals:
            return
        if self._timers is None or self._stagger_seconds <= 0:
            self._emit_batch(proposals)
            return
        batches = [
            proposals[start : start + self._batch_size]
            for start in range(0, len(proposals), self._batch_size)
        ]
        self._emit_batch(batches[0])
        for index, batch in enumerate(batches[1:], start=1):
            handle = self._timers.call_later(index * self._stagger_seconds, self._batch_callback(batch))
            self._handles.append(handle)
            self._outstanding += 1

    def _batch_callback(self, batch: List[Proposal]) -> Callable[[], None]:
        def run() -> None:
            self._outstanding -= 1
            if self._outstanding == 0:
                self._handles = []
            self._emit_batch(batch)

        return run

    def _emit_batch(self, batch: List[Proposal]) -> None:
        for path, is_collapsed in batch:
            self._propose_toggle(path, is_collapsed)
            self._hint(path, not is_collapsed)

    def _hint(self, path: StructuralPath, is_expand: bool) -> None:
        if self._widget is None:
            return
        try:
            self._widget.expand(PathCodec.to_segments(path), is_expand)
        except Exception:
            logger.warning("Tree widget rejected expand hint for %s", path, exc_info=True)

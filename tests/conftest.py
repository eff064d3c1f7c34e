"""Pytest fixtures for the schema diagram synchronization tests."""

import heapq
import itertools
from typing import Callable, List, Tuple

import pytest


class ManualHandle:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualTimers:
    """Timer service driven by explicit ``advance`` calls instead of wall time."""

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: List[Tuple[float, int, ManualHandle, Callable[[], None]]] = []
        self._counter = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle()
        heapq.heappush(self._queue, (self.now + max(delay, 0.0), next(self._counter), handle, callback))
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for _, _, handle, _ in self._queue if not handle.cancelled)

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while self._queue and self._queue[0][0] <= target:
            due, _, handle, callback = heapq.heappop(self._queue)
            self.now = due
            if not handle.cancelled:
                callback()
        self.now = target


@pytest.fixture
def timers():
    """Return a deterministic timer service."""
    return ManualTimers()


@pytest.fixture
def scenario_schema():
    """Return the object schema used by the build and bulk-fold scenarios."""
    return {
        "type": "object",
        "properties": {
            "a": {"type": "string"},
            "b": {"type": "object", "properties": {"c": {"type": "string"}}},
        },
    }


@pytest.fixture
def nested_schema():
    """Return a schema with an array of objects and a deeper object chain."""
    return {
        "type": "object",
        "title": "Order",
        "required": ["id"],
        "properties": {
            "id": {"type": "string", "description": "Order identifier"},
            "lines": {
                "type": "array",
                "minItems": 1,
                "items": {
                    "type": "object",
                    "properties": {
                        "sku": {"type": "string"},
                        "qty": {"type": "integer"},
                    },
                },
            },
            "customer": {
                "type": "object",
                "properties": {
                    "address": {
                        "type": "object",
                        "properties": {"city": {"type": "string"}},
                    }
                },
            },
        },
    }


@pytest.fixture
def wide_schema():
    """Return an object schema with 250 sibling properties."""
    return {
        "type": "object",
        "properties": {f"field_{index:03d}": {"type": "string"} for index in range(250)},
    }

"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: runtime/coalescing.py.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from .background import BackgroundTaskGroup

T = TypeVar("T")


class RequestCoalescer:
    """
    Deduplicate identical in-flight requests.

    Waiters await the shared task through `asyncio.shield`, so a waiter
    that is cancelled (its client went away) does not cancel the work. When
    a background group is supplied, the orphaned task is adopted by it so
    the result still lands in the cache and any failure is reported.
    """

    def __init__(self, background: BackgroundTaskGroup | None = None) -> None:
        self._tasks: dict[str, asyncio.Task[Any]] = {}
        self._background = background

    def in_flight(self, key: str) -> bool:
        return key in self._tasks

    async def run(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        task = self._tasks.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._tasks[key] = task
            task.add_done_callback(lambda done: self._forget(key, done))

        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            if self._background is not None and not task.done():
                self._background.adopt(task, name=f"coalesced:{key}")
            raise

    def _forget(self, key: str, task: asyncio.Task[Any]) -> None:
        if self._tasks.get(key) is task:
            del self._tasks[key]

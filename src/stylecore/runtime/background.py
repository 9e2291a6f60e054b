"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Tracked fire-and-forget work whose failures are always reported.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine, Mapping
from typing import Any, Protocol

logger = logging.getLogger("stylecore.background")


class ErrorReporter(Protocol):
    """Reporting channel for failures nobody is awaiting."""

    def report(self, error: BaseException, context: Mapping[str, Any]) -> None:
        """Record one unobserved failure."""


class LoggingErrorReporter:
    """Default reporter writing failures with traceback to the module logger."""

    def report(self, error: BaseException, context: Mapping[str, Any]) -> None:
        logger.error(
            "Background task %s failed: %s",
            context.get("task", "<unnamed>"),
            error,
            exc_info=(type(error), error, error.__traceback__),
        )


class BackgroundTaskGroup:
    """
    Owner of background tasks spawned after a response has been returned.

    Every task is held in a set until it finishes, so it is never garbage
    collected mid-flight, and its exception (if any) is retrieved and passed
    to the reporter instead of surfacing as "Task exception was never
    retrieved". Cancellation is not a failure and is not reported.
    """

    def __init__(self, reporter: ErrorReporter | None = None) -> None:
        self._reporter: ErrorReporter = reporter or LoggingErrorReporter()
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, Any], *, name: str) -> asyncio.Task[Any]:
        """Schedule `coro` as a tracked background task."""
        return self.adopt(asyncio.create_task(coro, name=name), name=name)

    def adopt(self, task: asyncio.Task[Any], *, name: str | None = None) -> asyncio.Task[Any]:
        """Track an already running task, e.g. work orphaned by a cancelled caller."""
        if task in self._tasks:
            return task
        self._tasks.add(task)
        label = name or task.get_name()
        task.add_done_callback(lambda done: self._on_done(done, label))
        return task

    def _on_done(self, task: asyncio.Task[Any], label: str) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is None:
            return
        try:
            self._reporter.report(error, {"task": label})
        except Exception:
            logger.exception("Error reporter failed while reporting task %s", label)

    async def drain(self, timeout_s: float | None = None) -> None:
        """Wait for tracked tasks; failures are already routed to the reporter."""
        if not self._tasks:
            return
        _, still_running = await asyncio.wait(set(self._tasks), timeout=timeout_s)
        if still_running:
            logger.warning("%d background task(s) still running after drain", len(still_running))

    async def cancel_all(self) -> None:
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

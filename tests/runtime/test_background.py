from __future__ import annotations

import asyncio
import logging

import pytest

from stylecore.runtime import BackgroundTaskGroup, RequestCoalescer


def run_async(coro):
    return asyncio.run(coro)


class _Recorder:
    def __init__(self) -> None:
        self.reports: list[tuple[BaseException, dict]] = []

    def report(self, error, context) -> None:
        self.reports.append((error, dict(context)))


def test_failures_in_spawned_tasks_reach_the_reporter():
    async def scenario() -> None:
        recorder = _Recorder()
        group = BackgroundTaskGroup(recorder)

        async def refine() -> None:
            raise RuntimeError("refinement failed")

        async def fine() -> str:
            return "ok"

        group.spawn(refine(), name="refine:abc")
        group.spawn(fine(), name="fine")
        assert group.pending == 2

        await group.drain()

        assert group.pending == 0
        assert len(recorder.reports) == 1
        error, context = recorder.reports[0]
        assert str(error) == "refinement failed"
        assert context == {"task": "refine:abc"}

    run_async(scenario())


def test_cancelled_tasks_are_not_reported():
    async def scenario() -> None:
        recorder = _Recorder()
        group = BackgroundTaskGroup(recorder)
        group.spawn(asyncio.Event().wait(), name="forever")

        await group.cancel_all()

        assert group.pending == 0
        assert recorder.reports == []

    run_async(scenario())


def test_default_reporter_logs_with_traceback(caplog):
    async def scenario() -> None:
        group = BackgroundTaskGroup()

        async def boom() -> None:
            raise ValueError("bad palette")

        group.spawn(boom(), name="boom")
        await group.drain()

    with caplog.at_level(logging.ERROR, logger="stylecore.background"):
        run_async(scenario())

    record = next(r for r in caplog.records if r.name == "stylecore.background")
    assert "boom" in record.getMessage()
    assert record.exc_info is not None


def test_broken_reporter_does_not_break_the_group(caplog):
    class _Broken:
        def report(self, error, context) -> None:
            raise RuntimeError("reporter down")

    async def scenario() -> None:
        group = BackgroundTaskGroup(_Broken())

        async def boom() -> None:
            raise ValueError("x")

        group.spawn(boom(), name="boom")
        await group.drain()
        assert group.pending == 0

    with caplog.at_level(logging.ERROR, logger="stylecore.background"):
        run_async(scenario())
    assert any("Error reporter failed" in r.getMessage() for r in caplog.records)


def test_coalescer_runs_identical_requests_once():
    async def scenario() -> None:
        coalescer = RequestCoalescer()
        calls = 0
        gate = asyncio.Event()

        async def work() -> str:
            nonlocal calls
            calls += 1
            await gate.wait()
            return "looks"

        first = asyncio.create_task(coalescer.run("k", work))
        second = asyncio.create_task(coalescer.run("k", work))
        await asyncio.sleep(0)
        assert coalescer.in_flight("k")
        gate.set()

        assert await asyncio.gather(first, second) == ["looks", "looks"]
        assert calls == 1
        assert not coalescer.in_flight("k")

    run_async(scenario())


def test_cancelled_waiter_leaves_work_running_under_background_group():
    async def scenario() -> None:
        recorder = _Recorder()
        group = BackgroundTaskGroup(recorder)
        coalescer = RequestCoalescer(group)
        gate = asyncio.Event()
        finished: list[str] = []

        async def work() -> str:
            await gate.wait()
            finished.append("stored")
            return "looks"

        waiter = asyncio.create_task(coalescer.run("k", work))
        await asyncio.sleep(0)
        waiter.cancel()
        with pytest.raises(asyncio.CancelledError):
            await waiter

        assert group.pending == 1
        gate.set()
        await group.drain()

        assert finished == ["stored"]
        assert recorder.reports == []
        assert not coalescer.in_flight("k")

    run_async(scenario())


def test_coalesced_failure_reaches_every_waiter():
    async def scenario() -> None:
        coalescer = RequestCoalescer()

        async def work() -> str:
            await asyncio.sleep(0)
            raise RuntimeError("provider down")

        results = await asyncio.gather(
            coalescer.run("k", work), coalescer.run("k", work), return_exceptions=True
        )
        assert [str(r) for r in results] == ["provider down", "provider down"]

    run_async(scenario())

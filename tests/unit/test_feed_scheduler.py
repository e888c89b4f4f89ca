from __future__ import annotations

import asyncio
import time

import pytest

from mockfeed.feed.scheduler import RepeatingTimer


def test_timer_fires_repeatedly_until_cancelled() -> None:
    async def run() -> tuple[int, int]:
        calls: list[int] = []
        t = RepeatingTimer(0.01, lambda: calls.append(1), name="t")
        t.start()
        await asyncio.sleep(0.08)
        t.cancel()
        n = len(calls)
        await asyncio.sleep(0.05)
        return n, len(calls)

    fired, after_cancel = asyncio.run(run())
    assert fired >= 2
    assert after_cancel == fired


def test_failing_tick_does_not_stop_timer(caplog) -> None:
    async def run() -> int:
        calls: list[int] = []

        def tick() -> None:
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("boom")

        t = RepeatingTimer(0.01, tick, name="flaky")
        t.start()
        await asyncio.sleep(0.08)
        t.cancel()
        return len(calls)

    assert asyncio.run(run()) >= 2
    assert any(r.getMessage() == "timer_tick_failed" for r in caplog.records)


def test_slow_tick_skips_slots_and_logs_overrun(caplog) -> None:
    async def run() -> RepeatingTimer:
        # each tick blocks the loop for three periods
        t = RepeatingTimer(0.01, lambda: time.sleep(0.03), name="slow")
        t.start()
        await asyncio.sleep(0.1)
        t.cancel()
        return t

    t = asyncio.run(run())
    assert t.ticks >= 1
    assert t.overruns == t.ticks
    overruns = [r for r in caplog.records if r.getMessage() == "timer_tick_overrun"]
    assert overruns
    assert overruns[0].timer == "slow"
    assert overruns[0].skipped_slots >= 2


def test_fast_tick_does_not_report_overrun(caplog) -> None:
    async def run() -> RepeatingTimer:
        t = RepeatingTimer(0.05, lambda: None, name="fast")
        t.start()
        await asyncio.sleep(0.2)
        t.cancel()
        return t

    t = asyncio.run(run())
    assert t.ticks >= 2
    assert t.overruns == 0
    assert not [r for r in caplog.records if r.getMessage() == "timer_tick_overrun"]


def test_cancel_is_idempotent_and_start_after_cancel_is_ignored() -> None:
    async def run() -> bool:
        t = RepeatingTimer(0.01, lambda: None)
        t.start()
        t.cancel()
        t.cancel()
        t.start()
        return t.running

    assert asyncio.run(run()) is False


def test_start_requires_running_loop() -> None:
    t = RepeatingTimer(0.5, lambda: None)
    with pytest.raises(RuntimeError):
        t.start()


def test_interval_must_be_positive() -> None:
    with pytest.raises(ValueError):
        RepeatingTimer(0, lambda: None)

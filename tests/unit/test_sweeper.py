"""
Expiry sweeper tests.

Validates:
1. sweep_once() evicts idle conversations and expired dedup records
2. sweep failures are logged and isolated
3. the background loop keeps running after a failed cycle
4. start()/stop() manage exactly one task
"""

import asyncio
import logging
from datetime import timedelta

import pytest

from agent.sweeper import ExpirySweeper, SweepReport


@pytest.fixture
def sweeper(store, dedup, clock):
    return ExpirySweeper(
        store=store,
        dedup=dedup,
        retention=timedelta(hours=24),
        interval_s=0.01,
        clock=clock,
    )


class _BrokenStore:
    def __init__(self, fail_times: int = 1):
        self.fail_times = fail_times
        self.calls = 0

    def sweep_expired(self, retention, now):
        self.calls += 1
        if self.calls <= self.fail_times:
            raise RuntimeError("dictionary changed size during iteration")
        return 0


class TestSweepOnce:

    def test_removes_expired_state(self, sweeper, store, dedup, clock):
        store.get_or_create("old")
        dedup.mark_accepted("m-old")
        clock.advance(hours=2)
        store.get_or_create("recent")
        dedup.mark_accepted("m-recent")
        clock.advance(hours=23)

        report = sweeper.sweep_once()

        assert report == SweepReport(conversations_removed=1, dedup_removed=1)
        assert "old" not in store
        assert "recent" in store
        assert dedup.is_duplicate("m-recent")
        assert sweeper.cycles == 1

    def test_sweep_now_returns_conversation_count(self, sweeper, store, clock):
        store.get_or_create("a")
        store.get_or_create("b")
        clock.advance(hours=25)

        assert sweeper.sweep_now() == 2
        assert len(store) == 0

    def test_nothing_to_do(self, sweeper):
        assert sweeper.sweep_once() == SweepReport(0, 0)


class TestFailureIsolation:

    def test_failure_is_logged_not_raised(self, dedup, clock, caplog):
        sweeper = ExpirySweeper(_BrokenStore(), dedup, clock=clock)

        with caplog.at_level(logging.ERROR, logger="agent.sweeper"):
            report = sweeper.sweep_once()

        assert report is None
        assert sweeper.failures == 1
        assert "Expiry sweep failed" in caplog.text

    def test_sweep_now_after_failure_returns_zero(self, dedup, clock):
        sweeper = ExpirySweeper(_BrokenStore(), dedup, clock=clock)
        assert sweeper.sweep_now() == 0

    @pytest.mark.asyncio
    async def test_loop_survives_failed_cycle(self, dedup, clock):
        broken = _BrokenStore(fail_times=2)
        sweeper = ExpirySweeper(broken, dedup, interval_s=0.01, clock=clock)

        sweeper.start()
        try:
            for _ in range(100):
                if sweeper.cycles >= 2:
                    break
                await asyncio.sleep(0.01)
        finally:
            await sweeper.stop()

        assert sweeper.failures == 2
        assert sweeper.cycles >= 2


class TestLifecycle:

    @pytest.mark.asyncio
    async def test_background_sweep_evicts(self, sweeper, store, clock):
        store.get_or_create("old")
        clock.advance(hours=30)

        sweeper.start()
        try:
            for _ in range(100):
                if "old" not in store:
                    break
                await asyncio.sleep(0.01)
        finally:
            await sweeper.stop()

        assert "old" not in store

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self, sweeper):
        sweeper.start()
        task = sweeper._task
        sweeper.start()

        assert sweeper._task is task
        assert sweeper.is_running

        await sweeper.stop()
        assert not sweeper.is_running

    @pytest.mark.asyncio
    async def test_stop_without_start(self, sweeper):
        await sweeper.stop()
        assert not sweeper.is_running

"""
Unit Tests for Outreach Worker
Tests the tick loop, stop handling and consecutive-error circuit breaker
"""
import pytest
from unittest.mock import AsyncMock, MagicMock

from churchcomm.domain.models.scheduler_result import TickSummary
from churchcomm.workers.outreach_worker import OutreachWorker


def make_scheduler() -> MagicMock:
    scheduler = MagicMock()
    scheduler.run_tick = AsyncMock(return_value=TickSummary(total_executed=3))
    scheduler.executor.voice_provider.cleanup = AsyncMock()
    return scheduler


class TestOutreachWorker:
    """Tests for OutreachWorker.run"""

    @pytest.mark.asyncio
    async def test_runs_ticks_until_stopped(self):
        scheduler = make_scheduler()
        worker = OutreachWorker(scheduler=scheduler, tick_interval=0)

        async def tick():
            if scheduler.run_tick.await_count >= 2:
                worker.stop()
            return TickSummary(total_executed=3)

        scheduler.run_tick.side_effect = tick

        await worker.run()

        stats = worker.get_stats()
        assert stats["running"] is False
        assert stats["ticks_completed"] == 2
        assert stats["calls_started"] == 6
        scheduler.executor.voice_provider.cleanup.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_stops_after_consecutive_errors(self):
        scheduler = make_scheduler()
        scheduler.run_tick.side_effect = RuntimeError("supabase down")
        worker = OutreachWorker(scheduler=scheduler, tick_interval=0)
        worker.MAX_CONSECUTIVE_ERRORS = 3

        await worker.run()

        assert scheduler.run_tick.await_count == 3
        assert worker.get_stats()["ticks_failed"] == 3

    @pytest.mark.asyncio
    async def test_success_resets_error_count(self):
        scheduler = make_scheduler()
        worker = OutreachWorker(scheduler=scheduler, tick_interval=0)
        worker.MAX_CONSECUTIVE_ERRORS = 2
        outcomes = [RuntimeError("a"), TickSummary(), RuntimeError("b"), TickSummary(), RuntimeError("c"),
                    RuntimeError("d")]

        async def tick():
            outcome = outcomes.pop(0)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        scheduler.run_tick.side_effect = tick

        await worker.run()

        assert worker.get_stats()["ticks_completed"] == 2
        assert worker.get_stats()["ticks_failed"] == 4

"""
Tests for the debounced auto-sync scheduler.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from nomis_sync.sync import AutoSyncScheduler, SyncConfig, SyncResult


@pytest.fixture
def fake_orchestrator():
    orchestrator = MagicMock()
    orchestrator.config = SyncConfig(debounce_seconds=1.5)
    orchestrator.perform_incremental_sync = AsyncMock(return_value=SyncResult(success=True))
    return orchestrator


class TestAutoSyncScheduler:
    """Tests for edit coalescing."""

    @pytest.mark.asyncio
    async def test_burst_of_edits_runs_once(self, fake_orchestrator):
        scheduler = AutoSyncScheduler(fake_orchestrator, delay=0.05)
        for _ in range(5):
            scheduler.mark_dirty()
            await asyncio.sleep(0.01)

        await asyncio.sleep(0.15)

        assert fake_orchestrator.perform_incremental_sync.await_count == 1
        assert scheduler.last_result.success is True
        assert scheduler.is_pending is False

    @pytest.mark.asyncio
    async def test_nothing_runs_before_the_delay(self, fake_orchestrator):
        scheduler = AutoSyncScheduler(fake_orchestrator, delay=0.2)
        scheduler.mark_dirty()
        await asyncio.sleep(0.05)

        assert scheduler.is_pending is True
        fake_orchestrator.perform_incremental_sync.assert_not_awaited()
        await scheduler.close()

    @pytest.mark.asyncio
    async def test_separate_bursts_run_separately(self, fake_orchestrator):
        scheduler = AutoSyncScheduler(fake_orchestrator, delay=0.02)
        scheduler.mark_dirty()
        await asyncio.sleep(0.1)
        scheduler.mark_dirty()
        await asyncio.sleep(0.1)

        assert fake_orchestrator.perform_incremental_sync.await_count == 2

    @pytest.mark.asyncio
    async def test_cancel_drops_pending_run(self, fake_orchestrator):
        scheduler = AutoSyncScheduler(fake_orchestrator, delay=0.05)
        scheduler.mark_dirty()
        scheduler.cancel()
        await asyncio.sleep(0.1)

        fake_orchestrator.perform_incremental_sync.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_flush_runs_immediately(self, fake_orchestrator):
        scheduler = AutoSyncScheduler(fake_orchestrator, delay=10)
        scheduler.mark_dirty()

        result = await scheduler.flush()

        assert result.success is True
        assert fake_orchestrator.perform_incremental_sync.await_count == 1
        assert scheduler.is_pending is False

    @pytest.mark.asyncio
    async def test_flush_without_pending_edit(self, fake_orchestrator):
        scheduler = AutoSyncScheduler(fake_orchestrator, delay=10)
        assert await scheduler.flush() is None
        fake_orchestrator.perform_incremental_sync.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_close_cancels(self, fake_orchestrator):
        scheduler = AutoSyncScheduler(fake_orchestrator, delay=0.05)
        scheduler.mark_dirty()
        await scheduler.close()
        await asyncio.sleep(0.1)

        fake_orchestrator.perform_incremental_sync.assert_not_awaited()

    def test_default_delay_from_config(self, fake_orchestrator):
        scheduler = AutoSyncScheduler(fake_orchestrator)
        assert scheduler.delay == 1.5

    def test_default_debounce_is_three_seconds(self):
        assert SyncConfig().debounce_seconds == 3.0

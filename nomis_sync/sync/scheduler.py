"""
Debounced auto-sync.

Every local edit marks the dataset dirty. A burst of edits collapses into
a single incremental sync that runs once no new edit has arrived for the
debounce delay.
"""

from __future__ import annotations

import asyncio
import logging

from .engine import SyncOrchestrator, SyncResult

logger = logging.getLogger(__name__)


class AutoSyncScheduler:
    """Trailing-edge debounce in front of ``perform_incremental_sync``."""

    def __init__(self, orchestrator: SyncOrchestrator, delay: float | None = None):
        self.orchestrator = orchestrator
        self.delay = orchestrator.config.debounce_seconds if delay is None else delay
        self._pending: asyncio.Task[SyncResult | None] | None = None
        self.last_result: SyncResult | None = None

    @property
    def is_pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def mark_dirty(self) -> None:
        """Restart the quiet-period timer. Must be called from the event loop."""
        self.cancel()
        self._pending = asyncio.create_task(self._fire())

    async def _fire(self) -> SyncResult | None:
        try:
            await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            return None
        # Once the delay elapsed the run is no longer cancellable by new edits
        self._pending = None
        logger.debug("Auto-sync firing")
        self.last_result = await self.orchestrator.perform_incremental_sync()
        return self.last_result

    def cancel(self) -> None:
        """Drop the pending run, if it has not started yet."""
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    async def flush(self) -> SyncResult | None:
        """Run the pending sync now instead of waiting out the delay."""
        if not self.is_pending:
            return None
        self.cancel()
        self.last_result = await self.orchestrator.perform_incremental_sync()
        return self.last_result

    async def close(self) -> None:
        """Cancel the pending run and wait for it to wind down."""
        task = self._pending
        self.cancel()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

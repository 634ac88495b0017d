"""
Synchronization orchestrator.

Reconciles the local entity store with the remote store, one kind at a
time in a fixed order:
- Push: every local root of the kind is encoded and upserted (always total)
- Pull: remote records (all, or changed since the high-water mark) are
  merged into the store by id
- Save: the store is persisted before the next kind starts

At most one run is in flight. Progress is published as a small status
state machine (idle, syncing, success, error) to registered listeners.
"""

from __future__ import annotations

import asyncio
import logging
import os
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from ..codec import RemoteRecord, decode, encode
from ..exceptions import (
    LocalPersistenceError,
    NomisSyncError,
    PermissionDeniedError,
    RemoteTransportError,
    SyncError,
)
from ..logging_utils import SyncLoggerAdapter
from ..models import LOOKUP_KINDS, SYNC_ORDER, EntityKind, iter_descendants
from ..remote.client import MAX_BATCH_SIZE, PAGE_SIZE, RemoteStoreClient
from ..settings import SyncSettings
from ..store.base import EntityStore

logger = logging.getLogger(__name__)


class SyncState(Enum):
    """Current state of the sync orchestrator."""

    IDLE = "idle"
    SYNCING = "syncing"
    SUCCESS = "success"
    ERROR = "error"


class SyncMode(Enum):
    FULL = "full"
    INCREMENTAL = "incremental"


STATUS_MESSAGES = {
    SyncState.IDLE: "",
    SyncState.SYNCING: "Senkronize ediliyor...",
    SyncState.SUCCESS: "Senkronizasyon başarılı",
}


@dataclass(frozen=True)
class SyncStatus:
    """Snapshot of the observable sync status."""

    state: SyncState
    last_sync: datetime | None = None
    error: str | None = None

    @property
    def message(self) -> str:
        if self.state is SyncState.ERROR:
            return f"Hata: {self.error}"
        return STATUS_MESSAGES[self.state]

    @property
    def is_syncing(self) -> bool:
        return self.state is SyncState.SYNCING


@dataclass
class SyncResult:
    """Result of a sync run."""

    success: bool
    mode: SyncMode | None = None
    pushed: int = 0
    pulled: int = 0
    inserted: int = 0
    updated: int = 0
    errors: list[str] = field(default_factory=list)
    duration_ms: int = 0
    skipped: bool = False


@dataclass
class SyncConfig:
    """Configuration for the sync orchestrator."""

    # Quiet period before an auto-sync fires
    debounce_seconds: float = 3.0

    # Remote request limits
    max_batch_size: int = MAX_BATCH_SIZE
    page_size: int = PAGE_SIZE

    # How long SUCCESS stays visible before returning to IDLE
    full_success_display_seconds: float = 3.0
    incremental_success_display_seconds: float = 2.0

    @classmethod
    def from_env(cls) -> SyncConfig:
        """Create config from environment variables."""
        return cls(
            debounce_seconds=float(os.environ.get("NOMIS_SYNC_DEBOUNCE_SECONDS", "3.0")),
            max_batch_size=int(os.environ.get("NOMIS_SYNC_BATCH_SIZE", str(MAX_BATCH_SIZE))),
            page_size=int(os.environ.get("NOMIS_SYNC_PAGE_SIZE", str(PAGE_SIZE))),
        )


WriteGate = Callable[[], bool]
StatusListener = Callable[[SyncStatus], None]


def _allow_writes() -> bool:
    return True


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SyncOrchestrator:
    """Two-phase per-kind sync between an entity store and a remote store.

    Args:
        store: Local entity store
        client: Remote store client
        settings: Persistent settings holding the high-water mark
        config: Sync configuration
        can_write: Write gate; push and remote writes only happen when it allows
        clock: Time source for run timestamps
    """

    def __init__(
        self,
        store: EntityStore,
        client: RemoteStoreClient,
        settings: SyncSettings | None = None,
        config: SyncConfig | None = None,
        can_write: WriteGate | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.store = store
        self.client = client
        self.settings = settings
        self.config = config or SyncConfig()
        self.can_write = can_write or _allow_writes
        self.clock = clock or _utcnow

        self._status = SyncStatus(state=SyncState.IDLE)
        self._last_sync: datetime | None = None
        self._is_syncing = False
        self._listeners: list[StatusListener] = []
        self._reset_task: asyncio.Task[None] | None = None

    # =========================================================================
    # Status
    # =========================================================================

    @property
    def status(self) -> SyncStatus:
        return self._status

    @property
    def state(self) -> SyncState:
        return self._status.state

    @property
    def last_sync(self) -> datetime | None:
        return self._last_sync

    @property
    def is_syncing(self) -> bool:
        return self._is_syncing

    def add_listener(self, listener: StatusListener) -> Callable[[], None]:
        """Register a status listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _set_status(self, state: SyncState, error: str | None = None) -> None:
        self._status = SyncStatus(state=state, last_sync=self._last_sync, error=error)
        for listener in list(self._listeners):
            try:
                listener(self._status)
            except Exception:
                logger.exception("Status listener failed")

    def _schedule_idle(self, delay: float) -> None:
        self._cancel_idle()

        async def reset() -> None:
            await asyncio.sleep(delay)
            if self._status.state is SyncState.SUCCESS:
                self._set_status(SyncState.IDLE)

        self._reset_task = asyncio.create_task(reset())

    def _cancel_idle(self) -> None:
        if self._reset_task is not None and not self._reset_task.done():
            self._reset_task.cancel()
        self._reset_task = None

    async def load_state(self) -> None:
        """Restore the high-water mark from persistent settings."""
        if self.settings is None:
            return
        await self.settings.load()
        self._last_sync = self.settings.last_sync
        self._status = SyncStatus(state=self._status.state, last_sync=self._last_sync)
        logger.info(
            "Sync state loaded",
            extra={"last_sync": self._last_sync.isoformat() if self._last_sync else None},
        )

    # =========================================================================
    # Sync runs
    # =========================================================================

    async def perform_full_sync(self) -> SyncResult:
        """Push every local root and pull every remote record, for all kinds."""
        return await self._run(SyncMode.FULL)

    async def perform_incremental_sync(self) -> SyncResult:
        """Push every local root and pull only records changed since the last sync.

        Falls back to a full sync when no sync has succeeded yet.
        """
        if self._last_sync is None:
            logger.info("No previous sync, running full sync instead")
            return await self._run(SyncMode.FULL)
        return await self._run(SyncMode.INCREMENTAL)

    async def _run(self, mode: SyncMode) -> SyncResult:
        if self._is_syncing:
            logger.info("Sync already in progress, request skipped")
            return SyncResult(
                success=False, mode=mode, errors=["Sync already in progress"], skipped=True
            )

        self._is_syncing = True
        self._cancel_idle()
        started_at = self.clock()
        run_log = SyncLoggerAdapter(logger, {"run_id": uuid.uuid4().hex[:8], "mode": mode.value})
        result = SyncResult(success=False, mode=mode)
        since = self._last_sync if mode is SyncMode.INCREMENTAL else None

        self._set_status(SyncState.SYNCING)
        run_log.info("Sync started")

        try:
            await self.client.ensure_available()

            for kind in SYNC_ORDER:
                await self._sync_kind(kind, since, result, run_log)

            await self._commit_high_water_mark(started_at)
            result.success = True

        except NomisSyncError as e:
            result.errors.append(e.message)
            self._set_status(SyncState.ERROR, error=e.message)
            run_log.error(f"Sync failed: {e.message}", extra={"details": e.details})

        except Exception as e:
            result.errors.append(str(e))
            self._set_status(SyncState.ERROR, error=str(e))
            run_log.exception("Sync failed unexpectedly")

        else:
            self._set_status(SyncState.SUCCESS)
            if mode is SyncMode.FULL:
                self._schedule_idle(self.config.full_success_display_seconds)
            else:
                self._schedule_idle(self.config.incremental_success_display_seconds)

        finally:
            self._is_syncing = False
            result.duration_ms = int((self.clock() - started_at).total_seconds() * 1000)

        run_log.info(
            "Sync finished",
            extra={
                "success": result.success,
                "pushed": result.pushed,
                "pulled": result.pulled,
                "inserted": result.inserted,
                "updated": result.updated,
                "duration_ms": result.duration_ms,
            },
        )
        return result

    async def _sync_kind(
        self,
        kind: EntityKind,
        since: datetime | None,
        result: SyncResult,
        run_log: logging.LoggerAdapter,
    ) -> None:
        try:
            local_roots = self.store.fetch_all(kind)
            if self.can_write():
                records = [encode(entity) for entity in local_roots]
                result.pushed += await self.client.upsert_batch(records)
            else:
                run_log.info("Push skipped, write access denied", extra={"kind": kind.value})

            if since is None or kind in LOOKUP_KINDS:
                remote = await self.client.fetch_all(kind.value)
            else:
                remote = await self.client.fetch_modified_since(kind.value, since)
            result.pulled += len(remote)

            for record in remote:
                self._merge(kind, record, result)

            await self.store.save()

        except (RemoteTransportError, LocalPersistenceError) as e:
            raise SyncError(
                f"{kind.value} senkronizasyonu başarısız: {e.message}",
                kind=kind.value,
                cause=e,
            ) from e

        run_log.debug(
            "Kind synced",
            extra={"kind": kind.value, "local": len(local_roots), "remote": len(remote)},
        )

    def _merge(self, kind: EntityKind, record: RemoteRecord, result: SyncResult) -> None:
        existing = self.store.fetch_by_id(kind, record.record_id)

        if existing is not None:
            previous = list(iter_descendants(existing))
            decode(record, on_insert=self.store.insert, existing=existing)
            current = {id(node) for node in iter_descendants(existing)}
            # Children replaced by the remote snapshot leave the store
            for node in previous:
                if id(node) not in current:
                    self.store.delete(node)
            entity = existing
            result.updated += 1
        else:
            entity = decode(record, on_insert=self.store.insert)
            if entity is None:
                return
            result.inserted += 1

        if kind is EntityKind.WEEKLY_FORM and not entity.gunluk_veriler:
            for day in entity.create_weekly_days():
                self.store.insert(day)

    async def _commit_high_water_mark(self, started_at: datetime) -> None:
        if self.settings is not None:
            await self.settings.set_last_sync(started_at)
        self._last_sync = started_at

    # =========================================================================
    # Single-record operations
    # =========================================================================

    async def upload_single(self, entity: Any) -> None:
        """Upsert one root entity immediately."""
        if not self.can_write():
            raise PermissionDeniedError("upload")
        await self.client.upsert(encode(entity))
        logger.info("Uploaded record", extra={"kind": entity.kind.value, "record_id": entity.id})

    async def delete_remote(self, record_id: str, kind: EntityKind) -> None:
        """Delete one record from the remote store. Local data is untouched."""
        if not self.can_write():
            raise PermissionDeniedError("delete")
        await self.client.delete(kind.value, record_id)
        logger.info("Deleted remote record", extra={"kind": kind.value, "record_id": record_id})

    async def close(self) -> None:
        self._cancel_idle()

"""
Nomis Sync

Synchronization engine for the Nomis jewelry-workshop data: keeps the
local entity graph (weekly forms, acid batches, lock assemblies, notes,
model and company lists) consistent with a shared remote document store.

Provides:
- Record codec (root entity <-> flat remote record with a subgraph blob)
- Remote store client with chunked writes and paged reads
- Sync orchestrator with full and incremental runs
- Debounced auto-sync scheduler

Usage:

    >>> from nomis_sync import RemoteStoreClient, SyncOrchestrator, SyncSettings
    >>> from nomis_sync.remote.cosmos import CosmosDatabase
    >>> from nomis_sync.store.sqlite import SQLiteEntityStore
    >>> store = await SQLiteEntityStore.create()
    >>> client = RemoteStoreClient(await CosmosDatabase.create())
    >>> orchestrator = SyncOrchestrator(store, client, settings=SyncSettings())
    >>> await orchestrator.load_state()
    >>> result = await orchestrator.perform_incremental_sync()
"""

from .codec import RemoteRecord, decode, encode, record_id_for
from .exceptions import (
    AuthenticationError,
    LocalPersistenceError,
    NomisSyncError,
    PermissionDeniedError,
    RecordDecodeError,
    RemoteTransportError,
    RemoteUnavailableError,
    SyncError,
)
from .models import EntityKind
from .remote import AccountStatus, MemoryDatabase, RemoteDatabase, RemoteStoreClient
from .settings import SyncSettings
from .store import EntityStore, MemoryEntityStore
from .sync import (
    AutoSyncScheduler,
    SyncConfig,
    SyncMode,
    SyncOrchestrator,
    SyncResult,
    SyncState,
    SyncStatus,
)

__version__ = "0.1.0"

__all__ = [
    # Codec
    "RemoteRecord",
    "encode",
    "decode",
    "record_id_for",
    # Models
    "EntityKind",
    # Remote
    "AccountStatus",
    "RemoteDatabase",
    "RemoteStoreClient",
    "MemoryDatabase",
    # Local
    "EntityStore",
    "MemoryEntityStore",
    "SyncSettings",
    # Sync
    "SyncOrchestrator",
    "SyncConfig",
    "SyncMode",
    "SyncResult",
    "SyncState",
    "SyncStatus",
    "AutoSyncScheduler",
    # Exceptions
    "NomisSyncError",
    "RemoteUnavailableError",
    "RemoteTransportError",
    "AuthenticationError",
    "RecordDecodeError",
    "LocalPersistenceError",
    "PermissionDeniedError",
    "SyncError",
]

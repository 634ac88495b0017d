"""
Remote store access: adapter contract, client and the in-memory adapter.

Cosmos DB adapter:

    from nomis_sync.remote.cosmos import CosmosConfig, CosmosDatabase
"""

from .base import AccountStatus, RecordQuery, RemoteDatabase, SortField
from .client import MAX_BATCH_SIZE, PAGE_SIZE, UNAVAILABLE_MESSAGES, RemoteStoreClient
from .memory import MemoryDatabase

__all__ = [
    "AccountStatus",
    "MAX_BATCH_SIZE",
    "MemoryDatabase",
    "PAGE_SIZE",
    "RecordQuery",
    "RemoteDatabase",
    "RemoteStoreClient",
    "SortField",
    "UNAVAILABLE_MESSAGES",
]

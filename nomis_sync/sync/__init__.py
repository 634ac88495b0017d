"""
Sync orchestration and debounced auto-sync.
"""

from .engine import (
    STATUS_MESSAGES,
    SyncConfig,
    SyncMode,
    SyncOrchestrator,
    SyncResult,
    SyncState,
    SyncStatus,
)
from .scheduler import AutoSyncScheduler

__all__ = [
    "AutoSyncScheduler",
    "STATUS_MESSAGES",
    "SyncConfig",
    "SyncMode",
    "SyncOrchestrator",
    "SyncResult",
    "SyncState",
    "SyncStatus",
]

"""
Local entity stores.

SQLite persistence:

    from nomis_sync.store.sqlite import SQLiteConfig, SQLiteEntityStore
"""

from .base import EntityStore
from .memory import MemoryEntityStore

__all__ = [
    "EntityStore",
    "MemoryEntityStore",
]

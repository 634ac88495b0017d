"""
SQLite-backed entity store.

Keeps the identity map in memory and persists every root as its encoded
record (named fields plus subgraph blob) in a single ``records`` table.
Loading decodes the rows back through the record codec.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

import aiosqlite

from ..codec import RemoteRecord, decode, encode
from ..exceptions import LocalPersistenceError
from ..models import EntityKind, is_root
from .memory import MemoryEntityStore

logger = logging.getLogger(__name__)


@dataclass
class SQLiteConfig:
    """Configuration for SQLite storage."""

    db_path: str | Path = ":memory:"

    @classmethod
    def from_env(cls) -> SQLiteConfig:
        """Create config from environment variables."""
        return cls(db_path=os.environ.get("NOMIS_SQLITE_PATH", ":memory:"))


class SQLiteEntityStore(MemoryEntityStore):
    """Entity store persisted to a single SQLite file."""

    def __init__(self, config: SQLiteConfig | None = None):
        super().__init__()
        self.config = config or SQLiteConfig()
        self.conn: aiosqlite.Connection | None = None
        self._removed: set[tuple[str, str]] = set()
        self._initialized = False

    @classmethod
    async def create(cls, config: SQLiteConfig | None = None) -> SQLiteEntityStore:
        """Create, initialize and load a SQLite entity store."""
        store = cls(config)
        try:
            await store.load()
        except LocalPersistenceError:
            await store.close()
            raise
        return store

    async def initialize(self) -> None:
        """Open the connection and create the schema."""
        if self._initialized:
            return

        try:
            self.conn = await aiosqlite.connect(str(self.config.db_path))
            await self.conn.execute("""
                CREATE TABLE IF NOT EXISTS records (
                    kind TEXT NOT NULL,
                    id TEXT NOT NULL,
                    fields TEXT NOT NULL,
                    created_at TEXT,
                    saved_at TEXT DEFAULT (datetime('now')),
                    PRIMARY KEY (kind, id)
                )
            """)
            await self.conn.commit()
            self._initialized = True
            logger.info(f"SQLite entity store initialized: {self.config.db_path}")
        except aiosqlite.Error as e:
            raise LocalPersistenceError("initialize", str(self.config.db_path), e) from e

    def _get_conn(self) -> aiosqlite.Connection:
        if not self._initialized or self.conn is None:
            raise LocalPersistenceError(
                "get_connection", str(self.config.db_path), RuntimeError("Store not initialized")
            )
        return self.conn

    def insert(self, node: Any) -> None:
        super().insert(node)
        if is_root(node):
            self._removed.discard((node.kind.value, node.id))

    def delete(self, node: Any) -> None:
        if is_root(node) and self.fetch_by_id(node.kind, node.id) is node:
            self._removed.add((node.kind.value, node.id))
        super().delete(node)

    async def load(self) -> None:
        """Decode every persisted root into the identity map."""
        await self.initialize()
        conn = self._get_conn()

        try:
            async with conn.execute("SELECT kind, id, fields, created_at FROM records") as cursor:
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise LocalPersistenceError("load", str(self.config.db_path), e) from e

        loaded = 0
        for kind, record_id, fields_json, created_at in rows:
            try:
                fields = json.loads(fields_json)
            except ValueError:
                logger.warning(f"Skipping unreadable row {kind}/{record_id}")
                continue
            record = RemoteRecord(
                kind=kind,
                record_id=record_id,
                fields=fields if isinstance(fields, dict) else {},
                created_at=datetime.fromisoformat(created_at) if created_at else None,
            )
            try:
                existing = self.fetch_by_id(EntityKind(kind), record_id)
            except ValueError:
                continue
            if decode(record, on_insert=self.insert, existing=existing) is not None:
                loaded += 1

        logger.info("Loaded local entities", extra={"count": loaded})

    async def save(self) -> None:
        """Write every root and drop rows of deleted roots."""
        conn = self._get_conn()
        rows = []
        for kind in EntityKind:
            for entity in self.fetch_all(kind):
                record = encode(entity)
                rows.append(
                    (
                        record.kind,
                        record.record_id,
                        json.dumps(record.fields, ensure_ascii=False),
                        record.created_at.isoformat() if record.created_at else None,
                    )
                )

        try:
            if self._removed:
                await conn.executemany(
                    "DELETE FROM records WHERE kind = ? AND id = ?", list(self._removed)
                )
            await conn.executemany(
                """
                INSERT OR REPLACE INTO records (kind, id, fields, created_at)
                VALUES (?, ?, ?, ?)
                """,
                rows,
            )
            await conn.commit()
        except aiosqlite.Error as e:
            raise LocalPersistenceError("save", str(self.config.db_path), e) from e

        self._removed.clear()
        self.save_count += 1
        logger.debug("Saved local entities", extra={"count": len(rows)})

    async def close(self) -> None:
        if self.conn:
            await self.conn.close()
            self.conn = None
        self._initialized = False

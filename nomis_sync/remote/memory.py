"""
In-process remote database.

Behaves like a shared document store: the server assigns creation and
modification times, queries come back in pages with opaque cursors, and
every primitive call is recorded so tests can assert on chunking.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from ..codec import RemoteRecord
from ..exceptions import RemoteTransportError
from .base import AccountStatus, RecordQuery, RemoteDatabase, SortField

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(UTC)


class MemoryDatabase(RemoteDatabase):
    """Dictionary-backed remote database for tests and offline use."""

    def __init__(
        self,
        status: AccountStatus = AccountStatus.AVAILABLE,
        clock: Callable[[], datetime] | None = None,
    ):
        self.status = status
        self.clock = clock or _now
        self.calls: list[tuple[str, int]] = []
        self._records: dict[tuple[str, str], RemoteRecord] = {}
        self._closed = False

    def _check_open(self, operation: str) -> None:
        if self._closed:
            raise RemoteTransportError(operation, RuntimeError("database closed"))

    async def account_status(self) -> AccountStatus:
        self.calls.append(("account_status", 0))
        return self.status

    async def save_records(self, records: list[RemoteRecord]) -> None:
        self._check_open("save_records")
        self.calls.append(("save_records", len(records)))
        now = self.clock()
        for record in records:
            key = (record.kind, record.record_id)
            existing = self._records.get(key)
            if existing is not None:
                created_at = existing.created_at
            else:
                created_at = record.created_at or now
            self._records[key] = RemoteRecord(
                kind=record.kind,
                record_id=record.record_id,
                fields=copy.deepcopy(record.fields),
                created_at=created_at,
                modified_at=now,
            )

    async def delete_records(self, kind: str, record_ids: list[str]) -> None:
        self._check_open("delete_records")
        self.calls.append(("delete_records", len(record_ids)))
        for record_id in record_ids:
            self._records.pop((kind, record_id), None)

    async def query_page(
        self,
        query: RecordQuery,
        cursor: Any | None,
        limit: int,
    ) -> tuple[list[RemoteRecord], Any | None]:
        self._check_open("query_page")
        self.calls.append(("query_page", limit))

        matches = [r for r in self._records.values() if r.kind == query.kind]
        if query.modified_since is not None:
            matches = [r for r in matches if r.modified_at >= query.modified_since]
        if query.sort_by is SortField.MODIFIED:
            matches.sort(key=lambda r: r.modified_at, reverse=True)
        else:
            matches.sort(key=lambda r: r.created_at, reverse=True)

        offset = int(cursor) if cursor is not None else 0
        page = matches[offset : offset + limit]
        next_offset = offset + limit
        next_cursor = str(next_offset) if next_offset < len(matches) else None
        return [copy.deepcopy(r) for r in page], next_cursor

    # =========================================================================
    # Test helpers
    # =========================================================================

    def get(self, kind: str, record_id: str) -> RemoteRecord | None:
        record = self._records.get((kind, record_id))
        return copy.deepcopy(record) if record else None

    def count(self, kind: str | None = None) -> int:
        if kind is None:
            return len(self._records)
        return sum(1 for k, _ in self._records if k == kind)

    def put_raw(self, record: RemoteRecord) -> None:
        """Store a record verbatim, as another device would have written it."""
        now = self.clock()
        stored = copy.deepcopy(record)
        stored.created_at = stored.created_at or now
        stored.modified_at = stored.modified_at or now
        self._records[(record.kind, record.record_id)] = stored

    def calls_to(self, operation: str) -> list[int]:
        return [size for name, size in self.calls if name == operation]

    async def close(self) -> None:
        self._closed = True

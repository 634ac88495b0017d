"""
Remote store client.

Wraps a ``RemoteDatabase`` adapter with:
- Cached availability checks
- Chunked batch upsert/delete under the per-request record ceiling
- Cursor pagination for full and modified-since fetches
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import UTC, datetime

from ..codec import RemoteRecord
from ..exceptions import RemoteTransportError, RemoteUnavailableError
from .base import AccountStatus, RecordQuery, RemoteDatabase, SortField

logger = logging.getLogger(__name__)

# Remote per-request record ceiling
MAX_BATCH_SIZE = 400

# Records requested per query page
PAGE_SIZE = 100

UNAVAILABLE_MESSAGES = {
    AccountStatus.NO_ACCOUNT: (
        "Uzak depo hesabı mevcut değil. Lütfen bağlantı ayarlarından giriş yapın."
    ),
    AccountStatus.RESTRICTED: "Uzak depo erişimi kısıtlanmış.",
    AccountStatus.COULD_NOT_DETERMINE: "Uzak depo hesap durumu belirlenemedi.",
    AccountStatus.TEMPORARILY_UNAVAILABLE: (
        "Uzak depoya bağlantı kurulamadı. İnternet bağlantınızı kontrol edin."
    ),
}

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def chunked(items: list, size: int) -> Iterator[list]:
    """Split ``items`` into consecutive chunks of at most ``size``."""
    for start in range(0, len(items), size):
        yield items[start : start + size]


class RemoteStoreClient:
    """Batch and paging layer over a remote database adapter.

    Every operation verifies availability first and raises
    ``RemoteUnavailableError`` when no usable account exists.
    """

    def __init__(
        self,
        database: RemoteDatabase,
        max_batch_size: int = MAX_BATCH_SIZE,
        page_size: int = PAGE_SIZE,
    ):
        if max_batch_size < 1 or page_size < 1:
            raise ValueError("max_batch_size and page_size must be positive")
        self.database = database
        self.max_batch_size = max_batch_size
        self.page_size = page_size
        self._available = False
        self._last_status: AccountStatus | None = None

    @property
    def is_available(self) -> bool:
        return self._available

    @property
    def last_status(self) -> AccountStatus | None:
        return self._last_status

    async def check_availability(self) -> bool:
        """Check the remote account status.

        A positive answer is cached for the client's lifetime; while
        unavailable every call asks the remote again.
        """
        if self._available:
            return True

        try:
            status = await self.database.account_status()
        except RemoteTransportError as e:
            logger.warning(f"Account status check failed: {e}")
            status = AccountStatus.COULD_NOT_DETERMINE

        self._last_status = status
        self._available = status is AccountStatus.AVAILABLE
        if self._available:
            logger.info("Remote store available")
        else:
            logger.warning("Remote store unavailable", extra={"status": status.value})
        return self._available

    async def ensure_available(self) -> None:
        if await self.check_availability():
            return
        status = self._last_status or AccountStatus.COULD_NOT_DETERMINE
        raise RemoteUnavailableError(status.value, UNAVAILABLE_MESSAGES[status])

    # =========================================================================
    # Writes
    # =========================================================================

    async def upsert(self, record: RemoteRecord) -> None:
        await self.upsert_batch([record])

    async def upsert_batch(self, records: list[RemoteRecord]) -> int:
        """Upsert records in sequential chunks; aborts on the first failure.

        Returns:
            Number of records sent
        """
        if not records:
            return 0
        await self.ensure_available()

        sent = 0
        for chunk in chunked(records, self.max_batch_size):
            await self.database.save_records(chunk)
            sent += len(chunk)
            logger.debug(f"Upserted chunk of {len(chunk)} records ({sent}/{len(records)})")
        return sent

    async def delete(self, kind: str, record_id: str) -> None:
        await self.delete_batch(kind, [record_id])

    async def delete_batch(self, kind: str, record_ids: list[str]) -> int:
        """Delete records in sequential chunks; aborts on the first failure."""
        if not record_ids:
            return 0
        await self.ensure_available()

        deleted = 0
        for chunk in chunked(record_ids, self.max_batch_size):
            await self.database.delete_records(kind, chunk)
            deleted += len(chunk)
        logger.info("Deleted remote records", extra={"kind": kind, "count": deleted})
        return deleted

    # =========================================================================
    # Reads
    # =========================================================================

    async def fetch_all(self, kind: str) -> list[RemoteRecord]:
        """Fetch every record of ``kind``, newest creation first."""
        await self.ensure_available()
        records = await self._drain(RecordQuery(kind=kind, sort_by=SortField.CREATED))
        records.sort(key=lambda r: r.created_at or _EPOCH, reverse=True)
        return records

    async def fetch_modified_since(self, kind: str, since: datetime) -> list[RemoteRecord]:
        """Fetch records of ``kind`` changed after ``since``, newest change first."""
        await self.ensure_available()
        records = await self._drain(
            RecordQuery(kind=kind, sort_by=SortField.MODIFIED, modified_since=since)
        )
        records.sort(key=lambda r: r.modified_at or _EPOCH, reverse=True)
        return records

    async def _drain(self, query: RecordQuery) -> list[RemoteRecord]:
        records: list[RemoteRecord] = []
        cursor = None
        pages = 0
        while True:
            page, cursor = await self.database.query_page(query, cursor, self.page_size)
            records.extend(page)
            pages += 1
            if cursor is None:
                break
        logger.debug(
            "Query drained",
            extra={"kind": query.kind, "pages": pages, "records": len(records)},
        )
        return records

    async def close(self) -> None:
        await self.database.close()

"""
Tests for the remote store client: availability, chunking and paging.
"""

import uuid
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest
from conftest import T0

from nomis_sync.codec import RemoteRecord
from nomis_sync.exceptions import RemoteTransportError, RemoteUnavailableError
from nomis_sync.remote import (
    UNAVAILABLE_MESSAGES,
    AccountStatus,
    MemoryDatabase,
    RemoteStoreClient,
)


def make_records(count: int, kind: str = "Note") -> list[RemoteRecord]:
    return [
        RemoteRecord(kind=kind, record_id=str(uuid.uuid4()), fields={"title": f"n{i}"})
        for i in range(count)
    ]


class TestAvailability:
    """Tests for account status caching."""

    @pytest.mark.asyncio
    async def test_available_is_cached(self, client, remote_db):
        assert client.is_available is False
        assert await client.check_availability() is True
        remote_db.status = AccountStatus.NO_ACCOUNT
        assert await client.check_availability() is True
        assert remote_db.calls_to("account_status") == [0]
        assert client.is_available is True

    @pytest.mark.asyncio
    async def test_unavailable_is_rechecked(self, remote_db):
        remote_db.status = AccountStatus.NO_ACCOUNT
        client = RemoteStoreClient(remote_db)

        assert await client.check_availability() is False
        remote_db.status = AccountStatus.AVAILABLE
        assert await client.check_availability() is True
        assert len(remote_db.calls_to("account_status")) == 2

    @pytest.mark.asyncio
    async def test_operations_raise_when_unavailable(self, remote_db):
        remote_db.status = AccountStatus.NO_ACCOUNT
        client = RemoteStoreClient(remote_db)

        with pytest.raises(RemoteUnavailableError) as exc_info:
            await client.fetch_all("Note")
        assert exc_info.value.message == UNAVAILABLE_MESSAGES[AccountStatus.NO_ACCOUNT]
        assert exc_info.value.status == "no_account"

        with pytest.raises(RemoteUnavailableError):
            await client.upsert_batch(make_records(1))
        assert remote_db.count() == 0

    @pytest.mark.asyncio
    async def test_status_check_failure_is_undetermined(self):
        database = MemoryDatabase()
        database.account_status = AsyncMock(side_effect=RemoteTransportError("account_status"))
        client = RemoteStoreClient(database)

        assert await client.check_availability() is False
        assert client.last_status is AccountStatus.COULD_NOT_DETERMINE


class TestChunking:
    """Writes never exceed the per-request ceiling."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("count", "expected"),
        [
            (0, []),
            (1, [1]),
            (400, [400]),
            (401, [400, 1]),
            (850, [400, 400, 50]),
        ],
    )
    async def test_upsert_batch_chunks(self, client, remote_db, count, expected):
        sent = await client.upsert_batch(make_records(count))
        assert sent == count
        assert remote_db.calls_to("save_records") == expected
        assert remote_db.count("Note") == count

    @pytest.mark.asyncio
    async def test_empty_batch_makes_no_remote_call(self, client, remote_db):
        await client.upsert_batch([])
        await client.delete_batch("Note", [])
        assert remote_db.calls == []

    @pytest.mark.asyncio
    async def test_delete_batch_chunks(self, client, remote_db):
        records = make_records(850)
        await client.upsert_batch(records)
        deleted = await client.delete_batch("Note", [r.record_id for r in records])
        assert deleted == 850
        assert remote_db.calls_to("delete_records") == [400, 400, 50]
        assert remote_db.count() == 0

    @pytest.mark.asyncio
    async def test_failed_chunk_aborts_the_rest(self, remote_db):
        remote_db.save_records = AsyncMock(
            side_effect=[None, RemoteTransportError("save_records"), None]
        )
        client = RemoteStoreClient(remote_db)

        with pytest.raises(RemoteTransportError):
            await client.upsert_batch(make_records(1200))
        assert remote_db.save_records.await_count == 2

    @pytest.mark.asyncio
    async def test_custom_batch_size(self, remote_db):
        client = RemoteStoreClient(remote_db, max_batch_size=10)
        await client.upsert_batch(make_records(25))
        assert remote_db.calls_to("save_records") == [10, 10, 5]

    def test_rejects_non_positive_sizes(self, remote_db):
        with pytest.raises(ValueError):
            RemoteStoreClient(remote_db, max_batch_size=0)

    @pytest.mark.asyncio
    async def test_single_record_helpers(self, client, remote_db):
        record = make_records(1)[0]
        await client.upsert(record)
        assert remote_db.get("Note", record.record_id) is not None
        await client.delete("Note", record.record_id)
        assert remote_db.get("Note", record.record_id) is None


class TestPaging:
    """Reads drain every page."""

    @pytest.mark.asyncio
    async def test_fetch_all_drains_pages(self, client, remote_db):
        await client.upsert_batch(make_records(250))
        records = await client.fetch_all("Note")
        assert len(records) == 250
        assert len({r.record_id for r in records}) == 250
        assert remote_db.calls_to("query_page") == [100, 100, 100]

    @pytest.mark.asyncio
    async def test_fetch_all_newest_created_first(self, client, remote_db):
        for offset in (3, 1, 2):
            remote_db.put_raw(
                RemoteRecord(
                    kind="Note",
                    record_id=str(uuid.uuid4()),
                    fields={"title": str(offset)},
                    created_at=T0 + timedelta(days=offset),
                )
            )
        records = await client.fetch_all("Note")
        assert [r.fields["title"] for r in records] == ["3", "2", "1"]

    @pytest.mark.asyncio
    async def test_offset_less_created_at_sorts_with_the_rest(self, client, remote_db):
        remote_db.put_raw(
            RemoteRecord(
                kind="Note", record_id=str(uuid.uuid4()), created_at=datetime(2026, 1, 1)
            )
        )
        await client.upsert_batch(make_records(1))

        records = await client.fetch_all("Note")
        assert len(records) == 2
        assert records[1].created_at == datetime(2026, 1, 1, tzinfo=UTC)

    @pytest.mark.asyncio
    async def test_fetch_all_filters_kind(self, client):
        await client.upsert_batch(make_records(3, kind="Note") + make_records(2, kind="ModelItem"))
        assert len(await client.fetch_all("ModelItem")) == 2

    @pytest.mark.asyncio
    async def test_fetch_modified_since(self, client, remote_db, clock):
        old = make_records(2)
        await client.upsert_batch(old)
        since = clock()
        newer = make_records(1)
        await client.upsert_batch(newer)
        newest = make_records(1)
        await client.upsert_batch(newest)

        records = await client.fetch_modified_since("Note", since)
        assert [r.record_id for r in records] == [
            newest[0].record_id,
            newer[0].record_id,
        ]
        assert records[0].modified_at > records[1].modified_at

    @pytest.mark.asyncio
    async def test_empty_result(self, client, remote_db):
        assert await client.fetch_all("Note") == []
        assert remote_db.calls_to("query_page") == [100]

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self, remote_db):
        remote_db.query_page = AsyncMock(side_effect=RemoteTransportError("query_page"))
        client = RemoteStoreClient(remote_db)
        with pytest.raises(RemoteTransportError):
            await client.fetch_all("Note")

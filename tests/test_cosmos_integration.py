"""
Integration tests against a real Cosmos DB account.

Run with: pytest -m integration tests/test_cosmos_integration.py

Environment variables required:
- NOMIS_COSMOS_ENDPOINT: Cosmos DB endpoint URL

Authentication (one of):
- NOMIS_COSMOS_AUTH_METHOD=key and NOMIS_COSMOS_KEY
- Azure identity: DefaultAzureCredential

Optional:
- NOMIS_COSMOS_DATABASE: Database name (default: nomis)
- NOMIS_COSMOS_CONTAINER: Container name (default: nomis_records)
"""

import os

import pytest
from conftest import make_acid_batch, make_note

from nomis_sync.codec import decode, encode
from nomis_sync.remote import RemoteStoreClient
from nomis_sync.remote.cosmos import CosmosConfig, CosmosDatabase

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(
        not os.environ.get("NOMIS_COSMOS_ENDPOINT"),
        reason="NOMIS_COSMOS_ENDPOINT not set",
    ),
]


@pytest.fixture
async def client():
    database = await CosmosDatabase.create(CosmosConfig.from_env())
    client = RemoteStoreClient(database)
    yield client
    await client.close()


class TestCosmosRoundTrip:
    """Records survive a trip through the real container."""

    @pytest.mark.asyncio
    async def test_upsert_fetch_delete(self, client):
        notes = [make_note(f"entegrasyon {i}") for i in range(3)]
        ids = [note.id for note in notes]

        try:
            assert await client.check_availability() is True
            sent = await client.upsert_batch([encode(note) for note in notes])
            assert sent == 3

            records = [r for r in await client.fetch_all("Note") if r.record_id in ids]
            assert len(records) == 3
            assert all(r.modified_at is not None for r in records)

            decoded = {r.record_id: decode(r, lambda node: None) for r in records}
            for note in notes:
                assert decoded[note.id] == note
        finally:
            await client.delete_batch("Note", ids)

        remaining = [r for r in await client.fetch_all("Note") if r.record_id in ids]
        assert remaining == []

    @pytest.mark.asyncio
    async def test_blob_kind_round_trip(self, client):
        batch = make_acid_batch()
        try:
            await client.upsert(encode(batch))
            records = [
                r for r in await client.fetch_all("SarnelForm") if r.record_id == batch.id
            ]
            assert len(records) == 1
            assert decode(records[0], lambda node: None) == batch
        finally:
            await client.delete("SarnelForm", batch.id)

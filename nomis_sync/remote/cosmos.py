"""
Azure Cosmos DB remote database.

All record kinds share one container partitioned by ``/kind``, so every
query is a single-partition query. Documents look like::

    {"id": <root uuid>, "kind": "SarnelForm", "created_at": <iso>, "fields": {...}}

Modification times come from the server-maintained ``_ts`` property.
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from azure.cosmos import PartitionKey
from azure.cosmos.aio import ContainerProxy, CosmosClient, DatabaseProxy
from azure.core.exceptions import AzureError, ClientAuthenticationError
from azure.cosmos.exceptions import CosmosHttpResponseError, CosmosResourceNotFoundError
from azure.identity.aio import DefaultAzureCredential

from ..codec import RemoteRecord, as_utc
from ..exceptions import AuthenticationError, NomisSyncError, RemoteTransportError
from .base import AccountStatus, RecordQuery, RemoteDatabase, SortField

logger = logging.getLogger(__name__)

DEFAULT_DATABASE = "nomis"
DEFAULT_CONTAINER = "nomis_records"
PARTITION_KEY_PATH = "/kind"

# Auth methods
AUTH_KEY = "key"
AUTH_DEFAULT_CREDENTIAL = "default_credential"


@dataclass
class CosmosConfig:
    """Configuration for the Cosmos DB remote store."""

    endpoint: str
    database_name: str = DEFAULT_DATABASE
    container_name: str = DEFAULT_CONTAINER
    auth_method: str = AUTH_DEFAULT_CREDENTIAL
    key: str | None = None

    @classmethod
    def from_env(cls) -> CosmosConfig:
        """Create config from environment variables."""
        endpoint = os.environ.get("NOMIS_COSMOS_ENDPOINT")
        database = os.environ.get("NOMIS_COSMOS_DATABASE", DEFAULT_DATABASE)
        container = os.environ.get("NOMIS_COSMOS_CONTAINER", DEFAULT_CONTAINER)
        auth_method = os.environ.get("NOMIS_COSMOS_AUTH_METHOD", AUTH_DEFAULT_CREDENTIAL)
        key = os.environ.get("NOMIS_COSMOS_KEY")

        if not endpoint:
            raise AuthenticationError("cosmos", "NOMIS_COSMOS_ENDPOINT not set")

        if auth_method == AUTH_KEY and not key:
            raise AuthenticationError("cosmos", "NOMIS_COSMOS_KEY required for key auth")

        return cls(
            endpoint=endpoint,
            database_name=database,
            container_name=container,
            auth_method=auth_method,
            key=key,
        )


def to_document(record: RemoteRecord) -> dict[str, Any]:
    created_at = record.created_at or datetime.now(UTC)
    return {
        "id": record.record_id,
        "kind": record.kind,
        "created_at": created_at.isoformat(),
        "fields": record.fields,
    }


def from_document(doc: dict[str, Any]) -> RemoteRecord:
    created_at = None
    raw_created = doc.get("created_at")
    if isinstance(raw_created, str):
        try:
            created_at = as_utc(datetime.fromisoformat(raw_created))
        except ValueError:
            created_at = None
    modified_at = None
    if isinstance(doc.get("_ts"), (int, float)):
        modified_at = datetime.fromtimestamp(doc["_ts"], UTC)
    fields = doc.get("fields")
    return RemoteRecord(
        kind=doc.get("kind", ""),
        record_id=doc["id"],
        fields=fields if isinstance(fields, dict) else {},
        created_at=created_at,
        modified_at=modified_at,
    )


def build_query(query: RecordQuery) -> tuple[str, list[dict[str, object]]]:
    """Build the SQL text and parameters for a record query."""
    sql = "SELECT * FROM c WHERE c.kind = @kind"
    params: list[dict[str, object]] = [{"name": "@kind", "value": query.kind}]
    if query.modified_since is not None:
        # _ts has one-second resolution; re-pulling a boundary record is harmless
        sql += " AND c._ts >= @since"
        params.append({"name": "@since", "value": int(query.modified_since.timestamp())})
    if query.sort_by is SortField.MODIFIED:
        sql += " ORDER BY c._ts DESC"
    else:
        sql += " ORDER BY c.created_at DESC"
    return sql, params


class CosmosDatabase(RemoteDatabase):
    """Remote database backed by an Azure Cosmos DB container."""

    def __init__(self, config: CosmosConfig):
        self.config = config
        self._client: CosmosClient | None = None
        self._credential: DefaultAzureCredential | None = None
        self._database: DatabaseProxy | None = None
        self._container: ContainerProxy | None = None
        self._initialized = False

    @classmethod
    async def create(cls, config: CosmosConfig | None = None) -> CosmosDatabase:
        """
        Create and initialize a Cosmos remote database.

        Args:
            config: Cosmos configuration (from env if None)

        Returns:
            Initialized CosmosDatabase instance
        """
        if config is None:
            config = CosmosConfig.from_env()

        database = cls(config)
        try:
            await database.initialize()
        except NomisSyncError:
            await database.close()
            raise
        return database

    async def initialize(self) -> None:
        """Open the client and make sure database and container exist."""
        if self._initialized:
            return

        try:
            if self.config.auth_method == AUTH_KEY:
                if not self.config.key:
                    raise AuthenticationError("cosmos", "Key required for key auth")
                self._client = CosmosClient(self.config.endpoint, credential=self.config.key)
            else:
                self._credential = DefaultAzureCredential()
                self._client = CosmosClient(self.config.endpoint, credential=self._credential)

            self._database = await self._client.create_database_if_not_exists(
                id=self.config.database_name
            )
            self._container = await self._database.create_container_if_not_exists(
                id=self.config.container_name,
                partition_key=PartitionKey(path=PARTITION_KEY_PATH),
            )

            self._initialized = True
            logger.info(
                "Cosmos remote store initialized",
                extra={"endpoint": self.config.endpoint, "container": self.config.container_name},
            )

        except CosmosHttpResponseError as e:
            if e.status_code in (401, 403):
                raise AuthenticationError(self.config.endpoint, str(e)) from e
            raise RemoteTransportError("initialize", e) from e

        except ClientAuthenticationError as e:
            raise AuthenticationError(self.config.endpoint, str(e)) from e

        except AzureError as e:
            # Connection failures and client timeouts
            raise RemoteTransportError("initialize", e) from e

    def _get_container(self) -> ContainerProxy:
        if not self._initialized or self._container is None:
            raise RemoteTransportError("get_container", RuntimeError("Remote store not initialized"))
        return self._container

    async def account_status(self) -> AccountStatus:
        try:
            await self.initialize()
            await self._get_container().read()
        except AuthenticationError as e:
            logger.warning(f"Cosmos credentials rejected: {e.reason}")
            return AccountStatus.NO_ACCOUNT
        except CosmosHttpResponseError as e:
            if e.status_code == 403:
                return AccountStatus.RESTRICTED
            logger.warning(f"Cosmos account check failed: {e}")
            return AccountStatus.TEMPORARILY_UNAVAILABLE
        except (RemoteTransportError, AzureError) as e:
            logger.warning(f"Cosmos account check failed: {e}")
            return AccountStatus.TEMPORARILY_UNAVAILABLE
        return AccountStatus.AVAILABLE

    async def save_records(self, records: list[RemoteRecord]) -> None:
        container = self._get_container()
        try:
            await asyncio.gather(
                *(container.upsert_item(body=to_document(record)) for record in records)
            )
        except AzureError as e:
            raise RemoteTransportError("save_records", e) from e

    async def delete_records(self, kind: str, record_ids: list[str]) -> None:
        container = self._get_container()

        async def delete_one(record_id: str) -> None:
            try:
                await container.delete_item(item=record_id, partition_key=kind)
            except CosmosResourceNotFoundError:
                logger.debug(f"Record already gone: {kind}/{record_id}")

        try:
            await asyncio.gather(*(delete_one(record_id) for record_id in record_ids))
        except AzureError as e:
            raise RemoteTransportError("delete_records", e) from e

    async def query_page(
        self,
        query: RecordQuery,
        cursor: Any | None,
        limit: int,
    ) -> tuple[list[RemoteRecord], Any | None]:
        container = self._get_container()
        sql, params = build_query(query)

        try:
            pages = container.query_items(
                query=sql,
                parameters=params,  # type: ignore
                partition_key=query.kind,
                max_item_count=limit,
            ).by_page(cursor)
            docs: list[dict[str, Any]] = []
            async for page in pages:
                docs = [doc async for doc in page]
                break
            next_cursor = pages.continuation_token
        except AzureError as e:
            raise RemoteTransportError("query_page", e) from e

        return [from_document(doc) for doc in docs], next_cursor or None

    async def close(self) -> None:
        """Close Cosmos connections."""
        if self._client:
            await self._client.close()
            self._client = None

        if self._credential:
            await self._credential.close()
            self._credential = None

        self._database = None
        self._container = None
        self._initialized = False

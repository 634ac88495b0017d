"""
Remote database adapter contract.

Adapters expose the primitive operations of a shared document store. The
``RemoteStoreClient`` layers availability checks, chunking and pagination
on top of them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from ..codec import RemoteRecord


class AccountStatus(Enum):
    """Remote account / session status."""

    AVAILABLE = "available"
    NO_ACCOUNT = "no_account"
    RESTRICTED = "restricted"
    COULD_NOT_DETERMINE = "could_not_determine"
    TEMPORARILY_UNAVAILABLE = "temporarily_unavailable"


class SortField(Enum):
    CREATED = "created"
    MODIFIED = "modified"


@dataclass(frozen=True)
class RecordQuery:
    """Query over a single record kind.

    Attributes:
        kind: Record kind name
        sort_by: Timestamp to order by, always descending
        modified_since: Only records modified at or after this time
    """

    kind: str
    sort_by: SortField = SortField.CREATED
    modified_since: datetime | None = None


class RemoteDatabase(ABC):
    """Primitive operations of a remote document store.

    Implementations wrap their transport errors in ``RemoteTransportError``.
    """

    @abstractmethod
    async def account_status(self) -> AccountStatus:
        """Report whether a usable account/session exists."""

    @abstractmethod
    async def save_records(self, records: list[RemoteRecord]) -> None:
        """Upsert one chunk of records. Server assigns modification times."""

    @abstractmethod
    async def delete_records(self, kind: str, record_ids: list[str]) -> None:
        """Delete one chunk of records of a kind. Missing ids are ignored."""

    @abstractmethod
    async def query_page(
        self,
        query: RecordQuery,
        cursor: Any | None,
        limit: int,
    ) -> tuple[list[RemoteRecord], Any | None]:
        """Return one page of results and the cursor for the next page.

        A None cursor in the result means the query is exhausted.
        """

    async def close(self) -> None:
        """Release transport resources."""

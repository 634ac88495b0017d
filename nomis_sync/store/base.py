"""
Local entity store contract.

The store is the authoritative local copy of the object graph. Mutations
(``insert``/``delete``) are synchronous and happen on the event loop that
owns the store; ``save`` makes them durable.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from ..models import EntityKind


class EntityStore(ABC):
    """Identity-mapped store of root entities and their owned nodes."""

    @abstractmethod
    def insert(self, node: Any) -> None:
        """Register a node (root or child) and anything it already owns."""

    @abstractmethod
    def delete(self, node: Any) -> None:
        """Remove a node and, by cascade, every node it owns."""

    @abstractmethod
    def fetch_all(self, kind: EntityKind) -> list[Any]:
        """All root entities of a kind."""

    @abstractmethod
    def fetch_by_id(self, kind: EntityKind, entity_id: str) -> Any | None:
        """Root entity of a kind by id, or None."""

    @abstractmethod
    def contains(self, node: Any) -> bool:
        """True when this exact node object is registered."""

    @abstractmethod
    async def save(self) -> None:
        """Persist pending changes. Raises LocalPersistenceError."""

    async def load(self) -> None:
        """Populate the store from persistent storage, if any."""

    async def close(self) -> None:
        """Release resources."""

    async def __aenter__(self) -> EntityStore:
        await self.load()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

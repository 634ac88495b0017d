"""
In-memory entity store.
"""

from __future__ import annotations

import logging
from typing import Any

from ..models import EntityKind, is_root, iter_descendants
from .base import EntityStore

logger = logging.getLogger(__name__)


class MemoryEntityStore(EntityStore):
    """Identity map of roots per kind plus an index of every owned node.

    Deleting a node only drops index entries that still point at that very
    object, so a replacement node registered under the same id survives.
    """

    def __init__(self):
        self._roots: dict[EntityKind, dict[str, Any]] = {kind: {} for kind in EntityKind}
        self._nodes: dict[str, Any] = {}
        self.save_count = 0

    def insert(self, node: Any) -> None:
        if is_root(node):
            self._roots[node.kind][node.id] = node
        self._nodes[node.id] = node
        for child in iter_descendants(node):
            self._nodes[child.id] = child

    def delete(self, node: Any) -> None:
        for child in list(iter_descendants(node)):
            self._unindex(child)
        self._unindex(node)
        if is_root(node) and self._roots[node.kind].get(node.id) is node:
            del self._roots[node.kind][node.id]

    def _unindex(self, node: Any) -> None:
        if self._nodes.get(node.id) is node:
            del self._nodes[node.id]

    def fetch_all(self, kind: EntityKind) -> list[Any]:
        return list(self._roots[kind].values())

    def fetch_by_id(self, kind: EntityKind, entity_id: str) -> Any | None:
        return self._roots[kind].get(entity_id)

    def contains(self, node: Any) -> bool:
        return self._nodes.get(node.id) is node

    def get_node(self, node_id: str) -> Any | None:
        """Any registered node by id."""
        return self._nodes.get(node_id)

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    async def save(self) -> None:
        self.save_count += 1

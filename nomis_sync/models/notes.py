"""
Leaf root kinds: notes and the model/company lookup lists.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar

from .types import EntityKind, new_id, utcnow


@dataclass
class Note:
    kind: ClassVar[EntityKind] = EntityKind.NOTE

    id: str = field(default_factory=new_id)
    title: str = "Yeni Not"
    text: str = ""
    created_at: datetime = field(default_factory=utcnow)
    last_edited_at: datetime = field(default_factory=utcnow)
    created_by_username: str = ""
    last_edited_by_username: str = ""

    def children(self) -> list[Any]:
        return []


@dataclass
class ModelItem:
    """Lookup entry for lock models."""

    kind: ClassVar[EntityKind] = EntityKind.MODEL_ITEM

    name: str = ""
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)

    def children(self) -> list[Any]:
        return []


@dataclass
class CompanyItem:
    """Lookup entry for customer companies ("firma")."""

    kind: ClassVar[EntityKind] = EntityKind.COMPANY_ITEM

    name: str = ""
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)

    def children(self) -> list[Any]:
        return []

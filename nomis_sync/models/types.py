"""
Shared model types: entity kinds, form state and identity helpers.
"""

from __future__ import annotations

import time
import uuid
from datetime import UTC, datetime
from enum import Enum


class EntityKind(Enum):
    """Synchronized root kinds.

    Values are the record kind names used in the remote store.
    """

    WEEKLY_FORM = "YeniGunlukForm"
    ACID_BATCH = "SarnelForm"
    LOCK_ASSEMBLY = "KilitToplamaForm"
    NOTE = "Note"
    MODEL_ITEM = "ModelItem"
    COMPANY_ITEM = "CompanyItem"


# Kinds are always synced in this order.
SYNC_ORDER: tuple[EntityKind, ...] = (
    EntityKind.WEEKLY_FORM,
    EntityKind.ACID_BATCH,
    EntityKind.LOCK_ASSEMBLY,
    EntityKind.NOTE,
    EntityKind.MODEL_ITEM,
    EntityKind.COMPANY_ITEM,
)

# Small lookup lists, pulled in full even during incremental sync.
LOOKUP_KINDS: frozenset[EntityKind] = frozenset(
    {EntityKind.MODEL_ITEM, EntityKind.COMPANY_ITEM}
)


class FormState(Enum):
    """Lifecycle state of a batch form."""

    DRAFT = "draft"
    COMPLETED = "completed"


def new_id() -> str:
    """Generate a new immutable entity identifier."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(UTC)


_last_order_index = 0


def next_order_index() -> int:
    """Return a strictly increasing order key (microseconds since epoch)."""
    global _last_order_index
    candidate = int(time.time() * 1_000_000)
    if candidate <= _last_order_index:
        candidate = _last_order_index + 1
    _last_order_index = candidate
    return candidate

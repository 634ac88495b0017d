"""
Workshop entity model.

Six independent root kinds, each owning a private subgraph of children.
Every node carries an immutable UUID assigned at construction and lists
its owned children through an explicit ``children()`` method.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any, Union

from .batches import AcidBatchForm, AcidOutput, FireItem, LockAssemblyForm, LockItem
from .notes import CompanyItem, ModelItem, Note
from .types import (
    LOOKUP_KINDS,
    SYNC_ORDER,
    EntityKind,
    FormState,
    new_id,
    next_order_index,
    utcnow,
)
from .weekly import (
    CardType,
    DayEntry,
    ExpandableValue,
    FireAddition,
    OperationCard,
    OperationRow,
    TezgahCard,
    TezgahRow,
    WeeklyForm,
)

RootEntity = Union[WeeklyForm, AcidBatchForm, LockAssemblyForm, Note, ModelItem, CompanyItem]

ROOT_TYPES: dict[EntityKind, type] = {
    EntityKind.WEEKLY_FORM: WeeklyForm,
    EntityKind.ACID_BATCH: AcidBatchForm,
    EntityKind.LOCK_ASSEMBLY: LockAssemblyForm,
    EntityKind.NOTE: Note,
    EntityKind.MODEL_ITEM: ModelItem,
    EntityKind.COMPANY_ITEM: CompanyItem,
}


def iter_descendants(node: Any) -> Iterator[Any]:
    """Yield every node owned by ``node``, depth first, excluding itself."""
    for child in node.children():
        yield child
        yield from iter_descendants(child)


def is_root(node: Any) -> bool:
    return isinstance(getattr(node, "kind", None), EntityKind)


__all__ = [
    "AcidBatchForm",
    "AcidOutput",
    "CardType",
    "CompanyItem",
    "DayEntry",
    "EntityKind",
    "ExpandableValue",
    "FireAddition",
    "FireItem",
    "FormState",
    "LOOKUP_KINDS",
    "LockAssemblyForm",
    "LockItem",
    "ModelItem",
    "Note",
    "OperationCard",
    "OperationRow",
    "ROOT_TYPES",
    "RootEntity",
    "SYNC_ORDER",
    "TezgahCard",
    "TezgahRow",
    "WeeklyForm",
    "is_root",
    "iter_descendants",
    "new_id",
    "next_order_index",
    "utcnow",
]

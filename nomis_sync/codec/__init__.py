"""
Record codec: root entities <-> flat remote records.

Usage:
    record = encode(form)
    entity = decode(record, on_insert=store.insert)
    decode(record, on_insert=store.insert, existing=form)
"""

from __future__ import annotations

import logging
from typing import Any

from ..models import EntityKind
from .base import BLOB_FIELD, InsertCallback, KindCodec, RemoteRecord, as_utc, record_id_for
from .batches import AcidBatchCodec, LockAssemblyCodec
from .notes import CompanyItemCodec, ModelItemCodec, NoteCodec
from .weekly import WeeklyFormCodec

logger = logging.getLogger(__name__)

CODECS: dict[EntityKind, KindCodec] = {
    codec.kind: codec
    for codec in (
        WeeklyFormCodec(),
        AcidBatchCodec(),
        LockAssemblyCodec(),
        NoteCodec(),
        ModelItemCodec(),
        CompanyItemCodec(),
    )
}


def codec_for(kind: EntityKind | str) -> KindCodec:
    """Look up the codec of a root kind (enum or record kind name)."""
    return CODECS[EntityKind(kind)]


def encode(entity: Any) -> RemoteRecord:
    """Encode a root entity into its remote record. Never raises for data issues."""
    return codec_for(entity.kind).encode(entity)


def decode(
    record: RemoteRecord,
    on_insert: InsertCallback,
    existing: Any | None = None,
) -> Any | None:
    """Decode a remote record.

    With ``existing`` the record is merged onto that root (present scalars
    overwrite, the subgraph is replaced only when the blob parses) and
    ``on_insert`` sees only the freshly built descendants. Without it a new
    root is materialized and ``on_insert`` is called for the root first and
    then for every descendant. Returns None for records that cannot be
    decoded at all.
    """
    try:
        codec = codec_for(record.kind)
    except ValueError:
        logger.warning(
            "Unknown record kind skipped",
            extra={"kind": record.kind, "record_id": record.record_id},
        )
        return None
    return codec.decode(record, on_insert, existing)


__all__ = [
    "BLOB_FIELD",
    "CODECS",
    "RemoteRecord",
    "as_utc",
    "codec_for",
    "decode",
    "encode",
    "record_id_for",
]

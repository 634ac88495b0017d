"""
Record codec primitives.

A root entity maps to one flat ``RemoteRecord``: its direct scalar
attributes become named fields and its whole owned subgraph is serialized
into a single JSON blob field. Encoding is best-effort and never raises;
decoding skips broken fields and children instead of failing the record.
"""

from __future__ import annotations

import json
import logging
import uuid
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, ClassVar

from ..exceptions import RecordDecodeError
from ..models import EntityKind

logger = logging.getLogger(__name__)

# Field holding the JSON snapshot of a root's owned subgraph
BLOB_FIELD = "subgraphJSON"

InsertCallback = Callable[[Any], None]


@dataclass
class RemoteRecord:
    """Flat remote representation of one root entity.

    Attributes:
        kind: Record kind name (``EntityKind.value``)
        record_id: Remote identifier, derived from the root entity id
        fields: Named scalar fields plus the optional blob field
        created_at: Creation time assigned by the remote store
        modified_at: Last modification time assigned by the remote store
    """

    kind: str
    record_id: str
    fields: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
    modified_at: datetime | None = None

    def __post_init__(self) -> None:
        self.created_at = as_utc(self.created_at)
        self.modified_at = as_utc(self.modified_at)


def as_utc(value: datetime | None) -> datetime | None:
    """Read offset-less timestamps as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def record_id_for(entity: Any) -> str:
    """Derive the remote record id of a root entity."""
    return str(entity.id)


# =============================================================================
# Encoding helpers
# =============================================================================


class _Omit:
    """Marker for a value that cannot be serialized and is left out."""

    def __repr__(self) -> str:
        return "OMIT"


OMIT = _Omit()


def fmt_date(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    return OMIT


def fmt_number(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return OMIT
    if isinstance(value, float) and value != value:  # NaN
        return OMIT
    return value


def fmt_str(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    return OMIT


def fmt_bool(value: Any) -> Any:
    return value if isinstance(value, bool) else OMIT


def fmt_enum(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else OMIT


def compact(values: dict[str, Any]) -> dict[str, Any]:
    """Drop entries that could not be serialized."""
    return {key: value for key, value in values.items() if value is not OMIT}


# =============================================================================
# Decoding helpers
# =============================================================================


def to_float(raw: Any) -> float:
    if isinstance(raw, bool):
        raise TypeError("bool is not a number")
    if isinstance(raw, (int, float)):
        return float(raw)
    if isinstance(raw, str):
        return float(raw)
    raise TypeError(f"not a number: {raw!r}")


def to_int(raw: Any) -> int:
    if isinstance(raw, bool):
        raise TypeError("bool is not a number")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    if isinstance(raw, str):
        return int(raw)
    raise TypeError(f"not an integer: {raw!r}")


def to_str(raw: Any) -> str:
    if isinstance(raw, str):
        return raw
    raise TypeError(f"not a string: {raw!r}")


def to_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    # Older records store flags as 0/1
    if isinstance(raw, int):
        return raw == 1
    raise TypeError(f"not a flag: {raw!r}")


def to_datetime(raw: Any) -> datetime:
    if isinstance(raw, datetime):
        return as_utc(raw)
    if isinstance(raw, str):
        return as_utc(datetime.fromisoformat(raw))
    raise TypeError(f"not a timestamp: {raw!r}")


def valid_id(raw: Any) -> str | None:
    """Return ``raw`` unchanged when it is a well-formed UUID string."""
    if not isinstance(raw, str):
        return None
    try:
        uuid.UUID(raw)
    except ValueError:
        return None
    return raw


def apply_field(
    fields: dict[str, Any],
    key: str,
    target: Any,
    attr: str,
    parse: Callable[[Any], Any],
    nullable: bool = True,
) -> None:
    """Copy one field onto ``target`` if the record carries it.

    Absent keys and unparsable values leave the local value untouched.
    An explicit null clears nullable attributes only.
    """
    if key not in fields:
        return
    raw = fields[key]
    if raw is None:
        if nullable:
            setattr(target, attr, None)
        return
    try:
        setattr(target, attr, parse(raw))
    except (TypeError, ValueError) as e:
        logger.debug(f"Skipping field {key}: {e}")


def dump_blob(payload: dict[str, Any], record_id: str) -> str | None:
    try:
        return json.dumps(payload, ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as e:
        logger.warning(
            "Subgraph not serializable, blob omitted",
            extra={"record_id": record_id, "error": str(e)},
        )
        return None


def load_blob(record: RemoteRecord) -> dict[str, Any] | None:
    raw = record.fields.get(BLOB_FIELD)
    if not isinstance(raw, str):
        return None
    try:
        payload = json.loads(raw)
    except ValueError as e:
        logger.warning(
            "Malformed subgraph blob ignored",
            extra={"record_id": record.record_id, "error": str(e)},
        )
        return None
    if not isinstance(payload, dict):
        return None
    return payload


class DecodeContext:
    """Per-record state threaded through subgraph decoding."""

    def __init__(self, record_id: str, on_insert: InsertCallback):
        self.record_id = record_id
        self.on_insert = on_insert
        self.dropped = 0

    def require_id(self, raw: Any) -> str:
        if not isinstance(raw, dict):
            raise RecordDecodeError(self.record_id, "child is not an object")
        node_id = valid_id(raw.get("id"))
        if node_id is None:
            raise RecordDecodeError(self.record_id, f"child id invalid: {raw.get('id')!r}")
        return node_id

    def register(self, node: Any) -> Any:
        self.on_insert(node)
        return node

    def children(self, raw: Any, decode_one: Callable[[dict[str, Any]], Any]) -> list[Any]:
        """Decode a list of children, dropping broken ones, ordered by order key."""
        if not isinstance(raw, list):
            return []
        decoded = []
        for item in raw:
            try:
                decoded.append(decode_one(item))
            except RecordDecodeError as e:
                self.dropped += 1
                logger.debug(
                    "Dropped malformed child",
                    extra={"record_id": self.record_id, "reason": e.reason},
                )
        decoded.sort(key=lambda node: getattr(node, "order_index", 0))
        return decoded

    def optional_child(self, raw: Any, decode_one: Callable[[dict[str, Any]], Any]) -> Any:
        """Decode an optional sub-object; absent or broken yields None."""
        if raw is None:
            return None
        try:
            return decode_one(raw)
        except RecordDecodeError as e:
            self.dropped += 1
            logger.debug(
                "Dropped malformed child",
                extra={"record_id": self.record_id, "reason": e.reason},
            )
            return None


class KindCodec(ABC):
    """Explicit encode/decode pair for one root kind."""

    kind: ClassVar[EntityKind]
    entity_type: ClassVar[type]
    has_subgraph: ClassVar[bool] = False

    @abstractmethod
    def encode_fields(self, entity: Any) -> dict[str, Any]:
        """Scalar fields of the root, possibly containing OMIT markers."""

    @abstractmethod
    def apply_fields(self, entity: Any, fields: dict[str, Any]) -> None:
        """Merge present scalar fields onto the root."""

    def encode_subgraph(self, entity: Any) -> dict[str, Any]:
        return {}

    def decode_subgraph(self, entity: Any, payload: dict[str, Any], ctx: DecodeContext) -> None:
        """Replace the root's children from a parsed blob."""

    def encode(self, entity: Any) -> RemoteRecord:
        record_id = record_id_for(entity)
        created_at = getattr(entity, "created_at", None)
        record = RemoteRecord(
            kind=self.kind.value,
            record_id=record_id,
            fields=compact(self.encode_fields(entity)),
            created_at=created_at if isinstance(created_at, datetime) else None,
        )
        if self.has_subgraph:
            blob = dump_blob(self.encode_subgraph(entity), record_id)
            if blob is not None:
                record.fields[BLOB_FIELD] = blob
        return record

    def decode(
        self,
        record: RemoteRecord,
        on_insert: InsertCallback,
        existing: Any | None = None,
    ) -> Any | None:
        if existing is None:
            record_id = valid_id(record.record_id)
            if record_id is None:
                logger.warning(
                    "Record with malformed id skipped",
                    extra={"kind": record.kind, "record_id": record.record_id},
                )
                return None
            entity = self.entity_type(id=record_id)
            self.apply_fields(entity, record.fields)
            on_insert(entity)
        else:
            entity = existing
            self.apply_fields(entity, record.fields)

        if self.has_subgraph:
            payload = load_blob(record)
            if payload is not None:
                ctx = DecodeContext(record.record_id, on_insert)
                self.decode_subgraph(entity, payload, ctx)
                if ctx.dropped:
                    logger.warning(
                        f"Dropped {ctx.dropped} malformed children",
                        extra={"kind": record.kind, "record_id": record.record_id},
                    )
        return entity

"""
Codecs for blob-less kinds: notes and lookup lists.
"""

from __future__ import annotations

from typing import Any

from ..models import CompanyItem, EntityKind, ModelItem, Note
from .base import KindCodec, apply_field, fmt_date, fmt_str, to_datetime, to_str


class NoteCodec(KindCodec):
    kind = EntityKind.NOTE
    entity_type = Note

    def encode_fields(self, entity: Note) -> dict[str, Any]:
        return {
            "title": fmt_str(entity.title),
            "text": fmt_str(entity.text),
            "createdAt": fmt_date(entity.created_at),
            "lastEditedAt": fmt_date(entity.last_edited_at),
            "createdByUsername": fmt_str(entity.created_by_username),
            "lastEditedByUsername": fmt_str(entity.last_edited_by_username),
        }

    def apply_fields(self, entity: Note, fields: dict[str, Any]) -> None:
        apply_field(fields, "title", entity, "title", to_str, nullable=False)
        apply_field(fields, "text", entity, "text", to_str, nullable=False)
        apply_field(fields, "createdAt", entity, "created_at", to_datetime, nullable=False)
        apply_field(fields, "lastEditedAt", entity, "last_edited_at", to_datetime, nullable=False)
        apply_field(
            fields, "createdByUsername", entity, "created_by_username", to_str, nullable=False
        )
        apply_field(
            fields,
            "lastEditedByUsername",
            entity,
            "last_edited_by_username",
            to_str,
            nullable=False,
        )


class _LookupCodec(KindCodec):
    def encode_fields(self, entity: Any) -> dict[str, Any]:
        return {"name": fmt_str(entity.name), "createdAt": fmt_date(entity.created_at)}

    def apply_fields(self, entity: Any, fields: dict[str, Any]) -> None:
        apply_field(fields, "name", entity, "name", to_str, nullable=False)
        apply_field(fields, "createdAt", entity, "created_at", to_datetime, nullable=False)


class ModelItemCodec(_LookupCodec):
    kind = EntityKind.MODEL_ITEM
    entity_type = ModelItem


class CompanyItemCodec(_LookupCodec):
    kind = EntityKind.COMPANY_ITEM
    entity_type = CompanyItem

"""
Codecs for acid batch and lock assembly forms.
"""

from __future__ import annotations

from typing import Any

from ..models import (
    AcidBatchForm,
    AcidOutput,
    EntityKind,
    FireItem,
    FormState,
    LockAssemblyForm,
    LockItem,
)
from .base import (
    DecodeContext,
    KindCodec,
    apply_field,
    compact,
    fmt_date,
    fmt_enum,
    fmt_number,
    fmt_str,
    to_datetime,
    to_float,
    to_int,
    to_str,
)

LOCK_LISTS = {
    "kasa_items": "kasaItems",
    "dil_items": "dilItems",
    "yay_items": "yayItems",
    "kilit_items": "kilitItems",
}


class AcidBatchCodec(KindCodec):
    kind = EntityKind.ACID_BATCH
    entity_type = AcidBatchForm
    has_subgraph = True

    def encode_fields(self, entity: AcidBatchForm) -> dict[str, Any]:
        return {
            "createdAt": fmt_date(entity.created_at),
            "startedAt": fmt_date(entity.started_at),
            "endedAt": fmt_date(entity.ended_at),
            "karatAyar": fmt_number(entity.karat_ayar),
            "girisAltin": fmt_number(entity.giris_altin),
            "cikisAltin": fmt_number(entity.cikis_altin),
            "demirli1": fmt_number(entity.demirli_1),
            "demirli2": fmt_number(entity.demirli_2),
            "demirli3": fmt_number(entity.demirli_3),
            "demirliHurda": fmt_number(entity.demirli_hurda),
            "demirliToz": fmt_number(entity.demirli_toz),
            "state": fmt_enum(entity.state),
            "lastEditedAt": fmt_date(entity.last_edited_at),
            "createdByUsername": fmt_str(entity.created_by_username),
            "lastEditedByUsername": fmt_str(entity.last_edited_by_username),
        }

    def apply_fields(self, entity: AcidBatchForm, fields: dict[str, Any]) -> None:
        apply_field(fields, "createdAt", entity, "created_at", to_datetime, nullable=False)
        apply_field(fields, "startedAt", entity, "started_at", to_datetime)
        apply_field(fields, "endedAt", entity, "ended_at", to_datetime)
        apply_field(fields, "karatAyar", entity, "karat_ayar", to_int, nullable=False)
        apply_field(fields, "girisAltin", entity, "giris_altin", to_float)
        apply_field(fields, "cikisAltin", entity, "cikis_altin", to_float)
        apply_field(fields, "demirli1", entity, "demirli_1", to_float)
        apply_field(fields, "demirli2", entity, "demirli_2", to_float)
        apply_field(fields, "demirli3", entity, "demirli_3", to_float)
        apply_field(fields, "demirliHurda", entity, "demirli_hurda", to_float)
        apply_field(fields, "demirliToz", entity, "demirli_toz", to_float)
        apply_field(fields, "state", entity, "state", FormState, nullable=False)
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

    def encode_subgraph(self, entity: AcidBatchForm) -> dict[str, Any]:
        return {
            "asitCikislari": [
                compact(
                    {
                        "id": item.id,
                        "valueGr": fmt_number(item.value_gr),
                        "note": fmt_str(item.note),
                        "createdAt": fmt_date(item.created_at),
                        "orderIndex": fmt_number(item.order_index),
                    }
                )
                for item in entity.asit_cikislari
            ],
            "extraFireItems": [
                compact(
                    {
                        "id": item.id,
                        "value": fmt_number(item.value),
                        "note": fmt_str(item.note),
                        "createdAt": fmt_date(item.created_at),
                        "orderIndex": fmt_number(item.order_index),
                    }
                )
                for item in entity.extra_fire_items
            ],
        }

    def decode_subgraph(
        self, entity: AcidBatchForm, payload: dict[str, Any], ctx: DecodeContext
    ) -> None:
        def acid_output(raw: dict[str, Any]) -> AcidOutput:
            node = AcidOutput(id=ctx.require_id(raw))
            apply_field(raw, "valueGr", node, "value_gr", to_float, nullable=False)
            apply_field(raw, "note", node, "note", to_str)
            apply_field(raw, "createdAt", node, "created_at", to_datetime, nullable=False)
            apply_field(raw, "orderIndex", node, "order_index", to_int, nullable=False)
            return ctx.register(node)

        def fire_item(raw: dict[str, Any]) -> FireItem:
            node = FireItem(id=ctx.require_id(raw))
            apply_field(raw, "value", node, "value", to_float, nullable=False)
            apply_field(raw, "note", node, "note", to_str)
            apply_field(raw, "createdAt", node, "created_at", to_datetime, nullable=False)
            apply_field(raw, "orderIndex", node, "order_index", to_int, nullable=False)
            return ctx.register(node)

        entity.asit_cikislari = ctx.children(payload.get("asitCikislari"), acid_output)
        entity.extra_fire_items = ctx.children(payload.get("extraFireItems"), fire_item)


class LockAssemblyCodec(KindCodec):
    kind = EntityKind.LOCK_ASSEMBLY
    entity_type = LockAssemblyForm
    has_subgraph = True

    def encode_fields(self, entity: LockAssemblyForm) -> dict[str, Any]:
        return {
            "model": fmt_str(entity.model),
            "firma": fmt_str(entity.firma),
            "ayar": fmt_number(entity.ayar),
            "startedAt": fmt_date(entity.started_at),
            "endedAt": fmt_date(entity.ended_at),
            "createdAt": fmt_date(entity.created_at),
            "lastEditedAt": fmt_date(entity.last_edited_at),
            "createdByUsername": fmt_str(entity.created_by_username),
            "lastEditedByUsername": fmt_str(entity.last_edited_by_username),
        }

    def apply_fields(self, entity: LockAssemblyForm, fields: dict[str, Any]) -> None:
        apply_field(fields, "model", entity, "model", to_str)
        apply_field(fields, "firma", entity, "firma", to_str)
        apply_field(fields, "ayar", entity, "ayar", to_int)
        apply_field(fields, "startedAt", entity, "started_at", to_datetime)
        apply_field(fields, "endedAt", entity, "ended_at", to_datetime)
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

    def encode_subgraph(self, entity: LockAssemblyForm) -> dict[str, Any]:
        return {
            key: [
                compact(
                    {
                        "id": item.id,
                        "girisAdet": fmt_number(item.giris_adet),
                        "girisGram": fmt_number(item.giris_gram),
                        "cikisGram": fmt_number(item.cikis_gram),
                        "cikisAdet": fmt_number(item.cikis_adet),
                        "createdAt": fmt_date(item.created_at),
                        "orderIndex": fmt_number(item.order_index),
                    }
                )
                for item in getattr(entity, attr)
            ]
            for attr, key in LOCK_LISTS.items()
        }

    def decode_subgraph(
        self, entity: LockAssemblyForm, payload: dict[str, Any], ctx: DecodeContext
    ) -> None:
        def lock_item(raw: dict[str, Any]) -> LockItem:
            node = LockItem(id=ctx.require_id(raw))
            apply_field(raw, "girisAdet", node, "giris_adet", to_float)
            apply_field(raw, "girisGram", node, "giris_gram", to_float)
            apply_field(raw, "cikisGram", node, "cikis_gram", to_float)
            apply_field(raw, "cikisAdet", node, "cikis_adet", to_float)
            apply_field(raw, "createdAt", node, "created_at", to_datetime, nullable=False)
            apply_field(raw, "orderIndex", node, "order_index", to_int, nullable=False)
            return ctx.register(node)

        for attr, key in LOCK_LISTS.items():
            setattr(entity, attr, ctx.children(payload.get(key), lock_item))

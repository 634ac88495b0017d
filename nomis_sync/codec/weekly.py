"""
Codec for weekly forms.

Root scalars are stored as named fields; days, cards, rows, fire additions
and expandable values travel together in the subgraph blob.
"""

from __future__ import annotations

from typing import Any

from ..models import (
    CardType,
    DayEntry,
    EntityKind,
    ExpandableValue,
    FireAddition,
    OperationCard,
    OperationRow,
    TezgahCard,
    TezgahRow,
    WeeklyForm,
    utcnow,
)
from .base import (
    DecodeContext,
    KindCodec,
    apply_field,
    compact,
    fmt_bool,
    fmt_date,
    fmt_number,
    fmt_str,
    to_bool,
    to_datetime,
    to_float,
    to_int,
    to_str,
)

# DayEntry attribute -> blob key for the two bench cards
TEZGAH_SLOTS = {
    "tezgah_karti_1": "tezgahKarti1",
    "tezgah_karti_2": "tezgahKarti2",
}

# DayEntry attribute -> (blob key, card type) for operation cards
OPERATION_SLOTS = {
    "cila_karti": ("cilaKarti", CardType.CILA),
    "ocak_karti": ("ocakKarti", CardType.OCAK),
    "patlatma_karti": ("patlatmaKarti", CardType.PATLATMA),
    "tambur_karti": ("tamburKarti", CardType.TAMBUR),
    "makine_kesme_karti": ("makineKesmeKarti", CardType.MAKINE_KESME),
    "testere_kesme_karti": ("testereKesmeKarti", CardType.TESTERE_KESME),
}


def _encode_value(value: ExpandableValue) -> dict[str, Any]:
    return compact(
        {
            "id": value.id,
            "value": fmt_number(value.value),
            "eklemeTarihi": fmt_date(value.ekleme_tarihi),
            "orderIndex": fmt_number(value.order_index),
        }
    )


def _encode_fire(fire: FireAddition) -> dict[str, Any]:
    return compact(
        {
            "id": fire.id,
            "value": fmt_number(fire.value),
            "aciklama": fmt_str(fire.aciklama),
            "createdAt": fmt_date(fire.created_at),
            "orderIndex": fmt_number(fire.order_index),
        }
    )


def _encode_tezgah_row(row: TezgahRow) -> dict[str, Any]:
    return compact(
        {
            "id": row.id,
            "aciklamaGiris": fmt_str(row.aciklama_giris),
            "girisValue": fmt_number(row.giris_value),
            "cikisValue": fmt_number(row.cikis_value),
            "aciklamaCikis": fmt_str(row.aciklama_cikis),
            "ayar": fmt_number(row.ayar),
            "aciklamaGirisTarihi": fmt_date(row.aciklama_giris_tarihi),
            "aciklamaCikisTarihi": fmt_date(row.aciklama_cikis_tarihi),
            "createdAt": fmt_date(row.created_at),
            "orderIndex": fmt_number(row.order_index),
        }
    )


def _encode_operation_row(row: OperationRow) -> dict[str, Any]:
    encoded = compact(
        {
            "id": row.id,
            "aciklamaGiris": fmt_str(row.aciklama_giris),
            "aciklamaCikis": fmt_str(row.aciklama_cikis),
            "aciklamaGirisTarihi": fmt_date(row.aciklama_giris_tarihi),
            "aciklamaCikisTarihi": fmt_date(row.aciklama_cikis_tarihi),
            "aciklamaFire": fmt_str(row.aciklama_fire),
            "aciklamaFireTarihi": fmt_date(row.aciklama_fire_tarihi),
            "ayar": fmt_number(row.ayar),
            "createdAt": fmt_date(row.created_at),
            "orderIndex": fmt_number(row.order_index),
        }
    )
    encoded["girisValues"] = [_encode_value(v) for v in row.giris_values]
    encoded["cikisValues"] = [_encode_value(v) for v in row.cikis_values]
    return encoded


def _encode_tezgah_card(card: TezgahCard) -> dict[str, Any]:
    encoded = compact(
        {
            "id": card.id,
            "createdAt": fmt_date(card.created_at),
            "ayar": fmt_number(card.ayar),
        }
    )
    encoded["satirlar"] = [_encode_tezgah_row(row) for row in card.satirlar]
    encoded["fireEklemeleri"] = [_encode_fire(fire) for fire in card.fire_eklemeleri]
    return encoded


def _encode_operation_card(card: OperationCard) -> dict[str, Any]:
    encoded = compact(
        {
            "id": card.id,
            "cardType": card.card_type.value,
            "createdAt": fmt_date(card.created_at),
            "ayar": fmt_number(card.ayar),
        }
    )
    encoded["satirlar"] = [_encode_operation_row(row) for row in card.satirlar]
    encoded["fireEklemeleri"] = [_encode_fire(fire) for fire in card.fire_eklemeleri]
    return encoded


def _encode_day(day: DayEntry) -> dict[str, Any]:
    encoded = compact(
        {
            "id": day.id,
            "tarih": fmt_date(day.tarih),
            "orderIndex": fmt_number(day.order_index),
        }
    )
    for attr, key in TEZGAH_SLOTS.items():
        card = getattr(day, attr)
        if card is not None:
            encoded[key] = _encode_tezgah_card(card)
    for attr, (key, _) in OPERATION_SLOTS.items():
        card = getattr(day, attr)
        if card is not None:
            encoded[key] = _encode_operation_card(card)
    return encoded


class _SubgraphDecoder:
    """Builds fresh day/card/row nodes from blob dictionaries."""

    def __init__(self, ctx: DecodeContext):
        self.ctx = ctx

    def value(self, raw: dict[str, Any]) -> ExpandableValue:
        node = ExpandableValue(id=self.ctx.require_id(raw))
        apply_field(raw, "value", node, "value", to_float)
        apply_field(raw, "eklemeTarihi", node, "ekleme_tarihi", to_datetime, nullable=False)
        apply_field(raw, "orderIndex", node, "order_index", to_int, nullable=False)
        return self.ctx.register(node)

    def fire(self, raw: dict[str, Any]) -> FireAddition:
        node = FireAddition(id=self.ctx.require_id(raw))
        apply_field(raw, "value", node, "value", to_float)
        apply_field(raw, "aciklama", node, "aciklama", to_str, nullable=False)
        apply_field(raw, "createdAt", node, "created_at", to_datetime, nullable=False)
        apply_field(raw, "orderIndex", node, "order_index", to_int, nullable=False)
        return self.ctx.register(node)

    def tezgah_row(self, raw: dict[str, Any]) -> TezgahRow:
        node = TezgahRow(id=self.ctx.require_id(raw))
        apply_field(raw, "aciklamaGiris", node, "aciklama_giris", to_str, nullable=False)
        apply_field(raw, "girisValue", node, "giris_value", to_float)
        apply_field(raw, "cikisValue", node, "cikis_value", to_float)
        apply_field(raw, "aciklamaCikis", node, "aciklama_cikis", to_str, nullable=False)
        apply_field(raw, "ayar", node, "ayar", to_int)
        apply_field(raw, "aciklamaGirisTarihi", node, "aciklama_giris_tarihi", to_datetime)
        apply_field(raw, "aciklamaCikisTarihi", node, "aciklama_cikis_tarihi", to_datetime)
        apply_field(raw, "createdAt", node, "created_at", to_datetime, nullable=False)
        apply_field(raw, "orderIndex", node, "order_index", to_int, nullable=False)
        return self.ctx.register(node)

    def operation_row(self, raw: dict[str, Any]) -> OperationRow:
        node = OperationRow(id=self.ctx.require_id(raw))
        apply_field(raw, "aciklamaGiris", node, "aciklama_giris", to_str, nullable=False)
        apply_field(raw, "aciklamaCikis", node, "aciklama_cikis", to_str, nullable=False)
        apply_field(raw, "aciklamaGirisTarihi", node, "aciklama_giris_tarihi", to_datetime)
        apply_field(raw, "aciklamaCikisTarihi", node, "aciklama_cikis_tarihi", to_datetime)
        apply_field(raw, "aciklamaFire", node, "aciklama_fire", to_str, nullable=False)
        apply_field(raw, "aciklamaFireTarihi", node, "aciklama_fire_tarihi", to_datetime)
        apply_field(raw, "ayar", node, "ayar", to_int)
        apply_field(raw, "createdAt", node, "created_at", to_datetime, nullable=False)
        apply_field(raw, "orderIndex", node, "order_index", to_int, nullable=False)
        self.ctx.register(node)
        node.giris_values = self.ctx.children(raw.get("girisValues"), self.value)
        node.cikis_values = self.ctx.children(raw.get("cikisValues"), self.value)
        return node

    def tezgah_card(self, raw: dict[str, Any]) -> TezgahCard:
        node = TezgahCard(id=self.ctx.require_id(raw))
        apply_field(raw, "createdAt", node, "created_at", to_datetime, nullable=False)
        apply_field(raw, "ayar", node, "ayar", to_int)
        self.ctx.register(node)
        node.satirlar = self.ctx.children(raw.get("satirlar"), self.tezgah_row)
        node.fire_eklemeleri = self.ctx.children(raw.get("fireEklemeleri"), self.fire)
        return node

    def operation_card(self, card_type: CardType):
        def decode(raw: dict[str, Any]) -> OperationCard:
            node = OperationCard(card_type=card_type, id=self.ctx.require_id(raw))
            apply_field(raw, "createdAt", node, "created_at", to_datetime, nullable=False)
            apply_field(raw, "ayar", node, "ayar", to_int)
            self.ctx.register(node)
            node.satirlar = self.ctx.children(raw.get("satirlar"), self.operation_row)
            node.fire_eklemeleri = self.ctx.children(raw.get("fireEklemeleri"), self.fire)
            return node

        return decode

    def day(self, raw: dict[str, Any]) -> DayEntry:
        node = DayEntry(tarih=utcnow(), id=self.ctx.require_id(raw))
        apply_field(raw, "tarih", node, "tarih", to_datetime, nullable=False)
        apply_field(raw, "orderIndex", node, "order_index", to_int, nullable=False)
        self.ctx.register(node)
        for attr, key in TEZGAH_SLOTS.items():
            setattr(node, attr, self.ctx.optional_child(raw.get(key), self.tezgah_card))
        for attr, (key, card_type) in OPERATION_SLOTS.items():
            setattr(
                node,
                attr,
                self.ctx.optional_child(raw.get(key), self.operation_card(card_type)),
            )
        return node


class WeeklyFormCodec(KindCodec):
    kind = EntityKind.WEEKLY_FORM
    entity_type = WeeklyForm
    has_subgraph = True

    def encode_fields(self, entity: WeeklyForm) -> dict[str, Any]:
        return {
            "baslamaTarihi": fmt_date(entity.baslama_tarihi),
            "bitisTarihi": fmt_date(entity.bitis_tarihi),
            "createdAt": fmt_date(entity.created_at),
            "lastEditedAt": fmt_date(entity.last_edited_at),
            "isCompleted": fmt_bool(entity.is_completed),
            "isWeeklyCompleted": fmt_bool(entity.is_weekly_completed),
            "weeklyCompletedAt": fmt_date(entity.weekly_completed_at),
            "createdByUsername": fmt_str(entity.created_by_username),
            "lastEditedByUsername": fmt_str(entity.last_edited_by_username),
        }

    def apply_fields(self, entity: WeeklyForm, fields: dict[str, Any]) -> None:
        # bitisTarihi is derived from baslamaTarihi and not read back
        apply_field(fields, "baslamaTarihi", entity, "baslama_tarihi", to_datetime, nullable=False)
        apply_field(fields, "createdAt", entity, "created_at", to_datetime, nullable=False)
        apply_field(fields, "lastEditedAt", entity, "last_edited_at", to_datetime)
        apply_field(fields, "isCompleted", entity, "is_completed", to_bool, nullable=False)
        apply_field(
            fields, "isWeeklyCompleted", entity, "is_weekly_completed", to_bool, nullable=False
        )
        apply_field(fields, "weeklyCompletedAt", entity, "weekly_completed_at", to_datetime)
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

    def encode_subgraph(self, entity: WeeklyForm) -> dict[str, Any]:
        return {"gunlukVeriler": [_encode_day(day) for day in entity.gunluk_veriler]}

    def decode_subgraph(
        self, entity: WeeklyForm, payload: dict[str, Any], ctx: DecodeContext
    ) -> None:
        decoder = _SubgraphDecoder(ctx)
        entity.gunluk_veriler = ctx.children(payload.get("gunlukVeriler"), decoder.day)

"""
Batch forms: acid refining ("Sarnel") and lock assembly ("Kilit Toplama").
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar

from .types import EntityKind, FormState, new_id, next_order_index, utcnow


@dataclass
class AcidOutput:
    """Gold recovered from one acid pass, in grams."""

    id: str = field(default_factory=new_id)
    value_gr: float = 0.0
    note: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    order_index: int = field(default_factory=next_order_index)

    def children(self) -> list[Any]:
        return []


@dataclass
class FireItem:
    id: str = field(default_factory=new_id)
    value: float = 0.0
    note: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    order_index: int = field(default_factory=next_order_index)

    def children(self) -> list[Any]:
        return []


@dataclass
class AcidBatchForm:
    """Acid refining batch.

    The gold ratio and fire are computed from the entered weights the same
    way the finishing table shows them: input is ``giris - cikis`` and output
    is the recovered acid total plus the gold share of the iron dust.
    """

    kind: ClassVar[EntityKind] = EntityKind.ACID_BATCH

    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)
    started_at: datetime | None = None
    ended_at: datetime | None = None
    karat_ayar: int = 0
    giris_altin: float | None = None
    cikis_altin: float | None = None
    demirli_1: float | None = None
    demirli_2: float | None = None
    demirli_3: float | None = None
    demirli_hurda: float | None = None
    demirli_toz: float | None = None
    state: FormState = FormState.DRAFT
    last_edited_at: datetime = field(default_factory=utcnow)
    created_by_username: str = ""
    last_edited_by_username: str = ""
    asit_cikislari: list[AcidOutput] = field(default_factory=list)
    extra_fire_items: list[FireItem] = field(default_factory=list)

    def children(self) -> list[Any]:
        return [*self.asit_cikislari, *self.extra_fire_items]

    @property
    def altin_orani(self) -> float | None:
        if None in (
            self.giris_altin,
            self.cikis_altin,
            self.demirli_1,
            self.demirli_2,
            self.demirli_3,
        ):
            return None
        denominator = self.demirli_1 + self.demirli_2 + self.demirli_3
        if denominator <= 0:
            return None
        return ((self.giris_altin - self.cikis_altin) / denominator) * 100

    @property
    def total_asit_cikisi(self) -> float:
        return sum(item.value_gr for item in self.asit_cikislari)

    @property
    def fire(self) -> float | None:
        if self.giris_altin is None or self.cikis_altin is None:
            return None
        giris = self.giris_altin - self.cikis_altin
        toz_cikisi = (self.demirli_3 or 0) * (self.altin_orani or 0) / 100
        return giris - (self.total_asit_cikisi + toz_cikisi)

    @property
    def final_fire(self) -> float | None:
        initial = self.fire
        if initial is None:
            return None
        return initial - sum(item.value for item in self.extra_fire_items)


@dataclass
class LockItem:
    id: str = field(default_factory=new_id)
    giris_adet: float | None = None
    giris_gram: float | None = None
    cikis_gram: float | None = None
    cikis_adet: float | None = None
    created_at: datetime = field(default_factory=utcnow)
    order_index: int = field(default_factory=next_order_index)

    def children(self) -> list[Any]:
        return []


@dataclass
class LockAssemblyForm:
    """Lock assembly batch with four part lists (kasa, dil, yay, kilit)."""

    kind: ClassVar[EntityKind] = EntityKind.LOCK_ASSEMBLY

    id: str = field(default_factory=new_id)
    model: str | None = None
    firma: str | None = None
    ayar: int | None = None
    started_at: datetime | None = None
    ended_at: datetime | None = None
    created_at: datetime = field(default_factory=utcnow)
    last_edited_at: datetime = field(default_factory=utcnow)
    created_by_username: str = ""
    last_edited_by_username: str = ""
    kasa_items: list[LockItem] = field(default_factory=list)
    dil_items: list[LockItem] = field(default_factory=list)
    yay_items: list[LockItem] = field(default_factory=list)
    kilit_items: list[LockItem] = field(default_factory=list)

    def children(self) -> list[Any]:
        return [*self.kasa_items, *self.dil_items, *self.yay_items, *self.kilit_items]

    @property
    def toplam_giris_gram(self) -> float:
        return sum(item.giris_gram or 0 for item in self.children())

    @property
    def toplam_cikis_gram(self) -> float:
        return sum(item.cikis_gram or 0 for item in self.children())

    @property
    def fire_gram(self) -> float:
        return self.toplam_giris_gram - self.toplam_cikis_gram

    @property
    def fire_adet_dil(self) -> float:
        return sum(i.giris_adet or 0 for i in self.dil_items) - sum(
            i.cikis_adet or 0 for i in self.dil_items
        )

    @property
    def fire_adet_kasa(self) -> float:
        return sum(i.giris_adet or 0 for i in self.kasa_items) - sum(
            i.cikis_adet or 0 for i in self.kasa_items
        )

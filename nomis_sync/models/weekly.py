"""
Weekly daily-operations form ("Günlük İşlem Formu").

A weekly form owns one day entry per working day. Each day owns optional
station cards (tezgah, cila, ocak, patlatma, tambur, makine/testere
kesme), cards own ordered rows, and operation rows own expandable value
lists. Fire (loss) is always derived from the entered weights.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, ClassVar

from .types import EntityKind, new_id, next_order_index, utcnow


class CardType(Enum):
    """Station cards that share the generic operation row layout."""

    CILA = "cila"
    OCAK = "ocak"
    PATLATMA = "patlatma"
    TAMBUR = "tambur"
    MAKINE_KESME = "makineKesme"
    TESTERE_KESME = "testereKesme"


DEFAULT_ROW_COUNT = 5


@dataclass
class ExpandableValue:
    """A single weight entered into an expandable cell."""

    id: str = field(default_factory=new_id)
    value: float | None = None
    ekleme_tarihi: datetime = field(default_factory=utcnow)
    order_index: int = field(default_factory=next_order_index)

    def children(self) -> list[Any]:
        return []


@dataclass
class FireAddition:
    """Extra loss recorded against a card after the fact."""

    id: str = field(default_factory=new_id)
    value: float | None = None
    aciklama: str = ""
    created_at: datetime = field(default_factory=utcnow)
    order_index: int = field(default_factory=next_order_index)

    def children(self) -> list[Any]:
        return []


@dataclass
class TezgahRow:
    id: str = field(default_factory=new_id)
    aciklama_giris: str = ""
    giris_value: float | None = None
    cikis_value: float | None = None
    aciklama_cikis: str = ""
    ayar: int | None = None
    aciklama_giris_tarihi: datetime | None = None
    aciklama_cikis_tarihi: datetime | None = None
    created_at: datetime = field(default_factory=utcnow)
    order_index: int = field(default_factory=next_order_index)

    def children(self) -> list[Any]:
        return []


@dataclass
class TezgahCard:
    """Bench card: single in/out weight per row plus fire additions."""

    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)
    ayar: int | None = None
    satirlar: list[TezgahRow] = field(default_factory=list)
    fire_eklemeleri: list[FireAddition] = field(default_factory=list)

    def children(self) -> list[Any]:
        return [*self.satirlar, *self.fire_eklemeleri]

    def ensure_rows(self) -> list[TezgahRow]:
        """Create the default empty rows if the card has none."""
        if self.satirlar:
            return []
        self.satirlar = [TezgahRow() for _ in range(DEFAULT_ROW_COUNT)]
        return list(self.satirlar)

    @property
    def toplam_giris(self) -> float:
        return sum(row.giris_value or 0 for row in self.satirlar)

    @property
    def toplam_cikis(self) -> float:
        return sum(row.cikis_value or 0 for row in self.satirlar)

    @property
    def ilk_fire(self) -> float:
        # Fire cannot go negative
        return max(0.0, self.toplam_giris - self.toplam_cikis)

    @property
    def toplam_eklenen_fire(self) -> float:
        return sum(fire.value or 0 for fire in self.fire_eklemeleri)

    @property
    def son_fire(self) -> float:
        return max(0.0, self.ilk_fire - self.toplam_eklenen_fire)


@dataclass
class OperationRow:
    """Generic operation row ("İşlem Satırı") with expandable in/out cells."""

    id: str = field(default_factory=new_id)
    aciklama_giris: str = ""
    aciklama_cikis: str = ""
    aciklama_giris_tarihi: datetime | None = None
    aciklama_cikis_tarihi: datetime | None = None
    aciklama_fire: str = ""
    aciklama_fire_tarihi: datetime | None = None
    ayar: int | None = None
    created_at: datetime = field(default_factory=utcnow)
    order_index: int = field(default_factory=next_order_index)
    giris_values: list[ExpandableValue] = field(default_factory=list)
    cikis_values: list[ExpandableValue] = field(default_factory=list)

    def children(self) -> list[Any]:
        return [*self.giris_values, *self.cikis_values]

    def ensure_values(self) -> list[ExpandableValue]:
        created: list[ExpandableValue] = []
        if not self.giris_values:
            self.giris_values.append(ExpandableValue())
            created.append(self.giris_values[-1])
        if not self.cikis_values:
            self.cikis_values.append(ExpandableValue())
            created.append(self.cikis_values[-1])
        return created

    @property
    def toplam_giris(self) -> float:
        return sum(v.value for v in self.giris_values if v.value is not None)

    @property
    def toplam_cikis(self) -> float:
        return sum(v.value for v in self.cikis_values if v.value is not None)

    @property
    def fire(self) -> float:
        return max(0.0, self.toplam_giris - self.toplam_cikis)


@dataclass
class OperationCard:
    """Station card sharing the operation row layout."""

    card_type: CardType
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)
    ayar: int | None = None
    satirlar: list[OperationRow] = field(default_factory=list)
    fire_eklemeleri: list[FireAddition] = field(default_factory=list)

    def children(self) -> list[Any]:
        return [*self.satirlar, *self.fire_eklemeleri]

    def ensure_rows(self) -> list[Any]:
        """Create the default rows (with empty value cells) if none exist."""
        if self.satirlar:
            return []
        created: list[Any] = []
        for _ in range(DEFAULT_ROW_COUNT):
            row = OperationRow()
            self.satirlar.append(row)
            created.append(row)
            created.extend(row.ensure_values())
        return created

    @property
    def toplam_giris(self) -> float:
        return sum(row.toplam_giris for row in self.satirlar)

    @property
    def toplam_cikis(self) -> float:
        return sum(row.toplam_cikis for row in self.satirlar)

    @property
    def toplam_fire(self) -> float:
        return sum(row.fire for row in self.satirlar)


@dataclass
class DayEntry:
    """One working day inside a weekly form ("Günlük Gün Verisi")."""

    tarih: datetime
    id: str = field(default_factory=new_id)
    order_index: int = field(default_factory=next_order_index)
    tezgah_karti_1: TezgahCard | None = None
    tezgah_karti_2: TezgahCard | None = None
    cila_karti: OperationCard | None = None
    ocak_karti: OperationCard | None = None
    patlatma_karti: OperationCard | None = None
    tambur_karti: OperationCard | None = None
    makine_kesme_karti: OperationCard | None = None
    testere_kesme_karti: OperationCard | None = None

    def children(self) -> list[Any]:
        cards = (
            self.tezgah_karti_1,
            self.tezgah_karti_2,
            self.cila_karti,
            self.ocak_karti,
            self.patlatma_karti,
            self.tambur_karti,
            self.makine_kesme_karti,
            self.testere_kesme_karti,
        )
        return [card for card in cards if card is not None]

    @property
    def gun_adi(self) -> str:
        return _TURKISH_DAY_NAMES[self.tarih.weekday()]


_TURKISH_DAY_NAMES = (
    "Pazartesi",
    "Salı",
    "Çarşamba",
    "Perşembe",
    "Cuma",
    "Cumartesi",
    "Pazar",
)


def _week_monday(start: datetime) -> datetime:
    # A weekend start belongs to the following working week
    weekday = start.weekday()
    if weekday >= 5:
        start = start + timedelta(days=7 - weekday)
    return start - timedelta(days=start.weekday())


@dataclass
class WeeklyForm:
    """Weekly form root ("Yeni Günlük Form")."""

    kind: ClassVar[EntityKind] = EntityKind.WEEKLY_FORM

    id: str = field(default_factory=new_id)
    baslama_tarihi: datetime = field(default_factory=utcnow)
    created_at: datetime = field(default_factory=utcnow)
    last_edited_at: datetime | None = field(default_factory=utcnow)
    is_completed: bool = False
    is_weekly_completed: bool = False
    weekly_completed_at: datetime | None = None
    created_by_username: str = ""
    last_edited_by_username: str = ""
    gunluk_veriler: list[DayEntry] = field(default_factory=list)

    def children(self) -> list[Any]:
        return list(self.gunluk_veriler)

    @property
    def bitis_tarihi(self) -> datetime:
        """Friday of the form's working week."""
        return _week_monday(self.baslama_tarihi) + timedelta(days=4)

    def create_weekly_days(self) -> list[DayEntry]:
        """Append Monday..Friday day entries for the form's week.

        Returns the newly created entries so the caller can register them
        with the local store.
        """
        monday = _week_monday(self.baslama_tarihi)
        created = [DayEntry(tarih=monday + timedelta(days=offset)) for offset in range(5)]
        self.gunluk_veriler.extend(created)
        return created

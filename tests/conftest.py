"""
Shared test configuration and fixtures.

Tests run against the in-memory remote database and entity store. A
shared step clock drives both the remote store's server timestamps and
the orchestrator's run timestamps so incremental pulls are deterministic.
"""

from datetime import UTC, datetime, timedelta

import pytest

from nomis_sync.models import (
    AcidBatchForm,
    AcidOutput,
    CardType,
    DayEntry,
    ExpandableValue,
    FireAddition,
    FireItem,
    LockAssemblyForm,
    LockItem,
    Note,
    OperationCard,
    OperationRow,
    TezgahCard,
    TezgahRow,
    WeeklyForm,
)
from nomis_sync.remote import MemoryDatabase, RemoteStoreClient
from nomis_sync.settings import SyncSettings
from nomis_sync.store import MemoryEntityStore
from nomis_sync.sync import SyncConfig, SyncOrchestrator

T0 = datetime(2026, 3, 2, 8, 0, tzinfo=UTC)


class StepClock:
    """Returns a strictly increasing time, one step per call."""

    def __init__(self, start: datetime = T0, step: timedelta = timedelta(seconds=1)):
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current


def make_weekly_form(day_count: int = 2) -> WeeklyForm:
    """Weekly form with ``day_count`` days, each holding a bench and a polish card."""
    form = WeeklyForm(
        baslama_tarihi=T0,
        created_at=T0,
        last_edited_at=T0,
        created_by_username="usta",
        last_edited_by_username="usta",
    )
    for offset in range(day_count):
        day = DayEntry(tarih=T0 + timedelta(days=offset))
        day.tezgah_karti_1 = TezgahCard(
            ayar=14,
            satirlar=[
                TezgahRow(aciklama_giris="bilezik", giris_value=12.5, cikis_value=12.1, ayar=14),
                TezgahRow(aciklama_giris="yüzük", giris_value=3.0),
            ],
            fire_eklemeleri=[FireAddition(value=0.1, aciklama="süpürüntü")],
        )
        day.cila_karti = OperationCard(
            card_type=CardType.CILA,
            ayar=22,
            satirlar=[
                OperationRow(
                    aciklama_giris="kolye",
                    giris_values=[ExpandableValue(value=5.25), ExpandableValue(value=1.75)],
                    cikis_values=[ExpandableValue(value=6.9)],
                )
            ],
        )
        form.gunluk_veriler.append(day)
    return form


def make_acid_batch() -> AcidBatchForm:
    return AcidBatchForm(
        created_at=T0,
        started_at=T0,
        karat_ayar=14,
        giris_altin=100.0,
        cikis_altin=20.0,
        demirli_1=10.0,
        demirli_2=20.0,
        demirli_3=10.0,
        demirli_hurda=2.5,
        asit_cikislari=[AcidOutput(value_gr=18.0), AcidOutput(value_gr=12.0, note="ikinci")],
        extra_fire_items=[FireItem(value=5.0, note="süzgeç")],
    )


def make_lock_form() -> LockAssemblyForm:
    return LockAssemblyForm(
        model="K-12",
        firma="Altınbaş",
        ayar=14,
        created_at=T0,
        kasa_items=[LockItem(giris_adet=100, giris_gram=50.0, cikis_gram=49.0, cikis_adet=98)],
        dil_items=[LockItem(giris_adet=100, giris_gram=20.0, cikis_gram=19.5, cikis_adet=99)],
        yay_items=[LockItem(giris_gram=5.0, cikis_gram=5.0)],
        kilit_items=[],
    )


def make_note(title: str = "Sipariş") -> Note:
    return Note(title=title, text="Cuma teslim", created_at=T0, last_edited_at=T0)


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def remote_db(clock):
    return MemoryDatabase(clock=clock)


@pytest.fixture
def client(remote_db):
    return RemoteStoreClient(remote_db)


@pytest.fixture
def store():
    return MemoryEntityStore()


@pytest.fixture
def settings(tmp_path):
    return SyncSettings(tmp_path / "settings.yaml")


@pytest.fixture
def sync_config():
    return SyncConfig(full_success_display_seconds=0.01, incremental_success_display_seconds=0.01)


@pytest.fixture
async def orchestrator(store, client, settings, sync_config, clock):
    orchestrator = SyncOrchestrator(store, client, settings=settings, config=sync_config, clock=clock)
    yield orchestrator
    await orchestrator.close()

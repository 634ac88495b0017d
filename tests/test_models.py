"""
Tests for the workshop entity model: week layout, fire computations and
ownership traversal.
"""

from datetime import UTC, datetime

import pytest
from conftest import make_acid_batch, make_lock_form, make_weekly_form

from nomis_sync.models import (
    CardType,
    EntityKind,
    ExpandableValue,
    FireAddition,
    FormState,
    ModelItem,
    Note,
    OperationCard,
    OperationRow,
    TezgahCard,
    TezgahRow,
    WeeklyForm,
    is_root,
    iter_descendants,
    next_order_index,
)


class TestWeeklyDays:
    """Tests for weekly day generation."""

    def test_midweek_start_uses_that_week(self):
        """A Wednesday start produces Monday..Friday of the same week."""
        form = WeeklyForm(baslama_tarihi=datetime(2026, 3, 4, tzinfo=UTC))
        days = form.create_weekly_days()

        assert [day.tarih.day for day in days] == [2, 3, 4, 5, 6]
        assert [day.gun_adi for day in days] == [
            "Pazartesi",
            "Salı",
            "Çarşamba",
            "Perşembe",
            "Cuma",
        ]
        assert form.gunluk_veriler == days

    def test_weekend_start_rolls_to_next_week(self):
        form = WeeklyForm(baslama_tarihi=datetime(2026, 3, 7, tzinfo=UTC))
        days = form.create_weekly_days()
        assert days[0].tarih == datetime(2026, 3, 9, tzinfo=UTC)

    def test_bitis_tarihi_is_friday(self):
        form = WeeklyForm(baslama_tarihi=datetime(2026, 3, 3, tzinfo=UTC))
        assert form.bitis_tarihi == datetime(2026, 3, 6, tzinfo=UTC)

    def test_days_are_ordered(self):
        form = WeeklyForm()
        days = form.create_weekly_days()
        indexes = [day.order_index for day in days]
        assert indexes == sorted(indexes)
        assert len(set(indexes)) == 5


class TestFireComputations:
    """Loss ("fire") is derived from entered weights and never negative."""

    def test_tezgah_card_fire(self):
        card = TezgahCard(
            satirlar=[
                TezgahRow(giris_value=10.0, cikis_value=8.0),
                TezgahRow(giris_value=5.0),
            ],
            fire_eklemeleri=[FireAddition(value=2.0)],
        )
        assert card.toplam_giris == 15.0
        assert card.toplam_cikis == 8.0
        assert card.ilk_fire == 7.0
        assert card.son_fire == 5.0

    def test_tezgah_card_fire_clamped_to_zero(self):
        card = TezgahCard(satirlar=[TezgahRow(giris_value=1.0, cikis_value=3.0)])
        assert card.ilk_fire == 0.0
        assert card.son_fire == 0.0

    def test_operation_row_fire_ignores_empty_cells(self):
        row = OperationRow(
            giris_values=[ExpandableValue(value=4.0), ExpandableValue(value=None)],
            cikis_values=[ExpandableValue(value=3.5)],
        )
        assert row.fire == 0.5

    def test_operation_card_totals(self):
        card = OperationCard(
            card_type=CardType.TAMBUR,
            satirlar=[
                OperationRow(
                    giris_values=[ExpandableValue(value=2.0)],
                    cikis_values=[ExpandableValue(value=1.0)],
                ),
                OperationRow(giris_values=[ExpandableValue(value=3.0)]),
            ],
        )
        assert card.toplam_giris == 5.0
        assert card.toplam_cikis == 1.0
        assert card.toplam_fire == 4.0

    def test_acid_batch_fire(self):
        batch = make_acid_batch()
        # (100 - 20) / (10 + 20 + 10) * 100
        assert batch.altin_orani == pytest.approx(200.0)
        assert batch.total_asit_cikisi == pytest.approx(30.0)
        # 80 - (30 + 10 * 200 / 100)
        assert batch.fire == pytest.approx(30.0)
        assert batch.final_fire == pytest.approx(25.0)

    def test_acid_batch_ratio_needs_all_weights(self):
        batch = make_acid_batch()
        batch.demirli_2 = None
        assert batch.altin_orani is None

    def test_acid_batch_fire_without_weights(self):
        batch = make_acid_batch()
        batch.giris_altin = None
        assert batch.fire is None
        assert batch.final_fire is None

    def test_lock_assembly_fire(self):
        form = make_lock_form()
        assert form.toplam_giris_gram == pytest.approx(75.0)
        assert form.toplam_cikis_gram == pytest.approx(73.5)
        assert form.fire_gram == pytest.approx(1.5)
        assert form.fire_adet_kasa == 2
        assert form.fire_adet_dil == 1


class TestDefaultRows:
    def test_tezgah_card_default_rows(self):
        card = TezgahCard()
        created = card.ensure_rows()
        assert len(created) == 5
        assert card.ensure_rows() == []

    def test_operation_card_default_rows_with_cells(self):
        card = OperationCard(card_type=CardType.OCAK)
        created = card.ensure_rows()
        # 5 rows, each with one giris and one cikis cell
        assert len(created) == 15
        assert all(len(row.giris_values) == 1 for row in card.satirlar)


class TestOwnership:
    """Tests for explicit children listing."""

    def test_iter_descendants_covers_whole_subgraph(self):
        form = make_weekly_form(day_count=2)
        nodes = list(iter_descendants(form))
        # per day: day, tezgah card, 2 rows, 1 fire, cila card, 1 row, 3 values
        assert len(nodes) == 2 * 10
        assert form not in nodes

    def test_leaf_kinds_have_no_children(self):
        assert Note().children() == []
        assert ModelItem(name="K-12").children() == []

    def test_is_root(self):
        form = make_weekly_form()
        assert is_root(form)
        assert not is_root(form.gunluk_veriler[0])
        assert form.kind is EntityKind.WEEKLY_FORM

    def test_acid_batch_children(self):
        batch = make_acid_batch()
        assert len(batch.children()) == 3
        assert batch.state is FormState.DRAFT


class TestIdentity:
    def test_ids_are_unique(self):
        assert Note().id != Note().id

    def test_order_index_strictly_increasing(self):
        values = [next_order_index() for _ in range(1000)]
        assert values == sorted(values)
        assert len(set(values)) == len(values)

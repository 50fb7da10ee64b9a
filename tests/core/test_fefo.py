"""Tests for first-expired, first-out draw planning."""

from datetime import UTC, datetime, timedelta

import pytest

from src.core.entities import IngredientBatch
from src.core.exceptions import InsufficientStockError, StorageError, ValidationError
from src.core.fefo import BatchDraw, fefo_order, plan_draws

NOW = datetime(2026, 3, 1, 8, 0, tzinfo=UTC)


def _batch(
    batch_id: int | None,
    code: str,
    quantity: float,
    expires_in: int,
    received_ago: int = 1,
) -> IngredientBatch:
    return IngredientBatch(
        id=batch_id,
        ingredient_id=1,
        batch_code=code,
        received_date=NOW - timedelta(days=received_ago),
        expiry_date=NOW + timedelta(days=expires_in),
        initial_quantity=quantity,
        current_quantity=quantity,
    )


class TestFefoOrder:
    def test_earliest_expiry_first(self):
        late = _batch(1, "LATE", 5, expires_in=20)
        early = _batch(2, "EARLY", 5, expires_in=3)
        assert [b.batch_code for b in fefo_order([late, early])] == ["EARLY", "LATE"]

    def test_same_expiry_uses_received_date(self):
        newer = _batch(1, "NEWER", 5, expires_in=10, received_ago=1)
        older = _batch(2, "OLDER", 5, expires_in=10, received_ago=4)
        assert [b.batch_code for b in fefo_order([newer, older])] == ["OLDER", "NEWER"]

    def test_full_tie_uses_batch_code(self):
        b = _batch(1, "B-2", 5, expires_in=10)
        a = _batch(2, "A-1", 5, expires_in=10)
        assert [x.batch_code for x in fefo_order([b, a])] == ["A-1", "B-2"]


class TestPlanDraws:
    def test_flour_scenario(self):
        """100 + 200 kg on hand, take 85 then 20: first batch first."""
        first = _batch(1, "FLOUR-A", 100, expires_in=5)
        second = _batch(2, "FLOUR-B", 200, expires_in=30)

        draws = plan_draws([second, first], 85, "ingredient", 1)
        assert [(d.batch_id, d.quantity) for d in draws] == [(1, 85)]
        assert draws[0].remaining == 15

    def test_spans_batches(self):
        first = _batch(1, "A", 15, expires_in=5)
        second = _batch(2, "B", 200, expires_in=30)

        draws = plan_draws([first, second], 20, "ingredient", 1)
        assert [(d.batch_id, d.quantity) for d in draws] == [(1, 15), (2, 5)]
        assert draws[0].remaining == 0
        assert draws[1].remaining == 195

    def test_skips_empty_batches(self):
        empty = _batch(1, "EMPTY", 10, expires_in=1)
        empty.current_quantity = 0
        full = _batch(2, "FULL", 10, expires_in=9)

        draws = plan_draws([empty, full], 4, "ingredient", 1)
        assert [d.batch_id for d in draws] == [2]

    def test_insufficient_stock_reports_available(self):
        batches = [_batch(1, "A", 3, expires_in=5), _batch(2, "B", 2.5, expires_in=6)]
        with pytest.raises(InsufficientStockError) as exc_info:
            plan_draws(batches, 6, "ingredient", 7)
        assert exc_info.value.code == "INSUFFICIENT_STOCK"
        assert exc_info.value.details["available"] == 5.5
        assert exc_info.value.details["requested"] == 6

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_rejects_non_positive_quantity(self, quantity):
        with pytest.raises(ValidationError):
            plan_draws([_batch(1, "A", 3, expires_in=5)], quantity, "ingredient", 1)

    def test_draws_sum_exactly(self):
        batches = [_batch(i, f"B{i}", 0.1, expires_in=i) for i in range(1, 4)]
        draws = plan_draws(batches, 0.3, "ingredient", 1)
        assert round(sum(d.quantity for d in draws), 6) == 0.3
        assert len(draws) == 3


class TestBatchDraw:
    def test_batch_id_and_remaining(self):
        draw = BatchDraw(_batch(7, "FL-A", 10, expires_in=5), 4)
        assert draw.batch_id == 7
        assert draw.remaining == 6

    def test_unsaved_batch_has_no_id(self):
        draw = BatchDraw(_batch(None, "FL-NEW", 10, expires_in=5), 1)
        with pytest.raises(StorageError) as exc:
            draw.batch_id
        assert exc.value.code == "UNSAVED_BATCH"

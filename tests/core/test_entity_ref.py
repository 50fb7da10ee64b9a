"""Tests for loosely typed entity references in request bodies."""

import pytest
from pydantic import ValidationError

from src.application.dto.requests import CompleteItemRequest, CreateOrderRequest


class TestEntityRef:
    @pytest.mark.parametrize("value", [12, "12", " 12 ", {"id": 12}, {"id": "12", "name": "x"}])
    def test_accepted_forms(self, value):
        request = CompleteItemRequest(product_id=value, actual_quantity=1)
        assert request.product_id == 12

    @pytest.mark.parametrize("value", [True, "abc", {"name": "x"}, 0, -3, "1.5"])
    def test_rejected_forms(self, value):
        with pytest.raises(ValidationError):
            CompleteItemRequest(product_id=value, actual_quantity=1)

    def test_nested_in_order_items(self):
        request = CreateOrderRequest(
            store_id={"id": 3, "store_name": "Downtown"},
            items=[{"product_id": "7", "quantity": 2}],
        )
        assert request.store_id == 3
        assert request.items[0].product_id == 7

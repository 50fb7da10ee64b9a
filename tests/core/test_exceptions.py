"""Tests for kitchen domain exceptions."""

from src.core.exceptions import (
    DatabaseError,
    EmptyOrderError,
    IncompletePlanError,
    InsufficientStockError,
    InvalidStateError,
    KitchenError,
    NotFoundError,
    QuantityExceedsPlanError,
    StorageError,
    ValidationError,
)


class TestKitchenError:
    def test_defaults_code_to_class_name(self):
        error = KitchenError("boom")
        assert error.code == "KitchenError"
        assert error.details == {}
        assert str(error) == "boom"

    def test_to_dict(self):
        error = NotFoundError("Ingredient", 42)
        assert error.to_dict() == {
            "error": "NOT_FOUND",
            "message": "Ingredient not found: id=42",
            "details": {"entity": "Ingredient", "field": "id", "key": 42},
        }


class TestSpecificErrors:
    def test_incomplete_plan_is_invalid_state(self):
        error = IncompletePlanError(3, [7, 8])
        assert isinstance(error, InvalidStateError)
        assert error.code == "INCOMPLETE_PLAN"
        assert error.details["open_products"] == [7, 8]

    def test_quantity_exceeds_plan_message(self):
        over = QuantityExceedsPlanError(1, 120, 100)
        assert "120" in over.message and "100" in over.message
        non_positive = QuantityExceedsPlanError(1, 0, 100)
        assert "positive" in non_positive.message

    def test_insufficient_stock_details(self):
        error = InsufficientStockError("product", 5, 3, 2)
        assert error.details == {
            "resource": "product",
            "resource_id": 5,
            "requested": 3,
            "available": 2,
        }

    def test_empty_order(self):
        assert EmptyOrderError(4).code == "EMPTY_ORDER"

    def test_validation_truncates_value(self):
        error = ValidationError("notes", "too long", "x" * 500)
        assert len(error.details["value"]) == 100

    def test_database_error_is_storage_error(self):
        error = DatabaseError("insert", "disk full")
        assert isinstance(error, StorageError)
        assert error.code == "DATABASE_ERROR"

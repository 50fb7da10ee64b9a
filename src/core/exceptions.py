"""
Domain exceptions for the central kitchen core.

Every guard violation surfaces as a distinct exception with a stable
machine-readable ``code`` so clients can render precise messages.
"""

from typing import Any


class KitchenError(Exception):
    """Base exception for all kitchen errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Lookup Exceptions
class NotFoundError(KitchenError):
    """Referenced entity does not exist."""

    def __init__(self, entity: str, key: Any, field: str = "id"):
        super().__init__(
            f"{entity} not found: {field}={key}",
            code="NOT_FOUND",
            details={"entity": entity, "field": field, "key": key},
        )


class DuplicateError(KitchenError):
    """An entity with the same unique key already exists."""

    def __init__(self, entity: str, field: str, value: Any):
        super().__init__(
            f"{entity} with {field} '{value}' already exists",
            code="DUPLICATE",
            details={"entity": entity, "field": field, "value": value},
        )


# Lifecycle Exceptions
class InvalidTransitionError(KitchenError):
    """A state machine guard rejected the requested transition."""

    def __init__(self, entity: str, current: str, target: str):
        super().__init__(
            f"Cannot move {entity} from '{current}' to '{target}'",
            code="INVALID_TRANSITION",
            details={"entity": entity, "current": current, "target": target},
        )


class InvalidStateError(KitchenError):
    """Operation attempted on an entity that is not in the required state."""

    def __init__(
        self,
        entity: str,
        reason: str,
        current: str | None = None,
        code: str = "INVALID_STATE",
    ):
        super().__init__(
            f"{entity}: {reason}",
            code=code,
            details={"entity": entity, "reason": reason, "current": current},
        )


class IncompletePlanError(InvalidStateError):
    """Plan cannot be completed while details are still open."""

    def __init__(self, plan_id: int, open_products: list[int]):
        super().__init__(
            "ProductionPlan",
            f"plan {plan_id} still has unfinished items: {open_products}",
            current="In_Progress",
            code="INCOMPLETE_PLAN",
        )
        self.details.update({"plan_id": plan_id, "open_products": open_products})


# Quantity Exceptions
class QuantityExceedsPlanError(KitchenError):
    """Actual quantity is not positive or exceeds the planned quantity."""

    def __init__(self, product_id: int, actual: float, planned: float):
        if actual <= 0:
            message = f"Actual quantity must be positive, got {actual}"
        else:
            message = (
                f"Cannot complete more than planned for product {product_id}: "
                f"actual {actual} > planned {planned}"
            )
        super().__init__(
            message,
            code="QUANTITY_EXCEEDS_PLAN",
            details={"product_id": product_id, "actual": actual, "planned": planned},
        )


class InsufficientStockError(KitchenError):
    """Ledger or batch registry cannot satisfy the requested quantity."""

    def __init__(self, resource: str, resource_id: Any, requested: float, available: float):
        super().__init__(
            f"Insufficient stock for {resource} {resource_id}: "
            f"requested {requested}, available {available}",
            code="INSUFFICIENT_STOCK",
            details={
                "resource": resource,
                "resource_id": resource_id,
                "requested": requested,
                "available": available,
            },
        )


class EmptyOrderError(KitchenError):
    """Order has no line with a positive quantity."""

    def __init__(self, store_id: int | None = None):
        super().__init__(
            "Order must contain at least one item with a positive quantity",
            code="EMPTY_ORDER",
            details={"store_id": store_id},
        )


# Validation Exceptions
class ValidationError(KitchenError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


# Storage Exceptions
class StorageError(KitchenError):
    """Base exception for storage operations."""

    pass


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


class ConfigurationError(KitchenError):
    """Configuration error."""

    pass

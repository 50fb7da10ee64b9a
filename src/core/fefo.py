"""First-expired, first-out batch selection.

Pure planning: given candidate batches and a quantity, decide how much to
take from each. Persisting the draws is the caller's job.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Generic, Protocol, TypeVar

from src.core.common import round_quantity
from src.core.exceptions import InsufficientStockError, StorageError, ValidationError


class FefoBatch(Protocol):
    id: int | None
    batch_code: str
    current_quantity: float

    @property
    def fefo_key(self) -> tuple[datetime, datetime, str]: ...


B = TypeVar("B", bound=FefoBatch)


@dataclass(frozen=True)
class BatchDraw(Generic[B]):
    """Quantity taken from one batch."""

    batch: B
    quantity: float

    @property
    def batch_id(self) -> int:
        if self.batch.id is None:
            raise StorageError(
                f"Batch {self.batch.batch_code} has no id", code="UNSAVED_BATCH"
            )
        return self.batch.id

    @property
    def remaining(self) -> float:
        return round_quantity(self.batch.current_quantity - self.quantity)


def fefo_sort_key(batch: FefoBatch) -> tuple[datetime, datetime, str]:
    """Expiry, then received/manufacture date, then batch code."""
    return batch.fefo_key


def fefo_order(batches: Iterable[B]) -> list[B]:
    return sorted(batches, key=fefo_sort_key)


def plan_draws(
    batches: Iterable[B],
    quantity: float,
    resource: str,
    resource_id: Any,
) -> list[BatchDraw[B]]:
    """Cover ``quantity`` from ``batches`` in FEFO order.

    Raises:
        ValidationError: quantity is not positive.
        InsufficientStockError: the batches hold less than ``quantity``.
    """
    quantity = round_quantity(quantity)
    if quantity <= 0:
        raise ValidationError("quantity", "must be greater than zero", quantity)

    ordered = [b for b in fefo_order(batches) if b.current_quantity > 0]
    available = round_quantity(sum(b.current_quantity for b in ordered))
    if available < quantity:
        raise InsufficientStockError(resource, resource_id, quantity, available)

    draws: list[BatchDraw[B]] = []
    remaining = quantity
    for batch in ordered:
        if remaining <= 0:
            break
        take = min(batch.current_quantity, remaining)
        draws.append(BatchDraw(batch=batch, quantity=round_quantity(take)))
        remaining = round_quantity(remaining - take)

    return draws

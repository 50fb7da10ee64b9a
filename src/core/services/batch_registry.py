"""
Finished-goods batch registry.

Expiry is never written back by a job: a batch past its expiry date is
filtered out of every availability query and reported as Expired.
"""

from dataclasses import dataclass
from datetime import datetime

from src.config import get_logger
from src.core.common import Clock, round_quantity, utc_now
from src.core.entities.batch import BatchStatus, IngredientUsage, ProductBatch
from src.core.exceptions import (
    InsufficientStockError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from src.core.fefo import BatchDraw, plan_draws
from src.core.interfaces.unit_of_work import IUnitOfWork, KitchenRepositories

logger = get_logger(__name__)


@dataclass
class BatchTrace:
    """A batch with the ingredient batches it was made from."""

    batch: ProductBatch
    plan_code: str | None
    ingredients: list[IngredientUsage]


async def allocate_product(
    repos: KitchenRepositories,
    product_id: int,
    quantity: float,
    at: datetime,
) -> list[BatchDraw[ProductBatch]]:
    """Draw finished goods FEFO inside the caller's transaction."""
    batches = await repos.batches.list_available_batches(product_id, at)
    draws = plan_draws(batches, quantity, "product", product_id)

    for draw in draws:
        if not await repos.batches.decrement_batch(draw.batch_id, draw.quantity, at):
            available = round_quantity(sum(b.current_quantity for b in batches))
            raise InsufficientStockError("product", product_id, quantity, available)

    logger.info(
        "product_allocated",
        product_id=product_id,
        quantity=quantity,
        batches=[d.batch.batch_code for d in draws],
    )
    return draws


class BatchRegistryService:
    """Queries and allocation over finished-goods batches."""

    def __init__(self, uow: IUnitOfWork, clock: Clock = utc_now):
        self._uow = uow
        self._clock = clock

    async def list_active(self, product_id: int) -> list[ProductBatch]:
        """Allocatable batches of a product in FEFO order."""
        async with self._uow.read() as repos:
            return await repos.batches.list_available_batches(product_id, self._clock())

    async def allocate(
        self, product_id: int, quantity: float
    ) -> list[BatchDraw[ProductBatch]]:
        """
        Take ``quantity`` from the product's batches, earliest expiry first.

        A batch drawn down to zero becomes SoldOut.

        Raises:
            ValidationError: quantity is not positive.
            InsufficientStockError: active batches hold less than asked.
        """
        if quantity <= 0:
            raise ValidationError("quantity", "must be greater than zero", quantity)
        async with self._uow.begin() as repos:
            return await allocate_product(repos, product_id, quantity, self._clock())

    async def get_batch(self, batch_id: int) -> ProductBatch:
        async with self._uow.read() as repos:
            batch = await repos.batches.get_batch(batch_id)
        if batch is None:
            raise NotFoundError("ProductBatch", batch_id)
        return batch

    async def list_batches(
        self,
        product_id: int | None = None,
        status: BatchStatus | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[ProductBatch]:
        """
        List batches, filtering on effective status.

        Asking for Expired returns stored-Active batches past their expiry;
        asking for Active leaves them out.
        """
        now = self._clock()
        async with self._uow.read() as repos:
            batches = await repos.batches.list_batches(product_id=product_id)
        if status is not None:
            batches = [b for b in batches if b.effective_status(now) == status]
        return batches[offset : offset + limit]

    async def trace(self, batch_id: int) -> BatchTrace:
        """Ingredient batches (with codes) consumed to make a batch."""
        async with self._uow.read() as repos:
            batch = await repos.batches.get_batch(batch_id)
            if batch is None:
                raise NotFoundError("ProductBatch", batch_id)
            plan = await repos.production.get_plan(batch.production_plan_id)
        return BatchTrace(
            batch=batch,
            plan_code=plan.plan_code if plan else None,
            ingredients=batch.ingredient_batches_used,
        )

    async def recall(self, batch_id: int) -> ProductBatch:
        """Pull an Active batch from sale. Recalled batches are never allocated."""
        now = self._clock()
        async with self._uow.begin() as repos:
            batch = await repos.batches.get_batch(batch_id)
            if batch is None:
                raise NotFoundError("ProductBatch", batch_id)
            if batch.status != BatchStatus.ACTIVE or not await repos.batches.update_status(
                batch_id, BatchStatus.ACTIVE, BatchStatus.RECALLED, now
            ):
                raise InvalidTransitionError(
                    "ProductBatch", batch.status.value, BatchStatus.RECALLED.value
                )
            batch = await repos.batches.get_batch(batch_id)

        logger.info("product_batch_recalled", batch_id=batch_id)
        return batch  # type: ignore[return-value]

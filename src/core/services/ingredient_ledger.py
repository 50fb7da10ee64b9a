"""
Ingredient stock ledger.

Receives ingredient batches and consumes them first-expired-first-out.
On-hand totals are never stored; they are summed from batches on read.
"""

from dataclasses import dataclass
from datetime import datetime

from src.config import get_logger, get_settings
from src.core.common import Clock, ensure_utc, round_quantity, utc_now
from src.core.entities.ingredient import (
    Ingredient,
    IngredientBatch,
    IngredientMovement,
    MovementType,
)
from src.core.exceptions import (
    DuplicateError,
    InsufficientStockError,
    NotFoundError,
    ValidationError,
)
from src.core.fefo import BatchDraw, plan_draws
from src.core.interfaces.unit_of_work import IUnitOfWork, KitchenRepositories

logger = get_logger(__name__)


@dataclass
class OnHand:
    """Available stock of one ingredient at a point in time."""

    ingredient: Ingredient
    total_quantity: float
    batches: list[IngredientBatch]

    @property
    def is_low_stock(self) -> bool:
        return self.total_quantity < self.ingredient.warning_threshold


async def consume_ingredient(
    repos: KitchenRepositories,
    ingredient_id: int,
    quantity: float,
    at: datetime,
    reference: str | None = None,
) -> list[BatchDraw[IngredientBatch]]:
    """
    Draw ``quantity`` of an ingredient FEFO inside the caller's transaction.

    Every decrement is conditional on the batch still holding enough, so a
    lost race surfaces as InsufficientStockError instead of an overdraw.
    The caller's transaction rolls back any earlier draws.
    """
    ingredient = await repos.ingredients.get_ingredient(ingredient_id)
    if ingredient is None:
        raise NotFoundError("Ingredient", ingredient_id)

    batches = await repos.ingredients.list_available_batches(ingredient_id, at)
    draws = plan_draws(batches, quantity, "ingredient", ingredient_id)

    for draw in draws:
        if not await repos.ingredients.decrement_batch(draw.batch_id, draw.quantity, at):
            available = round_quantity(sum(b.current_quantity for b in batches))
            raise InsufficientStockError("ingredient", ingredient_id, quantity, available)
        await repos.ingredients.add_movement(
            IngredientMovement(
                ingredient_id=ingredient_id,
                ingredient_batch_id=draw.batch_id,
                movement_type=MovementType.OUT,
                quantity=draw.quantity,
                reference=reference,
                created_at=at,
            )
        )

    logger.info(
        "ingredient_consumed",
        ingredient_id=ingredient_id,
        quantity=quantity,
        batches=[d.batch.batch_code for d in draws],
        reference=reference,
    )
    return draws


class IngredientLedgerService:
    """
    Ingredient receipts, FEFO consumption and on-hand projections.

    Every write runs in one unit-of-work transaction.
    """

    def __init__(self, uow: IUnitOfWork, clock: Clock = utc_now):
        self._uow = uow
        self._clock = clock

    async def create_ingredient(
        self,
        name: str,
        unit: str,
        cost_price: float = 0.0,
        warning_threshold: float | None = None,
    ) -> Ingredient:
        if warning_threshold is None:
            warning_threshold = get_settings().kitchen.default_warning_threshold
        async with self._uow.begin() as repos:
            if await repos.ingredients.get_ingredient_by_name(name) is not None:
                raise DuplicateError("Ingredient", "name", name.strip())
            return await repos.ingredients.create_ingredient(
                Ingredient(
                    name=name,
                    unit=unit,
                    cost_price=cost_price,
                    warning_threshold=warning_threshold,
                )
            )

    async def get_ingredient(self, ingredient_id: int) -> Ingredient:
        async with self._uow.read() as repos:
            ingredient = await repos.ingredients.get_ingredient(ingredient_id)
        if ingredient is None:
            raise NotFoundError("Ingredient", ingredient_id)
        return ingredient

    async def list_ingredients(self, limit: int = 100, offset: int = 0) -> list[Ingredient]:
        async with self._uow.read() as repos:
            return await repos.ingredients.list_ingredients(limit=limit, offset=offset)

    async def get_on_hand(self, ingredient_id: int) -> OnHand:
        """Sum of active, unexpired, non-empty batches in FEFO order."""
        now = self._clock()
        async with self._uow.read() as repos:
            ingredient = await repos.ingredients.get_ingredient(ingredient_id)
            if ingredient is None:
                raise NotFoundError("Ingredient", ingredient_id)
            batches = await repos.ingredients.list_available_batches(ingredient_id, now)
        total = round_quantity(sum(b.current_quantity for b in batches))
        return OnHand(ingredient=ingredient, total_quantity=total, batches=batches)

    async def reserve_and_consume(
        self,
        ingredient_id: int,
        quantity: float,
        reference: str | None = None,
    ) -> list[BatchDraw[IngredientBatch]]:
        """
        Consume exactly ``quantity`` across batches, earliest expiry first.

        Raises:
            ValidationError: quantity is not positive.
            NotFoundError: unknown ingredient.
            InsufficientStockError: available batches hold less than asked.
        """
        if quantity <= 0:
            raise ValidationError("quantity", "must be greater than zero", quantity)
        async with self._uow.begin() as repos:
            return await consume_ingredient(
                repos, ingredient_id, quantity, self._clock(), reference
            )

    async def receive_batch(
        self,
        ingredient_id: int,
        batch_code: str,
        quantity: float,
        expiry_date: datetime,
        supplier_ref: str | None = None,
        price: float = 0.0,
        received_date: datetime | None = None,
    ) -> IngredientBatch:
        now = self._clock()
        received = ensure_utc(received_date) if received_date else now
        expiry = ensure_utc(expiry_date)
        quantity = round_quantity(quantity)

        if quantity <= 0:
            raise ValidationError("quantity", "must be greater than zero", quantity)
        if not batch_code or not batch_code.strip():
            raise ValidationError("batch_code", "is required")
        if expiry <= now:
            raise ValidationError("expiry_date", "must be in the future", expiry.isoformat())
        if expiry <= received:
            raise ValidationError(
                "expiry_date", "must be after the received date", expiry.isoformat()
            )

        async with self._uow.begin() as repos:
            if await repos.ingredients.get_ingredient(ingredient_id) is None:
                raise NotFoundError("Ingredient", ingredient_id)
            code = batch_code.strip().upper()
            if await repos.ingredients.get_batch_by_code(code) is not None:
                raise DuplicateError("IngredientBatch", "batch_code", code)

            batch = await repos.ingredients.add_batch(
                IngredientBatch(
                    ingredient_id=ingredient_id,
                    batch_code=code,
                    supplier_ref=supplier_ref,
                    price=price,
                    received_date=received,
                    expiry_date=expiry,
                    initial_quantity=quantity,
                    current_quantity=quantity,
                )
            )
            await repos.ingredients.add_movement(
                IngredientMovement(
                    ingredient_id=ingredient_id,
                    ingredient_batch_id=batch.id,  # type: ignore[arg-type]
                    movement_type=MovementType.IN,
                    quantity=quantity,
                    reference=supplier_ref,
                    created_at=now,
                )
            )

        logger.info(
            "ingredient_batch_received",
            ingredient_id=ingredient_id,
            batch_code=batch.batch_code,
            quantity=quantity,
        )
        return batch

    async def deactivate_batch(self, batch_id: int) -> IngredientBatch:
        """Withdraw a batch from every availability query. Quantity is kept."""
        async with self._uow.begin() as repos:
            if not await repos.ingredients.set_batch_active(batch_id, False):
                raise NotFoundError("IngredientBatch", batch_id)
            batch = await repos.ingredients.get_batch(batch_id)
        logger.info("ingredient_batch_deactivated", batch_id=batch_id)
        return batch  # type: ignore[return-value]

    async def list_batches(
        self, ingredient_id: int, include_inactive: bool = False
    ) -> list[IngredientBatch]:
        async with self._uow.read() as repos:
            if await repos.ingredients.get_ingredient(ingredient_id) is None:
                raise NotFoundError("Ingredient", ingredient_id)
            return await repos.ingredients.list_batches(ingredient_id, include_inactive)

    async def list_movements(
        self, ingredient_id: int, limit: int = 100
    ) -> list[IngredientMovement]:
        async with self._uow.read() as repos:
            if await repos.ingredients.get_ingredient(ingredient_id) is None:
                raise NotFoundError("Ingredient", ingredient_id)
            return await repos.ingredients.list_movements(ingredient_id, limit)

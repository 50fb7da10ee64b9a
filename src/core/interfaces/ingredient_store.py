"""Abstract interface for ingredient stock storage."""

from abc import ABC, abstractmethod
from datetime import datetime

from src.core.entities.ingredient import Ingredient, IngredientBatch, IngredientMovement


class IIngredientStore(ABC):
    """Interface for ingredients, their batches and the movement journal."""

    @abstractmethod
    async def create_ingredient(self, ingredient: Ingredient) -> Ingredient:
        """Create a new ingredient."""
        pass

    @abstractmethod
    async def get_ingredient(self, ingredient_id: int) -> Ingredient | None:
        """Get ingredient by ID."""
        pass

    @abstractmethod
    async def get_ingredient_by_name(self, name: str) -> Ingredient | None:
        """Get ingredient by its unique name."""
        pass

    @abstractmethod
    async def list_ingredients(
        self, limit: int | None = None, offset: int = 0
    ) -> list[Ingredient]:
        """List ingredients ordered by name."""
        pass

    @abstractmethod
    async def add_batch(self, batch: IngredientBatch) -> IngredientBatch:
        """Record a received ingredient batch."""
        pass

    @abstractmethod
    async def get_batch(self, batch_id: int) -> IngredientBatch | None:
        """Get ingredient batch by ID."""
        pass

    @abstractmethod
    async def get_batch_by_code(self, batch_code: str) -> IngredientBatch | None:
        """Get ingredient batch by its unique code."""
        pass

    @abstractmethod
    async def list_batches(
        self, ingredient_id: int, include_inactive: bool = False
    ) -> list[IngredientBatch]:
        """List batches of an ingredient in FEFO order, empty ones included."""
        pass

    @abstractmethod
    async def list_available_batches(
        self, ingredient_id: int, as_of: datetime
    ) -> list[IngredientBatch]:
        """List active, non-empty batches not expired at ``as_of``, in FEFO order."""
        pass

    @abstractmethod
    async def list_expiring_batches(
        self, as_of: datetime, until: datetime
    ) -> list[IngredientBatch]:
        """List available batches whose expiry falls within [as_of, until]."""
        pass

    @abstractmethod
    async def decrement_batch(
        self, batch_id: int, quantity: float, at: datetime
    ) -> bool:
        """
        Conditionally reduce a batch's current quantity.

        Returns False, changing nothing, when the batch is inactive or holds
        less than ``quantity``. Sets ``emptied_at`` when the batch reaches 0.
        """
        pass

    @abstractmethod
    async def set_batch_active(self, batch_id: int, is_active: bool) -> bool:
        """Soft-(de)activate a batch. Returns False if the batch is missing."""
        pass

    @abstractmethod
    async def add_movement(self, movement: IngredientMovement) -> IngredientMovement:
        """Append a movement to the journal."""
        pass

    @abstractmethod
    async def list_movements(
        self, ingredient_id: int, limit: int = 100
    ) -> list[IngredientMovement]:
        """Get movements for an ingredient, newest first."""
        pass

"""Abstract interface for finished-goods batch storage."""

from abc import ABC, abstractmethod
from datetime import datetime

from src.core.entities.batch import BatchStatus, IngredientUsage, ProductBatch


class IBatchStore(ABC):
    """Interface for finished-goods batches and their traceability."""

    @abstractmethod
    async def create_batch(self, batch: ProductBatch) -> ProductBatch:
        """Create a batch together with its ingredient usage records."""
        pass

    @abstractmethod
    async def get_batch(self, batch_id: int) -> ProductBatch | None:
        """Get batch (with usages) by ID."""
        pass

    @abstractmethod
    async def get_batch_by_code(self, batch_code: str) -> ProductBatch | None:
        """Get batch by its unique code."""
        pass

    @abstractmethod
    async def list_batches(
        self,
        product_id: int | None = None,
        status: BatchStatus | None = None,
        production_plan_id: int | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[ProductBatch]:
        """List batches in FEFO order."""
        pass

    @abstractmethod
    async def list_available_batches(
        self, product_id: int, as_of: datetime
    ) -> list[ProductBatch]:
        """List Active, non-empty batches not expired at ``as_of``, in FEFO order."""
        pass

    @abstractmethod
    async def list_expiring_batches(
        self, as_of: datetime, until: datetime
    ) -> list[ProductBatch]:
        """List Active, non-empty batches whose expiry falls within [as_of, until]."""
        pass

    @abstractmethod
    async def decrement_batch(
        self, batch_id: int, quantity: float, at: datetime
    ) -> bool:
        """
        Conditionally reduce an Active batch's current quantity.

        Returns False, changing nothing, when the batch is not Active or holds
        less than ``quantity``. A batch reaching 0 becomes SoldOut.
        """
        pass

    @abstractmethod
    async def update_status(
        self,
        batch_id: int,
        expected: BatchStatus,
        new: BatchStatus,
        at: datetime,
    ) -> bool:
        """Conditionally change a batch status."""
        pass

    @abstractmethod
    async def get_usages(self, batch_id: int) -> list[IngredientUsage]:
        """Ingredient batches consumed by a batch, with their codes."""
        pass

"""Abstract interface for production plan storage."""

from abc import ABC, abstractmethod
from datetime import datetime

from src.core.entities.production import DetailStatus, PlanStatus, ProductionPlan


class IProductionStore(ABC):
    """Interface for production plans and their details."""

    @abstractmethod
    async def create_plan(self, plan: ProductionPlan) -> ProductionPlan:
        """Create a plan with its details."""
        pass

    @abstractmethod
    async def get_plan(self, plan_id: int) -> ProductionPlan | None:
        """Get plan with details by ID."""
        pass

    @abstractmethod
    async def get_plan_by_code(self, plan_code: str) -> ProductionPlan | None:
        """Get plan with details by its unique code."""
        pass

    @abstractmethod
    async def list_plans(
        self,
        status: PlanStatus | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[ProductionPlan]:
        """List plans, newest plan date first."""
        pass

    @abstractmethod
    async def update_plan_status(
        self,
        plan_id: int,
        expected: PlanStatus,
        new: PlanStatus,
        at: datetime,
    ) -> bool:
        """
        Move a plan from ``expected`` to ``new``.

        Returns False, changing nothing, if the stored status is not
        ``expected``. Stamps started_at/completed_at/cancelled_at to match.
        """
        pass

    @abstractmethod
    async def update_detail_status(
        self,
        detail_id: int,
        expected: DetailStatus,
        new: DetailStatus,
        at: datetime,
        actual_quantity: float | None = None,
    ) -> bool:
        """Conditionally move a detail from ``expected`` to ``new``."""
        pass

    @abstractmethod
    async def cancel_open_details(self, plan_id: int) -> int:
        """Cancel every Pending/In_Progress detail of a plan. Returns count."""
        pass

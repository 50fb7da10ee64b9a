"""
Explicit finite state machines for orders, production plans and plan lines.

Each lifecycle is a transition table. Services ask the table instead of
comparing status strings, so every guard lives here.
"""

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Generic, TypeVar

from src.core.entities.order import OrderStatus
from src.core.entities.production import DetailStatus, PlanStatus
from src.core.exceptions import InvalidTransitionError

S = TypeVar("S", bound=Enum)


class StateMachine(Generic[S]):
    """A named transition table over one status enum."""

    def __init__(self, entity: str, transitions: Mapping[S, Iterable[S]]):
        self.entity = entity
        self._transitions: dict[S, frozenset[S]] = {
            state: frozenset(targets) for state, targets in transitions.items()
        }

    def can_transition(self, current: S, target: S) -> bool:
        return target in self._transitions.get(current, frozenset())

    def ensure_transition(self, current: S, target: S) -> None:
        """Raise InvalidTransitionError unless ``current -> target`` is allowed."""
        if not self.can_transition(current, target):
            raise InvalidTransitionError(self.entity, current.value, target.value)

    def targets(self, current: S) -> frozenset[S]:
        return self._transitions.get(current, frozenset())

    def is_terminal(self, state: S) -> bool:
        return not self.targets(state)


ORDER_LIFECYCLE: StateMachine[OrderStatus] = StateMachine(
    "Order",
    {
        OrderStatus.PENDING: {OrderStatus.APPROVED, OrderStatus.CANCELLED},
        OrderStatus.APPROVED: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
        OrderStatus.SHIPPED: {OrderStatus.RECEIVED},
    },
)

PLAN_LIFECYCLE: StateMachine[PlanStatus] = StateMachine(
    "ProductionPlan",
    {
        PlanStatus.PLANNED: {PlanStatus.IN_PROGRESS, PlanStatus.CANCELLED},
        PlanStatus.IN_PROGRESS: {PlanStatus.COMPLETED, PlanStatus.CANCELLED},
    },
)

DETAIL_LIFECYCLE: StateMachine[DetailStatus] = StateMachine(
    "ProductionPlanDetail",
    {
        DetailStatus.PENDING: {
            DetailStatus.IN_PROGRESS,
            DetailStatus.COMPLETED,
            DetailStatus.CANCELLED,
        },
        DetailStatus.IN_PROGRESS: {DetailStatus.COMPLETED, DetailStatus.CANCELLED},
    },
)

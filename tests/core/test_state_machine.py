"""Tests for the order, plan and plan-line lifecycles."""

import pytest

from src.core.entities import DetailStatus, OrderStatus, PlanStatus
from src.core.exceptions import InvalidTransitionError
from src.core.state_machine import DETAIL_LIFECYCLE, ORDER_LIFECYCLE, PLAN_LIFECYCLE


class TestOrderLifecycle:
    @pytest.mark.parametrize(
        "current,target",
        [
            (OrderStatus.PENDING, OrderStatus.APPROVED),
            (OrderStatus.PENDING, OrderStatus.CANCELLED),
            (OrderStatus.APPROVED, OrderStatus.SHIPPED),
            (OrderStatus.APPROVED, OrderStatus.CANCELLED),
            (OrderStatus.SHIPPED, OrderStatus.RECEIVED),
        ],
    )
    def test_allowed(self, current, target):
        assert ORDER_LIFECYCLE.can_transition(current, target)
        ORDER_LIFECYCLE.ensure_transition(current, target)

    @pytest.mark.parametrize(
        "current,target",
        [
            (OrderStatus.PENDING, OrderStatus.SHIPPED),
            (OrderStatus.SHIPPED, OrderStatus.CANCELLED),
            (OrderStatus.RECEIVED, OrderStatus.CANCELLED),
            (OrderStatus.CANCELLED, OrderStatus.APPROVED),
        ],
    )
    def test_rejected(self, current, target):
        with pytest.raises(InvalidTransitionError) as exc_info:
            ORDER_LIFECYCLE.ensure_transition(current, target)
        assert exc_info.value.details == {
            "entity": "Order",
            "current": current.value,
            "target": target.value,
        }

    def test_terminal_states(self):
        assert ORDER_LIFECYCLE.is_terminal(OrderStatus.RECEIVED)
        assert ORDER_LIFECYCLE.is_terminal(OrderStatus.CANCELLED)
        assert not ORDER_LIFECYCLE.is_terminal(OrderStatus.SHIPPED)


class TestPlanLifecycle:
    def test_cannot_skip_in_progress(self):
        assert not PLAN_LIFECYCLE.can_transition(PlanStatus.PLANNED, PlanStatus.COMPLETED)

    def test_completed_is_terminal(self):
        assert PLAN_LIFECYCLE.targets(PlanStatus.COMPLETED) == frozenset()


class TestDetailLifecycle:
    def test_pending_can_complete_directly(self):
        assert DETAIL_LIFECYCLE.can_transition(DetailStatus.PENDING, DetailStatus.COMPLETED)

    def test_completed_cannot_reopen(self):
        with pytest.raises(InvalidTransitionError):
            DETAIL_LIFECYCLE.ensure_transition(DetailStatus.COMPLETED, DetailStatus.IN_PROGRESS)

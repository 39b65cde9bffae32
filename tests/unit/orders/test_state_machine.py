"""Unit tests for the Order status state machine.

Policy under test:
- PENDING -> CONFIRMED | CANCELLED
- CONFIRMED -> CANCELLED
- CANCELLED is terminal
- same status is an idempotent no-op
"""

from __future__ import annotations

import pytest

from modules.orders.constants import TERMINAL_STATES, VALID_TRANSITIONS, OrderStatus
from modules.orders.exceptions import InvalidOrderStatus, OrderValidationError
from modules.orders.models import Order
from modules.orders.state_machine import is_transition_allowed, resolve_transition

pytestmark = pytest.mark.unit


class TestResolveTransition:
    @pytest.mark.parametrize(
        "current,new",
        [
            (OrderStatus.PENDING, OrderStatus.CONFIRMED),
            (OrderStatus.PENDING, OrderStatus.CANCELLED),
            (OrderStatus.CONFIRMED, OrderStatus.CANCELLED),
        ],
    )
    def test_allowed_transitions_require_write(self, current, new):
        assert resolve_transition(current, new) is True

    @pytest.mark.parametrize("status", list(OrderStatus))
    def test_same_status_is_noop(self, status):
        assert resolve_transition(status, status) is False

    def test_cancelled_to_confirmed_rejected(self):
        with pytest.raises(InvalidOrderStatus, match="Cannot transition"):
            resolve_transition(OrderStatus.CANCELLED, OrderStatus.CONFIRMED)

    def test_cancelled_to_pending_rejected(self):
        with pytest.raises(InvalidOrderStatus):
            resolve_transition(OrderStatus.CANCELLED, OrderStatus.PENDING)

    def test_confirmed_back_to_pending_rejected(self):
        with pytest.raises(InvalidOrderStatus) as exc_info:
            resolve_transition(OrderStatus.CONFIRMED, OrderStatus.PENDING)
        assert exc_info.value.current == OrderStatus.CONFIRMED
        assert exc_info.value.requested == OrderStatus.PENDING

    def test_unknown_status_rejected(self):
        with pytest.raises(OrderValidationError, match="Invalid status"):
            resolve_transition(OrderStatus.PENDING, "SHIPPED")


class TestTransitionsMap:
    def test_all_statuses_have_transition_entry(self):
        for status in OrderStatus:
            assert status in VALID_TRANSITIONS

    def test_terminal_states_have_no_exits(self):
        for state in TERMINAL_STATES:
            assert VALID_TRANSITIONS[state] == set()

    def test_no_self_transitions_in_table(self):
        for state, targets in VALID_TRANSITIONS.items():
            assert state not in targets


class TestOrderModelHelpers:
    def test_new_order_starts_pending(self):
        assert Order().status == OrderStatus.PENDING

    def test_can_transition_to_delegates_to_policy(self):
        order = Order(status=OrderStatus.PENDING)
        assert order.can_transition_to(OrderStatus.CONFIRMED) is True
        assert order.can_transition_to(OrderStatus.PENDING) is True

    def test_cancelled_cannot_be_left(self):
        order = Order(status=OrderStatus.CANCELLED)
        assert order.can_transition_to(OrderStatus.CONFIRMED) is False

    def test_is_transition_allowed_for_unknown_current(self):
        assert is_transition_allowed("ARCHIVED", OrderStatus.PENDING) is False

    def test_terminal_status_only_allows_itself(self):
        assert is_transition_allowed(OrderStatus.CANCELLED, OrderStatus.CANCELLED) is True
        assert is_transition_allowed(OrderStatus.CANCELLED, OrderStatus.PENDING) is False

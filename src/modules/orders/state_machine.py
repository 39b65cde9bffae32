"""Order status state machine.

Policy: ``PENDING`` may move to ``CONFIRMED`` or ``CANCELLED``,
``CONFIRMED`` may only be cancelled and ``CANCELLED`` is terminal
(see ``constants.VALID_TRANSITIONS``).  Requesting the status an
order already has is an idempotent no-op, never an error.
"""

from __future__ import annotations

from modules.orders.constants import TERMINAL_STATES, VALID_TRANSITIONS, OrderStatus
from modules.orders.exceptions import InvalidOrderStatus, OrderValidationError


def is_transition_allowed(current: str, new: str) -> bool:
    """Return ``True`` when *current* may become *new* (including no-ops)."""
    if current == new:
        return True
    if current in TERMINAL_STATES:
        return False
    return new in VALID_TRANSITIONS.get(current, set())


def resolve_transition(current: str, new: str) -> bool:
    """Validate a requested status change.

    Returns ``True`` when the change must be persisted and ``False``
    for the same-status no-op.

    Raises:
        OrderValidationError: *new* is not an ``OrderStatus`` value.
        InvalidOrderStatus: the transition is forbidden.
    """
    if new not in OrderStatus.values:
        raise OrderValidationError(
            f"Invalid status '{new}'. Valid status are: {', '.join(OrderStatus.values)}"
        )
    if current == new:
        return False
    if not is_transition_allowed(current, new):
        raise InvalidOrderStatus(current, new)
    return True

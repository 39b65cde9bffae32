"""Order domain constants.

Defines status choices and the transition table consulted by the
order status state machine.
"""

from decimal import Decimal

from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    CONFIRMED = "CONFIRMED", "Confirmed"
    CANCELLED = "CANCELLED", "Cancelled"


# Same-status requests never reach this table: they are no-ops.
VALID_TRANSITIONS: dict[str, set[str]] = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.CANCELLED},
    OrderStatus.CANCELLED: set(),
}

TERMINAL_STATES: set[str] = {OrderStatus.CANCELLED}

DEFAULT_PAGE = 1

MAX_PAGE_SIZE = 100

MAX_ITEM_QUANTITY = 10_000

# Column bounds of Order.total_amount (Decimal(10,2)) and Order.total_items.
MAX_TOTAL_AMOUNT = Decimal("99999999.99")

MAX_TOTAL_ITEMS = 2_147_483_647

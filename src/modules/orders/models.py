"""Order and OrderItem models.

- ``Order`` stores the totals computed once at creation; they are never
  recomputed from live catalog data.
- ``OrderItem.product_id`` is an opaque reference into the product
  catalog service, not a foreign key: the catalog lives in another
  process and may later rename or delete the product.
- ``OrderItem.price`` snapshots the catalog price at creation time.
- Items are owned by their order (CASCADE) and fixed after creation.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel
from modules.orders.constants import OrderStatus


class Order(BaseModel):
    """Order aggregate root."""

    status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    total_amount: models.DecimalField = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    total_items: models.PositiveIntegerField = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "orders"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["-created_at"], name="orders_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(status__in=OrderStatus.values),
                name="orders_status_valid",
            ),
            models.CheckConstraint(
                condition=models.Q(total_amount__gte=0),
                name="orders_total_amount_non_negative",
            ),
        ]

    # ------------------------------------------------------------------
    # State Machine helpers
    # ------------------------------------------------------------------

    def can_transition_to(self, new_status: str) -> bool:
        """Check whether moving to *new_status* is allowed (same status included)."""
        from modules.orders.state_machine import is_transition_allowed

        return is_transition_allowed(self.status, new_status)

    def __str__(self) -> str:
        return f"Order {self.id} ({self.status})"


class OrderItem(BaseModel):
    """Line item of an order with a price snapshot."""

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )
    product_id: models.CharField = models.CharField(max_length=64, db_index=True)
    quantity: models.PositiveIntegerField = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
    )
    price: models.DecimalField = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )

    class Meta:
        db_table = "order_items"
        ordering = ["created_at", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="order_items_quantity_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(price__gte=0),
                name="order_items_price_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.product_id} x{self.quantity} (${self.price})"

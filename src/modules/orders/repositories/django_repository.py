"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.
Order creation is wrapped in ``transaction.atomic()`` so the header
and its items are stored together or not at all.  Status updates lock
the row with ``select_for_update()`` and check the transition against
the locked status before writing.

Any ``DatabaseError`` is re-raised as ``StorageUnavailable`` with the
original exception chained as ``__cause__``.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional, Sequence
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import DatabaseError, connection, transaction

from modules.orders.aggregator import OrderLine
from modules.orders.exceptions import (
    InvalidOrderStatus,
    OrderNotFound,
    StorageUnavailable,
)
from modules.orders.models import Order, OrderItem
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def connect(self) -> None:
        """Open the default connection and run a trivial query."""
        try:
            connection.ensure_connection()
            with connection.cursor() as cursor:
                cursor.execute("SELECT 1")
                cursor.fetchone()
        except DatabaseError as exc:
            logger.error("database.connection_failed", error=str(exc))
            raise StorageUnavailable("Database unavailable") from exc
        logger.debug("database.connected", vendor=connection.vendor)

    def close(self) -> None:
        connection.close()
        logger.debug("database.closed")

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    def create_order(
        self,
        total_amount: Decimal,
        total_items: int,
        items: Sequence[OrderLine],
    ) -> Order:
        try:
            with transaction.atomic():
                order = Order.objects.create(
                    total_amount=total_amount,
                    total_items=total_items,
                )
                OrderItem.objects.bulk_create(
                    [
                        OrderItem(
                            order=order,
                            product_id=line.product_id,
                            quantity=line.quantity,
                            price=line.price,
                        )
                        for line in items
                    ]
                )
        except DatabaseError as exc:
            logger.error("order.persist_failed", error=str(exc))
            raise StorageUnavailable("Could not persist order") from exc

        log = logger.bind(order_id=str(order.id), item_count=len(items))
        log.info("order.persisted")

        return self._fetch(order.id) or order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order with prefetched items.

        Returns ``None`` for non-existent or malformed IDs.
        """
        try:
            return self._fetch(id)
        except (ValueError, ValidationError):
            return None

    def count_by_status(self, status: Optional[str] = None) -> int:
        try:
            return self._filtered(status).count()
        except DatabaseError as exc:
            raise StorageUnavailable("Could not count orders") from exc

    def list_by_status(
        self, status: Optional[str], offset: int, limit: int
    ) -> List[Order]:
        try:
            return list(self._filtered(status)[offset : offset + limit])
        except DatabaseError as exc:
            raise StorageUnavailable("Could not list orders") from exc

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def update_status(self, id: UUID, new_status: str) -> Order:
        try:
            with transaction.atomic():
                order = Order.objects.select_for_update().filter(id=id).first()
                if order is None:
                    raise OrderNotFound(id)
                old_status = order.status
                if old_status == new_status:
                    return self._fetch(id) or order
                if not order.can_transition_to(new_status):
                    logger.warning(
                        "order.invalid_transition",
                        order_id=str(id),
                        current_status=old_status,
                        new_status=new_status,
                    )
                    raise InvalidOrderStatus(old_status, new_status)
                order.status = new_status
                order.save(update_fields=["status"])
        except DatabaseError as exc:
            logger.error("order.status_update_failed", order_id=str(id), error=str(exc))
            raise StorageUnavailable("Could not update order status") from exc

        logger.info(
            "order.status_persisted",
            order_id=str(id),
            old_status=old_status,
            new_status=new_status,
        )
        return self._fetch(id) or order

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _fetch(self, id: object) -> Optional[Order]:
        try:
            return Order.objects.prefetch_related("items").filter(id=id).first()
        except DatabaseError as exc:
            raise StorageUnavailable("Could not load order") from exc

    @staticmethod
    def _filtered(status: Optional[str]):
        queryset = Order.objects.all()
        if status:
            queryset = queryset.filter(status=status)
        return queryset

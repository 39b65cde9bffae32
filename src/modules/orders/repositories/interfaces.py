"""Order repository interface.

Extends ``IRepository[Order]`` with the operations the Order
aggregate needs: atomic creation with items, status updates and
status-filtered counting / listing with offset pagination.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional, Sequence
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.aggregator import OrderLine
    from modules.orders.models import Order


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    Storage faults surface as ``StorageUnavailable``.
    """

    @abstractmethod
    def create_order(
        self,
        total_amount: Decimal,
        total_items: int,
        items: Sequence[OrderLine],
    ) -> Order:
        """Persist the order header and every item atomically.

        Either everything is stored or nothing is.  The returned order
        has its items attached.
        """

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order with its items, or ``None``."""

    @abstractmethod
    def update_status(self, id: UUID, new_status: str) -> Order:
        """Set the status of an order (row-locked read-modify-write).

        The transition is checked against the status read under the lock.
        When that status already equals *new_status* nothing is written.

        Raises ``OrderNotFound`` when *id* does not resolve and
        ``InvalidOrderStatus`` when the locked status forbids the change.
        """

    @abstractmethod
    def count_by_status(self, status: Optional[str] = None) -> int:
        """Count orders with *status*, or all orders when ``None``."""

    @abstractmethod
    def list_by_status(
        self, status: Optional[str], offset: int, limit: int
    ) -> List[Order]:
        """List order headers (newest first) without loading items."""

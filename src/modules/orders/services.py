"""Order service layer (Use Cases).

Orchestrates order creation, retrieval and status changes across the
product catalog (remote) and the order repository (local storage).

Creation is a deliberate two-step flow, validate-then-persist, with no
transaction spanning the catalog call:

1. Validate the distinct product ids with the catalog.
2. Price the lines and compute totals from that single answer.
3. Persist order + items atomically.
4. Name the items from the same catalog answer (no second call).

A failure at any step aborts the operation; since persistence is the
last step, a failed or interrupted validation never leaves an order
behind.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from modules.orders.aggregator import compute_order_totals
from modules.orders.dtos import (
    ChangeOrderStatusDTO,
    CreateOrderDTO,
    OrderHeaderDTO,
    OrderListOutputDTO,
    OrderOutputDTO,
    OrderPaginationDTO,
    PaginationMetadataDTO,
)
from modules.orders.exceptions import OrderNotFound
from modules.orders.pagination import paginate
from modules.orders.state_machine import resolve_transition

if TYPE_CHECKING:
    from modules.orders.catalog import IProductValidator
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderService:
    """Application service for Order use-cases.

    Receives the repository and the catalog client via constructor
    injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        product_validator: IProductValidator,
    ) -> None:
        self._order_repo = order_repository
        self._products = product_validator

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create(self, dto: CreateOrderDTO) -> OrderOutputDTO:
        """Create an order priced from the product catalog.

        Raises:
            ProductNotFound: a referenced product does not exist.
            UpstreamUnavailable: the catalog could not be consulted.
            StorageUnavailable: the order could not be persisted.
        """
        log = logger.bind(item_lines=len(dto.items))
        log.info("order.creation_started")

        products = self._products.validate(dto.product_ids)
        totals = compute_order_totals(dto.items, products)

        order = self._order_repo.create_order(
            total_amount=totals.total_amount,
            total_items=totals.total_items,
            items=totals.lines,
        )

        log.info(
            "order.created",
            order_id=str(order.id),
            total_amount=str(totals.total_amount),
            total_items=totals.total_items,
        )
        return OrderOutputDTO.from_entity(order, products)

    def change_status(self, dto: ChangeOrderStatusDTO) -> OrderOutputDTO:
        """Move an order to ``dto.status``.

        Same-status requests return the order unchanged without writing.
        The repository checks the transition again under a row lock, so a
        concurrent change between the read and the write is not overwritten.

        Raises:
            OrderNotFound: order does not exist.
            InvalidOrderStatus: the transition is not allowed.
        """
        current = self.find_one(str(dto.id))

        log = logger.bind(
            order_id=str(dto.id),
            current_status=current.status,
            new_status=dto.status,
        )

        if not resolve_transition(current.status, dto.status):
            log.info("order.status_unchanged")
            return current

        order = self._order_repo.update_status(dto.id, dto.status)
        log.info("order.status_updated")

        # Item names were looked up by find_one; no second catalog call.
        names = {item.product_id: item.name for item in current.items}
        updated = OrderOutputDTO.from_entity(order)
        return updated.model_copy(
            update={
                "items": [
                    item.model_copy(update={"name": names.get(item.product_id)})
                    for item in updated.items
                ],
            }
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find_one(self, order_id: str) -> OrderOutputDTO:
        """Retrieve an order with item names looked up in the catalog.

        Raises:
            OrderNotFound: if the order does not exist.
        """
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            logger.info("order.not_found", order_id=order_id)
            raise OrderNotFound(order_id)

        product_ids = [item.product_id for item in order.items.all()]
        products = self._products.validate(product_ids)
        return OrderOutputDTO.from_entity(order, products)

    def find_all(self, dto: OrderPaginationDTO) -> OrderListOutputDTO:
        """Return one page of order headers, optionally filtered by status.

        Raises:
            PageOutOfRange: ``dto.page`` is past the last page.
        """
        total = self._order_repo.count_by_status(dto.status)
        window = paginate(total=total, limit=dto.limit, page=dto.page)

        metadata = PaginationMetadataDTO(
            total=window.total,
            page=window.page,
            last_page=window.last_page,
            status_filter_by=dto.status,
        )
        if window.is_empty:
            return OrderListOutputDTO(metadata=metadata, data=[])

        orders = self._order_repo.list_by_status(
            dto.status, offset=window.offset, limit=window.limit
        )
        return OrderListOutputDTO(
            metadata=metadata,
            data=[OrderHeaderDTO.from_entity(order) for order in orders],
        )

"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF Serializers),
the Service layer and the product catalog client.  DTOs are
immutable (``frozen=True``) and serialize with camelCase aliases,
the wire format shared with the other services of the platform.

- ``CreateOrderItemDTO`` / ``CreateOrderDTO``: order creation input.
- ``OrderPaginationDTO``: list query (page, limit, optional status).
- ``ChangeOrderStatusDTO``: status change input.
- ``ProductRecordDTO``: a product as returned by the catalog.
- ``OrderItemOutputDTO`` / ``OrderOutputDTO``: order with named items.
- ``OrderHeaderDTO`` / ``OrderListOutputDTO``: paginated list output.
"""

from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, List, Mapping, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from modules.orders.constants import (
    DEFAULT_PAGE,
    MAX_ITEM_QUANTITY,
    MAX_PAGE_SIZE,
    OrderStatus,
)

if TYPE_CHECKING:
    from modules.orders.models import Order

CENT = Decimal("0.01")

_DTO_CONFIG = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


def _normalize_status(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    normalized = str(value).strip().upper()
    if normalized not in OrderStatus.values:
        raise ValueError(
            f"Invalid status '{value}'. Valid status are: {', '.join(OrderStatus.values)}"
        )
    return normalized


def _normalize_product_id(value: object) -> str:
    if isinstance(value, bool) or value is None:
        raise ValueError("Product id is required.")
    normalized = str(value).strip()
    if not normalized:
        raise ValueError("Product id is required.")
    return normalized


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateOrderItemDTO(BaseModel):
    """A single requested line: which product and how many.

    The price is never accepted from the client; it is resolved from
    the product catalog by the Service Layer.
    """

    model_config = _DTO_CONFIG

    product_id: str
    quantity: int

    @field_validator("product_id", mode="before")
    @classmethod
    def product_id_as_string(cls, v: object) -> str:
        return _normalize_product_id(v)

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be at least 1.")
        if v > MAX_ITEM_QUANTITY:
            raise ValueError(f"Quantity must be at most {MAX_ITEM_QUANTITY}.")
        return v


class CreateOrderDTO(BaseModel):
    """Order creation request.  The same product may appear on several lines."""

    model_config = _DTO_CONFIG

    items: List[CreateOrderItemDTO]

    @field_validator("items")
    @classmethod
    def items_must_not_be_empty(
        cls, v: List[CreateOrderItemDTO]
    ) -> List[CreateOrderItemDTO]:
        if not v:
            raise ValueError("Order must have at least one item.")
        return v

    @property
    def product_ids(self) -> List[str]:
        """Distinct product ids in first-seen order."""
        return list(dict.fromkeys(item.product_id for item in self.items))


class OrderPaginationDTO(BaseModel):
    model_config = _DTO_CONFIG

    page: int = DEFAULT_PAGE
    limit: int = 10
    status: Optional[str] = None

    @field_validator("page")
    @classmethod
    def page_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Page must be at least 1.")
        return v

    @field_validator("limit")
    @classmethod
    def limit_within_bounds(cls, v: int) -> int:
        if v < 1 or v > MAX_PAGE_SIZE:
            raise ValueError(f"Limit must be between 1 and {MAX_PAGE_SIZE}.")
        return v

    @field_validator("status", mode="before")
    @classmethod
    def status_must_be_known(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_status(v)


class ChangeOrderStatusDTO(BaseModel):
    model_config = _DTO_CONFIG

    id: UUID
    status: str

    @field_validator("status", mode="before")
    @classmethod
    def status_must_be_known(cls, v: str) -> str:
        normalized = _normalize_status(v)
        if normalized is None:
            raise ValueError("Status is required.")
        return normalized


# ---------------------------------------------------------------------------
# Product catalog
# ---------------------------------------------------------------------------


class ProductRecordDTO(BaseModel):
    """A product as reported by the catalog at validation time.

    Prices are quantized to cents so the snapshot stored on the order
    equals the value used to compute its totals.
    """

    model_config = _DTO_CONFIG

    id: str
    name: str
    price: Decimal = Field(ge=0)

    @field_validator("id", mode="before")
    @classmethod
    def id_as_string(cls, v: object) -> str:
        return _normalize_product_id(v)

    @field_validator("price")
    @classmethod
    def price_in_cents(cls, v: Decimal) -> Decimal:
        return v.quantize(CENT, rounding=ROUND_HALF_UP)


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class OrderItemOutputDTO(BaseModel):
    model_config = _DTO_CONFIG

    product_id: str
    name: Optional[str] = None
    quantity: int
    price: Decimal


class OrderHeaderDTO(BaseModel):
    """Order header as shown in list views (no items)."""

    model_config = _DTO_CONFIG

    id: UUID
    status: str
    total_amount: Decimal
    total_items: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, order: Order) -> OrderHeaderDTO:
        return cls(
            id=order.id,
            status=str(order.status),
            total_amount=order.total_amount,
            total_items=order.total_items,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class OrderOutputDTO(OrderHeaderDTO):
    """Order with its items, each enriched with the catalog product name."""

    items: List[OrderItemOutputDTO]

    @classmethod
    def from_entity(
        cls, order: Order, products: Optional[Mapping[str, ProductRecordDTO]] = None
    ) -> OrderOutputDTO:
        """Build the output from an Order instance with prefetched ``items``.

        Names come from *products*; prices always come from the stored
        snapshot, never from the catalog.
        """
        products = products or {}
        items = [
            OrderItemOutputDTO(
                product_id=item.product_id,
                name=products[item.product_id].name
                if item.product_id in products
                else None,
                quantity=item.quantity,
                price=item.price,
            )
            for item in order.items.all()
        ]
        header = OrderHeaderDTO.from_entity(order)
        return cls(**header.model_dump(), items=items)


class PaginationMetadataDTO(BaseModel):
    model_config = _DTO_CONFIG

    status: int = 200
    total: int
    page: int
    last_page: int
    status_filter_by: Optional[str] = None


class OrderListOutputDTO(BaseModel):
    model_config = _DTO_CONFIG

    metadata: PaginationMetadataDTO
    data: List[OrderHeaderDTO]

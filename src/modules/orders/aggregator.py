"""Order totals computation.

Pure function over the requested lines and the product records
returned by the catalog: every line is priced with the catalog price
snapshot, then summed.  No I/O happens here.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Mapping, Sequence

from modules.orders.constants import MAX_TOTAL_AMOUNT, MAX_TOTAL_ITEMS
from modules.orders.dtos import CreateOrderItemDTO, ProductRecordDTO
from modules.orders.exceptions import InconsistentProductData, OrderValidationError


@dataclass(frozen=True)
class OrderLine:
    product_id: str
    quantity: int
    price: Decimal


@dataclass(frozen=True)
class OrderTotals:
    total_amount: Decimal
    total_items: int
    lines: List[OrderLine]


def compute_order_totals(
    items: Sequence[CreateOrderItemDTO],
    products: Mapping[str, ProductRecordDTO],
) -> OrderTotals:
    """Price each line and aggregate the order totals.

    Lines keep the request order; repeated products stay separate lines.

    Raises:
        OrderValidationError: a line has a non-positive quantity, or the
            totals exceed what an order can store.
        InconsistentProductData: a line references a product missing
            from *products* (the validation step should make this
            impossible).
    """
    total_amount = Decimal("0.00")
    total_items = 0
    lines: List[OrderLine] = []

    for item in items:
        if item.quantity < 1:
            raise OrderValidationError(
                f"Quantity for product {item.product_id} must be at least 1."
            )
        product = products.get(item.product_id)
        if product is None:
            raise InconsistentProductData(item.product_id)

        total_amount += product.price * item.quantity
        total_items += item.quantity
        lines.append(
            OrderLine(
                product_id=item.product_id,
                quantity=item.quantity,
                price=product.price,
            )
        )

    if total_amount > MAX_TOTAL_AMOUNT:
        raise OrderValidationError(
            f"Order total {total_amount} exceeds the maximum of {MAX_TOTAL_AMOUNT}.",
            details={"totalAmount": str(total_amount)},
        )
    if total_items > MAX_TOTAL_ITEMS:
        raise OrderValidationError(
            f"Order item count {total_items} exceeds the maximum of {MAX_TOTAL_ITEMS}.",
            details={"totalItems": total_items},
        )

    return OrderTotals(total_amount=total_amount, total_items=total_items, lines=lines)

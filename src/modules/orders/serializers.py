"""Order DRF serializers for API input.

The serializers operate at the Interface layer (API Views) and only
validate request shape.  Business logic lives in the Service Layer,
which receives Pydantic DTOs from ``dtos.py``; responses are rendered
from the output DTOs directly.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.constants import (
    DEFAULT_PAGE,
    MAX_ITEM_QUANTITY,
    MAX_PAGE_SIZE,
    OrderStatus,
)


class CreateOrderItemSerializer(serializers.Serializer):
    """Validates a single item in an order creation request."""

    productId = serializers.CharField(source="product_id", max_length=64)
    quantity = serializers.IntegerField(min_value=1, max_value=MAX_ITEM_QUANTITY)


class CreateOrderSerializer(serializers.Serializer):
    """Validates the order creation request payload."""

    items = CreateOrderItemSerializer(many=True, allow_empty=False)


class OrderPaginationSerializer(serializers.Serializer):
    """Validates ``?page=&limit=&status=`` on the order list."""

    page = serializers.IntegerField(min_value=1, default=DEFAULT_PAGE)
    limit = serializers.IntegerField(
        min_value=1, max_value=MAX_PAGE_SIZE, required=False
    )
    status = serializers.ChoiceField(choices=OrderStatus.choices, required=False)


class ChangeOrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices)

"""Order API views.

Exposes the ``OrderService`` via HTTP using a DRF ViewSet.
Domain exceptions propagate to ``order_exception_handler``, which
renders them as ``{status, code, message}`` bodies; the views never
swallow errors themselves.
"""

from __future__ import annotations

from typing import Any, Type, TypeVar

from django.conf import settings
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from modules.orders.catalog import get_product_validator
from modules.orders.dtos import (
    ChangeOrderStatusDTO,
    CreateOrderDTO,
    CreateOrderItemDTO,
    OrderPaginationDTO,
)
from modules.orders.exceptions import OrderNotFound, OrderValidationError
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import (
    ChangeOrderStatusSerializer,
    CreateOrderSerializer,
    OrderPaginationSerializer,
)
from modules.orders.services import OrderService

DTO = TypeVar("DTO", bound=BaseModel)


def build_dto(dto_class: Type[DTO], **data: Any) -> DTO:
    """Instantiate a DTO, turning Pydantic errors into ``OrderValidationError``."""
    try:
        return dto_class(**data)
    except PydanticValidationError as exc:
        messages = [err["msg"] for err in exc.errors()]
        raise OrderValidationError("; ".join(messages)) from exc


def _render(dto: BaseModel) -> dict:
    return dto.model_dump(mode="json", by_alias=True)


class OrderViewSet(ViewSet):
    """ViewSet for Order operations.

    Uses ``OrderService`` with an injected repository and catalog
    client (DIP).  All ORM access goes through the repository.
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = OrderService(
            order_repository=OrderDjangoRepository(),
            product_validator=get_product_validator(),
        )

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/"""
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        dto = build_dto(
            CreateOrderDTO,
            items=[
                CreateOrderItemDTO(
                    product_id=item["product_id"],
                    quantity=item["quantity"],
                )
                for item in serializer.validated_data["items"]
            ],
        )
        order = self._service.create(dto)
        return Response(_render(order), status=status.HTTP_201_CREATED)

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/?page=&limit=&status="""
        serializer = OrderPaginationSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data

        dto = build_dto(
            OrderPaginationDTO,
            page=params["page"],
            limit=params.get("limit", settings.ORDERS_DEFAULT_PAGE_SIZE),
            status=params.get("status"),
        )
        return Response(_render(self._service.find_all(dto)))

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        if pk is None:
            raise OrderNotFound(pk)
        return Response(_render(self._service.find_one(pk)))

    # ------------------------------------------------------------------
    # Status Update
    # ------------------------------------------------------------------

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/  body: ``{"status": "CONFIRMED"}``"""
        serializer = ChangeOrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            dto = ChangeOrderStatusDTO(id=pk, status=serializer.validated_data["status"])
        except PydanticValidationError as exc:
            raise OrderNotFound(pk) from exc

        return Response(_render(self._service.change_status(dto)))

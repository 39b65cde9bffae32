"""Order domain exceptions.

Raised by the Service Layer and its collaborators when a request
cannot be fulfilled.  Each exception knows its error code and HTTP
status; ``modules.core.exceptions.order_exception_handler`` renders
them for API callers.
"""

from __future__ import annotations

from typing import Iterable, Optional

from rest_framework import status

from modules.core.exceptions import ServiceError


class OrderValidationError(ServiceError):
    """Malformed input: non-positive quantity, unknown status, bad page."""

    code = "validation_error"
    status_code = status.HTTP_400_BAD_REQUEST


class ProductNotFound(ServiceError):
    """One or more referenced products do not exist in the catalog."""

    code = "product_not_found"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, product_ids: Iterable[str]) -> None:
        self.product_ids = sorted(str(pid) for pid in product_ids)
        super().__init__(
            f"Products not found: {', '.join(self.product_ids)}",
            details={"productIds": self.product_ids},
        )


class UpstreamUnavailable(ServiceError):
    """The product catalog could not be reached or answered garbage."""

    code = "products_service_unavailable"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class OrderNotFound(ServiceError):
    """The requested order does not exist."""

    code = "order_not_found"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, order_id: object) -> None:
        self.order_id = str(order_id)
        super().__init__(
            f"Order with id: {self.order_id} not found",
            details={"id": self.order_id},
        )


class PageOutOfRange(ServiceError):
    """The requested page lies beyond the last available page."""

    code = "page_out_of_range"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, requested_page: int, last_page: int) -> None:
        self.requested_page = requested_page
        self.last_page = last_page
        super().__init__(
            f"Page {requested_page} not exist, last page is {last_page}",
            details={"requestedPage": requested_page, "lastPage": last_page},
        )


class InvalidOrderStatus(ServiceError):
    """A forbidden status transition was attempted."""

    code = "invalid_status_transition"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, current: str, requested: str) -> None:
        self.current = current
        self.requested = requested
        super().__init__(
            f"Cannot transition from {current} to {requested}.",
            details={"currentStatus": current, "requestedStatus": requested},
        )


class StorageUnavailable(ServiceError):
    """The persistence layer failed; the original error is chained."""

    code = "storage_unavailable"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class InconsistentProductData(ServiceError):
    """A validated product mapping lacks an id the request references.

    Should be unreachable after a successful validation call.
    """

    code = "inconsistent_product_data"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, product_id: str, message: Optional[str] = None) -> None:
        self.product_id = product_id
        super().__init__(
            message or f"No validated product data for product {product_id}.",
            details={"productId": product_id},
        )

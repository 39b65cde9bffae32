"""Unit tests for the ``{status, code, message}`` error rendering."""

from __future__ import annotations

import pytest
from rest_framework.exceptions import NotFound, ValidationError

from modules.core.exceptions import order_exception_handler
from modules.orders.exceptions import (
    OrderNotFound,
    PageOutOfRange,
    StorageUnavailable,
)

pytestmark = pytest.mark.unit


class TestOrderExceptionHandler:
    def test_service_error_payload(self):
        response = order_exception_handler(OrderNotFound("abc"), {})

        assert response.status_code == 404
        assert response.data == {
            "status": 404,
            "code": "order_not_found",
            "message": "Order with id: abc not found",
            "details": {"id": "abc"},
        }

    def test_page_out_of_range_message(self):
        response = order_exception_handler(PageOutOfRange(4, 3), {})
        assert response.data["message"] == "Page 4 not exist, last page is 3"

    def test_storage_error_keeps_cause(self):
        cause = RuntimeError("connection reset")
        try:
            raise StorageUnavailable("Could not persist order") from cause
        except StorageUnavailable as exc:
            error = exc

        response = order_exception_handler(error, {})

        assert response.status_code == 503
        assert error.__cause__ is cause
        assert "details" not in response.data

    def test_drf_validation_error_is_reshaped(self):
        exc = ValidationError({"items": [{"quantity": ["Ensure this value is greater than or equal to 1."]}]})

        response = order_exception_handler(exc, {})

        assert response.status_code == 400
        assert response.data["code"] == "validation_error"
        assert "items[0].quantity" in response.data["message"]

    def test_other_api_exceptions_keep_their_code(self):
        response = order_exception_handler(NotFound(), {})
        assert response.status_code == 404
        assert response.data["code"] == "not_found"

    def test_unknown_exceptions_are_not_handled(self):
        assert order_exception_handler(KeyError("boom"), {}) is None

"""Service-wide error base and the DRF exception handler.

Every domain exception raised by the Service Layer derives from
``ServiceError`` and carries a machine-readable ``code``, the HTTP
``status_code`` it maps to, a human-readable message and optional
structured ``details``.  ``order_exception_handler`` renders them (and
DRF's own API exceptions) in a single shape::

    {"status": 404, "code": "order_not_found", "message": "...", "details": {...}}
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import structlog
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = structlog.get_logger(__name__)


class ServiceError(Exception):
    """Base class for errors surfaced to API callers."""

    code = "service_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "status": self.status_code,
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            payload["details"] = self.details
        return payload


def _flatten_validation_detail(detail: Any, prefix: str = "") -> list[str]:
    if isinstance(detail, dict):
        messages = []
        for field, value in detail.items():
            key = f"{prefix}.{field}" if prefix else str(field)
            messages.extend(_flatten_validation_detail(value, key))
        return messages
    if isinstance(detail, list):
        messages = []
        for index, value in enumerate(detail):
            key = f"{prefix}[{index}]" if isinstance(value, dict) else prefix
            messages.extend(_flatten_validation_detail(value, key))
        return messages
    return [f"{prefix}: {detail}" if prefix else str(detail)]


def order_exception_handler(exc: Exception, context: Dict[str, Any]) -> Optional[Response]:
    """DRF ``EXCEPTION_HANDLER`` producing ``{status, code, message}`` bodies.

    Unknown exceptions are left to Django (return ``None``) so they are
    reported as server errors, never silently converted.
    """
    if isinstance(exc, ServiceError):
        log = logger.bind(code=exc.code, status_code=exc.status_code)
        if exc.status_code >= 500:
            log.error("api.service_error", message=exc.message, cause=repr(exc.__cause__))
        else:
            log.info("api.client_error", message=exc.message)
        return Response(exc.to_payload(), status=exc.status_code)

    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, ValidationError):
        messages = _flatten_validation_detail(exc.detail)
        response.data = {
            "status": response.status_code,
            "code": "validation_error",
            "message": "; ".join(messages),
            "details": {"errors": exc.detail},
        }
    elif isinstance(exc, APIException):
        codes = exc.get_codes()
        response.data = {
            "status": response.status_code,
            "code": codes if isinstance(codes, str) else "error",
            "message": str(exc.detail),
        }
    return response

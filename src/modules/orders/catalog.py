"""Product catalog client.

The catalog is a separate microservice and the only authority on
which products exist, what they are called and what they cost.
``IProductValidator`` is the capability the Service Layer depends on;
``HttpProductValidator`` talks to the catalog over HTTP.

Contract: ``validate(ids)`` returns a record for *every* requested id
or raises.  A catalog answer that silently omits ids is treated as
``ProductNotFound`` for the missing ones.  Retries are left to the
transport (load balancer / service mesh); one request per call here.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List

import requests
import structlog
from django.conf import settings
from pydantic import TypeAdapter, ValidationError

from modules.core.middleware import REQUEST_ID_HEADER, correlation_id_var
from modules.orders.dtos import ProductRecordDTO
from modules.orders.exceptions import ProductNotFound, UpstreamUnavailable

logger = structlog.get_logger(__name__)

_PRODUCT_LIST = TypeAdapter(List[ProductRecordDTO])


class IProductValidator(ABC):
    """Resolve product ids into current catalog records."""

    @abstractmethod
    def validate(self, product_ids: Iterable[str]) -> Dict[str, ProductRecordDTO]:
        """Return ``{product_id: record}`` for every id in *product_ids*.

        Raises:
            ProductNotFound: at least one id is unknown to the catalog.
            UpstreamUnavailable: the catalog could not be consulted.
        """


class HttpProductValidator(IProductValidator):
    """``IProductValidator`` backed by ``POST /products/validate``."""

    validate_path = "/products/validate"

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    @classmethod
    def from_settings(cls) -> HttpProductValidator:
        base_url = (
            f"http://{settings.PRODUCTS_MICROSERVICE_HOST}"
            f":{settings.PRODUCTS_MICROSERVICE_PORT}"
        )
        return cls(base_url=base_url, timeout=settings.PRODUCTS_MICROSERVICE_TIMEOUT)

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        cid = correlation_id_var.get()
        if cid:
            headers[REQUEST_ID_HEADER] = cid
        return headers

    def ping(self) -> None:
        """Raise ``requests.RequestException`` if the catalog is unreachable."""
        self._session.get(self.base_url, headers=self._headers(), timeout=self.timeout)

    def validate(self, product_ids: Iterable[str]) -> Dict[str, ProductRecordDTO]:
        ids = list(dict.fromkeys(str(pid) for pid in product_ids))
        if not ids:
            return {}

        log = logger.bind(product_ids=ids)
        log.info("catalog.validation_started")

        try:
            response = self._session.post(
                f"{self.base_url}{self.validate_path}",
                json={"ids": ids},
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            log.error("catalog.unreachable", error=str(exc))
            raise UpstreamUnavailable(
                f"Products service unavailable: {exc.__class__.__name__}"
            ) from exc

        if response.status_code in (400, 404):
            missing = self._missing_from_error(response, ids)
            log.warning("catalog.products_not_found", missing=missing)
            raise ProductNotFound(missing)

        if response.status_code >= 400:
            log.error("catalog.error_response", status_code=response.status_code)
            raise UpstreamUnavailable(
                f"Products service answered with HTTP {response.status_code}"
            )

        try:
            records = _PRODUCT_LIST.validate_python(response.json())
        except (ValueError, ValidationError) as exc:
            log.error("catalog.malformed_response", error=str(exc))
            raise UpstreamUnavailable(
                "Products service returned a malformed payload"
            ) from exc

        by_id = {record.id: record for record in records if record.id in ids}
        missing = [pid for pid in ids if pid not in by_id]
        if missing:
            log.warning("catalog.products_not_found", missing=missing)
            raise ProductNotFound(missing)

        log.info("catalog.validation_succeeded", count=len(by_id))
        return by_id

    @staticmethod
    def _missing_from_error(response: requests.Response, ids: List[str]) -> List[str]:
        """Best effort: use the ids the catalog names, else all requested ids."""
        try:
            body = response.json()
        except ValueError:
            return ids
        reported = body.get("productIds") if isinstance(body, dict) else None
        if isinstance(reported, list) and reported:
            return [str(pid) for pid in reported]
        return ids


def get_product_validator() -> HttpProductValidator:
    """Build the catalog client configured in settings."""
    return HttpProductValidator.from_settings()

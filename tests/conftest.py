from __future__ import annotations

from decimal import Decimal
from typing import Dict, Iterable, List, Optional
from unittest.mock import patch

import pytest
from rest_framework.test import APIClient

from modules.orders.catalog import IProductValidator
from modules.orders.dtos import ProductRecordDTO
from modules.orders.exceptions import ProductNotFound


class FakeProductValidator(IProductValidator):
    """In-memory catalog returning canned product records.

    Records every call so tests can assert how often (and with which
    ids) the catalog was consulted.  ``error`` is raised instead of
    answering when set.
    """

    def __init__(self, products: Iterable[ProductRecordDTO]) -> None:
        self.products: Dict[str, ProductRecordDTO] = {p.id: p for p in products}
        self.calls: List[List[str]] = []
        self.error: Optional[Exception] = None

    def validate(self, product_ids: Iterable[str]) -> Dict[str, ProductRecordDTO]:
        ids = list(product_ids)
        self.calls.append(ids)
        if self.error is not None:
            raise self.error
        missing = [pid for pid in ids if pid not in self.products]
        if missing:
            raise ProductNotFound(missing)
        return {pid: self.products[pid] for pid in ids}

    def ping(self) -> None:
        return None


@pytest.fixture()
def catalog_products():
    return [
        ProductRecordDTO(id="A", name="Mechanical Keyboard", price=Decimal("10.00")),
        ProductRecordDTO(id="B", name="Wireless Mouse", price=Decimal("25.50")),
        ProductRecordDTO(id="C", name="USB Cable", price=Decimal("3.33")),
    ]


@pytest.fixture()
def product_validator(catalog_products):
    return FakeProductValidator(catalog_products)


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def fake_catalog(product_validator):
    """Route the API's catalog client to the in-memory fake."""
    with patch(
        "modules.orders.views.get_product_validator", return_value=product_validator
    ):
        yield product_validator

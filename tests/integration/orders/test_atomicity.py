"""Integration tests: a failed creation never leaves rows behind.

Covers catalog rejection, catalog outage (including a timeout while
validating), a storage fault while writing the items and orders too
large to store.
"""

from __future__ import annotations

from decimal import Decimal
from unittest.mock import patch

import pytest
import requests
from django.db import DatabaseError

from modules.orders.catalog import HttpProductValidator
from modules.orders.dtos import ProductRecordDTO
from modules.orders.models import Order, OrderItem

pytestmark = [pytest.mark.integration, pytest.mark.django_db]

URL = "/api/v1/orders/"


def _assert_nothing_persisted():
    assert Order.objects.count() == 0
    assert OrderItem.objects.count() == 0


class TestCreationAtomicity:
    def test_single_unknown_product_persists_nothing(self, api_client, fake_catalog):
        response = api_client.post(
            URL,
            {
                "items": [
                    {"productId": "A", "quantity": 1},
                    {"productId": "B", "quantity": 1},
                    {"productId": "MISSING", "quantity": 1},
                ]
            },
            format="json",
        )

        assert response.status_code == 400
        _assert_nothing_persisted()

    def test_catalog_timeout_persists_nothing(self, api_client):
        validator = HttpProductValidator("http://catalog.test:3001", timeout=0.1)
        with patch(
            "modules.orders.views.get_product_validator", return_value=validator
        ), patch.object(
            validator._session, "post", side_effect=requests.Timeout("read timed out")
        ):
            response = api_client.post(
                URL, {"items": [{"productId": "A", "quantity": 1}]}, format="json"
            )

        assert response.status_code == 503
        _assert_nothing_persisted()

    def test_item_write_failure_rolls_back_header(self, api_client, fake_catalog):
        with patch.object(
            OrderItem.objects, "bulk_create", side_effect=DatabaseError("constraint")
        ):
            response = api_client.post(
                URL, {"items": [{"productId": "A", "quantity": 1}]}, format="json"
            )

        assert response.status_code == 503
        assert response.json()["code"] == "storage_unavailable"
        _assert_nothing_persisted()

    def test_quantity_above_cap_is_client_error(self, api_client, fake_catalog):
        response = api_client.post(
            URL, {"items": [{"productId": "B", "quantity": 10_000_000}]}, format="json"
        )

        assert response.status_code == 400
        assert response.json()["code"] == "validation_error"
        assert fake_catalog.calls == []
        _assert_nothing_persisted()

    def test_total_too_large_to_store_persists_nothing(self, api_client, fake_catalog):
        fake_catalog.products["LUX"] = ProductRecordDTO(
            id="LUX", name="Yacht", price=Decimal("99999999.99")
        )

        response = api_client.post(
            URL, {"items": [{"productId": "LUX", "quantity": 2}]}, format="json"
        )

        assert response.status_code == 400
        assert response.json()["code"] == "validation_error"
        _assert_nothing_persisted()

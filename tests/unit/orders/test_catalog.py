"""Unit tests for the HTTP product catalog client (no network)."""

from __future__ import annotations

from decimal import Decimal
from unittest.mock import MagicMock

import pytest
import requests
from django.test import override_settings

from modules.core.middleware import correlation_id_var
from modules.orders.catalog import HttpProductValidator, get_product_validator
from modules.orders.exceptions import ProductNotFound, UpstreamUnavailable

pytestmark = pytest.mark.unit


def _response(status_code: int, payload=None, json_error: bool = False) -> MagicMock:
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    if json_error:
        response.json.side_effect = ValueError("not json")
    else:
        response.json.return_value = payload
    return response


@pytest.fixture()
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture()
def validator(session):
    return HttpProductValidator("http://catalog:3001/", timeout=2.5, session=session)


class TestValidate:
    def test_returns_records_keyed_by_id(self, validator, session):
        session.post.return_value = _response(
            200,
            [
                {"id": 1, "name": "Keyboard", "price": 10},
                {"id": 2, "name": "Mouse", "price": "25.5"},
            ],
        )

        products = validator.validate(["1", "2"])

        assert set(products) == {"1", "2"}
        assert products["1"].name == "Keyboard"
        assert products["2"].price == Decimal("25.50")

    def test_sends_one_request_with_deduplicated_ids(self, validator, session):
        session.post.return_value = _response(200, [{"id": "A", "name": "K", "price": 1}])

        validator.validate(["A", "A", "A"])

        session.post.assert_called_once()
        args, kwargs = session.post.call_args
        assert args[0] == "http://catalog:3001/products/validate"
        assert kwargs["json"] == {"ids": ["A"]}
        assert kwargs["timeout"] == 2.5

    def test_empty_ids_skip_network(self, validator, session):
        assert validator.validate([]) == {}
        session.post.assert_not_called()

    def test_partial_answer_is_product_not_found(self, validator, session):
        session.post.return_value = _response(200, [{"id": "A", "name": "K", "price": 1}])

        with pytest.raises(ProductNotFound) as exc_info:
            validator.validate(["A", "B"])

        assert exc_info.value.product_ids == ["B"]

    def test_unrequested_records_are_ignored(self, validator, session):
        session.post.return_value = _response(
            200,
            [
                {"id": "A", "name": "K", "price": 1},
                {"id": "X", "name": "Extra", "price": 2},
            ],
        )
        assert set(validator.validate(["A"])) == {"A"}

    def test_not_found_status_uses_reported_ids(self, validator, session):
        session.post.return_value = _response(
            404, {"message": "missing", "productIds": [9]}
        )

        with pytest.raises(ProductNotFound) as exc_info:
            validator.validate(["1", "9"])

        assert exc_info.value.product_ids == ["9"]

    def test_bad_request_without_body_reports_all_ids(self, validator, session):
        session.post.return_value = _response(400, json_error=True)

        with pytest.raises(ProductNotFound) as exc_info:
            validator.validate(["1", "2"])

        assert exc_info.value.product_ids == ["1", "2"]

    @pytest.mark.parametrize(
        "error", [requests.ConnectionError("refused"), requests.Timeout("slow")]
    )
    def test_transport_failure_is_upstream_unavailable(self, validator, session, error):
        session.post.side_effect = error

        with pytest.raises(UpstreamUnavailable) as exc_info:
            validator.validate(["A"])

        assert exc_info.value.__cause__ is error

    def test_server_error_is_upstream_unavailable(self, validator, session):
        session.post.return_value = _response(502, {})

        with pytest.raises(UpstreamUnavailable, match="HTTP 502"):
            validator.validate(["A"])

    @pytest.mark.parametrize(
        "payload",
        [{"not": "a list"}, [{"id": "A"}], [{"id": "A", "name": "K", "price": -3}]],
    )
    def test_malformed_payload_is_upstream_unavailable(self, validator, session, payload):
        session.post.return_value = _response(200, payload)

        with pytest.raises(UpstreamUnavailable, match="malformed"):
            validator.validate(["A"])

    def test_forwards_correlation_id(self, validator, session):
        session.post.return_value = _response(200, [{"id": "A", "name": "K", "price": 1}])

        token = correlation_id_var.set("cid-123")
        try:
            validator.validate(["A"])
        finally:
            correlation_id_var.reset(token)

        headers = session.post.call_args.kwargs["headers"]
        assert headers["X-Request-ID"] == "cid-123"


class TestFromSettings:
    @override_settings(
        PRODUCTS_MICROSERVICE_HOST="products-ms",
        PRODUCTS_MICROSERVICE_PORT=4000,
        PRODUCTS_MICROSERVICE_TIMEOUT=0.5,
    )
    def test_builds_base_url_from_settings(self):
        validator = get_product_validator()
        assert validator.base_url == "http://products-ms:4000"
        assert validator.timeout == 0.5

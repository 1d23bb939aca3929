"""Tests for the ``requests``-based products client."""

import json
from unittest import mock
from urllib.parse import urlsplit

import pytest
import requests

from products_api.app.core.config import Settings
from products_client import DEFAULT_API_URL, ProductsAPI

BASE = "http://api.test/api/products"
PRODUCT = {
    "id": "66f1c2a9e4b0a1b2c3d4e5f6",
    "name": "Widget",
    "price": 9.99,
    "description": "",
    "inStock": True,
    "createdAt": "2025-01-01T00:00:00.000Z",
    "updatedAt": "2025-01-01T00:00:00.000Z",
}


def make_response(status_code, body=None, text=None):
    response = requests.Response()
    response.status_code = status_code
    response.url = BASE
    if body is not None:
        response._content = json.dumps(body).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    else:
        response._content = (text or "").encode("utf-8")
    return response


@pytest.fixture
def session():
    return mock.create_autospec(requests.Session, instance=True)


@pytest.fixture
def api(session):
    return ProductsAPI(BASE + "/", session=session, timeout=3)


def test_default_url_points_at_local_backend():
    assert ProductsAPI(session=mock.Mock()).base_url == DEFAULT_API_URL


def test_default_url_uses_backend_default_port(monkeypatch):
    monkeypatch.delenv("PORT", raising=False)
    assert urlsplit(DEFAULT_API_URL).port == Settings().port == 4000


def test_list_products(api, session):
    session.request.return_value = make_response(200, [PRODUCT])
    products, error = api.list_products()
    assert products == [PRODUCT]
    assert error is None
    session.request.assert_called_once_with(method="GET", url=BASE, json=None, timeout=3)


def test_list_products_unexpected_shape(api, session):
    session.request.return_value = make_response(200, {"items": []})
    products, error = api.list_products()
    assert products == []
    assert error["status_code"] is None


def test_create_product_sends_json(api, session):
    payload = {"name": "Widget", "price": 9.99, "description": "", "inStock": True}
    session.request.return_value = make_response(201, PRODUCT)
    product, error = api.create_product(payload)
    assert error is None
    assert product == PRODUCT
    session.request.assert_called_once_with(method="POST", url=BASE, json=payload, timeout=3)


def test_update_and_get_use_item_url(api, session):
    session.request.return_value = make_response(200, PRODUCT)
    api.update_product(PRODUCT["id"], {"inStock": False})
    api.get_product(PRODUCT["id"])
    urls = [call.kwargs["url"] for call in session.request.call_args_list]
    methods = [call.kwargs["method"] for call in session.request.call_args_list]
    assert urls == [f"{BASE}/{PRODUCT['id']}"] * 2
    assert methods == ["PUT", "GET"]


def test_server_error_message_is_extracted(api, session):
    session.request.return_value = make_response(404, {"error": "Product not found"})
    product, error = api.get_product(PRODUCT["id"])
    assert product is None
    assert error == {"status_code": 404, "message": "Product not found"}


def test_non_json_error_body(api, session):
    session.request.return_value = make_response(502, text="Bad Gateway")
    _, error = api.get_product(PRODUCT["id"])
    assert error == {"status_code": 502, "message": "Bad Gateway"}


def test_transport_failure_does_not_raise(api, session):
    session.request.side_effect = requests.ConnectionError("connection refused")
    products, error = api.list_products()
    assert products == []
    assert error["status_code"] is None
    assert "connection refused" in error["message"]


def test_delete_product(api, session):
    session.request.return_value = make_response(200, {"message": "Product deleted"})
    assert api.delete_product(PRODUCT["id"]) == (True, None)
    session.request.return_value = make_response(404, {"error": "Product not found"})
    ok, error = api.delete_product(PRODUCT["id"])
    assert ok is False
    assert error["status_code"] == 404

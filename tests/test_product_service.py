"""Tests for ``ProductService`` against an in-memory store."""

import asyncio

import pytest

from products_api.app.core.db import new_object_id
from products_api.app.core.errors import InvalidIdentifier, ProductNotFound, ProductValidationError
from products_api.app.services.product_service import ProductService


@pytest.fixture
def service(store):
    return ProductService(store)


def run(coro):
    return asyncio.run(coro)


def test_create_then_get_round_trips_fields(service, widget):
    created = run(service.create_product(widget))
    fetched = run(service.get_product(created.id))
    assert fetched == created
    assert fetched.name == "Widget"
    assert fetched.price == 9.99
    assert fetched.description == ""
    assert fetched.in_stock is True
    assert fetched.created_at


def test_create_invalid_raises_with_field_errors(service):
    with pytest.raises(ProductValidationError) as excinfo:
        run(service.create_product({"price": 2}))
    assert excinfo.value.errors == {"name": "is required"}
    assert excinfo.value.status_code == 400
    assert run(service.list_products()) == []


def test_get_checks_identifier_before_lookup(service):
    with pytest.raises(InvalidIdentifier):
        run(service.get_product("nope"))
    with pytest.raises(ProductNotFound):
        run(service.get_product(new_object_id()))


def test_get_accepts_uppercase_identifier(service, widget):
    created = run(service.create_product(widget))
    assert run(service.get_product(created.id.upper())) == created


def test_update_unknown_id_reports_not_found_before_validation(service):
    with pytest.raises(ProductNotFound):
        run(service.update_product(new_object_id(), {"name": ""}))


def test_update_bumps_updated_at_only(service, widget):
    created = run(service.create_product(widget))
    updated = run(service.update_product(created.id, {"name": "Gadget"}))
    assert updated.name == "Gadget"
    assert updated.created_at == created.created_at
    assert updated.updated_at >= created.updated_at


def test_delete_confirms_then_not_found(service, widget):
    created = run(service.create_product(widget))
    assert run(service.delete_product(created.id)) == {"message": "Product deleted"}
    with pytest.raises(ProductNotFound):
        run(service.delete_product(created.id))

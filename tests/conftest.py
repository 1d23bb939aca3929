"""Shared fixtures for the products API tests."""

from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from products_api.app.core.config import Settings
from products_api.app.core.db import MEMORY_URL, DocumentStore
from products_api.app.main import create_app


@pytest.fixture
def settings() -> Settings:
    return Settings(database_url=MEMORY_URL, log_level="WARNING", cors_origins=["*"])


@pytest.fixture
def store() -> Iterator[DocumentStore]:
    with DocumentStore(MEMORY_URL) as handle:
        yield handle


@pytest.fixture
def client(settings: Settings) -> Iterator[TestClient]:
    app = create_app(settings, store=DocumentStore(settings.database_url))
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def widget() -> dict:
    return {"name": "Widget", "price": 9.99, "description": "", "inStock": True}

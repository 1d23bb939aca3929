"""Tests for the SQLite-backed document store."""

import pytest

from products_api.app.core.db import (
    MEMORY_URL,
    DocumentStore,
    is_valid_object_id,
    new_object_id,
    utc_timestamp,
)
from products_api.app.core.errors import StoreUnavailable


class TestObjectIds:
    def test_new_ids_are_valid_and_unique(self):
        ids = [new_object_id() for _ in range(100)]
        assert len(set(ids)) == 100
        assert all(is_valid_object_id(value) for value in ids)

    def test_ids_from_one_process_increase(self):
        first, second = new_object_id(), new_object_id()
        assert first[8:18] == second[8:18]
        assert int(second[18:], 16) == (int(first[18:], 16) + 1) % 0x1000000

    @pytest.mark.parametrize(
        "value",
        [
            "",
            "123",
            "zzzzzzzzzzzzzzzzzzzzzzzz",
            "66F1C2A9E4B0A1B2C3D4E5FG",
            "66f1c2a9e4b0a1b2c3d4e5f",
            "66f1c2a9e4b0a1b2c3d4e5f6a",
            "00 11 22 33 44 55 66 77 ",
            " 66f1c2a9e4b0a1b2c3d4e5f6",
            "66f1c2a9e4b0a1b2c3d4e5f6\n",
            None,
            42,
        ],
    )
    def test_malformed_ids_are_rejected(self, value):
        assert not is_valid_object_id(value)

    def test_uppercase_ids_are_accepted(self):
        assert is_valid_object_id(new_object_id().upper())

    def test_timestamp_format(self):
        stamp = utc_timestamp()
        assert stamp.endswith("Z")
        assert len(stamp) == len("2025-01-01T00:00:00.000Z")


class TestDocumentStore:
    def test_connect_failure_raises_store_unavailable(self, tmp_path):
        store = DocumentStore(str(tmp_path / "missing" / "dir" / "products.sqlite3"))
        with pytest.raises(StoreUnavailable):
            store.connect()
        assert not store.is_connected

    def test_operations_require_a_connection(self):
        store = DocumentStore(MEMORY_URL)
        with pytest.raises(StoreUnavailable):
            store.collection("products").find_all()

    def test_context_manager_closes_connection(self):
        with DocumentStore(MEMORY_URL) as store:
            assert store.is_connected
        assert not store.is_connected

    def test_file_store_persists_between_connections(self, tmp_path):
        path = str(tmp_path / "products.sqlite3")
        with DocumentStore(path) as store:
            created = store.collection("products").insert_one({"name": "Widget"})
        with DocumentStore(path) as store:
            found = store.collection("products").find_by_id(created["id"])
        assert found == created

    def test_migrations_are_applied_once(self, tmp_path):
        path = str(tmp_path / "products.sqlite3")
        DocumentStore(path).connect().close()
        with DocumentStore(path) as store:
            with store.transaction() as conn:
                versions = [row["version"] for row in conn.execute("SELECT version FROM migrations")]
        assert versions == [1]


class TestCollection:
    def test_insert_sets_id_and_timestamps(self, store):
        doc = store.collection("products").insert_one({"name": "Widget", "id": "ignored"})
        assert is_valid_object_id(doc["id"])
        assert doc["id"] != "ignored"
        assert doc["createdAt"] == doc["updatedAt"]

    def test_find_all_is_newest_first(self, store):
        products = store.collection("products")
        ids = [products.insert_one({"name": f"p{i}"})["id"] for i in range(5)]
        assert [doc["id"] for doc in products.find_all()] == list(reversed(ids))

    def test_collections_are_isolated(self, store):
        store.collection("a").insert_one({"name": "x"})
        assert store.collection("b").find_all() == []
        assert len(store.collection("a").find_all()) == 1

    def test_find_by_id_missing_returns_none(self, store):
        assert store.collection("products").find_by_id(new_object_id()) is None

    def test_update_replaces_fields_and_keeps_identity(self, store):
        products = store.collection("products")
        doc = products.insert_one({"name": "Widget", "price": 1.0})
        updated = products.find_one_and_update(
            doc["id"], lambda current: {"price": 2.0, "id": "other", "createdAt": "never"}
        )
        assert updated["id"] == doc["id"]
        assert updated["createdAt"] == doc["createdAt"]
        assert updated["name"] == "Widget"
        assert updated["price"] == 2.0
        assert products.find_by_id(doc["id"]) == updated

    def test_update_missing_returns_none_without_calling_updater(self, store):
        calls = []
        result = store.collection("products").find_one_and_update(new_object_id(), calls.append)
        assert result is None
        assert calls == []

    def test_failing_updater_writes_nothing(self, store):
        products = store.collection("products")
        doc = products.insert_one({"name": "Widget"})

        def boom(current):
            raise RuntimeError("rejected")

        with pytest.raises(RuntimeError):
            products.find_one_and_update(doc["id"], boom)
        assert products.find_by_id(doc["id"]) == doc

    def test_delete_returns_document_then_none(self, store):
        products = store.collection("products")
        doc = products.insert_one({"name": "Widget"})
        assert products.find_by_id_and_delete(doc["id"]) == doc
        assert products.find_by_id_and_delete(doc["id"]) is None
        assert products.find_all() == []

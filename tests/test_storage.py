"""
Tests for storage backends and transaction support
"""

import pytest
import tempfile
import os

from lending_core.storage import InMemoryStorage, SQLiteStorage, create_storage


@pytest.fixture(params=["memory", "sqlite"])
def storage(request):
    if request.param == "memory":
        backend = InMemoryStorage()
    else:
        backend = SQLiteStorage(":memory:")
    yield backend
    backend.close()


class TestStorageOperations:
    """Test basic CRUD operations on both backends"""

    def test_save_and_load(self, storage):
        storage.save("loans", "loan_1", {"id": "loan_1", "principal": "1000.00"})

        assert storage.load("loans", "loan_1") == {"id": "loan_1", "principal": "1000.00"}
        assert storage.load("loans", "missing") is None

    def test_update_replaces_record(self, storage):
        storage.save("loans", "loan_1", {"id": "loan_1", "principal": "1000.00"})
        storage.save("loans", "loan_1", {"id": "loan_1", "principal": "2000.00"})

        assert storage.load("loans", "loan_1")["principal"] == "2000.00"
        assert storage.count("loans") == 1

    def test_exists_delete_count(self, storage):
        storage.save("loans", "a", {"id": "a"})
        storage.save("loans", "b", {"id": "b"})

        assert storage.exists("loans", "a")
        assert storage.count("loans") == 2
        assert storage.delete("loans", "a")
        assert not storage.delete("loans", "a")
        assert not storage.exists("loans", "a")
        assert len(storage.load_all("loans")) == 1

    def test_find_by_filters(self, storage):
        storage.save("installments", "l1_1", {"id": "l1_1", "company_id": "c1", "loan_id": "l1"})
        storage.save("installments", "l1_2", {"id": "l1_2", "company_id": "c1", "loan_id": "l1"})
        storage.save("installments", "l2_1", {"id": "l2_1", "company_id": "c2", "loan_id": "l2"})

        found = storage.find("installments", {"company_id": "c1", "loan_id": "l1"})

        assert sorted(r["id"] for r in found) == ["l1_1", "l1_2"]
        assert storage.find("installments", {"company_id": "c3"}) == []

    def test_loaded_records_are_copies(self, storage):
        storage.save("loans", "loan_1", {"id": "loan_1", "tags": ["a"]})

        record = storage.load("loans", "loan_1")
        record["tags"].append("b")

        assert storage.load("loans", "loan_1")["tags"] == ["a"]


class TestAtomic:
    """Test all-or-nothing blocks"""

    def test_commit(self, storage):
        with storage.atomic():
            storage.save("loans", "a", {"id": "a"})
            storage.save("loans", "b", {"id": "b"})

        assert storage.count("loans") == 2

    def test_rollback_on_error(self, storage):
        storage.save("loans", "a", {"id": "a", "version": 1})

        with pytest.raises(RuntimeError):
            with storage.atomic():
                storage.save("loans", "a", {"id": "a", "version": 2})
                storage.save("loans", "b", {"id": "b"})
                raise RuntimeError("boom")

        assert storage.load("loans", "a")["version"] == 1
        assert storage.load("loans", "b") is None

    def test_rollback_restores_deleted_records(self, storage):
        storage.save("loans", "a", {"id": "a"})

        with pytest.raises(ValueError):
            with storage.atomic():
                storage.delete("loans", "a")
                raise ValueError("abort")

        assert storage.exists("loans", "a")

    def test_nested_blocks_join_outer_transaction(self, storage):
        with pytest.raises(RuntimeError):
            with storage.atomic():
                storage.save("loans", "outer", {"id": "outer"})
                with storage.atomic():
                    storage.save("loans", "inner", {"id": "inner"})
                raise RuntimeError("abort after inner block")

        assert storage.load("loans", "outer") is None
        assert storage.load("loans", "inner") is None

    def test_storage_usable_after_rollback(self, storage):
        with pytest.raises(RuntimeError):
            with storage.atomic():
                storage.save("payments", "p1", {"id": "p1"})
                raise RuntimeError("boom")

        storage.save("payments", "p2", {"id": "p2"})
        assert storage.count("payments") == 1


class TestSQLitePersistence:

    def test_data_survives_reopen(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "lending.db")

            storage = SQLiteStorage(path)
            storage.save("loans", "loan_1", {"id": "loan_1", "principal": "1500.00"})
            storage.close()

            reopened = SQLiteStorage(path)
            assert reopened.load("loans", "loan_1") == {"id": "loan_1", "principal": "1500.00"}
            reopened.close()


class TestCreateStorage:

    def test_in_memory_without_path(self):
        assert isinstance(create_storage(), InMemoryStorage)

    def test_sqlite_with_path(self):
        storage = create_storage(":memory:")
        assert isinstance(storage, SQLiteStorage)
        storage.close()

"""DocumentStorage request shapes, checked against a recording fake backend."""

import asyncio
import importlib
from unittest.mock import patch

import pytest

from totem.api.storage.BackendUnavailableError import BackendUnavailableError
from totem.api.storage.BulkResult import BulkSuccess
from totem.api.storage.ConfigurationError import ConfigurationError
from totem.api.storage.ConnectionSource import ConnectionSource
from totem.api.storage.DocumentStorage import DocumentStorage

pytestmark = [pytest.mark.storage, pytest.mark.asyncio]

# The package re-exports classes under their module names
source_module = importlib.import_module("totem.api.storage.ConnectionSource")
provider_module = importlib.import_module("totem.api.storage.ConnectionProvider")


class FailingConnection:
    """Connection whose first call fails as if the server were down."""

    def __init__(self):
        self.closed = False

    async def list_collections(self):
        raise BackendUnavailableError("Document store unreachable")

    async def close(self):
        self.closed = True


class TestResolveCollection:
    async def test_concurrent_resolution_creates_collection_once(self, fake_connection):
        storage = DocumentStorage("users", ConnectionSource.explicit(fake_connection))

        handles = await asyncio.gather(*(storage.resolve_collection() for _ in range(10)))

        assert fake_connection.created == ["users"]
        assert fake_connection.list_calls == 1
        assert all(handle is handles[0] for handle in handles)

    async def test_resolved_handle_is_cached(self, fake_connection):
        storage = DocumentStorage("users", ConnectionSource.explicit(fake_connection))
        first = await storage.resolve_collection()
        second = await storage.get_db()
        assert first is second
        assert fake_connection.list_calls == 1

    async def test_existing_collection_is_not_created(self, fake_connection):
        fake_connection.names.append("users")
        storage = DocumentStorage("users", ConnectionSource.explicit(fake_connection))
        await storage.resolve_collection()
        assert fake_connection.created == []

    async def test_creation_is_logged_once(self, fake_connection, caplog):
        storage = DocumentStorage("users", ConnectionSource.explicit(fake_connection))
        with caplog.at_level("INFO", logger="totem.storage"):
            await asyncio.gather(storage.get("a"), storage.get("b"))
        created = [r for r in caplog.records if "New collection created" in r.getMessage()]
        assert len(created) == 1

    async def test_missing_source_raises(self):
        storage = DocumentStorage("users", None)
        with pytest.raises(ConfigurationError):
            await storage.resolve_collection()

    async def test_missing_name_raises(self, fake_connection):
        storage = DocumentStorage("", ConnectionSource.explicit(fake_connection))
        with pytest.raises(ConfigurationError):
            await storage.resolve_collection()
        assert fake_connection.list_calls == 0


class TestSet:
    async def test_new_document_is_written_without_revision(self, fake_storage, fake_connection):
        storage = fake_storage("users")
        result = await storage.set("alice", {"name": "Alice"})

        doc, doc_id = fake_connection.collections["users"].upserts[0]
        assert doc_id == "alice"
        assert "_rev" not in doc
        assert result["ok"] is True

    async def test_existing_revision_is_attached(self, fake_storage, fake_connection):
        storage = fake_storage("users", [{"_id": "alice", "_rev": "1-abc", "name": "Alice"}])
        await storage.set("alice", {"name": "Alice2"})

        doc, _ = fake_connection.collections["users"].upserts[0]
        assert doc == {"name": "Alice2", "_rev": "1-abc"}

    async def test_second_set_carries_revision_from_first(self, fake_storage, fake_connection):
        storage = fake_storage("users")
        first = await storage.set("alice", {"name": "Alice"})
        await storage.set("alice", {"name": "Alice2"})

        doc, _ = fake_connection.collections["users"].upserts[1]
        assert doc["_rev"] == first["rev"]

    @pytest.mark.parametrize("doc_id", [None, "", 42])
    async def test_missing_id_generates_one(self, fake_storage, fake_connection, doc_id):
        storage = fake_storage("users")
        result = await storage.set(doc_id, {"name": "Anon"})

        _, written_id = fake_connection.collections["users"].upserts[0]
        assert isinstance(written_id, str) and written_id
        assert result["id"] == written_id

    async def test_caller_value_is_not_mutated(self, fake_storage):
        storage = fake_storage("users", [{"_id": "alice", "_rev": "1-abc"}])
        value = {"name": "Alice"}
        await storage.set("alice", value)
        assert value == {"name": "Alice"}


class TestSearch:
    @pytest.mark.parametrize("as_map", [True, False])
    @pytest.mark.parametrize("match_all", [True, False])
    async def test_empty_criteria_skip_backend(self, fake_storage, fake_connection, as_map, match_all):
        storage = fake_storage("users", [{"_id": "a"}])
        result = await storage.search({}, match_all=match_all, as_map=as_map)

        assert result == ({} if as_map else [])
        assert fake_connection.collections["users"].queries == []

    async def test_zero_limit_means_unbounded(self, fake_storage, fake_connection):
        storage = fake_storage("users")
        await storage.search({"name": "a"}, limit=0, skip=5)
        query = fake_connection.collections["users"].queries[0]
        assert query["limit"] is None
        assert query["skip"] == 5

    async def test_selector_and_limit_are_forwarded(self, fake_storage, fake_connection):
        storage = fake_storage("users")
        await storage.search({"a": 1, "b": 2}, match_exact=True, match_all=False, limit=3)
        query = fake_connection.collections["users"].queries[0]
        assert query["selector"] == {"$or": [{"a": 1}, {"b": 2}]}
        assert query["limit"] == 3

    async def test_find_requests_single_result(self, fake_storage, fake_connection):
        storage = fake_storage("users", [{"_id": "a", "name": "Alice"}])
        doc = await storage.find({"name": "Alice"}, match_exact=True)
        query = fake_connection.collections["users"].queries[0]
        assert query["limit"] == 1
        assert query["skip"] == 0
        assert doc["_id"] == "a"

    async def test_default_fields_project_listings(self, fake_storage, fake_connection):
        storage = fake_storage("users", default_fields=["_id", "name"])
        await storage.search({"name": "a"})
        await storage.search_raw({}, fields=["secret"])
        queries = fake_connection.collections["users"].queries
        assert queries[0]["fields"] == ["_id", "name"]
        assert queries[1]["fields"] == ["secret"]


class TestSetAll:
    async def test_map_input_attaches_ids_and_existing_revisions(self, fake_storage, fake_connection):
        storage = fake_storage("items", [{"_id": "a", "_rev": "1-xyz", "v": 0}])
        results = await storage.set_all({"a": {"v": 1}, "b": {"v": 2}})

        batch = fake_connection.collections["items"].bulk_writes[0]
        assert batch == [{"v": 1, "_id": "a", "_rev": "1-xyz"}, {"v": 2, "_id": "b"}]
        assert [r.id for r in results] == ["a", "b"]
        assert all(isinstance(r, BulkSuccess) for r in results)

    async def test_ignore_if_exists_drops_existing(self, fake_storage, fake_connection):
        storage = fake_storage("items", [{"_id": "a", "_rev": "1-xyz"}])
        await storage.set_all([{"_id": "a", "v": 1}, {"_id": "b", "v": 2}], ignore_if_exists=True)

        batch = fake_connection.collections["items"].bulk_writes[0]
        assert [doc["_id"] for doc in batch] == ["b"]

    async def test_all_existing_ignored_makes_no_write(self, fake_storage, fake_connection):
        storage = fake_storage("items", [{"_id": "a", "_rev": "1-xyz"}])
        assert await storage.set_all([{"_id": "a"}], ignore_if_exists=True) == []
        assert fake_connection.collections["items"].bulk_writes == []

    async def test_documents_with_revision_are_not_looked_up(self, fake_storage, fake_connection):
        storage = fake_storage("items", [{"_id": "a", "_rev": "3-new"}])
        await storage.set_all([{"_id": "a", "_rev": "2-old"}, {"v": 1}])

        collection = fake_connection.collections["items"]
        assert collection.fetches == []
        assert collection.bulk_writes[0][0]["_rev"] == "2-old"

    async def test_empty_input_is_a_no_op(self, fake_storage, fake_connection):
        storage = fake_storage("items")
        assert await storage.set_all([]) == []
        assert await storage.set_all({}) == []
        assert fake_connection.collections["items"].bulk_writes == []

    async def test_batch_size_splits_writes(self, fake_storage, fake_connection):
        storage = fake_storage("items")
        results = await storage.set_all([{"_id": str(i)} for i in range(5)], batch_size=2)

        sizes = [len(batch) for batch in fake_connection.collections["items"].bulk_writes]
        assert sizes == [2, 2, 1]
        assert len(results) == 5

    async def test_invalid_batch_size(self, fake_storage):
        with pytest.raises(ValueError):
            await fake_storage("items").set_all([{"_id": "a"}], batch_size=0)


class TestDelete:
    async def test_duplicates_and_missing_ids(self, fake_storage, fake_connection):
        storage = fake_storage("items", [{"_id": "a", "_rev": "1-a", "v": 1}])
        results = await storage.delete(["a", "a", "missing"])

        collection = fake_connection.collections["items"]
        assert collection.fetches == [["a", "missing"]]
        assert collection.bulk_writes == [[{"_id": "a", "_rev": "1-a", "v": 1, "_deleted": True}]]
        assert len(results) == 1

    async def test_already_deleted_is_skipped(self, fake_storage, fake_connection):
        storage = fake_storage("items", [{"_id": "a", "_rev": "2-a", "_deleted": True}])
        assert await storage.delete("a") == []
        assert fake_connection.collections["items"].bulk_writes == []

    @pytest.mark.parametrize("ids", [None, 42, {"a": 1}, [], [1, 2]])
    async def test_invalid_ids_are_a_no_op(self, fake_storage, fake_connection, ids):
        storage = fake_storage("items", [{"_id": "a", "_rev": "1-a"}])
        assert await storage.delete(ids) == []
        collection = fake_connection.collections["items"]
        assert collection.fetches == []
        assert collection.queries == []


class TestCreateIndexes:
    async def test_failures_are_skipped(self, fake_storage, fake_connection, caplog):
        storage = fake_storage("items")
        with caplog.at_level("WARNING", logger="totem.storage"):
            names = await storage.create_indexes([
                {"index": {"fields": ["a"]}, "name": "a-index"},
                {"index": {"fields": ["b"]}, "name": "broken-index"},
            ])
        assert names == ["a-index"]
        assert len(fake_connection.collections["items"].indexes) == 2
        assert any("broken-index" in r.getMessage() for r in caplog.records)


class TestUnrevisionedDocuments:
    async def test_set_sends_no_revision(self, fake_storage, fake_connection):
        storage = fake_storage("users", [{"_id": "alice", "name": "Alice"}])
        await storage.set("alice", {"name": "Alice2"})

        doc, _ = fake_connection.collections["users"].upserts[0]
        assert doc == {"name": "Alice2"}

    async def test_set_all_sends_no_revision(self, fake_storage, fake_connection):
        storage = fake_storage("users", [{"_id": "alice", "name": "Alice"}])
        await storage.set_all({"alice": {"name": "Alice2"}})

        assert fake_connection.collections["users"].bulk_writes[0] == [{"name": "Alice2", "_id": "alice"}]


class TestUrlSourceCleanup:
    async def test_failed_resolution_closes_connection(self, fake_connection):
        failing = FailingConnection()
        with patch.object(source_module, "open_connection", side_effect=[failing, fake_connection]):
            storage = DocumentStorage("users", ConnectionSource.from_url("mongomock://localhost/x"))
            with pytest.raises(BackendUnavailableError):
                await storage.resolve_collection()
            assert failing.closed

            # A retry opens a fresh connection
            await storage.resolve_collection()
        assert fake_connection.created == ["users"]
        assert not fake_connection.closed

    async def test_shared_connection_is_left_open(self, provider):
        failing = FailingConnection()
        with patch.object(provider_module, "open_connection", return_value=failing):
            storage = DocumentStorage("users", ConnectionSource.shared(provider))
            with pytest.raises(BackendUnavailableError):
                await storage.resolve_collection()
        assert not failing.closed

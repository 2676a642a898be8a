"""Shared pytest configuration and fixtures for all tests."""

import asyncio
import itertools
import json
import uuid
from pathlib import Path
from typing import Any

import pytest

from totem.api.storage._AbstractBackend import _AbstractCollection, _AbstractConnection
from totem.api.storage.ConnectionProvider import ConnectionProvider
from totem.api.storage.ConnectionSource import ConnectionSource
from totem.api.storage.DatabaseConfig import DatabaseConfig
from totem.api.storage.DocumentStorage import DocumentStorage
from totem.api.storage.NotFoundError import NotFoundError
from totem.logging_config import teardown_logging


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without external services")
    config.addinivalue_line("markers", "storage: document store accessor and backends")
    config.addinivalue_line("markers", "datastore: file-backed key/value store")
    config.addinivalue_line("markers", "config: configuration loading")
    config.addinivalue_line("markers", "cli: command line interface")


def pytest_collection_modifyitems(config, items):
    """Automatically apply markers based on test file location."""
    for item in items:
        path_str = str(item.fspath)
        if "/unit/" in path_str:
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Configuration Helpers
# =============================================================================


def mongomock_config_dict(prefix: str) -> dict:
    """Minimal valid configuration dict using the in-memory backend."""
    return {
        "database": {
            "type": "mongomock",
            "prefix": prefix,
            "data": {},
        },
        "log": {"level": "INFO"},
        "storage": {},
    }


def unique_prefix() -> str:
    # mongomock shares one client per process; a unique database keeps tests apart
    return f"totem_test_{uuid.uuid4().hex[:12]}"


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _reset_totem_logging():
    """Drop handlers a test installed through setup_logging()."""
    yield
    teardown_logging()


@pytest.fixture
def database_config() -> DatabaseConfig:
    return DatabaseConfig(type="mongomock", prefix=unique_prefix(), data={})


@pytest.fixture
def provider(database_config: DatabaseConfig) -> ConnectionProvider:
    return ConnectionProvider(database_config)


@pytest.fixture
def make_storage(provider: ConnectionProvider):
    """Factory for DocumentStorage instances sharing the test's mongomock database."""

    def _make(name: str = "docs", default_fields: list[str] | None = None) -> DocumentStorage:
        return DocumentStorage(name, ConnectionSource.shared(provider), default_fields)

    return _make


@pytest.fixture
def totem_home(tmp_path: Path, monkeypatch) -> Path:
    """Set up TOTEM_HOME with a mongomock config file.

    Returns:
        Path to the home directory (tmp_path)
    """
    monkeypatch.setenv("TOTEM_HOME", str(tmp_path))
    monkeypatch.delenv("TOTEM_DATABASE_URL", raising=False)
    (tmp_path / "config.json").write_text(json.dumps(mongomock_config_dict(unique_prefix())))
    return tmp_path


# =============================================================================
# Recording fake backend
# =============================================================================


class FakeCollection(_AbstractCollection):
    """In-memory collection that records every call made to it."""

    def __init__(self, name: str, docs: list[dict[str, Any]] | None = None):
        self.name = name
        self.docs = {doc["_id"]: dict(doc) for doc in docs or []}
        self.gets: list[str] = []
        self.fetches: list[list[str]] = []
        self.queries: list[dict[str, Any]] = []
        self.upserts: list[tuple[dict[str, Any], str | None]] = []
        self.bulk_writes: list[list[dict[str, Any]]] = []
        self.indexes: list[dict[str, Any]] = []
        self._revs = itertools.count(2)

    async def get(self, doc_id: str) -> dict[str, Any]:
        self.gets.append(doc_id)
        if doc_id not in self.docs:
            raise NotFoundError(doc_id)
        return dict(self.docs[doc_id])

    async def bulk_fetch(self, ids: list[str]) -> list[dict[str, Any] | None]:
        self.fetches.append(list(ids))
        return [dict(self.docs[doc_id]) if doc_id in self.docs else None for doc_id in ids]

    async def query_selector(self, selector, limit=None, skip=0, fields=None, sort=None):
        self.queries.append({"selector": selector, "limit": limit, "skip": skip, "fields": fields, "sort": sort})
        return [dict(doc) for doc in self.docs.values()]

    async def upsert(self, doc: dict[str, Any], doc_id: str | None = None) -> dict[str, Any]:
        self.upserts.append((dict(doc), doc_id))
        rev = f"{next(self._revs)}-fake"
        self.docs[doc_id] = {**doc, "_id": doc_id, "_rev": rev}
        return {"id": doc_id, "rev": rev, "ok": True}

    async def bulk_write(self, docs: list[dict[str, Any]]) -> list[dict[str, Any]]:
        self.bulk_writes.append([dict(doc) for doc in docs])
        return [{"id": doc.get("_id"), "rev": f"{next(self._revs)}-fake", "ok": True} for doc in docs]

    async def create_index(self, definition: dict[str, Any]) -> str:
        self.indexes.append(definition)
        if definition.get("name") == "broken-index":
            raise ValueError("invalid index")
        return definition["name"]


class FakeConnection(_AbstractConnection):
    """Connection whose list/create calls yield to the event loop, exposing races."""

    def __init__(self, existing: tuple[str, ...] = ()):
        self.names = list(existing)
        self.list_calls = 0
        self.created: list[str] = []
        self.collections: dict[str, FakeCollection] = {}
        self.closed = False

    async def list_collections(self) -> list[str]:
        self.list_calls += 1
        await asyncio.sleep(0)
        return list(self.names)

    async def create_collection(self, name: str) -> None:
        await asyncio.sleep(0)
        self.created.append(name)
        self.names.append(name)

    def use_collection(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection(name))

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_connection() -> FakeConnection:
    return FakeConnection()


@pytest.fixture
def fake_storage(fake_connection: FakeConnection):
    """Factory for a DocumentStorage bound to a FakeConnection, optionally seeded."""

    def _make(name: str = "docs", docs: list[dict[str, Any]] | None = None, **kwargs) -> DocumentStorage:
        fake_connection.collections[name] = FakeCollection(name, docs)
        return DocumentStorage(name, ConnectionSource.explicit(fake_connection), **kwargs)

    return _make

"""Abstract base classes for document-store backends.

A connection groups named collections; a collection stores documents keyed by
`_id` and versioned by `_rev`. Every method is a coroutine: implementations
must not block the event loop.
"""

from abc import ABC, abstractmethod
from typing import Any


class _AbstractCollection(ABC):
    name: str

    @abstractmethod
    async def get(self, doc_id: str) -> dict[str, Any]:
        """Fetch one document. Raises NotFoundError when absent."""

    @abstractmethod
    async def bulk_fetch(self, ids: list[str]) -> list[dict[str, Any] | None]:
        """Fetch documents by id, preserving order; missing ids yield None."""

    @abstractmethod
    async def query_selector(
        self,
        selector: dict[str, Any],
        limit: int | None = None,
        skip: int = 0,
        fields: list[str] | None = None,
        sort: list[Any] | None = None,
    ) -> list[dict[str, Any]]:
        """Run a selector query. `limit=None` means unbounded."""

    @abstractmethod
    async def upsert(self, doc: dict[str, Any], doc_id: str | None = None) -> dict[str, Any]:
        """Write one document and return `{"id", "rev", "ok"}`. Raises ConflictError."""

    @abstractmethod
    async def bulk_write(self, docs: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Write many documents; item failures are reported, not raised."""

    @abstractmethod
    async def create_index(self, definition: dict[str, Any]) -> str:
        """Create an index from a Mango-style definition and return its name."""


class _AbstractConnection(ABC):
    @abstractmethod
    async def list_collections(self) -> list[str]:
        pass

    @abstractmethod
    async def create_collection(self, name: str) -> None:
        pass

    @abstractmethod
    def use_collection(self, name: str) -> _AbstractCollection:
        pass

    @abstractmethod
    async def close(self) -> None:
        pass

"""Document store accessor for one named collection.

Every feature module owns one or more `DocumentStorage` instances and talks to
the document store only through them. The accessor resolves its collection
lazily (creating it when missing), translates simple criteria into selectors,
and routes every write through the fetch-revision-then-write path so updates
always carry the current `_rev`. Conflicts are never retried here: `set`
raises `ConflictError`, bulk writes report per-item `BulkFailure`s.

Example:
    ```python
    provider = ConnectionProvider(config.database)
    users = DocumentStorage("users", ConnectionSource.shared(provider))

    await users.set("alice", {"name": "Alice"})
    matches = await users.search({"name": "ali"}, ignore_case=True)
    ```
"""

import asyncio
import uuid
from collections.abc import Iterable, Mapping
from typing import Any

from ...logging_config import get_logger
from ._AbstractBackend import _AbstractCollection
from .build_selector import build_selector
from .BulkResult import BulkResult, bulk_result_from_backend
from .ConfigurationError import ConfigurationError
from .ConnectionSource import ConnectionSource, ConnectionSourceKind
from .NotFoundError import NotFoundError

logger = get_logger("storage")


class DocumentStorage:
    """CRUD, search and bulk operations on a single collection."""

    def __init__(
        self,
        name: str,
        source: ConnectionSource | None,
        default_fields: Iterable[str] | None = None,
    ):
        self.name = name
        self.source = source
        # Projection applied to listing queries; single-document reads stay complete
        self.default_fields = list(default_fields) if default_fields else None
        self._collection: _AbstractCollection | None = None
        self._pending: asyncio.Task | None = None

    def __repr__(self) -> str:
        return f"DocumentStorage({self.name!r})"

    async def resolve_collection(self) -> _AbstractCollection:
        """Return the collection handle, creating the collection on first use.

        Concurrent callers share one in-flight resolution, so the collection is
        created at most once per accessor.
        """
        if self._pending is not None:
            return await self._pending
        if self._collection is not None:
            return self._collection
        if self.source is None:
            raise ConfigurationError(f"No connection source for collection {self.name!r}")
        if not self.name:
            raise ConfigurationError("Missing collection name")

        self._pending = asyncio.ensure_future(self._open_collection())
        try:
            return await self._pending
        finally:
            self._pending = None

    get_db = resolve_collection

    async def _open_collection(self) -> _AbstractCollection:
        connection = self.source.open()  # type: ignore[union-attr]
        try:
            names = await connection.list_collections()
            if self.name not in names:
                await connection.create_collection(self.name)
                logger.info("New collection created: %s", self.name)
        except Exception:
            # A URL source opened this connection for us alone
            if self.source.kind is ConnectionSourceKind.URL:  # type: ignore[union-attr]
                await connection.close()
            raise
        self._collection = connection.use_collection(self.name)
        return self._collection

    async def get(self, doc_id: str) -> dict[str, Any] | None:
        """Fetch one document; None when it does not exist."""
        collection = await self.resolve_collection()
        try:
            return await collection.get(doc_id)
        except NotFoundError:
            return None

    async def get_all(
        self,
        ids: Iterable[str] | None = None,
        as_map: bool = True,
    ) -> dict[str, dict[str, Any]] | list[dict[str, Any]]:
        """Fetch the given documents, or the whole collection when `ids` is empty.

        Ids that do not exist are dropped.
        """
        ids = list(ids or [])
        if ids:
            collection = await self.resolve_collection()
            docs = [doc for doc in await collection.bulk_fetch(ids) if doc]
        else:
            docs = await self.search_raw({})
        if not as_map:
            return docs
        return {doc["_id"]: doc for doc in docs}

    async def find(
        self,
        criteria: Mapping[str, Any],
        match_exact: bool = False,
        match_all: bool = False,
        ignore_case: bool = False,
    ) -> dict[str, Any] | None:
        """Return the first document matching `criteria`, or None."""
        docs = await self.search(criteria, match_exact, match_all, ignore_case, limit=1, skip=0, as_map=False)
        return docs[0] if docs else None

    async def search(
        self,
        criteria: Mapping[str, Any],
        match_exact: bool = False,
        match_all: bool = False,
        ignore_case: bool = False,
        limit: int = 0,
        skip: int = 0,
        as_map: bool = True,
        sort: list[Any] | None = None,
    ) -> dict[str, dict[str, Any]] | list[dict[str, Any]]:
        """Search by field values.

        Args:
            criteria: Field name to value. Empty criteria match nothing.
            match_exact: Compare values for equality instead of substring match.
            match_all: Require every field to match (AND); otherwise any field (OR).
            ignore_case: Case-insensitive substring match. Ignored with `match_exact`.
            limit: Maximum number of results; 0 means unbounded.
            skip: Number of results to skip.
            as_map: Return `{_id: doc}` instead of a list.
            sort: Optional sort specification passed to the backend.
        """
        if not isinstance(criteria, Mapping) or not criteria:
            return {} if as_map else []

        selector = build_selector(criteria, match_exact, match_all, ignore_case)
        options = {"sort": sort} if sort else {}
        docs = await self.search_raw(selector, limit, skip, **options)
        if not as_map:
            return docs
        return {doc["_id"]: doc for doc in docs}

    async def search_raw(
        self,
        selector: dict[str, Any] | None = None,
        limit: int = 0,
        skip: int = 0,
        **options: Any,
    ) -> list[dict[str, Any]]:
        """Run a native selector query.

        `limit=0` omits the limit entirely so the backend returns every match.
        Extra `options` (`fields`, `sort`) are passed to the backend; `fields`
        defaults to the accessor's `default_fields`.
        """
        collection = await self.resolve_collection()
        options.setdefault("fields", self.default_fields)
        return await collection.query_selector(selector or {}, limit=limit or None, skip=skip, **options)

    async def set(self, doc_id: str | None, value: Mapping[str, Any]) -> dict[str, Any]:
        """Create or update one document.

        Returns the backend's `{"id", "rev", "ok"}`. A concurrent update between
        the revision fetch and the write raises ConflictError. A stored document
        without `_rev` (written by another client) is sent without one, and the
        backend adopts it as revision 1.
        """
        if not isinstance(doc_id, str) or not doc_id:
            doc_id = uuid.uuid4().hex
        collection = await self.resolve_collection()
        doc = dict(value)
        existing = await self.get(doc_id)
        if existing and existing.get("_rev"):
            doc["_rev"] = existing["_rev"]
        return await collection.upsert(doc, doc_id)

    async def set_all(
        self,
        docs: Mapping[str, Mapping[str, Any]] | Iterable[Mapping[str, Any]],
        ignore_if_exists: bool = False,
        batch_size: int | None = None,
    ) -> list[BulkResult]:
        """Create or update many documents in bulk.

        Args:
            docs: `{_id: doc}` mapping or an iterable of documents.
            ignore_if_exists: Skip documents whose `_id` already exists instead of
                updating them.
            batch_size: Split the write into chunks of at most this many documents.

        Returns:
            One BulkSuccess or BulkFailure per submitted document.
        """
        if batch_size is not None and batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        if isinstance(docs, Mapping):
            items = [{**value, "_id": doc_id} for doc_id, value in docs.items()]
        else:
            items = [dict(doc) for doc in docs]
        if not items:
            return []

        collection = await self.resolve_collection()

        # Documents that may already exist need their current revision
        lookup_ids = list(dict.fromkeys(item["_id"] for item in items if item.get("_id") and not item.get("_rev")))
        existing: dict[str, dict[str, Any]] = {}
        if lookup_ids:
            existing = {doc["_id"]: doc for doc in await collection.bulk_fetch(lookup_ids) if doc}

        batch = []
        for item in items:
            current = existing.get(item.get("_id")) if not item.get("_rev") else None
            if current:
                if ignore_if_exists:
                    continue
                if current.get("_rev"):
                    item["_rev"] = current["_rev"]
            batch.append(item)
        if not batch:
            return []

        size = batch_size or len(batch)
        results: list[BulkResult] = []
        for start in range(0, len(batch), size):
            raw = await collection.bulk_write(batch[start:start + size])
            results.extend(bulk_result_from_backend(item) for item in raw)
        return results

    async def delete(self, ids: str | Iterable[str] | None) -> list[BulkResult]:
        """Flag documents as deleted.

        Missing and already deleted documents are skipped; when nothing is left
        no backend write is made and `[]` is returned.
        """
        if isinstance(ids, str):
            ids = [ids]
        elif not isinstance(ids, (list, tuple, set, frozenset)):
            return []
        unique_ids = list(dict.fromkeys(doc_id for doc_id in ids if isinstance(doc_id, str)))
        if not unique_ids:
            return []

        docs = [
            {**doc, "_deleted": True}
            for doc in await self.get_all(unique_ids, as_map=False)
            if not doc.get("_deleted")
        ]
        if not docs:
            return []
        return await self.set_all(docs)

    async def create_indexes(self, definitions: Iterable[dict[str, Any]]) -> list[str]:
        """Create indexes from Mango-style definitions.

        Existing identical indexes are left alone. A failing definition is logged
        and skipped; the names of the indexes that exist afterwards are returned.
        """
        collection = await self.resolve_collection()
        definitions = list(definitions)
        results = await asyncio.gather(
            *(collection.create_index(definition) for definition in definitions),
            return_exceptions=True,
        )
        names = []
        for definition, result in zip(definitions, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.warning("Failed to create index %r on %s: %s", definition.get("name"), self.name, result)
                continue
            names.append(result)
        return names

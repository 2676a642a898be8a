"""Revision-tracking collection on top of a pymongo collection.

MongoDB has no document revisions, so `_rev` is stored as an ordinary field
and every write is conditional on it: a write without `_rev` must be an
insert, a write with `_rev` must match the stored value. Documents flagged
`_deleted` are removed once their revision matches.

Documents written by other MongoDB clients carry no `_rev`. A write without
`_rev` adopts such a document (it gets revision 1); a document that already
has a revision still conflicts. A `_rev` this module could not have issued
is a conflict, never a crash.
"""

import uuid
from typing import Any

from pymongo import ASCENDING, DESCENDING
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from .._AbstractBackend import _AbstractCollection
from ..ConflictError import ConflictError
from ..NotFoundError import NotFoundError
from ._run_blocking import _run_blocking


def _next_rev(rev: str | None) -> str:
    """Return the revision following `rev`. Raises ValueError for a malformed `rev`."""
    if not rev:
        return f"1-{uuid.uuid4().hex}"
    generation, sep, _ = str(rev).partition("-")
    if not sep or not (generation.isascii() and generation.isdigit()):
        raise ValueError(f"Invalid revision: {rev!r}")
    return f"{int(generation) + 1}-{uuid.uuid4().hex}"


def _sort_spec(sort: list[Any]) -> list[tuple[str, int]]:
    """Accept `["field"]`, `[{"field": "desc"}]` or `[("field", -1)]` items."""
    spec: list[tuple[str, int]] = []
    for item in sort:
        if isinstance(item, str):
            spec.append((item, ASCENDING))
        elif isinstance(item, dict):
            for field, direction in item.items():
                spec.append((field, DESCENDING if str(direction).lower() == "desc" else ASCENDING))
        else:
            field, direction = item
            spec.append((field, direction))
    return spec


class _Collection(_AbstractCollection):
    def __init__(self, collection: Collection):
        self._collection = collection
        self.name = collection.name

    async def get(self, doc_id: str) -> dict[str, Any]:
        doc = await _run_blocking(self._collection.find_one, {"_id": doc_id})
        if doc is None:
            raise NotFoundError(doc_id)
        return doc

    async def bulk_fetch(self, ids: list[str]) -> list[dict[str, Any] | None]:
        docs = await _run_blocking(lambda: list(self._collection.find({"_id": {"$in": list(ids)}})))
        by_id = {doc["_id"]: doc for doc in docs}
        return [by_id.get(doc_id) for doc_id in ids]

    async def query_selector(
        self,
        selector: dict[str, Any],
        limit: int | None = None,
        skip: int = 0,
        fields: list[str] | None = None,
        sort: list[Any] | None = None,
    ) -> list[dict[str, Any]]:
        projection = {field: 1 for field in fields} if fields else None

        def _query() -> list[dict[str, Any]]:
            cursor = self._collection.find(selector, projection)
            if sort:
                cursor = cursor.sort(_sort_spec(sort))
            if skip:
                cursor = cursor.skip(skip)
            if limit:
                cursor = cursor.limit(limit)
            return list(cursor)

        return await _run_blocking(_query)

    async def upsert(self, doc: dict[str, Any], doc_id: str | None = None) -> dict[str, Any]:
        return await _run_blocking(self._write_one, doc, doc_id)

    async def bulk_write(self, docs: list[dict[str, Any]]) -> list[dict[str, Any]]:
        def _write_all() -> list[dict[str, Any]]:
            results = []
            for doc in docs:
                try:
                    results.append(self._write_one(doc))
                except ConflictError as e:
                    results.append({"id": e.doc_id, "error": "conflict", "reason": e.reason})
            return results

        return await _run_blocking(_write_all)

    async def create_index(self, definition: dict[str, Any]) -> str:
        fields = definition.get("index", {}).get("fields") or []
        if not fields:
            raise ValueError(f"Index definition has no fields: {definition!r}")
        keys = _sort_spec(fields)
        kwargs = {"name": definition["name"]} if definition.get("name") else {}
        return await _run_blocking(self._collection.create_index, keys, **kwargs)

    def _write_one(self, doc: dict[str, Any], doc_id: str | None = None) -> dict[str, Any]:
        doc = dict(doc)
        doc_id = doc_id or doc.get("_id") or uuid.uuid4().hex
        doc["_id"] = doc_id
        current_rev = doc.pop("_rev", None)
        deleted = doc.pop("_deleted", False)
        try:
            new_rev = _next_rev(current_rev)
        except ValueError as e:
            raise ConflictError(doc_id, "Invalid revision.") from e
        # Without a revision only an unrevisioned document matches
        match = {"_id": doc_id, "_rev": current_rev if current_rev else {"$exists": False}}

        if deleted:
            result = self._collection.delete_one(match)
            if result.deleted_count == 0:
                raise ConflictError(doc_id)
            return {"id": doc_id, "rev": new_rev, "ok": True}

        doc["_rev"] = new_rev
        if not current_rev:
            try:
                self._collection.insert_one(doc)
                return {"id": doc_id, "rev": new_rev, "ok": True}
            except DuplicateKeyError:
                # Id taken; the replace below adopts it only when it has no revision
                pass
        result = self._collection.replace_one(match, doc)
        if result.matched_count == 0:
            raise ConflictError(doc_id)
        return {"id": doc_id, "rev": new_rev, "ok": True}

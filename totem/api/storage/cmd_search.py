"""Search documents command."""

import json
from typing import Any

from ..config.TotemConfig import TotemConfig
from ..StageResult import StageResult
from ._run_with_provider import _run_with_provider
from .ConnectionSource import ConnectionSource
from .DocumentStorage import DocumentStorage


def _parse_terms(terms: list[str]) -> dict[str, Any]:
    """Parse `field=value` terms; values that are valid JSON are decoded."""
    criteria: dict[str, Any] = {}
    for term in terms:
        field, sep, raw = term.partition("=")
        if not sep or not field:
            raise ValueError(f"Invalid search term {term!r} (expected field=value)")
        try:
            criteria[field] = json.loads(raw)
        except json.JSONDecodeError:
            criteria[field] = raw
    return criteria


def cmd_search(
    collection: str,
    terms: list[str],
    exact: bool = False,
    any_field: bool = False,
    ignore_case: bool = False,
    limit: int = 50,
) -> StageResult:
    """Search a collection by field values.

    Args:
        collection: Collection name (e.g., "users")
        terms: `field=value` pairs
        exact: Match values exactly instead of by substring
        any_field: Match documents where any field matches (default: all fields)
        ignore_case: Case-insensitive substring matching
        limit: Maximum number of documents (0 for no limit)
    """
    announce = f"Searching {collection}..."
    try:
        criteria = _parse_terms(terms)
        config = TotemConfig.load()
        docs = _run_with_provider(
            config,
            lambda provider: DocumentStorage(collection, ConnectionSource.shared(provider)).search(
                criteria,
                match_exact=exact,
                match_all=not any_field,
                ignore_case=ignore_case,
                limit=limit,
                as_map=False,
            ),
        )
    except Exception as e:
        return StageResult(announce=announce, result=f"Search failed: {e}", output={"error": str(e)}, success=False)

    return StageResult(
        announce=announce,
        result=f"Found {len(docs)} document(s)",
        output={"results": docs, "count": len(docs)},
        success=True,
    )

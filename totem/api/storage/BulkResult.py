"""Per-document outcome of a bulk write."""

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class BulkSuccess:
    id: str
    rev: str | None = None
    ok: bool = True


@dataclass(frozen=True)
class BulkFailure:
    id: str | None
    error: str
    reason: str = ""
    ok: bool = False


BulkResult = Union[BulkSuccess, BulkFailure]


def bulk_result_from_backend(item: dict[str, Any]) -> BulkResult:
    """Normalize one backend result entry.

    Backends report `{"id", "rev", "ok"}` on success and `{"id", "error",
    "reason"}` on failure; an entry is a success only when it has no `error`.
    """
    if item.get("error"):
        return BulkFailure(id=item.get("id"), error=str(item["error"]), reason=str(item.get("reason") or ""))
    return BulkSuccess(id=item["id"], rev=item.get("rev"))

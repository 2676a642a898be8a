"""Revision conflict error."""

from .StorageError import StorageError


class ConflictError(StorageError):
    """Raised when a write carries a missing or stale revision token."""

    def __init__(self, doc_id: str, reason: str = "Document update conflict."):
        self.doc_id = doc_id
        self.reason = reason
        super().__init__(f"{reason} (id={doc_id!r})")

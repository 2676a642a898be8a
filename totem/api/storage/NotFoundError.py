"""Document not found error."""

from .StorageError import StorageError


class NotFoundError(StorageError):
    """Raised by a backend collection when a document id does not exist."""

    def __init__(self, doc_id: str):
        self.doc_id = doc_id
        super().__init__(f"Document not found: {doc_id!r}")

"""Backend unavailable error."""

from .StorageError import StorageError


class BackendUnavailableError(StorageError):
    """Raised when the document store cannot be reached."""

"""Base storage error."""


class StorageError(Exception):
    """Base class for all document store errors."""

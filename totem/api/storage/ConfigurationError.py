"""Storage configuration error."""

from .StorageError import StorageError


class ConfigurationError(StorageError):
    """Raised when an accessor has no usable connection source or collection name."""

"""Open a backend connection from a database config."""

import importlib

from ._AbstractBackend import _AbstractConnection
from .ConfigurationError import ConfigurationError
from .DatabaseConfig import _BACKEND_REGISTRY, DatabaseConfig


def open_connection(database_config: DatabaseConfig) -> _AbstractConnection:
    """Create a connection for the configured backend type."""
    backend_type = database_config.type
    if backend_type not in _BACKEND_REGISTRY:
        raise ConfigurationError(
            f"Unsupported backend type: {backend_type!r} (supported: {list(_BACKEND_REGISTRY.keys())})"
        )
    # Backend modules are imported on demand so unused drivers are never loaded
    module = importlib.import_module(f"{__package__}._{backend_type}._Impl")
    return module._Impl(database_config)

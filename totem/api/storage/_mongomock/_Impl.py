"""Mock MongoDB connection implementation using mongomock."""

from typing import Any

import mongomock

from ..ConfigurationError import ConfigurationError
from ..DatabaseConfig import DatabaseConfig
from .._mongo._Impl import _Impl as _MongoImpl
from ._Data import _Data

# Shared mongomock client for all instances (singleton pattern)
_shared_mongomock_client: mongomock.MongoClient | None = None


def _get_mongomock_client() -> mongomock.MongoClient:
    """Get or create shared mongomock client."""
    global _shared_mongomock_client
    if _shared_mongomock_client is None:
        _shared_mongomock_client = mongomock.MongoClient()
    return _shared_mongomock_client


class _Impl(_MongoImpl):
    def _create_client(self, database_config: DatabaseConfig) -> Any:
        if not isinstance(database_config.data, _Data):
            raise ConfigurationError("MongoMock config data is required")
        return _get_mongomock_client()

    async def close(self) -> None:
        # Don't close shared client - it's reused across instances
        pass

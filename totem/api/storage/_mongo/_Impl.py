"""MongoDB connection implementation."""

from typing import Any

from pymongo import MongoClient
from pymongo.errors import CollectionInvalid

from .._AbstractBackend import _AbstractCollection, _AbstractConnection
from ..ConfigurationError import ConfigurationError
from ..DatabaseConfig import DatabaseConfig
from ._Collection import _Collection
from ._Data import _Data
from ._run_blocking import _run_blocking


class _Impl(_AbstractConnection):
    def __init__(self, database_config: DatabaseConfig):
        """Bind to one MongoDB database.

        Note: the public API calls MongoDB collections "collections" as well; the
        MongoDB database is named by the config prefix.
        """
        self.database_name = database_config.prefix
        self._client = self._create_client(database_config)
        self._database = self._client[self.database_name]

    def _create_client(self, database_config: DatabaseConfig) -> Any:
        if not isinstance(database_config.data, _Data):
            raise ConfigurationError("MongoDB config data is required")
        # MongoClient connects lazily; nothing blocks here
        return MongoClient(
            database_config.data.uri,
            serverSelectionTimeoutMS=database_config.data.server_selection_timeout_ms,
        )

    async def list_collections(self) -> list[str]:
        return await _run_blocking(self._database.list_collection_names)

    async def create_collection(self, name: str) -> None:
        try:
            await _run_blocking(self._database.create_collection, name)
        except CollectionInvalid:
            # Created concurrently by another accessor or process
            pass

    def use_collection(self, name: str) -> _AbstractCollection:
        return _Collection(self._database[name])

    async def close(self) -> None:
        await _run_blocking(self._client.close)

"""Process-wide document-store connection, owned explicitly."""

from typing import TYPE_CHECKING

from ...logging_config import get_logger
from ._AbstractBackend import _AbstractConnection
from .ConfigurationError import ConfigurationError
from .DatabaseConfig import DatabaseConfig
from .open_connection import open_connection

if TYPE_CHECKING:
    from ..config.TotemConfig import TotemConfig

logger = get_logger("storage.connection")


class ConnectionProvider:
    """Holds at most one shared connection for its lifetime.

    The first `get_connection()` creates the connection, from the URL passed in
    or else from the provider's config; every later call returns that same
    connection, whatever URL it passes. `shutdown()` closes it, after which the
    next call opens a fresh one.
    """

    def __init__(self, database_config: DatabaseConfig | None = None):
        self.database_config = database_config
        self._connection: _AbstractConnection | None = None

    @classmethod
    def from_config(cls, config: "TotemConfig") -> "ConnectionProvider":
        return cls(config.database)

    @property
    def connected(self) -> bool:
        return self._connection is not None

    def get_connection(self, url: str | None = None) -> _AbstractConnection:
        if self._connection is None:
            if url:
                database_config = DatabaseConfig.from_url(url)
            elif self.database_config is not None:
                database_config = self.database_config
            else:
                raise ConfigurationError("No database URL or config available for the shared connection")
            self._connection = open_connection(database_config)
            logger.debug("Opened %s connection to %r", database_config.type, database_config.prefix)
        return self._connection

    def init(self) -> _AbstractConnection:
        return self.get_connection()

    async def shutdown(self) -> None:
        connection, self._connection = self._connection, None
        if connection is not None:
            await connection.close()

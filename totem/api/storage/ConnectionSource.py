"""Where a DocumentStorage gets its connection from."""

from dataclasses import dataclass
from enum import Enum

from ._AbstractBackend import _AbstractConnection
from .ConfigurationError import ConfigurationError
from .ConnectionProvider import ConnectionProvider
from .DatabaseConfig import DatabaseConfig
from .open_connection import open_connection


class ConnectionSourceKind(str, Enum):
    EXPLICIT = "explicit"
    URL = "url"
    SHARED = "shared"


@dataclass(frozen=True)
class ConnectionSource:
    """Tagged connection source: an explicit connection, a URL, or a shared provider.

    Build one with `explicit()`, `from_url()` or `shared()`.
    """

    kind: ConnectionSourceKind
    connection: _AbstractConnection | None = None
    url: str | None = None
    provider: ConnectionProvider | None = None

    @classmethod
    def explicit(cls, connection: _AbstractConnection) -> "ConnectionSource":
        if not isinstance(connection, _AbstractConnection):
            raise ConfigurationError(f"Invalid connection: {connection!r}")
        return cls(ConnectionSourceKind.EXPLICIT, connection=connection)

    @classmethod
    def from_url(cls, url: str) -> "ConnectionSource":
        if not url or not isinstance(url, str):
            raise ConfigurationError(f"Invalid connection URL: {url!r}")
        return cls(ConnectionSourceKind.URL, url=url)

    @classmethod
    def shared(cls, provider: ConnectionProvider) -> "ConnectionSource":
        if not isinstance(provider, ConnectionProvider):
            raise ConfigurationError(f"Invalid connection provider: {provider!r}")
        return cls(ConnectionSourceKind.SHARED, provider=provider)

    def open(self) -> _AbstractConnection:
        """Return the connection this source points at, opening it if needed.

        A URL source opens a fresh connection on every call; accessors call this
        once and keep the result.
        """
        if self.kind is ConnectionSourceKind.EXPLICIT:
            return self.connection  # type: ignore[return-value]
        if self.kind is ConnectionSourceKind.URL:
            return open_connection(DatabaseConfig.from_url(self.url))  # type: ignore[arg-type]
        return self.provider.get_connection()  # type: ignore[union-attr]

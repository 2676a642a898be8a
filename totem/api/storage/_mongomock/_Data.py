"""Mock MongoDB configuration data for tests and local runs."""

from pydantic import BaseModel


class _Data(BaseModel):
    """MongoMock configuration data.

    MongoMock is in-memory, so there is nothing to configure. All connections
    in a process share one client; use distinct prefixes to isolate data.
    """

    model_config = {"extra": "forbid"}

"""Database configuration with Pydantic validation."""

from typing import Any
from urllib.parse import urlparse

from pydantic import BaseModel, Field, model_validator

from ...constants import DEFAULT_DATABASE_PREFIX
from ._mongo._Data import _Data as _MongoData
from ._mongomock._Data import _Data as _MongomockData
from .ConfigurationError import ConfigurationError

# Registry: add new backends here (ONLY place backend types are enumerated)
_BACKEND_REGISTRY: dict[str, type[BaseModel]] = {
    "mongo": _MongoData,
    "mongomock": _MongomockData,
}


class DatabaseConfig(BaseModel):
    type: str = Field(..., description="Database backend type")
    prefix: str = Field(default=DEFAULT_DATABASE_PREFIX, description="Backend database holding all collections")
    data: BaseModel = Field(..., description="Backend-specific configuration data")

    @model_validator(mode="before")
    @classmethod
    def validate_and_populate_data(cls, values: Any) -> dict[str, Any]:
        if not isinstance(values, dict):
            raise ValueError(f"database config must be a dict, got {type(values).__name__}")
        database_type = values.get("type")
        if not database_type:
            raise ValueError("database.type is required")
        config_data_class = _BACKEND_REGISTRY.get(database_type)
        if not config_data_class:
            raise ValueError(f"Unknown backend type: {database_type!r} (supported: {list(_BACKEND_REGISTRY.keys())})")
        data = values.get("data")
        if data is None:
            raise ValueError("database.data is required")
        if not isinstance(data, config_data_class):
            # Allow empty dict - backend config classes can have defaults
            values["data"] = config_data_class(**data)
        return values

    def model_dump(self, **kwargs) -> dict[str, Any]:
        """Override to properly serialize nested data model."""
        result = super().model_dump(**kwargs)
        # Explicitly serialize the data field since it's typed as BaseModel
        if isinstance(self.data, BaseModel):
            result["data"] = self.data.model_dump(**kwargs)
        return result

    @classmethod
    def from_url(cls, url: str) -> "DatabaseConfig":
        """Build a config from a single connection URL.

        `mongomock://<anything>/<prefix>` selects the in-memory backend,
        `mongodb://...` and `mongodb+srv://...` select MongoDB. The URL path,
        when present, names the backend database.

        Raises:
            ConfigurationError: If the URL is empty or its scheme is not supported.
        """
        if not url:
            raise ConfigurationError("database URL is empty")
        parsed = urlparse(url)
        prefix = parsed.path.strip("/") or DEFAULT_DATABASE_PREFIX
        if parsed.scheme == "mongomock":
            return cls(type="mongomock", prefix=prefix, data={})
        if parsed.scheme in ("mongodb", "mongodb+srv"):
            return cls(type="mongo", prefix=prefix, data={"uri": url})
        raise ConfigurationError(f"Unsupported database URL scheme: {parsed.scheme!r}")

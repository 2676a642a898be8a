"""Top-level Totem configuration."""

import json
import os
from contextlib import suppress
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ...constants import TOTEM_DATABASE_URL_ENV
from ..storage.ConfigurationError import ConfigurationError
from ..storage.DatabaseConfig import DatabaseConfig
from .get_home_dir import get_home_dir
from .LogConfig import LogConfig
from .StorageConfig import StorageConfig


class TotemConfig(BaseModel):
    """Top-level configuration for the storage layers."""

    model_config = ConfigDict(extra="forbid")

    database: DatabaseConfig
    log: LogConfig = Field(default_factory=LogConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)

    @classmethod
    def get_config_path(cls) -> Path:
        """Get path to config file based on TOTEM_HOME or default to ~/.totem."""
        return get_home_dir("config.json")

    @classmethod
    def load(cls) -> "TotemConfig":
        """Load and validate config from file.

        When TOTEM_DATABASE_URL is set it replaces the `database` section, so a
        deployment can point at a different document store without editing the file.

        Raises:
            ValueError: If config file not found, invalid JSON, or validation error
        """
        path = cls.get_config_path()
        env_url = os.environ.get(TOTEM_DATABASE_URL_ENV)

        raw: dict[str, Any] = {}
        if path.exists():
            try:
                with path.open() as fh:
                    raw = json.load(fh)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON in config file {path}: {e}") from e
        elif not env_url:
            raise ValueError(f"Configuration file not found at {path}")

        if env_url:
            try:
                raw["database"] = DatabaseConfig.from_url(env_url)
            except (ConfigurationError, ValidationError) as e:
                raise ValueError(f"Invalid {TOTEM_DATABASE_URL_ENV}: {e}") from e

        try:
            return cls(**raw)
        except ValidationError as e:
            error_list = e.errors() or [{"msg": str(e), "loc": (), "type": "value_error", "input": None}]
            first = error_list[0]
            error_msg = first.get("msg", str(e))
            loc = first.get("loc", ())
            field = ".".join(str(x) for x in loc) if isinstance(loc, (list, tuple)) else ""
            detail = f"{field}: {error_msg}" if field else error_msg
            raise ValueError(f"Configuration validation error: {detail}") from e

    def to_dict(self) -> dict[str, Any]:
        """Convert TotemConfig instance to a dictionary for serialization."""
        return {
            "database": self.database.model_dump(),
            "log": self.log.model_dump(),
            "storage": self.storage.model_dump(),
        }

    def save(self) -> None:
        """Save the current configuration to a JSON file.

        Uses atomic write (write to temp file, then rename) so an interrupted
        save never leaves a truncated config behind.
        """
        path = self.get_config_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            with temp_path.open("w") as fh:
                json.dump(self.to_dict(), fh, indent=4)
            temp_path.replace(path)
        except Exception as e:
            with suppress(Exception):
                if temp_path.exists():
                    temp_path.unlink()
            raise RuntimeError(f"Failed to save config: {e}") from e

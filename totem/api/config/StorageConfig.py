"""File-backed storage configuration."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from ...constants import DATA_DIR_NAME
from .get_home_dir import get_home_dir


class StorageConfig(BaseModel):
    """Where JSON-file datasets (settings, translations, caches) are kept."""

    model_config = ConfigDict(extra="forbid")

    data_dir: str | None = Field(default=None, description="Directory for JSON data files (default: <home>/data)")

    def get_data_dir(self) -> Path:
        if self.data_dir:
            return Path(self.data_dir).expanduser().resolve()
        return get_home_dir(DATA_DIR_NAME)

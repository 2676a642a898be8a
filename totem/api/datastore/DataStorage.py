"""JSON-file-backed key/value store.

Used for small, rarely-updated datasets (countries, translations, settings)
that do not warrant a collection in the document store. The whole map is kept
in memory and written back to disk as a JSON array of `[key, value]` pairs on
every mutation. There are no revisions: the last write wins.
"""

import json
from collections.abc import Iterable, Mapping
from contextlib import suppress
from pathlib import Path
from typing import Any

from ..config.StorageConfig import StorageConfig
from ..storage.build_selector import build_criteria


def _freeze(key: Any) -> Any:
    """JSON has no tuples: keys stored as arrays come back as (nested) tuples."""
    if isinstance(key, list):
        return tuple(_freeze(part) for part in key)
    return key


class DataStorage:
    """Synchronous key/value store mirrored to one JSON file.

    Args:
        filename: File name; `.json` is appended when missing.
        disable_cache: Re-read the file on every access instead of trusting the
            in-memory copy. Use when other processes write the same file.
        data_dir: Directory holding the file (default: `StorageConfig().get_data_dir()`).
    """

    def __init__(self, filename: str, disable_cache: bool = False, data_dir: str | Path | None = None):
        if not filename:
            raise ValueError("DataStorage requires a file name")
        if not filename.endswith(".json"):
            filename = f"{filename}.json"
        directory = Path(data_dir).expanduser() if data_dir else StorageConfig().get_data_dir()
        self.path = directory / filename
        self.disable_cache = disable_cache
        self._data: dict[Any, Any] = self._read()

    def __repr__(self) -> str:
        return f"DataStorage({str(self.path)!r})"

    def __len__(self) -> int:
        return len(self._load())

    def __contains__(self, key: Any) -> bool:
        return key in self._load()

    @property
    def size(self) -> int:
        return len(self)

    def has(self, key: Any) -> bool:
        return key in self

    def get(self, key: Any, default: Any = None) -> Any:
        return self._load().get(key, default)

    def get_all(self) -> dict[Any, Any]:
        """Return a copy of every entry."""
        return dict(self._load())

    def set(self, key: Any, value: Any) -> "DataStorage":
        self._write({**self._load(), key: value})
        return self

    def set_all(self, entries: Mapping[Any, Any], replace: bool = True) -> "DataStorage":
        """Store many entries at once.

        With `replace` (the default) the file content becomes exactly `entries`;
        otherwise `entries` are merged into the existing data.
        """
        self._write(dict(entries) if replace else {**self._load(), **entries})
        return self

    def delete(self, keys: Any) -> "DataStorage":
        """Remove one key, or every key in a list/tuple/set. Missing keys are ignored.

        A tuple key must be wrapped in a list: `delete([("a", 1)])`.
        """
        data = dict(self._load())
        targets: Iterable[Any] = keys if isinstance(keys, (list, tuple, set, frozenset)) else [keys]
        for key in targets:
            data.pop(key, None)
        self._write(data)
        return self

    def clear(self) -> "DataStorage":
        return self.set_all({})

    def search(
        self,
        criteria: Mapping[str, Any],
        match_exact: bool = False,
        match_all: bool = False,
        ignore_case: bool = False,
        limit: int = 0,
    ) -> dict[Any, Any]:
        """Search entries whose values are mappings, by field.

        Matching follows DocumentStorage.search: substring or exact match, all
        fields (AND) or any field (OR). Empty criteria match nothing.
        """
        if not isinstance(criteria, Mapping) or not criteria:
            return {}
        matchers = build_criteria(criteria, match_exact, ignore_case)
        combine = all if match_all else any
        result: dict[Any, Any] = {}
        for key, value in self._load().items():
            if not isinstance(value, Mapping):
                continue
            if combine(field in value and matcher.matches(value[field]) for field, matcher in matchers.items()):
                result[key] = value
                if limit and len(result) >= limit:
                    break
        return result

    def find(
        self,
        criteria: Mapping[str, Any],
        match_exact: bool = False,
        match_all: bool = False,
        ignore_case: bool = False,
    ) -> Any:
        """Return the first matching value, or None."""
        matches = self.search(criteria, match_exact, match_all, ignore_case, limit=1)
        return next(iter(matches.values()), None)

    # Internal helpers
    def _load(self) -> dict[Any, Any]:
        if self.disable_cache:
            self._data = self._read()
        return self._data

    def _read(self) -> dict[Any, Any]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8") or "[]")
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in data file {self.path}: {e}") from e
        if not isinstance(raw, list):
            raise ValueError(f"Data file {self.path} must contain an array of [key, value] pairs")
        return {_freeze(key): value for key, value in raw}

    def _write(self, data: dict[Any, Any]) -> None:
        """Write `data` atomically (temp file, then rename), then adopt it as the cache.

        On failure the file and the in-memory map both keep their previous content.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            with temp_path.open("w", encoding="utf-8") as fh:
                json.dump([[key, value] for key, value in data.items()], fh, indent=4)
            temp_path.replace(self.path)
        except Exception as e:
            with suppress(Exception):
                if temp_path.exists():
                    temp_path.unlink()
            raise RuntimeError(f"Failed to save {self.path}: {e}") from e
        self._data = data

"""File-backed key/value storage for small datasets."""

from .DataStorage import DataStorage

__all__ = ["DataStorage"]

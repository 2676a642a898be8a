"""Totem storage core: document store accessor and file-backed key/value store."""

__version__ = "0.1.0"

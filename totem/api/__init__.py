"""API module for Totem storage.

Functions defined here back both the library surface and the CLI commands.
"""

__all__ = []

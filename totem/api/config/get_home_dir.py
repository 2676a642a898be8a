"""Get Totem home directory path or path under it."""

import os
from pathlib import Path

from ...constants import TOTEM_HOME_ENV, TOTEM_HOME_EXT


def get_home_dir(*parts: str) -> Path:
    """Get Totem home directory path or path under it.

    Checks the TOTEM_HOME environment variable first, defaults to ~/.totem if not set.

    Args:
        *parts: Optional path components to join (e.g., "config.json", "data")

    Returns:
        Absolute path to the home directory or a subpath under it

    Examples:
        >>> get_home_dir()
        Path("/Users/user/.totem")
        >>> get_home_dir("data", "settings.json")
        Path("/Users/user/.totem/data/settings.json")
    """
    totem_home_env = os.environ.get(TOTEM_HOME_ENV)
    if totem_home_env:
        totem_home = Path(totem_home_env).expanduser().resolve()
    else:
        # HOME is honoured for test isolation
        home_env = os.environ.get("HOME")
        if home_env:
            totem_home = Path(home_env) / TOTEM_HOME_EXT
        else:
            totem_home = Path.home() / TOTEM_HOME_EXT

    return totem_home / Path(*parts) if parts else totem_home

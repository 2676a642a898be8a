"""Shared constants for the Totem home directory and storage defaults."""

TOTEM_HOME_EXT = ".totem"  # user-level state/config directory suffix

TOTEM_HOME_DISPLAY = f"~/{TOTEM_HOME_EXT}"  # user-readable path hint

# Environment variables
TOTEM_HOME_ENV = "TOTEM_HOME"
TOTEM_DATABASE_URL_ENV = "TOTEM_DATABASE_URL"

# MongoDB database used when the URI carries no database path
DEFAULT_DATABASE_PREFIX = "totem"

DATA_DIR_NAME = "data"
LOG_FILE_NAME = "totem.log"

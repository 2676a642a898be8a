"""Document store accessor layer."""

from .BackendUnavailableError import BackendUnavailableError
from .BulkResult import BulkFailure, BulkResult, BulkSuccess
from .ConfigurationError import ConfigurationError
from .ConflictError import ConflictError
from .ConnectionProvider import ConnectionProvider
from .ConnectionSource import ConnectionSource, ConnectionSourceKind
from .DatabaseConfig import DatabaseConfig
from .DocumentStorage import DocumentStorage
from .MatchCriterion import MatchCriterion, MatchKind
from .NotFoundError import NotFoundError
from .StorageError import StorageError
from .build_selector import build_selector

__all__ = [
    "BackendUnavailableError",
    "BulkFailure",
    "BulkResult",
    "BulkSuccess",
    "ConfigurationError",
    "ConflictError",
    "ConnectionProvider",
    "ConnectionSource",
    "ConnectionSourceKind",
    "DatabaseConfig",
    "DocumentStorage",
    "MatchCriterion",
    "MatchKind",
    "NotFoundError",
    "StorageError",
    "build_selector",
]

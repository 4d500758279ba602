"""Exception hierarchy for sw-collector."""

from .base import CollectorError
from .config import (
    ConfigFileError,
    ConfigurationError,
    InvalidConfigError,
    UnsupportedPlatformError,
)
from .history import (
    HistoryParseError,
    LogAccessError,
    MalformedLineError,
    PackagePayloadError,
    TimestampError,
)
from .storage import EnumerationError, PersistenceError, ReportingError

__all__ = [
    "CollectorError",
    "LogAccessError",
    "HistoryParseError",
    "MalformedLineError",
    "TimestampError",
    "PackagePayloadError",
    "PersistenceError",
    "EnumerationError",
    "ReportingError",
    "ConfigurationError",
    "ConfigFileError",
    "InvalidConfigError",
    "UnsupportedPlatformError",
]

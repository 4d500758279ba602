"""Configuration and platform exceptions."""

from pathlib import Path
from typing import Any, List, Optional

from .base import CollectorError


class ConfigurationError(CollectorError):
    """Base class for configuration-related errors."""

    pass


class InvalidConfigError(ConfigurationError):
    """Raised when configuration values are invalid."""

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            f"Invalid configuration for {key}: {value}",
            details={"key": key, "value": str(value), "reason": reason},
        )
        self.key = key
        self.value = value
        self.reason = reason


class ConfigFileError(ConfigurationError):
    """Raised when a configuration file is missing or cannot be parsed."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Invalid config file: {path}", details={"path": str(path), "reason": reason})
        self.path = path
        self.reason = reason


class UnsupportedPlatformError(ConfigurationError):
    """Raised when no package-manager history extractor fits the host."""

    def __init__(self, platform_id: str, supported: List[str], reason: Optional[str] = None):
        details = {"platform": platform_id, "supported": ", ".join(supported)}
        if reason:
            details["reason"] = reason
        super().__init__(f"Unsupported platform: {platform_id}", details=details)
        self.platform_id = platform_id
        self.supported = supported

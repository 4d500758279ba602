"""Persistence exceptions: store connection, writes and enumeration."""

from typing import Optional

from .base import CollectorError


class PersistenceError(CollectorError):
    """Raised when the inventory store cannot be opened, written or queried."""

    def __init__(self, operation: str, reason: str, uri: Optional[str] = None):
        details = {"operation": operation, "reason": reason}
        if uri:
            details["uri"] = uri
        super().__init__(f"Inventory store {operation} failed", details=details)
        self.operation = operation
        self.reason = reason
        self.uri = uri


class EnumerationError(PersistenceError):
    """Raised when the inventory cannot be enumerated for listing."""

    def __init__(self, reason: str, uri: Optional[str] = None):
        super().__init__("enumeration", reason, uri=uri)


class ReportingError(CollectorError):
    """Raised when the remote assessment service rejects an inventory report."""

    def __init__(self, command: str, reason: str):
        super().__init__(
            f"Inventory report '{command}' failed",
            details={"command": command, "reason": reason},
        )
        self.command = command
        self.reason = reason

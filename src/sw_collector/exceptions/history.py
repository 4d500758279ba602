"""History log exceptions: file access and line/payload parsing."""

from pathlib import Path
from typing import Optional

from .base import CollectorError


class LogAccessError(CollectorError):
    """Raised when the transaction log cannot be opened or mapped."""

    def __init__(self, path: Path, reason: str):
        super().__init__(
            f"Cannot read history log: {path}",
            details={"path": str(path), "reason": reason},
        )
        self.path = path
        self.reason = reason


class HistoryParseError(CollectorError):
    """Base class for errors while parsing transaction log content."""

    pass


class MalformedLineError(HistoryParseError):
    """Raised when a line lacks the keyword delimiter."""

    def __init__(self, line: str, delimiter: str, line_number: Optional[int] = None):
        details = {"delimiter": repr(delimiter), "line": line[:80]}
        if line_number is not None:
            details["line_number"] = str(line_number)
        super().__init__(f"terminator symbol '{delimiter}' not found", details=details)
        self.line = line
        self.delimiter = delimiter
        self.line_number = line_number


class TimestampError(HistoryParseError):
    """Raised when a start marker carries an unparsable timestamp."""

    def __init__(self, value: str, reason: str):
        super().__init__(
            f"Unable to parse timestamp: {value.strip()!r}",
            details={"reason": reason},
        )
        self.value = value
        self.reason = reason


class PackagePayloadError(HistoryParseError):
    """Raised when a package list does not match the expected grammar."""

    def __init__(self, payload: str, reason: str):
        super().__init__(
            f"Malformed package list: {payload.strip()[:80]!r}",
            details={"reason": reason},
        )
        self.payload = payload
        self.reason = reason

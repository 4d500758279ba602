"""Data models for transaction-log extraction and the software inventory."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Operation(Enum):
    """Kind of change a package event records."""

    INSTALL = "install"
    UPGRADE = "upgrade"
    REMOVE = "remove"

    @property
    def installs(self) -> bool:
        return self is not Operation.REMOVE


@dataclass(frozen=True)
class Cursor:
    """Last committed transaction: where the next run resumes."""

    eid: int
    epoch: int
    timestamp: str  # YYYY-MM-DDTHH:MM:SSZ


@dataclass(frozen=True)
class PackageEvent:
    eid: int  # owning transaction
    operation: Operation
    package: str
    version: str
    old_version: Optional[str] = None  # upgrades only


@dataclass(frozen=True)
class InventoryItem:
    """Canonical software identity and whether it is currently installed."""

    name: str  # software identifier
    package: str
    version: str
    installed: bool

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.name, self.package, self.version)


@dataclass
class MergeResult:
    added: int = 0
    updated: int = 0
    unchanged: int = 0

    @property
    def total(self) -> int:
        return self.added + self.updated + self.unchanged

    def __iadd__(self, other: "MergeResult") -> "MergeResult":
        self.added += other.added
        self.updated += other.updated
        self.unchanged += other.unchanged
        return self


@dataclass
class SyncResult:
    """Outcome of one synchronizer run."""

    stop_reason: str  # "eof" | "count"
    transactions: int
    package_events: int
    cursor: Cursor
    merged: MergeResult

    @property
    def count_limited(self) -> bool:
        return self.stop_reason == "count"

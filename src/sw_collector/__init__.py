"""
sw-collector - software inventory collection for remote integrity attestation

Incrementally parses the package manager's transaction log, derives
install/upgrade/remove events and merges them into a durable software
identity inventory that a verifier can query or receive over REST.
"""

__version__ = "0.3.0"

from .config import CollectorConfig, load_config
from .history.models import Cursor, InventoryItem, Operation, PackageEvent, SyncResult

__all__ = [
    "CollectorConfig",
    "Cursor",
    "InventoryItem",
    "Operation",
    "PackageEvent",
    "SyncResult",
    "load_config",
]

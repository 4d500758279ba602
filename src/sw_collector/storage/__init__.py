"""SQLite persistence for the collector: cursor, events and inventory."""

from .database import CollectorDB, database_path
from .inventory import InventoryListing, format_item, list_identifiers

__all__ = [
    "CollectorDB",
    "database_path",
    "InventoryListing",
    "format_item",
    "list_identifiers",
]

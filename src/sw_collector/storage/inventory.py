"""Read-only listing of the software inventory."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..exceptions import EnumerationError, PersistenceError
from ..history.models import InventoryItem
from ..logging_config import get_logger
from .database import CollectorDB

logger = get_logger(__name__)


@dataclass
class InventoryListing:
    items: list[InventoryItem] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.items)

    @property
    def installed_count(self) -> int:
        return sum(1 for item in self.items if item.installed)

    @property
    def removed_count(self) -> int:
        return self.count - self.installed_count

    def to_dict(self) -> dict:
        return {
            "count": self.count,
            "installed": self.installed_count,
            "removed": self.removed_count,
            "items": [
                {
                    "name": i.name,
                    "package": i.package,
                    "version": i.version,
                    "installed": i.installed,
                }
                for i in self.items
            ],
        }


def format_item(item: InventoryItem) -> str:
    """Render one item as ``name,package,version,installed_flag``."""
    return f"{item.name},{item.package},{item.version},{int(item.installed)}"


def list_identifiers(uri: str, installed: Optional[bool] = None) -> InventoryListing:
    """Enumerate all software identities stored in the collector database.

    Args:
        uri: Inventory store URI
        installed: True for installed items only, False for removed only,
            None for everything

    Raises:
        EnumerationError: If the store cannot be opened or read.
    """
    try:
        with CollectorDB(uri, read_only=True) as db:
            listing = InventoryListing(items=list(db.iter_inventory(installed=installed)))
    except EnumerationError:
        raise
    except PersistenceError as e:
        raise EnumerationError(e.reason, uri=uri)

    logger.info(
        "retrieved %d software identities with %d installed and %d deleted",
        listing.count,
        listing.installed_count,
        listing.removed_count,
    )
    return listing

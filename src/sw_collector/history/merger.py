"""Fold package events into the canonical software inventory."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from ..identity import SoftwareIdentity
from ..logging_config import get_logger
from .models import InventoryItem, MergeResult, PackageEvent

if TYPE_CHECKING:
    from ..storage.database import CollectorDB

logger = get_logger(__name__)


class InventoryMerger:
    """Apply package events to inventory rows keyed by (name, package, version).

    Installs and upgrades mark the event's version installed; removals mark
    it not installed, creating the row if the version was never seen. An
    upgrade leaves the previous version's row untouched: old and new
    versions are distinct identities until a removal names the old one.

    Each event sets a state rather than incrementing one, so merging the
    same events again leaves the inventory unchanged.
    """

    def __init__(self, db: "CollectorDB", identity: SoftwareIdentity):
        self.db = db
        self.identity = identity

    def item_for(self, event: PackageEvent) -> InventoryItem:
        return InventoryItem(
            name=self.identity.sw_id(event.package, event.version),
            package=event.package,
            version=event.version,
            installed=event.operation.installs,
        )

    def merge(self, events: Iterable[PackageEvent]) -> MergeResult:
        """Apply events in order. Caller owns the surrounding store transaction."""
        result = MergeResult()
        for event in events:
            self._apply(self.item_for(event), result)
        return result

    def merge_items(self, items: Iterable[InventoryItem]) -> MergeResult:
        result = MergeResult()
        for item in items:
            self._apply(item, result)
        return result

    def _apply(self, item: InventoryItem, result: MergeResult) -> None:
        existing = self.db.get_inventory_item(item.name, item.package, item.version)
        if existing is None:
            self.db.upsert_inventory(item)
            result.added += 1
            logger.debug("    added %s (installed=%s)", item.name, item.installed)
        elif existing.installed != item.installed:
            self.db.upsert_inventory(item)
            result.updated += 1
            logger.debug("    updated %s (installed=%s)", item.name, item.installed)
        else:
            result.unchanged += 1

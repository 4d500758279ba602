"""Package-manager history extractors and the factory that picks one.

Adding a package manager requires:
1. Subclass HistoryExtractor with its markers, operation keywords,
   ``extract_timestamp`` and ``parse_packages``.
2. Decorate it with ``@register_extractor``.
The synchronizer never sees which variant it is driving.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import tzinfo
from typing import TYPE_CHECKING, Iterable, Optional

from ..environment import Platform
from ..exceptions import PersistenceError, UnsupportedPlatformError
from ..logging_config import get_logger
from .merger import InventoryMerger
from .models import InventoryItem, MergeResult, Operation, PackageEvent

if TYPE_CHECKING:
    from ..storage.database import CollectorDB

logger = get_logger(__name__)

# (package, version, old_version)
ParsedPackage = tuple[str, str, Optional[str]]


class HistoryExtractor(ABC):
    """Turns the payload of one package manager's log lines into events."""

    name: str = ""
    families: tuple[str, ...] = ()
    start_marker: str = ""
    end_marker: str = ""
    operations: dict[str, Operation] = {}

    def __init__(
        self,
        db: "CollectorDB",
        merger: InventoryMerger,
        timezone: Optional[tzinfo] = None,
        merge_installed: bool = True,
    ):
        self.db = db
        self.merger = merger
        self.timezone = timezone
        self.merge_installed = merge_installed
        self.events: list[PackageEvent] = []

    @classmethod
    def supports(cls, platform: Platform) -> bool:
        return any(platform.is_like(family) for family in cls.families)

    def operation_for(self, keyword: str) -> Optional[Operation]:
        return self.operations.get(keyword)

    @abstractmethod
    def extract_timestamp(self, remainder: str) -> str:
        """Normalize a start-marker payload to ``YYYY-MM-DDTHH:MM:SSZ``.

        Raises:
            TimestampError: If the payload is not a timestamp.
        """

    @abstractmethod
    def parse_packages(self, remainder: str, operation: Operation) -> list[ParsedPackage]:
        """Parse every package group of an operation line.

        Raises:
            PackagePayloadError: If any group breaks the grammar; nothing
                from the line is returned in that case.
        """

    def installed_packages(self) -> Optional[list[tuple[str, str]]]:
        """(package, version) pairs the package manager reports installed.

        None means the list is unavailable and reconciliation is skipped.
        """
        return None

    def extract_packages(
        self, remainder: str, eid: int, operation: Operation
    ) -> list[PackageEvent]:
        """Parse one operation line and record its events under transaction ``eid``."""
        events = [
            PackageEvent(eid=eid, operation=operation, package=p, version=v, old_version=old)
            for p, v, old in self.parse_packages(remainder, operation)
        ]
        self.db.add_package_events(events)
        self.events.extend(events)
        for event in events:
            if event.old_version is not None:
                logger.debug("    %s (%s -> %s)", event.package, event.old_version, event.version)
            else:
                logger.debug("    %s (%s)", event.package, event.version)
        return events

    def merge_installed_packages(self) -> bool:
        """Reconcile this run's events, and the installed list, with the inventory.

        Returns False only when the store fails; the failure is logged.
        """
        installed = self.installed_packages() if self.merge_installed else None
        try:
            with self.db.transaction():
                result = self.merger.merge(self.events)
                if installed is not None:
                    result += self._merge_installed(installed)
        except PersistenceError as e:
            logger.error("Merging installed packages failed: %s", e)
            return False

        logger.info(
            "merged %d package events: %d added, %d updated, %d unchanged",
            len(self.events),
            result.added,
            result.updated,
            result.unchanged,
        )
        return True

    def _merge_installed(self, installed: Iterable[tuple[str, str]]) -> MergeResult:
        known = self.db.installed_packages()
        missing = [
            InventoryItem(
                name=self.merger.identity.sw_id(package, version),
                package=package,
                version=version,
                installed=True,
            )
            for package, version in installed
            if (package, version) not in known
        ]
        result = self.merger.merge_items(missing)
        logger.info(
            "merged %d installed packages not recorded in the history", result.added + result.updated
        )
        return result


_REGISTRY: dict[str, type[HistoryExtractor]] = {}


def register_extractor(cls: type[HistoryExtractor]) -> type[HistoryExtractor]:
    _REGISTRY[cls.name] = cls
    return cls


def supported_extractors() -> list[str]:
    return sorted(_REGISTRY)


def resolve_extractor(
    platform: Platform, package_manager: Optional[str] = None
) -> type[HistoryExtractor]:
    """Pick the extractor class once per run.

    Raises:
        UnsupportedPlatformError: If the named or detected package manager
            has no extractor.
    """
    if package_manager is not None:
        cls = _REGISTRY.get(package_manager)
        if cls is None:
            raise UnsupportedPlatformError(
                package_manager, supported_extractors(), reason="unknown package manager"
            )
        return cls

    for cls in _REGISTRY.values():
        if cls.supports(platform):
            return cls
    raise UnsupportedPlatformError(platform.os_id or platform.name, supported_extractors())


def create_extractor(
    db: "CollectorDB",
    merger: InventoryMerger,
    platform: Platform,
    package_manager: Optional[str] = None,
    timezone: Optional[tzinfo] = None,
    merge_installed: bool = True,
) -> HistoryExtractor:
    cls = resolve_extractor(platform, package_manager)
    logger.debug("Using %s history extractor", cls.name)
    return cls(db, merger, timezone=timezone, merge_installed=merge_installed)

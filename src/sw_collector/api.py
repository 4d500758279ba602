"""Public API for sw-collector.

Wires configuration, platform detection, the store and the history
extractor together for each collector operation.

Example:
    >>> from sw_collector import load_config
    >>> from sw_collector.api import extract
    >>>
    >>> result = extract(load_config(count=50))
    >>> result.transactions
    12
"""

from __future__ import annotations

from typing import Optional

from .config import CollectorConfig
from .environment import Platform, detect_platform
from .exceptions import InvalidConfigError
from .history import HistoryReader, InventoryMerger, Synchronizer, create_extractor
from .history.models import Cursor, SyncResult
from .identity import SoftwareIdentity
from .logging_config import get_logger
from .reporting import InventoryReporter, RestClient
from .storage import CollectorDB, InventoryListing, list_identifiers

logger = get_logger(__name__)


def software_identity(config: CollectorConfig, platform: Platform) -> SoftwareIdentity:
    os_string = config.os_name or platform.os_string
    return SoftwareIdentity(tag_creator=config.tag_creator, os_string=os_string)


def initialize(config: CollectorConfig) -> tuple[Cursor, bool]:
    """Create the store and its first transaction if needed."""
    with CollectorDB(config.database) as db:
        return db.initialize(config.first_time)


def extract(config: CollectorConfig, platform: Optional[Platform] = None) -> SyncResult:
    """Synchronize the inventory with the transaction log.

    The extractor variant is resolved once, here, from the detected (or
    given) platform unless ``config.package_manager`` names one.

    Raises:
        CollectorError: Any failure; committed transactions stay committed.
    """
    platform = platform or detect_platform()

    with CollectorDB(config.database) as db:
        merger = InventoryMerger(db, software_identity(config, platform))
        extractor = create_extractor(
            db,
            merger,
            platform,
            package_manager=config.package_manager,
            timezone=config.timezone,
            merge_installed=config.merge_installed,
        )
        sync = Synchronizer(db, extractor, merger, count=config.count)

        with HistoryReader(config.history) as reader:
            result = sync.extract(reader)

    logger.info(
        "processed %d transactions with %d package events, last eid = %d",
        result.transactions,
        result.package_events,
        result.cursor.eid,
    )
    return result


def list_inventory(config: CollectorConfig, installed: Optional[bool] = None) -> InventoryListing:
    return list_identifiers(config.database, installed=installed)


def report(config: CollectorConfig, transport=None) -> int:
    """Post the installed inventory to the configured assessment service.

    Raises:
        InvalidConfigError: If ``rest_api.uri`` is not set.
        ReportingError: If the service does not accept the report.
    """
    if not config.rest_api.uri:
        raise InvalidConfigError("rest_api.uri", None, "URI not set")

    with CollectorDB(config.database) as db:
        with RestClient(
            config.rest_api.uri, timeout=config.rest_api.timeout, transport=transport
        ) as client:
            return InventoryReporter(db, client).report()

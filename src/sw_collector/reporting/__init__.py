"""Remote reporting of the inventory to an assessment service."""

from .reporter import INVENTORY_COMMAND, InventoryReporter
from .rest import RestClient, RestStatus, split_credentials

__all__ = [
    "INVENTORY_COMMAND",
    "InventoryReporter",
    "RestClient",
    "RestStatus",
    "split_credentials",
]

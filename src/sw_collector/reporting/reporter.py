"""Send the local inventory to the remote assessment service."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..exceptions import ReportingError
from ..logging_config import get_logger
from .rest import RestClient, RestStatus

if TYPE_CHECKING:
    from ..storage.database import CollectorDB

logger = get_logger(__name__)

INVENTORY_COMMAND = "swid-inventory/"


class InventoryReporter:
    """Report installed software identifiers, then any records the service asks for.

    The first request carries only identifiers. A NEED_MORE answer is a
    list of identifiers the service does not know yet; their full records
    are submitted once. Anything but SUCCESS after that is an error.
    """

    def __init__(self, db: "CollectorDB", client: RestClient):
        self.db = db
        self.client = client

    def report(self) -> int:
        """Return the number of identifiers reported."""
        cursor = self.db.get_last_event()
        if cursor is None:
            raise ReportingError(INVENTORY_COMMAND, "store is not initialized")

        installed = list(self.db.iter_inventory(installed=True))
        request = {
            "epoch": cursor.epoch,
            "last_eid": cursor.eid,
            "data": [item.name for item in installed],
        }
        status, response = self.client.post(INVENTORY_COMMAND, request)

        if status is RestStatus.NEED_MORE:
            requested = self._requested_names(response)
            logger.info("service requested %d full inventory records", len(requested))
            by_name = {item.name: item for item in self.db.iter_inventory()}
            unknown = [name for name in requested if name not in by_name]
            if unknown:
                raise ReportingError(
                    INVENTORY_COMMAND, f"service requested unknown identifiers: {unknown[:5]}"
                )
            records = [
                {
                    "name": by_name[name].name,
                    "package": by_name[name].package,
                    "version": by_name[name].version,
                    "installed": by_name[name].installed,
                }
                for name in requested
            ]
            status, response = self.client.post(
                INVENTORY_COMMAND,
                {"epoch": cursor.epoch, "last_eid": cursor.eid, "data": records},
            )

        if status is not RestStatus.SUCCESS:
            raise ReportingError(INVENTORY_COMMAND, f"service answered {status.value}")

        logger.info("reported %d installed software identifiers", len(installed))
        return len(installed)

    @staticmethod
    def _requested_names(response) -> list[str]:
        data = response.get("data") if isinstance(response, dict) else response
        if not isinstance(data, list) or not all(isinstance(n, str) for n in data):
            raise ReportingError(INVENTORY_COMMAND, "NEED_MORE response is not a list of identifiers")
        return data

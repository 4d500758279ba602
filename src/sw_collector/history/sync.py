"""Incremental transaction-log to inventory synchronization.

The synchronizer scans the whole log on every run but only acts on
transactions whose start timestamp is strictly newer than the last one
committed. Timestamps are compared as strings; the extractor renders them
in a fixed-width, zero-padded UTC form so that string order is time
order. That equivalence is what makes the skip decision correct.

Each transaction (its row, its package events and the inventory merge of
those events) is one store transaction, committed at the transaction's
end marker, at the next start marker if the end marker is missing, or at
end of file. A later run never reopens it: its start timestamp is then
the cursor and no longer strictly newer.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Optional

from ..exceptions import PersistenceError
from ..logging_config import get_logger
from .extractor import HistoryExtractor
from .merger import InventoryMerger
from .models import Cursor, MergeResult, PackageEvent, SyncResult
from .reader import HistoryReader
from .tokenizer import extract_token

if TYPE_CHECKING:
    from ..storage.database import CollectorDB

logger = get_logger(__name__)


class SyncState(Enum):
    IDLE = "idle"
    READING_HEADER = "reading_header"
    SKIPPING = "skipping"
    ACCUMULATING = "accumulating"
    COMMITTING = "committing"
    TERMINAL = "terminal"
    FAILED = "failed"


class Synchronizer:
    """Drive one extraction run from the log reader into the store.

    Usage::

        sync = Synchronizer(db, extractor, merger, count=10)
        with HistoryReader(path) as reader:
            result = sync.extract(reader)
    """

    def __init__(
        self,
        db: "CollectorDB",
        extractor: HistoryExtractor,
        merger: InventoryMerger,
        count: int = 0,
    ):
        self.db = db
        self.extractor = extractor
        self.merger = merger
        self.count = count
        self._reset()

    def _reset(self) -> None:
        """Forget everything from a previous run; the store is the only memory."""
        self.state = SyncState.IDLE
        self._cursor: Optional[Cursor] = None
        self._eid: Optional[int] = None
        self._timestamp = ""
        self._pending: list[PackageEvent] = []
        self._transactions = 0
        self._package_events = 0
        self._merged = MergeResult()
        self.extractor.events.clear()

    def extract(self, reader: HistoryReader) -> SyncResult:
        """Process every transaction newer than the stored cursor.

        Raises:
            PersistenceError: If the store is uninitialized or fails.
            HistoryParseError: On a malformed line, timestamp or package list.
        """
        self._reset()
        cursor = self.db.get_last_event()
        if cursor is None:
            self.state = SyncState.FAILED
            raise PersistenceError(
                "get_last_event", "no last event; run 'sw-collector init' first", uri=self.db.uri
            )
        logger.info(
            "Last-Event: %s, eid = %d, epoch = %d", cursor.timestamp, cursor.eid, cursor.epoch
        )
        self._cursor = cursor

        try:
            stop_reason = self._scan(reader)
            if stop_reason == "eof":
                self._close_open_transaction()
                if not self.extractor.merge_installed_packages():
                    raise PersistenceError(
                        "merge_installed_packages", "inventory reconciliation failed", uri=self.db.uri
                    )
        except BaseException:
            self._abort()
            raise

        self.state = SyncState.TERMINAL
        return SyncResult(
            stop_reason=stop_reason,
            transactions=self._transactions,
            package_events=self._package_events,
            cursor=self._cursor,
            merged=self._merged,
        )

    def _scan(self, reader: HistoryReader) -> str:
        extractor = self.extractor
        self.state = SyncState.SKIPPING

        for raw in reader:
            line = _decode(raw, reader.line_number)
            if not line.strip():
                continue

            keyword, remainder = extract_token(line, line_number=reader.line_number)

            if keyword == extractor.start_marker:
                if self._eid is not None:
                    self._commit()
                    if self._count_reached():
                        return "count"
                self.state = SyncState.READING_HEADER
                timestamp = extractor.extract_timestamp(remainder)
                if timestamp > self._cursor.timestamp:
                    self._open(timestamp)
                else:
                    self.state = SyncState.SKIPPING
                continue

            if self.state is not SyncState.ACCUMULATING:
                continue

            if keyword == extractor.end_marker:
                self._commit()
                if self._count_reached():
                    return "count"
                continue

            operation = extractor.operation_for(keyword)
            if operation is None:
                continue
            logger.debug("  %s:", keyword)
            events = extractor.extract_packages(remainder, self._eid, operation)
            self._pending.extend(events)

        return "eof"

    def _open(self, timestamp: str) -> None:
        self.db.begin()
        self._eid = self.db.add_event(timestamp)
        self._timestamp = timestamp
        self.state = SyncState.ACCUMULATING
        logger.info(
            "Start-Date: %s, eid = %d, epoch = %d", timestamp, self._eid, self._cursor.epoch
        )

    def _commit(self) -> None:
        self.state = SyncState.COMMITTING
        self._merged += self.merger.merge(self._pending)
        self.db.commit()

        self._cursor = Cursor(eid=self._eid, epoch=self._cursor.epoch, timestamp=self._timestamp)
        self._transactions += 1
        self._package_events += len(self._pending)
        self._pending = []
        self._eid = None
        self.state = SyncState.IDLE

    def _count_reached(self) -> bool:
        if self.count > 0 and self._transactions >= self.count:
            logger.info("added %d events", self.count)
            return True
        return False

    def _close_open_transaction(self) -> None:
        if self._eid is None:
            return
        logger.info(
            "Transaction started %s has no end marker; closing it at end of log", self._timestamp
        )
        self._commit()

    def _discard(self) -> None:
        # Events of a rolled back transaction must not reach the final merge.
        if self._pending:
            del self.extractor.events[-len(self._pending):]
        self._pending = []
        self._eid = None

    def _abort(self) -> None:
        self.state = SyncState.FAILED
        self._discard()
        try:
            self.db.rollback()
        except PersistenceError as e:
            logger.error("Rollback after failed run also failed: %s", e)


def _decode(raw: bytes, line_number: int) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        logger.warning("Line %d is not valid UTF-8 (%s); undecodable bytes replaced", line_number, e)
        return raw.decode("utf-8", errors="replace")

"""SQLite-backed collector store: transactions, package events and inventory."""

from __future__ import annotations

import secrets
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator, Optional
from urllib.parse import urlsplit

from ..exceptions import PersistenceError
from ..history.models import Cursor, InventoryItem, Operation, PackageEvent
from ..logging_config import get_logger

logger = get_logger(__name__)

# Current schema version (bump when tables change).
_SCHEMA_VERSION = 1

SUPPORTED_SCHEMES = ("sqlite",)


def database_path(uri: str) -> str:
    """Resolve a ``sqlite:///path`` URI to the path handed to sqlite3.

    ``sqlite:///abs/path.db`` is absolute, ``sqlite://rel/path.db`` is
    relative to the working directory and ``sqlite:///:memory:`` is an
    in-memory store.
    """
    parts = urlsplit(uri)
    if parts.scheme not in SUPPORTED_SCHEMES:
        raise PersistenceError(
            "connect", f"unsupported scheme '{parts.scheme}'", uri=uri
        )
    path = f"{parts.netloc}{parts.path}"
    if path in ("/:memory:", ":memory:"):
        return ":memory:"
    if not path:
        raise PersistenceError("connect", "no database path in URI", uri=uri)
    return path


class CollectorDB:
    """Manages the collector's SQLite database.

    The connection runs in autocommit mode; multi-statement units of work
    are bracketed explicitly with :meth:`begin` / :meth:`commit` or the
    :meth:`transaction` context manager.

    Usage::

        with CollectorDB("sqlite:///etc/pts/collector.db") as db:
            cursor = db.get_last_event()
    """

    def __init__(self, uri: str, read_only: bool = False) -> None:
        self.uri = uri
        self.path = database_path(uri)
        self.read_only = read_only
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def conn(self) -> sqlite3.Connection:
        """Return the active connection. Raises if not connected."""
        if self._conn is None:
            raise RuntimeError("CollectorDB is not connected. Use as context manager or call connect().")
        return self._conn

    # ── lifecycle ─────────────────────────────────────────────────

    def connect(self) -> sqlite3.Connection:
        """Open (or create) the database and run migrations.

        A read-only store is opened as found: a missing file is an error and
        nothing is created or migrated.
        """
        if self.read_only:
            return self._connect_read_only()
        try:
            if self.path != ":memory:":
                Path(self.path).parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.path, isolation_level=None)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys=ON")
            if self.path != ":memory:":
                conn.execute("PRAGMA journal_mode=WAL")
        except (sqlite3.Error, OSError) as e:
            raise PersistenceError("connect", str(e), uri=self.uri)
        self._conn = conn
        self._migrate()
        logger.debug("Collector DB connected at %s", self.path)
        return conn

    def _connect_read_only(self) -> sqlite3.Connection:
        try:
            if self.path == ":memory:":
                conn = sqlite3.connect(self.path, isolation_level=None)
            else:
                target = f"{Path(self.path).absolute().as_uri()}?mode=ro"
                conn = sqlite3.connect(target, uri=True, isolation_level=None)
            conn.row_factory = sqlite3.Row
        except sqlite3.Error as e:
            raise PersistenceError("connect", f"{e}: {self.path}", uri=self.uri)
        self._conn = conn
        logger.debug("Collector DB opened read-only at %s", self.path)
        return conn

    def close(self) -> None:
        """Close the connection if open, discarding any open transaction."""
        if self._conn is not None:
            if self._conn.in_transaction:
                self._conn.rollback()
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "CollectorDB":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ── migration ─────────────────────────────────────────────────

    def _migrate(self) -> None:
        """Idempotently create all tables."""
        try:
            self.conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER NOT NULL
                );

                CREATE TABLE IF NOT EXISTS transactions (
                    id          INTEGER PRIMARY KEY AUTOINCREMENT,
                    epoch       INTEGER NOT NULL,
                    timestamp   TEXT    NOT NULL
                );

                CREATE TABLE IF NOT EXISTS package_events (
                    id             INTEGER PRIMARY KEY AUTOINCREMENT,
                    transaction_id INTEGER NOT NULL REFERENCES transactions(id),
                    operation      TEXT    NOT NULL,
                    package        TEXT    NOT NULL,
                    version        TEXT    NOT NULL,
                    old_version    TEXT
                );

                CREATE TABLE IF NOT EXISTS inventory (
                    id          INTEGER PRIMARY KEY AUTOINCREMENT,
                    name        TEXT    NOT NULL,
                    package     TEXT    NOT NULL,
                    version     TEXT    NOT NULL,
                    installed   INTEGER NOT NULL DEFAULT 1,
                    UNIQUE (name, package, version)
                );

                CREATE INDEX IF NOT EXISTS idx_transactions_timestamp ON transactions(timestamp);
                CREATE INDEX IF NOT EXISTS idx_package_events_transaction
                    ON package_events(transaction_id);
                CREATE INDEX IF NOT EXISTS idx_inventory_package ON inventory(package);
                """
            )
            row = self.conn.execute("SELECT version FROM schema_version").fetchone()
            if row is None:
                self.conn.execute(
                    "INSERT INTO schema_version (version) VALUES (?)", (_SCHEMA_VERSION,)
                )
            elif row["version"] != _SCHEMA_VERSION:
                raise PersistenceError(
                    "migrate",
                    f"schema version {row['version']}, expected {_SCHEMA_VERSION}",
                    uri=self.uri,
                )
        except sqlite3.Error as e:
            raise PersistenceError("migrate", str(e), uri=self.uri)

    # ── transactions ──────────────────────────────────────────────

    @property
    def in_transaction(self) -> bool:
        return self.conn.in_transaction

    def begin(self) -> None:
        self._execute("begin", "BEGIN IMMEDIATE")

    def commit(self) -> None:
        try:
            self.conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError("commit", str(e), uri=self.uri)

    def rollback(self) -> None:
        try:
            if self.conn.in_transaction:
                self.conn.rollback()
        except sqlite3.Error as e:
            raise PersistenceError("rollback", str(e), uri=self.uri)

    @contextmanager
    def transaction(self) -> Iterator["CollectorDB"]:
        """Run a block atomically; roll back if it raises."""
        self.begin()
        try:
            yield self
        except BaseException:
            self.rollback()
            raise
        self.commit()

    def _execute(self, operation: str, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        try:
            return self.conn.execute(sql, params)
        except sqlite3.Error as e:
            raise PersistenceError(operation, str(e), uri=self.uri)

    # ── cursor / transactions ─────────────────────────────────────

    def initialize(self, first_time: str, epoch: Optional[int] = None) -> tuple[Cursor, bool]:
        """Create the first transaction if the store has none.

        Returns:
            The current cursor and whether it was created by this call.
        """
        existing = self.get_last_event()
        if existing is not None:
            return existing, False

        epoch = secrets.randbits(32) if epoch is None else epoch
        with self.transaction():
            cur = self._execute(
                "initialize",
                "INSERT INTO transactions (epoch, timestamp) VALUES (?, ?)",
                (epoch, first_time),
            )
        cursor = Cursor(eid=int(cur.lastrowid), epoch=epoch, timestamp=first_time)
        logger.info("Initialized store with epoch %d at %s", epoch, first_time)
        return cursor, True

    def get_last_event(self) -> Optional[Cursor]:
        """Return the most recent committed transaction, or ``None``."""
        row = self._execute(
            "get_last_event",
            "SELECT id, epoch, timestamp FROM transactions ORDER BY id DESC LIMIT 1",
        ).fetchone()
        if row is None:
            return None
        return Cursor(eid=row["id"], epoch=row["epoch"], timestamp=row["timestamp"])

    def add_event(self, timestamp: str) -> int:
        """Insert a transaction carrying the store's epoch; return its id."""
        cur = self._execute(
            "add_event",
            """
            INSERT INTO transactions (epoch, timestamp)
            SELECT epoch, ? FROM transactions ORDER BY id DESC LIMIT 1
            """,
            (timestamp,),
        )
        if cur.rowcount != 1:
            raise PersistenceError("add_event", "store is not initialized", uri=self.uri)
        return int(cur.lastrowid)

    def count_events(self) -> int:
        row = self._execute("count_events", "SELECT COUNT(*) AS cnt FROM transactions").fetchone()
        return row["cnt"]

    def list_events(self) -> list[Cursor]:
        rows = self._execute(
            "list_events", "SELECT id, epoch, timestamp FROM transactions ORDER BY id"
        ).fetchall()
        return [Cursor(eid=r["id"], epoch=r["epoch"], timestamp=r["timestamp"]) for r in rows]

    # ── package events ────────────────────────────────────────────

    def add_package_events(self, events: Iterable[PackageEvent]) -> int:
        rows = [
            (e.eid, e.operation.value, e.package, e.version, e.old_version) for e in events
        ]
        if not rows:
            return 0
        try:
            self.conn.executemany(
                """
                INSERT INTO package_events (transaction_id, operation, package, version, old_version)
                VALUES (?, ?, ?, ?, ?)
                """,
                rows,
            )
        except sqlite3.Error as e:
            raise PersistenceError("add_package_events", str(e), uri=self.uri)
        return len(rows)

    def get_package_events(self, eid: Optional[int] = None) -> list[PackageEvent]:
        sql = "SELECT transaction_id, operation, package, version, old_version FROM package_events"
        params: tuple = ()
        if eid is not None:
            sql += " WHERE transaction_id = ?"
            params = (eid,)
        rows = self._execute("get_package_events", sql + " ORDER BY id", params).fetchall()
        return [
            PackageEvent(
                eid=r["transaction_id"],
                operation=Operation(r["operation"]),
                package=r["package"],
                version=r["version"],
                old_version=r["old_version"],
            )
            for r in rows
        ]

    # ── inventory ─────────────────────────────────────────────────

    def get_inventory_item(self, name: str, package: str, version: str) -> Optional[InventoryItem]:
        row = self._execute(
            "get_inventory_item",
            "SELECT name, package, version, installed FROM inventory "
            "WHERE name = ? AND package = ? AND version = ?",
            (name, package, version),
        ).fetchone()
        return _hydrate_item(row) if row is not None else None

    def upsert_inventory(self, item: InventoryItem) -> None:
        self._execute(
            "upsert_inventory",
            """
            INSERT INTO inventory (name, package, version, installed) VALUES (?, ?, ?, ?)
            ON CONFLICT (name, package, version) DO UPDATE SET installed = excluded.installed
            """,
            (item.name, item.package, item.version, int(item.installed)),
        )

    def iter_inventory(self, installed: Optional[bool] = None) -> Iterator[InventoryItem]:
        """Enumerate inventory items in storage order, optionally filtered."""
        sql = "SELECT name, package, version, installed FROM inventory"
        params: tuple = ()
        if installed is not None:
            sql += " WHERE installed = ?"
            params = (int(installed),)
        for row in self._execute("iter_inventory", sql + " ORDER BY id", params):
            yield _hydrate_item(row)

    def installed_packages(self) -> set[tuple[str, str]]:
        """(package, version) pairs currently marked installed."""
        rows = self._execute(
            "installed_packages", "SELECT package, version FROM inventory WHERE installed = 1"
        ).fetchall()
        return {(r["package"], r["version"]) for r in rows}


def _hydrate_item(row: sqlite3.Row) -> InventoryItem:
    return InventoryItem(
        name=row["name"],
        package=row["package"],
        version=row["version"],
        installed=bool(row["installed"]),
    )

"""Tests for storage/inventory.py - listing the inventory."""

import pytest

from sw_collector.exceptions import EnumerationError, PersistenceError
from sw_collector.history import InventoryItem
from sw_collector.storage import CollectorDB, format_item, list_identifiers


@pytest.fixture
def populated_uri(db_uri):
    with CollectorDB(db_uri) as db:
        db.initialize("0000-00-00T00:00:00Z", epoch=1)
        db.upsert_inventory(InventoryItem("org__os-curl-1.0", "curl", "1.0", True))
        db.upsert_inventory(InventoryItem("org__os-wget-1.2", "wget", "1.2", False))
        db.upsert_inventory(InventoryItem("org__os-vim-2~8.2", "vim", "2:8.2", True))
    return db_uri


class TestFormatItem:

    def test_installed(self):
        item = InventoryItem("org__os-curl-1.0", "curl", "1.0", True)
        assert format_item(item) == "org__os-curl-1.0,curl,1.0,1"

    def test_removed(self):
        item = InventoryItem("org__os-curl-1.0", "curl", "1.0", False)
        assert format_item(item) == "org__os-curl-1.0,curl,1.0,0"


class TestListIdentifiers:

    def test_lists_everything(self, populated_uri):
        listing = list_identifiers(populated_uri)

        assert listing.count == 3
        assert listing.installed_count == 2
        assert listing.removed_count == 1
        assert [i.package for i in listing.items] == ["curl", "wget", "vim"]

    def test_installed_only(self, populated_uri):
        listing = list_identifiers(populated_uri, installed=True)
        assert [i.package for i in listing.items] == ["curl", "vim"]

    def test_removed_only(self, populated_uri):
        listing = list_identifiers(populated_uri, installed=False)
        assert [i.package for i in listing.items] == ["wget"]

    def test_empty_store(self, db_uri):
        with CollectorDB(db_uri):
            pass
        listing = list_identifiers(db_uri)
        assert listing.count == 0
        assert listing.to_dict() == {"count": 0, "installed": 0, "removed": 0, "items": []}

    def test_to_dict(self, populated_uri):
        data = list_identifiers(populated_uri, installed=False).to_dict()
        assert data["items"] == [
            {"name": "org__os-wget-1.2", "package": "wget", "version": "1.2", "installed": False}
        ]

    def test_logs_summary(self, populated_uri, caplog):
        with caplog.at_level("INFO", logger="sw_collector"):
            list_identifiers(populated_uri)
        assert "retrieved 3 software identities with 2 installed and 1 deleted" in caplog.text

    def test_store_failure_is_enumeration_error(self):
        with pytest.raises(EnumerationError) as exc_info:
            list_identifiers("postgres://db.example.org/pts")
        assert isinstance(exc_info.value, PersistenceError)
        assert exc_info.value.uri == "postgres://db.example.org/pts"

    def test_missing_store_is_not_created(self, tmp_path):
        missing = tmp_path / "typo" / "collector.db"

        with pytest.raises(EnumerationError):
            list_identifiers(f"sqlite://{missing}")

        assert not missing.exists()
        assert not missing.parent.exists()

    def test_uninitialized_file_is_enumeration_error(self, tmp_path):
        empty = tmp_path / "collector.db"
        empty.touch()

        with pytest.raises(EnumerationError):
            list_identifiers(f"sqlite://{empty}")

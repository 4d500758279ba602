"""Tests for reporting/reporter.py - inventory reports with resubmission."""

import json

import httpx
import pytest

from sw_collector.exceptions import ReportingError
from sw_collector.history import InventoryItem
from sw_collector.reporting import INVENTORY_COMMAND, InventoryReporter, RestClient


@pytest.fixture
def inventory_db(db):
    db.upsert_inventory(InventoryItem("org__os-curl-1.0", "curl", "1.0", True))
    db.upsert_inventory(InventoryItem("org__os-wget-1.2", "wget", "1.2", False))
    db.upsert_inventory(InventoryItem("org__os-vim-2~8.2", "vim", "2:8.2", True))
    return db


def _reporter(db, responses):
    """Reporter whose service answers with ``responses`` in turn."""
    requests = []

    def handler(request):
        requests.append(json.loads(request.content))
        return responses[len(requests) - 1]

    client = RestClient("http://verifier/api/", transport=httpx.MockTransport(handler))
    return InventoryReporter(db, client), requests


class TestInventoryReporter:

    def test_reports_installed_identifiers(self, inventory_db):
        reporter, requests = _reporter(inventory_db, [httpx.Response(200)])
        cursor = inventory_db.get_last_event()

        assert reporter.report() == 2
        assert requests == [
            {
                "epoch": cursor.epoch,
                "last_eid": cursor.eid,
                "data": ["org__os-curl-1.0", "org__os-vim-2~8.2"],
            }
        ]

    def test_resubmits_requested_records(self, inventory_db):
        reporter, requests = _reporter(
            inventory_db,
            [httpx.Response(412, json=["org__os-vim-2~8.2"]), httpx.Response(200)],
        )

        assert reporter.report() == 2
        assert len(requests) == 2
        assert requests[1]["data"] == [
            {"name": "org__os-vim-2~8.2", "package": "vim", "version": "2:8.2", "installed": True}
        ]

    def test_accepts_wrapped_identifier_list(self, inventory_db):
        reporter, requests = _reporter(
            inventory_db,
            [httpx.Response(412, json={"data": ["org__os-wget-1.2"]}), httpx.Response(201)],
        )

        reporter.report()

        assert requests[1]["data"][0]["installed"] is False

    def test_second_need_more_fails(self, inventory_db):
        reporter, _ = _reporter(
            inventory_db,
            [
                httpx.Response(412, json=["org__os-curl-1.0"]),
                httpx.Response(412, json=["org__os-curl-1.0"]),
            ],
        )
        with pytest.raises(ReportingError) as exc_info:
            reporter.report()
        assert exc_info.value.command == INVENTORY_COMMAND

    def test_failed_request(self, inventory_db):
        reporter, _ = _reporter(inventory_db, [httpx.Response(500)])
        with pytest.raises(ReportingError):
            reporter.report()

    def test_unknown_identifier_requested(self, inventory_db):
        reporter, requests = _reporter(inventory_db, [httpx.Response(412, json=["nope"])])
        with pytest.raises(ReportingError):
            reporter.report()
        assert len(requests) == 1

    def test_malformed_need_more_response(self, inventory_db):
        reporter, _ = _reporter(inventory_db, [httpx.Response(412, json={"missing": 1})])
        with pytest.raises(ReportingError):
            reporter.report()

    def test_uninitialized_store(self, bare_db):
        reporter, requests = _reporter(bare_db, [])
        with pytest.raises(ReportingError):
            reporter.report()
        assert requests == []

"""Shared fixtures for sw-collector tests."""

import os
from datetime import timezone
from pathlib import Path

import pytest

from sw_collector import config as config_module
from sw_collector.history import (
    DpkgHistoryExtractor,
    HistoryReader,
    InventoryMerger,
    Synchronizer,
)
from sw_collector.identity import SoftwareIdentity
from sw_collector.storage import CollectorDB

FIRST_TIME = "0000-00-00T00:00:00Z"
EPOCH = 1234567
OS_STRING = "Ubuntu_22.04-x86_64"
TAG_CREATOR = "sw-collector.org"

# Three complete transactions: install, upgrade, remove.
HISTORY_T1_T3 = """\
Start-Date: 2024-03-01  10:00:00
Commandline: apt-get install -y curl
Requested-By: admin (1000)
Install: libcurl4:amd64 (7.81.0-1ubuntu1.15, automatic), curl:amd64 (7.81.0-1ubuntu1.15)
End-Date: 2024-03-01  10:00:05

Start-Date: 2024-03-02  09:30:00
Commandline: apt-get upgrade
Upgrade: libssl3:amd64 (3.0.2-0ubuntu1.12, 3.0.2-0ubuntu1.14)
End-Date: 2024-03-02  09:30:10

Start-Date: 2024-03-03  08:15:00
Commandline: apt-get remove curl
Remove: curl:amd64 (7.81.0-1ubuntu1.15)
End-Date: 2024-03-03  08:15:02
"""

# Appended later: an epoch version, install+remove in one transaction, a reinstall.
HISTORY_T4_T6 = """
Start-Date: 2024-03-04  12:00:00
Install: vim:amd64 (2:8.2.3995-1ubuntu2.15)
End-Date: 2024-03-04  12:00:03

Start-Date: 2024-03-05  12:00:00
Install: htop:amd64 (3.0.5-7build2)
Remove: htop:amd64 (3.0.5-7build2)
End-Date: 2024-03-05  12:00:09

Start-Date: 2024-03-06  12:00:00
Reinstall: vim:amd64 (2:8.2.3995-1ubuntu2.15)
End-Date: 2024-03-06  12:00:03
"""


@pytest.fixture(autouse=True)
def isolated_config(tmp_path_factory, monkeypatch):
    """Keep host config files and SW_COLLECTOR_* variables out of every test."""
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setattr(config_module, "SYSTEM_CONFIG", home / "no-system-config.toml")
    for key in list(os.environ):
        if key.startswith(config_module.ENV_PREFIX):
            monkeypatch.delenv(key)


@pytest.fixture
def db_uri(tmp_path) -> str:
    return f"sqlite://{tmp_path / 'collector.db'}"


@pytest.fixture
def bare_db(db_uri):
    """Connected store without a first transaction."""
    with CollectorDB(db_uri) as db:
        yield db


@pytest.fixture
def db(bare_db):
    """Connected store initialized with a fixed epoch."""
    bare_db.initialize(FIRST_TIME, epoch=EPOCH)
    return bare_db


@pytest.fixture
def identity() -> SoftwareIdentity:
    return SoftwareIdentity(TAG_CREATOR, OS_STRING)


@pytest.fixture
def merger(db, identity) -> InventoryMerger:
    return InventoryMerger(db, identity)


@pytest.fixture
def extractor(db, merger) -> DpkgHistoryExtractor:
    return DpkgHistoryExtractor(db, merger, timezone=timezone.utc, merge_installed=False)


@pytest.fixture
def history_log(tmp_path):
    """Factory writing (or appending to) the transaction log."""
    path = tmp_path / "history.log"

    def write(content: str, append: bool = False) -> Path:
        with open(path, "a" if append else "w", encoding="utf-8") as f:
            f.write(content)
        return path

    return write


@pytest.fixture
def run_sync(db, identity):
    """Run one extraction over a log, with a fresh extractor per run."""

    def run(path: Path, count: int = 0, merge_installed: bool = False, installed=None):
        merger = InventoryMerger(db, identity)
        extractor = DpkgHistoryExtractor(
            db, merger, timezone=timezone.utc, merge_installed=merge_installed
        )
        if installed is not None:
            extractor.installed_packages = lambda: installed
        sync = Synchronizer(db, extractor, merger, count=count)
        with HistoryReader(path) as reader:
            return sync.extract(reader)

    return run


@pytest.fixture
def history_t1_t3() -> str:
    return HISTORY_T1_T3


@pytest.fixture
def history_t4_t6() -> str:
    return HISTORY_T4_T6

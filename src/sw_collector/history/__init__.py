"""Transaction-log extraction: reading, tokenizing, extracting and merging."""

from .dpkg import DpkgHistoryExtractor
from .extractor import (
    HistoryExtractor,
    create_extractor,
    register_extractor,
    resolve_extractor,
    supported_extractors,
)
from .merger import InventoryMerger
from .models import (
    Cursor,
    InventoryItem,
    MergeResult,
    Operation,
    PackageEvent,
    SyncResult,
)
from .reader import HistoryReader
from .sync import Synchronizer, SyncState
from .tokenizer import extract_token

__all__ = [
    "Cursor",
    "DpkgHistoryExtractor",
    "HistoryExtractor",
    "HistoryReader",
    "InventoryItem",
    "InventoryMerger",
    "MergeResult",
    "Operation",
    "PackageEvent",
    "SyncResult",
    "SyncState",
    "Synchronizer",
    "create_extractor",
    "extract_token",
    "register_extractor",
    "resolve_extractor",
    "supported_extractors",
]

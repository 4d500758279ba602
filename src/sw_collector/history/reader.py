"""Memory-mapped, forward-only reader for the transaction log."""

from __future__ import annotations

import mmap
from pathlib import Path
from typing import Iterator, Optional

from ..exceptions import LogAccessError
from ..logging_config import get_logger

logger = get_logger(__name__)


class HistoryReader:
    """Yield the lines of a transaction log from a read-only memory map.

    The file size is fixed when the reader opens it; bytes appended later
    are picked up by the next run. Each line is consumed exactly once.

    Usage::

        with HistoryReader("/var/log/apt/history.log") as reader:
            for line in reader:
                ...
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._file = None
        self._map: Optional[mmap.mmap] = None
        self._pos = 0
        self._size = 0
        self.line_number = 0

    def open(self) -> "HistoryReader":
        try:
            self._file = open(self.path, "rb")
        except OSError as e:
            raise LogAccessError(self.path, e.strerror or str(e))

        try:
            self._size = self._file.seek(0, 2)
            if self._size:
                self._map = mmap.mmap(self._file.fileno(), self._size, access=mmap.ACCESS_READ)
        except (OSError, ValueError) as e:
            self.close()
            raise LogAccessError(self.path, f"mapping failed: {e}")

        logger.debug("Mapped %s (%d bytes)", self.path, self._size)
        return self

    def close(self) -> None:
        if self._map is not None:
            self._map.close()
            self._map = None
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> "HistoryReader":
        return self.open()

    def __exit__(self, *args) -> None:
        self.close()

    @property
    def remaining(self) -> int:
        """Bytes not yet consumed."""
        return self._size - self._pos

    def fetch_line(self) -> Optional[bytes]:
        """Consume and return the next line without its newline, None at the end."""
        if self._map is None or self._pos >= self._size:
            return None

        end = self._map.find(b"\n", self._pos)
        if end < 0:
            line = self._map[self._pos : self._size]
            self._pos = self._size
        else:
            line = self._map[self._pos : end]
            self._pos = end + 1

        self.line_number += 1
        if line.endswith(b"\r"):
            line = line[:-1]
        return line

    def __iter__(self) -> Iterator[bytes]:
        while True:
            line = self.fetch_line()
            if line is None:
                return
            yield line

"""Tests for history/reader.py - memory-mapped log reader."""

import pytest

from sw_collector.exceptions import LogAccessError
from sw_collector.history import HistoryReader


class TestHistoryReader:
    """Test line iteration over the mapped file."""

    def test_yields_lines_without_newline(self, tmp_path):
        path = tmp_path / "history.log"
        path.write_bytes(b"Start-Date: a\nEnd-Date: b\n")

        with HistoryReader(path) as reader:
            assert list(reader) == [b"Start-Date: a", b"End-Date: b"]

    def test_last_line_without_newline(self, tmp_path):
        path = tmp_path / "history.log"
        path.write_bytes(b"one\ntwo")

        with HistoryReader(path) as reader:
            assert list(reader) == [b"one", b"two"]

    def test_strips_carriage_return(self, tmp_path):
        path = tmp_path / "history.log"
        path.write_bytes(b"Install: a (1)\r\n")

        with HistoryReader(path) as reader:
            assert reader.fetch_line() == b"Install: a (1)"

    def test_blank_lines_are_returned(self, tmp_path):
        """Blank lines are the caller's business."""
        path = tmp_path / "history.log"
        path.write_bytes(b"a\n\nb\n")

        with HistoryReader(path) as reader:
            assert list(reader) == [b"a", b"", b"b"]

    def test_empty_file_yields_nothing(self, tmp_path):
        path = tmp_path / "history.log"
        path.write_bytes(b"")

        with HistoryReader(path) as reader:
            assert reader.fetch_line() is None
            assert list(reader) == []

    def test_line_number_and_remaining(self, tmp_path):
        path = tmp_path / "history.log"
        path.write_bytes(b"abc\ndef\n")

        with HistoryReader(path) as reader:
            assert reader.remaining == 8
            reader.fetch_line()
            assert reader.line_number == 1
            assert reader.remaining == 4
            reader.fetch_line()
            assert reader.fetch_line() is None
            assert reader.line_number == 2
            assert reader.remaining == 0

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(LogAccessError) as exc_info:
            HistoryReader(tmp_path / "missing.log").open()
        assert "missing.log" in str(exc_info.value)

    def test_directory_raises(self, tmp_path):
        with pytest.raises(LogAccessError):
            HistoryReader(tmp_path).open()

    def test_close_is_idempotent(self, tmp_path):
        path = tmp_path / "history.log"
        path.write_bytes(b"x\n")
        reader = HistoryReader(path).open()
        reader.close()
        reader.close()
        assert reader.fetch_line() is None

"""
Tests for core data models.
"""
import os
import pytest

from finddup.core.models import (
    EMPTY_DIGESTS, FileDigests, FileRecord, OperatingMode, ScanResult,
)


class TestFileDigests:
    def test_both_or_neither(self):
        with pytest.raises(ValueError):
            FileDigests("a" * 32, "")
        with pytest.raises(ValueError):
            FileRecord("/x", 1, 1, 1, 0, digest_fast="", digest_strong="b" * 64)

    def test_empty_sentinel(self):
        assert EMPTY_DIGESTS.is_empty
        assert not FileDigests("a", "b").is_empty
        assert FileDigests("a", "b").as_tuple() == ("a", "b")


class TestFileRecord:
    def test_from_stat_truncates_mtime(self, tmp_path):
        path = tmp_path / "f"
        path.write_bytes(b"x")
        os.utime(path, (1000.7, 1000.7))

        rec = FileRecord.from_stat(str(path), os.stat(path), FileDigests("a", "b"))

        assert rec.mtime == 1000
        assert rec.size == 1
        assert rec.digests == FileDigests("a", "b")

    def test_physical_identity(self):
        a = FileRecord("/a", 1, 5, 10, 0)
        b = FileRecord("/b", 1, 5, 10, 0)
        c = FileRecord("/c", 2, 5, 10, 0)

        assert a.same_physical_file(b)
        assert not a.same_physical_file(c)


class TestOperatingMode:
    def test_experimental_and_writing_modes(self):
        assert OperatingMode.HARDLINK_DUPLICATES.is_experimental
        assert not OperatingMode.SHOW_DUPLICATES.is_experimental
        assert OperatingMode.CLEANUP.writes_catalog
        assert not OperatingMode.CSV.writes_catalog


class TestScanResult:
    def test_summary_mentions_cancellation(self):
        result = ScanResult(added=2, cancelled=True)
        summary = result.print_summary()
        assert "Added: 2" in summary
        assert "cancelled" in summary

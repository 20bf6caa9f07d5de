# tests/unit/batch/test_unit_archive.py — v1
"""Tests for batch/archive.py — double-compressed batch archive."""

from __future__ import annotations

import io
import zipfile
from pathlib import Path

import pytest

from affectedfiles.batch.archive import ArchiveBuilder, iter_entries
from affectedfiles.core.errors import ArchiveFormatError


def _zip(entries: dict[str, bytes]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, mode="w") as zf:
        for name, data in entries.items():
            zf.writestr(name, data)
    return buffer.getvalue()


class TestArchiveBuilder:
    def test_empty_archive_is_empty_bytes(self):
        builder = ArchiveBuilder()
        assert len(builder) == 0
        assert builder.finish() == b""

    def test_entry_layout(self, tmp_path: Path):
        source = tmp_path / "a.c"
        source.write_bytes(b"int a;")
        builder = ArchiveBuilder()
        assert builder.add_file("0a1b", source) is True
        archive = builder.finish()

        with zipfile.ZipFile(io.BytesIO(archive)) as outer:
            assert outer.namelist() == ["0a1b.tmp.zip"]
            with zipfile.ZipFile(io.BytesIO(outer.read("0a1b.tmp.zip"))) as inner:
                assert inner.namelist() == ["0a1b.tmp"]
                assert inner.read("0a1b.tmp") == b"int a;"

    def test_duplicate_key_is_refused(self, tmp_path: Path):
        source = tmp_path / "a.c"
        source.write_bytes(b"x")
        builder = ArchiveBuilder()
        builder.add_file("aa", source)
        assert builder.add_file("aa", source) is False
        assert len(builder) == 1

    def test_missing_source_leaves_builder_usable(self, tmp_path: Path):
        good = tmp_path / "good.c"
        good.write_bytes(b"ok")
        builder = ArchiveBuilder()
        with pytest.raises(OSError):
            builder.add_file("aa", tmp_path / "gone.c")
        assert builder.add_file("bb", good) is True
        assert [key for key, _ in iter_entries(builder.finish())] == ["bb"]

    def test_add_after_finish(self, tmp_path: Path):
        builder = ArchiveBuilder()
        builder.finish()
        with pytest.raises(RuntimeError):
            builder.add_file("aa", tmp_path / "a.c")

    def test_empty_source_file(self, tmp_path: Path):
        source = tmp_path / "empty.c"
        source.write_bytes(b"")
        builder = ArchiveBuilder()
        builder.add_file("ee", source)
        assert list(iter_entries(builder.finish())) == [("ee", b"")]


class TestIterEntries:
    def test_round_trip(self, tmp_path: Path):
        builder = ArchiveBuilder()
        for key, data in (("aa", b"A" * 5000), ("bb", bytes(range(256)))):
            path = tmp_path / key
            path.write_bytes(data)
            builder.add_file(key, path)
        assert dict(iter_entries(builder.finish())) == {"aa": b"A" * 5000, "bb": bytes(range(256))}

    def test_empty_input(self):
        assert list(iter_entries(b"")) == []

    def test_not_a_zip(self):
        with pytest.raises(ArchiveFormatError, match="Not a batch archive"):
            list(iter_entries(b"garbage"))

    def test_path_traversal_entry(self):
        archive = _zip({"../../etc/aa.tmp.zip": _zip({"aa.tmp": b"x"})})
        with pytest.raises(ArchiveFormatError):
            list(iter_entries(archive))

    def test_inner_member_missing(self):
        archive = _zip({"aa.tmp.zip": _zip({"bb.tmp": b"x"})})
        with pytest.raises(ArchiveFormatError, match="aa.tmp"):
            list(iter_entries(archive))

    def test_inner_not_a_zip(self):
        archive = _zip({"aa.tmp.zip": b"plain bytes"})
        with pytest.raises(ArchiveFormatError):
            list(iter_entries(archive))

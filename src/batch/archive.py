# src/batch/archive.py — v1
"""Batch archive: one zip container carrying every eligible file.

Each outer entry is named ``<key>.tmp.zip`` and is itself a standalone
zip holding a single member ``<key>.tmp`` with the original bytes, so
every entry can be extracted on its own.
"""

from __future__ import annotations

import io
import zipfile
from pathlib import Path
from typing import Iterator

from affectedfiles.core.errors import ArchiveFormatError
from affectedfiles.storage.keys import ARCHIVE_SUFFIX, ARTIFACT_SUFFIX, key_from_entry_name


class ArchiveBuilder:
    """Accumulate compressed entries into an in-memory batch archive."""

    def __init__(self) -> None:
        self._buffer = io.BytesIO()
        self._zip = zipfile.ZipFile(self._buffer, mode="w", compression=zipfile.ZIP_DEFLATED)
        self._keys: set[str] = set()
        self._closed = False

    def add_file(self, key: str, source: Path) -> bool:
        """Compress ``source`` into its own entry named after ``key``.

        Returns:
            False if an entry with the same key was already added.

        Raises:
            OSError: If the source cannot be read. The archive is left
                unchanged and stays usable.
        """
        if self._closed:
            raise RuntimeError("Archive already finished")
        if key in self._keys:
            return False
        inner = io.BytesIO()
        with zipfile.ZipFile(
            inner, mode="w", compression=zipfile.ZIP_DEFLATED, strict_timestamps=False,
        ) as entry:
            entry.write(source, arcname=f"{key}{ARTIFACT_SUFFIX}")
        self._zip.writestr(f"{key}{ARTIFACT_SUFFIX}{ARCHIVE_SUFFIX}", inner.getvalue())
        self._keys.add(key)
        return True

    def __len__(self) -> int:
        return len(self._keys)

    def finish(self) -> bytes:
        """Close the container; an archive without entries is ``b""``."""
        if not self._closed:
            self._zip.close()
            self._closed = True
        if not self._keys:
            return b""
        return self._buffer.getvalue()


def iter_entries(archive: bytes) -> Iterator[tuple[str, bytes]]:
    """Yield ``(key, payload)`` for every entry of a batch archive.

    Raises:
        ArchiveFormatError: If the container or an entry is malformed.
    """
    if not archive:
        return
    try:
        outer = zipfile.ZipFile(io.BytesIO(archive))
    except zipfile.BadZipFile as e:
        raise ArchiveFormatError(f"Not a batch archive: {e}") from e

    with outer:
        for info in outer.infolist():
            if info.is_dir():
                continue
            key = key_from_entry_name(info.filename)
            yield key, _read_inner(key, outer.read(info))


def _read_inner(key: str, data: bytes) -> bytes:
    member = f"{key}{ARTIFACT_SUFFIX}"
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as inner:
            return inner.read(member)
    except (zipfile.BadZipFile, KeyError) as e:
        raise ArchiveFormatError(f"Malformed archive entry for {member}: {e}") from e

# src/storage/result_store.py — v1
"""Controller-side store of copied source files, indexed by storage key.

The store is a flat directory created lazily on first write. Artifacts
are immutable: a key that already exists is never overwritten. Every
write goes to a temp file in the same directory and is renamed into
place, so concurrent writers of the same key cannot corrupt it.
"""

from __future__ import annotations

import contextlib
import logging
import os
import tempfile
from pathlib import Path
from typing import BinaryIO

from affectedfiles.batch.archive import iter_entries
from affectedfiles.core.models import FileReference
from affectedfiles.storage import layout
from affectedfiles.storage.keys import KeyAlgorithm, key_from_artifact_name, key_of

logger = logging.getLogger(__name__)


class ResultStore:
    """Directory of ``<key>.tmp`` artifacts for a single result."""

    def __init__(self, root: str | os.PathLike[str], key_algorithm: KeyAlgorithm = "blake2b") -> None:
        """Initialize with the store directory.

        Args:
            root: Store directory, usually ``layout.store_dir(result_dir)``.
            key_algorithm: Scheme used by the name-based helpers.
        """
        self._root = Path(root).expanduser()
        self._key_algorithm = key_algorithm

    @classmethod
    def for_result(cls, result_dir: Path, key_algorithm: KeyAlgorithm = "blake2b") -> ResultStore:
        """Store rooted at ``{result_dir}/files-with-issues``."""
        return cls(layout.store_dir(Path(result_dir)), key_algorithm=key_algorithm)

    @property
    def root(self) -> Path:
        return self._root

    @property
    def key_algorithm(self) -> KeyAlgorithm:
        return self._key_algorithm

    # --- Key-based access ---

    def exists(self, key: str) -> bool:
        """Check if an artifact is stored under ``key``."""
        return layout.artifact_path(self._root, key).is_file()

    def read(self, key: str) -> bytes | None:
        """Return the artifact bytes, None if not stored."""
        try:
            return layout.artifact_path(self._root, key).read_bytes()
        except FileNotFoundError:
            return None

    def store(self, key: str, data: bytes) -> bool:
        """Atomically store ``data`` under ``key``.

        Returns:
            True if written, False if the key was already present.

        Raises:
            OSError: If the store directory or the artifact cannot be written.
        """
        target = layout.artifact_path(self._root, key)
        if target.exists():
            return False
        layout.ensure_store_directory(self._root)

        fd, temp_name = tempfile.mkstemp(prefix=layout.PARTIAL_PREFIX, dir=str(self._root))
        temp_path = Path(temp_name)
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            if target.exists():
                # Lost the race to a concurrent writer of the same key
                temp_path.unlink()
                return False
            os.replace(temp_path, target)
        except BaseException:
            with contextlib.suppress(OSError):
                temp_path.unlink(missing_ok=True)
            raise
        return True

    def unpack(self, archive: bytes) -> list[str]:
        """Write every entry of a batch archive into the store.

        Existing artifacts are left untouched.

        Returns:
            Keys that were newly written.

        Raises:
            ArchiveFormatError: If the archive is malformed. Entries written
                before the bad one stay valid.
            OSError: If an artifact cannot be written.
        """
        written: list[str] = []
        for key, payload in iter_entries(archive):
            if self.store(key, payload):
                written.append(key)
        logger.debug("Unpacked %d artifact(s) into %s", len(written), self._root)
        return written

    def keys(self) -> list[str]:
        """Sorted keys of all stored artifacts."""
        if not self._root.is_dir():
            return []
        found = (key_from_artifact_name(p.name) for p in self._root.iterdir() if p.is_file())
        return sorted(k for k in found if k is not None)

    # --- Logical-name access (used by renderers) ---

    def path_of(self, logical_name: str) -> Path:
        """Artifact path for a logical file name, whether stored or not."""
        return layout.artifact_path(self._root, key_of(logical_name, self._key_algorithm))

    def has_file(self, logical_name: str) -> bool:
        """True if the file was copied and the artifact is readable."""
        path = self.path_of(logical_name)
        return path.is_file() and os.access(path, os.R_OK)

    def open_file(self, logical_name: str) -> BinaryIO:
        """Open the stored copy of ``logical_name`` for reading.

        Raises:
            FileNotFoundError: If the file has not been copied.
        """
        return self.path_of(logical_name).open("rb")

    def resolve_file(self, reference: FileReference) -> Path:
        """Stored copy if accessible, otherwise the original path.

        The fallback covers sources that still live on the controller.
        """
        if self.has_file(reference.logical_name):
            return self.path_of(reference.logical_name)
        return Path(reference.absolute_path or reference.logical_name)

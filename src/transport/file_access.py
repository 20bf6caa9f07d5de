# src/transport/file_access.py — v1
"""Per-file access to the side that holds the source files.

The batch copier and the per-file fallback both classify candidates
through this interface, so the two paths apply the same checks.
"""

from __future__ import annotations

import errno
import os
import stat
from abc import ABC, abstractmethod
from pathlib import Path

from affectedfiles.core.containment import is_authorized
from affectedfiles.core.models import AuthorizedRoots, canonical_path


class FileAccess(ABC):
    """Filesystem operations needed to copy one source file."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Check if the source exists; never raises."""

    @abstractmethod
    def is_authorized(self, path: str, roots: AuthorizedRoots) -> bool:
        """Containment check on the source's canonical path."""

    @abstractmethod
    def check_readable(self, path: str) -> None:
        """Raise OSError if the source cannot be opened for reading."""

    @abstractmethod
    def read_bytes(self, path: str) -> bytes:
        """Read the source content."""

    @abstractmethod
    def source_path(self, path: str) -> Path:
        """Canonical local path the content is read from."""


class LocalFileAccess(FileAccess):
    """Access files on the local filesystem (agent side, or a shared mount)."""

    def exists(self, path: str) -> bool:
        if not path:
            return False
        try:
            return Path(path).exists()
        except (OSError, ValueError):
            return False

    def is_authorized(self, path: str, roots: AuthorizedRoots) -> bool:
        return is_authorized(path, roots)

    def check_readable(self, path: str) -> None:
        source = self.source_path(path)
        mode = source.stat().st_mode
        if stat.S_ISDIR(mode):
            raise IsADirectoryError(errno.EISDIR, "Is a directory", str(source))
        # Opening a FIFO or device could block forever
        if not stat.S_ISREG(mode):
            raise OSError(errno.EINVAL, "Not a regular file", str(source))
        with source.open("rb"):
            pass

    def read_bytes(self, path: str) -> bytes:
        return self.source_path(path).read_bytes()

    def source_path(self, path: str) -> Path:
        # Read through the same resolved path the containment check approved
        return canonical_path(os.fspath(path))

# src/core/errors.py — v1
"""Exceptions that escape a per-file loop.

Per-file problems (missing, unauthorized, unreadable) are never raised:
they are counted or written to the diagnostic log.
"""

from __future__ import annotations


class SyncInterruptedError(Exception):
    """The caller cancelled the synchronization between two candidates."""

    def __init__(self, processed: int = 0, remaining: int = 0) -> None:
        self.processed = processed
        self.remaining = remaining
        super().__init__(
            f"Copying of affected files interrupted after {processed} file(s), "
            f"{remaining} remaining"
        )


class ArchiveFormatError(ValueError):
    """A batch archive entry does not follow the storage key naming scheme."""

# src/core/diagnostics.py — v1
"""Bounded per-file error log.

Records at most ``max_lines`` error messages but counts every error, so
a report with thousands of unreadable files keeps a short log and an
exact error count.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Can't copy some affected workspace files to the result store:"
DEFAULT_MAX_LINES = 20


class DiagnosticLog:
    """Collect human-readable error lines for one synchronization run."""

    def __init__(self, title: str = DEFAULT_TITLE, max_lines: int = DEFAULT_MAX_LINES) -> None:
        if max_lines < 1:
            raise ValueError("max_lines must be >= 1")
        self._title = title
        self._max_lines = max_lines
        self._lines: list[str] = []
        self._count = 0

    def log_error(self, fmt: str, *args: object) -> None:
        """Record an error; only the first ``max_lines`` are kept verbatim."""
        self._count += 1
        message = fmt % args if args else fmt
        logger.warning(message)
        if len(self._lines) < self._max_lines:
            self._lines.append(message)

    def extend(self, messages: list[str] | tuple[str, ...]) -> None:
        """Record messages produced elsewhere (e.g. on the agent)."""
        for message in messages:
            self.log_error("%s", message)

    @property
    def size(self) -> int:
        """Number of errors seen, including those not kept."""
        return self._count

    @property
    def lines(self) -> list[str]:
        return list(self._lines)

    def messages(self) -> list[str]:
        """Title, kept lines, and a skip note; empty when nothing failed."""
        if self._count == 0:
            return []
        result = [self._title, *self._lines]
        skipped = self._count - len(self._lines)
        if skipped > 0:
            result.append(f"  ... skipped logging of {skipped} additional errors ...")
        return result


def format_io_error(path: str, error: BaseException) -> str:
    """Diagnostic line for a file that could not be read or stored."""
    return f"- '{path}', IO exception has been thrown: {type(error).__name__}: {error}"


def format_key_collision(path: str, key: str) -> str:
    """Diagnostic line for a file whose storage key another file already took."""
    return f"- '{path}', storage key {key} already used by another file"

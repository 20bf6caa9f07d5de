# src/batch/classifier.py — v1
"""Candidate classification shared by the batch and fallback paths.

Decision flow per file (first match wins):
  1. source missing            → not_found
  2. outside authorized roots  → not_in_workspace
  3. exists but not readable   → unreadable (diagnostic only)
  4. otherwise                 → eligible
"""

from __future__ import annotations

import logging
from typing import Literal, NamedTuple

from affectedfiles.core.diagnostics import format_io_error
from affectedfiles.core.models import AuthorizedRoots, FileReference
from affectedfiles.transport.file_access import FileAccess

logger = logging.getLogger(__name__)

Status = Literal["not_found", "not_in_workspace", "unreadable", "eligible"]


class Classification(NamedTuple):
    status: Status
    error: str | None = None


def classify(
    reference: FileReference,
    roots: AuthorizedRoots,
    access: FileAccess,
) -> Classification:
    """Classify one candidate; never raises for per-file problems."""
    path = reference.absolute_path
    if not access.exists(path):
        return Classification("not_found")

    if not access.is_authorized(path, roots):
        # Policy rejection: only the logical name is logged
        logger.debug("Not in an authorized directory: %s", reference.logical_name)
        return Classification("not_in_workspace")

    try:
        access.check_readable(path)
    except OSError as e:
        return Classification("unreadable", format_io_error(path, e))

    return Classification("eligible")

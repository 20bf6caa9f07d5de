# src/core/containment.py — v1
"""Path containment predicate — the only read guard of the subsystem.

A candidate may be read iff its canonical form equals, or lies below,
the workspace root or one of the extra authorized roots. Comparison is
component-wise so ``/ws-evil`` is never inside ``/ws``.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from affectedfiles.core.models import AuthorizedRoots, canonical_path

logger = logging.getLogger(__name__)


def is_authorized(candidate: str | os.PathLike[str], roots: AuthorizedRoots) -> bool:
    """Return True if ``candidate`` resolves into one of ``roots``.

    Candidate and roots are both resolved here, on the reading side.
    Fails closed: any error while resolving them denies access.
    """
    raw = os.fspath(candidate)
    if not raw or "\0" in raw:
        return False
    try:
        resolved = canonical_path(candidate)
        allowed = roots.canonical_roots()
    except (OSError, ValueError, RuntimeError):
        logger.debug("Cannot canonicalize %r, denying access", candidate)
        return False
    return any(is_within(resolved, root) for root in allowed)


def is_within(child: Path, parent: Path) -> bool:
    """Component-wise prefix test on already canonical paths.

    Case folding follows the platform (``os.path.normcase``), so
    ``C:\\A\\b.c`` is inside ``C:\\a`` on Windows.
    """
    child_parts = [os.path.normcase(part) for part in child.parts]
    parent_parts = [os.path.normcase(part) for part in parent.parts]
    if len(parent_parts) > len(child_parts):
        return False
    return child_parts[: len(parent_parts)] == parent_parts

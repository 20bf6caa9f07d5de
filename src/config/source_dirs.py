# src/config/source_dirs.py — v1
"""Source directory filter — which extra directories may be read from.

Requested source directories come from the job configuration and are
untrusted. A relative directory is resolved against the workspace; a
directory outside the workspace is kept only if an administrator listed
it (or a parent of it) as permitted.
"""

from __future__ import annotations

import logging
from pathlib import Path

from affectedfiles.core.containment import is_within
from affectedfiles.core.diagnostics import DiagnosticLog
from affectedfiles.core.models import AuthorizedRoots, canonical_path

logger = logging.getLogger(__name__)


def filter_source_directories(
    workspace: Path,
    permitted: list[str],
    requested: list[str],
    log: DiagnosticLog | None = None,
) -> list[Path]:
    """Return the requested directories that may be read.

    The decision uses resolved paths; the returned entries keep the form
    they were requested in (relative ones joined to ``workspace``) so the
    reading side resolves them again.

    Args:
        workspace: Workspace root on the agent.
        permitted: Absolute directories approved by an administrator.
        requested: Directories asked for by the job (absolute or relative).
        log: Receives one error line per rejected directory.

    Returns:
        Accepted directories in request order, without duplicates
        (two entries resolving to the same directory count once).
    """
    workspace_path = canonical_path(workspace)
    permitted_paths = [canonical_path(p) for p in permitted if Path(p).is_absolute()]
    for entry in permitted:
        if not Path(entry).is_absolute():
            logger.warning("Ignoring relative permitted source directory %r", entry)

    accepted: list[Path] = []
    seen: set[Path] = set()
    for entry in requested:
        candidate = Path(entry)
        if not candidate.is_absolute():
            candidate = Path(workspace) / candidate
        try:
            resolved = canonical_path(candidate)
        except (OSError, ValueError, RuntimeError):
            _reject(log, entry, "cannot be resolved")
            continue

        if is_within(resolved, workspace_path) or any(
            is_within(resolved, allowed) for allowed in permitted_paths
        ):
            if resolved not in seen:
                seen.add(resolved)
                accepted.append(candidate)
            continue
        _reject(log, entry, "it has not been approved in the global configuration")

    return accepted


def build_authorized_roots(
    workspace: Path,
    permitted: list[str] | None = None,
    requested: list[str] | None = None,
    log: DiagnosticLog | None = None,
) -> AuthorizedRoots:
    """Workspace root plus every accepted source directory."""
    extras = filter_source_directories(workspace, permitted or [], requested or [], log)
    return AuthorizedRoots(workspace_root=workspace, extra_roots=frozenset(extras))


def _reject(log: DiagnosticLog | None, entry: str, reason: str) -> None:
    message = f"Removing source directory '{entry}' - {reason}"
    if log is not None:
        log.log_error("%s", message)
    else:
        logger.warning(message)

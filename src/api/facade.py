# src/api/facade.py — v2
"""Public API facade — copy affected files of a report into its result.

Usage:
    from affectedfiles.api.facade import copy_affected_files
    report = copy_affected_files(references, result_dir, settings)
    print(report.summary)
"""

from __future__ import annotations

import logging
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO, Iterable

from affectedfiles.api.models import SyncReport
from affectedfiles.config.settings import ConfigurationError, Settings
from affectedfiles.config.source_dirs import build_authorized_roots
from affectedfiles.core.diagnostics import DiagnosticLog
from affectedfiles.core.models import FileReference
from affectedfiles.logging.context import clear_context, set_run_context
from affectedfiles.storage.result_store import ResultStore
from affectedfiles.sync.coordinator import RemoteCoordinator

if TYPE_CHECKING:
    from affectedfiles.transport.channel import BaseChannel
    from affectedfiles.transport.file_access import FileAccess

logger = logging.getLogger(__name__)

# Pseudo file name used by parsers for findings in the build console log
CONSOLE_LOG_FILE_NAME = "Console Output"


def copy_affected_files(
    references: Iterable[FileReference],
    result_dir: Path,
    settings: Settings | None = None,
    workspace: Path | None = None,
    channel: BaseChannel | None = None,
    file_access: FileAccess | None = None,
    cancel_event: threading.Event | None = None,
    tool_id: str | None = None,
) -> SyncReport:
    """Copy every file referenced by findings into the result's store.

    Orchestrates one run:
      1. Skip everything if copying is disabled
      2. Drop pseudo files (console log, entries without a path)
      3. Compute authorized roots from workspace and source directories
      4. Run the coordinator (batch path, fallback if needed)
      5. Return summary line and diagnostics

    Args:
        references: File references in report order.
        result_dir: Directory of the result the files belong to.
        settings: Global settings. Loaded from .env if None.
        workspace: Workspace root; defaults to WORKSPACE_ROOT.
        channel: Transport to the agent. Created from settings if None.
        file_access: Per-file access for the fallback path.
        cancel_event: Set to interrupt the run between files.
        tool_id: Analysis tool the references come from (log context only).

    Returns:
        SyncReport with outcome, info and error messages.

    Raises:
        ConfigurationError: If no workspace root is known.
        SyncInterruptedError: If ``cancel_event`` was set.
    """
    settings = settings or Settings()
    run_id = _generate_run_id()
    store = ResultStore.for_result(Path(result_dir), settings.storage_key_algorithm)

    if not settings.copy_enabled:
        logger.info("Skipping copying of affected files")
        return SyncReport(
            run_id=run_id,
            store_dir=store.root,
            skipped=True,
            info_messages=["Skipping copying of affected files"],
        )

    workspace = workspace or settings.workspace_root
    if workspace is None:
        raise ConfigurationError("WORKSPACE_ROOT must be set to copy affected files")

    set_run_context(run_id, tool_id)
    try:
        candidates = select_candidates(references)
        info = [f"Copying affected files to result store '{store.root}'"]

        directory_log = DiagnosticLog(
            title="Errors while resolving source directories:",
            max_lines=settings.diagnostics_max_lines,
        )
        roots = build_authorized_roots(
            Path(workspace),
            permitted=settings.permitted_source_directories_list,
            requested=settings.source_directories_list,
            log=directory_log,
        )

        if channel is None:
            from affectedfiles.transport.channel_factory import create_channel

            channel = create_channel(settings)

        diagnostics = DiagnosticLog(max_lines=settings.diagnostics_max_lines)
        coordinator = RemoteCoordinator(
            store,
            channel=channel,
            file_access=file_access,
            cancel_event=cancel_event,
            diagnostics=diagnostics,
        )
        outcome = coordinator.sync(candidates, roots)
        info.append(outcome.summary())

        return SyncReport(
            run_id=run_id,
            store_dir=store.root,
            outcome=outcome,
            info_messages=info,
            error_messages=directory_log.messages() + diagnostics.messages(),
        )
    finally:
        clear_context()


def select_candidates(references: Iterable[FileReference]) -> list[FileReference]:
    """Keep references that point to a real file, in input order."""
    return [
        ref for ref in references
        if ref.absolute_path and ref.logical_name != CONSOLE_LOG_FILE_NAME
    ]


# --- Lookup helpers for renderers ---


def has_affected_file(result_dir: Path, logical_name: str, settings: Settings | None = None) -> bool:
    """True if a readable copy of ``logical_name`` is stored for the result."""
    return _store_for(result_dir, settings).has_file(logical_name)


def open_affected_file(result_dir: Path, logical_name: str, settings: Settings | None = None) -> BinaryIO:
    """Open the stored copy of ``logical_name``.

    Raises:
        FileNotFoundError: If the file was not copied.
    """
    return _store_for(result_dir, settings).open_file(logical_name)


def resolve_affected_file(
    result_dir: Path, reference: FileReference, settings: Settings | None = None,
) -> Path:
    """Stored copy if available, the original location otherwise."""
    return _store_for(result_dir, settings).resolve_file(reference)


def _store_for(result_dir: Path, settings: Settings | None) -> ResultStore:
    algorithm = settings.storage_key_algorithm if settings else "blake2b"
    return ResultStore.for_result(Path(result_dir), algorithm)


def _generate_run_id() -> str:
    """Run id: yyyymmdd_hhmmss_{uuid4_short}."""
    ts = datetime.now(timezone.utc)
    return f"{ts.strftime('%Y%m%d_%H%M%S')}_{uuid.uuid4().hex[:6]}"

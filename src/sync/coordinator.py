# src/sync/coordinator.py — v1
"""Controller-side coordinator: skip-set, one batch round trip, fallback.

Per invocation:
    Start → ComputeSkipSet → TryBatch
        → BatchSucceeded → Unpack → Done
        → BatchUnavailable → Fallback (per-file loop) → Done

The batch path is attempted exactly once. Any channel-level failure,
including a store hiccup while unpacking, switches to the per-file
fallback, which produces an outcome of the same shape.
"""

from __future__ import annotations

import logging
import threading
import time

from affectedfiles.batch.classifier import classify
from affectedfiles.batch.models import SyncRequest
from affectedfiles.core.diagnostics import DiagnosticLog, format_io_error, format_key_collision
from affectedfiles.core.errors import ArchiveFormatError, SyncInterruptedError
from affectedfiles.core.models import AuthorizedRoots, CopyOutcome, FileReference
from affectedfiles.logging.context import set_phase_context
from affectedfiles.storage.keys import key_of
from affectedfiles.storage.result_store import ResultStore
from affectedfiles.transport.channel import BaseChannel, ChannelUnavailableError
from affectedfiles.transport.file_access import FileAccess, LocalFileAccess

logger = logging.getLogger(__name__)


class RemoteCoordinator:
    """Copy affected files into a result store with as few round trips as possible."""

    def __init__(
        self,
        store: ResultStore,
        channel: BaseChannel | None = None,
        file_access: FileAccess | None = None,
        cancel_event: threading.Event | None = None,
        diagnostics: DiagnosticLog | None = None,
    ) -> None:
        """Initialize the coordinator.

        Args:
            store: Destination store on the controller.
            channel: Transport to the agent. None forces the fallback path.
            file_access: Per-file access used by the fallback path.
            cancel_event: Set by the caller to interrupt between candidates.
            diagnostics: Receives per-file error lines of every run.
        """
        self._store = store
        self._channel = channel
        self._access = file_access or LocalFileAccess()
        self._cancel_event = cancel_event
        self._diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()

    @property
    def diagnostics(self) -> DiagnosticLog:
        return self._diagnostics

    def sync(self, candidates: list[FileReference], roots: AuthorizedRoots) -> CopyOutcome:
        """Copy every candidate not yet stored.

        Raises:
            SyncInterruptedError: If the cancel event is set. Artifacts
                stored so far remain valid.
        """
        t0 = time.perf_counter()
        self._check_cancelled(0, len(candidates))

        pending, skipped = self.compute_skip_set(candidates)
        logger.info(
            "Copying affected files: %d candidate(s), %d already stored, %d to copy",
            len(candidates), len(skipped), len(pending),
        )
        if not pending:
            return CopyOutcome()

        try:
            set_phase_context("batch")
            outcome = self._run_batch(pending, roots)
        except ChannelUnavailableError as e:
            logger.info("Batch copy unavailable (%s), copying files one by one", e)
            set_phase_context("fallback")
            outcome = self._run_fallback(pending, roots)
        finally:
            set_phase_context(None)

        self._diagnostics.extend(outcome.errors)
        logger.info("%s (%.2fs)", outcome.summary(), time.perf_counter() - t0)
        return outcome

    def compute_skip_set(
        self, candidates: list[FileReference],
    ) -> tuple[list[FileReference], set[str]]:
        """Split candidates into work to do and names already stored.

        Repeated logical names are reduced to their first occurrence.
        """
        pending: list[FileReference] = []
        skipped: set[str] = set()
        seen: set[str] = set()
        for reference in candidates:
            name = reference.logical_name
            if name in seen:
                continue
            seen.add(name)
            if self._store.exists(key_of(name, self._store.key_algorithm)):
                skipped.add(name)
            else:
                pending.append(reference)
        return pending, skipped

    # --- Batch path ---

    def _run_batch(self, pending: list[FileReference], roots: AuthorizedRoots) -> CopyOutcome:
        if self._channel is None:
            raise ChannelUnavailableError("no channel to the agent")

        request = SyncRequest(
            candidates=pending, roots=roots, key_algorithm=self._store.key_algorithm,
        )
        response = self._channel.call(request)

        if response.archive:
            self._check_cancelled(0, len(pending))
            try:
                written = self._store.unpack(response.archive)
            except (ArchiveFormatError, OSError) as e:
                raise ChannelUnavailableError(f"cannot unpack batch archive: {e}") from e
            logger.debug("Stored %d new artifact(s) from batch archive", len(written))
        return response.outcome

    # --- Fallback path ---

    def _run_fallback(self, pending: list[FileReference], roots: AuthorizedRoots) -> CopyOutcome:
        copied = 0
        not_found = 0
        not_in_workspace = 0
        errors: list[str] = []
        claimed: set[str] = set()

        for index, reference in enumerate(pending):
            self._check_cancelled(index, len(pending) - index)

            result = classify(reference, roots, self._access)
            if result.status == "not_found":
                not_found += 1
                continue
            if result.status == "not_in_workspace":
                not_in_workspace += 1
                continue
            if result.status == "unreadable":
                errors.append(result.error or reference.absolute_path)
                continue

            key = key_of(reference.logical_name, self._store.key_algorithm)
            if key in claimed:
                errors.append(format_key_collision(reference.absolute_path, key))
                continue
            try:
                data = self._access.read_bytes(reference.absolute_path)
                # False means stored before this loop (partial unpack of the same name)
                self._store.store(key, data)
                claimed.add(key)
                copied += 1
            except OSError as e:
                errors.append(format_io_error(reference.absolute_path, e))

        return CopyOutcome(
            copied=copied,
            not_found=not_found,
            not_in_workspace=not_in_workspace,
            errors=tuple(errors),
        )

    def _check_cancelled(self, processed: int, remaining: int) -> None:
        if self._cancel_event is not None and self._cancel_event.is_set():
            raise SyncInterruptedError(processed=processed, remaining=remaining)

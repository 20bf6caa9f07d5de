# src/batch/copier.py — v1
"""Agent-side batch copier — classify candidates and archive eligible files.

Runs where the source files live. One call handles the whole candidate
set and returns a single archive, so the controller pays one round trip
regardless of the number of files.
"""

from __future__ import annotations

import logging
import time

from affectedfiles.batch.archive import ArchiveBuilder
from affectedfiles.batch.classifier import classify
from affectedfiles.batch.models import SyncRequest, SyncResponse
from affectedfiles.core.diagnostics import format_io_error, format_key_collision
from affectedfiles.core.models import AuthorizedRoots, CopyOutcome, FileReference
from affectedfiles.storage.keys import KeyAlgorithm, key_of
from affectedfiles.transport.file_access import FileAccess, LocalFileAccess

logger = logging.getLogger(__name__)


class RemoteBatchCopier:
    """Copy all eligible candidates into one batch archive.

    Workflow:
        1. Classify every candidate (not found / not in workspace /
           unreadable / eligible)
        2. Compress each eligible file into its own archive entry
        3. Return the outcome tally with the archive

    Per-file problems never raise; they are counted or reported as
    error lines in the outcome.
    """

    def __init__(
        self,
        roots: AuthorizedRoots,
        key_algorithm: KeyAlgorithm = "blake2b",
        file_access: FileAccess | None = None,
    ) -> None:
        self._roots = roots
        self._key_algorithm = key_algorithm
        self._access = file_access or LocalFileAccess()

    def copy(self, candidates: list[FileReference]) -> SyncResponse:
        """Classify ``candidates`` and archive the eligible ones."""
        t0 = time.perf_counter()
        not_found = 0
        not_in_workspace = 0
        errors: list[str] = []
        eligible: list[tuple[str, FileReference]] = []
        seen: set[str] = set()

        for reference in candidates:
            if reference.logical_name in seen:
                continue
            seen.add(reference.logical_name)

            result = classify(reference, self._roots, self._access)
            if result.status == "not_found":
                not_found += 1
            elif result.status == "not_in_workspace":
                not_in_workspace += 1
            elif result.status == "unreadable":
                errors.append(result.error or reference.absolute_path)
            else:
                eligible.append((key_of(reference.logical_name, self._key_algorithm), reference))

        builder = ArchiveBuilder()
        for key, reference in eligible:
            try:
                added = builder.add_file(key, self._access.source_path(reference.absolute_path))
            except OSError as e:
                errors.append(format_io_error(reference.absolute_path, e))
                continue
            if not added:
                errors.append(format_key_collision(reference.absolute_path, key))
        archive = builder.finish()

        outcome = CopyOutcome(
            copied=len(builder),
            not_found=not_found,
            not_in_workspace=not_in_workspace,
            errors=tuple(errors),
        )
        logger.info(
            "Batch copy of %d candidate(s): %d archived, %d not found, "
            "%d not in workspace, %d with I/O error (%d bytes, %.2fs)",
            len(seen), outcome.copied, not_found, not_in_workspace,
            outcome.errored, len(archive), time.perf_counter() - t0,
        )
        return SyncResponse(outcome=outcome, archive=archive)

    @classmethod
    def run(cls, request: SyncRequest, file_access: FileAccess | None = None) -> SyncResponse:
        """Execute a decoded request."""
        copier = cls(request.roots, request.key_algorithm, file_access=file_access)
        return copier.copy(request.candidates)


def handle_request(payload: bytes | str) -> bytes:
    """Agent entry point: JSON ``SyncRequest`` in, JSON ``SyncResponse`` out."""
    request = SyncRequest.model_validate_json(payload)
    response = RemoteBatchCopier.run(request)
    return response.model_dump_json().encode("utf-8")

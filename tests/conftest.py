# tests/conftest.py — v2
"""Shared test fixtures for all unit and integration tests.

Provides a temporary workspace with source files, a directory outside of
it, a result store and channel doubles. Filesystem only — no network.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from affectedfiles.batch.models import SyncRequest, SyncResponse
from affectedfiles.core.models import AuthorizedRoots, FileReference
from affectedfiles.logging.context import clear_context
from affectedfiles.storage.result_store import ResultStore
from affectedfiles.transport.channel import BaseChannel, ChannelUnavailableError, LocalChannel


# === CHANNEL DOUBLES ===


class RecordingChannel(BaseChannel):
    """Local channel that remembers every request it carried."""

    def __init__(self) -> None:
        self._inner = LocalChannel()
        self.requests: list[SyncRequest] = []

    def call(self, request: SyncRequest) -> SyncResponse:
        self.requests.append(request)
        return self._inner.call(request)


class BrokenChannel(BaseChannel):
    """Channel whose transport is always down."""

    def __init__(self) -> None:
        self.calls = 0

    def call(self, request: SyncRequest) -> SyncResponse:
        self.calls += 1
        raise ChannelUnavailableError("connection reset by peer")


# === FIXTURES: Filesystem ===


@pytest.fixture(autouse=True)
def _reset_log_context():
    clear_context()
    yield
    clear_context()


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Workspace with a top-level file and a nested source file."""
    ws = tmp_path / "ws"
    (ws / "src").mkdir(parents=True)
    (ws / "a.c").write_text("int a = 1;\n", encoding="utf-8")
    (ws / "src" / "main.c").write_text("int main(void) { return 0; }\n", encoding="utf-8")
    return ws


@pytest.fixture
def outside_dir(tmp_path: Path) -> Path:
    """Directory next to the workspace, never authorized by default."""
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "b.c").write_text("int b = 2;\n", encoding="utf-8")
    return outside


@pytest.fixture
def result_dir(tmp_path: Path) -> Path:
    return tmp_path / "result"


@pytest.fixture
def store(result_dir: Path) -> ResultStore:
    return ResultStore.for_result(result_dir)


@pytest.fixture
def roots(workspace: Path) -> AuthorizedRoots:
    return AuthorizedRoots(workspace_root=workspace)


@pytest.fixture
def scenario_candidates(workspace: Path, outside_dir: Path) -> list[FileReference]:
    """One copyable file, one outside the workspace, one missing."""
    return [
        FileReference(logical_name="a", absolute_path=str(workspace / "a.c")),
        FileReference(logical_name="b", absolute_path=str(outside_dir / "b.c")),
        FileReference(logical_name="c", absolute_path=str(workspace / "missing.c")),
    ]


# === FIXTURES: Channels ===


@pytest.fixture
def recording_channel() -> RecordingChannel:
    return RecordingChannel()


@pytest.fixture
def broken_channel() -> BrokenChannel:
    return BrokenChannel()

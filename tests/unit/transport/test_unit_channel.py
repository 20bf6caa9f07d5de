# tests/unit/transport/test_unit_channel.py — v1
"""Tests for transport/channel.py, channel_factory.py and file_access.py."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from affectedfiles.batch.archive import iter_entries
from affectedfiles.batch.models import SyncRequest, SyncResponse
from affectedfiles.config.settings import Settings
from affectedfiles.core.models import AuthorizedRoots, CopyOutcome
from affectedfiles.storage.keys import key_of
from affectedfiles.transport.channel import (
    ChannelUnavailableError,
    LocalChannel,
    SubprocessChannel,
    decode_response,
)
from affectedfiles.transport.channel_factory import create_channel
from affectedfiles.transport.file_access import LocalFileAccess


def _python(code: str) -> list[str]:
    return [sys.executable, "-c", code]


# ---------------------------------------------------------------------------
# Tests — LocalChannel
# ---------------------------------------------------------------------------

class TestLocalChannel:
    def test_default_handler_runs_batch_copier(self, roots: AuthorizedRoots, scenario_candidates):
        response = LocalChannel().call(SyncRequest(candidates=scenario_candidates, roots=roots))
        assert response.outcome.counts() == (1, 1, 1)
        assert [key for key, _ in iter_entries(response.archive)] == [key_of("a")]

    def test_custom_handler_receives_json(self, roots: AuthorizedRoots):
        seen: list[bytes] = []

        def handler(payload: bytes) -> bytes:
            seen.append(payload)
            return SyncResponse(outcome=CopyOutcome(not_found=3)).model_dump_json().encode()

        response = LocalChannel(handler).call(SyncRequest(roots=roots))
        assert response.outcome.not_found == 3
        assert SyncRequest.model_validate_json(seen[0]).roots == roots

    def test_os_error_becomes_unavailable(self, roots: AuthorizedRoots):
        def handler(payload: bytes) -> bytes:
            raise ConnectionResetError(104, "Connection reset by peer")

        with pytest.raises(ChannelUnavailableError):
            LocalChannel(handler).call(SyncRequest(roots=roots))

    def test_malformed_answer(self, roots: AuthorizedRoots):
        with pytest.raises(ChannelUnavailableError, match="Malformed"):
            LocalChannel(lambda payload: b"{not json").call(SyncRequest(roots=roots))


# ---------------------------------------------------------------------------
# Tests — SubprocessChannel
# ---------------------------------------------------------------------------

class TestSubprocessChannel:
    def test_empty_command(self):
        with pytest.raises(ValueError):
            SubprocessChannel([])

    def test_echoes_response(self, roots: AuthorizedRoots):
        answer = SyncResponse(outcome=CopyOutcome(copied=0, not_found=1)).model_dump_json()
        channel = SubprocessChannel(
            _python(f"import sys; sys.stdin.read(); sys.stdout.write({answer!r})"),
            timeout_s=60,
        )
        assert channel.call(SyncRequest(roots=roots)).outcome.not_found == 1

    def test_missing_program(self, roots: AuthorizedRoots, tmp_path: Path):
        channel = SubprocessChannel([str(tmp_path / "no-such-agent")])
        with pytest.raises(ChannelUnavailableError, match="Cannot start"):
            channel.call(SyncRequest(roots=roots))

    def test_non_zero_exit(self, roots: AuthorizedRoots):
        channel = SubprocessChannel(_python("import sys; sys.stderr.write('agent down'); sys.exit(3)"))
        with pytest.raises(ChannelUnavailableError, match="exited with 3: agent down"):
            channel.call(SyncRequest(roots=roots))

    def test_timeout(self, roots: AuthorizedRoots):
        channel = SubprocessChannel(_python("import time; time.sleep(10)"), timeout_s=0.5)
        with pytest.raises(ChannelUnavailableError, match="timed out"):
            channel.call(SyncRequest(roots=roots))

    def test_garbage_output(self, roots: AuthorizedRoots):
        channel = SubprocessChannel(_python("print('hello')"))
        with pytest.raises(ChannelUnavailableError, match="Malformed"):
            channel.call(SyncRequest(roots=roots))


def test_decode_response_base64_archive():
    response = decode_response(b'{"outcome": {"copied": 1}, "archive": "UEs="}')
    assert response.archive == b"PK"
    assert response.outcome.copied == 1


# ---------------------------------------------------------------------------
# Tests — create_channel()
# ---------------------------------------------------------------------------

class TestCreateChannel:
    def test_local_by_default(self):
        assert isinstance(create_channel(Settings(_env_file=None)), LocalChannel)

    def test_agent_command(self):
        settings = Settings(_env_file=None, agent_command="ssh build-01 'affectedfiles agent'")
        channel = create_channel(settings)
        assert isinstance(channel, SubprocessChannel)
        assert channel.command == ["ssh", "build-01", "affectedfiles agent"]


# ---------------------------------------------------------------------------
# Tests — LocalFileAccess
# ---------------------------------------------------------------------------

class TestLocalFileAccess:
    def test_exists(self, workspace: Path):
        access = LocalFileAccess()
        assert access.exists(str(workspace / "a.c"))
        assert not access.exists(str(workspace / "nope.c"))
        assert not access.exists("")
        assert not access.exists("/ws/\0bad")

    def test_read_bytes_through_canonical_path(self, workspace: Path):
        access = LocalFileAccess()
        path = str(workspace / "src" / ".." / "a.c")
        assert access.source_path(path) == (workspace / "a.c").resolve()
        assert access.read_bytes(path) == b"int a = 1;\n"

    def test_check_readable_directory(self, workspace: Path):
        with pytest.raises(IsADirectoryError):
            LocalFileAccess().check_readable(str(workspace / "src"))

# tests/unit/core/test_unit_models.py — v1
"""Tests for core/models.py — FileReference, AuthorizedRoots, CopyOutcome."""

from __future__ import annotations

import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from affectedfiles.core.models import AuthorizedRoots, CopyOutcome, FileReference


class TestFileReference:
    def test_frozen(self):
        ref = FileReference(logical_name="a.c", absolute_path="/ws/a.c")
        with pytest.raises(ValidationError):
            ref.logical_name = "b.c"  # type: ignore[misc]

    def test_empty_logical_name_rejected(self):
        with pytest.raises(ValidationError):
            FileReference(logical_name="", absolute_path="/ws/a.c")

    def test_absolute_path_defaults_to_empty(self):
        assert FileReference(logical_name="Console Output").absolute_path == ""


class TestAuthorizedRoots:
    def test_roots_are_kept_as_given(self, tmp_path: Path):
        roots = AuthorizedRoots(
            workspace_root=tmp_path / "ws" / ".." / "ws",
            extra_roots=frozenset({tmp_path / "src"}),
        )
        assert roots.workspace_root == tmp_path / "ws" / ".." / "ws"
        assert roots.canonical_roots() == [(tmp_path / "ws").resolve(), (tmp_path / "src").resolve()]

    def test_all_roots_starts_with_workspace(self, tmp_path: Path):
        roots = AuthorizedRoots(
            workspace_root=tmp_path / "ws",
            extra_roots=frozenset({tmp_path / "b", tmp_path / "a"}),
        )
        assert roots.all_roots == [tmp_path / "ws", tmp_path / "a", tmp_path / "b"]

    @pytest.mark.skipif(os.name == "nt", reason="POSIX symlinks")
    def test_symlinked_root_travels_unresolved(self, tmp_path: Path):
        real = tmp_path / "real-ws"
        real.mkdir()
        alias = tmp_path / "ws"
        alias.symlink_to(real)
        roots = AuthorizedRoots(workspace_root=alias)

        # The reading side sees the alias, not the sender's resolution of it
        restored = AuthorizedRoots.model_validate_json(roots.model_dump_json())
        assert restored.workspace_root == alias
        assert restored.canonical_roots() == [real.resolve()]

    def test_json_round_trip_keeps_roots(self, tmp_path: Path):
        roots = AuthorizedRoots(workspace_root=tmp_path, extra_roots=frozenset({tmp_path / "x"}))
        restored = AuthorizedRoots.model_validate_json(roots.model_dump_json())
        assert restored == roots


class TestCopyOutcome:
    def test_defaults(self):
        outcome = CopyOutcome()
        assert outcome.counts() == (0, 0, 0)
        assert outcome.errored == 0
        assert outcome.total == 0

    def test_errored_counts_messages(self):
        outcome = CopyOutcome(copied=1, errors=("- 'x', boom", "- 'y', boom"))
        assert outcome.errored == 2
        assert outcome.total == 3

    def test_add(self):
        merged = CopyOutcome(copied=1, not_found=2, errors=("e1",)) + CopyOutcome(
            copied=3, not_in_workspace=1, errors=("e2",),
        )
        assert merged.counts() == (4, 2, 1)
        assert merged.errors == ("e1", "e2")

    def test_summary_line(self):
        outcome = CopyOutcome(copied=1, not_found=2, not_in_workspace=3, errors=("e",))
        assert outcome.summary() == (
            "-> 1 copied, 3 not in workspace, 2 not found, 1 with I/O error"
        )

    def test_frozen(self):
        outcome = CopyOutcome()
        with pytest.raises(ValidationError):
            outcome.copied = 5  # type: ignore[misc]

# src/core/models.py — v1
"""Shared Pydantic domain models used across modules.

No module redefines these types — all imports come from core.models.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


# === INPUT ===


class FileReference(BaseModel):
    """A source file referenced by at least one finding."""

    model_config = ConfigDict(frozen=True)

    logical_name: str = Field(min_length=1)
    absolute_path: str = ""


class AuthorizedRoots(BaseModel):
    """Directory trees that may be read from.

    Roots are kept as given and travel to the agent unchanged; they are
    resolved by ``canonical_roots()`` on the side that reads the files,
    so a symlink that only exists on the controller is never baked in.
    """

    model_config = ConfigDict(frozen=True)

    workspace_root: Path
    extra_roots: frozenset[Path] = Field(default_factory=frozenset)

    @property
    def all_roots(self) -> list[Path]:
        """Workspace first, then extra roots in sorted order."""
        return [self.workspace_root, *sorted(self.extra_roots)]

    def canonical_roots(self) -> list[Path]:
        """``all_roots`` resolved against the local filesystem.

        Raises:
            OSError, RuntimeError: If a root cannot be resolved.
        """
        return [canonical_path(root) for root in self.all_roots]


def canonical_path(path: str | os.PathLike[str]) -> Path:
    """Return the absolute, symlink-resolved form of ``path``.

    Symlinks are followed before ``..`` is applied, as the OS would.
    """
    return Path(os.fspath(path)).resolve(strict=False)


# === OUTCOME ===


class CopyOutcome(BaseModel):
    """Tally of one synchronization run (batch or fallback)."""

    model_config = ConfigDict(frozen=True)

    copied: int = 0
    not_found: int = 0
    not_in_workspace: int = 0
    errors: tuple[str, ...] = ()

    @property
    def errored(self) -> int:
        return len(self.errors)

    @property
    def total(self) -> int:
        """Number of candidates accounted for, errors included."""
        return self.copied + self.not_found + self.not_in_workspace + self.errored

    def __add__(self, other: CopyOutcome) -> CopyOutcome:
        if not isinstance(other, CopyOutcome):
            return NotImplemented
        return CopyOutcome(
            copied=self.copied + other.copied,
            not_found=self.not_found + other.not_found,
            not_in_workspace=self.not_in_workspace + other.not_in_workspace,
            errors=self.errors + other.errors,
        )

    def counts(self) -> tuple[int, int, int]:
        """(copied, not_found, not_in_workspace) — comparable across paths."""
        return self.copied, self.not_found, self.not_in_workspace

    def summary(self) -> str:
        """Single line for the run log."""
        return (
            f"-> {self.copied} copied, {self.not_in_workspace} not in workspace, "
            f"{self.not_found} not found, {self.errored} with I/O error"
        )

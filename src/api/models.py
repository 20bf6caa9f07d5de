# src/api/models.py — v2
"""API-level models: SyncReport."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from affectedfiles.core.models import CopyOutcome


class SyncReport(BaseModel):
    """Return value of facade.copy_affected_files()."""

    run_id: str
    store_dir: Path
    outcome: CopyOutcome = Field(default_factory=CopyOutcome)
    skipped: bool = False
    info_messages: list[str] = Field(default_factory=list)
    error_messages: list[str] = Field(default_factory=list)

    @property
    def summary(self) -> str:
        return self.outcome.summary()

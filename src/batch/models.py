# src/batch/models.py — v2
"""Batch copy wire models: SyncRequest, SyncResponse.

Both cross the agent/controller boundary as JSON; archive bytes are
base64 encoded.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from affectedfiles.core.models import AuthorizedRoots, CopyOutcome, FileReference
from affectedfiles.storage.keys import KeyAlgorithm


class SyncRequest(BaseModel):
    """Candidates to copy, sent once per invocation to the agent."""

    candidates: list[FileReference] = Field(default_factory=list)
    roots: AuthorizedRoots
    key_algorithm: KeyAlgorithm = "blake2b"


class SyncResponse(BaseModel):
    """Agent answer: outcome tally plus the batch archive."""

    model_config = ConfigDict(ser_json_bytes="base64", val_json_bytes="base64")

    outcome: CopyOutcome = Field(default_factory=CopyOutcome)
    archive: bytes = b""

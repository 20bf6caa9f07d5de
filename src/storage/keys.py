# src/storage/keys.py — v1
"""Storage keys: deterministic, filesystem-safe names for logical file names.

Two schemes are supported:

- ``blake2b`` (default): 64-bit BLAKE2b digest, 16 lowercase hex chars.
  With n stored files the collision probability is about n² / 2**65,
  i.e. below 1e-9 for a quarter of a million files per result.
- ``java``: 32-bit ``String.hashCode()`` rendered like
  ``Integer.toHexString``. Kept to read stores written by earlier tooling;
  collisions become likely (>1%) from roughly 10,000 files on.

A collision makes a second file look already stored and it is skipped.
"""

from __future__ import annotations

import hashlib
import re
from typing import Literal

from affectedfiles.core.errors import ArchiveFormatError

KeyAlgorithm = Literal["blake2b", "java"]

ARTIFACT_SUFFIX = ".tmp"
ARCHIVE_SUFFIX = ".zip"

_ENTRY_PATTERN = re.compile(r"^([0-9a-f]{1,64})\.tmp\.zip$")
_ARTIFACT_PATTERN = re.compile(r"^([0-9a-f]{1,64})\.tmp$")


def key_of(logical_name: str, algorithm: KeyAlgorithm = "blake2b") -> str:
    """Return the storage key for ``logical_name``."""
    if algorithm == "blake2b":
        return hashlib.blake2b(logical_name.encode("utf-8"), digest_size=8).hexdigest()
    if algorithm == "java":
        return _java_hash_hex(logical_name)
    raise ValueError(f"Unsupported storage key algorithm: {algorithm!r}")


def temp_name(logical_name: str, algorithm: KeyAlgorithm = "blake2b") -> str:
    """Artifact file name in the result store: ``<key>.tmp``."""
    return key_of(logical_name, algorithm) + ARTIFACT_SUFFIX


def archive_entry_name(logical_name: str, algorithm: KeyAlgorithm = "blake2b") -> str:
    """Entry name inside a batch archive: ``<key>.tmp.zip``."""
    return temp_name(logical_name, algorithm) + ARCHIVE_SUFFIX


def key_from_entry_name(entry_name: str) -> str:
    """Inverse of :func:`archive_entry_name`.

    Raises:
        ArchiveFormatError: If the name is not a plain ``<hex>.tmp.zip``
            (path separators, ``..`` and other characters are rejected).
    """
    match = _ENTRY_PATTERN.match(entry_name)
    if match is None:
        raise ArchiveFormatError(f"Unexpected archive entry name: {entry_name!r}")
    return match.group(1)


def key_from_artifact_name(file_name: str) -> str | None:
    """Return the key of a stored ``<key>.tmp`` file, None for anything else."""
    match = _ARTIFACT_PATTERN.match(file_name)
    return match.group(1) if match else None


def _java_hash_hex(value: str) -> str:
    """``Integer.toHexString(value.hashCode())`` over UTF-16 code units."""
    h = 0
    encoded = value.encode("utf-16-be", errors="surrogatepass")
    for i in range(0, len(encoded), 2):
        unit = (encoded[i] << 8) | encoded[i + 1]
        h = (31 * h + unit) & 0xFFFFFFFF
    return format(h, "x")

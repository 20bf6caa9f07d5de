# src/storage/layout.py — v2
"""Result store directory structure.

All artifacts of one result live flat under
``{result_dir}/files-with-issues/{key}.tmp``.
"""

from __future__ import annotations

from pathlib import Path

from affectedfiles.storage.keys import ARTIFACT_SUFFIX

# Sub-directory of a result holding the copied source files
AFFECTED_FILES_DIR = "files-with-issues"

# Prefix of in-flight temp files; never matches the artifact pattern
PARTIAL_PREFIX = ".partial-"


def store_dir(result_dir: Path) -> Path:
    """Return the directory holding the stored artifacts of a result."""
    return result_dir / AFFECTED_FILES_DIR


def artifact_path(root: Path, key: str) -> Path:
    """Return the path of the artifact stored under ``key``."""
    return root / f"{key}{ARTIFACT_SUFFIX}"


def ensure_store_directory(root: Path) -> None:
    """Create the store directory on first write."""
    root.mkdir(parents=True, exist_ok=True)

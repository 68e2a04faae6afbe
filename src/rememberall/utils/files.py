"""Utility helpers for working with files."""

from __future__ import annotations

import hashlib
import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, Iterator

from rememberall.config import ConfigurationError

LOGGER = logging.getLogger(__name__)


def validate_pattern(pattern: str) -> str:
    """Reject patterns that are empty or would leave the top level of a directory."""
    if not pattern or not pattern.strip():
        raise ConfigurationError("Note pattern must not be empty")
    if "/" in pattern or os.sep in pattern or "**" in pattern:
        raise ConfigurationError(f"Note pattern must match top-level files only: {pattern!r}")
    return pattern


def iter_note_paths(directories: Iterable[Path], pattern: str = "*.markdown") -> Iterator[Path]:
    """Yield note files matching pattern directly inside each directory.

    Directories that are missing or cannot be listed are logged and skipped.
    """
    validate_pattern(pattern)
    for directory in directories:
        directory = Path(directory)
        if not directory.is_dir():
            LOGGER.warning("Not a directory, skipping: %s", directory)
            continue
        try:
            matches = sorted(directory.glob(pattern))
        except OSError as exc:
            LOGGER.error("Failed to scan %s: %s", directory, exc)
            continue
        for path in matches:
            if path.is_file():
                yield path.resolve()


def compute_sha256(text: str) -> str:
    """Compute the SHA256 hex digest of a piece of text."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def atomic_write_text(path: Path, content: str) -> None:
    """Write content to a sibling temporary file, then move it over path."""
    path = Path(path)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

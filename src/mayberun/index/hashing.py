"""Whole-file content hashing."""

from __future__ import annotations

import hashlib
from pathlib import Path

from mayberun.errors import UnreadableFileError

_READ_CHUNK_BYTES = 1024 * 128


def sha256_file(path: Path) -> str:
    """Compute SHA-256 hash in deterministic chunked reads."""
    digest = hashlib.sha256()
    try:
        with path.open("rb") as handle:
            while True:
                chunk = handle.read(_READ_CHUNK_BYTES)
                if not chunk:
                    break
                digest.update(chunk)
    except OSError as exc:
        raise UnreadableFileError(
            f"Cannot read '{path}': {exc.strerror or exc}", path=path
        ) from exc
    return digest.hexdigest()


def hash_snapshot(root: Path, paths: frozenset[str]) -> dict[str, str]:
    """Hash every root-relative path of a snapshot in sorted order."""
    return {path: sha256_file(root / path) for path in sorted(paths)}

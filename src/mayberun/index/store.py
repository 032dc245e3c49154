"""Persistent cache document storage with atomic replacement."""

from __future__ import annotations

import contextlib
import json
import os
from pathlib import Path

from mayberun.errors import CacheWriteError
from mayberun.index.models import CacheState

CACHE_SCHEMA_VERSION = 1
DEFAULT_CACHE_FILENAME = ".mayberun"


class CacheStore:
    """Loads and saves the cache document kept under the working root."""

    def __init__(self, root: Path, filename: str = DEFAULT_CACHE_FILENAME) -> None:
        self._root = root.resolve()
        self._path = self._root / filename

    @property
    def path(self) -> Path:
        """Return on-disk cache document path."""
        return self._path

    def load(self) -> CacheState | None:
        """Return recorded state, or None when there is no usable document."""
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError):
            return None
        return parse_cache_payload(payload)

    def save(self, state: CacheState) -> Path:
        """Write the full document to a temporary sibling, then replace the target."""
        payload = {"schema_version": CACHE_SCHEMA_VERSION, **state.to_payload()}
        tmp = self._path.with_name(f"{self._path.name}.{os.getpid()}.tmp")
        try:
            with tmp.open("w", encoding="utf-8") as handle:
                json.dump(payload, handle, sort_keys=True, indent=2)
                handle.write("\n")
                handle.flush()
                os.fsync(handle.fileno())
            tmp.replace(self._path)
        except OSError as exc:
            with contextlib.suppress(OSError):
                tmp.unlink(missing_ok=True)
            raise CacheWriteError(
                f"Cannot write cache '{self._path}': {exc.strerror or exc}", path=self._path
            ) from exc
        return self._path


def parse_cache_payload(payload: object) -> CacheState | None:
    """Validate a decoded document; any shape mismatch means no prior state."""
    if not isinstance(payload, dict):
        return None
    schema = payload.get("schema_version", CACHE_SCHEMA_VERSION)
    if not isinstance(schema, int) or isinstance(schema, bool) or schema != CACHE_SCHEMA_VERSION:
        return None

    raw_hashes = payload.get("file_hashes")
    raw_results = payload.get("glob_results")
    if not isinstance(raw_hashes, dict) or not isinstance(raw_results, dict):
        return None

    file_hashes: dict[str, str] = {}
    for path, digest in raw_hashes.items():
        if not isinstance(path, str) or not isinstance(digest, str):
            return None
        file_hashes[path] = digest

    glob_results: dict[str, frozenset[str]] = {}
    for pattern, paths in raw_results.items():
        if not isinstance(paths, list):
            return None
        if not all(isinstance(item, str) for item in paths):
            return None
        glob_results[pattern] = frozenset(paths)

    return CacheState(file_hashes=file_hashes, glob_results=glob_results)

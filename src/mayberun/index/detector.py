"""Change detection for glob patterns against recorded cache state."""

from __future__ import annotations

from collections.abc import Collection
from pathlib import Path

from mayberun.index.hashing import hash_snapshot, sha256_file
from mayberun.index.models import CacheState, CheckResult
from mayberun.index.patterns import resolve_pattern
from mayberun.index.store import CacheStore
from mayberun.logging.audit import DEFAULT_AUDIT_FILENAME


class ChangeDetector:
    """Checks and records pattern state over one loaded CacheState."""

    def __init__(
        self,
        root: Path,
        state: CacheState | None,
        excluded_paths: Collection[str] = (),
    ) -> None:
        self._root = root.resolve()
        self._state = state
        self._excluded_paths = frozenset(excluded_paths)

    @property
    def state(self) -> CacheState | None:
        """Return the in-memory state, None when nothing was loaded or recorded."""
        return self._state

    def check(self, pattern: str) -> CheckResult:
        """Classify the pattern's current content as changed or unchanged.

        Membership is compared before any hashing; a pattern whose file set
        diverged from the recorded snapshot never touches file contents.
        """
        if self._state is None:
            return CheckResult.CHANGED

        current = resolve_pattern(self._root, pattern, self._excluded_paths)
        if current != self._state.snapshot_for(pattern):
            return CheckResult.CHANGED

        recorded = self._state.file_hashes
        for path in sorted(current):
            expected = recorded.get(path)
            if expected is None or sha256_file(self._root / path) != expected:
                return CheckResult.CHANGED
        return CheckResult.UNCHANGED

    def record(self, pattern: str) -> CacheState:
        """Store the pattern's current snapshot and upsert its file hashes."""
        current = resolve_pattern(self._root, pattern, self._excluded_paths)
        hashes = hash_snapshot(self._root, current)

        if self._state is None:
            self._state = CacheState()
        self._state.glob_results[pattern] = current
        self._state.file_hashes.update(hashes)
        return self._state


def internal_paths(root: Path, *paths: Path) -> frozenset[str]:
    """Return root-relative POSIX forms of tool-owned files located under root."""
    resolved_root = root.resolve()
    output: set[str] = set()
    for path in paths:
        resolved = path.resolve()
        if resolved.is_relative_to(resolved_root):
            output.add(resolved.relative_to(resolved_root).as_posix())
    return frozenset(output)


def _default_internal_paths(root: Path, cache: CacheStore) -> frozenset[str]:
    return internal_paths(root, cache.path, root / DEFAULT_AUDIT_FILENAME)


def check_glob(root: Path, pattern: str, store: CacheStore | None = None) -> CheckResult:
    """Load recorded state and check one pattern against it."""
    cache = store or CacheStore(root)
    detector = ChangeDetector(root, cache.load(), _default_internal_paths(root, cache))
    return detector.check(pattern)


def write_glob(root: Path, pattern: str, store: CacheStore | None = None) -> Path:
    """Load recorded state, record one pattern and persist the result."""
    cache = store or CacheStore(root)
    detector = ChangeDetector(root, cache.load(), _default_internal_paths(root, cache))
    return cache.save(detector.record(pattern))

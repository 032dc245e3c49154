"""Typed models for cached glob state."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

Snapshot = frozenset[str]


class CheckResult(Enum):
    """Outcome of comparing a pattern against recorded state."""

    CHANGED = "changed"
    UNCHANGED = "unchanged"


@dataclass(slots=True)
class CacheState:
    """Last recorded hash per file and snapshot per glob pattern."""

    file_hashes: dict[str, str] = field(default_factory=dict)
    glob_results: dict[str, Snapshot] = field(default_factory=dict)

    def snapshot_for(self, pattern: str) -> Snapshot | None:
        """Return the recorded snapshot for an exact pattern string."""
        return self.glob_results.get(pattern)

    def to_payload(self) -> dict[str, object]:
        """Return a JSON-serializable document with deterministic ordering."""
        return {
            "file_hashes": {path: self.file_hashes[path] for path in sorted(self.file_hashes)},
            "glob_results": {
                pattern: sorted(self.glob_results[pattern]) for pattern in sorted(self.glob_results)
            },
        }

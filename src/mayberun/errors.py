"""Error taxonomy shared by detection, caching and command execution."""

from __future__ import annotations

from pathlib import Path


class MayberunError(Exception):
    """Base class for failures that abort an invocation."""

    code = "MAYBERUN_ERROR"

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path


class InvalidPatternError(MayberunError):
    """Raised when a glob pattern cannot be parsed."""

    code = "INVALID_PATTERN"


class TraversalError(MayberunError):
    """Raised when walking the tree for a pattern fails."""

    code = "TRAVERSAL_ERROR"


class UnreadableFileError(MayberunError):
    """Raised when a matched file cannot be opened or read for hashing."""

    code = "UNREADABLE_FILE"


class CacheWriteError(MayberunError):
    """Raised when the cache document cannot be persisted."""

    code = "CACHE_WRITE_FAILED"


class AuditWriteError(MayberunError):
    """Raised when a run event cannot be appended to the audit log."""

    code = "AUDIT_WRITE_FAILED"


class SpawnFailureError(MayberunError):
    """Raised when the external command cannot be launched."""

    code = "SPAWN_FAILED"


class ConfigError(MayberunError, ValueError):
    """Raised for malformed mayberun.toml content."""

    code = "INVALID_CONFIG"

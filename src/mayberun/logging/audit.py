"""Structured JSONL run log utilities."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path

from mayberun.errors import AuditWriteError

DEFAULT_AUDIT_FILENAME = ".mayberun-audit.jsonl"


@dataclass(slots=True, frozen=True)
class RunEvent:
    """Sanitized representation of a single invocation."""

    timestamp: str
    run_id: str
    command: str | None
    decision: str
    input_result: str | None
    output_result: str | None
    exit_code: int | None
    recorded: bool
    error_code: str | None
    metadata: dict[str, object]


def utc_timestamp() -> str:
    """Return an ISO-8601 UTC timestamp."""
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def sanitize_command(command: list[str]) -> dict[str, object]:
    """Describe a command line without logging argument values."""
    if not command:
        return {"argument_count": 0}
    return {
        "program": Path(command[0]).name,
        "argument_count": len(command) - 1,
    }


class JsonlAuditLogger:
    """Append-only JSONL run logger and bounded reader."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        """Return on-disk JSONL path."""
        return self._path

    def append(self, event: RunEvent) -> None:
        """Append one event as a single JSON object per line."""
        line = json.dumps(asdict(event), sort_keys=True)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as handle:
                handle.write(line)
                handle.write("\n")
        except OSError as exc:
            raise AuditWriteError(
                f"Cannot append to audit log '{self._path}': {exc.strerror or exc}",
                path=self._path,
            ) from exc

    def read(self, since: str | None = None, limit: int = 50) -> list[dict[str, object]]:
        """Read recent events, optionally filtered by timestamp lower bound."""
        if limit < 1:
            return []
        entries: list[dict[str, object]] = []
        if not self._path.exists():
            return entries
        with self._path.open("r", encoding="utf-8") as handle:
            for line in handle:
                stripped = line.strip()
                if not stripped:
                    continue
                try:
                    record = json.loads(stripped)
                except json.JSONDecodeError:
                    continue
                if not isinstance(record, dict):
                    continue
                if since is not None:
                    ts = record.get("timestamp")
                    if not isinstance(ts, str) or ts < since:
                        continue
                entries.append(record)
        if len(entries) <= limit:
            return entries
        return entries[-limit:]

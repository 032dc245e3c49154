from __future__ import annotations

import json
from pathlib import Path

from mayberun.logging import JsonlAuditLogger, RunEvent, sanitize_command, utc_timestamp


def _event(run_id: str, timestamp: str) -> RunEvent:
    return RunEvent(
        timestamp=timestamp,
        run_id=run_id,
        command="make",
        decision="run",
        input_result="changed",
        output_result=None,
        exit_code=0,
        recorded=True,
        error_code=None,
        metadata={"program": "make", "argument_count": 1},
    )


def test_append_writes_one_sorted_object_per_line(tmp_path: Path) -> None:
    logger = JsonlAuditLogger(tmp_path / "logs" / "run.jsonl")

    logger.append(_event("r1", "2026-01-01T00:00:00.000Z"))
    logger.append(_event("r2", "2026-01-02T00:00:00.000Z"))

    lines = logger.path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    first = json.loads(lines[0])
    assert list(first) == sorted(first)
    assert set(first) == {
        "command",
        "decision",
        "error_code",
        "exit_code",
        "input_result",
        "metadata",
        "output_result",
        "recorded",
        "run_id",
        "timestamp",
    }


def test_read_filters_since_and_limits_and_skips_malformed(tmp_path: Path) -> None:
    logger = JsonlAuditLogger(tmp_path / "run.jsonl")
    logger.append(_event("r1", "2026-01-01T00:00:00.000Z"))
    with logger.path.open("a", encoding="utf-8") as handle:
        handle.write("{broken\n\n[1, 2]\n")
    logger.append(_event("r2", "2026-01-02T00:00:00.000Z"))
    logger.append(_event("r3", "2026-01-03T00:00:00.000Z"))

    assert [row["run_id"] for row in logger.read()] == ["r1", "r2", "r3"]
    assert [row["run_id"] for row in logger.read(limit=2)] == ["r2", "r3"]
    assert [row["run_id"] for row in logger.read(since="2026-01-02")] == ["r2", "r3"]
    assert logger.read(limit=0) == []


def test_read_missing_log_is_empty(tmp_path: Path) -> None:
    assert JsonlAuditLogger(tmp_path / "absent.jsonl").read() == []


def test_sanitize_command_drops_argument_values() -> None:
    sanitized = sanitize_command(["/usr/bin/deploy", "--token", "s3cr3t"])

    assert sanitized == {"program": "deploy", "argument_count": 2}
    assert "s3cr3t" not in json.dumps(sanitized)
    assert sanitize_command([]) == {"argument_count": 0}


def test_utc_timestamp_shape() -> None:
    stamp = utc_timestamp()

    assert stamp.endswith("Z")
    assert "T" in stamp
    assert len(stamp) == len("2026-01-01T00:00:00.000Z")

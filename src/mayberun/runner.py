"""Run orchestration: check watched globs, spawn the command, record on success."""

from __future__ import annotations

import subprocess
import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from pathlib import Path

from mayberun.config import MayberunConfig
from mayberun.errors import AuditWriteError, MayberunError, SpawnFailureError
from mayberun.index import CacheStore, ChangeDetector, CheckResult, internal_paths
from mayberun.logging import JsonlAuditLogger, RunEvent, sanitize_command, utc_timestamp

Spawner = Callable[[Sequence[str], MayberunConfig], int]


@dataclass(slots=True, frozen=True)
class RunOutcome:
    """Decision and result of one invocation."""

    decision: str
    input_result: CheckResult | None
    output_result: CheckResult | None
    exit_code: int | None
    recorded: bool
    warnings: tuple[str, ...] = ()

    @property
    def should_run(self) -> bool:
        return needs_run(self.input_result, self.output_result)


def needs_run(input_result: CheckResult | None, output_result: CheckResult | None) -> bool:
    """Return True unless every watched pattern is unchanged; unwatched counts as changed."""
    return input_result is not CheckResult.UNCHANGED or output_result is not CheckResult.UNCHANGED


def spawn_command(command: Sequence[str], config: MayberunConfig) -> int:
    """Launch the command in the root and wait for it to finish."""
    try:
        completed = subprocess.run(list(command), cwd=config.root, check=False)
    except OSError as exc:
        raise SpawnFailureError(
            f"Cannot launch '{command[0]}': {exc.strerror or exc}", path=command[0]
        ) from exc
    return completed.returncode


class Runner:
    """Applies the run/skip policy for one configured root."""

    def __init__(
        self,
        config: MayberunConfig,
        spawner: Spawner = spawn_command,
        audit_logger: JsonlAuditLogger | None = None,
    ) -> None:
        self._config = config
        self._spawner = spawner
        self._store = CacheStore(config.root, config.cache_filename)
        if audit_logger is None and config.audit.enabled:
            audit_logger = JsonlAuditLogger(config.audit_path)
        self._audit_logger = audit_logger

    @property
    def store(self) -> CacheStore:
        return self._store

    def run(self, command: Sequence[str], force: bool = False, dry_run: bool = False) -> RunOutcome:
        """Check, maybe run, and record; errors are logged and re-raised.

        A failed audit append never replaces the run's own result: it becomes
        a warning on the outcome, or a note on the error being raised.
        """
        run_id = uuid.uuid4().hex[:12]
        try:
            outcome = self._run(command, force=force, dry_run=dry_run)
        except MayberunError as exc:
            try:
                self._log(run_id, command, None, error_code=exc.code)
            except AuditWriteError as audit_exc:
                exc.add_note(f"{audit_exc.code}: {audit_exc.message}")
            raise
        try:
            self._log(run_id, command, outcome, error_code=None)
        except AuditWriteError as audit_exc:
            return replace(outcome, warnings=(f"{audit_exc.code}: {audit_exc.message}",))
        return outcome

    def _run(self, command: Sequence[str], force: bool, dry_run: bool) -> RunOutcome:
        watch = self._config.watch
        detector = ChangeDetector(
            self._config.root,
            self._store.load(),
            internal_paths(self._config.root, self._store.path, self._config.audit_path),
        )
        # No short-circuit: the output is checked even when the input changed.
        input_result = detector.check(watch.input_glob) if watch.input_glob else None
        output_result = detector.check(watch.output_glob) if watch.output_glob else None

        if dry_run:
            return RunOutcome("dry-run", input_result, output_result, None, False)
        if not force and not needs_run(input_result, output_result):
            return RunOutcome("skip", input_result, output_result, 0, False)

        exit_code = self._spawner(command, self._config)
        decision = "forced" if force else "run"
        if exit_code != 0:
            return RunOutcome(decision, input_result, output_result, exit_code, False)

        patterns = [pattern for pattern in (watch.input_glob, watch.output_glob) if pattern]
        if not patterns:
            return RunOutcome(decision, input_result, output_result, exit_code, False)
        for pattern in patterns:
            state = detector.record(pattern)
        self._store.save(state)
        return RunOutcome(decision, input_result, output_result, exit_code, True)

    def _log(
        self,
        run_id: str,
        command: Sequence[str],
        outcome: RunOutcome | None,
        error_code: str | None,
    ) -> None:
        if self._audit_logger is None:
            return
        event = RunEvent(
            timestamp=utc_timestamp(),
            run_id=run_id,
            command=Path(command[0]).name if command else None,
            decision=outcome.decision if outcome is not None else "error",
            input_result=_result_name(outcome.input_result if outcome else None),
            output_result=_result_name(outcome.output_result if outcome else None),
            exit_code=outcome.exit_code if outcome is not None else None,
            recorded=outcome.recorded if outcome is not None else False,
            error_code=error_code,
            metadata=sanitize_command(list(command)),
        )
        self._audit_logger.append(event)


def _result_name(result: CheckResult | None) -> str | None:
    if result is None:
        return None
    return result.value

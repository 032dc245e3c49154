"""Command-line entrypoint."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from mayberun.config import CliOverrides, load_effective_config
from mayberun.errors import MayberunError, SpawnFailureError
from mayberun.runner import RunOutcome, Runner

EXIT_TOOL_ERROR = 2
EXIT_SPAWN_FAILED = 127


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for one invocation."""
    parser = argparse.ArgumentParser(
        prog="mayberun",
        description="Run a command only when its watched input or output files changed.",
    )
    parser.add_argument("--root", required=False, default=".")
    parser.add_argument("--in", dest="input_glob", required=False, default=None)
    parser.add_argument("--out", dest="output_glob", required=False, default=None)
    parser.add_argument("--force", action="store_true")
    parser.add_argument("--dry-run", action="store_true")
    parser.add_argument("--no-audit", action="store_true")
    parser.add_argument("command", nargs=argparse.REMAINDER)
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for the mayberun process."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    command = list(args.command)
    if command and command[0] == "--":
        command = command[1:]
    if not command:
        return 0

    overrides = CliOverrides(
        input_glob=args.input_glob,
        output_glob=args.output_glob,
        audit_enabled=False if args.no_audit else None,
    )
    try:
        config = load_effective_config(root=Path(args.root), overrides=overrides)
        runner = Runner(config=config)
        outcome = runner.run(command, force=args.force, dry_run=args.dry_run)
    except SpawnFailureError as exc:
        _report(exc)
        return EXIT_SPAWN_FAILED
    except MayberunError as exc:
        _report(exc)
        return EXIT_TOOL_ERROR

    for warning in outcome.warnings:
        print(f"mayberun: warning: {warning}", file=sys.stderr)
    if args.dry_run:
        payload = _dry_run_payload(outcome, config.to_public_dict(), force=args.force)
        print(json.dumps(payload, sort_keys=True))
        return 0
    return exit_status(outcome.exit_code)


def exit_status(returncode: int | None) -> int:
    """Map a child return code to this process's exit status."""
    if returncode is None:
        return 0
    if returncode < 0:
        return 128 - returncode
    return returncode


def _report(exc: MayberunError) -> None:
    print(f"mayberun: {exc.code}: {exc.message}", file=sys.stderr)
    for note in getattr(exc, "__notes__", ()):
        print(f"mayberun: warning: {note}", file=sys.stderr)


def _dry_run_payload(
    outcome: RunOutcome, config: dict[str, object], force: bool
) -> dict[str, object]:
    return {
        "decision": "run" if force or outcome.should_run else "skip",
        "input": outcome.input_result.value if outcome.input_result else None,
        "output": outcome.output_result.value if outcome.output_result else None,
        "config": config,
    }

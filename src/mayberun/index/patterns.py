"""Glob pattern parsing and deterministic resolution into file snapshots."""

from __future__ import annotations

import fnmatch
import os
import re
from collections.abc import Collection
from pathlib import Path
from typing import Final

from mayberun.errors import InvalidPatternError, TraversalError
from mayberun.index.models import Snapshot

RECURSIVE_WILDCARD: Final[str] = "**"
WINDOWS_ABSOLUTE_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[a-zA-Z]:/")
_MAGIC_CHARS: Final[frozenset[str]] = frozenset("*?[")


def parse_pattern(pattern: str) -> tuple[str, ...]:
    """Split a glob into validated path components."""
    normalized = pattern.replace("\\", "/")
    if not normalized.strip():
        raise InvalidPatternError("Pattern is empty.")
    if normalized.startswith("/") or WINDOWS_ABSOLUTE_PATTERN.match(normalized):
        raise InvalidPatternError(f"Pattern '{pattern}' must be relative to the root.")

    segments = tuple(part for part in normalized.split("/") if part not in ("", "."))
    if not segments:
        raise InvalidPatternError(f"Pattern '{pattern}' does not select any path.")
    for segment in segments:
        if segment == "..":
            raise InvalidPatternError(f"Pattern '{pattern}' escapes the root with '..'.")
        if RECURSIVE_WILDCARD in segment and segment != RECURSIVE_WILDCARD:
            raise InvalidPatternError(
                f"Pattern '{pattern}': recursive wildcards must form a single path component."
            )
        _validate_character_classes(pattern, segment)
    return segments


def resolve_pattern(
    root: Path,
    pattern: str,
    excluded_paths: Collection[str] = (),
) -> Snapshot:
    """Resolve a glob against root into root-relative POSIX file paths."""
    segments = parse_pattern(pattern)
    resolved_root = root.resolve()
    if not resolved_root.is_dir():
        raise TraversalError(f"Root '{root}' is not a directory.", path=root)

    found: set[str] = set()
    _match(resolved_root, "", segments, found)
    return frozenset(path for path in found if path not in excluded_paths)


def is_magic(segment: str) -> bool:
    """Return True when a component contains wildcard syntax."""
    return any(char in _MAGIC_CHARS for char in segment)


def _validate_character_classes(pattern: str, segment: str) -> None:
    index = 0
    while index < len(segment):
        if segment[index] != "[":
            index += 1
            continue
        cursor = index + 1
        if cursor < len(segment) and segment[cursor] == "!":
            cursor += 1
        # A ']' directly after the opening bracket is a literal member.
        if cursor < len(segment) and segment[cursor] == "]":
            cursor += 1
        closing = segment.find("]", cursor)
        if closing == -1:
            raise InvalidPatternError(
                f"Pattern '{pattern}': unclosed character class in '{segment}'."
            )
        index = closing + 1


def _join(prefix: str, name: str) -> str:
    return f"{prefix}/{name}" if prefix else name


def _match(directory: Path, prefix: str, segments: tuple[str, ...], found: set[str]) -> None:
    if not segments:
        return
    head, rest = segments[0], segments[1:]

    if head == RECURSIVE_WILDCARD:
        if not rest:
            _collect_all(directory, prefix, found)
            return
        _match(directory, prefix, rest, found)
        for entry in _scan(directory, prefix):
            if entry.is_dir(follow_symlinks=False):
                _match(Path(entry.path), _join(prefix, entry.name), segments, found)
        return

    if not is_magic(head):
        _match_literal(directory / head, _join(prefix, head), rest, found)
        return

    for entry in _scan(directory, prefix):
        if not fnmatch.fnmatchcase(entry.name, head):
            continue
        relative = _join(prefix, entry.name)
        if rest:
            if entry.is_dir():
                _match(Path(entry.path), relative, rest, found)
            continue
        _add_file(Path(entry.path), relative, found)


def _match_literal(candidate: Path, relative: str, rest: tuple[str, ...], found: set[str]) -> None:
    if rest:
        if candidate.is_dir():
            _match(candidate, relative, rest, found)
        return
    if candidate.is_file() or candidate.is_symlink():
        _add_file(candidate, relative, found)


def _collect_all(directory: Path, prefix: str, found: set[str]) -> None:
    for entry in _scan(directory, prefix):
        relative = _join(prefix, entry.name)
        if entry.is_dir(follow_symlinks=False):
            _collect_all(Path(entry.path), relative, found)
            continue
        _add_file(Path(entry.path), relative, found)


def _add_file(path: Path, relative: str, found: set[str]) -> None:
    if path.is_symlink() and not path.exists():
        raise TraversalError(f"Broken symbolic link '{relative}'.", path=path)
    if path.is_file():
        found.add(relative)


def _scan(directory: Path, prefix: str) -> list[os.DirEntry[str]]:
    try:
        with os.scandir(directory) as entries:
            return sorted(entries, key=lambda item: item.name)
    except OSError as exc:
        label = prefix or "."
        raise TraversalError(
            f"Cannot list directory '{label}': {exc.strerror or exc}", path=directory
        ) from exc

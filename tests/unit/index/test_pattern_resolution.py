from __future__ import annotations

from pathlib import Path

from mayberun.index import resolve_pattern


def _write(root: Path, relative: str, text: str = "x\n") -> None:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def test_recursive_wildcard_matches_root_and_nested_files(tmp_path: Path) -> None:
    _write(tmp_path, "top.txt")
    _write(tmp_path, "a/mid.txt")
    _write(tmp_path, "a/b/deep.txt")
    _write(tmp_path, "a/b/skip.md")

    snapshot = resolve_pattern(tmp_path, "**/*.txt")

    assert snapshot == frozenset({"top.txt", "a/mid.txt", "a/b/deep.txt"})


def test_single_star_does_not_cross_directories(tmp_path: Path) -> None:
    _write(tmp_path, "top.txt")
    _write(tmp_path, "a/mid.txt")

    assert resolve_pattern(tmp_path, "*.txt") == frozenset({"top.txt"})


def test_literal_directory_prefix_and_character_class(tmp_path: Path) -> None:
    _write(tmp_path, "src/a1.c")
    _write(tmp_path, "src/a2.c")
    _write(tmp_path, "src/b1.c")
    _write(tmp_path, "lib/a1.c")

    assert resolve_pattern(tmp_path, "src/[a]?.c") == frozenset({"src/a1.c", "src/a2.c"})
    assert resolve_pattern(tmp_path, "src/[!a]*.c") == frozenset({"src/b1.c"})


def test_trailing_recursive_wildcard_collects_every_file(tmp_path: Path) -> None:
    _write(tmp_path, "out/a.o")
    _write(tmp_path, "out/sub/b.o")
    (tmp_path / "out" / "empty").mkdir()

    assert resolve_pattern(tmp_path, "out/**") == frozenset({"out/a.o", "out/sub/b.o"})


def test_directories_are_never_members(tmp_path: Path) -> None:
    (tmp_path / "dir.txt").mkdir()
    _write(tmp_path, "file.txt")

    assert resolve_pattern(tmp_path, "*.txt") == frozenset({"file.txt"})


def test_hidden_files_match_wildcards(tmp_path: Path) -> None:
    _write(tmp_path, ".env.txt")

    assert resolve_pattern(tmp_path, "*.txt") == frozenset({".env.txt"})


def test_backslash_and_dot_prefixed_patterns_are_equivalent(tmp_path: Path) -> None:
    _write(tmp_path, "src/main.py")

    expected = frozenset({"src/main.py"})
    assert resolve_pattern(tmp_path, r"src\*.py") == expected
    assert resolve_pattern(tmp_path, "./src/*.py") == expected
    assert resolve_pattern(tmp_path, "src/main.py") == expected


def test_missing_literal_path_resolves_to_empty_set(tmp_path: Path) -> None:
    assert resolve_pattern(tmp_path, "nowhere/*.txt") == frozenset()
    assert resolve_pattern(tmp_path, "absent.txt") == frozenset()


def test_excluded_paths_are_filtered(tmp_path: Path) -> None:
    _write(tmp_path, ".mayberun", "{}")
    _write(tmp_path, "keep.txt")

    snapshot = resolve_pattern(tmp_path, "**/*", excluded_paths={".mayberun"})

    assert snapshot == frozenset({"keep.txt"})


def test_resolution_is_deterministic_and_root_independent(tmp_path: Path, monkeypatch) -> None:
    _write(tmp_path, "a/one.txt")
    _write(tmp_path, "b/two.txt")

    first = resolve_pattern(tmp_path, "**/*.txt")
    monkeypatch.chdir(tmp_path)
    second = resolve_pattern(Path("."), "**/*.txt")

    assert first == second == frozenset({"a/one.txt", "b/two.txt"})

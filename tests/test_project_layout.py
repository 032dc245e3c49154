from __future__ import annotations

from pathlib import Path


def test_required_package_paths_exist() -> None:
    root = Path(__file__).resolve().parents[1]
    required = [
        "src/mayberun/__init__.py",
        "src/mayberun/__main__.py",
        "src/mayberun/cli.py",
        "src/mayberun/config.py",
        "src/mayberun/errors.py",
        "src/mayberun/runner.py",
        "src/mayberun/index/__init__.py",
        "src/mayberun/logging/__init__.py",
    ]
    for rel in required:
        assert (root / rel).exists(), rel

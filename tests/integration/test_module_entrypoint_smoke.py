from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parents[2] / "src"


def _run(root: Path, *args: str) -> subprocess.CompletedProcess[str]:
    env = dict(os.environ)
    env.pop("IN", None)
    env.pop("OUT", None)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(SRC_DIR), env.get("PYTHONPATH")]))
    return subprocess.run(
        [sys.executable, "-m", "mayberun", "--root", str(root), *args],
        capture_output=True,
        text=True,
        env=env,
        check=False,
    )


def test_python_dash_m_runs_then_skips(tmp_path: Path) -> None:
    (tmp_path / "src.txt").write_text("content", encoding="utf-8")
    command = [sys.executable, "-c", "print('ran')"]

    first = _run(tmp_path, "--in", "*.txt", "--out", "*.txt", "--", *command)
    second = _run(tmp_path, "--in", "*.txt", "--out", "*.txt", "--", *command)

    assert first.returncode == 0
    assert first.stdout.strip() == "ran"
    assert second.returncode == 0
    assert second.stdout == ""
    assert (tmp_path / ".mayberun").exists()

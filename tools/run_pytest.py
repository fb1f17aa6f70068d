"""Run the test suite with the project's virtual environment interpreter when one exists."""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

VENV_DIRS = (".venv", "venv")


def _venv_python(root: Path) -> Path | None:
    scripts_dir = "Scripts" if os.name == "nt" else "bin"
    executable = "python.exe" if os.name == "nt" else "python"
    for name in VENV_DIRS:
        candidate = root / name / scripts_dir / executable
        if candidate.exists():
            return candidate
    return None


def main(argv: list[str] | None = None) -> int:
    argv = [] if argv is None else argv
    root = Path(__file__).resolve().parents[1]
    python = str(_venv_python(root) or sys.executable)

    cmd = [python, "-m", "pytest", "-q", *(argv or ["tests"])]
    return subprocess.call(cmd, cwd=root)


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))

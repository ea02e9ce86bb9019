#!/usr/bin/env python3
"""Launch the Finance Tracker Streamlit app.

Streamlit runs with the finance_tracker directory as the app root so the
pages/ subdirectory is discovered.  ``--db-path`` points the app at another
database file by setting FINTRACK_DB_PATH for the Streamlit process.
"""

from __future__ import annotations

import argparse
import os
import subprocess
import sys
from pathlib import Path
from typing import Dict, List, Mapping, Optional

PROJECT_ROOT = Path(__file__).parent.resolve()
APP_DIR = PROJECT_ROOT / "finance_tracker"


def build_command(port: Optional[int] = None) -> List[str]:
    command = [sys.executable, "-m", "streamlit", "run", "Home.py"]
    if port is not None:
        command += ["--server.port", str(port)]
    return command


def build_env(db_path: Optional[str] = None, base: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Environment for the Streamlit process.

    The project root is prepended to PYTHONPATH so pages can import the
    package, and ``db_path`` (resolved to an absolute path, since Streamlit
    runs from APP_DIR) overrides FINTRACK_DB_PATH.
    """
    env = dict(os.environ if base is None else base)
    existing = env.get("PYTHONPATH")
    env["PYTHONPATH"] = os.pathsep.join([str(PROJECT_ROOT), existing]) if existing else str(PROJECT_ROOT)
    if db_path:
        env["FINTRACK_DB_PATH"] = str(Path(db_path).resolve())
    return env


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Run the Finance Tracker dashboard.")
    parser.add_argument("--port", type=int, help="Port for the Streamlit server")
    parser.add_argument("--db-path", help="SQLite database file to use")
    args = parser.parse_args(argv)

    result = subprocess.run(build_command(args.port), cwd=APP_DIR, env=build_env(args.db_path))
    return result.returncode


if __name__ == "__main__":
    sys.exit(main())

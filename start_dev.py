"""Convenience launcher for the NetDrive development server.

Usage:
    python3 start_dev.py                 # JSON metadata + blobs on disk
    python3 start_dev.py --database      # SQLite tables under backend/data

Press Ctrl+C to stop. Uses backend/.venv when present and runs Uvicorn
with --reload from the backend directory.
"""

from __future__ import annotations

import argparse
import os
import signal
import subprocess
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent
BACKEND_DIR = ROOT_DIR / "backend"

BACKEND_VENV = BACKEND_DIR / (
    ".venv\\Scripts\\python.exe" if os.name == "nt" else ".venv/bin/python"
)

CYAN = "\033[36m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
RED = "\033[31m"
RESET = "\033[0m"


def log(level: str, msg: str) -> None:
    colors = {"info": CYAN, "start": GREEN, "stop": YELLOW, "error": RED}
    color = colors.get(level, "")
    print(f"{color}[{level}]{RESET} {msg}")


def resolve_backend_python() -> str:
    """Prefer the backend venv, fall back to the running interpreter."""
    if BACKEND_VENV.exists():
        return str(BACKEND_VENV)
    log("info", "No venv found — using system Python")
    return sys.executable


def check_dependencies(python: str) -> bool:
    result = subprocess.run(
        [python, "-c", "import fastapi, uvicorn, aiofiles, sqlalchemy"],
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        log("error", "Missing dependencies. Run:")
        log("error", f"  cd {ROOT_DIR} && pip install -e '.[test]'")
        return False
    return True


def main() -> int:
    parser = argparse.ArgumentParser(description="Run the NetDrive dev server")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--database", action="store_true", help="use the SQL storage backend")
    args = parser.parse_args()

    backend_python = resolve_backend_python()
    log("info", f"Python: {backend_python}")

    if not check_dependencies(backend_python):
        return 1

    env = dict(os.environ)
    env.setdefault("NETDRIVE_DEBUG", "true")
    env.setdefault("NETDRIVE_LOG_LEVEL", "INFO")
    if args.database:
        env["NETDRIVE_STORAGE_BACKEND"] = "database"
        env.setdefault(
            "NETDRIVE_DATABASE_URL",
            f"sqlite+aiosqlite:///{BACKEND_DIR / 'data' / 'netdrive.db'}",
        )
        (BACKEND_DIR / "data").mkdir(parents=True, exist_ok=True)

    cmd = [
        backend_python, "-m", "uvicorn", "netdrive.main:app",
        "--reload", "--host", "0.0.0.0", "--port", str(args.port),
    ]
    log("start", " ".join(cmd))
    proc = subprocess.Popen(cmd, cwd=BACKEND_DIR, env=env, start_new_session=os.name != "nt")

    log("info", f"  API:     http://localhost:{args.port}/api/files")
    log("info", f"  Docs:    http://localhost:{args.port}/docs")
    log("info", "Press Ctrl+C to stop")

    try:
        return proc.wait() or 0
    except KeyboardInterrupt:
        print()
        log("stop", "Ctrl+C received, shutting down...")
        if os.name != "nt":
            try:
                os.killpg(os.getpgid(proc.pid), signal.SIGTERM)
            except ProcessLookupError:
                pass
        else:
            proc.terminate()
        proc.wait(timeout=10)
        return 0


if __name__ == "__main__":
    raise SystemExit(main())

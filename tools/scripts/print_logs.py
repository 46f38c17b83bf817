#!/usr/bin/env python3
"""
Print the tail of the latest MapTracker session log.

- Locates the logs directory next to config.ini (or the one given by --config).
- Uses MT_LOG_SESSION_DIR when set, otherwise the newest session-* directory.
- Optionally keeps only lines containing a substring, e.g. a logger name.

Usage:
  python tools/scripts/print_logs.py --tail 200
  python tools/scripts/print_logs.py --grep navigation.controller --tail 500
  python tools/scripts/print_logs.py --list
"""
from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import List, Optional

PROJECT_ROOT = Path(__file__).resolve().parents[2]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from maptracker.core.config import ConfigManager  # noqa: E402
from maptracker.core.logging_setup import get_log_dir  # noqa: E402


def list_sessions(log_dir: Path) -> List[Path]:
    """Session directories, newest first."""
    if not log_dir.is_dir():
        return []
    sessions = [p for p in log_dir.iterdir() if p.is_dir() and p.name.startswith("session-")]
    sessions.sort(key=lambda p: p.stat().st_mtime, reverse=True)
    return sessions


def read_tail(path: Path, n: int, needle: str = "") -> List[str]:
    with path.open("r", encoding="utf-8", errors="replace") as fh:
        lines = fh.readlines()
    if needle:
        lines = [ln for ln in lines if needle in ln]
    return lines[-n:]


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Show the newest maptracker session log")
    ap.add_argument("--config", help="config.ini whose logs/ directory to read")
    ap.add_argument("--tail", type=int, default=200, help="lines to print from the end")
    ap.add_argument("--grep", default="", help="only lines containing this text")
    ap.add_argument("--list", action="store_true", help="list sessions and exit")
    args = ap.parse_args(argv)

    log_dir = get_log_dir(ConfigManager(args.config))
    sessions = list_sessions(log_dir)

    if args.list:
        for s in sessions:
            print(s.name)
        return 0

    session_env = os.environ.get("MT_LOG_SESSION_DIR", "").strip()
    session_dir = Path(session_env) if session_env else (sessions[0] if sessions else None)
    if session_dir is None:
        print(f"No log sessions found under: {log_dir}")
        return 2

    log_file = session_dir / "maptracker.log"
    if not log_file.exists():
        print(f"Log file not found: {log_file}")
        return 2

    lines = read_tail(log_file, max(1, args.tail), args.grep)
    print(f"Session: {session_dir}")
    suffix = f" | grep '{args.grep}'" if args.grep else ""
    print(f"--- tail{suffix} (last {len(lines)} lines) ---")
    sys.stdout.writelines(lines)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

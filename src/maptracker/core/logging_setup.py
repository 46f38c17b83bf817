"""Session-based logging for MapTracker.

Every process run gets its own directory next to config.ini:

    logs/session-YYYYmmdd_HHMMSS/
        maptracker.log      full log at the configured level
        session_info.txt    host, interpreter and the settings the run used
        artifacts/          debug frames saved on failures

Only the newest sessions are kept. The active session path is published in
MT_LOG_SESSION_DIR so helpers (and tools/scripts/print_logs.py) can find it.
"""
from __future__ import annotations

import logging
import os
import platform
import shutil
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

SESSION_ENV = "MT_LOG_SESSION_DIR"
SESSION_PREFIX = "session-"
KEEP_SESSIONS = 3
LOG_FILE_NAME = "maptracker.log"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Settings echoed into session_info.txt
_INFO_KEYS = (
    "log_level", "dry_run", "maps_dir", "pointer_template", "precision",
    "map_scale", "search_radius", "minimap_center", "capture_region",
    "infer_interval_ms",
)


def resolve_level(value: Union[str, int, None], default: int = logging.INFO) -> int:
    """Turn "debug", "WARN", 10 or None into a logging level number."""
    if isinstance(value, int):
        return value
    name = str(value or "").strip().upper()
    if name == "WARN":
        name = "WARNING"
    level = getattr(logging, name, None) if name else None
    return level if isinstance(level, int) else default


def _config_dir(config_manager) -> Path:
    return Path(config_manager.config_path).parent


def get_log_dir(config_manager) -> Path:
    """logs/ next to config.ini, created on demand."""
    path = _config_dir(config_manager) / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_artifacts_dir(config_manager, name: str = "artifacts") -> Path:
    """Directory for debug artifacts, inside the active session when there is one."""
    session = os.environ.get(SESSION_ENV, "").strip()
    base = Path(session) if session else _config_dir(config_manager)
    path = base / name
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_session_dir(config_manager) -> Path:
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    path = get_log_dir(config_manager) / f"{SESSION_PREFIX}{stamp}"
    path.mkdir(parents=True, exist_ok=True)
    return path


def prune_old_sessions(log_dir: Path, keep: int = KEEP_SESSIONS) -> None:
    """Delete all but the `keep` most recently modified session directories."""
    try:
        sessions = sorted(
            (p for p in log_dir.iterdir() if p.is_dir() and p.name.startswith(SESSION_PREFIX)),
            key=lambda p: p.stat().st_mtime,
            reverse=True,
        )
    except OSError:
        logging.getLogger(__name__).debug("logging: cannot list %s", log_dir, exc_info=True)
        return
    for stale in sessions[keep:]:
        shutil.rmtree(stale, ignore_errors=True)


def _write_session_info(session_dir: Path, config_manager) -> None:
    lines = [
        f"started: {datetime.now().isoformat(timespec='seconds')}",
        f"host: {platform.node()} ({platform.system()} {platform.release()})",
        f"python: {sys.version.split()[0]} ({sys.executable})",
        f"config: {config_manager.config_path}",
    ]
    lines += [f"{key}: {config_manager.get(key)}" for key in _INFO_KEYS]
    try:
        (session_dir / "session_info.txt").write_text("\n".join(lines) + "\n", encoding="utf-8")
    except OSError:
        logging.getLogger(__name__).debug("logging: session_info.txt not written", exc_info=True)


def setup_logging(config_manager, level: Optional[Union[str, int]] = None) -> Path:
    """Attach a session file handler and a console handler to the root logger.

    The level comes from `level` when given, else DEFAULT.log_level. The
    console never goes below INFO. Returns the new session directory.
    """
    lvl = resolve_level(level if level is not None else config_manager.get("log_level"))

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(lvl)
    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    session_dir = get_session_dir(config_manager)
    os.environ[SESSION_ENV] = str(session_dir)
    log_file = session_dir / LOG_FILE_NAME

    file_handler = logging.FileHandler(log_file, encoding="utf-8", delay=True)
    file_handler.setLevel(lvl)
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    console = logging.StreamHandler()
    console.setLevel(max(lvl, logging.INFO))
    console.setFormatter(formatter)
    root.addHandler(console)

    prune_old_sessions(session_dir.parent)
    _write_session_info(session_dir, config_manager)

    if lvl > logging.DEBUG:
        logging.getLogger("cv2").setLevel(logging.WARNING)

    root.info("Logging initialized: level=%s, file=%s", logging.getLevelName(lvl), log_file)
    return session_dir

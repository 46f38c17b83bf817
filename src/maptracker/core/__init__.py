"""Core subpackage.

- config: INI-backed ConfigManager with env overrides
- logging_setup: session-based logging configuration
"""
from .config import ConfigManager
from .logging_setup import setup_logging, get_log_dir, get_artifacts_dir

__all__ = [
    "ConfigManager",
    "setup_logging",
    "get_log_dir",
    "get_artifacts_dir",
]

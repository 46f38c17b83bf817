"""INI-backed configuration for MapTracker.

ConfigManager reads and persists key/value settings in config.ini: asset
paths, recognizer geometry, capture region and loop timing. Typed getters
parse the string values; environment variables can override most keys.
"""

import os
from configparser import ConfigParser
from pathlib import Path
from typing import Dict, Optional, Tuple


DEFAULTS: Dict[str, str] = {
    "log_level": "INFO",
    "dry_run": "False",
    # Recognition assets
    "maps_dir": "",
    "pointer_template": "",
    "precision": "0.6",
    "map_scale": "1.0",
    "search_radius": "160",
    # Minimap geometry in work-area pixels: cx,cy and radius
    "minimap_center": "108,110",
    "minimap_radius": "50",
    "pointer_radius": "10",
    # Capture region "left,top,width,height"; empty means primary monitor
    "capture_region": "",
    # Navigation loop
    "infer_interval_ms": "200",
    "work_resolution": "1280x720",
}


# Keys read from config.ini only, never from the environment
PINNED_KEYS = frozenset({"work_resolution"})


def default_config_path() -> Path:
    """%APPDATA%/MapTracker/config.ini on Windows, XDG config dir elsewhere."""
    if os.name == "nt":
        base = Path(os.getenv("APPDATA", Path.home() / "AppData" / "Roaming"))
        return base / "MapTracker" / "config.ini"
    base = Path(os.getenv("XDG_CONFIG_HOME", Path.home() / ".config"))
    return base / "maptracker" / "config.ini"


class ConfigManager:
    """Settings from one INI file, looked up in its DEFAULT section.

    A missing file is created with DEFAULTS, and keys added in newer
    versions are appended to existing files. The optional [messages]
    section carries notification template overrides.
    """

    def __init__(self, config_path: Optional[str] = None) -> None:
        self.config_path = Path(config_path) if config_path else default_config_path()
        self.config = ConfigParser(interpolation=None)
        self.load()

    def load(self) -> None:
        existed = self.config_path.exists()
        if existed:
            self.config.read(self.config_path, encoding="utf-8")

        section = self.config["DEFAULT"]
        missing = [key for key in DEFAULTS if key not in section]
        for key in missing:
            section[key] = DEFAULTS[key]

        # Write back so users can discover every knob
        if not existed or missing:
            self.save()

    def get(self, key: str, fallback=None):
        """Return MT_<KEY> or <KEY> from the environment, else the file value.

        Keys in PINNED_KEYS skip the environment.
        """
        name = str(key)
        if name.lower() not in PINNED_KEYS:
            for env_key in (f"MT_{name.upper()}", name.upper()):
                val = os.environ.get(env_key)
                if val:
                    return val
        return self.config["DEFAULT"].get(key, fallback)

    def get_int(self, key: str, fallback: int = 0) -> int:
        try:
            return int(float(self.get(key, fallback)))
        except (TypeError, ValueError):
            return fallback

    def get_float(self, key: str, fallback: float = 0.0) -> float:
        try:
            return float(self.get(key, fallback))
        except (TypeError, ValueError):
            return fallback

    def get_bool(self, key: str, fallback: bool = False) -> bool:
        val = self.get(key)
        if val is None or str(val).strip() == "":
            return fallback
        return str(val).strip().lower() in ("1", "true", "yes", "on")

    def get_tuple(self, key: str, fallback: Tuple[int, ...] = ()) -> Tuple[int, ...]:
        """Parse "a,b,c" or "WxH" into a tuple of ints."""
        raw = str(self.get(key, "") or "").strip()
        if not raw:
            return fallback
        try:
            parts = raw.replace("x", ",").split(",")
            return tuple(int(p.strip()) for p in parts)
        except ValueError:
            return fallback

    def messages(self) -> Dict[str, str]:
        """Return the [messages] section (notification template overrides)."""
        if not self.config.has_section("messages"):
            return {}
        # Exclude DEFAULT keys that ConfigParser mixes into every section
        return {
            k: v for k, v in self.config.items("messages")
            if k not in self.config["DEFAULT"]
        }

    def save(self) -> None:
        """Persist current configuration to disk (creates parent directories)."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with self.config_path.open("w", encoding="utf-8") as fh:
            self.config.write(fh)

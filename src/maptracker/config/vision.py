"""
Vision configuration knobs centralization.

Matcher parallelism, search strides, recognizer geometry and thresholds live
here. Matchers and the recognizer import from this module instead of
hardcoding values.
"""
from __future__ import annotations

import os


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, "") or default)
    except ValueError:
        return default


# Coarse search parallelism and stride
MATCH_WORKERS: int = max(1, _env_int("MT_MATCH_WORKERS", 6))
MATCH_STEP: int = max(1, _env_int("MT_MATCH_STEP", 3))

# Regions whose deviation falls below this are treated as flat (score 0.0)
NCC_EPSILON: float = 1e-6

# Recognition
RECOGNITION_PRECISION: float = 0.6
NO_MAP_NAME: str = "None"

# Minimap geometry in work-area pixels (1280x720 reference resolution)
MINIMAP_CENTER = (108, 110)
MINIMAP_RADIUS: int = 50
POINTER_RADIUS: int = 10

# Ratio between minimap pixels and map image pixels
MAP_SCALE: float = 1.0

# Local search window around the last known position, in map pixels
SEARCH_RADIUS: int = 160

# Heading search resolution in degrees
ROTATION_STEP: int = 2

__all__ = [
    "MATCH_WORKERS",
    "MATCH_STEP",
    "NCC_EPSILON",
    "RECOGNITION_PRECISION",
    "NO_MAP_NAME",
    "MINIMAP_CENTER",
    "MINIMAP_RADIUS",
    "POINTER_RADIUS",
    "MAP_SCALE",
    "SEARCH_RADIUS",
    "ROTATION_STEP",
]

"""Navigation configuration constants.

Default thresholds, timeouts and key bindings for the navigation loop. Run
parameters that are zero or absent fall back to DEFAULT_MOVING_PARAMS.
"""
from __future__ import annotations

from typing import Dict

# Poll cadence of the navigation loop
INFER_INTERVAL_MS: int = 200

# Reference work area used for camera gestures
WORK_W: int = 1280
WORK_H: int = 720

# Key bindings (pydirectinput key names)
KEY_FORWARD: str = "w"
KEY_JUMP: str = "space"
KEY_SPRINT: str = "shift"
KEY_ALT: str = "alt"

# Settle delays in milliseconds
RELEASE_DELAY_MS: int = 100
TAP_DELAY_MS: int = 100
ROTATE_SWIPE_MS: int = 100
ROTATE_DELAY_MS: int = 100

DEFAULT_MOVING_PARAMS: Dict[str, float] = {
    "arrival_threshold": 4.0,
    "arrival_timeout": 60000,  # ms per waypoint
    "rotation_lower_threshold": 6.0,  # deg
    "rotation_upper_threshold": 60.0,  # deg
    "rotation_speed": 2.0,
    "rotation_timeout": 30000,  # ms
    "sprint_threshold": 25.0,
    "stuck_threshold": 1500,  # ms
    "stuck_timeout": 10000,  # ms
}

# Fields holding angles in degrees, bounded to [0, 180]
ANGLE_FIELDS = ("rotation_lower_threshold", "rotation_upper_threshold")

# Fields holding durations in milliseconds (stored as int)
DURATION_FIELDS = ("arrival_timeout", "rotation_timeout", "stuck_threshold", "stuck_timeout")

__all__ = [
    "INFER_INTERVAL_MS",
    "WORK_W",
    "WORK_H",
    "KEY_FORWARD",
    "KEY_JUMP",
    "KEY_SPRINT",
    "KEY_ALT",
    "RELEASE_DELAY_MS",
    "TAP_DELAY_MS",
    "ROTATE_SWIPE_MS",
    "ROTATE_DELAY_MS",
    "DEFAULT_MOVING_PARAMS",
    "ANGLE_FIELDS",
    "DURATION_FIELDS",
]

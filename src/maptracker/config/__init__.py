"""Config subpackage.

- vision: matcher parallelism, strides and recognizer geometry
- navigation: default navigation parameters, key bindings and delays
"""
from .vision import (
    MATCH_WORKERS,
    MATCH_STEP,
    NCC_EPSILON,
    RECOGNITION_PRECISION,
    NO_MAP_NAME,
)
from .navigation import (
    INFER_INTERVAL_MS,
    DEFAULT_MOVING_PARAMS,
    KEY_FORWARD,
    KEY_JUMP,
    KEY_SPRINT,
)

__all__ = [
    "MATCH_WORKERS",
    "MATCH_STEP",
    "NCC_EPSILON",
    "RECOGNITION_PRECISION",
    "NO_MAP_NAME",
    "INFER_INTERVAL_MS",
    "DEFAULT_MOVING_PARAMS",
    "KEY_FORWARD",
    "KEY_JUMP",
    "KEY_SPRINT",
]

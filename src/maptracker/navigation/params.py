"""Run parameters: parsing, validation and defaults.

A run is described by a map name, an ordered non-empty path of [x, y]
waypoints and optional thresholds/timeouts. Zero or absent numeric fields
take the documented defaults from config.navigation; negative values, and
angles outside [0, 180], are rejected before anything moves.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Tuple, Union
import json
import logging
import math

from ..config.navigation import ANGLE_FIELDS, DEFAULT_MOVING_PARAMS, DURATION_FIELDS
from ..core.errors import ParamValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Waypoint:
    x: int
    y: int


@dataclass(frozen=True)
class NavigationParams:
    """Validated, defaulted parameters for one navigation run.

    Distances are in map pixels, angles in degrees and durations in
    milliseconds.
    """

    map_name: str
    path: Tuple[Waypoint, ...]
    arrival_threshold: float = DEFAULT_MOVING_PARAMS["arrival_threshold"]
    arrival_timeout: int = int(DEFAULT_MOVING_PARAMS["arrival_timeout"])
    rotation_lower_threshold: float = DEFAULT_MOVING_PARAMS["rotation_lower_threshold"]
    rotation_upper_threshold: float = DEFAULT_MOVING_PARAMS["rotation_upper_threshold"]
    rotation_speed: float = DEFAULT_MOVING_PARAMS["rotation_speed"]
    rotation_timeout: int = int(DEFAULT_MOVING_PARAMS["rotation_timeout"])
    sprint_threshold: float = DEFAULT_MOVING_PARAMS["sprint_threshold"]
    stuck_threshold: int = int(DEFAULT_MOVING_PARAMS["stuck_threshold"])
    stuck_timeout: int = int(DEFAULT_MOVING_PARAMS["stuck_timeout"])


def _coordinate(i: int, raw: Any, pair: Any) -> int:
    # bool is an int subclass but never a coordinate
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise ParamValidationError(f"path[{i}] coordinates must be integers, got {pair!r}")
    if isinstance(raw, float):
        if not math.isfinite(raw) or not raw.is_integer():
            raise ParamValidationError(f"path[{i}] coordinates must be integers, got {pair!r}")
        return int(raw)
    return raw


def _parse_waypoint(i: int, raw: Any) -> Waypoint:
    if isinstance(raw, Mapping):
        raw = [raw.get("x"), raw.get("y")]
    if not isinstance(raw, (list, tuple)) or len(raw) != 2:
        raise ParamValidationError(f"path[{i}] must be an [x, y] pair, got {raw!r}")
    return Waypoint(_coordinate(i, raw[0], raw), _coordinate(i, raw[1], raw))


def _numeric(name: str, raw: Any) -> float:
    if raw is None:
        return 0.0
    if isinstance(raw, bool):
        raise ParamValidationError(f"{name} must be a number, got {raw!r}")
    try:
        val = float(raw)
    except (TypeError, ValueError) as e:
        raise ParamValidationError(f"{name} must be a number, got {raw!r}") from e
    if not math.isfinite(val):
        raise ParamValidationError(f"{name} must be finite, got {raw!r}")
    return val


def parse_params(raw: Union[str, bytes, Mapping[str, Any]]) -> NavigationParams:
    """Parse JSON text or a mapping into NavigationParams.

    Raises:
        ParamValidationError: on malformed JSON, missing map_name/path, or
            out-of-range numeric fields.
    """
    logger.debug("Parsing and validating parameters")
    if isinstance(raw, (str, bytes)):
        try:
            data = json.loads(raw)
        except ValueError as e:
            raise ParamValidationError(f"failed to parse parameters: {e}") from e
    else:
        data = raw
    if not isinstance(data, Mapping):
        raise ParamValidationError("parameters must be a JSON object")

    map_name = data.get("map_name")
    if not isinstance(map_name, str) or not map_name:
        raise ParamValidationError("map_name is required in parameters, got empty")
    path = data.get("path")
    if not isinstance(path, (list, tuple)) or len(path) == 0:
        raise ParamValidationError("path is required in parameters, got empty")
    waypoints = tuple(_parse_waypoint(i, p) for i, p in enumerate(path))

    values = {}
    for name, default in DEFAULT_MOVING_PARAMS.items():
        val = _numeric(name, data.get(name))
        if val < 0:
            raise ParamValidationError(f"{name} must be non-negative")
        if name in ANGLE_FIELDS and val > 180:
            raise ParamValidationError(f"{name} must be between 0 and 180 degrees")
        if val == 0:
            val = default
        values[name] = int(val) if name in DURATION_FIELDS else float(val)

    return NavigationParams(map_name=map_name, path=waypoints, **values)

"""Navigation feature package.

Usage:
    from maptracker.navigation import NavigationController, parse_params

    params = parse_params(raw_json)
    result = NavigationController(localizer, actions, notifier).run(params)
    if not result.ok:
        ...
"""
from .actions import ActionWrapper
from .controller import (
    NavigationController,
    NavigationResult,
    NavigationSession,
    NavigationState,
)
from .geometry import calc_delta_rotation, calc_target_rotation
from .messages import MessageTemplates, Notifier
from .params import NavigationParams, Waypoint, parse_params

__all__ = [
    "ActionWrapper",
    "NavigationController",
    "NavigationResult",
    "NavigationSession",
    "NavigationState",
    "calc_delta_rotation",
    "calc_target_rotation",
    "MessageTemplates",
    "Notifier",
    "NavigationParams",
    "Waypoint",
    "parse_params",
]

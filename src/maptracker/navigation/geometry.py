"""Bearing and heading arithmetic on the map plane.

Map y grows downwards, so north is negative y. Angles are degrees,
clockwise-positive.
"""
from __future__ import annotations

import math


def calc_target_rotation(from_x: float, from_y: float, to_x: float, to_y: float) -> int:
    """Bearing from one point to another, 0 = north, rounded into [0, 360)."""
    dx = float(to_x - from_x)
    dy = float(to_y - from_y)
    angle_deg = math.degrees(math.atan2(dx, -dy))
    if angle_deg < 0:
        angle_deg += 360
    return int(round(angle_deg)) % 360


def calc_delta_rotation(current: float, target: float) -> float:
    """Signed minimal turn from current to target, in (-180, 180].

    current + delta is congruent to target modulo 360.
    """
    diff = (target - current) % 360
    if diff > 180:
        diff -= 360
    return diff


def distance(ax: float, ay: float, bx: float, by: float) -> float:
    return math.hypot(ax - bx, ay - by)

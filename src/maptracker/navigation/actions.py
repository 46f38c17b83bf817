"""Synchronized input commands with settle delays.

Every command blocks until the primitive returns, then sleeps its settle
delay, so commands issued by the navigation loop never overlap.
"""
from __future__ import annotations

from typing import Any, Callable
import logging
import time

from ..config.navigation import KEY_ALT, KEY_FORWARD, WORK_H, WORK_W

logger = logging.getLogger(__name__)


class ActionWrapper:
    """Actuator interface over an InputController-like object.

    Args:
        input_controller: exposes key_down/key_up/press_key/move_mouse/
            mouse_down/mouse_up.
        work_size: (width, height) of the work area; camera gestures start at
            its centre.
        sleep: injectable sleep(seconds), time.sleep by default.
    """

    def __init__(self, input_controller: Any, work_size=(WORK_W, WORK_H),
                 sleep: Callable[[float], None] = time.sleep) -> None:
        self.input = input_controller
        self.work_w, self.work_h = int(work_size[0]), int(work_size[1])
        self._sleep = sleep
        self.forward_held = False

    def _settle(self, delay_ms: int) -> None:
        if delay_ms and delay_ms > 0:
            self._sleep(delay_ms / 1000.0)

    # ---- keyboard ----
    def key_down_sync(self, key: str, delay_ms: int = 0) -> None:
        self.input.key_down(key)
        if key == KEY_FORWARD:
            self.forward_held = True
        self._settle(delay_ms)

    def key_up_sync(self, key: str, delay_ms: int = 0) -> None:
        self.input.key_up(key)
        if key == KEY_FORWARD:
            self.forward_held = False
        self._settle(delay_ms)

    def key_type_sync(self, key: str, delay_ms: int = 0) -> None:
        """Press and release a key, then wait."""
        self.input.press_key(key)
        self._settle(delay_ms)

    # ---- mouse ----
    def click_sync(self, x: int, y: int, delay_ms: int = 0) -> None:
        """Left button down at (x, y), hold for delay_ms, release."""
        self.input.move_mouse(x, y)
        self.input.mouse_down("left")
        self._settle(delay_ms)
        self.input.mouse_up("left")

    def swipe_sync(self, x: int, y: int, dx: int, dy: int, duration_ms: int = 0) -> None:
        """Hover-only drag from (x, y) to (x+dx, y+dy) over duration_ms.

        The glide itself blocks for duration_ms; no extra settle follows.
        """
        self.input.move_mouse(x, y)
        self.input.move_mouse(x + dx, y + dy, duration=max(0, duration_ms) / 1000.0)

    def rotate_camera(self, dx: int, duration_ms: int = 100, delay_ms: int = 100) -> None:
        """Turn the camera by a horizontal hover swipe of dx pixels.

        The swipe is followed by alt-down, a centre click and alt-up to
        re-anchor the cursor; each of those steps settles for delay_ms / 3.
        """
        cx, cy = self.work_w // 2, self.work_h // 2
        step_ms = delay_ms // 3
        logger.debug("actions: rotate camera dx=%d", dx)
        self.swipe_sync(cx, cy, int(dx), 0, duration_ms)
        self.key_down_sync(KEY_ALT, step_ms)
        self.click_sync(cx, cy, step_ms)
        self.key_up_sync(KEY_ALT, step_ms)

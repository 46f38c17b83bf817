"""Input injection through pydirectinput (DirectInput scan codes, Windows).

InputController is the concrete backend behind navigation.actions; DryRunInput
in io.dry_run offers the same methods without touching the system.
"""

import logging
import time

import pydirectinput

logger = logging.getLogger(__name__)

_BUTTONS = ("left", "right", "middle")


def _button(name):
    btn = str(name or "left").lower()
    if btn not in _BUTTONS:
        raise ValueError(f"unknown mouse button: {name!r}")
    return btn


class InputController:
    """Keyboard and mouse primitives.

    Args:
        move_duration: default seconds for a cursor move; 0 jumps instantly.
    """

    def __init__(self, move_duration: float = 0.0):
        # No corner failsafe and no implicit pause between calls; settle
        # delays are owned by ActionWrapper.
        pydirectinput.FAILSAFE = False
        pydirectinput.PAUSE = 0.0
        self._move_duration = float(move_duration or 0.0)

    def key_down(self, key: str):
        logger.debug("input: key down %s", key)
        pydirectinput.keyDown(key)

    def key_up(self, key: str):
        logger.debug("input: key up %s", key)
        pydirectinput.keyUp(key)

    def press_key(self, key: str, presses: int = 1, interval: float = 0.05):
        logger.debug("input: tap %s x%d", key, presses)
        pydirectinput.press(key, presses=presses, interval=interval)

    def move_mouse(self, x, y, duration: float = None):
        """Move the cursor to (x, y); a positive duration glides there."""
        target = (int(x), int(y))
        seconds = self._move_duration if duration is None else float(duration)
        started = time.perf_counter()
        if seconds > 0.0:
            pydirectinput.moveTo(*target, duration=seconds)
        else:
            pydirectinput.moveTo(*target)
        logger.debug("input: cursor at %s after %.1fms", target, (time.perf_counter() - started) * 1000.0)

    def mouse_down(self, button: str = "left"):
        btn = _button(button)
        logger.debug("input: %s button down", btn)
        pydirectinput.mouseDown(button=btn)

    def mouse_up(self, button: str = "left"):
        btn = _button(button)
        logger.debug("input: %s button up", btn)
        pydirectinput.mouseUp(button=btn)

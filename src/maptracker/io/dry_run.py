"""Dry-run input: same primitives as InputController, logged instead of sent.

Used when config.ini sets dry_run = True, and on hosts without an input
backend, to watch the navigation decisions without touching the game.
"""

import logging

logger = logging.getLogger(__name__)


class DryRunInput:
    """Logs every primitive at INFO and records it in `history`."""

    def __init__(self):
        self.history = []

    def _record(self, *event):
        self.history.append(event)
        logger.info("dry-run: %s", " ".join(str(e) for e in event))

    def key_down(self, key):
        self._record("key_down", key)

    def key_up(self, key):
        self._record("key_up", key)

    def press_key(self, key, presses=1, interval=0.05):
        self._record("press_key", key, presses)

    def move_mouse(self, x, y, duration=None):
        self._record("move_mouse", int(x), int(y))

    def mouse_down(self, button='left'):
        self._record("mouse_down", button)

    def mouse_up(self, button='left'):
        self._record("mouse_up", button)

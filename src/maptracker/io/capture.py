"""Screen capture provider backed by mss.

One mss instance is kept per thread (mss handles are not thread-safe). The
last good frame is retained so callers can dump it as a debug artifact.
"""
from __future__ import annotations

from typing import Optional
import logging
import threading
import time

import mss
from mss.exception import ScreenShotError
import numpy as np

from ..core.errors import CaptureError

logger = logging.getLogger(__name__)


class ScreenCapture:
    """Grab BGR frames of a fixed region (defaults to the primary monitor)."""

    def __init__(self, region: Optional[dict] = None) -> None:
        self._tls = threading.local()
        self.region = region
        self.last_frame: Optional[np.ndarray] = None

    def _get_sct(self, force_new: bool = False):
        sct = getattr(self._tls, "sct", None)
        if force_new or sct is None:
            if sct is not None:
                try:
                    sct.close()
                except Exception:
                    logger.debug("capture: closing stale mss handle failed", exc_info=True)
            sct = mss.mss()
            self._tls.sct = sct
        return sct

    def _resolve_region(self, sct) -> dict:
        if self.region:
            return {k: int(self.region[k]) for k in ("left", "top", "width", "height")}
        # monitors[0] is the virtual screen, [1] the primary monitor
        monitors = sct.monitors
        return dict(monitors[1] if len(monitors) > 1 else monitors[0])

    def capture(self) -> np.ndarray:
        """Return the current BGR frame; raises CaptureError on failure."""
        t0 = time.perf_counter()
        try:
            sct = self._get_sct()
            region = self._resolve_region(sct)
            try:
                grab = sct.grab(region)
            except AttributeError:
                sct = self._get_sct(force_new=True)
                grab = sct.grab(region)
            frame = np.array(grab)[:, :, :3]  # BGRA -> BGR
        except ScreenShotError as e:
            raise CaptureError(f"screen grab failed: {e}") from e
        if frame.size == 0:
            raise CaptureError("screen grab returned an empty frame")
        self.last_frame = frame
        logger.debug("capture: grab %.1fms region=%s", (time.perf_counter() - t0) * 1000.0, str(region))
        return frame

    def close(self) -> None:
        sct = getattr(self._tls, "sct", None)
        if sct is not None:
            sct.close()
            self._tls.sct = None

"""Pytest configuration.

Ensures src/ is on sys.path so tests can import `maptracker.*` without an
editable install, and provides small shared fakes.
"""

import sys
from pathlib import Path

import cv2
import numpy as np
import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))


class FakeClock:
    """Monotonic clock in seconds whose sleep() advances time instantly."""

    def __init__(self, start=1000.0):
        self.now = float(start)

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.now += max(0.0, float(seconds))


@pytest.fixture
def fake_clock():
    return FakeClock()


def smooth_noise(height, width, sigma=3.0, seed=0):
    """Blurred random BGR image stretched to the full uint8 range."""
    rng = np.random.default_rng(seed)
    noise = rng.random((height, width, 3)).astype(np.float32)
    blurred = cv2.GaussianBlur(noise, (0, 0), sigma)
    lo, hi = float(blurred.min()), float(blurred.max())
    return ((blurred - lo) / (hi - lo) * 255.0).astype(np.uint8)


@pytest.fixture
def make_smooth_noise():
    return smooth_noise

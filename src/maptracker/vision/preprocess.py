"""
Pure image preparation utilities.

Stateless helpers used by the recognizer to cut the minimap out of a frame,
bring it to map scale and build rotated pointer templates.

Logging: Functions here avoid logging for performance; callers can wrap them
and log as needed at DEBUG level.
"""
from __future__ import annotations

from typing import Tuple

import cv2
import numpy as np


def to_bgr(img: np.ndarray) -> np.ndarray:
    """Return an HxWx3 view/copy: drops alpha, expands grayscale."""
    if img.ndim == 2:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2BGR)
    if img.shape[2] == 4:
        return np.ascontiguousarray(img[:, :, :3])
    return img


def crop_bounds(shape: Tuple[int, ...], cx: int, cy: int, radius: int) -> Tuple[int, int, int, int]:
    """Return (x0, y0, x1, y1) of a square around (cx, cy) clamped to shape."""
    h, w = shape[:2]
    x0, y0 = max(0, cx - radius), max(0, cy - radius)
    x1, y1 = min(w, cx + radius + 1), min(h, cy + radius + 1)
    return x0, y0, x1, y1


def crop_area(img: np.ndarray, cx: int, cy: int, radius: int) -> np.ndarray:
    """Crop a (2*radius+1) square centred on (cx, cy), clamped to the image."""
    x0, y0, x1, y1 = crop_bounds(img.shape, cx, cy, radius)
    return img[y0:y1, x0:x1]


def scale_image(img: np.ndarray, scale: float) -> np.ndarray:
    """Bilinear resize by `scale`; identity at 1.0, clamped to at least 1x1."""
    if abs(scale - 1.0) < 1e-9:
        return img
    h, w = img.shape[:2]
    nw, nh = max(1, int(w * scale)), max(1, int(h * scale))
    return cv2.resize(img, (nw, nh), interpolation=cv2.INTER_LINEAR)


def rotate_image(img: np.ndarray, angle: float) -> np.ndarray:
    """Rotate clockwise by `angle` degrees about the centre, keeping the canvas.

    Pixels rotated in from outside the source are black.
    """
    h, w = img.shape[:2]
    # OpenCV treats positive angles as counter-clockwise
    m = cv2.getRotationMatrix2D(((w - 1) / 2.0, (h - 1) / 2.0), -float(angle), 1.0)
    return cv2.warpAffine(
        img, m, (w, h),
        flags=cv2.INTER_NEAREST,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=(0, 0, 0),
    )

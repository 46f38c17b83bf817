"""
Integral-image statistics for O(1) rectangular area queries.

The index stores, over a (H+1)x(W+1) prefix grid, the cumulative sum of the
channel-summed pixel values and the cumulative sum of per-channel squares.
The extra zero row/column lets every rectangle be resolved with the same
four-corner difference.
"""
from __future__ import annotations

from typing import Tuple

import numpy as np


class AreaStatisticsIndex:
    """Prefix sums of a single frame; read-only once built."""

    __slots__ = ("sum", "sum_sq", "width", "height")

    def __init__(self, sum_grid: np.ndarray, sum_sq_grid: np.ndarray) -> None:
        sum_grid.setflags(write=False)
        sum_sq_grid.setflags(write=False)
        self.sum = sum_grid
        self.sum_sq = sum_sq_grid
        self.height = sum_grid.shape[0] - 1
        self.width = sum_grid.shape[1] - 1

    @classmethod
    def build(cls, frame: np.ndarray) -> "AreaStatisticsIndex":
        """Build the index for an HxWxC frame (first three channels used)."""
        if frame.ndim != 3 or frame.shape[2] < 3:
            raise ValueError(f"expected an HxWx3 frame, got shape {frame.shape}")
        h, w = frame.shape[:2]
        if h < 1 or w < 1:
            raise ValueError("frame must be at least 1x1")

        px = frame[:, :, :3].astype(np.float64)
        vals = px.sum(axis=2)
        vals_sq = (px * px).sum(axis=2)

        sum_grid = np.zeros((h + 1, w + 1), dtype=np.float64)
        sum_sq_grid = np.zeros((h + 1, w + 1), dtype=np.float64)
        sum_grid[1:, 1:] = vals.cumsum(axis=0).cumsum(axis=1)
        sum_sq_grid[1:, 1:] = vals_sq.cumsum(axis=0).cumsum(axis=1)
        return cls(sum_grid, sum_sq_grid)

    def query(self, x: int, y: int, w: int, h: int) -> Tuple[float, float]:
        """Return (sum, sum_sq) over the rectangle [x, x+w) x [y, y+h)."""
        x2, y2 = x + w, y + h
        if x < 0 or y < 0 or w < 0 or h < 0 or x2 > self.width or y2 > self.height:
            raise IndexError(
                f"rectangle ({x},{y},{w},{h}) outside {self.width}x{self.height} frame"
            )
        s, sq = self.sum, self.sum_sq
        area_sum = s[y2, x2] - s[y, x2] - s[y2, x] + s[y, x]
        area_sq = sq[y2, x2] - sq[y, x2] - sq[y2, x] + sq[y, x]
        return float(area_sum), float(area_sq)

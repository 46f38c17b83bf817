"""
Normalized cross-correlation template search.

Finds the offset of a small needle inside a larger haystack by maximizing
NCC over every valid top-left offset. Region statistics come from an
AreaStatisticsIndex in O(1), so each candidate only pays for one dot product.

Search runs in two passes:
- coarse: a fixed pool of workers, each scanning an interleaved subset of rows
  at `step` stride in both axes, reporting its local best once;
- refine: every offset within step-1 of the coarse best at stride 1.

Worker results are reduced in worker order with a strictly-greater rule, so
the outcome does not depend on thread scheduling.
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional
import logging
import math
import time

import numpy as np

from ..config.vision import MATCH_STEP, MATCH_WORKERS, NCC_EPSILON
from .integral import AreaStatisticsIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchResult:
    """Top-left offset of the best match and its NCC score."""

    x: int
    y: int
    score: float


@dataclass(frozen=True)
class NeedleStats:
    """Mean and root sum of squared deviations of a needle's samples."""

    mean: float
    dev: float

    @classmethod
    def from_image(cls, needle: np.ndarray) -> "NeedleStats":
        px = np.asarray(needle)[:, :, :3].astype(np.float64)
        cnt = float(px.size)
        sn = float(px.sum())
        ssn = float((px * px).sum())
        mean = sn / cnt
        return cls(mean=mean, dev=math.sqrt(max(0.0, ssn - cnt * mean * mean)))


def as_samples(img: np.ndarray) -> np.ndarray:
    """Return the first three channels as a float64 array (no copy when already so)."""
    arr = np.asarray(img)[:, :, :3]
    if arr.dtype == np.float64:
        return arr
    return arr.astype(np.float64)


def compute_ncc(
    haystack: np.ndarray,
    index: AreaStatisticsIndex,
    needle: np.ndarray,
    needle_stats: NeedleStats,
    ox: int,
    oy: int,
) -> float:
    """NCC score of the needle placed with its top-left corner at (ox, oy).

    Both images must be float64 HxWx3 sample arrays (see as_samples). Flat
    regions (deviation below NCC_EPSILON) score 0.0.
    """
    nh, nw = needle.shape[:2]
    sub = haystack[oy:oy + nh, ox:ox + nw]
    dot = float(np.vdot(sub, needle))

    sh, ssh = index.query(ox, oy, nw, nh)
    cnt = float(nw * nh * 3)
    mh = sh / cnt
    dh = math.sqrt(max(0.0, ssh - cnt * mh * mh))
    if dh < NCC_EPSILON or needle_stats.dev < NCC_EPSILON:
        return 0.0
    return (dot - cnt * mh * needle_stats.mean) / (dh * needle_stats.dev)


class TemplateMatcher:
    """Parallel coarse-to-fine NCC matcher.

    Args:
        workers: size of the coarse-search pool.
        step: coarse stride in both axes; refinement covers +/- (step-1).
    """

    def __init__(self, workers: int = MATCH_WORKERS, step: int = MATCH_STEP) -> None:
        self.workers = max(1, int(workers))
        self.step = max(1, int(step))

    def match(
        self,
        haystack: np.ndarray,
        needle: np.ndarray,
        index: Optional[AreaStatisticsIndex] = None,
        needle_stats: Optional[NeedleStats] = None,
    ) -> MatchResult:
        """Return the best top-left offset of needle inside haystack.

        A needle larger than the haystack in either axis yields
        MatchResult(0, 0, 0.0): nothing to search.
        """
        hh, hw = haystack.shape[:2]
        nh, nw = needle.shape[:2]
        if nw > hw or nh > hh:
            logger.debug("matcher: needle %dx%d larger than haystack %dx%d", nw, nh, hw, hh)
            return MatchResult(0, 0, 0.0)

        t0 = time.perf_counter()
        hay = as_samples(haystack)
        ndl = as_samples(needle)
        if index is None:
            index = AreaStatisticsIndex.build(haystack)
        if needle_stats is None:
            needle_stats = NeedleStats.from_image(ndl)

        max_x, max_y = hw - nw, hh - nh
        coarse = self._coarse_search(hay, index, ndl, needle_stats, max_x, max_y)
        t1 = time.perf_counter()
        best = self._refine(hay, index, ndl, needle_stats, coarse, max_x, max_y)
        t2 = time.perf_counter()

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "matcher: coarse=(%d,%d,%.3f) best=(%d,%d,%.3f) coarse_ms=%.1f refine_ms=%.1f",
                coarse.x, coarse.y, coarse.score, best.x, best.y, best.score,
                (t1 - t0) * 1000.0, (t2 - t1) * 1000.0,
            )
        return best

    # ---- passes ----
    def _coarse_search(self, hay, index, ndl, stats, max_x, max_y) -> MatchResult:
        rows = max_y + 1
        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            futures = [
                pool.submit(self._scan_rows, wid, hay, index, ndl, stats, max_x, rows)
                for wid in range(self.workers)
            ]
            results: List[MatchResult] = [f.result() for f in futures]

        best = MatchResult(0, 0, -1.0)
        for r in results:
            if r.score > best.score:
                best = r
        return best

    def _scan_rows(self, wid, hay, index, ndl, stats, max_x, rows) -> MatchResult:
        step = self.step
        lx, ly, lm = 0, 0, -1.0
        for y in range(wid * step, rows, self.workers * step):
            for x in range(0, max_x + 1, step):
                s = compute_ncc(hay, index, ndl, stats, x, y)
                if s > lm:
                    lx, ly, lm = x, y, s
        return MatchResult(lx, ly, lm)

    def _refine(self, hay, index, ndl, stats, coarse: MatchResult, max_x, max_y) -> MatchResult:
        step = self.step
        fx, fy, fm = coarse.x, coarse.y, coarse.score
        for y in range(max(0, coarse.y - step + 1), min(max_y + 1, coarse.y + step)):
            for x in range(max(0, coarse.x - step + 1), min(max_x + 1, coarse.x + step)):
                s = compute_ncc(hay, index, ndl, stats, x, y)
                if s > fm:
                    fx, fy, fm = x, y, s
        return MatchResult(fx, fy, fm)

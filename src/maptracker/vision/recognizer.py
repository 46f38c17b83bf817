"""Map recognizer: position and heading of the agent from a captured frame.

Responsibility:
- Cut the minimap out of the frame, bring it to map scale and locate it on
  every known map whose name matches the requested filter.
- Search a window around the last known position first and fall back to the
  full map when the window does not reach the requested precision.
- Estimate the heading by correlating the pointer at the minimap centre with
  pre-rotated pointer templates.
- Report the best candidate as a JSON detail payload, or None when nothing
  reaches the precision.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple
import json
import logging
import re

import cv2
import numpy as np

from ..config.vision import (
    MAP_SCALE,
    MINIMAP_CENTER,
    MINIMAP_RADIUS,
    NO_MAP_NAME,
    POINTER_RADIUS,
    RECOGNITION_PRECISION,
    ROTATION_STEP,
    SEARCH_RADIUS,
)
from .integral import AreaStatisticsIndex
from .matcher import MatchResult, NeedleStats, TemplateMatcher, as_samples, compute_ncc
from .preprocess import crop_area, crop_bounds, rotate_image, scale_image, to_bgr

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecognitionConfig:
    """Matching configuration for one recognition call."""

    map_name_regex: str
    precision: float = RECOGNITION_PRECISION


@dataclass(frozen=True)
class RecognitionResult:
    """Best candidate: score, box on the map (x, y, w, h) and detail payload."""

    score: float
    box: Tuple[int, int, int, int]
    detail_json: str


class MapEntry:
    """A map image with its integral index, built once on first use."""

    def __init__(self, name: str, image: np.ndarray) -> None:
        self.name = name
        self.image = to_bgr(image)
        self._index: Optional[AreaStatisticsIndex] = None
        self._samples: Optional[np.ndarray] = None

    @property
    def samples(self) -> np.ndarray:
        if self._samples is None:
            self._samples = as_samples(self.image)
        return self._samples

    @property
    def index(self) -> AreaStatisticsIndex:
        if self._index is None:
            self._index = AreaStatisticsIndex.build(self.image)
        return self._index


class MapLibrary:
    """Named map images searched by the recognizer."""

    def __init__(self, maps: Dict[str, np.ndarray]) -> None:
        self._maps = {name: MapEntry(name, img) for name, img in maps.items()}

    @classmethod
    def from_dir(cls, path: str | Path) -> "MapLibrary":
        """Load every *.png under path; the file stem is the map name."""
        base = Path(path)
        if not base.is_dir():
            raise FileNotFoundError(f"Maps directory not found: {base}")
        maps: Dict[str, np.ndarray] = {}
        for png in sorted(base.glob("*.png")):
            img = cv2.imread(str(png), cv2.IMREAD_COLOR)
            if img is None:
                logger.warning("recognizer: could not read map image %s", png)
                continue
            maps[png.stem] = img
        logger.info("recognizer: loaded %d map(s) from %s", len(maps), base)
        return cls(maps)

    def names(self) -> List[str]:
        return list(self._maps)

    def get(self, name: str) -> MapEntry:
        return self._maps[name]


class MapRecognizer:
    """Locate the minimap on known maps and read the pointer heading."""

    def __init__(
        self,
        library: MapLibrary,
        pointer_template: np.ndarray,
        matcher: Optional[TemplateMatcher] = None,
        minimap_center: Tuple[int, int] = MINIMAP_CENTER,
        minimap_radius: int = MINIMAP_RADIUS,
        pointer_radius: int = POINTER_RADIUS,
        map_scale: float = MAP_SCALE,
        search_radius: int = SEARCH_RADIUS,
        rotation_step: int = ROTATION_STEP,
    ) -> None:
        self.library = library
        self.matcher = matcher or TemplateMatcher()
        self.minimap_center = (int(minimap_center[0]), int(minimap_center[1]))
        self.minimap_radius = int(minimap_radius)
        self.pointer_radius = int(pointer_radius)
        self.map_scale = float(map_scale)
        self.search_radius = int(search_radius)
        self._last_pos: Dict[str, Tuple[int, int]] = {}

        size = 2 * self.pointer_radius + 1
        pointer = cv2.resize(to_bgr(pointer_template), (size, size), interpolation=cv2.INTER_AREA)
        self._pointer_variants = []
        for angle in range(0, 360, max(1, int(rotation_step))):
            rotated = as_samples(rotate_image(pointer, angle))
            self._pointer_variants.append((angle, rotated, NeedleStats.from_image(rotated)))

    @classmethod
    def from_files(cls, maps_dir: str | Path, pointer_path: str | Path, **kwargs) -> "MapRecognizer":
        pointer = cv2.imread(str(pointer_path), cv2.IMREAD_COLOR)
        if pointer is None:
            raise FileNotFoundError(f"Pointer template not found: {pointer_path}")
        return cls(MapLibrary.from_dir(maps_dir), pointer, **kwargs)

    # --------------------------- public API ---------------------------
    def recognize(self, frame: np.ndarray, config: RecognitionConfig) -> Optional[RecognitionResult]:
        """Return the best candidate for the frame, or None below precision."""
        frame = to_bgr(frame)
        pattern = re.compile(config.map_name_regex)
        candidates = [name for name in self.library.names() if pattern.search(name)]
        if not candidates:
            logger.debug("recognizer: no map matches %r", config.map_name_regex)
            return self._result(NO_MAP_NAME, MatchResult(0, 0, 0.0), (0, 0), 0, 0.0)

        cx, cy = self.minimap_center
        minimap = crop_area(frame, cx, cy, self.minimap_radius)
        needle = as_samples(scale_image(minimap, self.map_scale))
        stats = NeedleStats.from_image(needle)
        nh, nw = needle.shape[:2]

        best_name, best = None, MatchResult(0, 0, -1.0)
        for name in candidates:
            m = self._locate_on_map(self.library.get(name), needle, stats, config.precision)
            logger.debug("recognizer: map=%s offset=(%d,%d) score=%.3f", name, m.x, m.y, m.score)
            if m.score > best.score:
                best_name, best = name, m

        if best_name is None or best.score < config.precision:
            logger.debug("recognizer: best score %.3f below precision %.2f", best.score, config.precision)
            return None

        pos = (best.x + nw // 2, best.y + nh // 2)
        self._last_pos[best_name] = pos
        rot, rot_conf = self.estimate_heading(frame)
        return self._result(best_name, best, pos, rot, rot_conf, (nw, nh))

    def estimate_heading(self, frame: np.ndarray) -> Tuple[int, float]:
        """Return (degrees clockwise from north, confidence) of the pointer."""
        cx, cy = self.minimap_center
        crop = as_samples(crop_area(to_bgr(frame), cx, cy, self.pointer_radius))
        size = 2 * self.pointer_radius + 1
        if crop.shape[0] != size or crop.shape[1] != size:
            logger.debug("recognizer: pointer area clipped by frame edge")
            return 0, 0.0
        index = AreaStatisticsIndex.build(crop)
        best_angle, best_score = 0, -1.0
        for angle, variant, stats in self._pointer_variants:
            s = compute_ncc(crop, index, variant, stats, 0, 0)
            if s > best_score:
                best_angle, best_score = angle, s
        return best_angle, best_score

    def forget(self, map_name: Optional[str] = None) -> None:
        """Drop remembered positions (all maps when map_name is None)."""
        if map_name is None:
            self._last_pos.clear()
        else:
            self._last_pos.pop(map_name, None)

    # --------------------------- internals ---------------------------
    def _locate_on_map(self, entry: MapEntry, needle, stats, precision: float) -> MatchResult:
        last = self._last_pos.get(entry.name)
        if last is not None:
            x0, y0, x1, y1 = crop_bounds(entry.image.shape, last[0], last[1], self.search_radius)
            window = entry.image[y0:y1, x0:x1]
            local = self.matcher.match(window, needle, needle_stats=stats)
            if local.score >= precision:
                return MatchResult(local.x + x0, local.y + y0, local.score)
            logger.debug("recognizer: local window on %s scored %.3f, searching full map", entry.name, local.score)
        return self.matcher.match(entry.samples, needle, index=entry.index, needle_stats=stats)

    @staticmethod
    def _result(name, match: MatchResult, pos, rot, rot_conf, size=(0, 0)) -> RecognitionResult:
        detail = {
            "map_name": name,
            "x": int(pos[0]),
            "y": int(pos[1]),
            "rot": int(rot),
            "loc_conf": round(float(match.score), 4),
            "rot_conf": round(float(rot_conf), 4),
        }
        box = (int(match.x), int(match.y), int(size[0]), int(size[1]))
        return RecognitionResult(
            score=float(match.score),
            box=box,
            detail_json=json.dumps({"best": {"box": list(box), "detail": detail}}),
        )

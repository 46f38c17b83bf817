"""Localization service: one pose sample per call.

Responsibility:
- Acquire the latest frame from the capture provider.
- Run the recognizer with the requested map name as an exact-match filter.
- Parse the detail payload into a PoseSample.

Every failure surfaces as a distinct LocalizationError subclass; there is no
retry here, callers decide the retry policy.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Protocol
import json
import logging
import re
import time

import numpy as np

from ..config.vision import NO_MAP_NAME, RECOGNITION_PRECISION
from ..core.errors import (
    CaptureError,
    MapNotRecognizedError,
    RecognitionEmptyError,
    RecognitionMalformedError,
)
from ..vision.recognizer import RecognitionConfig, RecognitionResult

logger = logging.getLogger(__name__)


class CaptureProvider(Protocol):
    def capture(self) -> np.ndarray: ...


class Recognizer(Protocol):
    def recognize(self, frame: np.ndarray, config: RecognitionConfig) -> Optional[RecognitionResult]: ...


@dataclass(frozen=True)
class PoseSample:
    """Agent map coordinates and heading (degrees clockwise from north)."""

    x: int
    y: int
    rotation: int


def exact_name_regex(map_name: str) -> str:
    return "^" + re.escape(map_name) + "$"


class LocalizationService:
    """Capture + recognize + parse, with typed failures."""

    def __init__(self, capture: CaptureProvider, recognizer: Recognizer,
                 precision: float = RECOGNITION_PRECISION) -> None:
        self.capture = capture
        self.recognizer = recognizer
        self.precision = float(precision)

    def locate(self, map_name: str) -> PoseSample:
        t0 = time.perf_counter()
        try:
            frame = self.capture.capture()
        except CaptureError:
            raise
        except Exception as e:
            raise CaptureError(f"capture failed: {e}") from e
        if frame is None:
            raise CaptureError("captured frame is empty")

        config = RecognitionConfig(map_name_regex=exact_name_regex(map_name), precision=self.precision)
        try:
            result = self.recognizer.recognize(frame, config)
        except Exception as e:
            raise RecognitionEmptyError(f"recognition failed: {e}") from e
        if result is None or not result.detail_json:
            raise RecognitionEmptyError("recognition result is empty")

        detail = self._parse_detail(result.detail_json)
        if detail.get("map_name") == NO_MAP_NAME:
            raise MapNotRecognizedError("map not recognized in recognition result")

        try:
            pose = PoseSample(
                x=_as_int(detail["x"]),
                y=_as_int(detail["y"]),
                rotation=_as_int(detail["rot"]) % 360,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise RecognitionMalformedError(f"detail is missing pose fields: {e}") from e

        logger.debug(
            "localization: map=%s pose=(%d,%d) rot=%d in %.1fms",
            map_name, pose.x, pose.y, pose.rotation, (time.perf_counter() - t0) * 1000.0,
        )
        return pose

    @staticmethod
    def _parse_detail(detail_json: str) -> dict:
        try:
            wrapped = json.loads(detail_json)
            detail = wrapped["best"]["detail"]
        except (ValueError, KeyError, TypeError) as e:
            raise RecognitionMalformedError(f"failed to parse recognition detail: {e}") from e
        if not isinstance(detail, dict):
            raise RecognitionMalformedError("recognition detail is not an object")
        return detail


def _as_int(value: Any) -> int:
    # bool is an int subclass but never a coordinate
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"expected a number, got {value!r}")
    return int(round(value))

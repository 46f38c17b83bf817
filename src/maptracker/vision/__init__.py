"""Vision package: pure image ops, NCC matching and map recognition.

Submodules:
- integral: prefix-sum area statistics
- matcher: parallel coarse-to-fine NCC template search
- preprocess: stateless crop/scale/rotate helpers
- recognizer: minimap localization and pointer heading on known maps
"""
from .integral import AreaStatisticsIndex
from .matcher import MatchResult, NeedleStats, TemplateMatcher, compute_ncc
from .preprocess import crop_area, scale_image, rotate_image, to_bgr
from .recognizer import (
    MapLibrary,
    MapRecognizer,
    RecognitionConfig,
    RecognitionResult,
)

__all__ = [
    "AreaStatisticsIndex",
    "MatchResult",
    "NeedleStats",
    "TemplateMatcher",
    "compute_ncc",
    "crop_area",
    "scale_image",
    "rotate_image",
    "to_bgr",
    "MapLibrary",
    "MapRecognizer",
    "RecognitionConfig",
    "RecognitionResult",
]

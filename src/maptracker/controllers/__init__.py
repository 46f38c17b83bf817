"""Controllers: orchestration over capture, recognition and parsing.

- localization: LocalizationService producing PoseSample values
"""
from .localization import LocalizationService, PoseSample

__all__ = ["LocalizationService", "PoseSample"]

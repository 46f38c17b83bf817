"""Error taxonomy.

- ParamValidationError: run parameters rejected before anything moves.
- LocalizationError and subclasses: one perception cycle failed; the
  navigation loop pauses forward motion and retries on the next cycle.
"""


class ParamValidationError(ValueError):
    """Run parameters are missing, malformed or out of range."""


class LocalizationError(RuntimeError):
    """Base class for a failed localization cycle."""


class CaptureError(LocalizationError):
    """No frame could be captured."""


class RecognitionEmptyError(LocalizationError):
    """The recognizer failed or produced no result."""


class RecognitionMalformedError(LocalizationError):
    """The recognizer payload does not describe a pose."""


class MapNotRecognizedError(LocalizationError):
    """The recognizer reported that no map matched."""


__all__ = [
    "ParamValidationError",
    "LocalizationError",
    "CaptureError",
    "RecognitionEmptyError",
    "RecognitionMalformedError",
    "MapNotRecognizedError",
]

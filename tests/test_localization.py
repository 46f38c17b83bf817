import json
import re

import numpy as np
import pytest

from maptracker.controllers.localization import LocalizationService, PoseSample
from maptracker.core.errors import (
    CaptureError,
    LocalizationError,
    MapNotRecognizedError,
    RecognitionEmptyError,
    RecognitionMalformedError,
)
from maptracker.vision.recognizer import RecognitionResult

FRAME = np.zeros((10, 10, 3), dtype=np.uint8)


class FakeCapture:
    def __init__(self, frame=FRAME, error=None):
        self.frame = frame
        self.error = error

    def capture(self):
        if self.error is not None:
            raise self.error
        return self.frame


class FakeRecognizer:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.configs = []

    def recognize(self, frame, config):
        self.configs.append(config)
        if self.error is not None:
            raise self.error
        return self.result


def _result(detail):
    return RecognitionResult(score=0.9, box=(0, 0, 1, 1), detail_json=json.dumps({"best": {"detail": detail}}))


def test_locate_parses_pose_and_filters_by_exact_name():
    rec = FakeRecognizer(_result({"map_name": "map.1", "x": 120, "y": 45.6, "rot": 370}))
    svc = LocalizationService(FakeCapture(), rec, precision=0.7)

    pose = svc.locate("map.1")

    assert pose == PoseSample(120, 46, 10)
    cfg = rec.configs[0]
    assert cfg.precision == 0.7
    assert re.search(cfg.map_name_regex, "map.1")
    assert not re.search(cfg.map_name_regex, "mapx1")
    assert not re.search(cfg.map_name_regex, "map.10")


def test_capture_exception_becomes_capture_error():
    svc = LocalizationService(FakeCapture(error=OSError("display gone")), FakeRecognizer())
    with pytest.raises(CaptureError):
        svc.locate("m")


def test_empty_frame_is_capture_error():
    svc = LocalizationService(FakeCapture(frame=None), FakeRecognizer())
    with pytest.raises(CaptureError):
        svc.locate("m")


@pytest.mark.parametrize("recognizer", [
    FakeRecognizer(result=None),
    FakeRecognizer(error=RuntimeError("boom")),
    FakeRecognizer(result=RecognitionResult(0.0, (0, 0, 0, 0), "")),
])
def test_empty_recognition(recognizer):
    svc = LocalizationService(FakeCapture(), recognizer)
    with pytest.raises(RecognitionEmptyError):
        svc.locate("m")


@pytest.mark.parametrize("payload", [
    "not json",
    json.dumps({"detail": {}}),
    json.dumps({"best": {"detail": ["x"]}}),
    json.dumps({"best": {"detail": {"map_name": "m", "x": 1, "rot": 0}}}),
    json.dumps({"best": {"detail": {"map_name": "m", "x": "1", "y": 2, "rot": 0}}}),
    json.dumps({"best": {"detail": {"map_name": "m", "x": True, "y": 2, "rot": 0}}}),
])
def test_malformed_recognition(payload):
    rec = FakeRecognizer(RecognitionResult(0.9, (0, 0, 1, 1), payload))
    svc = LocalizationService(FakeCapture(), rec)
    with pytest.raises(RecognitionMalformedError):
        svc.locate("m")


def test_map_not_recognized():
    rec = FakeRecognizer(_result({"map_name": "None", "x": 0, "y": 0, "rot": 0}))
    svc = LocalizationService(FakeCapture(), rec)
    with pytest.raises(MapNotRecognizedError) as exc:
        svc.locate("m")
    assert isinstance(exc.value, LocalizationError)

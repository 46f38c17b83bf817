import json

import numpy as np
import pytest

from maptracker.vision.preprocess import rotate_image
from maptracker.vision.recognizer import MapLibrary, MapRecognizer, RecognitionConfig

CENTER = (60, 60)
MINIMAP_R = 20
POINTER_R = 10


def _pointer():
    rng = np.random.default_rng(99)
    return rng.integers(0, 256, size=(2 * POINTER_R + 1, 2 * POINTER_R + 1, 3), dtype=np.uint8)


def _recognizer(maps, **kw):
    opts = dict(minimap_center=CENTER, minimap_radius=MINIMAP_R, pointer_radius=POINTER_R, rotation_step=10)
    opts.update(kw)
    return MapRecognizer(MapLibrary(maps), _pointer(), **opts)


def _frame_showing(map_img, map_x, map_y):
    """A frame whose minimap shows map_img centred on (map_x, map_y)."""
    frame = np.zeros((160, 160, 3), dtype=np.uint8)
    cx, cy = CENTER
    r = MINIMAP_R
    frame[cy - r:cy + r + 1, cx - r:cx + r + 1] = map_img[map_y - r:map_y + r + 1, map_x - r:map_x + r + 1]
    return frame


def _detail(result):
    return json.loads(result.detail_json)["best"]["detail"]


def test_locates_minimap_on_map(make_smooth_noise):
    forest = make_smooth_noise(200, 200, sigma=3.0, seed=21)
    rec = _recognizer({"forest": forest})

    result = rec.recognize(_frame_showing(forest, 100, 80), RecognitionConfig("^forest$"))

    assert result is not None
    detail = _detail(result)
    assert detail["map_name"] == "forest"
    assert (detail["x"], detail["y"]) == (100, 80)
    assert result.box == (80, 60, 41, 41)
    assert result.score == pytest.approx(1.0, abs=1e-6)


def test_second_call_uses_remembered_position(make_smooth_noise):
    forest = make_smooth_noise(200, 200, sigma=3.0, seed=21)
    rec = _recognizer({"forest": forest}, search_radius=40)

    rec.recognize(_frame_showing(forest, 100, 80), RecognitionConfig("^forest$"))
    result = rec.recognize(_frame_showing(forest, 104, 83), RecognitionConfig("^forest$"))

    detail = _detail(result)
    assert (detail["x"], detail["y"]) == (104, 83)


def test_picks_best_of_matching_maps(make_smooth_noise):
    forest = make_smooth_noise(200, 200, sigma=3.0, seed=21)
    desert = make_smooth_noise(200, 200, sigma=3.0, seed=42)
    rec = _recognizer({"forest": forest, "desert": desert})

    result = rec.recognize(_frame_showing(desert, 70, 120), RecognitionConfig(".*"))

    detail = _detail(result)
    assert detail["map_name"] == "desert"
    assert (detail["x"], detail["y"]) == (70, 120)


def test_no_candidate_map_reports_none_name(make_smooth_noise):
    rec = _recognizer({"forest": make_smooth_noise(100, 100)})

    result = rec.recognize(np.zeros((160, 160, 3), dtype=np.uint8), RecognitionConfig("^swamp$"))

    assert _detail(result)["map_name"] == "None"
    assert result.score == 0.0


def test_below_precision_returns_none(make_smooth_noise):
    rec = _recognizer({"forest": make_smooth_noise(100, 100)})
    flat = np.full((160, 160, 3), 30, dtype=np.uint8)
    assert rec.recognize(flat, RecognitionConfig("^forest$", precision=0.6)) is None


def test_heading_from_rotated_pointer():
    rec = _recognizer({})
    frame = np.zeros((120, 120, 3), dtype=np.uint8)
    cx, cy = CENTER
    frame[cy - POINTER_R:cy + POINTER_R + 1, cx - POINTER_R:cx + POINTER_R + 1] = rotate_image(_pointer(), 90)

    angle, conf = rec.estimate_heading(frame)

    assert angle == 90
    assert conf == pytest.approx(1.0, abs=1e-6)


def test_heading_when_pointer_is_clipped():
    rec = _recognizer({}, minimap_center=(3, 3))
    assert rec.estimate_heading(np.zeros((50, 50, 3), dtype=np.uint8)) == (0, 0.0)


def test_library_from_dir(tmp_path, make_smooth_noise):
    import cv2

    cv2.imwrite(str(tmp_path / "forest.png"), make_smooth_noise(30, 30))
    (tmp_path / "notes.txt").write_text("not a map")
    lib = MapLibrary.from_dir(tmp_path)
    assert lib.names() == ["forest"]
    assert lib.get("forest").image.shape == (30, 30, 3)


def test_library_missing_dir(tmp_path):
    with pytest.raises(FileNotFoundError):
        MapLibrary.from_dir(tmp_path / "missing")

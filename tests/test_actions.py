import pytest

from maptracker.io.dry_run import DryRunInput
from maptracker.navigation.actions import ActionWrapper


def test_rotate_camera_sequence(fake_clock):
    inp = DryRunInput()
    actions = ActionWrapper(inp, work_size=(1280, 720), sleep=fake_clock.sleep)
    start = fake_clock()

    actions.rotate_camera(-50, duration_ms=100, delay_ms=90)

    assert inp.history == [
        ("move_mouse", 640, 360),
        ("move_mouse", 590, 360),
        ("key_down", "alt"),
        ("move_mouse", 640, 360),
        ("mouse_down", "left"),
        ("mouse_up", "left"),
        ("key_up", "alt"),
    ]
    assert fake_clock() - start == pytest.approx(0.09)


def test_forward_held_tracking(fake_clock):
    actions = ActionWrapper(DryRunInput(), sleep=fake_clock.sleep)
    assert not actions.forward_held
    actions.key_down_sync("w")
    assert actions.forward_held
    actions.key_down_sync("alt")
    actions.key_up_sync("alt")
    assert actions.forward_held
    actions.key_up_sync("w", 100)
    assert not actions.forward_held


def test_key_type_settles(fake_clock):
    inp = DryRunInput()
    actions = ActionWrapper(inp, sleep=fake_clock.sleep)
    start = fake_clock()
    actions.key_type_sync("space", 100)
    assert inp.history == [("press_key", "space", 1)]
    assert fake_clock() - start == pytest.approx(0.1)


class GlideRecorder(DryRunInput):
    """DryRunInput that also keeps the requested glide durations."""

    def __init__(self):
        super().__init__()
        self.durations = []

    def move_mouse(self, x, y, duration=None):
        self.durations.append(duration)
        super().move_mouse(x, y, duration)


def test_swipe_waits_only_for_the_glide(fake_clock):
    inp = GlideRecorder()
    actions = ActionWrapper(inp, sleep=fake_clock.sleep)
    start = fake_clock()

    actions.swipe_sync(100, 200, 30, -5, duration_ms=250)

    assert inp.history == [("move_mouse", 100, 200), ("move_mouse", 130, 195)]
    assert inp.durations == [None, pytest.approx(0.25)]
    assert fake_clock() - start == 0.0

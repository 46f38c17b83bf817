import threading

from maptracker.controllers.localization import PoseSample
from maptracker.core.errors import CaptureError
from maptracker.io.dry_run import DryRunInput
from maptracker.navigation.actions import ActionWrapper
from maptracker.navigation.controller import NavigationController, NavigationState
from maptracker.navigation.messages import Notifier
from maptracker.navigation.params import parse_params


class ScriptedLocalizer:
    """Replays poses (or raises errors) in order, repeating the last entry."""

    def __init__(self, *script):
        self.script = list(script)
        self.calls = 0

    def locate(self, map_name):
        item = self.script[min(self.calls, len(self.script) - 1)]
        self.calls += 1
        if isinstance(item, Exception):
            raise item
        return item


def _setup(fake_clock, localizer, stop_event=None):
    inp = DryRunInput()
    sent = []
    controller = NavigationController(
        localizer,
        ActionWrapper(inp, work_size=(1280, 720), sleep=fake_clock.sleep),
        notifier=Notifier(sink=sent.append),
        stop_event=stop_event,
        infer_interval_ms=200,
        clock=fake_clock,
        sleep=fake_clock.sleep,
    )
    return controller, inp, sent


def _params(path, **kw):
    return parse_params(dict(map_name="forest", path=path, **kw))


def test_already_at_target_sends_no_movement(fake_clock):
    controller, inp, sent = _setup(fake_clock, ScriptedLocalizer(PoseSample(0, 0, 0)))

    result = controller.run(_params([[3, 4]], arrival_threshold=10))

    assert result.ok
    assert (result.status, result.reached, result.total) == (NavigationState.ARRIVED, 1, 1)
    assert not [e for e in inp.history if e[0] in ("key_down", "press_key", "move_mouse")]
    assert sent == [
        "Navigating to (3, 4), distance 5",
        "Reached point 0 at (0, 0)",
        "Navigation finished, 1 point(s) reached",
    ]


def test_walks_sprints_and_releases_forward_on_arrival(fake_clock):
    localizer = ScriptedLocalizer(
        PoseSample(0, 0, 0),
        PoseSample(0, -30, 0),
        PoseSample(0, -60, 0),
        PoseSample(0, -90, 0),
        PoseSample(0, -98, 0),
    )
    controller, inp, sent = _setup(fake_clock, localizer)

    result = controller.run(_params([[0, -100]]))

    assert result.ok
    assert ("key_down", "w") in inp.history
    assert ("press_key", "shift", 1) in inp.history
    assert inp.history[-1] == ("key_up", "w")
    assert not [e for e in inp.history if e[0] == "move_mouse"]
    assert "Reached point 0 at (0, -98)" in sent


def test_large_misalignment_turns_in_place(fake_clock):
    # bearing to (17, 98) from the origin is 170 degrees
    controller, inp, _ = _setup(fake_clock, ScriptedLocalizer(PoseSample(0, 0, 0)))

    result = controller.run(_params([[17, 98]], arrival_timeout=1000, rotation_upper_threshold=90))

    assert result.status is NavigationState.ARRIVAL_TIMEOUT
    first_release = inp.history.index(("key_up", "w"))
    first_move = next(i for i, e in enumerate(inp.history) if e[0] == "move_mouse")
    first_forward = inp.history.index(("key_down", "w"))
    assert first_release < first_move < first_forward
    assert inp.history[first_move + 1] == ("move_mouse", 640 + 340, 360)


def test_small_misalignment_turns_while_walking(fake_clock):
    # bearing to (50, -87) is 30 degrees: between the lower and upper thresholds
    controller, inp, _ = _setup(fake_clock, ScriptedLocalizer(PoseSample(0, 0, 0)))

    result = controller.run(_params([[50, -87]], arrival_timeout=1000))

    assert result.status is NavigationState.ARRIVAL_TIMEOUT
    first_forward = inp.history.index(("key_down", "w"))
    first_move = next(i for i, e in enumerate(inp.history) if e[0] == "move_mouse")
    assert first_forward < first_move
    assert inp.history[0] == ("key_down", "w")


def test_rotation_timeout(fake_clock):
    controller, _, sent = _setup(fake_clock, ScriptedLocalizer(PoseSample(0, 0, 0)))

    result = controller.run(_params(
        [[50, -87]], rotation_timeout=1000, stuck_threshold=50000, stuck_timeout=60000,
    ))

    assert result.status is NavigationState.ROTATION_TIMEOUT
    assert sent[-1] == "Emergency stop: rotation adjustment timeout"


def test_stuck_jumps_then_times_out(fake_clock):
    controller, inp, sent = _setup(fake_clock, ScriptedLocalizer(PoseSample(0, 0, 90)))

    result = controller.run(_params([[100, 0]], stuck_threshold=1000, stuck_timeout=3000))

    assert result.status is NavigationState.STUCK_TIMEOUT
    assert ("press_key", "space", 1) in inp.history
    assert sent.count("Stuck at (0, 0), jumping") == 1
    assert sent[-1] == "Emergency stop: stuck for too long"
    assert inp.history[-1] == ("key_up", "w")


def test_localization_failures_until_arrival_timeout(fake_clock):
    localizer = ScriptedLocalizer(CaptureError("no frame"))
    controller, inp, sent = _setup(fake_clock, localizer)

    result = controller.run(_params([[10, 10], [20, 20]], arrival_timeout=1000))

    assert result.status is NavigationState.ARRIVAL_TIMEOUT
    assert (result.reached, result.total) == (0, 2)
    assert not result.ok
    assert [s for s in sent if s.startswith("Emergency stop")] == ["Emergency stop: arrival timeout"]
    assert set(inp.history) == {("key_up", "w")}
    assert localizer.calls > 2


def test_stop_signal_exits_and_releases_forward(fake_clock):
    stop = threading.Event()
    stop.set()
    controller, inp, sent = _setup(fake_clock, ScriptedLocalizer(PoseSample(0, 0, 0)), stop_event=stop)

    result = controller.run(_params([[500, 500]]))

    assert result.status is NavigationState.EXTERNALLY_STOPPED
    assert inp.history == [("key_up", "w")]
    assert not [s for s in sent if s.startswith("Emergency stop")]


def test_cycles_respect_infer_interval(fake_clock):
    localizer = ScriptedLocalizer(CaptureError("no frame"))
    controller, _, _ = _setup(fake_clock, localizer)
    start = fake_clock()

    controller.run(_params([[10, 10]], arrival_timeout=1100))

    # one announce attempt, then one locate per 200ms cycle until the timeout
    assert localizer.calls == 1 + 6
    assert fake_clock() - start >= 1.0

"""Closed-loop navigation along an ordered list of waypoints.

Per waypoint the controller polls the localization service on a fixed
cadence and turns each pose sample into forward/rotate/jump/sprint commands.

Per-cycle order:
1. cooperative stop signal -> release forward, EXTERNALLY_STOPPED
2. arrival timeout -> emergency stop, ARRIVAL_TIMEOUT
3. localization (failures pause forward motion and retry next cycle)
4. stuck detection -> jump past stuck_threshold, STUCK_TIMEOUT past stuck_timeout
5. arrival check -> next waypoint
6. rotation correction (turn in place above the upper threshold, turn while
   walking above the lower one, ROTATION_TIMEOUT past rotation_timeout),
   otherwise walk forward and sprint when far away

Any terminal failure aborts the whole run; remaining waypoints are not
attempted.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Protocol, Tuple
import logging
import threading
import time

from ..config.navigation import (
    INFER_INTERVAL_MS,
    KEY_FORWARD,
    KEY_JUMP,
    KEY_SPRINT,
    RELEASE_DELAY_MS,
    ROTATE_DELAY_MS,
    ROTATE_SWIPE_MS,
    TAP_DELAY_MS,
)
from ..core.errors import LocalizationError
from .actions import ActionWrapper
from .geometry import calc_delta_rotation, calc_target_rotation, distance
from .messages import Notifier
from .params import NavigationParams, Waypoint

logger = logging.getLogger(__name__)


class Localizer(Protocol):
    def locate(self, map_name: str) -> Any: ...


class NavigationState(Enum):
    APPROACHING = "approaching"
    ALIGNING = "aligning"
    ARRIVED = "arrived"
    STUCK_TIMEOUT = "stuck_timeout"
    ARRIVAL_TIMEOUT = "arrival_timeout"
    ROTATION_TIMEOUT = "rotation_timeout"
    EXTERNALLY_STOPPED = "externally_stopped"


@dataclass
class NavigationSession:
    """Mutable bookkeeping for one waypoint; discarded when it ends."""

    index: int
    target: Waypoint
    arrival_baseline: float
    state: NavigationState = NavigationState.APPROACHING
    last_infer_time: Optional[float] = None
    rotation_adjust_start: Optional[float] = None
    stationary_pos: Optional[Tuple[int, int]] = None
    stationary_since: float = 0.0
    stuck_notified: bool = False


@dataclass(frozen=True)
class NavigationResult:
    """Outcome of a run: final status, waypoints reached and why it ended."""

    status: NavigationState
    reached: int
    total: int
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.status is NavigationState.ARRIVED and self.reached == self.total


class NavigationController:
    """Drive the agent through a waypoint list using pose feedback.

    Dependencies are injected: a localizer exposing locate(map_name), an
    ActionWrapper for input, a Notifier for status messages and a
    threading.Event used as the cooperative stop signal. `clock` (seconds)
    and `sleep` default to time.monotonic and time.sleep.
    """

    def __init__(
        self,
        localizer: Localizer,
        actions: ActionWrapper,
        notifier: Optional[Notifier] = None,
        stop_event: Optional[threading.Event] = None,
        infer_interval_ms: int = INFER_INTERVAL_MS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.localizer = localizer
        self.actions = actions
        self.notifier = notifier or Notifier()
        self.stop_event = stop_event or threading.Event()
        self.infer_interval = max(0, int(infer_interval_ms)) / 1000.0
        self._clock = clock
        self._sleep = sleep

    # --------------------------- public API ---------------------------
    def run(self, params: NavigationParams) -> NavigationResult:
        total = len(params.path)
        logger.info("Starting navigation map=%s targets_count=%d", params.map_name, total)

        for i, target in enumerate(params.path):
            logger.info("Navigating to next target point index=%d target=(%d,%d)", i, target.x, target.y)
            self._announce(params.map_name, target)

            status, reason = self._navigate_to(i, target, params)
            if status is not NavigationState.ARRIVED:
                logger.warning("Navigation aborted at index=%d status=%s reason=%s", i, status.value, reason)
                return NavigationResult(status, i, total, reason)

            if self.actions.forward_held:
                self.actions.key_up_sync(KEY_FORWARD, RELEASE_DELAY_MS)

        self.notifier.notify("finished", count=total)
        logger.info("Navigation finished, %d point(s) reached", total)
        return NavigationResult(NavigationState.ARRIVED, total, total)

    # --------------------------- per waypoint ---------------------------
    def _announce(self, map_name: str, target: Waypoint) -> None:
        try:
            pose = self.localizer.locate(map_name)
        except LocalizationError as e:
            logger.debug("Initial locate failed for moving notification: %s", e)
            return
        dist = distance(pose.x, pose.y, target.x, target.y)
        self.notifier.notify("moving", x=target.x, y=target.y, dist=int(dist))

    def _navigate_to(self, index: int, target: Waypoint, params: NavigationParams) -> Tuple[NavigationState, str]:
        session = NavigationSession(index=index, target=target, arrival_baseline=self._clock())

        while True:
            now = self._wait_next_cycle(session)

            if self.stop_event.is_set():
                logger.warning("Stop requested, exiting navigation loop")
                self.actions.key_up_sync(KEY_FORWARD, RELEASE_DELAY_MS)
                return NavigationState.EXTERNALLY_STOPPED, "stop requested"

            if self._elapsed_ms(session.arrival_baseline, now) > params.arrival_timeout:
                return self._emergency_stop(NavigationState.ARRIVAL_TIMEOUT, "arrival timeout")

            try:
                pose = self.localizer.locate(params.map_name)
            except LocalizationError as e:
                logger.error("Localization failed during navigation: %s", e)
                self.actions.key_up_sync(KEY_FORWARD, RELEASE_DELAY_MS)
                continue

            outcome = self._check_stuck(session, pose, now, params)
            if outcome is not None:
                return outcome

            dist = distance(pose.x, pose.y, target.x, target.y)
            if dist < params.arrival_threshold:
                session.state = NavigationState.ARRIVED
                logger.info("Target point reached index=%d at (%d,%d)", index, pose.x, pose.y)
                self.notifier.notify("arrived", index=index, x=pose.x, y=pose.y)
                return NavigationState.ARRIVED, ""

            logger.debug("Navigating pos=(%d,%d) rot=%d dist=%.1f", pose.x, pose.y, pose.rotation, dist)
            outcome = self._steer(session, pose, dist, now, params)
            if outcome is not None:
                return outcome

    def _wait_next_cycle(self, session: NavigationSession) -> float:
        """Sleep only the remainder of the interval since the previous cycle began."""
        if session.last_infer_time is not None:
            elapsed = self._clock() - session.last_infer_time
            if elapsed < self.infer_interval:
                self._sleep(self.infer_interval - elapsed)
        now = self._clock()
        session.last_infer_time = now
        return now

    def _check_stuck(self, session, pose, now, params) -> Optional[Tuple[NavigationState, str]]:
        pos = (pose.x, pose.y)
        if session.stationary_pos != pos:
            session.stationary_pos = pos
            session.stationary_since = now
            session.stuck_notified = False
            return None

        stuck_ms = self._elapsed_ms(session.stationary_since, now)
        if stuck_ms > params.stuck_timeout:
            return self._emergency_stop(NavigationState.STUCK_TIMEOUT, "stuck for too long")
        if stuck_ms > params.stuck_threshold:
            logger.info("Stuck detected at (%d,%d) for %.0fms, jumping", pose.x, pose.y, stuck_ms)
            if not session.stuck_notified:
                self.notifier.notify("stuck", x=pose.x, y=pose.y)
                session.stuck_notified = True
            self.actions.key_type_sync(KEY_JUMP, TAP_DELAY_MS)
        return None

    def _steer(self, session, pose, dist, now, params) -> Optional[Tuple[NavigationState, str]]:
        target = session.target
        target_rot = calc_target_rotation(pose.x, pose.y, target.x, target.y)
        delta = calc_delta_rotation(pose.rotation, target_rot)

        if abs(delta) > params.rotation_lower_threshold:
            session.state = NavigationState.ALIGNING
            if session.rotation_adjust_start is None:
                session.rotation_adjust_start = now
            if self._elapsed_ms(session.rotation_adjust_start, now) > params.rotation_timeout:
                return self._emergency_stop(NavigationState.ROTATION_TIMEOUT, "rotation adjustment timeout")

            logger.debug("Adjusting rotation cur=%d target=%d delta=%d", pose.rotation, target_rot, delta)
            dx = int(delta * params.rotation_speed)
            if abs(delta) > params.rotation_upper_threshold:
                # Large misalignment: turn in place
                self.actions.key_up_sync(KEY_FORWARD, 0)
                self.actions.rotate_camera(dx, ROTATE_SWIPE_MS, ROTATE_DELAY_MS)
                self.actions.key_down_sync(KEY_FORWARD, 0)
            else:
                self.actions.key_down_sync(KEY_FORWARD, 0)
                self.actions.rotate_camera(dx, ROTATE_SWIPE_MS, ROTATE_DELAY_MS)
            return None

        session.state = NavigationState.APPROACHING
        self.actions.key_down_sync(KEY_FORWARD, 0)
        if dist > params.sprint_threshold:
            self.actions.key_type_sync(KEY_SPRINT, TAP_DELAY_MS)
        session.rotation_adjust_start = None
        return None

    # --------------------------- helpers ---------------------------
    def _emergency_stop(self, status: NavigationState, reason: str) -> Tuple[NavigationState, str]:
        logger.error("Emergency stop triggered: %s", reason)
        self.notifier.notify("emergency_stop", reason=reason)
        self.actions.key_up_sync(KEY_FORWARD, RELEASE_DELAY_MS)
        return status, reason

    @staticmethod
    def _elapsed_ms(since: float, now: float) -> float:
        return (now - since) * 1000.0

"""
Purpose: The tick-driven route simulation engine.
What it does:
Turns a Route + its resolved RoutePath into a timed sequence of
SimulationProgress ticks:

- total_steps = max(min_steps, floor(distance / (speed * tick)))
- each tick publishes the interpolated position, progress %, elapsed, remaining
- a nonzero route duration caps the lap regardless of remaining steps
- repeating routes pause, then restart the lap from step 0
- (re)starting at a progress fraction backdates a synthetic start time so
  elapsed/remaining stay continuous across pause/resume

Rule: The simulator owns no observable state and no thread. The controller
runs it on a worker thread and decides what a published tick means.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from typing import Callable, Optional

from routing.eta_service import estimated_total_time_ms, remaining_time_ms
from routing.geo import interpolate_along
from routing.models import GeoPoint, RoutePath
from .models import Route, SimulationProgress
from .policy import SimulationPolicy, default_simulation_policy

logger = logging.getLogger(__name__)

POSITION_LABEL = "Current Position"

Clock = Callable[[], float]
Waiter = Callable[[threading.Event, float], bool]


def event_wait(cancel: threading.Event, seconds: float) -> bool:
    """
    Sleep for `seconds` unless cancelled first. Returns True if cancelled.
    """
    return cancel.wait(seconds)


def compute_total_steps(path: RoutePath, speed_mps: float, policy: SimulationPolicy) -> int:
    min_steps = policy.road_min_steps if path.is_road_following else policy.straight_min_steps
    metres_per_tick = speed_mps * policy.tick_interval_s
    return max(min_steps, int(path.total_distance_m / metres_per_tick))


class RouteSimulator:
    """
    One route replay. Stateless between runs apart from the derived plan
    (total steps and time budget), so pause/resume simply calls run() again
    with the last published fraction.

    Args:
        route:  the validated Route being replayed.
        path:   its RoutePath (>= 2 waypoints).
        policy: SimulationPolicy; defaults to default_simulation_policy().
        clock:  monotonic seconds; injectable for tests.
        wait:   cancellable sleep (event, seconds) -> cancelled; injectable for tests.
    """

    def __init__(
        self,
        route: Route,
        path: RoutePath,
        policy: Optional[SimulationPolicy] = None,
        clock: Clock = time.monotonic,
        wait: Waiter = event_wait,
    ):
        self.route = route
        self.path = path
        self.policy = policy or default_simulation_policy()
        self.clock = clock
        self.wait = wait

        self.total_steps = compute_total_steps(path, route.speed_mps, self.policy)
        self.estimated_total_ms = estimated_total_time_ms(
            path.total_distance_m, route.speed_mps, route.duration_ms
        )

    # ------------------------------------------------------------------
    # Pure helpers
    # ------------------------------------------------------------------

    def now_ms(self) -> float:
        return self.clock() * 1000.0

    def step_for(self, fraction: float) -> int:
        """Step index to resume from; tolerant of float error in step/total."""
        step = math.floor(fraction * self.total_steps + 1e-9)
        return min(max(step, 0), self.total_steps)

    def position_at(self, fraction: float) -> GeoPoint:
        return interpolate_along(self.path.waypoints, fraction, POSITION_LABEL)

    def progress_at(self, fraction: float, elapsed_ms: float) -> SimulationProgress:
        elapsed = max(0, int(round(elapsed_ms)))
        return SimulationProgress(
            position=self.position_at(fraction),
            progress_percent=fraction * 100.0,
            elapsed_ms=elapsed,
            remaining_ms=remaining_time_ms(self.estimated_total_ms, elapsed),
        )

    # ------------------------------------------------------------------
    # Tick loop
    # ------------------------------------------------------------------

    def run(
        self,
        start_fraction: float,
        publish: Callable[[SimulationProgress], None],
        cancel: threading.Event,
    ) -> bool:
        """
        Run laps until the route finishes or `cancel` is set.

        Returns True when the run ended on its own (non-repeating route whose
        steps or duration ran out); False when it was cancelled. Nothing is
        published once `cancel` is observed.
        """
        duration_ms = self.route.duration_ms
        fraction = start_fraction

        logger.debug(
            f"Simulating '{self.route.name}': {self.total_steps} steps, "
            f"budget {self.estimated_total_ms} ms, start at {fraction:.3f}"
        )

        while True:
            current_step = self.step_for(fraction)
            start_time = self.now_ms() - fraction * self.estimated_total_ms
            capped = False

            while current_step < self.total_steps:
                if cancel.is_set():
                    return False

                progress = current_step / self.total_steps
                elapsed = self.now_ms() - start_time
                publish(self.progress_at(progress, elapsed))

                # duration limit reached
                if duration_ms > 0 and elapsed >= duration_ms:
                    capped = True
                    break

                if self.wait(cancel, self.policy.tick_interval_s):
                    return False
                current_step += 1

            if cancel.is_set():
                return False

            if not capped:
                #arrival tick: land exactly on the last waypoint at 100%
                publish(self.progress_at(1.0, self.now_ms() - start_time))

            if not self.route.repeating:
                return True

            logger.info(f"Lap of '{self.route.name}' finished, repeating")
            if self.wait(cancel, self.policy.repeat_pause_ms / 1000.0):
                return False
            fraction = 0.0

"""
Purpose: Public command surface and state owner for route simulation (the "glue").
What it does:
Accepts a validated Route, resolves its path through the RoutingProvider,
runs the RouteSimulator on a single background worker and republishes
state/route/progress/position as observable values.

Commands (all idempotent; no-ops when inapplicable, never errors):
- start(route): any -> RUNNING (cancels any existing run)
- pause():      RUNNING -> PAUSED
- resume():     PAUSED -> RUNNING, from the last published progress fraction
- stop():       any -> STOPPED, clears route/progress/position

Natural completion is engine-driven RUNNING -> STOPPED with the same clearing as stop().
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Dict, Optional, Tuple

from routing.models import GeoPoint, RoutePath, Waypoint
from routing.route_service import RoutingProvider
from .models import NavigationSnapshot, NavigationState, Route, SimulationProgress
from .observable import ObservableValue
from .policy import SimulationPolicy, default_simulation_policy
from .simulator import Clock, RouteSimulator, Waiter, event_wait
from .state_machine import NavigationCommand, next_state

logger = logging.getLogger(__name__)


class NavigationController:
    """
    Owns at most one simulation worker at a time.

    Every run (and every resume) gets a generation number and its own cancel
    event. A worker may only publish while its generation is current and the
    state is RUNNING, so once pause()/stop()/start() returns no tick from the
    superseded loop can be observed.

    Typical lifecycle:
        controller = NavigationController()
        controller.position.subscribe(lambda p: print(p))
        controller.start(validate_route(route))
        ...
        controller.pause(); controller.resume(); controller.stop()
    """

    def __init__(
        self,
        provider: Optional[RoutingProvider] = None,
        policy: Optional[SimulationPolicy] = None,
        clock: Clock = time.monotonic,
        wait: Waiter = event_wait,
    ):
        self.provider = provider or RoutingProvider()
        self.policy = policy or default_simulation_policy()
        self.clock = clock
        self.wait = wait

        # --- Observable surface ---
        self.state: ObservableValue[NavigationState] = ObservableValue(NavigationState.STOPPED, "state")
        self.route: ObservableValue[Optional[Route]] = ObservableValue(None, "route")
        self.progress: ObservableValue[Optional[SimulationProgress]] = ObservableValue(None, "progress")
        self.position: ObservableValue[Optional[GeoPoint]] = ObservableValue(None, "position")
        self.route_waypoints: ObservableValue[Tuple[Waypoint, ...]] = ObservableValue((), "route_waypoints")

        # --- Run bookkeeping (guarded by _lock) ---
        self._lock = threading.RLock()
        self._generation = 0
        self._cancel: Optional[threading.Event] = None
        self._worker: Optional[threading.Thread] = None
        self._simulator: Optional[RouteSimulator] = None
        self._resume_fraction = 0.0

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def start(self, route: Route) -> None:
        with self._lock:
            previous = self._cancel_worker()
            target = next_state(self.state.value, NavigationCommand.START)

            self._generation += 1
            generation = self._generation
            cancel = threading.Event()
            self._cancel = cancel
            self._simulator = None
            self._resume_fraction = 0.0

            self.progress.set(None)
            self.position.set(None)
            self.route_waypoints.set(())
            #route first: RUNNING is never observable with a null route
            self.route.set(route)
            self.state.set(target)
            logger.info(f"Starting navigation for route: {route.name}")

        self._join(previous)

        with self._lock:
            if generation != self._generation:
                return  # superseded while the old worker was exiting
            self._launch(generation, cancel, route, 0.0)

    def pause(self) -> None:
        with self._lock:
            if next_state(self.state.value, NavigationCommand.PAUSE) is None:
                logger.debug(f"pause() ignored in state {self.state.value.name}")
                return

            self._cancel_worker()
            self._generation += 1
            self.state.set(NavigationState.PAUSED)
            logger.info(f"Navigation paused at {self._resume_fraction * 100:.1f}%")

    def resume(self) -> None:
        with self._lock:
            if next_state(self.state.value, NavigationCommand.RESUME) is None:
                logger.debug(f"resume() ignored in state {self.state.value.name}")
                return

            previous = self._worker
            self._generation += 1
            generation = self._generation
            cancel = threading.Event()
            self._cancel = cancel
            route = self.route.value
            fraction = self._resume_fraction
            self.state.set(NavigationState.RUNNING)
            logger.info(f"Navigation resumed at {fraction * 100:.1f}%")

        self._join(previous)

        with self._lock:
            if generation != self._generation:
                return
            self._launch(generation, cancel, route, fraction)

    def stop(self) -> None:
        with self._lock:
            previous = self._cancel_worker()
            self._generation += 1
            if self.state.value is not NavigationState.STOPPED:
                logger.info("Navigation stopped")
            self._clear()

        self._join(previous)

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    def snapshot(self) -> NavigationSnapshot:
        with self._lock:
            return NavigationSnapshot(
                state=self.state.value,
                route=self.route.value,
                progress=self.progress.value,
                position=self.position.value,
                route_waypoints=self.route_waypoints.value,
            )

    @property
    def path(self) -> Optional[RoutePath]:
        with self._lock:
            return self._simulator.path if self._simulator else None

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the current worker to exit. Returns False if it is still alive.
        """
        worker = self._worker
        if worker is None or worker is threading.current_thread():
            return True
        worker.join(timeout)
        return not worker.is_alive()

    # ------------------------------------------------------------------
    # Worker plumbing
    # ------------------------------------------------------------------

    def _launch(self, generation: int, cancel: threading.Event, route: Route, fraction: float) -> None:
        worker = threading.Thread(
            target=self._run,
            args=(generation, cancel, route, fraction, self._simulator),
            name=f"route-sim-{generation}",
        )
        worker.daemon = True
        self._worker = worker
        worker.start()

    def _run(
        self,
        generation: int,
        cancel: threading.Event,
        route: Route,
        fraction: float,
        simulator: Optional[RouteSimulator],
    ) -> None:
        try:
            if simulator is None:
                path = self._resolve(generation, cancel, route)
                if path is None:
                    return  # cancelled while the lookup was in flight
                simulator = RouteSimulator(route, path, self.policy, clock=self.clock, wait=self.wait)
                with self._lock:
                    if generation != self._generation:
                        return
                    self._simulator = simulator
                    self.route_waypoints.set(path.waypoints)

            finished = simulator.run(
                fraction,
                lambda progress: self._publish(generation, progress),
                cancel,
            )
            if finished:
                self._finish(generation, NavigationCommand.COMPLETE)
        except Exception:
            logger.exception(f"Simulation of '{route.name}' failed; stopping")
            self._finish(generation, NavigationCommand.STOP)

    def _resolve(self, generation: int, cancel: threading.Event, route: Route) -> Optional[RoutePath]:
        """
        Run the directions lookup on its own helper thread and wait for it,
        checking `cancel` once per tick. Returns None when cancelled first;
        the late result is dropped when the helper eventually finishes.
        """
        done = threading.Event()
        outcome: Dict[str, Any] = {}

        def lookup() -> None:
            try:
                outcome["path"] = self.provider.resolve_via(
                    route.start, route.end, route.speed_mps, route.waypoints
                )
            except Exception as e:
                outcome["error"] = e
            finally:
                done.set()

        helper = threading.Thread(target=lookup, name=f"route-lookup-{generation}")
        helper.daemon = True
        helper.start()

        while not done.wait(self.policy.tick_interval_s):
            if cancel.is_set():
                break

        if cancel.is_set():
            logger.debug(f"Lookup for '{route.name}' abandoned, run was cancelled")
            return None
        if "error" in outcome:
            raise outcome["error"]
        return outcome["path"]

    def _publish(self, generation: int, progress: SimulationProgress) -> None:
        with self._lock:
            if generation != self._generation or self.state.value is not NavigationState.RUNNING:
                return
            self._resume_fraction = progress.fraction
            self.position.set(progress.position)
            self.progress.set(progress)

    def _finish(self, generation: int, command: NavigationCommand) -> None:
        with self._lock:
            if generation != self._generation:
                return
            if next_state(self.state.value, command) is None:
                return
            if command is NavigationCommand.COMPLETE:
                logger.info("Navigation completed")
            self._generation += 1
            self._cancel_worker()
            self._clear()

    def _cancel_worker(self) -> Optional[threading.Thread]:
        if self._cancel is not None:
            self._cancel.set()
        return self._worker

    def _clear(self) -> None:
        #state first: RUNNING is never observable with a null route
        self.state.set(NavigationState.STOPPED)
        self.route.set(None)
        self.progress.set(None)
        self.position.set(None)
        self.route_waypoints.set(())
        self._simulator = None
        self._resume_fraction = 0.0

    def _join(self, worker: Optional[threading.Thread]) -> None:
        if worker is None or worker is threading.current_thread():
            return
        worker.join(self.policy.join_timeout_s)
        if worker.is_alive():
            logger.warning(f"Worker {worker.name} did not exit within {self.policy.join_timeout_s}s")

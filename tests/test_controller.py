import logging
import threading
import time
from unittest.mock import MagicMock

import pytest

from navigation.controller import NavigationController
from navigation.models import NavigationState, Route
from routing.models import GeoPoint
from routing.route_service import RoutingProvider, straight_line_path


def _progress_log(controller):
    """Subscribe and return the list every non-null progress tick lands in."""
    ticks = []
    controller.progress.subscribe(lambda p: p is not None and ticks.append(p))
    return ticks


def test_initial_state_is_stopped(controller):
    snapshot = controller.snapshot()

    assert snapshot.state is NavigationState.STOPPED
    assert snapshot.route is None
    assert snapshot.progress is None
    assert snapshot.position is None
    assert snapshot.route_waypoints == ()
    assert snapshot.is_active is False


def test_end_to_end_fallback_run_completes(controller, equator_points):
    """
    (0,0) -> (0,1) at 1000 m/s on the straight-line fallback: 2223 steps,
    progress reaches 100% and the engine stops itself.
    """
    start, end = equator_points
    route = Route.new(start, end, speed_mps=1000.0, name="Equator")
    ticks = _progress_log(controller)
    waypoint_updates = []
    controller.route_waypoints.subscribe(waypoint_updates.append)

    controller.start(route)
    assert controller.join(timeout=10)

    assert controller.state.value is NavigationState.STOPPED
    assert controller.route.value is None
    assert controller.progress.value is None
    assert controller.position.value is None
    assert controller.route_waypoints.value == ()

    assert len(ticks) == 2223 + 1
    assert ticks[-1].progress_percent == 100.0
    assert (ticks[-1].position.latitude, ticks[-1].position.longitude) == (0.0, 1.0)
    # the resolved path was published before being cleared
    assert len(waypoint_updates[0]) == 2


def test_running_is_never_observed_without_route(controller, equator_points):
    start, end = equator_points
    violations = []

    def check(state):
        if state is NavigationState.RUNNING and controller.route.value is None:
            violations.append(state)

    controller.state.subscribe(check)

    controller.start(Route.new(start, end, speed_mps=1000.0))
    controller.join(timeout=10)
    controller.start(Route.new(start, end, speed_mps=2000.0))
    controller.stop()

    assert violations == []


def test_duration_limit_stops_run(controller):
    route = Route.new(GeoPoint(0.0, 0.0), GeoPoint(0.0, 0.01), speed_mps=1.0, duration_ms=5000)
    ticks = _progress_log(controller)

    controller.start(route)
    assert controller.join(timeout=10)

    assert controller.state.value is NavigationState.STOPPED
    assert 5000 <= ticks[-1].elapsed_ms <= 5050
    assert ticks[-1].remaining_ms == 0


def test_pause_freezes_and_resume_continues(controller, equator_points):
    start, end = equator_points
    route = Route.new(start, end, speed_mps=1000.0)
    ticks = _progress_log(controller)
    paused_at = []

    def pause_halfway(progress):
        if progress is not None and progress.progress_percent >= 50.0 and not paused_at:
            paused_at.append(progress)
            controller.pause()

    controller.progress.subscribe(pause_halfway)

    controller.start(route)
    assert controller.join(timeout=10)

    # paused: no further ticks, state and last values retained
    snapshot = controller.snapshot()
    assert snapshot.state is NavigationState.PAUSED
    assert snapshot.route == route
    assert snapshot.progress == paused_at[0]
    assert snapshot.position == paused_at[0].position
    assert ticks[-1] == paused_at[0]
    count_at_pause = len(ticks)

    controller.resume()
    assert controller.join(timeout=10)

    resumed = ticks[count_at_pause:]
    assert resumed[0].progress_percent == pytest.approx(paused_at[0].progress_percent)
    assert resumed[0].position == paused_at[0].position
    assert resumed[-1].progress_percent == 100.0
    assert controller.state.value is NavigationState.STOPPED


def test_stop_mid_run_clears_everything(controller, equator_points):
    start, end = equator_points
    ticks = _progress_log(controller)

    def stop_at_quarter(progress):
        if progress is not None and progress.progress_percent >= 25.0:
            controller.stop()

    controller.progress.subscribe(stop_at_quarter)

    controller.start(Route.new(start, end, speed_mps=1000.0))
    assert controller.join(timeout=10)

    snapshot = controller.snapshot()
    assert snapshot.state is NavigationState.STOPPED
    assert snapshot.route is None
    assert snapshot.progress is None
    assert snapshot.position is None
    assert max(t.progress_percent for t in ticks) < 26.0


def test_commands_in_inapplicable_states_are_no_ops(controller, equator_points):
    controller.pause()
    controller.resume()
    controller.stop()
    controller.stop()
    assert controller.state.value is NavigationState.STOPPED

    start, end = equator_points
    seen = []

    def resume_while_running(progress):
        if progress is not None and not seen:
            seen.append(controller.state.value)
            controller.resume()
            seen.append(controller.state.value)

    controller.progress.subscribe(resume_while_running)
    controller.start(Route.new(start, end, speed_mps=1000.0))
    controller.join(timeout=10)

    assert seen == [NavigationState.RUNNING, NavigationState.RUNNING]


def test_repeating_route_loops_until_stopped(controller):
    route = Route.new(GeoPoint(0.0, 0.0), GeoPoint(0.0, 0.001), speed_mps=5.0, repeating=True)
    ticks = _progress_log(controller)
    wraps = []

    def stop_after_second_lap_starts(progress):
        if progress is None or len(ticks) < 2:
            return
        if ticks[-2].progress_percent == 100.0 and progress.progress_percent == 0.0:
            wraps.append(len(ticks))
            if len(wraps) == 2:
                controller.stop()

    controller.progress.subscribe(stop_after_second_lap_starts)

    controller.start(route)
    assert controller.join(timeout=10)

    assert len(wraps) == 2
    assert controller.state.value is NavigationState.STOPPED


def test_start_while_running_replaces_route(controller, equator_points):
    start, end = equator_points
    first = Route.new(start, end, speed_mps=1000.0, name="first")
    second = Route.new(end, start, speed_mps=2000.0, name="second")
    seen = []

    def switch_at_tenth(progress):
        if progress is None:
            return
        route = controller.route.value
        seen.append(route.name if route else None)
        if route is first and progress.progress_percent >= 10.0:
            controller.start(second)

    controller.progress.subscribe(switch_at_tenth)

    controller.start(first)
    # the first worker exits as soon as it is replaced, so wait on the state
    assert controller.state.wait_for(lambda s: s is NavigationState.STOPPED, timeout=10)
    assert controller.join(timeout=10)

    assert "second" in seen
    switch = seen.index("second")
    assert set(seen[switch:]) == {"second"}
    assert controller.state.value is NavigationState.STOPPED


def test_caller_waypoints_skip_lookup_and_are_published(clock):
    provider = RoutingProvider(use_network=False)
    provider.resolve = MagicMock(side_effect=AssertionError("lookup should not run"))
    controller = NavigationController(provider=provider, clock=clock, wait=clock.wait)
    updates = []
    controller.route_waypoints.subscribe(updates.append)

    route = Route.new(
        GeoPoint(0.0, 0.0), GeoPoint(0.0, 0.01), speed_mps=50.0,
        waypoints=[GeoPoint(0.002, 0.003), GeoPoint(0.001, 0.007)],
    )
    controller.start(route)
    assert controller.join(timeout=10)

    assert len(updates[0]) == 4
    assert controller.state.value is NavigationState.STOPPED


def test_unexpected_error_stops_run_and_is_logged(clock, equator_points, caplog):
    provider = MagicMock(spec=RoutingProvider)
    provider.resolve_via.side_effect = RuntimeError("boom")
    controller = NavigationController(provider=provider, clock=clock, wait=clock.wait)
    start, end = equator_points

    with caplog.at_level(logging.ERROR, logger="navigation.controller"):
        controller.start(Route.new(start, end, speed_mps=10.0))
        assert controller.join(timeout=10)

    assert controller.state.value is NavigationState.STOPPED
    assert controller.route.value is None
    assert "failed" in caplog.text


def test_failing_observer_does_not_break_run(controller, equator_points):
    start, end = equator_points

    def broken(progress):
        raise RuntimeError("observer crashed")

    controller.progress.subscribe(broken)
    ticks = _progress_log(controller)

    controller.start(Route.new(start, end, speed_mps=1000.0))
    assert controller.join(timeout=10)

    assert ticks[-1].progress_percent == 100.0
    assert controller.state.value is NavigationState.STOPPED


class GatedProvider:
    """Routing provider whose lookup blocks until released, like a slow directions call."""

    def __init__(self):
        self.entered = threading.Event()
        self.release = threading.Event()

    def resolve_via(self, start, end, speed_mps, via=()):
        self.entered.set()
        self.release.wait(10)
        return straight_line_path(start, end)


def _live_sim_workers():
    return [t.name for t in threading.enumerate() if t.name.startswith("route-sim-")]


def test_stop_during_slow_lookup_returns_promptly(clock, equator_points, caplog):
    provider = GatedProvider()
    controller = NavigationController(provider=provider, clock=clock, wait=clock.wait)
    start, end = equator_points
    route = Route.new(start, end, speed_mps=1000.0)
    ticks = _progress_log(controller)

    try:
        controller.start(route)
        assert provider.entered.wait(5)

        began = time.monotonic()
        controller.stop()
        assert time.monotonic() - began < 0.5
        assert "did not exit" not in caplog.text

        provider.entered.clear()
        controller.start(route)
        assert provider.entered.wait(5)
        assert len(_live_sim_workers()) == 1

        # both lookups finish now; only the current run may publish
        provider.release.set()
        assert controller.state.wait_for(lambda s: s is NavigationState.STOPPED, timeout=10)
        assert controller.join(timeout=10)
        assert len(ticks) == 2223 + 1
    finally:
        provider.release.set()
        controller.stop()


def test_commands_from_another_thread_silence_the_loop(offline_provider):
    # real clock and real cancellable sleep: ~22,000 ticks of 50 ms
    controller = NavigationController(provider=offline_provider)
    route = Route.new(GeoPoint(0.0, 0.0), GeoPoint(0.0, 0.01), speed_mps=1.0)
    ticks = _progress_log(controller)

    try:
        controller.start(route)
        assert controller.progress.wait_for(lambda p: p is not None and p.progress_percent > 0, timeout=5)

        controller.pause()
        count_at_pause = len(ticks)
        paused_percent = ticks[-1].progress_percent
        assert controller.join(timeout=0.2)
        time.sleep(0.2)
        assert len(ticks) == count_at_pause
        assert controller.state.value is NavigationState.PAUSED

        controller.resume()
        assert controller.progress.wait_for(
            lambda p: p is not None and p.progress_percent > paused_percent, timeout=5
        )

        began = time.monotonic()
        controller.stop()
        count_at_stop = len(ticks)
        assert time.monotonic() - began < 0.2
        assert controller.join(timeout=0.2)
        time.sleep(0.2)
        assert len(ticks) == count_at_stop
        assert controller.progress.value is None
        assert controller.state.value is NavigationState.STOPPED
    finally:
        controller.stop()

import threading

import pytest

from navigation.controller import NavigationController
from routing.models import GeoPoint
from routing.route_service import RoutingProvider


class FakeClock:
    """
    Virtual monotonic clock. Waiting advances virtual time instead of sleeping,
    so thousands of ticks run instantly and elapsed times are exact multiples
    of the tick interval.
    """
    def __init__(self):
        self._ms = 0
        self._lock = threading.Lock()

    def __call__(self) -> float:
        with self._lock:
            return self._ms / 1000.0

    @property
    def ms(self) -> int:
        with self._lock:
            return self._ms

    def wait(self, cancel: threading.Event, seconds: float) -> bool:
        if cancel.is_set():
            return True
        with self._lock:
            self._ms += int(round(seconds * 1000))
        return cancel.is_set()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def offline_provider():
    # never touches the network: always the straight-line path
    return RoutingProvider(use_network=False)


@pytest.fixture
def controller(clock, offline_provider):
    controller = NavigationController(provider=offline_provider, clock=clock, wait=clock.wait)
    yield controller
    controller.stop()


@pytest.fixture
def equator_points():
    # one degree of longitude on the equator, ~111,195 m
    return GeoPoint(0.0, 0.0, "Start"), GeoPoint(0.0, 1.0, "End")

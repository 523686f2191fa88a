"""
Purpose: Domain models for the navigation (route simulation) capability.
What it does:
- Defines core data structures:
- Route (id, name, start/end GeoPoint, optional waypoints, repeating, speed, duration)
- SimulationProgress (position, progress %, elapsed, remaining)

Defines enums/constants:
- NavigationState = STOPPED | RUNNING | PAUSED
- NavigationSpeed presets (walking .. driving fast, custom)

Rule: No threads, no HTTP. Models only.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence, Tuple, Union
import time

from routing.models import GeoPoint, Waypoint


class NavigationState(str, Enum):
    """
    STOPPED is both the initial state and the terminal state of every run.
    RUNNING and PAUSED only exist while a route is loaded.
    """
    STOPPED = "STOPPED"
    RUNNING = "RUNNING"
    PAUSED = "PAUSED"


class NavigationSpeed(Enum):
    WALKING = (1.4, "Walking (5 km/h)")
    CYCLING = (5.6, "Cycling (20 km/h)")
    DRIVING_SLOW = (13.9, "Driving Slow (50 km/h)")
    DRIVING_NORMAL = (22.2, "Driving Normal (80 km/h)")
    DRIVING_FAST = (33.3, "Driving Fast (120 km/h)")
    CUSTOM = (5.0, "Custom")

    @property
    def mps(self) -> float:
        return self.value[0]

    @property
    def display_name(self) -> str:
        return self.value[1]

    @classmethod
    def from_display_name(cls, name: str) -> NavigationSpeed:
        for speed in cls:
            if speed.display_name == name:
                return speed
        raise ValueError(f"Unknown speed preset: {name}")


def _now_millis() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class Route:
    """
    What the caller asks the engine to replay.

    Immutable: the controller tracks whether a route is active in its own
    state instead of flipping a flag on the caller's copy.
    """
    name: str
    start: GeoPoint
    end: GeoPoint
    speed_mps: float = NavigationSpeed.CUSTOM.mps
    duration_ms: int = 0 # 0 means no time limit
    repeating: bool = False
    waypoints: Tuple[GeoPoint, ...] = ()
    id: int = field(default_factory=_now_millis)

    def __post_init__(self) -> None:
        object.__setattr__(self, "waypoints", tuple(self.waypoints))

    @property
    def has_duration_limit(self) -> bool:
        return self.duration_ms > 0

    @classmethod
    def new(
        cls,
        start: GeoPoint,
        end: GeoPoint,
        speed_mps: Union[float, NavigationSpeed] = NavigationSpeed.WALKING,
        duration_ms: int = 0,
        repeating: bool = False,
        name: Optional[str] = None,
        waypoints: Sequence[GeoPoint] = (),
    ) -> Route:
        if isinstance(speed_mps, NavigationSpeed):
            speed_mps = speed_mps.mps

        return cls(
            name=name or "Auto Route",
            start=start,
            end=end,
            speed_mps=float(speed_mps),
            duration_ms=int(duration_ms),
            repeating=repeating,
            waypoints=tuple(waypoints),
        )

    @staticmethod
    def duration_from(minutes: int = 0, seconds: int = 0) -> int:
        """Minutes + seconds as the millisecond duration a Route expects."""
        return (minutes * 60 + seconds) * 1000


@dataclass(frozen=True)
class SimulationProgress:
    """
    One tick of the simulation. Superseded by the next tick; no history kept.
    """
    position: GeoPoint
    progress_percent: float # 0..100
    elapsed_ms: int
    remaining_ms: int

    @property
    def fraction(self) -> float:
        return self.progress_percent / 100.0


@dataclass(frozen=True)
class NavigationSnapshot:
    """
    Consistent read of every observable, taken under the controller lock.
    """
    state: NavigationState
    route: Optional[Route]
    progress: Optional[SimulationProgress]
    position: Optional[GeoPoint]
    route_waypoints: Tuple[Waypoint, ...] = ()

    @property
    def is_active(self) -> bool:
        return self.state is not NavigationState.STOPPED

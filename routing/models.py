"""
Purpose: Core data models for the routing domain.
What it does:
Defines the geographic value types shared by the routing service and the
simulation engine:
- GeoPoint (latitude, longitude, label)
- Waypoint (latitude, longitude) for raw routing-path vertices
- RoutePath (ordered waypoints + distance/duration summary)

Rule: No HTTP calls, no simulation logic. Models only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True)
class GeoPoint:
    """
    Immutable geographic point in decimal degrees.
    """
    latitude: float
    longitude: float
    label: str = ""

    @property
    def coordinates(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)


@dataclass(frozen=True)
class Waypoint:
    """
    A single vertex of a routing path (no label).
    """
    latitude: float
    longitude: float

    @classmethod
    def from_point(cls, point: GeoPoint) -> Waypoint:
        return cls(latitude=point.latitude, longitude=point.longitude)

    def to_point(self, label: str = "") -> GeoPoint:
        return GeoPoint(self.latitude, self.longitude, label)


@dataclass(frozen=True)
class RoutePath:
    """
    Output of the routing provider: what the simulator walks along.

    waypoints are ordered from start to end. A path always carries at least
    two waypoints; a stationary route repeats the same point twice.
    """
    waypoints: Tuple[Waypoint, ...]
    total_distance_m: float
    total_duration_s: float

    #true when the path came from the straight-line fallback, not the directions service
    is_fallback: bool = field(default=False, compare=False)

    def __post_init__(self) -> None:
        #accept any sequence but store an immutable tuple
        object.__setattr__(self, "waypoints", tuple(self.waypoints))
        if len(self.waypoints) < 2:
            raise ValueError("A RoutePath needs at least two waypoints.")

    @property
    def is_road_following(self) -> bool:
        return len(self.waypoints) > 2

    @property
    def start(self) -> Waypoint:
        return self.waypoints[0]

    @property
    def end(self) -> Waypoint:
        return self.waypoints[-1]

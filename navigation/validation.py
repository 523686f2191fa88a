#Purpose: Input validation for routes before they reach the controller.
#The engine assumes a pre-validated Route and never re-checks:
#latitude in [-90, 90], longitude in [-180, 180]
#speed > 0
#duration >= 0 (0 = unbounded)

from __future__ import annotations

import math

from routing.models import GeoPoint
from .models import Route


class RouteValidationError(ValueError):
    """Raised when a route or point is rejected before start()."""
    pass


def validate_point(point: GeoPoint, name: str = "point") -> None:
    lat, lon = point.latitude, point.longitude

    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise RouteValidationError(f"Invalid coordinates for {name}: ({lat}, {lon})")

    if lat < -90 or lat > 90:
        raise RouteValidationError(f"Latitude of {name} out of range [-90, 90]: {lat}")

    if lon < -180 or lon > 180:
        raise RouteValidationError(f"Longitude of {name} out of range [-180, 180]: {lon}")


def validate_route(route: Route) -> Route:
    """
    Reject a route the simulator cannot replay. Returns the route unchanged
    so callers can chain it into start().
    """
    validate_point(route.start, "start")
    validate_point(route.end, "end")
    for index, waypoint in enumerate(route.waypoints):
        validate_point(waypoint, f"waypoint {index}")

    if not math.isfinite(route.speed_mps) or route.speed_mps <= 0:
        raise RouteValidationError(f"Speed must be > 0 m/s, got {route.speed_mps}")

    if route.duration_ms < 0:
        raise RouteValidationError(f"Duration must be >= 0 ms, got {route.duration_ms}")

    return route

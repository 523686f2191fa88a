#Purpose: Route resolution for the simulation engine.
#Returns the waypoint path needed by:
#the route simulator (positions to walk along)
#map display / polyline geometry
#Uses the ORS directions lookup primarily, straight line as the fallback.
#It's the "I need an actual route" module; it never raises to its caller.

from __future__ import annotations

import logging
from typing import Optional, Sequence

from .geo import haversine_distance, path_length
from .models import GeoPoint, RoutePath, Waypoint
from .ors_client import ORSClient, ORSError

logger = logging.getLogger(__name__)

#reference speed for fallback duration estimates (~50 km/h)
FALLBACK_SPEED_MPS = 13.89

WALKING_MAX_SPEED_MPS = 2.0
CYCLING_MAX_SPEED_MPS = 8.0


def profile_for_speed(speed_mps: float) -> str:
    """
    Routing profile hint derived from the simulated speed.
    Advisory only: it is passed to the directions lookup and nothing else.
    """
    if speed_mps <= WALKING_MAX_SPEED_MPS:
        return "foot-walking"
    if speed_mps <= CYCLING_MAX_SPEED_MPS:
        return "cycling-regular"
    return "driving-car"


def straight_line_path(start: GeoPoint, end: GeoPoint) -> RoutePath:
    """
    Deterministic 2-point path used whenever the lookup is unavailable.
    """
    distance = haversine_distance(start, end)
    return RoutePath(
        waypoints=[Waypoint.from_point(start), Waypoint.from_point(end)],
        total_distance_m=distance,
        total_duration_s=distance / FALLBACK_SPEED_MPS,
        is_fallback=True,
    )


def waypoint_path(points: Sequence[GeoPoint], speed_mps: float) -> RoutePath:
    """
    Path through caller-supplied points (start, intermediates, end), no lookup.
    Duration assumes the simulated speed.
    """
    waypoints = [Waypoint.from_point(point) for point in points]
    distance = path_length(waypoints)
    return RoutePath(
        waypoints=waypoints,
        total_distance_m=distance,
        total_duration_s=distance / speed_mps,
    )


def default_client() -> Optional[ORSClient]:
    """
    Build an ORSClient from the environment, or None when no API key is configured.
    """
    try:
        return ORSClient()
    except ValueError as e:
        logger.info(f"Directions lookup disabled: {e}")
        return None


class RoutingProvider:
    """
    Resolves a start/end pair into a RoutePath.

    Tries the directions client once; any ORSError (network, timeout,
    HTTP status, malformed or empty response) degrades to the straight-line
    path. The fallback itself cannot fail.
    """

    def __init__(self, client: Optional[ORSClient] = None, use_network: bool = True):
        if client is None and use_network:
            client = default_client()
        self.client = client

    def resolve(self, start: GeoPoint, end: GeoPoint, speed_mps: float) -> RoutePath:
        profile = profile_for_speed(speed_mps)

        if self.client is None:
            logger.debug("No directions client configured, using straight line")
            return straight_line_path(start, end)

        try:
            path = self.client.compute_route(start.coordinates, end.coordinates, profile=profile)
        except ORSError as e:
            logger.warning(f"Routing lookup failed ({e}); using straight-line fallback")
            return straight_line_path(start, end)

        logger.info(
            f"Resolved {profile} route with {len(path.waypoints)} waypoints, "
            f"{path.total_distance_m:.0f} m"
        )
        return path

    def resolve_via(self, start: GeoPoint, end: GeoPoint, speed_mps: float,
                    via: Sequence[GeoPoint] = ()) -> RoutePath:
        """
        Like resolve(), but when intermediate points are given the path is
        taken from them as-is and no lookup is made.
        """
        if via:
            return waypoint_path([start, *via, end], speed_mps)
        return self.resolve(start, end, speed_mps)

#Purpose: Pure geographic helper functions.
#Distance (Haversine) and straight-line interpolation on lat/lon.
#No side effects, no HTTP, no state.
#Anything with .latitude/.longitude (GeoPoint, Waypoint) is accepted, see LatLonLike.

from __future__ import annotations

import math
from typing import List, Protocol, Sequence

from .models import GeoPoint

EARTH_RADIUS_M = 6_371_000.0


class LatLonLike(Protocol):
    @property
    def latitude(self) -> float: ...

    @property
    def longitude(self) -> float: ...


def haversine_distance(a: LatLonLike, b: LatLonLike) -> float:
    """
    Great-circle distance between two points in metres.

    Symmetric in its arguments and exactly 0.0 for identical points.
    """
    lat1, lon1 = a.latitude, a.longitude
    lat2, lon2 = b.latitude, b.longitude

    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def lerp(a: LatLonLike, b: LatLonLike, t: float, label: str = "") -> GeoPoint:
    """
    Component-wise linear interpolation of latitude/longitude.

    Not a geodesic slerp. t=0 and t=1 return the endpoint coordinates
    exactly, and a stationary segment (a == b) never drifts.
    """
    if t >= 1.0:
        return GeoPoint(b.latitude, b.longitude, label)
    latitude = a.latitude + (b.latitude - a.latitude) * t
    longitude = a.longitude + (b.longitude - a.longitude) * t
    return GeoPoint(latitude, longitude, label)


def segment_distances(points: Sequence[LatLonLike]) -> List[float]:
    """Haversine length of each consecutive segment of a polyline."""
    return [
        haversine_distance(points[i], points[i + 1])
        for i in range(len(points) - 1)
    ]


def path_length(points: Sequence[LatLonLike]) -> float:
    """Total Haversine length of a polyline (0.0 for fewer than two points)."""
    return sum(segment_distances(points))


def interpolate_along(points: Sequence[LatLonLike], progress: float, label: str = "") -> GeoPoint:
    """
    Position at `progress` (fraction of total length) along a polyline.

    Walks the segments accumulating distance until the target distance is
    reached, then interpolates inside that segment. Zero-length segments
    resolve to their first vertex.
    """
    if len(points) < 2:
        only = points[0]
        return GeoPoint(only.latitude, only.longitude, label)

    if len(points) == 2:
        return lerp(points[0], points[1], progress, label)

    if progress >= 1.0:
        last = points[-1]
        return GeoPoint(last.latitude, last.longitude, label)

    distances = segment_distances(points)
    target = sum(distances) * progress
    accumulated = 0.0

    for index, segment in enumerate(distances):
        if accumulated + segment >= target:
            local = (target - accumulated) / segment if segment > 0 else 0.0
            return lerp(points[index], points[index + 1], local, label)
        accumulated += segment

    #float drift past the last segment: clamp onto the final vertex
    last = points[-1]
    return GeoPoint(last.latitude, last.longitude, label)

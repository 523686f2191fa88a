#Marks routing as a package.
#Re-exports the public API (models, geo math, ORSClient, RoutingProvider,
#eta helpers) so other modules import from routing without knowing internal file names.
#No business logic.

from .models import GeoPoint, Waypoint, RoutePath
from .geo import haversine_distance, lerp, path_length, interpolate_along
from .ors_client import ORSClient, ORSError
from .route_service import RoutingProvider, profile_for_speed, straight_line_path, waypoint_path
from .eta_service import estimated_total_time_ms, remaining_time_ms, format_duration

__all__ = [
           "GeoPoint",
           "Waypoint",
           "RoutePath",
           "haversine_distance",
           "lerp",
           "path_length",
           "interpolate_along",
           "ORSClient",
           "ORSError",
           "RoutingProvider",
           "profile_for_speed",
           "straight_line_path",
           "waypoint_path",
           "estimated_total_time_ms",
           "remaining_time_ms",
           "format_duration",
           ]

#Purpose: The OpenRouteService "adapter/client".
#Sole responsibility: talk to the directions service via HTTP and return normalized outputs.
#Encapsulates ORS-specific details:
#coordinate formatting (lon,lat)
#URL construction (/v2/directions/{profile})
#timeouts and error normalization (everything becomes ORSError)
#parsing the GeoJSON response into a RoutePath
#It should not contain fallback rules or simulation logic.


from dotenv import load_dotenv
import logging
import os
from typing import Any, Dict, List, Optional, Tuple

import requests

from .models import RoutePath, Waypoint

# Read ORS settings from environment
# Example in .env:
# ORS_BASE_URL=https://api.openrouteservice.org/v2/directions
# ORS_API_KEY=<your key>
# ORS_TIMEOUT=10
load_dotenv()
BASE_URL = os.getenv("ORS_BASE_URL", "https://api.openrouteservice.org/v2/directions")
API_KEY = os.getenv("ORS_API_KEY")
TIMEOUT = float(os.getenv("ORS_TIMEOUT", "10"))

PROFILES = ("foot-walking", "cycling-regular", "driving-car")

logger = logging.getLogger(__name__)

# Internal coordinate type: (lat, lon)
LatLon = Tuple[float, float]


class ORSError(Exception):
    """Custom exception for directions lookup errors."""
    pass


class ORSClient:
    """
    OpenRouteService Adapter / Client

    Sole responsibility:
    - Talk to ORS via HTTP
    - Convert internal (lat, lon) -> ORS (lon,lat)
    - Return a normalized RoutePath or raise ORSError

    """
    def __init__(self,
                 api_key: Optional[str] = None,
                 base_url: Optional[str] = None,
                 timeout: Optional[float] = None):
        self.api_key = api_key or API_KEY
        self.base_url = (base_url or BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else TIMEOUT #seconds to wait for ORS before giving up

        if not self.api_key:
            raise ValueError("ORS API key not set. Please set ORS_API_KEY in the .env file.")

    #----------------
    # Internal helpers
    #----------------
    def format_coordinate(self, coordinate: LatLon) -> str:
        """Convert (lat, lon) to ORS format 'lon,lat'"""
        lat, lon = coordinate
        return f"{lon},{lat}"

    def parse_route(self, data: Dict[str, Any]) -> RoutePath:
        """
        Parse an ORS GeoJSON FeatureCollection into a RoutePath.

        Expected shape:
            {"features": [{"geometry": {"coordinates": [[lon, lat], ...]},
                           "properties": {"summary": {"distance": m, "duration": s}}}]}
        """
        try:
            features = data["features"]
            if not features:
                raise ORSError("ORS returned no routes.")

            feature = features[0] #take the first route (ORS may return alternatives)
            coordinates = feature["geometry"]["coordinates"]
            summary = feature["properties"]["summary"]

            waypoints: List[Waypoint] = [
                Waypoint(latitude=float(coord[1]), longitude=float(coord[0]))
                for coord in coordinates
            ]
            #ORS omits distance/duration for zero-length routes
            distance = float(summary.get("distance", 0.0))
            duration = float(summary.get("duration", 0.0))
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise ORSError(f"Malformed ORS response: {e}") from e

        if len(waypoints) < 2:
            raise ORSError(f"ORS returned {len(waypoints)} coordinates, need at least 2.")

        return RoutePath(
            waypoints=waypoints,
            total_distance_m=distance,
            total_duration_s=duration,
        )

    #----------------
    # Public methods
    #----------------
    def compute_route(self, start: LatLon, end: LatLon, profile: str = "driving-car") -> RoutePath:
        """
        calls the ORS /directions endpoint with the two endpoints and
        returns the road-following path with its distance/duration summary.

        Raises ORSError on any transport, status or format failure.
        """
        if profile not in PROFILES:
            raise ValueError(f"Unknown routing profile: {profile}")

        url = f"{self.base_url}/{profile}"
        params = {
            "api_key": self.api_key,
            "start": self.format_coordinate(start),
            "end": self.format_coordinate(end),
        }
        logger.debug(f"Requesting route {start} -> {end} ({profile}) from {url}")

        try:
            response = requests.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise ORSError(f"ORS request failed: {e}") from e

        if response.status_code != 200:
            raise ORSError(f"ORS error: HTTP {response.status_code} - {response.text[:200]}")

        try:
            data = response.json()
        except ValueError as e:
            raise ORSError(f"ORS returned invalid JSON: {e}") from e

        path = self.parse_route(data)
        logger.debug(f"Parsed ORS route with {len(path.waypoints)} waypoints")
        return path

# core/proximity.py

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from urllib.parse import urlencode

from core.config import DEFAULT_PROPERTY
from core.models import GeoPoint, PropertyConfig, ProximityResult

EARTH_RADIUS_MILES = 3958.7613
DIRECTIONS_BASE = "https://api.mapbox.com/directions/v5/mapbox"


def empty_route() -> dict:
    """Geometry handed to the map when no route is available (no line drawn)."""
    return {"type": "LineString", "coordinates": []}


def distance(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle (haversine) distance between two points, in miles."""
    lat1, lat2 = math.radians(a.lat), math.radians(b.lat)
    d_lat = math.radians(b.lat - a.lat)
    d_lon = math.radians(b.lon - a.lon)
    s = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    # rounding can push s just outside [0, 1] for near-antipodal points
    s = min(max(s, 0.0), 1.0)
    c = 2 * math.atan2(math.sqrt(s), math.sqrt(1 - s))
    return EARTH_RADIUS_MILES * c


def format_distance(miles: float) -> str:
    if miles < 0.1:
        return "<0.1 mi"
    # ties on the exact binary value round up (0.25 -> 0.3), not half-to-even
    rounded = Decimal(miles).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return f"{rounded} mi"


@dataclass(frozen=True)
class RouteRequest:
    origin: GeoPoint
    destination: GeoPoint
    profile: str = "driving"

    def url(self, access_token: str | None = None) -> str:
        coords = ";".join(
            f"{p.lon},{p.lat}" for p in (self.origin, self.destination)
        )
        params = {"alternatives": "false", "overview": "full", "geometries": "geojson"}
        if access_token:
            params["access_token"] = access_token
        return f"{DIRECTIONS_BASE}/{self.profile}/{coords}?{urlencode(params)}"


def build_route_request(a: GeoPoint, b: GeoPoint) -> RouteRequest:
    return RouteRequest(origin=a, destination=b)


def route_geometry(payload) -> dict:
    """
    Pull `routes[0].geometry` out of a directions response. Anything that
    does not look like a route yields the empty LineString.
    """
    try:
        geometry = payload["routes"][0]["geometry"]
    except (KeyError, IndexError, TypeError):
        return empty_route()
    if not isinstance(geometry, dict):
        return empty_route()
    return geometry


class ProximityCalculator:
    def __init__(self, prop: PropertyConfig = DEFAULT_PROPERTY):
        self.property = prop

    def proximity(self) -> ProximityResult:
        miles = distance(self.property.location, self.property.beach_access)
        return ProximityResult(distance_miles=miles, formatted_label=format_distance(miles))

    def route_request(self) -> RouteRequest:
        return build_route_request(self.property.location, self.property.beach_access)

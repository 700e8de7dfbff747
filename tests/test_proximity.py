# tests/test_proximity.py

import math

import pytest

from core.config import DEFAULT_PROPERTY
from core.models import GeoPoint
from core.proximity import (
    EARTH_RADIUS_MILES,
    ProximityCalculator,
    build_route_request,
    distance,
    empty_route,
    format_distance,
    route_geometry,
)


def _north_of(p: GeoPoint, miles: float) -> GeoPoint:
    return GeoPoint(p.lon, p.lat + math.degrees(miles / EARTH_RADIUS_MILES))


def test_distance_same_point_is_zero():
    p = GeoPoint(-86.0, 30.0)
    assert distance(p, p) == 0.0


def test_distance_along_meridian():
    a = GeoPoint(-86.0, 30.0)
    b = _north_of(a, 1.27)
    assert distance(a, b) == pytest.approx(1.27, rel=1e-9)
    assert format_distance(distance(a, b)) == "1.3 mi"


def test_short_distance_formats_below_threshold():
    a = GeoPoint(-86.0, 30.0)
    b = _north_of(a, 0.05)
    assert distance(a, b) == pytest.approx(0.05, rel=1e-9)
    assert format_distance(distance(a, b)) == "<0.1 mi"


def test_distance_is_symmetric():
    a, b = GeoPoint(2.35, 48.85), GeoPoint(-0.13, 51.51)
    assert distance(a, b) == pytest.approx(distance(b, a))
    # Paris -> London, roughly 213 miles
    assert 205 < distance(a, b) < 220


def test_antipodes_half_circumference():
    assert distance(GeoPoint(0, 0), GeoPoint(180, 0)) == pytest.approx(math.pi * EARTH_RADIUS_MILES)


@pytest.mark.parametrize(
    "miles, label",
    [(0.0, "<0.1 mi"), (0.0999, "<0.1 mi"), (0.1, "0.1 mi"), (1.27, "1.3 mi"), (12.04, "12.0 mi"),
     (0.25, "0.3 mi"), (1.25, "1.3 mi"), (2.75, "2.8 mi")],
)
def test_format_distance(miles, label):
    assert format_distance(miles) == label


def test_property_to_beach_access():
    prox = ProximityCalculator(DEFAULT_PROPERTY).proximity()
    assert prox.distance_miles == pytest.approx(0.1986, abs=1e-3)
    assert prox.formatted_label == "0.2 mi"


def test_route_request_descriptor():
    a, b = GeoPoint(-86.1, 30.3), GeoPoint(-86.0, 30.2)
    req = build_route_request(a, b)
    assert (req.origin, req.destination, req.profile) == (a, b, "driving")
    url = req.url("tok")
    assert url.startswith("https://api.mapbox.com/directions/v5/mapbox/driving/-86.1,30.3;-86.0,30.2?")
    assert "geometries=geojson" in url and "overview=full" in url and "access_token=tok" in url
    assert "access_token" not in req.url()


def test_calculator_route_request_uses_property_points():
    req = ProximityCalculator(DEFAULT_PROPERTY).route_request()
    assert req.origin == DEFAULT_PROPERTY.location
    assert req.destination == DEFAULT_PROPERTY.beach_access


def test_route_geometry_passthrough():
    geom = {"type": "LineString", "coordinates": [[-86.09, 30.31], [-86.088, 30.304]]}
    assert route_geometry({"routes": [{"geometry": geom}]}) is geom


@pytest.mark.parametrize(
    "payload",
    [{}, {"routes": []}, {"routes": [{}]}, {"routes": [{"geometry": None}]}, None, [], "oops"],
)
def test_route_geometry_fallback(payload):
    assert route_geometry(payload) == empty_route()


@pytest.mark.parametrize("lat", [x / 10 for x in range(-900, 901, 7)])
@pytest.mark.parametrize("lon", [180.0, -180.0, 179.9999999])
def test_distance_near_antipodes_never_raises(lat, lon):
    d = distance(GeoPoint(0.0, -lat), GeoPoint(lon, lat))
    assert 0 <= d <= math.pi * EARTH_RADIUS_MILES
    assert d == pytest.approx(math.pi * EARTH_RADIUS_MILES, rel=1e-6)


def test_distance_reported_antipodal_pair():
    d = distance(GeoPoint(0.0, -74.6), GeoPoint(180.0, 74.6))
    assert d == pytest.approx(math.pi * EARTH_RADIUS_MILES)

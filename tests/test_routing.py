# tests/test_routing.py

import pytest
import requests

from core.proximity import empty_route
from core.config import DEFAULT_PROPERTY
from core.proximity import ProximityCalculator
from services import routing

REQ = ProximityCalculator(DEFAULT_PROPERTY).route_request()
GEOM = {"type": "LineString", "coordinates": [[-86.0897, 30.3066], [-86.0881, 30.3041]]}


class FakeResponse:
    def __init__(self, payload=None, status=200, bad_json=False):
        self._payload = payload
        self.status_code = status
        self._bad_json = bad_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if self._bad_json:
            raise ValueError("not json")
        return self._payload


def test_fetch_route_returns_geometry(monkeypatch):
    calls = []

    def fake_get(url, timeout):
        calls.append((url, timeout))
        return FakeResponse({"routes": [{"geometry": GEOM}]})

    monkeypatch.setattr(routing.requests, "get", fake_get)
    assert routing.fetch_route(REQ, access_token="tok", timeout=3) == GEOM
    url, timeout = calls[0]
    assert "/driving/" in url and "access_token=tok" in url
    assert timeout == 3


def test_fetch_route_network_error(monkeypatch):
    def boom(url, timeout):
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(routing.requests, "get", boom)
    assert routing.fetch_route(REQ, access_token="tok") == empty_route()


def test_fetch_route_http_error(monkeypatch):
    monkeypatch.setattr(routing.requests, "get", lambda url, timeout: FakeResponse(status=401))
    assert routing.fetch_route(REQ, access_token="tok") == empty_route()


def test_fetch_route_empty_routes(monkeypatch):
    monkeypatch.setattr(routing.requests, "get", lambda url, timeout: FakeResponse({"routes": []}))
    assert routing.fetch_route(REQ, access_token="tok") == empty_route()


def test_fetch_route_bad_json(monkeypatch):
    monkeypatch.setattr(routing.requests, "get", lambda url, timeout: FakeResponse(bad_json=True))
    assert routing.fetch_route(REQ, access_token="tok") == empty_route()


def test_fetch_route_without_token_skips_request(monkeypatch):
    monkeypatch.delenv("MAPBOX_ACCESS_TOKEN", raising=False)

    def never(*a, **kw):
        raise AssertionError("no request expected")

    monkeypatch.setattr(routing.requests, "get", never)
    assert routing.fetch_route(REQ) == empty_route()


def test_fetch_route_reads_token_from_env(monkeypatch):
    monkeypatch.setenv("MAPBOX_ACCESS_TOKEN", "envtok")
    monkeypatch.setenv("ROUTING_TIMEOUT", "4")
    seen = {}

    def fake_get(url, timeout):
        seen["url"], seen["timeout"] = url, timeout
        return FakeResponse({"routes": [{"geometry": GEOM}]})

    monkeypatch.setattr(routing.requests, "get", fake_get)
    assert routing.fetch_route(REQ) == GEOM
    assert "access_token=envtok" in seen["url"]
    assert seen["timeout"] == 4.0


def test_require_route_raises_on_miss(monkeypatch):
    monkeypatch.setattr(routing.requests, "get", lambda url, timeout: FakeResponse({"routes": []}))
    with pytest.raises(routing.RouteUnavailable):
        routing.require_route(REQ, access_token="tok")


def test_require_route_passes_geometry(monkeypatch):
    monkeypatch.setattr(
        routing.requests, "get", lambda url, timeout: FakeResponse({"routes": [{"geometry": GEOM}]})
    )
    assert routing.require_route(REQ, access_token="tok") == GEOM

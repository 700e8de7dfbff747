# services/routing.py

import logging
from typing import Optional

import requests

from core.config import mapbox_token, routing_timeout
from core.proximity import RouteRequest, empty_route, route_geometry

logger = logging.getLogger(__name__)


def fetch_route(
    req: RouteRequest,
    access_token: Optional[str] = None,
    timeout: Optional[float] = None,
) -> dict:
    """
    Ask the Mapbox Directions API for a route and return its GeoJSON geometry.
    The route line is cosmetic: any failure is logged and the empty
    LineString is returned instead of raising.
    """
    token = access_token or mapbox_token()
    if not token:
        logger.warning("MAPBOX_ACCESS_TOKEN missing, route line disabled.")
        return empty_route()

    try:
        r = requests.get(req.url(token), timeout=timeout or routing_timeout())
        r.raise_for_status()
        payload = r.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning("Route fetch failed (%s), drawing no route.", e)
        return empty_route()

    geometry = route_geometry(payload)
    if not geometry.get("coordinates"):
        logger.warning("Directions API returned no route.")
    return geometry


class RouteUnavailable(RuntimeError):
    pass


def require_route(req: RouteRequest, **kwargs) -> dict:
    """
    Same as `fetch_route`, but raise `RouteUnavailable` instead of returning
    the empty LineString. Lets callers that cache results skip caching a miss.
    """
    geometry = fetch_route(req, **kwargs)
    if not geometry.get("coordinates"):
        raise RouteUnavailable("no route geometry")
    return geometry

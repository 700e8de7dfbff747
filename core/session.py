# core/session.py
"""
One composer session = one engine + one calculator + the two background
tasks feeding the map (route fetch, camera rotation). Both tasks are owned
by the session and cancelled by `close()`, after which nothing in the
session is mutated any more.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from typing import Callable, List, Optional

from core.config import DEFAULT_CATALOG, DEFAULT_PROPERTY
from core.engine import ItineraryEngine
from core.models import AddOnCatalog, PropertyConfig
from core.proximity import ProximityCalculator, RouteRequest, empty_route
from services.routing import fetch_route

logger = logging.getLogger(__name__)

ROTATION_STEP_DEG = 0.05
ROTATION_TICK_S = 1 / 60


class ComposerSession:
    def __init__(
        self,
        catalog: AddOnCatalog = DEFAULT_CATALOG,
        prop: PropertyConfig = DEFAULT_PROPERTY,
        fetcher: Optional[Callable[[RouteRequest], dict]] = None,
        tick: float = ROTATION_TICK_S,
        step: float = ROTATION_STEP_DEG,
    ):
        self.id = str(uuid.uuid4())[:8]
        self.engine = ItineraryEngine(catalog, prop)
        self.calculator = ProximityCalculator(prop)
        self.route: dict = empty_route()
        self.route_loaded = False
        self.bearing = 0.0
        self.closed = False
        self._fetcher = fetcher or fetch_route
        self._tick = tick
        self._step = step
        self._tasks: List[asyncio.Task] = []
        self.last_seen = time.monotonic()

    # ──────────────────────────────────────────────────────────────────────
    # Lifecycle
    # ──────────────────────────────────────────────────────────────────────
    async def start(self) -> None:
        if self.closed:
            raise RuntimeError(f"Session {self.id} is closed.")
        if self._tasks:
            return
        self._tasks = [
            asyncio.create_task(self._load_route(), name=f"route-{self.id}"),
            asyncio.create_task(self._rotate(), name=f"rotate-{self.id}"),
        ]
        logger.debug("session %s started", self.id)

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        for t in self._tasks:
            t.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        logger.debug("session %s closed", self.id)

    def touch(self) -> None:
        self.last_seen = time.monotonic()

    def idle_for(self, now: Optional[float] = None) -> float:
        return (time.monotonic() if now is None else now) - self.last_seen

    async def __aenter__(self) -> "ComposerSession":
        await self.start()
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    # ──────────────────────────────────────────────────────────────────────
    # Background tasks
    # ──────────────────────────────────────────────────────────────────────
    async def _load_route(self) -> None:
        req = self.calculator.route_request()
        try:
            geometry = await asyncio.to_thread(self._fetcher, req)
        except Exception as e:
            logger.warning("route fetch for session %s failed: %s", self.id, e)
            geometry = empty_route()
        if self.closed:
            return
        self.route = geometry
        self.route_loaded = True

    async def _rotate(self) -> None:
        while not self.closed:
            await asyncio.sleep(self._tick)
            self.bearing = (self.bearing + self._step) % 360

    def map_view(self) -> dict:
        """Everything the map renderer needs, as plain data."""
        prop = self.engine.property
        prox = self.calculator.proximity()
        return {
            "home": prop.location.as_pair(),
            "beach_access": prop.beach_access.as_pair(),
            "beach_access_label": prop.beach_access_label,
            "distance_miles": prox.distance_miles,
            "distance_label": prox.formatted_label,
            "route": self.route,
            "route_loaded": self.route_loaded,
            "bearing": self.bearing,
        }

"""
Route supplier - hands out randomly chosen routes to journeys.

The catalog keeps one template per route and is never driven itself; every
checkout is a private copy, so journeys can drive the same route at the same
time without sharing traversal state.
"""
import logging
import random
import threading
from typing import Dict, Iterable, List, Optional, Set

from gps_simulator.errors import ConfigurationError
from gps_simulator.models.route import Route

logger = logging.getLogger(__name__)


class RouteCatalog:
    """
    Read-only collection of route templates, keyed by route id.
    """

    def __init__(self, routes: Iterable[Route]):
        self._routes: Dict[str, Route] = {}
        for route in routes:
            if not route.sub_routes:
                raise ConfigurationError(f"Route {route.route_id} has no sub-routes")
            if route.route_id in self._routes:
                raise ConfigurationError(f"Duplicate route id {route.route_id}")
            self._routes[route.route_id] = route.copy()

        if not self._routes:
            raise ConfigurationError("No routes available")

    def __len__(self) -> int:
        return len(self._routes)

    def __contains__(self, route_id: str) -> bool:
        return route_id in self._routes

    @property
    def route_ids(self) -> List[str]:
        return list(self._routes)

    def get(self, route_id: str) -> Route:
        """Fresh copy of one route."""
        return self._routes[route_id].copy()

    def country_codes(self) -> Set[str]:
        """Every country code any sub-route lies in."""
        return {
            code
            for route in self._routes.values()
            for code in route.country_codes()
        }


class RouteSupplier:
    """
    Picks a random route for a journey. Safe to call from any journey thread.
    """

    def __init__(self, catalog: RouteCatalog, seed: Optional[int] = None):
        self.catalog = catalog
        self._random = random.Random(seed)
        self._lock = threading.Lock()

    def acquire(self) -> Route:
        """Return a reset, private copy of a uniformly chosen route."""
        with self._lock:
            route_id = self._random.choice(self.catalog.route_ids)

        route = self.catalog.get(route_id)
        route.reset()
        logger.debug("route checked out route=%s", route_id)
        return route

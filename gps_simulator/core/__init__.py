"""Core simulator modules."""
from .event_generator import EventGenerator, LocationEvent
from .journey import Journey
from .publisher import LocationEventPublisher
from .route_supplier import RouteCatalog, RouteSupplier

__all__ = [
    "EventGenerator", "LocationEvent", "Journey",
    "LocationEventPublisher", "RouteCatalog", "RouteSupplier",
]

"""Models package."""
from .car import Car
from .route import Coordinate, Route, SubRoute

__all__ = ["Car", "Coordinate", "Route", "SubRoute"]

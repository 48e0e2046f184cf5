"""
Route model - routes made of single-country sub-routes with traversal state.

A route crossing borders is split into sub-routes that start and stop at the
borders, so the country a car is driving in is always the country code of the
sub-route it is on.
"""
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple


@dataclass(frozen=True)
class Coordinate:
    """WGS84 position."""
    lat: float
    lon: float


@dataclass
class SubRoute:
    """
    Ordered coordinates lying entirely within one country.
    """
    country_code: str
    coordinates: Tuple[Coordinate, ...] = field(default_factory=tuple)

    # Traversal state
    cursor: int = 0
    finished: bool = False

    def __post_init__(self):
        self.coordinates = tuple(self.coordinates)

    def __len__(self) -> int:
        return len(self.coordinates)

    def next_coordinate(self) -> Optional[Coordinate]:
        """
        Return the coordinate at the cursor and advance.

        Returns None once every coordinate has been handed out and marks the
        sub-route finished; further calls keep returning None.
        """
        if self.cursor >= len(self.coordinates):
            self.finished = True
            return None

        coordinate = self.coordinates[self.cursor]
        self.cursor += 1
        return coordinate

    def reset(self):
        """Rewind to the first coordinate."""
        self.cursor = 0
        self.finished = False

    def copy(self) -> "SubRoute":
        """Fresh traversal state over the same (immutable) coordinates."""
        return SubRoute(country_code=self.country_code, coordinates=self.coordinates)


@dataclass
class Route:
    """
    Complete journey, possibly crossing borders, as an ordered list of sub-routes.
    """
    route_id: str
    sub_routes: List[SubRoute] = field(default_factory=list)
    finished: bool = False

    def next_unfinished_sub_route(self) -> SubRoute:
        """
        Return the first sub-route that has not been driven yet.

        When every sub-route is finished the route is marked finished and the
        last sub-route is returned. Callers must check `finished` right after
        the call and not drive the returned sub-route in that case.
        """
        for sub_route in self.sub_routes:
            if not sub_route.finished:
                return sub_route

        self.finished = True
        return self.sub_routes[-1]

    def reset(self):
        """Mark the route and all of its sub-routes as not driven."""
        self.finished = False
        for sub_route in self.sub_routes:
            sub_route.reset()

    def copy(self) -> "Route":
        """Independent traversal state sharing the route geometry."""
        return Route(
            route_id=self.route_id,
            sub_routes=[sub_route.copy() for sub_route in self.sub_routes],
        )

    def coordinates(self) -> Iterator[Coordinate]:
        """All coordinates of the route in driving order."""
        for sub_route in self.sub_routes:
            yield from sub_route.coordinates

    def country_codes(self) -> List[str]:
        """Country codes in driving order (one entry per sub-route)."""
        return [sub_route.country_code for sub_route in self.sub_routes]

    @classmethod
    def from_points(
        cls,
        route_id: str,
        sub_routes: Sequence[Tuple[str, Sequence[Tuple[float, float]]]]
    ) -> "Route":
        """
        Build a route from (country_code, [(lat, lon), ...]) pairs.
        """
        return cls(
            route_id=route_id,
            sub_routes=[
                SubRoute(
                    country_code=country_code.upper(),
                    coordinates=tuple(Coordinate(lat, lon) for lat, lon in points),
                )
                for country_code, points in sub_routes
            ],
        )

"""
Track loader - builds routes from a directory tree of GPX files.

Layout:
    routes/
        <route id>/
            01-IT-milano.gpx
            02-DE-munchen.gpx

Every subdirectory is a route, every GPX file in it a sub-route. Files are
driven in name order and the two characters after the first '-' in the file
name are the country code of the sub-route.
"""
import logging
import re
from pathlib import Path
from typing import List, Optional

import gpxpy
import gpxpy.gpx

from gps_simulator.models.route import Coordinate, Route, SubRoute

logger = logging.getLogger(__name__)

XML_ENCODING = re.compile(rb"""^\s*<\?xml[^>]*encoding=["']([A-Za-z0-9._-]+)["']""")


def country_code_from_filename(filename: str) -> Optional[str]:
    """'01-NL-amsterdam.gpx' -> 'NL'; None when the name has no country code."""
    dash = filename.find("-")
    if dash < 0:
        return None

    code = filename[dash + 1:dash + 3]
    if len(code) != 2 or not code.isalpha():
        return None
    return code.upper()


def read_coordinates(gpx_path: Path) -> List[Coordinate]:
    """
    All points of a GPX file in file order: track points, then route points,
    then waypoints.
    """
    with open(gpx_path, "rb") as f:
        data = f.read()

    # Decode with the encoding declared in the XML prolog, UTF-8 otherwise
    match = XML_ENCODING.match(data)
    encoding = match.group(1).decode("ascii") if match else "utf-8"
    gpx = gpxpy.parse(data.decode(encoding))

    coordinates = [
        Coordinate(point.latitude, point.longitude)
        for track in gpx.tracks
        for segment in track.segments
        for point in segment.points
    ]
    coordinates.extend(
        Coordinate(point.latitude, point.longitude)
        for route in gpx.routes
        for point in route.points
    )
    coordinates.extend(Coordinate(point.latitude, point.longitude) for point in gpx.waypoints)

    return coordinates


def load_route(route_dir: Path) -> Optional[Route]:
    """Build one route from its directory, None if no usable sub-route was found."""
    sub_routes = []

    for gpx_path in sorted(p for p in route_dir.iterdir() if p.is_file() and p.suffix.lower() == ".gpx"):
        country_code = country_code_from_filename(gpx_path.name)
        if country_code is None:
            logger.warning("no country code in file name, skipped file=%s", gpx_path)
            continue

        try:
            coordinates = read_coordinates(gpx_path)
        except (gpxpy.gpx.GPXException, UnicodeDecodeError, LookupError) as e:
            logger.warning("unreadable track, skipped file=%s error=%s", gpx_path, e)
            continue

        if not coordinates:
            logger.warning("track has no points, skipped file=%s", gpx_path)
            continue

        sub_routes.append(SubRoute(country_code=country_code, coordinates=tuple(coordinates)))
        logger.debug("loaded sub-route file=%s country=%s points=%d", gpx_path.name, country_code, len(coordinates))

    if not sub_routes:
        return None

    return Route(route_id=route_dir.name, sub_routes=sub_routes)


def load_routes(routes_dir: str) -> List[Route]:
    """
    Load every route below routes_dir.

    Args:
        routes_dir: Directory holding one subdirectory per route

    Returns:
        Routes ordered by route id
    """
    root = Path(routes_dir)
    if not root.is_dir():
        raise FileNotFoundError(f"Routes directory not found: {routes_dir}")

    routes = []
    for route_dir in sorted(p for p in root.iterdir() if p.is_dir()):
        route = load_route(route_dir)
        if route is None:
            logger.warning("route has no usable sub-routes, skipped route=%s", route_dir.name)
            continue
        routes.append(route)

    return routes

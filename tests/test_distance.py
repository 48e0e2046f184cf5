import pytest

from gps_simulator.core.distance import (
    eta_hours, great_circle_distance_km, route_distance_km, speed_kph
)
from gps_simulator.models.route import Coordinate

AMSTERDAM = Coordinate(52.3676, 4.9041)
BRUSSELS = Coordinate(50.8503, 4.3517)


@pytest.mark.parametrize("point", [
    Coordinate(0.0, 0.0),
    Coordinate(52.0, 4.0),
    Coordinate(90.0, 0.0),
    Coordinate(-90.0, 180.0),
    Coordinate(45.123456789, -179.999999),
])
def test_distance_to_self_is_zero(point):
    assert great_circle_distance_km(point, point) == 0


def test_distance_is_symmetric():
    assert great_circle_distance_km(AMSTERDAM, BRUSSELS) == great_circle_distance_km(BRUSSELS, AMSTERDAM)


def test_known_distance():
    # Amsterdam - Brussels is about 173 km as the crow flies
    assert great_circle_distance_km(AMSTERDAM, BRUSSELS) == pytest.approx(173.0, abs=1.5)


def test_antipodal_points_do_not_raise():
    distance = great_circle_distance_km(Coordinate(0.0, 0.0), Coordinate(0.0, 180.0))

    assert distance == pytest.approx(20015.1, abs=1.0)


def test_speed_with_zero_or_negative_elapsed_is_zero():
    assert speed_kph(AMSTERDAM, BRUSSELS, 0) == 0
    assert speed_kph(AMSTERDAM, BRUSSELS, -5) == 0
    assert speed_kph(AMSTERDAM, AMSTERDAM, 0) == 0


def test_speed():
    distance = great_circle_distance_km(AMSTERDAM, BRUSSELS)

    assert speed_kph(AMSTERDAM, BRUSSELS, 7200) == pytest.approx(distance / 2)


def test_route_distance():
    points = [AMSTERDAM, BRUSSELS, AMSTERDAM]

    assert route_distance_km(points) == pytest.approx(2 * great_circle_distance_km(AMSTERDAM, BRUSSELS))
    assert route_distance_km([AMSTERDAM]) == 0
    assert route_distance_km([]) == 0


def test_eta():
    assert eta_hours(200.0, 100.0) == 2.0
    assert eta_hours(200.0, None) is None
    assert eta_hours(200.0, 0) is None

"""
Vehicle roster - loads the cars to simulate from a JSON file.

Format:
    [{"id": "NL-0001-AB", "country": "NL", "speed_kph": 110}, ...]
"""
import json
import random
from typing import Iterable, List

from gps_simulator.config import CAR_SPEED_MIN, CAR_SPEED_MAX
from gps_simulator.errors import ConfigurationError
from gps_simulator.models.car import Car, generate_serial_number


def car_from_dict(entry: dict) -> Car:
    """Build a car from one roster entry."""
    try:
        serial_number = str(entry["id"])
        country = str(entry["country"]).upper()
    except (KeyError, TypeError) as e:
        raise ConfigurationError(f"Invalid roster entry {entry!r}: missing {e}") from e

    speed = entry.get("speed_kph")
    if speed is not None:
        try:
            speed = float(speed)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid speed_kph in roster entry {entry!r}") from e

    return Car(
        serial_number=serial_number,
        origin_country=country,
        speed_kph=speed,
    )


def load_cars(path: str) -> List[Car]:
    """Load the roster file; raises ConfigurationError on malformed content."""
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Roster {path} is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise ConfigurationError(f"Roster {path} must be a JSON array")

    cars = [car_from_dict(entry) for entry in data]

    serials = [car.serial_number for car in cars]
    if len(set(serials)) != len(serials):
        raise ConfigurationError(f"Roster {path} has duplicate car ids")

    return cars


def generate_cars(count: int, countries: Iterable[str]) -> List[Car]:
    """Generate count cars with random origin countries and cruising speeds."""
    countries = list(countries)
    if not countries:
        raise ConfigurationError("No countries to generate cars for")

    cars = []
    serials = set()
    while len(cars) < count:
        country = random.choice(countries)
        serial_number = generate_serial_number(country)
        if serial_number in serials:
            continue
        serials.add(serial_number)
        cars.append(Car(
            serial_number=serial_number,
            origin_country=country,
            speed_kph=float(random.randint(CAR_SPEED_MIN, CAR_SPEED_MAX)),
        ))

    return cars

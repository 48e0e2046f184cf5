"""
Event generator - creates location events for cars driving their routes.
"""
from datetime import datetime, timezone
from typing import Optional
import json

from gps_simulator.models.car import Car
from gps_simulator.models.route import Coordinate

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%MZ"


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 UTC timestamp with minute precision (e.g., 2026-10-19T14:05Z)."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime(TIMESTAMP_FORMAT)


class LocationEvent:
    """
    Location update sent by a car to the channel of the country it is driving in.
    """

    def __init__(
        self,
        serial_number: str,
        lat: str,
        lon: str,
        timestamp: str,
        country_code: str,
    ):
        self.serial_number = serial_number
        self.lat = lat
        self.lon = lon
        self.timestamp = timestamp
        self.country_code = country_code

    def __repr__(self) -> str:
        return (
            f"LocationEvent(serial_number={self.serial_number!r}, lat={self.lat!r}, "
            f"lon={self.lon!r}, timestamp={self.timestamp!r}, country_code={self.country_code!r})"
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, LocationEvent):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def to_dict(self) -> dict:
        """Convert to dictionary (wire format)."""
        return {
            "serialNumber": self.serial_number,
            "lat": self.lat,
            "lon": self.lon,
            "timestamp": self.timestamp,
            "countryCode": self.country_code,
        }

    def to_json(self) -> bytes:
        """Serialize to the UTF-8 JSON payload published on the channel."""
        return json.dumps(self.to_dict(), separators=(",", ":")).encode("utf-8")

    @classmethod
    def from_dict(cls, data: dict) -> "LocationEvent":
        """Build an event from its wire format. Raises KeyError on missing fields."""
        return cls(
            serial_number=data["serialNumber"],
            lat=str(data["lat"]),
            lon=str(data["lon"]),
            timestamp=data["timestamp"],
            country_code=data["countryCode"],
        )

    @classmethod
    def from_json(cls, payload: bytes) -> "LocationEvent":
        return cls.from_dict(json.loads(payload))


class EventGenerator:
    """
    Generate location events for cars.
    """

    def create_location_update(
        self,
        car: Car,
        coordinate: Coordinate,
        country_code: str,
        event_time: Optional[datetime] = None
    ) -> LocationEvent:
        """
        Create a location update event.

        Args:
            car: Car reporting its position
            coordinate: Current position
            country_code: Country of the sub-route the car is driving
            event_time: Time of the reading (default: now, UTC)

        Returns:
            LocationEvent ready to publish
        """
        event_time = event_time or datetime.now(timezone.utc)

        return LocationEvent(
            serial_number=car.serial_number,
            lat=str(coordinate.lat),
            lon=str(coordinate.lon),
            timestamp=format_timestamp(event_time),
            country_code=country_code,
        )

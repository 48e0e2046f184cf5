"""
Car model for the vehicles driving the simulated routes.
"""
from dataclasses import dataclass
from typing import Optional
import random
import string


def generate_serial_number(country_code: str) -> str:
    """Generate a car serial number (e.g., NL-4821-KX)."""
    digits = f"{random.randint(0, 9999):04d}"
    letters = ''.join(random.choices(string.ascii_uppercase, k=2))
    return f"{country_code}-{digits}-{letters}"


@dataclass(frozen=True)
class Car:
    """
    Simulated car. Immutable once the simulation has started.
    """
    serial_number: str
    origin_country: str

    # Cruising speed (km/h), only used for ETA projection
    speed_kph: Optional[float] = None

    def __str__(self) -> str:
        return f"{self.serial_number} {self.origin_country}"


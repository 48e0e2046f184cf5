import threading
import time

import pytest

from gps_simulator.errors import PublishError
from gps_simulator.models.car import Car
from gps_simulator.models.route import Route


class FakeChannel:
    """In-memory transport recording every payload per channel."""

    def __init__(self, fail_for=()):
        self.sent = []
        self.fail_for = set(fail_for)
        self.lock = threading.Lock()

    def send(self, channel_name, payload):
        if channel_name in self.fail_for:
            raise PublishError(f"{channel_name} unreachable")
        with self.lock:
            self.sent.append((channel_name, payload))


class RecordingPublisher:
    """Publisher double keeping (country_code, event) pairs in order."""

    def __init__(self, fail=False, routed=None):
        self.events = []
        self.fail = fail
        self.routed = routed

    def publish(self, country_code, event):
        if self.fail:
            raise PublishError("queue full")
        if self.routed is not None and country_code not in self.routed:
            return False
        self.events.append((country_code, event))
        return True


class StaticSupplier:
    """Route supplier handing out copies of one route."""

    def __init__(self, route):
        self.route = route
        self.acquired = 0

    def acquire(self):
        self.acquired += 1
        route = self.route.copy()
        route.reset()
        return route


def wait_for(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def write_gpx(path, points):
    trkpts = "\n".join(f'    <trkpt lat="{lat}" lon="{lon}"></trkpt>' for lat, lon in points)
    path.write_text(
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<gpx version="1.1" creator="tests" xmlns="http://www.topografix.com/GPX/1/1">\n'
        '  <trk><trkseg>\n'
        f'{trkpts}\n'
        '  </trkseg></trk>\n'
        '</gpx>\n',
        encoding="utf-8",
    )


@pytest.fixture
def car():
    return Car(serial_number="NL-0001-AB", origin_country="NL", speed_kph=100.0)


@pytest.fixture
def border_route():
    return Route.from_points("nl-be", [
        ("NL", [(52.0, 4.0), (52.1, 4.1)]),
        ("BE", [(51.2, 4.4), (51.1, 4.4), (50.9, 4.4)]),
    ])


@pytest.fixture
def fake_channel():
    return FakeChannel()


@pytest.fixture
def routes_dir(tmp_path):
    root = tmp_path / "routes"
    (root / "route-1").mkdir(parents=True)
    (root / "route-2").mkdir()
    write_gpx(root / "route-1" / "01-NL-amsterdam.gpx", [(52.37, 4.90), (52.09, 5.12)])
    write_gpx(root / "route-1" / "02-BE-antwerpen.gpx", [(51.22, 4.40)])
    write_gpx(root / "route-2" / "01-DE-koeln.gpx", [(50.94, 6.96), (50.78, 6.08)])
    return root

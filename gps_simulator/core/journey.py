"""
Journey - one car driving routes forever, one location event per coordinate.

States:
    driving_subroute -> subroute_exhausted -> driving_subroute (next sub-route)
                                           -> route_exhausted -> cooldown
    cooldown -> driving_subroute (new route from the supplier)

Every suspension is a wait on the shared stop event, so a shutdown ends the
journey within one wait without emitting further events.
"""
from datetime import datetime, timezone
import logging
import threading
from typing import Callable, Optional

from gps_simulator.config import JourneyState, POINT_INTERVAL_SECONDS, ROUTE_COOLDOWN_SECONDS
from gps_simulator.core.distance import eta_hours, great_circle_distance_km, route_distance_km, speed_kph
from gps_simulator.core.event_generator import EventGenerator
from gps_simulator.core.publisher import LocationEventPublisher
from gps_simulator.core.route_supplier import RouteSupplier
from gps_simulator.errors import PublishError
from gps_simulator.models.car import Car
from gps_simulator.models.route import Coordinate, Route, SubRoute

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Journey:
    """
    Drives one car over routes handed out by the route supplier.
    """

    def __init__(
        self,
        car: Car,
        route_supplier: RouteSupplier,
        publisher: LocationEventPublisher,
        stop_event: threading.Event,
        route: Optional[Route] = None,
        point_interval: float = POINT_INTERVAL_SECONDS,
        cooldown: float = ROUTE_COOLDOWN_SECONDS,
        event_generator: Optional[EventGenerator] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.car = car
        self.route_supplier = route_supplier
        self.publisher = publisher
        self.stop_event = stop_event
        self.route = route
        self.point_interval = point_interval
        self.cooldown = cooldown
        self.event_generator = event_generator or EventGenerator()
        self.clock = clock

        self.state = JourneyState.STARTING
        self.previous_coordinate: Optional[Coordinate] = None
        self.previous_time: Optional[datetime] = None

        # Counters for status reporting
        self.events_emitted = 0
        self.publish_failures = 0
        self.routes_completed = 0

    @property
    def stopped(self) -> bool:
        return self.stop_event.is_set()

    def _wait(self, seconds: float) -> bool:
        """Suspend; True when the journey has to stop."""
        return self.stop_event.wait(seconds)

    def run(self):
        """Journey loop. Returns only on shutdown."""
        try:
            if self.route is None:
                self._acquire_route()

            while not self.route.finished:
                if self.stopped:
                    break

                sub_route = self.route.next_unfinished_sub_route()

                if self.route.finished:
                    self._set_state(JourneyState.ROUTE_EXHAUSTED)
                    self.routes_completed += 1
                    logger.info(
                        "route exhausted car=%s route=%s events=%d",
                        self.car.serial_number, self.route.route_id, self.events_emitted,
                    )

                    self._set_state(JourneyState.COOLDOWN)
                    if self._wait(self.cooldown):
                        break

                    self._acquire_route()
                    continue

                if not self.drive_sub_route(sub_route):
                    break

        except Exception:
            # Ends this journey only, the rest of the fleet keeps driving
            logger.exception("journey failed car=%s", self.car.serial_number)

        finally:
            # Release the route, nothing else holds a reference to it
            self.route = None
            self._set_state(JourneyState.STOPPED)
            logger.info(
                "journey stopped car=%s events=%d routes=%d",
                self.car.serial_number, self.events_emitted, self.routes_completed,
            )

    def drive_sub_route(self, sub_route: SubRoute) -> bool:
        """
        Emit one event per remaining coordinate of sub_route.

        Returns False when interrupted by shutdown.
        """
        self._set_state(JourneyState.DRIVING_SUBROUTE)
        logger.debug(
            "driving sub-route car=%s route=%s country=%s points=%d",
            self.car.serial_number, self.route.route_id if self.route else None,
            sub_route.country_code, len(sub_route),
        )

        while not sub_route.finished:
            if self.stopped:
                return False

            now = self.clock()
            coordinate = sub_route.next_coordinate()
            if coordinate is None:
                break

            if self.previous_coordinate is not None:
                elapsed = (now - self.previous_time).total_seconds()
                logger.debug(
                    "moved car=%s distance_km=%.3f speed_kph=%.1f",
                    self.car.serial_number,
                    great_circle_distance_km(self.previous_coordinate, coordinate),
                    speed_kph(self.previous_coordinate, coordinate, elapsed),
                )

            event = self.event_generator.create_location_update(
                self.car, coordinate, sub_route.country_code, now
            )
            try:
                if self.publisher.publish(sub_route.country_code, event):
                    self.events_emitted += 1
                else:
                    # Unknown routing key, already logged by the publisher
                    self.publish_failures += 1
            except PublishError as e:
                self.publish_failures += 1
                logger.warning("publish failed car=%s error=%s", self.car.serial_number, e)

            self.previous_coordinate = coordinate
            self.previous_time = now

            if self._wait(self.point_interval):
                return False

        self._set_state(JourneyState.SUBROUTE_EXHAUSTED)
        return True

    def _acquire_route(self):
        self.route = self.route_supplier.acquire()

        distance = route_distance_km(self.route.coordinates())
        eta = eta_hours(distance, self.car.speed_kph)
        logger.info(
            "route acquired car=%s route=%s countries=%s distance_km=%.1f eta_h=%s",
            self.car.serial_number, self.route.route_id,
            "-".join(self.route.country_codes()), distance,
            f"{eta:.2f}" if eta is not None else "n/a",
        )

    def _set_state(self, state: str):
        if state != self.state:
            logger.debug("journey state car=%s %s -> %s", self.car.serial_number, self.state, state)
            self.state = state

#!/usr/bin/env python3
"""
Main GPS fleet simulator.

Simulates cars driving pre-recorded routes across Europe, sending a location
event per route point to the channel of the country the car is driving in.
"""
import sys
import signal
import random
import logging
import threading
from typing import List, Optional, Tuple
import argparse

from pymongo.errors import PyMongoError

from gps_simulator.config import (
    TRANSPORT, Transport, COUNTRY_CODES, ROUTES_DIR, CARS_FILE,
    POINT_INTERVAL_SECONDS, ROUTE_COOLDOWN_SECONDS,
    START_DELAY_MIN_SECONDS, START_DELAY_MAX_SECONDS,
    STATUS_INTERVAL_SECONDS, LOG_LEVEL
)
from gps_simulator.core.database import DatabaseHandler
from gps_simulator.core.journey import Journey
from gps_simulator.core.mqtt_channel import MqttChannel
from gps_simulator.core.publisher import ChannelTransport, LocationEventPublisher, channel_name_for
from gps_simulator.core.roster import generate_cars, load_cars
from gps_simulator.core.route_supplier import RouteCatalog, RouteSupplier
from gps_simulator.core.track_loader import load_routes
from gps_simulator.errors import ConfigurationError
from gps_simulator.models.car import Car

logger = logging.getLogger(__name__)


class CarSimulator:
    """
    Orchestrates the fleet: one journey thread per car.
    """

    def __init__(
        self,
        routes_dir: str = ROUTES_DIR,
        cars_file: Optional[str] = CARS_FILE,
        num_cars: Optional[int] = None,
        transport: str = TRANSPORT,
        channel: Optional[ChannelTransport] = None,
        country_codes: Optional[List[str]] = None,
        point_interval: float = POINT_INTERVAL_SECONDS,
        cooldown: float = ROUTE_COOLDOWN_SECONDS,
        start_delay: Tuple[float, float] = (START_DELAY_MIN_SECONDS, START_DELAY_MAX_SECONDS),
        seed: Optional[int] = None
    ):
        self.routes_dir = routes_dir
        self.cars_file = cars_file
        self.num_cars = num_cars
        self.transport = transport
        self.channel = channel
        self.country_codes = [code.strip().upper() for code in (country_codes or COUNTRY_CODES)]
        self.point_interval = point_interval
        self.cooldown = cooldown
        self.start_delay = start_delay
        self._random = random.Random(seed)
        self._seed = seed

        # Components
        self.publisher: Optional[LocationEventPublisher] = None
        self.route_supplier: Optional[RouteSupplier] = None

        # State
        self.cars: List[Car] = []
        self.journeys: List[Journey] = []
        self.threads: List[threading.Thread] = []
        self.shutdown_event = threading.Event()
        self._stopped = False

    def setup(self):
        """
        Load cars and routes, validate the routing keys and connect the channel.

        Raises ConfigurationError when the simulation cannot run as configured.
        """
        print("=" * 60)
        print("GPS FLEET SIMULATOR")
        print("=" * 60)

        # Cars
        if self.num_cars is not None:
            self.cars = generate_cars(self.num_cars, self.country_codes)
        elif self.cars_file:
            self.cars = load_cars(self.cars_file)
        if not self.cars:
            raise ConfigurationError("No cars to simulate")
        print(f"\nLoaded {len(self.cars)} cars")

        # Routes
        catalog = RouteCatalog(load_routes(self.routes_dir))
        unknown = sorted(catalog.country_codes() - set(self.country_codes))
        if unknown:
            raise ConfigurationError(
                f"Routes drive through unconfigured countries {', '.join(unknown)} "
                f"(configured: {', '.join(self.country_codes)})"
            )
        self.route_supplier = RouteSupplier(catalog, seed=self._seed)
        print(f"Loaded {len(catalog)} routes through {', '.join(sorted(catalog.country_codes()))}")

        # Channel
        if self.channel is None:
            self.channel = self._connect_channel()
        self.publisher = LocationEventPublisher(self.channel, self.country_codes)
        self.publisher.start()

        # Journeys
        for car in self.cars:
            self.journeys.append(Journey(
                car=car,
                route_supplier=self.route_supplier,
                publisher=self.publisher,
                stop_event=self.shutdown_event,
                point_interval=self.point_interval,
                cooldown=self.cooldown,
            ))

        print("\nSimulation ready:")
        print(f"  - Cars: {len(self.cars)}")
        print(f"  - Channels: {', '.join(self.publisher.channels.values())}")
        print(f"  - Point interval: {self.point_interval}s, cooldown: {self.cooldown}s")

        return True

    def _connect_channel(self) -> ChannelTransport:
        """Create and connect the configured transport."""
        if self.transport == Transport.MQTT:
            channel = MqttChannel()
            channel.connect()
            return channel

        if self.transport == Transport.MONGODB:
            channel = DatabaseHandler()
            channel.connect()
            channel.setup_collections(channel_name_for(code) for code in self.country_codes)
            return channel

        raise ConfigurationError(f"Unknown transport: {self.transport}")

    def start_journeys(self):
        """Start one journey thread per car, staggered by a random delay."""
        low, high = self.start_delay

        for index, journey in enumerate(self.journeys):
            if self.shutdown_event.is_set():
                break

            thread = threading.Thread(
                target=journey.run,
                name=f"journey-{journey.car.serial_number}",
                daemon=True
            )
            thread.start()
            self.threads.append(thread)
            logger.info("journey started car=%s", journey.car.serial_number)

            if index < len(self.journeys) - 1 and high > 0:
                if self.shutdown_event.wait(self._random.uniform(low, high)):
                    break

    def run(self, status_interval: float = STATUS_INTERVAL_SECONDS):
        """Main loop: start the fleet and print status until shutdown."""
        print("\n" + "=" * 60)
        print("SIMULATION STARTED")
        print("=" * 60)
        print(f"Press Ctrl+C to stop\n")

        self.start_journeys()

        while not self.shutdown_event.wait(status_interval):
            self._print_status()

    def _print_status(self):
        """Print current simulation status."""
        states = {}
        total_events = 0
        for journey in self.journeys:
            states[journey.state] = states.get(journey.state, 0) + 1
            total_events += journey.events_emitted

        running = sum(1 for t in self.threads if t.is_alive())
        print(f"\nJourneys running: {running}/{len(self.journeys)} | Events: {total_events:,}")
        print(f"  Journey states:")
        for state, count in sorted(states.items()):
            print(f"    {state}: {count:,}")
        if self.publisher:
            print(f"  Channels:")
            for code, stats in self.publisher.snapshot().items():
                print(
                    f"    {self.publisher.channels[code]}: sent {stats.sent:,} "
                    f"failed {stats.failed:,} dropped {stats.dropped:,}"
                )

    def request_stop(self):
        """Signal every journey to stop at its next suspension point."""
        self.shutdown_event.set()

    def stop(self, timeout: float = 5.0):
        """Stop the simulation."""
        if self._stopped:
            return
        self._stopped = True
        self.shutdown_event.set()

        for thread in self.threads:
            thread.join(timeout)

        print("\n" + "=" * 60)
        print("SIMULATION STOPPED")
        print("=" * 60)
        print(f"Total events generated: {sum(j.events_emitted for j in self.journeys)}")

        if self.publisher:
            self.publisher.close(timeout)
            self._print_status()

        if isinstance(self.channel, DatabaseHandler) and self.publisher:
            stats = self.channel.get_stats(self.publisher.channels.values())
            print("\nDatabase statistics:")
            for name, count in stats.items():
                print(f"  - {name}: {count}")

        close = getattr(self.channel, "close", None)
        if close:
            close()


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="GPS Fleet Simulator")
    parser.add_argument(
        "-n", "--num-cars",
        type=int,
        help="Generate this many random cars instead of reading the roster file"
    )
    parser.add_argument(
        "--cars-file",
        type=str,
        default=CARS_FILE,
        help=f"Roster JSON file (default: {CARS_FILE})"
    )
    parser.add_argument(
        "--routes-dir",
        type=str,
        default=ROUTES_DIR,
        help=f"Directory with one GPX folder per route (default: {ROUTES_DIR})"
    )
    parser.add_argument(
        "-t", "--transport",
        choices=[Transport.MQTT, Transport.MONGODB],
        default=TRANSPORT,
        help=f"Message channel transport (default: {TRANSPORT})"
    )
    parser.add_argument(
        "--countries",
        type=str,
        default=",".join(COUNTRY_CODES),
        help=f"Comma separated routing keys (default: {','.join(COUNTRY_CODES)})"
    )
    parser.add_argument(
        "--point-interval",
        type=float,
        default=POINT_INTERVAL_SECONDS,
        help=f"Seconds between two points of a car (default: {POINT_INTERVAL_SECONDS})"
    )
    parser.add_argument(
        "--cooldown",
        type=float,
        default=ROUTE_COOLDOWN_SECONDS,
        help=f"Seconds a car rests between routes (default: {ROUTE_COOLDOWN_SECONDS})"
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Seed for route selection and start delays"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=LOG_LEVEL,
        help=f"Logging level (default: {LOG_LEVEL})"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(threadName)s %(name)s: %(message)s"
    )

    simulator = CarSimulator(
        routes_dir=args.routes_dir,
        cars_file=args.cars_file,
        num_cars=args.num_cars,
        transport=args.transport,
        country_codes=[c.strip() for c in args.countries.split(",") if c.strip()],
        point_interval=args.point_interval,
        cooldown=args.cooldown,
        seed=args.seed
    )

    # Handle Ctrl+C gracefully
    def signal_handler(sig, frame):
        print("\n\nReceived shutdown signal...")
        simulator.request_stop()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    # Setup and run
    try:
        simulator.setup()
    except (ConfigurationError, OSError, PyMongoError) as e:
        print(f"\nSetup failed: {e}")
        simulator.stop()
        sys.exit(1)

    try:
        simulator.run()
    finally:
        simulator.stop()


if __name__ == "__main__":
    main()

"""
Location event publisher - routes events to per-country channels.

Each routing key (country code) owns a bounded queue drained by its own sender
thread, so journeys never wait for the broker.
"""
from dataclasses import dataclass
import logging
import queue
import threading
from typing import Dict, Iterable, List, Optional, Protocol

from gps_simulator.config import CHANNEL_PREFIX, COUNTRY_NAMES, PUBLISH_QUEUE_SIZE
from gps_simulator.core.event_generator import LocationEvent
from gps_simulator.errors import ConfigurationError, PublishError

logger = logging.getLogger(__name__)

_STOP = object()


class ChannelTransport(Protocol):
    def send(self, channel_name: str, payload: bytes) -> None:
        ...


def channel_name_for(
    country_code: str,
    prefix: str = CHANNEL_PREFIX,
    country_names: Optional[Dict[str, str]] = None
) -> str:
    """Channel named by convention, e.g. NL -> SimulationToNetherlands."""
    names = COUNTRY_NAMES if country_names is None else country_names
    return f"{prefix}{names.get(country_code, country_code)}"


@dataclass
class ChannelStats:
    """Delivery counters for one channel."""
    sent: int = 0
    failed: int = 0
    dropped: int = 0


class LocationEventPublisher:
    """
    Fire-and-forget publisher keyed by country code.
    """

    def __init__(
        self,
        transport: ChannelTransport,
        country_codes: Iterable[str],
        queue_size: int = PUBLISH_QUEUE_SIZE,
        channel_prefix: str = CHANNEL_PREFIX,
        country_names: Optional[Dict[str, str]] = None,
    ):
        self.transport = transport
        self.channels: Dict[str, str] = {
            code: channel_name_for(code, channel_prefix, country_names)
            for code in country_codes
        }
        if not self.channels:
            raise ConfigurationError("Publisher needs at least one country code")

        self.stats: Dict[str, ChannelStats] = {code: ChannelStats() for code in self.channels}
        self.unknown_routing_keys = 0
        self._stats_lock = threading.Lock()
        self._queues: Dict[str, queue.Queue] = {
            code: queue.Queue(maxsize=queue_size) for code in self.channels
        }
        self._threads: List[threading.Thread] = []

    @property
    def country_codes(self) -> List[str]:
        return list(self.channels)

    def start(self):
        """Start one sender thread per channel."""
        if self._threads:
            return

        for code in self.channels:
            thread = threading.Thread(
                target=self._drain, args=(code,), name=f"publisher-{code}", daemon=True
            )
            thread.start()
            self._threads.append(thread)

    def publish(self, country_code: str, event: LocationEvent) -> bool:
        """
        Queue an event for the channel of country_code.

        Returns False when the routing key is not configured (event dropped).
        Raises PublishError when the channel queue is full (event dropped).
        """
        event_queue = self._queues.get(country_code)
        if event_queue is None:
            with self._stats_lock:
                self.unknown_routing_keys += 1
            logger.error(
                "unknown routing key country=%s serial=%s, event dropped",
                country_code, event.serial_number,
            )
            return False

        try:
            event_queue.put_nowait(event.to_json())
        except queue.Full:
            with self._stats_lock:
                self.stats[country_code].dropped += 1
            raise PublishError(f"Queue for {self.channels[country_code]} is full")

        return True

    def _drain(self, country_code: str):
        """Sender loop for one channel."""
        channel_name = self.channels[country_code]
        event_queue = self._queues[country_code]

        while True:
            payload = event_queue.get()
            try:
                if payload is _STOP:
                    return
                self.transport.send(channel_name, payload)
            except Exception as e:
                with self._stats_lock:
                    self.stats[country_code].failed += 1
                logger.warning("publish failed channel=%s error=%s", channel_name, e)
            else:
                with self._stats_lock:
                    self.stats[country_code].sent += 1
                logger.debug("event published channel=%s", channel_name)
            finally:
                event_queue.task_done()

    def close(self, timeout: float = 5.0):
        """Send what is queued, then stop the sender threads."""
        for code, event_queue in self._queues.items():
            try:
                event_queue.put(_STOP, timeout=timeout)
            except queue.Full:
                logger.warning("channel=%s still full on close", self.channels[code])

        for thread in self._threads:
            thread.join(timeout)
        self._threads = []

    def snapshot(self) -> Dict[str, ChannelStats]:
        """Copy of the per-channel counters."""
        with self._stats_lock:
            return {
                code: ChannelStats(stats.sent, stats.failed, stats.dropped)
                for code, stats in self.stats.items()
            }

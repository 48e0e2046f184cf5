"""
Simulation listener - consumer side for services receiving location events.

Subscribes to the channel of one country on the MQTT broker and forwards the
events of that country to a callback:

    listener = SimulationListener("NL", on_event=print)
    listener.start()
"""
import logging
from typing import Callable, Optional

import paho.mqtt.client as mqtt

from gps_simulator.config import MQTT_HOST, MQTT_PORT, MQTT_USERNAME, MQTT_PASSWORD, MQTT_QOS
from gps_simulator.core.event_generator import LocationEvent
from gps_simulator.core.mqtt_channel import create_client
from gps_simulator.core.publisher import channel_name_for

logger = logging.getLogger(__name__)


class SimulationListener:
    """
    Receives location events for a single country.
    """

    def __init__(
        self,
        country_code: str,
        on_event: Callable[[LocationEvent], None],
        host: str = None,
        port: int = None,
        channel: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ):
        self.country_code = country_code.upper()
        self.on_event = on_event
        self.host = host or MQTT_HOST
        self.port = port or MQTT_PORT
        self.channel = channel or channel_name_for(self.country_code)
        self.username = username if username is not None else MQTT_USERNAME
        self.password = password if password is not None else MQTT_PASSWORD
        self.client: Optional[mqtt.Client] = None

        print("Created SimulationListener with following parameters")
        print(f"  Server address: {self.host}:{self.port}")
        print(f"  Country code  : {self.country_code}")
        print(f"  Channel       : {self.channel}")

    def start(self):
        """Connect, subscribe and process messages on a background thread."""
        client = create_client(f"listener-{self.country_code}", self.username, self.password)
        client.on_connect = self._on_connect
        client.on_message = self._on_message
        client.connect(self.host, self.port, keepalive=60)
        client.loop_start()
        self.client = client
        return client

    def stop(self):
        if self.client:
            self.client.loop_stop()
            self.client.disconnect()
            self.client = None

    def _on_connect(self, client, userdata, flags, reason_code, properties):
        # Subscribing here restores the subscription after reconnects
        client.subscribe(self.channel, qos=MQTT_QOS)
        logger.info("listener subscribed channel=%s reason=%s", self.channel, reason_code)

    def _on_message(self, client, userdata, message):
        try:
            event = LocationEvent.from_json(message.payload)
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("malformed message skipped channel=%s error=%s", message.topic, e)
            return

        if event.country_code != self.country_code:
            return

        self.on_event(event)

"""
MQTT transport - publishes each channel as a topic on the broker.
"""
import logging
import time
import uuid
from typing import Optional

import paho.mqtt.client as mqtt

from gps_simulator.config import MQTT_HOST, MQTT_PORT, MQTT_USERNAME, MQTT_PASSWORD, MQTT_QOS
from gps_simulator.errors import PublishError

logger = logging.getLogger(__name__)


def create_client(client_id_prefix: str, username: Optional[str], password: Optional[str]) -> mqtt.Client:
    """Create a paho client with the v2 callback API and optional credentials."""
    client = mqtt.Client(
        mqtt.CallbackAPIVersion.VERSION2,
        client_id=f"{client_id_prefix}-{uuid.uuid4().hex[:8]}",
    )
    if username:
        client.username_pw_set(username, password)
    return client


class MqttChannel:
    """
    Sends serialized location events to MQTT topics named after the channels.
    """

    def __init__(
        self,
        host: str = None,
        port: int = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        qos: int = None,
    ):
        self.host = host or MQTT_HOST
        self.port = port or MQTT_PORT
        self.username = username if username is not None else MQTT_USERNAME
        self.password = password if password is not None else MQTT_PASSWORD
        self.qos = MQTT_QOS if qos is None else qos
        self.client: Optional[mqtt.Client] = None

    def connect(self, attempts: int = 5, retry_delay: float = 2.0):
        """Connect to the broker and start the network loop thread."""
        print(f"Connecting to MQTT broker: {self.host}:{self.port}...")
        client = create_client("gps-simulator", self.username, self.password)

        for attempt in range(1, attempts + 1):
            try:
                client.connect(self.host, self.port, keepalive=60)
                break
            except OSError as e:
                logger.warning(
                    "mqtt connect failed attempt=%d host=%s port=%d error=%s",
                    attempt, self.host, self.port, e,
                )
                if attempt == attempts:
                    raise
                time.sleep(retry_delay)

        client.loop_start()
        self.client = client
        print("Connected successfully!")
        return client

    def close(self):
        """Stop the network loop and disconnect."""
        if self.client:
            self.client.loop_stop()
            self.client.disconnect()
            self.client = None
            print("MQTT connection closed.")

    def send(self, channel_name: str, payload: bytes):
        """Publish one payload; raises PublishError when paho refuses it."""
        if self.client is None:
            raise RuntimeError("MQTT client not connected. Call connect() first.")

        info = self.client.publish(channel_name, payload=payload, qos=self.qos, retain=False)
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            raise PublishError(f"Publish to {channel_name} failed: {mqtt.error_string(info.rc)}")

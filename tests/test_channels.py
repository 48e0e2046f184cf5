from unittest.mock import MagicMock, patch

import paho.mqtt.client as mqtt
import pytest
from pymongo.errors import PyMongoError

from gps_simulator.core.database import DatabaseHandler
from gps_simulator.core.event_generator import LocationEvent
from gps_simulator.core.mqtt_channel import MqttChannel
from gps_simulator.errors import PublishError

PAYLOAD = LocationEvent("NL-1", "52.1", "4.2", "2026-10-19T10:00Z", "NL").to_json()


@pytest.fixture
def handler():
    handler = DatabaseHandler(uri="mongodb://example:27017", db_name="test")
    handler.db = MagicMock()
    return handler


def test_database_send_inserts_event_with_location(handler):
    handler.send("SimulationToNetherlands", PAYLOAD)

    collection = handler.db["SimulationToNetherlands"]
    doc = collection.insert_one.call_args[0][0]
    assert doc["serialNumber"] == "NL-1"
    assert doc["countryCode"] == "NL"
    assert doc["location"] == {"type": "Point", "coordinates": [4.2, 52.1]}
    assert "received_at" in doc


def test_database_send_wraps_driver_errors(handler):
    handler.db["SimulationToNetherlands"].insert_one.side_effect = PyMongoError("down")

    with pytest.raises(PublishError):
        handler.send("SimulationToNetherlands", PAYLOAD)


def test_database_requires_connection():
    with pytest.raises(RuntimeError):
        DatabaseHandler().send("SimulationToNetherlands", PAYLOAD)
    with pytest.raises(RuntimeError):
        DatabaseHandler().setup_collections(["SimulationToNetherlands"])


def test_database_setup_collections_indexes_each_channel(handler):
    handler.setup_collections(["SimulationToItaly", "SimulationToGermany"])

    assert handler.db["SimulationToItaly"].create_index.called
    assert handler.db["SimulationToGermany"].create_index.called


def test_database_stats(handler):
    handler.db["SimulationToItaly"].count_documents.return_value = 3

    assert handler.get_stats(["SimulationToItaly"]) == {"SimulationToItaly": 3}
    assert DatabaseHandler().get_stats(["SimulationToItaly"]) == {}


def test_mqtt_send_publishes_payload_on_channel_topic():
    channel = MqttChannel(host="broker", port=1883, qos=1)
    channel.client = MagicMock()
    channel.client.publish.return_value = MagicMock(rc=mqtt.MQTT_ERR_SUCCESS)

    channel.send("SimulationToBelgium", PAYLOAD)

    channel.client.publish.assert_called_once_with(
        "SimulationToBelgium", payload=PAYLOAD, qos=1, retain=False
    )


def test_mqtt_send_raises_on_error_code():
    channel = MqttChannel(host="broker", port=1883)
    channel.client = MagicMock()
    channel.client.publish.return_value = MagicMock(rc=mqtt.MQTT_ERR_NO_CONN)

    with pytest.raises(PublishError):
        channel.send("SimulationToBelgium", PAYLOAD)


def test_mqtt_requires_connection():
    with pytest.raises(RuntimeError):
        MqttChannel(host="broker").send("SimulationToBelgium", PAYLOAD)


def test_mqtt_connect_retries_then_starts_loop():
    client = MagicMock()
    client.connect.side_effect = [ConnectionRefusedError("refused"), 0]

    with patch("gps_simulator.core.mqtt_channel.create_client", return_value=client):
        channel = MqttChannel(host="broker", port=1883, username="sim", password="secret")
        channel.connect(attempts=3, retry_delay=0)

    assert client.connect.call_count == 2
    client.loop_start.assert_called_once()

    channel.close()
    client.loop_stop.assert_called_once()
    client.disconnect.assert_called_once()
    assert channel.client is None


def test_mqtt_connect_gives_up():
    client = MagicMock()
    client.connect.side_effect = ConnectionRefusedError("refused")

    with patch("gps_simulator.core.mqtt_channel.create_client", return_value=client):
        with pytest.raises(ConnectionRefusedError):
            MqttChannel(host="broker").connect(attempts=2, retry_delay=0)

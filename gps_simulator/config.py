"""
Configuration for the GPS fleet simulator.
"""
import os
from dotenv import load_dotenv
from pathlib import Path

# Load .env from project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)

# Message channel transport: "mqtt" or "mongodb"
TRANSPORT = os.getenv("TRANSPORT", "mqtt").lower()

# MQTT Configuration
MQTT_HOST = os.getenv("MQTT_HOST", "localhost")
MQTT_PORT = int(os.getenv("MQTT_PORT", "1883"))
MQTT_USERNAME = os.getenv("MQTT_USERNAME")
MQTT_PASSWORD = os.getenv("MQTT_PASSWORD")
MQTT_QOS = int(os.getenv("MQTT_QOS", "1"))

# MongoDB Configuration
MONGODB_URI = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
DB_NAME = os.getenv("DB_NAME", "gps_simulation")

# Routing keys (supported simulation markets)
COUNTRY_CODES = [
    code.strip().upper()
    for code in os.getenv("COUNTRY_CODES", "IT,DE,NL,BE,FI").split(",")
    if code.strip()
]
CHANNEL_PREFIX = os.getenv("CHANNEL_PREFIX", "SimulationTo")

# Input data
ROUTES_DIR = os.getenv("ROUTES_DIR", "res/routes")
CARS_FILE = os.getenv("CARS_FILE", "res/cars/cars.json")

# Simulator settings
POINT_INTERVAL_SECONDS = float(os.getenv("POINT_INTERVAL_SECONDS", "1.0"))
ROUTE_COOLDOWN_SECONDS = float(os.getenv("ROUTE_COOLDOWN_SECONDS", "900"))  # 15 minutes between routes
START_DELAY_MIN_SECONDS = float(os.getenv("START_DELAY_MIN_SECONDS", "1"))
START_DELAY_MAX_SECONDS = float(os.getenv("START_DELAY_MAX_SECONDS", "10"))
PUBLISH_QUEUE_SIZE = int(os.getenv("PUBLISH_QUEUE_SIZE", "1000"))  # Per destination channel
STATUS_INTERVAL_SECONDS = float(os.getenv("STATUS_INTERVAL_SECONDS", "10"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Default car speed when the roster does not specify one (km/h)
CAR_SPEED_MIN = 80
CAR_SPEED_MAX = 130

# Country names used to build channel names (SimulationToNetherlands etc.)
COUNTRY_NAMES = {
    "AT": "Austria",
    "BE": "Belgium",
    "CH": "Switzerland",
    "DE": "Germany",
    "DK": "Denmark",
    "ES": "Spain",
    "FI": "Finland",
    "FR": "France",
    "IT": "Italy",
    "LU": "Luxembourg",
    "NL": "Netherlands",
    "NO": "Norway",
    "PL": "Poland",
    "SE": "Sweden",
}


# Journey states
class JourneyState:
    STARTING = "starting"
    DRIVING_SUBROUTE = "driving_subroute"
    SUBROUTE_EXHAUSTED = "subroute_exhausted"
    ROUTE_EXHAUSTED = "route_exhausted"
    COOLDOWN = "cooldown"
    STOPPED = "stopped"


# Transport names
class Transport:
    MQTT = "mqtt"
    MONGODB = "mongodb"

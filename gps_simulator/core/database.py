"""
Database handler - MongoDB transport writing each channel to its own collection.
"""
from datetime import datetime, timezone
import json
from typing import Iterable, Optional
from pymongo import MongoClient, ASCENDING, GEOSPHERE
from pymongo.database import Database
from pymongo.errors import PyMongoError

from gps_simulator.config import MONGODB_URI, DB_NAME
from gps_simulator.errors import PublishError


class DatabaseHandler:
    """
    Handles all database operations.
    Every channel (SimulationToItaly, ...) is a collection of location events.
    """

    def __init__(self, uri: str = None, db_name: str = None):
        self.uri = uri or MONGODB_URI
        self.db_name = db_name or DB_NAME
        self.client: Optional[MongoClient] = None
        self.db: Optional[Database] = None

    def connect(self):
        """Establish database connection with connection pooling for the sender threads."""
        print(f"Connecting to MongoDB: {self.uri[:50]}...")
        self.client = MongoClient(
            self.uri,
            serverSelectionTimeoutMS=5000,
            connectTimeoutMS=10000,
            maxPoolSize=50,
            minPoolSize=1,
        )

        # Test connection
        self.client.admin.command('ping')
        print(f"Connected successfully!")

        self.db = self.client[self.db_name]
        print(f"Using database: {self.db_name}")

        return self.db

    def close(self):
        """Close database connection."""
        if self.client:
            self.client.close()
            print("Database connection closed.")

    def setup_collections(self, channel_names: Iterable[str]):
        """Create indexes for every channel collection."""
        if self.db is None:
            raise RuntimeError("Database not connected. Call connect() first.")

        print("\nSetting up collections...")

        for channel_name in channel_names:
            events = self.db[channel_name]
            events.create_index([("location", GEOSPHERE)])
            events.create_index("serialNumber")
            events.create_index("received_at")
            events.create_index([("serialNumber", ASCENDING), ("received_at", ASCENDING)])
            print(f"  - {channel_name}: indexes created")

        print("\nAll collections and indexes set up successfully!")

    def send(self, channel_name: str, payload: bytes):
        """
        Write a single serialized location event to the channel's collection.
        """
        if self.db is None:
            raise RuntimeError("Database not connected.")

        doc = json.loads(payload)
        doc["received_at"] = datetime.now(timezone.utc)
        # Additional field for MongoDB geospatial
        doc["location"] = {
            "type": "Point",
            "coordinates": [float(doc["lon"]), float(doc["lat"])]
        }

        try:
            self.db[channel_name].insert_one(doc)
        except PyMongoError as e:
            raise PublishError(f"Insert into {channel_name} failed: {e}") from e

    def get_stats(self, channel_names: Iterable[str]) -> dict:
        """Get document count per channel collection."""
        if self.db is None:
            return {}

        stats = {}
        for channel_name in channel_names:
            try:
                stats[channel_name] = self.db[channel_name].count_documents({})
            except PyMongoError:
                stats[channel_name] = 0

        return stats

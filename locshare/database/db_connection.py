"""
MongoDB connection helper.
Provides get_client() and get_db() for use by the stores.
"""

import logging

from pymongo import MongoClient, monitoring
from pymongo.database import Database


class HeartbeatLogger(monitoring.ServerHeartbeatListener):
    """
    Log lost connectivity to the MongoDB server.

    Successful heartbeats are ignored; only failures reach the log.
    """

    def started(self, event: monitoring.ServerHeartbeatStartedEvent) -> None:
        pass

    def succeeded(self, event: monitoring.ServerHeartbeatSucceededEvent) -> None:
        pass

    def failed(self, event: monitoring.ServerHeartbeatFailedEvent) -> None:
        logging.error(f"[DB] Heartbeat to {event.connection_id} failed: {event.reply}")


def get_client(uri: str, timeout_ms: int = 5000) -> MongoClient:
    """
    Returns a new MongoClient.

    The client is lazy: no network traffic happens until the first
    operation, so callers that need a reachable server should `ping()`.

    Args:
        uri (str): MongoDB connection string.
        timeout_ms (int): Server selection timeout in milliseconds.

    Returns:
        MongoClient: A thread-safe, pooled client.
    """
    return MongoClient(
        uri,
        serverSelectionTimeoutMS=timeout_ms,
        tz_aware=True,
        event_listeners=[HeartbeatLogger()],
    )


def get_db(client: MongoClient, name: str) -> Database:
    """Return the named database from `client`."""
    return client[name]


def ping(client: MongoClient) -> None:
    """
    Round-trip to the server.

    Raises:
        pymongo.errors.PyMongoError: If the server cannot be reached.
    """
    client.admin.command("ping")

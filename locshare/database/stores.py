"""
Document store adapters for the two collections.

UserStore      -> "users"      (credential records)
LocationStore  -> "locations"  (immutable location samples)

Both wrap a pymongo Collection handed in at construction, so tests can
replace them with in-memory fakes exposing the same methods.
"""

import logging
from datetime import datetime, timezone
from functools import wraps
from typing import Any, Callable, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, DESCENDING
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError, PyMongoError

from locshare.errors import ConflictError, InternalError

USERS_COLLECTION = "users"
LOCATIONS_COLLECTION = "locations"


def utcnow() -> datetime:
    # BSON dates carry millisecond precision
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def store_errors(method: Callable[..., Any]) -> Callable[..., Any]:
    """
    Turn driver failures into InternalError so they reach the client as a
    generic 500. The driver message is logged, never returned.
    """
    @wraps(method)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return method(*args, **kwargs)
        except PyMongoError:
            logging.exception(f"[DB] {method.__qualname__} failed")
            raise InternalError("Server error")

    return wrapper


def public_user(doc: Dict[str, Any]) -> Dict[str, Any]:
    """
    Strip a user document down to what may leave the server.

    Args:
        doc (dict): Raw document (with or without `passwordHash`).

    Returns:
        dict: id, username, email and createdAt.
    """
    created_at = doc.get("createdAt")
    return {
        "id": str(doc["_id"]),
        "username": doc["username"],
        "email": doc["email"],
        "createdAt": created_at.isoformat() if created_at else None,
    }


def location_to_dict(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": str(doc["_id"]),
        "latitude": doc["latitude"],
        "longitude": doc["longitude"],
        "createdAt": doc["createdAt"].isoformat(),
    }


class UserStore:
    """Credential store. Email uniqueness is enforced by a unique index."""

    def __init__(self, collection: Collection, clock: Callable[[], datetime] = utcnow) -> None:
        self.collection = collection
        self.clock = clock

    def ensure_indexes(self) -> None:
        self.collection.create_index([("email", ASCENDING)], unique=True, name="email_unique")

    @store_errors
    def create(self, username: str, email: str, password_hash: str) -> Dict[str, Any]:
        """
        Insert a new user.

        Returns:
            dict: The public representation of the stored user.

        Raises:
            ConflictError: The email is already registered.
        """
        doc = {
            "username": username,
            "email": email,
            "passwordHash": password_hash,
            "createdAt": self.clock(),
        }
        try:
            result = self.collection.insert_one(doc)
        except DuplicateKeyError:
            raise ConflictError("Email is already registered")
        doc["_id"] = result.inserted_id
        return public_user(doc)

    @store_errors
    def find_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        """
        Look up a user including the password hash.

        Returns:
            dict | None: `{"id", "username", "email", "createdAt", "passwordHash"}`.
        """
        doc = self.collection.find_one({"email": email})
        if not doc:
            return None
        user = public_user(doc)
        user["passwordHash"] = doc["passwordHash"]
        return user

    @store_errors
    def find_by_id(self, user_id: str) -> Optional[Dict[str, Any]]:
        try:
            oid = ObjectId(user_id)
        except (InvalidId, TypeError):
            return None
        doc = self.collection.find_one({"_id": oid}, {"passwordHash": 0})
        return public_user(doc) if doc else None

    @store_errors
    def list_all(self) -> List[Dict[str, Any]]:
        cursor = self.collection.find({}, {"passwordHash": 0}).sort("_id", ASCENDING)
        return [public_user(doc) for doc in cursor]


class LocationStore:
    """Location samples. Written once, never updated."""

    def __init__(self, collection: Collection, clock: Callable[[], datetime] = utcnow) -> None:
        self.collection = collection
        self.clock = clock

    def ensure_indexes(self) -> None:
        self.collection.create_index([("createdAt", DESCENDING)], name="created_at_desc")

    @store_errors
    def create(self, latitude: float, longitude: float) -> Dict[str, Any]:
        doc = {"latitude": latitude, "longitude": longitude, "createdAt": self.clock()}
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return location_to_dict(doc)

    @store_errors
    def list_recent(self, limit: int) -> List[Dict[str, Any]]:
        # _id breaks ties between samples written within the same millisecond
        cursor = (
            self.collection.find()
            .sort([("createdAt", DESCENDING), ("_id", DESCENDING)])
            .limit(limit)
        )
        return [location_to_dict(doc) for doc in cursor]

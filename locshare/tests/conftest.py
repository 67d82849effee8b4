import pytest
from datetime import datetime, timedelta, timezone
from argon2 import PasswordHasher
from bson import ObjectId

from locshare.errors import ConflictError
from locshare.gateway.server import create_app

TEST_SECRET = "test_secret"


class TickingClock:
    """Returns a strictly increasing timestamp on every call."""

    def __init__(self):
        self.now = datetime(2025, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        self.now += timedelta(seconds=1)
        return self.now


class FakeUserStore:
    """In-memory stand-in for UserStore."""

    def __init__(self, clock=None):
        self.docs = []
        self.clock = clock or TickingClock()

    def create(self, username, email, password_hash):
        if any(d["email"] == email for d in self.docs):
            raise ConflictError("Email is already registered")
        doc = {
            "id": str(ObjectId()),
            "username": username,
            "email": email,
            "passwordHash": password_hash,
            "createdAt": self.clock().isoformat(),
        }
        self.docs.append(doc)
        return self._public(doc)

    def find_by_email(self, email):
        for d in self.docs:
            if d["email"] == email:
                return dict(d)
        return None

    def find_by_id(self, user_id):
        for d in self.docs:
            if d["id"] == user_id:
                return self._public(d)
        return None

    def list_all(self):
        return [self._public(d) for d in self.docs]

    @staticmethod
    def _public(doc):
        return {k: v for k, v in doc.items() if k != "passwordHash"}


class FakeLocationStore:
    """In-memory stand-in for LocationStore."""

    def __init__(self, clock=None):
        self.docs = []
        self.clock = clock or TickingClock()

    def create(self, latitude, longitude):
        doc = {
            "id": str(ObjectId()),
            "latitude": latitude,
            "longitude": longitude,
            "createdAt": self.clock().isoformat(),
        }
        self.docs.append(doc)
        return dict(doc)

    def list_recent(self, limit):
        ordered = sorted(self.docs, key=lambda d: d["createdAt"], reverse=True)
        return [dict(d) for d in ordered[:limit]]


@pytest.fixture
def fast_hasher():
    # Cheap Argon2 parameters keep the suite fast
    return PasswordHasher(time_cost=1, memory_cost=8, parallelism=1)


@pytest.fixture
def user_store():
    return FakeUserStore()


@pytest.fixture
def location_store():
    return FakeLocationStore()


@pytest.fixture
def app_config():
    return {"TESTING": True, "JWT_SECRET": TEST_SECRET, "APP_ENV": "development"}


@pytest.fixture
def app(app_config, user_store, location_store, fast_hasher):
    return create_app(app_config, user_store=user_store,
                      location_store=location_store, hasher=fast_hasher)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_service(app):
    return app.extensions["auth_service"]


@pytest.fixture
def location_service(app):
    return app.extensions["location_service"]

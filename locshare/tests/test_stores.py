import pytest
from datetime import datetime, timezone
from unittest.mock import MagicMock

from bson import ObjectId
from pymongo import DESCENDING
from pymongo.errors import AutoReconnect, DuplicateKeyError

from locshare.database.stores import LocationStore, UserStore
from locshare.errors import ConflictError, InternalError

NOW = datetime(2025, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def mock_collection():
    collection = MagicMock()
    collection.insert_one.return_value.inserted_id = ObjectId("64b7f0000000000000000001")
    return collection


def test_user_create(mock_collection):
    store = UserStore(mock_collection, clock=lambda: NOW)

    user = store.create("alice", "a@x.com", "$argon2id$hash")

    assert user == {
        "id": "64b7f0000000000000000001",
        "username": "alice",
        "email": "a@x.com",
        "createdAt": NOW.isoformat(),
    }
    doc = mock_collection.insert_one.call_args[0][0]
    assert doc["passwordHash"] == "$argon2id$hash"
    assert doc["createdAt"] == NOW


def test_user_create_duplicate(mock_collection):
    mock_collection.insert_one.side_effect = DuplicateKeyError("E11000 duplicate key")
    store = UserStore(mock_collection)

    with pytest.raises(ConflictError):
        store.create("alice", "a@x.com", "hash")


def test_user_indexes(mock_collection):
    UserStore(mock_collection).ensure_indexes()

    args, kwargs = mock_collection.create_index.call_args
    assert args[0] == [("email", 1)]
    assert kwargs["unique"] is True


def test_find_by_email_includes_hash(mock_collection):
    oid = ObjectId()
    mock_collection.find_one.return_value = {
        "_id": oid, "username": "alice", "email": "a@x.com",
        "passwordHash": "hash", "createdAt": NOW,
    }
    store = UserStore(mock_collection)

    user = store.find_by_email("a@x.com")

    assert user["id"] == str(oid)
    assert user["passwordHash"] == "hash"
    mock_collection.find_one.assert_called_once_with({"email": "a@x.com"})


def test_find_by_id_bad_id(mock_collection):
    assert UserStore(mock_collection).find_by_id("not-an-object-id") is None
    mock_collection.find_one.assert_not_called()


def test_list_all_excludes_hash(mock_collection):
    mock_collection.find.return_value.sort.return_value = [
        {"_id": ObjectId(), "username": "alice", "email": "a@x.com", "createdAt": NOW},
    ]
    store = UserStore(mock_collection)

    users = store.list_all()

    assert mock_collection.find.call_args[0] == ({}, {"passwordHash": 0})
    assert "passwordHash" not in users[0]


def test_location_create(mock_collection):
    store = LocationStore(mock_collection, clock=lambda: NOW)

    location = store.create(37.77, -122.41)

    assert location == {
        "id": "64b7f0000000000000000001",
        "latitude": 37.77,
        "longitude": -122.41,
        "createdAt": NOW.isoformat(),
    }


def test_location_list_recent(mock_collection):
    cursor = mock_collection.find.return_value
    cursor.sort.return_value.limit.return_value = [
        {"_id": ObjectId(), "latitude": 1.0, "longitude": 2.0, "createdAt": NOW},
    ]
    store = LocationStore(mock_collection)

    recent = store.list_recent(10)

    cursor.sort.assert_called_once_with([("createdAt", DESCENDING), ("_id", DESCENDING)])
    cursor.sort.return_value.limit.assert_called_once_with(10)
    assert recent[0]["latitude"] == 1.0


def test_driver_failure_becomes_internal_error(mock_collection):
    mock_collection.insert_one.side_effect = AutoReconnect("connection reset")
    store = LocationStore(mock_collection)

    with pytest.raises(InternalError) as exc:
        store.create(1.0, 2.0)
    assert exc.value.status_code == 500
    assert "connection reset" not in exc.value.message


def test_register_route_hides_driver_failure(app_config, location_store, fast_hasher, mock_collection):
    from locshare.gateway.server import create_app

    mock_collection.insert_one.side_effect = AutoReconnect("10.0.0.5:27017 connection reset")
    app = create_app(app_config, user_store=UserStore(mock_collection),
                     location_store=location_store, hasher=fast_hasher)

    response = app.test_client().post(
        "/register", json={"username": "alice", "email": "a@x.com", "password": "secret1"})

    assert response.status_code == 500
    assert response.get_json() == {"error": "Server error"}

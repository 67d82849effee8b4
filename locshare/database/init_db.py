"""
Quick database bootstrap and integrity check.

Creates the indexes both collections rely on (unique email, createdAt
ordering) and then performs a write/read/cleanup cycle to confirm the
unique constraint is actually enforced by the server.

Run with:  python -m locshare.database.init_db
"""

import sys
import uuid

from bson import ObjectId
from pymongo.errors import PyMongoError

from locshare.config import load_config
from locshare.database.db_connection import get_client, get_db, ping
from locshare.database.stores import (
    LOCATIONS_COLLECTION,
    USERS_COLLECTION,
    LocationStore,
    UserStore,
)
from locshare.errors import ConflictError, InternalError


def main() -> int:
    config = load_config()
    print("--- Running Database Quick Test ---")

    client = get_client(config["DB_CONNECTION_STRING"], config["DB_TIMEOUT_MS"])
    db = get_db(client, config["DB_NAME"])
    users = UserStore(db[USERS_COLLECTION])
    locations = LocationStore(db[LOCATIONS_COLLECTION])

    probe_email = f"init-db-{uuid.uuid4().hex[:8]}@example.com"
    location_id = None

    try:
        # 1. Basic connection check
        ping(client)
        print(f"Connected! Database: {config['DB_NAME']}")

        # 2. Indexes
        users.ensure_indexes()
        locations.ensure_indexes()
        print("Indexes ensured on 'users' and 'locations'.")

        # 3. Insert probe data
        user_id = users.create("init-db", probe_email, "not-a-real-hash")["id"]
        location_id = locations.create(0.0, 0.0)["id"]
        print(f"Data insertion complete: user_id={user_id}, location_id={location_id}")

        # 4. The unique index must reject a second user with the same email
        try:
            users.create("init-db-dup", probe_email, "not-a-real-hash")
        except ConflictError:
            print("Unique email constraint is enforced.")
        else:
            raise RuntimeError("Duplicate email was accepted. The unique index is missing.")

        print("\nDatabase test PASSED successfully!")
        return 0

    except (PyMongoError, InternalError, RuntimeError) as e:
        print("\nDatabase test FAILED:")
        print(f" Error: {e}")
        return 1

    finally:
        # 5. Mandatory Cleanup
        print("\nCleaning up test data...")
        try:
            users.collection.delete_many({"email": probe_email})
            if location_id:
                locations.collection.delete_one({"_id": ObjectId(location_id)})
            print("Cleanup complete.")
        except PyMongoError as cleanup_error:
            print(f"Cleanup FAILED. Database may contain leftover test data: {cleanup_error}")
        finally:
            client.close()
            print("Database connection closed.")


if __name__ == "__main__":
    sys.exit(main())

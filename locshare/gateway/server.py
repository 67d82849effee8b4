"""
API gateway: combines the auth and location blueprints.
This is the entrypoint for both development and production.
"""

import logging
import os
import signal
import sys
from typing import Any, Mapping, Optional, Tuple

from argon2 import PasswordHasher
from flask import Flask, jsonify, send_from_directory, Response
from flask_cors import CORS
from pymongo.errors import PyMongoError
from werkzeug.exceptions import HTTPException

from locshare.auth_service.routes import auth_bp
from locshare.auth_service.service import AuthService
from locshare.config import load_config
from locshare.database.db_connection import get_client, get_db, ping
from locshare.database.stores import (
    LOCATIONS_COLLECTION,
    USERS_COLLECTION,
    LocationStore,
    UserStore,
)
from locshare.location_service.routes import locations_bp
from locshare.location_service.service import LocationService

# Basic console logging during API requests
logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(asctime)s - %(message)s")


def create_app(test_config: Optional[Mapping[str, Any]] = None,
               user_store=None, location_store=None,
               hasher: Optional[PasswordHasher] = None) -> Flask:
    """
    Application factory for creating the Flask app.

    Stores are built from DB_CONNECTION_STRING unless both are passed in,
    which is how the tests run without a MongoDB server. A store built
    here must answer a ping and gets its indexes (unique email) before
    the app is returned.

    Raises:
        RuntimeError: JWT_SECRET is unset or MongoDB is unreachable.

    Args:
        test_config (Mapping, optional): Overrides for the loaded settings.
        user_store: Replacement for the MongoDB-backed UserStore.
        location_store: Replacement for the MongoDB-backed LocationStore.
        hasher (PasswordHasher, optional): Argon2 parameters override.

    Returns:
        Flask: The configured Flask application.
    """
    app = Flask(__name__, static_folder=None)
    app.config.update(load_config())
    if test_config:
        app.config.update(test_config)

    if not app.config.get("JWT_SECRET"):
        raise RuntimeError("JWT_SECRET is missing. Set it in .env")

    origins = app.config["CORS_ORIGINS"]
    CORS(app, resources={
        r"/*": {
            "origins": "*" if origins == "*" else [o.strip() for o in origins.split(",") if o.strip()],
            "methods": ["GET", "POST", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"],
        }
    })

    # --- STORES & SERVICES ---
    if user_store is None or location_store is None:
        client = get_client(app.config["DB_CONNECTION_STRING"], app.config["DB_TIMEOUT_MS"])
        db = get_db(client, app.config["DB_NAME"])
        app.extensions["mongo_client"] = client
        if user_store is None:
            user_store = UserStore(db[USERS_COLLECTION])
        if location_store is None:
            location_store = LocationStore(db[LOCATIONS_COLLECTION])

        # Refuse to accept traffic without a reachable store
        try:
            ping(client)
            for store in (user_store, location_store):
                if isinstance(store, (UserStore, LocationStore)):
                    store.ensure_indexes()
        except PyMongoError as e:
            client.close()
            raise RuntimeError(f"MongoDB connection error: {e}") from e
        logging.info("Connected to MongoDB successfully")

    app.extensions["auth_service"] = AuthService(
        user_store,
        app.config["JWT_SECRET"],
        expires_minutes=app.config["TOKEN_EXPIRATION_MINUTES"],
        hasher=hasher,
    )
    app.extensions["location_service"] = LocationService(location_store)

    # --- REGISTER BLUEPRINTS ---
    app.register_blueprint(auth_bp)
    app.register_blueprint(locations_bp)
    logging.info("All blueprints registered successfully.")

    # --- BASIC HEALTH CHECKPOINTS ---
    @app.route("/health")
    def health() -> Tuple[Response, int]:
        """
        Health check endpoint.
        """
        return jsonify({"status": "ok"}), 200

    if app.config["APP_ENV"] == "production":
        register_frontend(app, app.config["FRONTEND_DIST"])
    else:
        @app.route("/")
        def ping_root() -> Tuple[Response, int]:
            """
            Root URL for simple 'online' check.
            """
            return jsonify({"status": "gateway_ok"}), 200

    # --- ERROR HANDLERS ---
    @app.errorhandler(HTTPException)
    def http_error(error: HTTPException) -> Tuple[Response, int]:
        return jsonify({"error": error.name}), error.code

    @app.errorhandler(Exception)
    def internal_error(error: Exception) -> Tuple[Response, int]:
        logging.exception("Unhandled error")
        return jsonify({"error": "Server error"}), 500

    return app


def register_frontend(app: Flask, dist_dir: str) -> None:
    """
    Serve the compiled client and hand every unknown GET path to its
    index.html so the client-side router can resolve it.

    Args:
        app (Flask): Application to attach the routes to.
        dist_dir (str): Directory holding index.html and the built assets.
    """
    dist_dir = os.path.abspath(dist_dir)

    @app.route("/", defaults={"path": ""})
    @app.route("/<path:path>")
    def frontend(path: str) -> Response:
        if path and os.path.isfile(os.path.join(dist_dir, path)):
            return send_from_directory(dist_dir, path)
        return send_from_directory(dist_dir, "index.html")

    logging.info(f"Serving frontend from {dist_dir}")


def main() -> None:
    try:
        app = create_app()
    except RuntimeError as e:
        logging.error(str(e))
        sys.exit(1)
    client = app.extensions["mongo_client"]

    def shutdown(signum: int, frame: Any) -> None:
        client.close()
        logging.info("Server closed. Database instance disconnected")
        sys.exit(0)

    signal.signal(signal.SIGTERM, shutdown)

    port = app.config["PORT"]
    logging.info(f"Server running on http://localhost:{port}")
    app.run(host="0.0.0.0", port=port, debug=app.config["APP_ENV"] != "production")


if __name__ == "__main__":
    main()

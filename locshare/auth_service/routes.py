"""
Authentication service route handlers.

Provides routes for:
- User registration
- User login
- Profile retrieval (/me)
- User listing

Business rules live in `auth_service.service.AuthService`; JWT logic is
delegated to `auth_service.utils`.
"""

import logging
from typing import Tuple

from flask import Blueprint, current_app, g, jsonify, request, Response

from locshare.auth_service.service import AuthService
from locshare.auth_service.utils import token_required
from locshare.errors import ServiceError
from locshare.gateway.http import error_response, get_json_body

auth_bp = Blueprint("auth", __name__)


def _service() -> AuthService:
    return current_app.extensions["auth_service"]


# --- REQUEST LOGGING ---
@auth_bp.before_request
def before_request() -> None:
    """
    Log the method and path of every request to the authentication routes.
    Bodies and headers are left out so credentials never reach the log.
    """
    logging.info(f"[Auth] Incoming {request.method} {request.path}")


@auth_bp.after_request
def after_request(response: Response) -> Response:
    """
    Log the response status code for every request.

    Args:
        response (Response): The Flask response object.

    Returns:
        Response: The passed-through response object.
    """
    logging.info(f"[Auth] Response {response.status}")
    return response


# --- REGISTER ---
@auth_bp.route("/register", methods=["POST"])
def register() -> Tuple[Response, int]:
    """
    Register a new user in the system.

    Expects a JSON body with:
    - username (str)
    - email (str): Unique email address.
    - password (str)

    Returns:
        201: JSON with a message and the public user.
        400: Missing fields, invalid JSON, or email already exists.
        500: Server-side error (hashing or database).
    """
    try:
        data = get_json_body()
        user = _service().register(data.get("username"), data.get("email"), data.get("password"))
    except ServiceError as e:
        return error_response(e)
    except Exception:
        logging.exception("[Auth] Error during registration")
        return jsonify({"error": "Server error"}), 500

    logging.info(f"[Auth] Registered user {user['id']}")
    return jsonify({"message": "User registered successfully", "user": user}), 201


# --- LOGIN ---
@auth_bp.route("/login", methods=["POST"])
def login() -> Tuple[Response, int]:
    """
    Authenticate a user and return a JWT.

    Credentials are only accepted in the request body; there is no GET
    variant.

    Expects a JSON body with:
    - email (str)
    - password (str)

    Returns:
        200: JSON with message, token and the public user.
        400: Missing credentials.
        401: Wrong password.
        404: Unknown email.
        500: Database error.
    """
    try:
        data = get_json_body()
        result = _service().login(data.get("email"), data.get("password"))
    except ServiceError as e:
        return error_response(e)
    except Exception:
        logging.exception("[Auth] Error during login")
        return jsonify({"error": "Server error"}), 500

    return jsonify({
        "message": "Login successful",
        "token": result["token"],
        "user": result["user"],
    }), 200


# --- GET CURRENT USER ---
@auth_bp.route("/me", methods=["GET"])
@token_required
def get_current_user() -> Tuple[Response, int]:
    """
    Retrieve the profile of the token's owner.

    Requires Authorization header: Bearer <token>

    Returns:
        200: Public user object.
        401/403: Authentication failure.
        404: User no longer exists.
        500: Database error.
    """
    try:
        user = _service().get_user(g.current_user["id"])
    except ServiceError as e:
        return error_response(e)
    except Exception:
        logging.exception("[Auth] Could not retrieve user")
        return jsonify({"error": "Server error"}), 500

    return jsonify(user), 200


# --- LIST USERS ---
@auth_bp.route("/users", methods=["GET"])
def list_users() -> Tuple[Response, int]:
    """
    List every registered user, without password hashes.

    Returns:
        200: List of user objects.
        500: Database error.
    """
    try:
        users = _service().list_users()
    except Exception:
        logging.exception("[Auth] Error fetching users")
        return jsonify({"error": "Server error"}), 500

    return jsonify(users), 200

"""
Location service routes: submit a sample, list recent samples.
"""

import logging
from typing import Tuple

from flask import Blueprint, current_app, g, jsonify, request, Response

from locshare.auth_service.utils import verify_token_from_request
from locshare.errors import ServiceError
from locshare.gateway.http import error_response, get_json_body
from locshare.location_service.service import LocationService

locations_bp = Blueprint("locations", __name__)


def _service() -> LocationService:
    return current_app.extensions["location_service"]


@locations_bp.before_request
def before_request() -> None:
    logging.info(f"[Locations] Incoming {request.method} {request.path}")


@locations_bp.after_request
def after_request(response: Response) -> Response:
    logging.info(f"[Locations] Response {response.status}")
    return response


# The browser client posts to "/send-location/", so accept both spellings.
@locations_bp.route("/send-location", methods=["POST"], strict_slashes=False)
def send_location() -> Tuple[Response, int]:
    """
    Save the caller's current position.

    Expects a JSON body with:
    - latitude (number): -90..90
    - longitude (number): -180..180

    Returns:
        200: JSON with a message and the stored location.
        400: Missing fields, invalid values, or invalid JSON.
        500: Database error.
    """
    try:
        data = get_json_body()
        location = _service().submit(data.get("latitude"), data.get("longitude"))
    except ServiceError as e:
        return error_response(e)
    except Exception:
        logging.exception("[Locations] Server error while saving location")
        return jsonify({"error": "Server error"}), 500

    return jsonify({"message": "Location saved successfully", "location": location}), 200


@locations_bp.route("/locations", methods=["GET"])
def list_locations() -> Tuple[Response, int]:
    """
    Return the ten most recent samples, newest first.

    When PROTECT_LOCATIONS is enabled the request must carry
    `Authorization: Bearer <token>`.

    Returns:
        200: List of location objects.
        401/403: Authentication failure (protected mode only).
        500: Database error.
    """
    if current_app.config.get("PROTECT_LOCATIONS"):
        identity, err, code = verify_token_from_request()
        if err:
            return err, code
        g.current_user = identity

    try:
        locations = _service().list_recent()
    except Exception:
        logging.exception("[Locations] Error fetching locations")
        return jsonify({"error": "Error fetching locations"}), 500

    return jsonify(locations), 200

"""
Small request/response helpers shared by the blueprints.
"""

from typing import Any, Dict, Tuple

from flask import jsonify, request, Response

from locshare.errors import ServiceError, ValidationError


def get_json_body() -> Dict[str, Any]:
    """
    Parse the request body as a JSON object.

    An empty body is treated as `{}` so missing-field validation can
    produce the more specific message.

    Raises:
        ValidationError: The body is present but is not a JSON object.
    """
    data = request.get_json(silent=True)
    if data is None:
        if request.get_data(cache=True):
            raise ValidationError("Invalid JSON")
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON")
    return data


def error_response(err: ServiceError) -> Tuple[Response, int]:
    return jsonify(err.to_dict()), err.status_code

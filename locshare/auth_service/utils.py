"""
Shared authentication helpers.
Provides token creation, decoding, and the bearer-token route gate.
"""

import jwt
from datetime import datetime, timedelta, timezone
from functools import wraps
from typing import Any, Callable, Dict, Optional, Tuple

from flask import current_app, g, jsonify, request, Response

from locshare.errors import ForbiddenError, ServiceError, UnauthorizedError

ALGORITHM = "HS256"
TOKEN_EXPIRATION_MINUTES = 60


# --- JWT CREATION ---
def create_token(user_id: str, email: str, secret: str,
                 expires_minutes: int = TOKEN_EXPIRATION_MINUTES) -> str:
    """
    Generates a new JWT for a given user.

    Args:
        user_id (str): The unique ID of the user.
        email (str): The user's email address.
        secret (str): HMAC signing secret.
        expires_minutes (int): Lifetime of the token.

    Returns:
        str: Encoded JWT string.
    """
    now = datetime.now(timezone.utc)

    payload = {
        "sub": str(user_id),
        "email": email,
        "exp": now + timedelta(minutes=expires_minutes),
        "iat": now
    }

    return jwt.encode(payload, secret, algorithm=ALGORITHM)


# --- JWT VALIDATION ---
def decode_token(token: Optional[str], secret: str) -> Dict[str, str]:
    """
    Verify a JWT and return the identity it carries.

    Args:
        token (str): Raw token (without the "Bearer " prefix).
        secret (str): HMAC signing secret.

    Returns:
        dict: {"id": ..., "email": ...}

    Raises:
        UnauthorizedError: No token was supplied.
        ForbiddenError: Malformed, expired, wrongly signed, or missing claims.
    """
    if not token:
        raise UnauthorizedError("missing token")

    try:
        payload = jwt.decode(
            token, secret, algorithms=[ALGORITHM],
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        raise ForbiddenError("token expired")
    except jwt.InvalidTokenError:
        raise ForbiddenError("invalid token")

    user_id = payload.get("sub")
    email = payload.get("email")
    if not user_id or not email:
        raise ForbiddenError("invalid token")

    return {"id": user_id, "email": email}


def bearer_token() -> Optional[str]:
    """Pull the token out of `Authorization: Bearer <token>`, if present."""
    auth = request.headers.get("Authorization", "")
    if not auth.startswith("Bearer "):
        return None
    return auth.split(" ", 1)[1].strip() or None


def verify_token_from_request() -> Tuple[Optional[Dict[str, str]], Optional[Response], Optional[int]]:
    """
    Verify the JWT in the Authorization header.

    Returns:
        tuple: (identity, error_response, status_code)
               If successful, error_response and status_code are None.
               If failed, identity is None.
    """
    auth_service = current_app.extensions["auth_service"]
    try:
        identity = auth_service.verify_token(bearer_token())
    except ServiceError as e:
        return None, jsonify(e.to_dict()), e.status_code
    return identity, None, None


def token_required(view: Callable[..., Any]) -> Callable[..., Any]:
    """
    Route decorator: reject the request unless it carries a valid token.

    The decoded identity is available to the view as `g.current_user`.
    """
    @wraps(view)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        identity, err, code = verify_token_from_request()
        if err:
            return err, code
        g.current_user = identity
        return view(*args, **kwargs)

    return wrapper

"""
Service-level error taxonomy.

Services raise these on purpose; the route handlers turn them into
`{"error": message, ...}` JSON bodies with the matching status code.
"""

from typing import Any, Dict, Optional


class ServiceError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code = 500

    def __init__(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.extra = extra or {}

    def to_dict(self) -> Dict[str, Any]:
        body = {"error": self.message}
        body.update(self.extra)
        return body


class ValidationError(ServiceError):
    status_code = 400


class ConflictError(ServiceError):
    # Duplicate email. The browser client only distinguishes 2xx from 400.
    status_code = 400


class NotFoundError(ServiceError):
    status_code = 404


class UnauthorizedError(ServiceError):
    status_code = 401


class ForbiddenError(ServiceError):
    status_code = 403


class InternalError(ServiceError):
    status_code = 500

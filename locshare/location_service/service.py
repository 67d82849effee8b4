"""
Location service: validates coordinate pairs and records them.
"""

import math
from typing import Any, Dict, List

from locshare.errors import ValidationError

DEFAULT_RECENT_LIMIT = 10
LATITUDE_RANGE = (-90.0, 90.0)
LONGITUDE_RANGE = (-180.0, 180.0)


def parse_coordinate(value: Any, bounds: tuple, label: str) -> float:
    """
    Coerce a JSON value into a finite float within `bounds`.

    Numbers and numeric strings are accepted; booleans are not.

    Raises:
        ValidationError: Not numeric, not finite, or out of range.
    """
    error = ValidationError(f"Invalid {label} value", {"received": value})
    if isinstance(value, bool):
        raise error
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise error
    low, high = bounds
    if not math.isfinite(number) or number < low or number > high:
        raise error
    return number


class LocationService:
    """Records location samples and lists the most recent ones."""

    def __init__(self, locations) -> None:
        self.locations = locations

    def submit(self, latitude: Any, longitude: Any) -> Dict[str, Any]:
        """
        Validate and persist one sample.

        Returns:
            dict: The stored sample, including its id and createdAt.

        Raises:
            ValidationError: A field is missing, non-finite or out of range.
        """
        if latitude is None or longitude is None:
            raise ValidationError(
                "Missing required fields",
                {"received": {"latitude": latitude, "longitude": longitude}},
            )

        lat = parse_coordinate(latitude, LATITUDE_RANGE, "latitude")
        lon = parse_coordinate(longitude, LONGITUDE_RANGE, "longitude")
        return self.locations.create(lat, lon)

    def list_recent(self, limit: int = DEFAULT_RECENT_LIMIT) -> List[Dict[str, Any]]:
        return self.locations.list_recent(max(1, int(limit)))

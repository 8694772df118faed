"""Great-circle distance helpers for user coordinates."""

import math
from typing import Any, Optional, Tuple

EARTH_RADIUS_KM = 6371.0


def distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance in kilometres between two points in decimal degrees."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    # Rounding can push near-antipodal points just past 1
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def _to_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def parse_coordinates(latitude: Any, longitude: Any) -> Optional[Tuple[float, float]]:
    """
    Convert stored coordinates (decimal strings or numbers) to a float pair.

    Returns None when either value is missing, not a number, or out of range,
    so callers can treat the location as absent.
    """
    lat = _to_float(latitude)
    lon = _to_float(longitude)
    if lat is None or lon is None:
        return None
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0):
        return None
    return lat, lon


def user_coordinates(user) -> Optional[Tuple[float, float]]:
    return parse_coordinates(getattr(user, "latitude", None), getattr(user, "longitude", None))

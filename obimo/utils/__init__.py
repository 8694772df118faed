# Utilities package
from .geo import distance_km, parse_coordinates, user_coordinates
from .json_extract import extract_json_object

__all__ = [
    "distance_km",
    "parse_coordinates",
    "user_coordinates",
    "extract_json_object",
]

"""Great-circle distance helpers."""
import math

from bustracker.models.request import Coordinate

EARTH_RADIUS_M = 6371000


def haversine_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Calculate distance between two points in meters (Haversine formula)"""
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lng = math.radians(lng2 - lng1)

    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_M * c


def distance_meters(a: Coordinate, b: Coordinate) -> float:
    return haversine_distance(a.lat, a.lng, b.lat, b.lng)

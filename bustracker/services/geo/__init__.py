from .distance import distance_meters, haversine_distance
from .polyline import decode_polyline, decode_polylines, encode_polyline

__all__ = [
    "distance_meters",
    "haversine_distance",
    "decode_polyline",
    "decode_polylines",
    "encode_polyline",
]

"""
Encoded polyline codec.

The format is Google's encoded polyline algorithm: coordinates are scaled to
1e-5 degrees, delta-encoded against the previous point, zig-zag encoded and
written as little-endian 5-bit chunks offset by 63, with 0x20 marking that
another chunk follows.
https://developers.google.com/maps/documentation/utilities/polylinealgorithm
"""
import math
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from pydantic import ValidationError

from bustracker.errors import PolylineDecodeError
from bustracker.models.request import Coordinate

PRECISION = 100000

_CHUNK_MASK = 0x1F
_CONTINUATION = 0x20
_OFFSET = 63

CoordinateLike = Union[Coordinate, Tuple[float, float]]


class _Cursor:
    """Reads one variable-length value at a time from an encoded string."""

    def __init__(self, encoded: str):
        self._encoded = encoded
        self.index = 0

    def has_more(self) -> bool:
        return self.index < len(self._encoded)

    def read_value(self) -> int:
        start = self.index
        shift = 0
        result = 0
        while True:
            if self.index >= len(self._encoded):
                raise PolylineDecodeError(
                    f"Truncated polyline: value starting at position {start} never terminates"
                )
            char = self._encoded[self.index]
            chunk = ord(char) - _OFFSET
            if chunk < 0 or chunk > 63:
                raise PolylineDecodeError(
                    f"Invalid polyline character {char!r} at position {self.index}"
                )
            self.index += 1
            result |= (chunk & _CHUNK_MASK) << shift
            shift += 5
            if chunk < _CONTINUATION:
                break

        return ~(result >> 1) if result & 1 else result >> 1


def decode_polyline(encoded: Optional[str]) -> List[Coordinate]:
    """Decode an encoded polyline into coordinates.

    Args:
        encoded: Encoded polyline string; None or "" yield an empty list

    Returns:
        List of Coordinate in path order

    Raises:
        PolylineDecodeError: If the input is truncated or holds characters
            outside the encoding alphabet
    """
    if not encoded:
        return []

    cursor = _Cursor(encoded)
    coordinates = []
    lat = 0
    lng = 0

    while cursor.has_more():
        lat += cursor.read_value()
        if not cursor.has_more():
            raise PolylineDecodeError(
                f"Truncated polyline: latitude at position {cursor.index} has no longitude"
            )
        lng += cursor.read_value()
        try:
            coordinates.append(Coordinate(lat=lat / PRECISION, lng=lng / PRECISION))
        except ValidationError as exc:
            raise PolylineDecodeError(
                f"Polyline decodes to an out-of-range coordinate near position {cursor.index}"
            ) from exc

    return coordinates


def decode_polylines(encoded_list: Iterable[Optional[str]]) -> List[Coordinate]:
    """Decode several polylines (e.g. one per route step) into one path"""
    path = []
    for encoded in encoded_list:
        path.extend(decode_polyline(encoded))
    return path


def _round_half_away(value: float) -> int:
    scaled = abs(value) * PRECISION
    return int(math.copysign(math.floor(scaled + 0.5), value))


def _encode_value(value: int) -> str:
    value = ~(value << 1) if value < 0 else value << 1
    chunks = []
    while value >= _CONTINUATION:
        chunks.append(chr((_CONTINUATION | (value & _CHUNK_MASK)) + _OFFSET))
        value >>= 5
    chunks.append(chr(value + _OFFSET))
    return "".join(chunks)


def _as_pair(point: CoordinateLike) -> Tuple[float, float]:
    if isinstance(point, Coordinate):
        return point.lat, point.lng
    lat, lng = point
    return lat, lng


def encode_polyline(coordinates: Sequence[CoordinateLike]) -> str:
    """Encode coordinates (Coordinate or (lat, lng) pairs) at 1e-5 precision"""
    parts = []
    prev_lat = 0
    prev_lng = 0

    for point in coordinates:
        lat, lng = _as_pair(point)
        lat_e5 = _round_half_away(lat)
        lng_e5 = _round_half_away(lng)
        parts.append(_encode_value(lat_e5 - prev_lat))
        parts.append(_encode_value(lng_e5 - prev_lng))
        prev_lat, prev_lng = lat_e5, lng_e5

    return "".join(parts)

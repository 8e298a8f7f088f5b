"""Builders for raw Google Directions payloads and a recording stub map service."""
from typing import Dict, List, Optional

from bustracker.services.map.map_service import MapService


def walk_step(meters: float, instruction: str = "Walk to stop", polyline: str = "??") -> Dict:
    return {
        "travel_mode": "WALKING",
        "html_instructions": instruction,
        "distance": {"text": f"{int(meters)} m", "value": meters},
        "duration": {"text": "4 mins", "value": 240},
        "polyline": {"points": polyline},
    }


def transit_step(
    vehicle_type: str = "BUS",
    *,
    short_name: Optional[str] = "10H",
    name: str = "Secunderabad - Kondapur",
    meters: float = 5000,
    num_stops: int = 6,
) -> Dict:
    line = {"name": name, "vehicle": {"type": vehicle_type, "name": vehicle_type.title()}}
    if short_name is not None:
        line["short_name"] = short_name
    return {
        "travel_mode": "TRANSIT",
        "html_instructions": f"{vehicle_type.title()} towards Kondapur",
        "distance": {"text": f"{meters / 1000:.1f} km", "value": meters},
        "duration": {"text": "20 mins", "value": 1200},
        "polyline": {"points": "_p~iF~ps|U"},
        "transit_details": {
            "line": line,
            "departure_stop": {"name": "Ameerpet"},
            "arrival_stop": {"name": "Hitech City"},
            "departure_time": {"text": "9:05 AM"},
            "arrival_time": {"text": "9:25 AM"},
            "num_stops": num_stops,
        },
    }


def raw_route(
    steps: List[Dict],
    *,
    duration_seconds: int = 1800,
    summary: str = "Route",
    distance_meters: float = 7000,
) -> Dict:
    return {
        "summary": summary,
        "overview_polyline": {"points": "_p~iF~ps|U_ulLnnqC_mqNvxq`@"},
        "legs": [
            {
                "duration": {"text": f"{duration_seconds // 60} mins", "value": duration_seconds},
                "distance": {"text": f"{distance_meters / 1000:.1f} km", "value": distance_meters},
                "departure_time": {"text": "9:00 AM"},
                "arrival_time": {"text": "9:30 AM"},
                "steps": steps,
            }
        ],
    }


def directions_response(*routes: Dict) -> Dict:
    return {"status": "OK" if routes else "ZERO_RESULTS", "routes": list(routes)}


def geocode_response(formatted: str, lat: float, lng: float) -> Dict:
    return {
        "status": "OK",
        "results": [
            {
                "formatted_address": formatted,
                "geometry": {"location": {"lat": lat, "lng": lng}},
            }
        ],
    }


class StubMapService(MapService):
    """Returns canned payloads and records every call."""

    def __init__(
        self,
        *,
        directions: Optional[Dict] = None,
        geocode: Optional[Dict] = None,
        reverse: Optional[Dict] = None,
        autocomplete: Optional[Dict] = None,
        details: Optional[Dict] = None,
        error: Optional[Exception] = None,
    ):
        self.directions = directions or directions_response()
        self.geocode_payload = geocode or {"status": "ZERO_RESULTS", "results": []}
        self.reverse_payload = reverse or {"status": "ZERO_RESULTS", "results": []}
        self.autocomplete_payload = autocomplete or {"status": "OK", "predictions": []}
        self.details_payload = details or {"status": "OK", "result": {}}
        self.error = error
        self.calls = []

    def _respond(self, name, payload, *args):
        self.calls.append((name,) + args)
        if self.error is not None:
            raise self.error
        return payload

    async def geocode(self, address):
        return self._respond("geocode", self.geocode_payload, address)

    async def reverse_geocode(self, lat, lng):
        return self._respond("reverse_geocode", self.reverse_payload, lat, lng)

    async def place_autocomplete(self, text):
        return self._respond("place_autocomplete", self.autocomplete_payload, text)

    async def place_details(self, place_id):
        return self._respond("place_details", self.details_payload, place_id)

    async def get_directions(self, request):
        return self._respond("get_directions", self.directions, request)

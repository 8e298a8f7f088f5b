"""
Route normalizer - converts raw Directions API responses into Route models

Only the first leg of each candidate route is consumed. Transfer count and
walking distance are derived here because the provider does not report them.
"""
import re
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Dict, Iterable, List, NamedTuple, Optional

from bustracker.errors import MalformedResponseError, NoRouteFoundError
from bustracker.models.response import Route, RouteStep, StepType

_HTML_TAG = re.compile(r"<[^>]*>")

# Vehicle types reported by the provider that are shown as buses.
# Every other transit vehicle (rail, subway, tram, ...) is shown as metro.
BUS_VEHICLE_TYPES = frozenset({"BUS", "INTERCITY_BUS", "TROLLEYBUS"})


class TransferPolicy(str, Enum):
    """How a walk step affects transfer counting between two rides."""

    # A ride after a walk still counts as a transfer from the previous ride.
    PERSIST_ACROSS_WALKS = "persist_across_walks"
    # A walk closes the window; the next ride starts a fresh journey.
    RESET_ON_WALK = "reset_on_walk"


class TransferState(NamedTuple):
    transfer_count: int = 0
    last_transit_type: Optional[StepType] = None


def advance_transfer_state(
    state: TransferState, step_type: StepType, policy: TransferPolicy
) -> TransferState:
    """Fold one step into the transfer state"""
    if step_type.is_transit:
        count = state.transfer_count
        if state.last_transit_type is not None:
            count += 1
        return TransferState(count, step_type)

    if policy is TransferPolicy.RESET_ON_WALK:
        return TransferState(state.transfer_count, None)
    return state


def count_transfers(
    step_types: Iterable[StepType],
    policy: TransferPolicy = TransferPolicy.PERSIST_ACROSS_WALKS,
) -> int:
    state = TransferState()
    for step_type in step_types:
        state = advance_transfer_state(state, step_type, policy)
    return state.transfer_count


def strip_html(text: Optional[str]) -> str:
    return _HTML_TAG.sub("", text or "")


def format_distance(meters: float) -> str:
    """Format meters as "<n>m" below 1 km, otherwise "<n.n>km" """
    if meters < 1000:
        whole = Decimal(str(meters)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        return f"{whole}m"
    km = Decimal(str(meters / 1000)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return f"{km}km"


def classify_step(raw_step: Dict) -> StepType:
    if raw_step.get("travel_mode") != "TRANSIT" or not raw_step.get("transit_details"):
        return StepType.WALK

    line = raw_step["transit_details"].get("line") or {}
    vehicle_type = (line.get("vehicle") or {}).get("type")
    return StepType.BUS if vehicle_type in BUS_VEHICLE_TYPES else StepType.METRO


def _text(raw: Optional[Dict], key: str = "text") -> Optional[str]:
    if not raw:
        return None
    return raw.get(key)


def _first_leg(raw_route: Dict) -> Dict:
    legs = raw_route.get("legs") or []
    if not legs:
        raise MalformedResponseError("Route has no legs")
    return legs[0]


def _transit_fields(transit: Dict) -> Dict:
    line = transit.get("line") or {}
    return {
        "line_label": line.get("short_name") or line.get("name") or "",
        "line_name": line.get("name") or "",
        "departure_stop": _text(transit.get("departure_stop"), "name") or "",
        "arrival_stop": _text(transit.get("arrival_stop"), "name") or "",
        "departure_time": _text(transit.get("departure_time")) or "",
        "arrival_time": _text(transit.get("arrival_time")) or "",
        "num_stops": int(transit.get("num_stops") or 0),
    }


def build_step(raw_step: Dict, step_type: StepType) -> RouteStep:
    distance = raw_step.get("distance") or {}
    duration = raw_step.get("duration") or {}

    fields = {
        "type": step_type,
        "instruction": strip_html(raw_step.get("html_instructions")),
        "distance": distance.get("text", ""),
        "duration": duration.get("text", ""),
        "distance_meters": float(distance.get("value", 0)),
        "duration_seconds": int(duration.get("value", 0)),
        "polyline": _text(raw_step.get("polyline"), "points") or "",
    }
    if step_type.is_transit:
        fields.update(_transit_fields(raw_step["transit_details"]))

    return RouteStep(**fields)


def normalize_route(
    raw_route: Dict, policy: TransferPolicy = TransferPolicy.PERSIST_ACROSS_WALKS
) -> Route:
    """Normalize one candidate route from a transit directions response"""
    leg = _first_leg(raw_route)

    steps = []
    state = TransferState()
    walking_meters = 0.0

    for raw_step in leg.get("steps") or []:
        step_type = classify_step(raw_step)
        step = build_step(raw_step, step_type)
        state = advance_transfer_state(state, step_type, policy)
        if step_type is StepType.WALK:
            walking_meters += step.distance_meters
        steps.append(step)

    return Route(
        summary=raw_route.get("summary", ""),
        duration=_text(leg.get("duration")) or "",
        duration_seconds=int((leg.get("duration") or {}).get("value", 0)),
        distance=_text(leg.get("distance")) or "",
        distance_meters=float((leg.get("distance") or {}).get("value", 0)),
        steps=steps,
        overview_polyline=_text(raw_route.get("overview_polyline"), "points") or "",
        departure_time=_text(leg.get("departure_time")),
        arrival_time=_text(leg.get("arrival_time")),
        transfer_count=state.transfer_count,
        walking_distance=format_distance(walking_meters),
    )


def normalize_routes(
    raw_response: Dict, policy: TransferPolicy = TransferPolicy.PERSIST_ACROSS_WALKS
) -> List[Route]:
    """Normalize every candidate route and order them fastest first

    Raises:
        NoRouteFoundError: If the response holds no candidate routes
    """
    raw_routes = raw_response.get("routes") or []
    if not raw_routes:
        raise NoRouteFoundError("No transit routes found")

    routes = [normalize_route(raw_route, policy) for raw_route in raw_routes]
    # sorted() is stable, so equal durations keep provider order
    return sorted(routes, key=lambda route: route.duration_seconds)


def normalize_walking_route(raw_response: Dict) -> Route:
    """Normalize the first candidate of a walking directions response"""
    raw_routes = raw_response.get("routes") or []
    if not raw_routes:
        raise NoRouteFoundError("No walking route found")

    raw_route = raw_routes[0]
    leg = _first_leg(raw_route)
    steps = [build_step(raw_step, StepType.WALK) for raw_step in leg.get("steps") or []]

    return Route(
        summary="Walking route",
        duration=_text(leg.get("duration")) or "",
        duration_seconds=int((leg.get("duration") or {}).get("value", 0)),
        distance=_text(leg.get("distance")) or "",
        distance_meters=float((leg.get("distance") or {}).get("value", 0)),
        steps=steps,
        overview_polyline=_text(raw_route.get("overview_polyline"), "points") or "",
        transfer_count=0,
        walking_distance=_text(leg.get("distance")) or "",
    )

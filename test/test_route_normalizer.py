import pytest
from pydantic import ValidationError

from bustracker.errors import MalformedResponseError, NoRouteFoundError
from bustracker.models.response import StepType
from bustracker.services.route.normalizer import (
    TransferPolicy,
    classify_step,
    count_transfers,
    format_distance,
    normalize_route,
    normalize_routes,
    normalize_walking_route,
    strip_html,
)

from raw_payloads import directions_response, raw_route, transit_step, walk_step

WALK, BUS, METRO = StepType.WALK, StepType.BUS, StepType.METRO


def test_classifies_bus_metro_and_walk_steps():
    assert classify_step(walk_step(100)) == WALK
    assert classify_step(transit_step("BUS")) == BUS
    assert classify_step(transit_step("INTERCITY_BUS")) == BUS
    assert classify_step(transit_step("SUBWAY")) == METRO
    assert classify_step(transit_step("HEAVY_RAIL")) == METRO
    assert classify_step(transit_step("TRAM")) == METRO


def test_unknown_travel_mode_falls_back_to_walk():
    step = walk_step(100)
    step["travel_mode"] = "HOVERCRAFT"
    assert classify_step(step) == WALK


def test_transit_step_without_details_is_walk():
    step = transit_step("BUS")
    del step["transit_details"]
    assert classify_step(step) == WALK


def test_strip_html_removes_tags():
    assert strip_html("Turn <b>left</b> onto Main St") == "Turn left onto Main St"
    assert strip_html('Walk to <div style="font-size:0.9em">Ameerpet</div>') == "Walk to Ameerpet"
    assert strip_html(None) == ""


@pytest.mark.parametrize(
    "steps, expected",
    [
        ([BUS, WALK, BUS], 1),
        ([BUS, BUS], 1),
        ([WALK, BUS, WALK, METRO, WALK], 1),
        ([BUS], 0),
        ([WALK, WALK], 0),
        ([BUS, METRO, BUS], 2),
        ([], 0),
    ],
)
def test_transfer_count_persists_across_walks(steps, expected):
    assert count_transfers(steps) == expected


@pytest.mark.parametrize(
    "steps, expected",
    [
        ([BUS, WALK, BUS], 0),
        ([BUS, BUS], 1),
        ([WALK, BUS, WALK, METRO, WALK], 0),
        ([BUS, METRO, WALK, BUS], 1),
    ],
)
def test_transfer_count_reset_on_walk_policy(steps, expected):
    assert count_transfers(steps, TransferPolicy.RESET_ON_WALK) == expected


@pytest.mark.parametrize(
    "meters, expected",
    [(0, "0m"), (300, "300m"), (999, "999m"), (1000, "1.0km"), (1200, "1.2km"), (1250, "1.3km"), (12345, "12.3km")],
)
def test_format_distance(meters, expected):
    assert format_distance(meters) == expected


def test_normalize_route_derives_transfers_and_walking_distance():
    raw = raw_route(
        [
            walk_step(300, "Walk to <b>Ameerpet</b> bus stop"),
            transit_step("BUS"),
            walk_step(100),
            transit_step("SUBWAY", short_name=None, name="Blue Line"),
            walk_step(800),
        ]
    )

    route = normalize_route(raw)

    assert [step.type for step in route.steps] == [WALK, BUS, WALK, METRO, WALK]
    assert route.transfer_count == 1
    assert route.walking_distance == "1.2km"
    assert route.steps[0].instruction == "Walk to Ameerpet bus stop"
    assert route.duration_seconds == 1800
    assert route.departure_time == "9:00 AM"
    assert route.arrival_time == "9:30 AM"


def test_normalize_route_short_walk_in_meters():
    route = normalize_route(raw_route([walk_step(300)]))
    assert route.walking_distance == "300m"
    assert route.transfer_count == 0


def test_transit_fields_only_on_transit_steps():
    route = normalize_route(
        raw_route([walk_step(200), transit_step("SUBWAY", short_name=None, name="Blue Line")])
    )
    walk, metro = route.steps

    assert walk.line_label is None
    assert walk.departure_stop is None
    assert walk.num_stops is None

    assert metro.line_label == "Blue Line"  # falls back to the long name
    assert metro.line_name == "Blue Line"
    assert metro.departure_stop == "Ameerpet"
    assert metro.arrival_stop == "Hitech City"
    assert metro.departure_time == "9:05 AM"
    assert metro.arrival_time == "9:25 AM"
    assert metro.num_stops == 6


def test_bus_step_prefers_short_name():
    route = normalize_route(raw_route([transit_step("BUS", short_name="218")]))
    assert route.steps[0].line_label == "218"
    assert route.steps[0].line_name == "Secunderabad - Kondapur"


def test_only_first_leg_is_consumed():
    raw = raw_route([transit_step("BUS")])
    raw["legs"].append({"duration": {"text": "1 min", "value": 60}, "steps": [walk_step(5000)]})

    route = normalize_route(raw)

    assert len(route.steps) == 1
    assert route.walking_distance == "0m"


def test_route_without_legs_is_malformed():
    with pytest.raises(MalformedResponseError):
        normalize_route({"summary": "broken", "legs": []})


def test_routes_sorted_fastest_first():
    response = directions_response(
        raw_route([transit_step()], duration_seconds=700, summary="slow"),
        raw_route([transit_step()], duration_seconds=300, summary="fast"),
        raw_route([transit_step()], duration_seconds=500, summary="medium"),
    )

    routes = normalize_routes(response)

    assert [r.duration_seconds for r in routes] == [300, 500, 700]
    assert [r.summary for r in routes] == ["fast", "medium", "slow"]


def test_sort_is_stable_for_equal_durations():
    response = directions_response(
        raw_route([transit_step()], duration_seconds=600, summary="first"),
        raw_route([transit_step()], duration_seconds=300, summary="fastest"),
        raw_route([transit_step()], duration_seconds=600, summary="second"),
    )

    routes = normalize_routes(response)

    assert [r.summary for r in routes] == ["fastest", "first", "second"]


def test_empty_response_is_no_route_found():
    with pytest.raises(NoRouteFoundError) as exc_info:
        normalize_routes(directions_response())
    assert exc_info.value.message == "No transit routes found"


def test_normalize_routes_applies_policy():
    response = directions_response(
        raw_route([transit_step("BUS"), walk_step(100), transit_step("BUS")])
    )
    assert normalize_routes(response)[0].transfer_count == 1
    assert normalize_routes(response, TransferPolicy.RESET_ON_WALK)[0].transfer_count == 0


def test_walking_route():
    raw = raw_route(
        [walk_step(400, "Head <b>north</b>"), walk_step(900)],
        duration_seconds=900,
        distance_meters=1300,
    )

    route = normalize_walking_route(directions_response(raw))

    assert route.summary == "Walking route"
    assert route.transfer_count == 0
    assert route.walking_distance == "1.3 km"
    assert all(step.type == WALK for step in route.steps)
    assert route.steps[0].instruction == "Head north"


def test_walking_route_empty_response():
    with pytest.raises(NoRouteFoundError) as exc_info:
        normalize_walking_route(directions_response())
    assert exc_info.value.message == "No walking route found"


def test_route_path_is_decoded_on_demand():
    route = normalize_route(raw_route([walk_step(100)]))
    path = route.path()
    assert [(c.lat, c.lng) for c in path] == [(38.5, -120.2), (40.7, -120.95), (43.252, -126.453)]
    assert route.steps[0].path()[0].lat == 0.0


def test_route_is_immutable():
    route = normalize_route(raw_route([walk_step(100)]))
    with pytest.raises(ValidationError):
        route.transfer_count = 3

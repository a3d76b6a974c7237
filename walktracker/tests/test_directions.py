import json

import polyline
import pytest

from walktracker import polyline_codec
from walktracker.RouteBase import FlattenedRoute, Maneuver, RouteStep
from walktracker.directions import (
    StepSource,
    build_route,
    load_default_directions,
    load_directions,
    load_directions_or_default,
    parse_directions,
    strip_html,
)
from walktracker.errors import EmptyRoute, InvalidCoordinate, MalformedEncoding, MalformedRoute

A = (38.5, -120.2)
B = (40.7, -120.95)
C = (43.252, -126.453)
D = (44.0, -127.0)


def _step(points, text="", maneuver=None):
    return StepSource(polyline_codec.encode(points), text, maneuver)


def test_strip_html():
    assert strip_html("Turn <b>right</b> onto <b>Kiley Pl</b>") == "Turn right onto Kiley Pl"
    assert strip_html('Walk<div style="font-size:0.9em">Destination on the left</div>') == \
        "Walk Destination on the left"
    assert strip_html(None) == ""


def test_shared_boundary_point_is_dropped():
    route = build_route([_step([A, B], "first"), _step([B, C], "second", "turn-left")])
    assert route.points == (A, B, C)
    assert [s.start_point_index for s in route.steps] == [0, 2]
    assert route.steps[1].maneuver is Maneuver.TURN_LEFT


def test_non_shared_boundary_is_kept():
    route = build_route([_step([A, B]), _step([C, D])])
    assert route.points == (A, B, C, D)
    assert [s.start_point_index for s in route.steps] == [0, 2]


def test_no_adjacent_duplicates_inside_step():
    route = build_route([_step([A, A, B, B, C])])
    assert route.points == (A, B, C)


def test_empty_step_never_points_past_end():
    route = build_route([_step([A, B]), StepSource("", "nothing"), _step([B, C]), StepSource("", "tail")])
    assert route.points == (A, B, C)
    assert [s.start_point_index for s in route.steps] == [0, 2, 2, 2]
    assert all(s.start_point_index < len(route.points) for s in route.steps)


def test_all_empty_steps_is_empty_route():
    with pytest.raises(EmptyRoute):
        build_route([StepSource(""), StepSource("")])


def test_out_of_range_point_rejects_route():
    bad = polyline.encode([(95.0, 0.0), (95.1, 0.0)])
    with pytest.raises(InvalidCoordinate):
        build_route([StepSource(bad)])


def test_malformed_step_propagates():
    with pytest.raises(MalformedEncoding):
        build_route([StepSource("ahbm")])


def test_parse_directions_requires_steps():
    with pytest.raises(EmptyRoute):
        parse_directions({"routes": [], "status": "ZERO_RESULTS"})
    with pytest.raises(EmptyRoute):
        parse_directions({"routes": [{"legs": []}]})
    with pytest.raises(EmptyRoute):
        parse_directions({"routes": [{"legs": [{"steps": []}]}]})


@pytest.mark.parametrize("raw, expected", [
    ("turn-right", Maneuver.TURN_RIGHT),
    ("roundabout-left", Maneuver.ROUNDABOUT_LEFT),
    ("straight", Maneuver.STRAIGHT),
    ("keep-left", Maneuver.UNKNOWN),
    (None, Maneuver.UNKNOWN),
    ("", Maneuver.UNKNOWN),
    (7, Maneuver.UNKNOWN),
    (["turn-left"], Maneuver.UNKNOWN),
])
def test_maneuver_parse(raw, expected):
    assert Maneuver.parse(raw) is expected


def test_unknown_maneuver_uses_straight_icon():
    assert Maneuver.UNKNOWN.icon == Maneuver.STRAIGHT.icon
    assert Maneuver.TURN_RIGHT.icon != Maneuver.TURN_LEFT.icon


def test_bundled_route():
    route, info = load_default_directions()
    assert info.end_address == "6835 Houston Rd, Florence, KY 41042, USA"
    assert info.distance_text == "1.0 mi"
    assert info.overview_polyline.startswith("ahbmF`tqcO")
    assert route.points[0] == (39.01073, -84.63697)
    assert len(route.steps) == 9
    assert route.steps[0].instruction_text == "Head southwest toward Meijer Dr"
    assert route.steps[0].maneuver is Maneuver.UNKNOWN
    assert route.steps[1].maneuver is Maneuver.TURN_RIGHT
    # step 2 starts where step 1 ended
    assert route.steps[1].start_point_index == 5
    for a, b in zip(route.points, route.points[1:]):
        assert a != b


def test_load_directions_from_file(tmp_path):
    payload = {"routes": [{"legs": [{
        "start_address": "here",
        "steps": [
            {"html_instructions": "Head <b>north</b>", "polyline": {"points": polyline_codec.encode([A, B])}},
            {"html_instructions": "Turn <b>left</b>", "maneuver": "turn-left",
             "polyline": {"points": polyline_codec.encode([B, C])}},
        ],
    }]}]}
    path = tmp_path / "directions.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    route, info = load_directions(path)
    assert route.points == (A, B, C)
    assert info.start_address == "here"
    assert route.steps[1].instruction_text == "Turn left"


def test_fallback_to_bundled_route(tmp_path):
    default, _ = load_default_directions()

    missing, _ = load_directions_or_default(tmp_path / "nope.json")
    assert missing.points == default.points

    corrupt = tmp_path / "corrupt.json"
    corrupt.write_text(json.dumps({"routes": [{"legs": [{"steps": [{"polyline": {"points": "ahbm"}}]}]}]}),
                       encoding="utf-8")
    fallback, _ = load_directions_or_default(corrupt)
    assert fallback.points == default.points


@pytest.mark.parametrize("payload", [
    [],
    {"routes": {"legs": []}},
    {"routes": ["oops"]},
    {"routes": [{"legs": [None]}]},
    {"routes": [{"legs": [{"steps": "oops"}]}]},
    {"routes": [{"legs": [{"steps": ["oops"]}]}]},
])
def test_parse_directions_rejects_wrong_shape(payload):
    with pytest.raises(MalformedRoute):
        parse_directions(payload)


def test_non_string_maneuver_is_unknown():
    steps, _ = parse_directions({"routes": [{"legs": [{"steps": [
        {"polyline": {"points": polyline_codec.encode([A, B])}, "maneuver": 7},
    ]}]}]})
    assert steps[0].maneuver is None
    assert build_route(steps).steps[0].maneuver is Maneuver.UNKNOWN


@pytest.mark.parametrize("content", [
    "[]",
    '{"routes": [{"legs": [{"steps": ["oops"]}]}]}',
    '{"routes": [{"legs": [{"steps": [{"polyline": {"points": 5}, "maneuver": 7}]}]}]}',
])
def test_wrong_shape_falls_back_to_bundled_route(tmp_path, content):
    default, default_info = load_default_directions()
    path = tmp_path / "directions.json"
    path.write_text(content, encoding="utf-8")
    route, info = load_directions_or_default(path)
    assert route.points == default.points
    assert info == default_info


def test_flattened_route_validation():
    with pytest.raises(EmptyRoute):
        FlattenedRoute(points=())
    with pytest.raises(InvalidCoordinate):
        FlattenedRoute(points=((0.0, 200.0),))
    with pytest.raises(ValueError):
        FlattenedRoute(points=(A, B), steps=(RouteStep(2, "past end"),))
    with pytest.raises(ValueError):
        FlattenedRoute(points=(A, B, C), steps=(RouteStep(1, "b"), RouteStep(0, "a")))
    with pytest.raises(ValueError, match="negative"):
        FlattenedRoute(points=(A, B), steps=(RouteStep(-1, "before start"),))


def test_instruction_at_takes_last_qualifying_step():
    route = FlattenedRoute(points=(A, B, C, D), steps=(
        RouteStep(1, "one"), RouteStep(1, "one-bis"), RouteStep(3, "three"),
    ))
    assert route.instruction_at(0) is None
    assert route.instruction_at(1).instruction_text == "one-bis"
    assert route.instruction_at(2).instruction_text == "one-bis"
    assert route.instruction_at(3).instruction_text == "three"
    assert route.instruction_at(10).instruction_text == "three"

import math

import pytest

from walktracker.errors import InvalidCoordinate
from walktracker.geo import haversine_m, interpolate, interpolate_at_distance, is_valid, path_length_m, same_point, validate
from walktracker.tests.helpers import DUSSELDORF, north_of


def test_haversine_zero_and_known_distance():
    assert haversine_m(DUSSELDORF, DUSSELDORF) == 0.0
    assert haversine_m(DUSSELDORF, north_of(DUSSELDORF, 10)) == pytest.approx(10.0, abs=1e-6)


def test_haversine_one_degree_on_equator():
    assert haversine_m((0.0, 0.0), (0.0, 1.0)) == pytest.approx(111194.93, abs=0.01)


def test_interpolate_midpoint():
    assert interpolate((0.0, 0.0), (2.0, -4.0), 0.5) == (1.0, -2.0)


def test_interpolate_at_distance_clamps():
    b = north_of(DUSSELDORF, 50)
    assert interpolate_at_distance(DUSSELDORF, b, -1) == DUSSELDORF
    assert interpolate_at_distance(DUSSELDORF, b, 0) == DUSSELDORF
    assert interpolate_at_distance(DUSSELDORF, b, 80) == b
    assert interpolate_at_distance(DUSSELDORF, DUSSELDORF, 5) == DUSSELDORF
    mid = interpolate_at_distance(DUSSELDORF, b, 20)
    assert haversine_m(DUSSELDORF, mid) == pytest.approx(20.0, abs=1e-6)


@pytest.mark.parametrize("coord, ok", [
    ((0.0, 0.0), True),
    ((90.0, 180.0), True),
    ((-90.0, -180.0), True),
    ((90.0001, 0.0), False),
    ((0.0, -180.5), False),
    ((math.nan, 0.0), False),
    ((0.0, math.nan), False),
    (("x", 0.0), False),
])
def test_is_valid(coord, ok):
    assert is_valid(coord) is ok


def test_validate_rejects_instead_of_clamping():
    with pytest.raises(InvalidCoordinate):
        validate((91.0, 0.0))
    assert validate([51, 6]) == (51.0, 6.0)


def test_same_point_and_path_length():
    assert same_point((1.0, 2.0), (1.0 + 1e-12, 2.0))
    assert not same_point((1.0, 2.0), (1.00001, 2.0))
    pts = [DUSSELDORF, north_of(DUSSELDORF, 10), north_of(DUSSELDORF, 25)]
    assert path_length_m(pts) == pytest.approx(25.0, abs=1e-6)
    assert path_length_m(pts[:1]) == 0.0

import math

import pytest

from rides.services.trip_matching import match_trip_by_text, match_trip_within_radius
from rides.services.types import Point

PICKUP = Point(16.5062, 80.6480)
DROPOFF = Point(13.6288, 79.4192)


def _north_of(point: Point, km: float) -> Point:
    return Point(point.lat + math.degrees(km / 6371.0), point.lon)


def test_identical_endpoints_score_full_marks():
    match = match_trip_within_radius(PICKUP, DROPOFF, PICKUP, DROPOFF)

    assert match.match_score == pytest.approx(100)
    assert match.is_within_radius


def test_score_falls_with_distance_inside_radius():
    match = match_trip_within_radius(PICKUP, DROPOFF, _north_of(PICKUP, 2.5), DROPOFF, radius_km=5)

    assert match.match_score == pytest.approx(87.5, abs=0.01)
    assert match.pickup_distance_km == pytest.approx(2.5)
    assert match.is_within_radius


def test_endpoint_outside_radius_costs_half_the_score():
    match = match_trip_within_radius(PICKUP, DROPOFF, _north_of(PICKUP, 12), DROPOFF, radius_km=5)

    assert match.match_score == pytest.approx(50)
    assert not match.is_within_radius


def test_both_endpoints_outside_radius_floor_at_zero():
    match = match_trip_within_radius(PICKUP, DROPOFF, _north_of(PICKUP, 30), _north_of(DROPOFF, 30))

    assert match.match_score == 0


def test_radius_must_be_positive():
    with pytest.raises(ValueError):
        match_trip_within_radius(PICKUP, DROPOFF, PICKUP, DROPOFF, radius_km=0)


@pytest.mark.parametrize(
    ("trip_location", "search_term", "expected"),
    [
        ("Tirupathi, Andhra Pradesh", "tirupati", True),
        ("Vijayawada Rural, Krishna", "krishna district", True),
        ("Kolkata, West Bengal", "Kolkatta", True),
        ("Guntur, Andhra Pradesh", "guntur", True),
        ("Mumbai, Maharashtra", "Delhi", False),
        ("", "Delhi", False),
        ("Mumbai, Maharashtra", "", False),
    ],
)
def test_match_trip_by_text(trip_location, search_term, expected):
    assert match_trip_by_text(trip_location, search_term) is expected

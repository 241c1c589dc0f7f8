from __future__ import annotations

import re
from dataclasses import dataclass

from rides.services.geo import distance_between
from rides.services.phonetics import normalize
from rides.services.similarity import are_phonetically_similar, similarity
from rides.services.types import Point

DEFAULT_RADIUS_KM = 5.0
MAX_RADIUS_KM = 50.0
TEXT_MATCH_THRESHOLD = 0.65
MIN_WORD_LENGTH = 3

_LOCATION_WORD_SPLIT = re.compile(r"[\s,]+")


@dataclass(frozen=True)
class TripMatch:
    match_score: float
    pickup_distance_km: float
    dropoff_distance_km: float
    is_within_radius: bool


def _endpoint_penalty(distance_km: float, radius_km: float) -> float:
    if distance_km <= radius_km:
        return (distance_km / radius_km) * 25
    return 50


def match_trip_within_radius(
    trip_pickup: Point,
    trip_dropoff: Point,
    search_pickup: Point,
    search_dropoff: Point,
    radius_km: float = DEFAULT_RADIUS_KM,
) -> TripMatch:
    """Score how well a published trip serves a rider's pickup and dropoff.

    A perfect match scores 100. Each endpoint inside the radius costs up to 25
    points in proportion to its distance; an endpoint outside costs a flat 50.
    """
    if radius_km <= 0:
        raise ValueError("radius_km must be positive.")
    pickup_km = distance_between(trip_pickup, search_pickup)
    dropoff_km = distance_between(trip_dropoff, search_dropoff)
    score = 100 - _endpoint_penalty(pickup_km, radius_km) - _endpoint_penalty(dropoff_km, radius_km)
    return TripMatch(
        match_score=max(0.0, score),
        pickup_distance_km=round(pickup_km, 2),
        dropoff_distance_km=round(dropoff_km, 2),
        is_within_radius=pickup_km <= radius_km and dropoff_km <= radius_km,
    )


def _words_match(location_word: str, search_word: str, threshold: float) -> bool:
    if location_word in search_word or search_word in location_word:
        return True
    if are_phonetically_similar(location_word, search_word):
        return True
    return similarity(location_word, search_word) > threshold


def match_trip_by_text(trip_location: str, search_term: str, threshold: float = TEXT_MATCH_THRESHOLD) -> bool:
    if not trip_location or not search_term:
        return False

    trip_lower = trip_location.lower().strip()
    search_lower = search_term.lower().strip()
    city = trip_lower.split(",")[0].strip()

    if search_lower in trip_lower or trip_lower in search_lower:
        return True
    if search_lower in city or city in search_lower:
        return True
    if are_phonetically_similar(city, search_lower):
        return True
    if similarity(city, search_lower) > threshold:
        return True

    norm_city = normalize(city)
    norm_search = normalize(search_lower)
    if norm_search in norm_city or norm_city in norm_search:
        return True

    location_words = [word for word in _LOCATION_WORD_SPLIT.split(trip_lower) if len(word) >= MIN_WORD_LENGTH]
    for search_word in search_lower.split():
        if len(search_word) < MIN_WORD_LENGTH:
            continue
        if any(_words_match(word, search_word, threshold) for word in location_words):
            return True
    return False

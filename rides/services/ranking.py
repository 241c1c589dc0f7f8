from __future__ import annotations

from collections.abc import Iterable

from rides.services.similarity import are_phonetically_similar, similarity
from rides.services.types import Candidate, ScoredCandidate

MIN_RELEVANCE_SCORE = 30
MAX_SUGGESTIONS = 7

EXACT_MATCH_SCORE = 100
PREFIX_MATCH_SCORE = 90
CONTAINS_MATCH_SCORE = 80
PHONETIC_MATCH_SCORE = 70
SIMILARITY_WEIGHT = 60

CITY_BONUS = 5
TOWN_BONUS = 3


def clean_name(candidate: Candidate) -> str:
    address = candidate.address
    return address.city or address.town or address.village or candidate.display_name.split(",")[0]


def unique_by_place_id(candidates: Iterable[Candidate]) -> list[Candidate]:
    seen: set[int] = set()
    unique: list[Candidate] = []
    for candidate in candidates:
        if candidate.place_id in seen:
            continue
        seen.add(candidate.place_id)
        unique.append(candidate)
    return unique


def locality_bonus(candidate: Candidate) -> int:
    if candidate.address.city:
        return CITY_BONUS
    if candidate.address.town:
        return TOWN_BONUS
    return 0


def score_candidate(query: str, candidate: Candidate) -> float:
    """Relevance of ``candidate`` for ``query``.

    Match quality lands in [0, 100]; the locality bonus is added on top, so an
    exact match on a city scores 105 and outranks an exact match on a town.
    """
    name = clean_name(candidate).lower()
    search = (query or "").strip().lower()

    if name == search:
        score = float(EXACT_MATCH_SCORE)
    elif name.startswith(search):
        score = float(PREFIX_MATCH_SCORE)
    elif search in name:
        score = float(CONTAINS_MATCH_SCORE)
    elif are_phonetically_similar(name, search):
        score = float(PHONETIC_MATCH_SCORE)
    else:
        score = similarity(name, search) * SIMILARITY_WEIGHT

    return score + locality_bonus(candidate)


def score_candidates(query: str, candidates: Iterable[Candidate]) -> list[ScoredCandidate]:
    scored = [
        ScoredCandidate(candidate=candidate, score=score_candidate(query, candidate))
        for candidate in unique_by_place_id(candidates)
    ]
    # sorted() is stable, so equal scores keep the geocoder's order.
    return sorted(scored, key=lambda item: item.score, reverse=True)


def rank_candidates(
    query: str,
    candidates: Iterable[Candidate],
    *,
    limit: int = MAX_SUGGESTIONS,
    min_score: float = MIN_RELEVANCE_SCORE,
) -> list[Candidate]:
    relevant = [item for item in score_candidates(query, candidates) if item.score >= min_score]
    return [item.candidate for item in relevant[:limit]]

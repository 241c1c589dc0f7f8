from rides.services.ranking import (
    MAX_SUGGESTIONS,
    MIN_RELEVANCE_SCORE,
    clean_name,
    rank_candidates,
    score_candidate,
    score_candidates,
)
from rides.services.types import Address, Candidate


def _candidate(place_id: int, *, city=None, town=None, village=None, display_name: str = "") -> Candidate:  # noqa: ANN001
    label = city or town or village or "Unknown"
    return Candidate(
        display_name=display_name or f"{label}, Andhra Pradesh, India",
        lat=16.5,
        lon=80.6,
        place_id=place_id,
        address=Address(city=city, town=town, village=village, state="Andhra Pradesh", country="India"),
    )


def test_exact_match_scores_100_plus_locality_bonus():
    assert score_candidate("Vijayawada", _candidate(1, city="Vijayawada")) == 105
    assert score_candidate("Vijayawada", _candidate(2, town="Vijayawada")) == 103
    assert score_candidate("Vijayawada", _candidate(3, village="Vijayawada")) == 100


def test_match_tiers():
    assert score_candidate("vizi", _candidate(1, city="Vizianagaram")) == 95
    assert score_candidate("nagar", _candidate(2, town="Vizianagaram")) == 83
    assert score_candidate("tirupathi", _candidate(3, village="Tirupati")) == 70
    assert score_candidate("mumbai", _candidate(4, village="Delhi")) < MIN_RELEVANCE_SCORE


def test_clean_name_falls_back_to_first_display_segment():
    candidate = Candidate(
        display_name="Madhapur, Hyderabad, Telangana, India",
        lat=17.44,
        lon=78.39,
        place_id=9,
    )
    assert clean_name(candidate) == "Madhapur"


def test_city_outranks_equally_matching_village():
    village = _candidate(1, village="Tirupati")
    city = _candidate(2, city="Tirupati")

    ranked = rank_candidates("Tirupati", [village, city])

    assert [item.place_id for item in ranked] == [2, 1]


def test_ties_keep_geocoder_order():
    first = _candidate(11, village="Kondapur")
    second = _candidate(12, village="Kondapur")
    third = _candidate(13, village="Kondapur")

    ranked = rank_candidates("Kondapur", [first, second, third])

    assert [item.place_id for item in ranked] == [11, 12, 13]


def test_rank_dedupes_filters_and_truncates():
    candidates = [_candidate(index, village="Guntur") for index in range(10)]
    candidates.append(_candidate(3, city="Guntur"))
    candidates.append(_candidate(99, village="Delhi"))

    ranked = rank_candidates("guntur", candidates)

    place_ids = [item.place_id for item in ranked]
    assert len(ranked) == MAX_SUGGESTIONS
    assert len(place_ids) == len(set(place_ids))
    assert 99 not in place_ids
    assert all(score_candidate("guntur", item) >= MIN_RELEVANCE_SCORE for item in ranked)


def test_score_candidates_is_sorted_descending():
    scored = score_candidates(
        "Ongole",
        [
            _candidate(1, village="Ongole Rural"),
            _candidate(2, city="Ongole"),
            _candidate(3, town="Ongolu"),
        ],
    )

    scores = [item.score for item in scored]
    assert scores == sorted(scores, reverse=True)
    assert scored[0].candidate.place_id == 2

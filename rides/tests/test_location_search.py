import asyncio

import pytest

from rides.services.geocoder import GeocoderError
from rides.services.location_search import SearchSession, asuggest_locations, retry_term, suggest_locations
from rides.services.types import Address, Candidate


def _place(place_id: int, name: str, *, city: bool = True) -> Candidate:
    address = Address(city=name) if city else Address(village=name)
    return Candidate(display_name=f"{name}, India", lat=17.0, lon=78.0, place_id=place_id, address=address)


class FakeGeocoder:
    def __init__(self, responses: dict):
        self.responses = responses
        self.calls: list[str] = []

    def _respond(self, term: str) -> list[Candidate]:
        self.calls.append(term)
        outcome = self.responses.get(term, [])
        if isinstance(outcome, Exception):
            raise outcome
        return list(outcome)

    def search(self, term: str) -> list[Candidate]:
        return self._respond(term)

    async def asearch(self, term: str) -> list[Candidate]:
        return self._respond(term)


def test_short_query_skips_provider():
    geocoder = FakeGeocoder({})

    assert suggest_locations(" a ", geocoder=geocoder) == []
    assert geocoder.calls == []


def test_primary_results_are_ranked_without_retry():
    geocoder = FakeGeocoder(
        {
            "Tirupati": [
                _place(1, "Tirupati Rural", city=False),
                _place(2, "Tirupati"),
                _place(2, "Tirupati"),
                _place(3, "Mumbai"),
            ],
        },
    )
    sleeps: list[float] = []

    results = suggest_locations("  Tirupati ", geocoder=geocoder, sleep=sleeps.append)

    assert [item.place_id for item in results] == [2, 1]
    assert geocoder.calls == ["Tirupati"]
    assert sleeps == []


def test_empty_primary_retries_once_with_normalized_term():
    geocoder = FakeGeocoder({"tirupat": [_place(7, "Tirupati")]})
    sleeps: list[float] = []

    results = suggest_locations("Tirupathi", geocoder=geocoder, sleep=sleeps.append)

    assert geocoder.calls == ["Tirupathi", "tirupat"]
    assert sleeps == [0.5]
    assert [item.place_id for item in results] == [7]


def test_no_retry_when_normalized_term_is_unchanged():
    geocoder = FakeGeocoder({})
    sleeps: list[float] = []

    assert retry_term("delh") is None
    assert suggest_locations("delh", geocoder=geocoder, sleep=sleeps.append) == []
    assert geocoder.calls == ["delh"]
    assert sleeps == []


def test_rate_limited_primary_does_not_retry():
    geocoder = FakeGeocoder({"Tirupathi": GeocoderError("HTTP 429", http_status=429, error_type="rate_limit")})
    sleeps: list[float] = []

    assert suggest_locations("Tirupathi", geocoder=geocoder, sleep=sleeps.append) == []
    assert geocoder.calls == ["Tirupathi"]
    assert sleeps == []


def test_unavailable_provider_degrades_to_empty_list():
    outage = GeocoderError("HTTP 503", http_status=503, error_type="unavailable")
    geocoder = FakeGeocoder({"Tirupathi": outage, "tirupat": outage})

    assert suggest_locations("Tirupathi", geocoder=geocoder, sleep=lambda seconds: None) == []
    assert geocoder.calls == ["Tirupathi", "tirupat"]


def test_async_flow_matches_sync_flow():
    geocoder = FakeGeocoder({"tirupat": [_place(7, "Tirupati")]})

    results = asyncio.run(asuggest_locations("Tirupathi", geocoder=geocoder, retry_pause=0))

    assert geocoder.calls == ["Tirupathi", "tirupat"]
    assert [item.place_id for item in results] == [7]


def test_session_debounces_keystrokes():
    searched: list[str] = []

    async def search(query: str) -> list[Candidate]:
        searched.append(query)
        return [_place(1, query)]

    async def scenario() -> SearchSession:
        session = SearchSession(search, debounce_seconds=0.05)
        for prefix in ("Vi", "Vij", "Vija", "Vijay"):
            session.submit(prefix)
            await asyncio.sleep(0)
        await session.wait_idle()
        return session

    session = asyncio.run(scenario())

    assert searched == ["Vijay"]
    assert session.generation == 4
    assert [item.display_name for item in session.suggestions] == ["Vijay, India"]
    assert session.loading is False


def test_session_drops_stale_in_flight_results():
    release_first = None
    searched: list[str] = []
    published: list[list[str]] = []

    async def search(query: str) -> list[Candidate]:
        searched.append(query)
        if query == "Tiru":
            await release_first.wait()
            return [_place(1, "Tiruvuru")]
        return [_place(2, "Tirupati")]

    async def scenario() -> SearchSession:
        nonlocal release_first
        release_first = asyncio.Event()
        session = SearchSession(
            search,
            debounce_seconds=0.01,
            on_results=lambda items: published.append([item.display_name for item in items]),
        )
        session.submit("Tiru")
        await asyncio.sleep(0.05)
        session.submit("Tirupati")
        await asyncio.sleep(0.05)
        release_first.set()
        await session.wait_idle()
        return session

    session = asyncio.run(scenario())

    assert searched == ["Tiru", "Tirupati"]
    assert published == [["Tirupati, India"]]
    assert [item.place_id for item in session.suggestions] == [2]


def test_session_clears_suggestions_for_short_query():
    async def search(query: str) -> list[Candidate]:
        return [_place(1, "Guntur")]

    async def scenario() -> SearchSession:
        session = SearchSession(search, debounce_seconds=0)
        session.submit("Guntur")
        await session.wait_idle()
        assert session.suggestions
        session.submit("G")
        await session.wait_idle()
        return session

    session = asyncio.run(scenario())

    assert session.suggestions == []


def test_session_recovers_from_search_errors():
    async def search(query: str) -> list[Candidate]:
        raise RuntimeError("boom")

    async def scenario() -> SearchSession:
        session = SearchSession(search, debounce_seconds=0)
        session.submit("Guntur")
        await session.wait_idle()
        return session

    session = asyncio.run(scenario())

    assert session.suggestions == []
    assert session.loading is False


@pytest.mark.parametrize(("query", "expected"), [("Tirupathi", "tirupat"), ("Hyderabad", "hider"), ("guntur", None)])
def test_retry_term(query, expected):
    assert retry_term(query) == expected

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Iterable

from rides.services.config import search_debounce_seconds, search_retry_pause_seconds
from rides.services.geocoder import GeocoderError, NominatimGeocoder
from rides.services.phonetics import normalize
from rides.services.ranking import rank_candidates, unique_by_place_id
from rides.services.types import Candidate

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2

AsyncSearch = Callable[[str], Awaitable[list[Candidate]]]


def is_searchable(query: str) -> bool:
    return len((query or "").strip()) >= MIN_QUERY_LENGTH


def retry_term(query: str) -> str | None:
    """Normalized spelling to retry with, or None when it would repeat the query."""
    normalized = normalize(query)
    if not normalized or normalized == query.lower():
        return None
    return normalized


def _log_failure(term: str, exc: GeocoderError) -> None:
    if exc.rate_limited:
        logger.warning("Geocoder rate limited while searching %r; backing off.", term)
    else:
        logger.warning("Geocoder search failed for %r: %s", term, exc)


def _merge(*batches: Iterable[Candidate]) -> list[Candidate]:
    return unique_by_place_id(candidate for batch in batches for candidate in batch)


def suggest_locations(
    query: str,
    *,
    geocoder: NominatimGeocoder | None = None,
    sleep: Callable[[float], None] = time.sleep,
    retry_pause: float | None = None,
) -> list[Candidate]:
    """Ranked suggestions for a typed place name.

    Searches the raw query first. When that comes back empty, waits out the
    provider's rate limit and retries once with the normalized spelling. A
    rate-limited first call ends the search instead of retrying.
    """
    term = (query or "").strip()
    if not is_searchable(term):
        return []
    geocoder = geocoder or NominatimGeocoder()

    try:
        results = _merge(geocoder.search(term))
    except GeocoderError as exc:
        _log_failure(term, exc)
        if exc.rate_limited:
            return []
        results = []

    if not results:
        alternate = retry_term(term)
        if alternate:
            sleep(search_retry_pause_seconds() if retry_pause is None else retry_pause)
            try:
                results = _merge(results, geocoder.search(alternate))
            except GeocoderError as exc:
                _log_failure(alternate, exc)

    ranked = rank_candidates(term, results)
    logger.info("Location search %r: %s candidates, %s suggestions", term, len(results), len(ranked))
    return ranked


async def asuggest_locations(
    query: str,
    *,
    geocoder: NominatimGeocoder | None = None,
    retry_pause: float | None = None,
) -> list[Candidate]:
    term = (query or "").strip()
    if not is_searchable(term):
        return []
    geocoder = geocoder or NominatimGeocoder()

    try:
        results = _merge(await geocoder.asearch(term))
    except GeocoderError as exc:
        _log_failure(term, exc)
        if exc.rate_limited:
            return []
        results = []

    if not results:
        alternate = retry_term(term)
        if alternate:
            await asyncio.sleep(search_retry_pause_seconds() if retry_pause is None else retry_pause)
            try:
                results = _merge(results, await geocoder.asearch(alternate))
            except GeocoderError as exc:
                _log_failure(alternate, exc)

    ranked = rank_candidates(term, results)
    logger.info("Location search %r: %s candidates, %s suggestions", term, len(results), len(ranked))
    return ranked


class SearchSession:
    """Debounced location search for one input field on an asyncio loop.

    Every ``submit`` stamps a new generation. A search still waiting out the
    debounce window is cancelled by the next keystroke; a search already sent
    to the provider runs to completion, and its results are published only if
    its generation is still the latest one.
    """

    def __init__(
        self,
        search: AsyncSearch | None = None,
        *,
        debounce_seconds: float | None = None,
        on_results: Callable[[list[Candidate]], None] | None = None,
    ) -> None:
        self._search = search or asuggest_locations
        self.debounce_seconds = search_debounce_seconds() if debounce_seconds is None else debounce_seconds
        self._on_results = on_results
        self.generation = 0
        self.query = ""
        self.suggestions: list[Candidate] = []
        self.loading = False
        self._debounce_task: asyncio.Task | None = None
        self._tasks: set[asyncio.Task] = set()

    def is_current(self, generation: int) -> bool:
        return generation == self.generation

    def submit(self, query: str) -> int:
        self.generation += 1
        generation = self.generation
        self.query = query

        if self._debounce_task is not None and not self._debounce_task.done():
            self._debounce_task.cancel()
        self._debounce_task = None

        if not is_searchable(query):
            self.loading = False
            self._publish(generation, [])
            return generation

        self.loading = True
        task = asyncio.get_running_loop().create_task(self._run(generation, query))
        self._debounce_task = task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return generation

    async def _run(self, generation: int, query: str) -> None:
        await asyncio.sleep(self.debounce_seconds)
        if not self.is_current(generation):
            return
        if self._debounce_task is asyncio.current_task():
            self._debounce_task = None

        try:
            results = await self._search(query)
        except Exception:  # noqa: BLE001
            logger.exception("Location search for %r failed.", query)
            results = []
        self._publish(generation, results)

    def _publish(self, generation: int, results: list[Candidate]) -> bool:
        if not self.is_current(generation):
            logger.debug("Dropping stale suggestions for generation %s (current %s).", generation, self.generation)
            return False
        self.suggestions = list(results)
        self.loading = False
        if self._on_results is not None:
            self._on_results(self.suggestions)
        return True

    async def wait_idle(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

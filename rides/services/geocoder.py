from __future__ import annotations

import hashlib
import json
import logging
from typing import Any

import httpx
from django.core.cache import cache

from rides.services.config import (
    geocoder_cache_enabled,
    geocoder_cache_ttl,
    nominatim_base_url,
    nominatim_country_codes,
    nominatim_result_limit,
)
from rides.services.http_client import build_async_http_client, build_http_client
from rides.services.types import Candidate

logger = logging.getLogger(__name__)


class GeocoderError(Exception):
    def __init__(self, message: str, *, http_status: int | None = None, error_type: str = "unknown") -> None:
        super().__init__(message)
        self.http_status = http_status
        self.error_type = error_type

    @property
    def rate_limited(self) -> bool:
        return self.error_type == "rate_limit"


def classify_http_status(status_code: int | None) -> str:
    if status_code == 429:
        return "rate_limit"
    if status_code in {401, 403}:
        return "auth"
    if status_code and status_code >= 500:
        return "unavailable"
    return "unknown"


def _decode_response(response, url: str) -> Any:  # noqa: ANN001
    status_code = int(response.status_code)
    if status_code != 200:
        raise GeocoderError(
            f"HTTP {status_code} for {url}",
            http_status=status_code,
            error_type=classify_http_status(status_code),
        )
    try:
        return response.json()
    except ValueError as exc:
        raise GeocoderError(f"Malformed JSON from {url}: {exc}", http_status=status_code, error_type="parse") from exc


def parse_candidates(payload: Any) -> list[Candidate]:
    if not isinstance(payload, list):
        raise GeocoderError("Geocoder search payload is not a list.", error_type="parse")
    candidates: list[Candidate] = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        try:
            candidates.append(Candidate.from_payload(item))
        except (KeyError, TypeError, ValueError):
            logger.debug("Skipping malformed geocoder item: %r", item)
    return candidates


def parse_reverse(payload: Any) -> Candidate | None:
    if not isinstance(payload, dict) or payload.get("error"):
        return None
    try:
        return Candidate.from_payload(payload)
    except (KeyError, TypeError, ValueError):
        logger.debug("Skipping malformed reverse geocode payload: %r", payload)
        return None


class NominatimGeocoder:
    """Client for the OpenStreetMap Nominatim search and reverse endpoints.

    ``search``/``asearch`` raise :class:`GeocoderError` on transport failures,
    non-200 statuses and malformed payloads. Retrying is left to the caller so
    a rate-limited provider is never hit again straight away.
    """

    name = "nominatim"

    def __init__(
        self,
        *,
        base_url: str | None = None,
        country_codes: str | None = None,
        limit: int | None = None,
        cache_ttl: int | None = None,
    ) -> None:
        self.base_url = (base_url or nominatim_base_url()).rstrip("/")
        self.country_codes = country_codes or nominatim_country_codes()
        self.limit = limit or nominatim_result_limit()
        self.cache_ttl = geocoder_cache_ttl() if cache_ttl is None else cache_ttl

    @property
    def search_url(self) -> str:
        return f"{self.base_url}/search"

    @property
    def reverse_url(self) -> str:
        return f"{self.base_url}/reverse"

    def search_params(self, term: str) -> dict[str, Any]:
        return {
            "q": term,
            "countrycodes": self.country_codes,
            "format": "json",
            "addressdetails": 1,
            "limit": self.limit,
            "dedupe": 1,
        }

    def reverse_params(self, lat: float, lon: float) -> dict[str, Any]:
        return {
            "lat": lat,
            "lon": lon,
            "format": "json",
            "zoom": 18,
            "addressdetails": 1,
        }

    def _cache_key(self, prefix: str, params: dict[str, Any]) -> str:
        payload = {"base_url": self.base_url, **params}
        digest = hashlib.sha256(json.dumps(payload, sort_keys=True).encode("utf-8")).hexdigest()
        return f"geocoder:{prefix}:{digest}"

    def _cached(self, key: str) -> Any:
        if not geocoder_cache_enabled() or self.cache_ttl <= 0:
            return None
        return cache.get(key)

    def _remember(self, key: str, payload: Any) -> None:
        if geocoder_cache_enabled() and self.cache_ttl > 0:
            cache.set(key, payload, self.cache_ttl)

    def _get_json(self, url: str, params: dict[str, Any]) -> Any:
        try:
            with build_http_client(accept="application/json") as client:
                response = client.get(url, params=params)
        except httpx.TimeoutException as exc:
            raise GeocoderError(f"Timeout calling {url}: {exc}", error_type="timeout") from exc
        except httpx.HTTPError as exc:
            raise GeocoderError(f"Transport error calling {url}: {exc}", error_type="transport") from exc
        return _decode_response(response, url)

    async def _aget_json(self, url: str, params: dict[str, Any]) -> Any:
        try:
            async with build_async_http_client(accept="application/json") as client:
                response = await client.get(url, params=params)
        except httpx.TimeoutException as exc:
            raise GeocoderError(f"Timeout calling {url}: {exc}", error_type="timeout") from exc
        except httpx.HTTPError as exc:
            raise GeocoderError(f"Transport error calling {url}: {exc}", error_type="transport") from exc
        return _decode_response(response, url)

    def search(self, term: str) -> list[Candidate]:
        params = self.search_params(term)
        cache_key = self._cache_key("search", params)
        cached = self._cached(cache_key)
        if cached is not None:
            return parse_candidates(cached)

        payload = self._get_json(self.search_url, params)
        candidates = parse_candidates(payload)
        self._remember(cache_key, payload)
        logger.debug("Geocoder returned %s candidates for %r", len(candidates), term)
        return candidates

    async def asearch(self, term: str) -> list[Candidate]:
        params = self.search_params(term)
        cache_key = self._cache_key("search", params)
        cached = self._cached(cache_key)
        if cached is not None:
            return parse_candidates(cached)

        payload = await self._aget_json(self.search_url, params)
        candidates = parse_candidates(payload)
        self._remember(cache_key, payload)
        logger.debug("Geocoder returned %s candidates for %r", len(candidates), term)
        return candidates

    def reverse(self, lat: float, lon: float) -> Candidate | None:
        params = self.reverse_params(lat, lon)
        cache_key = self._cache_key("reverse", params)
        cached = self._cached(cache_key)
        if cached is not None:
            return parse_reverse(cached)

        payload = self._get_json(self.reverse_url, params)
        self._remember(cache_key, payload)
        return parse_reverse(payload)

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from rides.services.config import osrm_base_url
from rides.services.geo import distance_between
from rides.services.geocoder import GeocoderError, NominatimGeocoder
from rides.services.http_client import build_http_client
from rides.services.pricing import round_half_up
from rides.services.ranking import clean_name
from rides.services.types import Point

logger = logging.getLogger(__name__)

# OSRM assumes free-flowing traffic at posted limits. Measured against observed
# Indian highway travel times its durations come out about 35% short.
INDIA_ROAD_DURATION_FACTOR = 1.35
FALLBACK_SPEED_KMH = 55


class RoutingError(Exception):
    def __init__(self, message: str, *, http_status: int | None = None) -> None:
        super().__init__(message)
        self.http_status = http_status


@dataclass(frozen=True)
class RouteOption:
    id: str
    distance_m: float
    duration_s: int
    raw_duration_s: int
    description: str
    geometry: list[tuple[float, float]] = field(default_factory=list)

    @property
    def distance_km(self) -> float:
        return self.distance_m / 1000

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "distance_m": self.distance_m,
            "distance_km": round(self.distance_km, 2),
            "duration_s": self.duration_s,
            "raw_duration_s": self.raw_duration_s,
            "description": self.description,
            "geometry": [list(point) for point in self.geometry],
        }


@dataclass(frozen=True)
class StopoverSuggestion:
    lat: float
    lon: float
    name: str
    index: int

    def to_payload(self) -> dict[str, Any]:
        return {"lat": self.lat, "lon": self.lon, "name": self.name, "index": self.index}


def format_duration(duration_s: int) -> str:
    total_minutes = round_half_up(duration_s / 60)
    hours, minutes = divmod(total_minutes, 60)
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def route_description(distance_m: float, duration_s: int, index: int) -> str:
    summary = f"{round_half_up(distance_m / 1000)} km, {format_duration(duration_s)}"
    if index == 0:
        return f"Fastest Route - {summary}"
    if index == 1:
        return f"Alternative Route - {summary}"
    return f"Route {index + 1} - {summary}"


def direct_route(origin: Point, destination: Point) -> RouteOption:
    distance_m = distance_between(origin, destination) * 1000
    duration_s = round_half_up((distance_m / 1000) / FALLBACK_SPEED_KMH * 3600)
    return RouteOption(
        id="route-direct",
        distance_m=distance_m,
        duration_s=duration_s,
        raw_duration_s=duration_s,
        description="Direct Route (estimated)",
        geometry=[(origin.lat, origin.lon), (destination.lat, destination.lon)],
    )


def parse_routes(payload: Any) -> list[RouteOption]:
    routes = payload.get("routes") if isinstance(payload, dict) else None
    if not routes:
        raise RoutingError("OSRM response contained no routes.")

    options: list[RouteOption] = []
    for index, route in enumerate(routes):
        distance_m = float(route["distance"])
        raw_duration_s = float(route["duration"])
        duration_s = round_half_up(raw_duration_s * INDIA_ROAD_DURATION_FACTOR)
        coordinates = (route.get("geometry") or {}).get("coordinates") or []
        options.append(
            RouteOption(
                id=f"route-{index}",
                distance_m=distance_m,
                duration_s=duration_s,
                raw_duration_s=round_half_up(raw_duration_s),
                description=route_description(distance_m, duration_s, index),
                geometry=[(float(lat), float(lon)) for lon, lat in coordinates],
            ),
        )
    return options


class OsrmRouter:
    name = "osrm"

    def __init__(self, *, base_url: str | None = None) -> None:
        self.base_url = (base_url or osrm_base_url()).rstrip("/")

    def route_url(self, origin: Point, destination: Point) -> str:
        return (
            f"{self.base_url}/route/v1/driving/"
            f"{origin.lon},{origin.lat};{destination.lon},{destination.lat}"
        )

    def fetch_routes(self, origin: Point, destination: Point, alternatives: int = 3) -> list[RouteOption]:
        url = self.route_url(origin, destination)
        params = {
            "alternatives": alternatives,
            "geometries": "geojson",
            "overview": "full",
            "steps": "true",
        }
        try:
            with build_http_client(accept="application/json") as client:
                response = client.get(url, params=params)
        except httpx.HTTPError as exc:
            raise RoutingError(f"Transport error calling {url}: {exc}") from exc

        status_code = int(response.status_code)
        if status_code != 200:
            raise RoutingError(f"HTTP {status_code} for {url}", http_status=status_code)
        try:
            return parse_routes(response.json())
        except (KeyError, TypeError, ValueError) as exc:
            raise RoutingError(f"Malformed OSRM payload: {exc}", http_status=status_code) from exc

    def routes(self, origin: Point, destination: Point, alternatives: int = 3) -> list[RouteOption]:
        """Route alternatives, or a single straight-line estimate when OSRM fails."""
        try:
            return self.fetch_routes(origin, destination, alternatives)
        except RoutingError as exc:
            logger.warning("Route lookup failed, using direct estimate: %s", exc)
            return [direct_route(origin, destination)]


def suggest_stopovers(
    geometry: list[tuple[float, float]],
    *,
    geocoder: NominatimGeocoder | None = None,
    max_stopovers: int = 5,
) -> list[StopoverSuggestion]:
    """Evenly spaced points along ``geometry``, named by reverse geocoding.

    Points the geocoder cannot name are labelled "Stopover N"; a point whose
    lookup fails outright is still offered under that label.
    """
    total_points = len(geometry)
    interval = total_points // (max_stopovers + 1)
    if interval <= 0:
        return []
    geocoder = geocoder or NominatimGeocoder()

    suggestions: list[StopoverSuggestion] = []
    for position in range(1, max_stopovers + 1):
        index = position * interval
        if index >= total_points - 1:
            continue
        lat, lon = geometry[index]
        fallback_name = f"Stopover {position}"
        try:
            place = geocoder.reverse(lat, lon)
        except GeocoderError as exc:
            logger.warning("Reverse geocoding failed for stopover %s: %s", position, exc)
            place = None
        name = (clean_name(place).strip() if place else "") or fallback_name
        suggestions.append(StopoverSuggestion(lat=lat, lon=lon, name=name, index=index))
    return suggestions

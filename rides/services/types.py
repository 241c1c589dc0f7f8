from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, NamedTuple

_ADDRESS_FIELDS = ("city", "town", "village", "county", "state", "country", "postcode")


class Point(NamedTuple):
    lat: float
    lon: float


@dataclass(frozen=True)
class Address:
    city: str | None = None
    town: str | None = None
    village: str | None = None
    county: str | None = None
    state: str | None = None
    country: str | None = None
    postcode: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "Address":
        if not isinstance(payload, dict):
            return cls()
        values = {}
        for key in _ADDRESS_FIELDS:
            value = payload.get(key)
            values[key] = str(value) if value not in (None, "") else None
        return cls(**values)

    def to_payload(self) -> dict[str, str]:
        return {key: getattr(self, key) for key in _ADDRESS_FIELDS if getattr(self, key)}


@dataclass(frozen=True)
class Candidate:
    display_name: str
    lat: float
    lon: float
    place_id: int
    address: Address = field(default_factory=Address)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Candidate":
        """Build a candidate from one Nominatim result object.

        Nominatim serializes coordinates as strings; both forms are accepted.
        Raises ``KeyError``/``ValueError``/``TypeError`` on a malformed item.
        """
        return cls(
            display_name=str(payload.get("display_name") or ""),
            lat=float(payload["lat"]),
            lon=float(payload["lon"]),
            place_id=int(payload["place_id"]),
            address=Address.from_payload(payload.get("address")),
        )

    @property
    def point(self) -> Point:
        return Point(self.lat, self.lon)

    def to_payload(self) -> dict[str, Any]:
        return {
            "display_name": self.display_name,
            "lat": self.lat,
            "lon": self.lon,
            "place_id": self.place_id,
            "address": self.address.to_payload(),
        }


@dataclass(frozen=True)
class ScoredCandidate:
    candidate: Candidate
    score: float


@dataclass(frozen=True)
class Waypoint:
    id: str
    name: str
    lat: float
    lon: float
    order: int

    @property
    def point(self) -> Point:
        return Point(self.lat, self.lon)


@dataclass(frozen=True)
class PricingSegment:
    stopover_id: str
    distance_to_destination_km: float
    price: int
    distance_from_previous_km: float = 0.0
    cumulative_distance_km: float = 0.0

    def to_payload(self) -> dict[str, Any]:
        return {
            "stopover_id": self.stopover_id,
            "distance_to_destination_km": round(self.distance_to_destination_km, 2),
            "price": self.price,
            "distance_from_previous_km": round(self.distance_from_previous_km, 2),
            "cumulative_distance_km": round(self.cumulative_distance_km, 2),
        }


@dataclass(frozen=True)
class PricingResult:
    total_price: float
    route_distance_km: float
    per_km_rate: float
    segments: list[PricingSegment]

    def price_for(self, stopover_id: str) -> int | None:
        for segment in self.segments:
            if segment.stopover_id == stopover_id:
                return segment.price
        return None

    def to_payload(self) -> dict[str, Any]:
        return {
            "total_price": self.total_price,
            "route_distance_km": self.route_distance_km,
            "per_km_rate": round(self.per_km_rate, 4),
            "segments": [segment.to_payload() for segment in self.segments],
        }

"""Per-seat price allocation across the stopovers of a published ride.

The driver sets one price for the whole route. Each stopover is priced for
the remaining ride to the destination at the route's per-km rate, with a
minimum fare per segment.

Known limitation: the per-km rate divides by the routed road distance while
stopover distances are great-circle, so segment prices run slightly low on
winding routes. The two distance models are deliberately not reconciled.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from rides.services.geo import distance_between
from rides.services.types import Point, PricingResult, PricingSegment, Waypoint

logger = logging.getLogger(__name__)

MINIMUM_FARE = 50
RECOMMENDED_RATE_PER_KM = 2.0
FUEL_COST_PER_KM = 7.5
TOLL_RATE_PER_KM = 0.4
TOLL_FREE_DISTANCE_KM = 50
COST_SHARING_PASSENGERS = 4


class InvalidPricingInput(ValueError):
    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


def round_half_up(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _require_positive(value: float, field: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidPricingInput(f"{field} must be a number.", field=field) from exc
    if not math.isfinite(number) or number <= 0:
        raise InvalidPricingInput(f"{field} must be a positive finite number.", field=field)
    return number


def _require_finite_point(point: Point, field: str) -> Point:
    if not all(isinstance(value, (int, float)) and math.isfinite(value) for value in point):
        raise InvalidPricingInput(f"{field} coordinates must be finite numbers.", field=field)
    return point


def ordered_stopovers(stopovers: Iterable[Waypoint]) -> list[Waypoint]:
    ordered = sorted(stopovers, key=lambda stopover: stopover.order)
    for previous, current in zip(ordered, ordered[1:]):
        if previous.order == current.order:
            raise InvalidPricingInput(
                f"Stopovers {previous.id!r} and {current.id!r} share order {current.order}.",
                field="stopovers",
            )
    return ordered


def segment_price(distance_km: float, per_km_rate: float) -> int:
    return max(MINIMUM_FARE, round_half_up(distance_km * per_km_rate))


def allocate_segment_prices(
    total_price: float,
    origin: Point,
    destination: Point,
    stopovers: Iterable[Waypoint],
    route_distance_km: float,
) -> PricingResult:
    total = _require_positive(total_price, "total_price")
    route_km = _require_positive(route_distance_km, "route_distance_km")
    _require_finite_point(origin, "origin")
    _require_finite_point(destination, "destination")
    per_km_rate = total / route_km

    segments: list[PricingSegment] = []
    previous = origin
    cumulative_km = 0.0
    for stopover in ordered_stopovers(stopovers):
        _require_finite_point(stopover.point, "stopovers")
        from_previous_km = distance_between(previous, stopover.point)
        cumulative_km += from_previous_km
        to_destination_km = distance_between(stopover.point, destination)
        segments.append(
            PricingSegment(
                stopover_id=stopover.id,
                distance_to_destination_km=to_destination_km,
                price=segment_price(to_destination_km, per_km_rate),
                distance_from_previous_km=from_previous_km,
                cumulative_distance_km=cumulative_km,
            ),
        )
        previous = stopover.point

    logger.debug(
        "Allocated %s stopover prices at %.4f per km over %.1f km",
        len(segments),
        per_km_rate,
        route_km,
    )
    return PricingResult(
        total_price=total,
        route_distance_km=route_km,
        per_km_rate=per_km_rate,
        segments=segments,
    )


@dataclass(frozen=True)
class PriceRecommendation:
    recommended: int
    minimum: int
    maximum: int
    per_km_rate: float
    fuel_cost: int
    toll_estimate: int
    driver_earning: int

    def to_payload(self) -> dict:
        return {
            "recommended": self.recommended,
            "min": self.minimum,
            "max": self.maximum,
            "per_km_rate": self.per_km_rate,
            "breakdown": {
                "fuel_cost": self.fuel_cost,
                "toll_estimate": self.toll_estimate,
                "driver_earning": self.driver_earning,
            },
        }


def recommend_price(distance_m: float) -> PriceRecommendation:
    """Suggested per-seat price for a route of ``distance_m`` metres.

    Fuel and toll shares assume the running cost is split between four
    passengers.
    """
    try:
        meters = float(distance_m)
    except (TypeError, ValueError) as exc:
        raise InvalidPricingInput("distance_m must be a number.", field="distance_m") from exc
    if not math.isfinite(meters) or meters < 0:
        raise InvalidPricingInput("distance_m must be a non-negative finite number.", field="distance_m")

    distance_km = meters / 1000
    recommended = max(MINIMUM_FARE, round_half_up(distance_km * RECOMMENDED_RATE_PER_KM))
    fuel_cost = distance_km * FUEL_COST_PER_KM
    toll_estimate = round_half_up(distance_km * TOLL_RATE_PER_KM) if distance_km > TOLL_FREE_DISTANCE_KM else 0
    fuel_share = fuel_cost / COST_SHARING_PASSENGERS
    toll_share = toll_estimate / COST_SHARING_PASSENGERS

    return PriceRecommendation(
        recommended=recommended,
        minimum=max(MINIMUM_FARE, round_half_up(recommended * 0.8)),
        maximum=round_half_up(recommended * 1.3),
        per_km_rate=RECOMMENDED_RATE_PER_KM,
        fuel_cost=round_half_up(fuel_share),
        toll_estimate=round_half_up(toll_share),
        driver_earning=round_half_up(recommended - fuel_share - toll_share),
    )

from __future__ import annotations

import logging
from collections.abc import Mapping

from django.http import JsonResponse
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle
from rest_framework.views import APIView

from rides.serializers import (
    PriceRecommendationSerializer,
    ReverseLookupSerializer,
    RouteRequestSerializer,
    SegmentPricingSerializer,
    TripMatchSerializer,
    as_point,
)
from rides.services.geocoder import GeocoderError, NominatimGeocoder
from rides.services.location_search import suggest_locations
from rides.services.pricing import InvalidPricingInput, allocate_segment_prices, recommend_price
from rides.services.ranking import clean_name
from rides.services.routing import OsrmRouter, suggest_stopovers
from rides.services.trip_matching import match_trip_by_text, match_trip_within_radius
from rides.services.types import Candidate
from rides.services.variations import generate_variations

logger = logging.getLogger(__name__)


class LocationSuggestThrottle(AnonRateThrottle):
    scope = "location_suggest"


class LocationReverseThrottle(AnonRateThrottle):
    scope = "location_reverse"


class RouteLookupThrottle(AnonRateThrottle):
    scope = "route_lookup"


def healthz(request):  # noqa: ANN001, ANN201
    return JsonResponse({"status": "ok"})


def compact_validation_errors(detail):  # noqa: ANN001, ANN201
    if isinstance(detail, list):
        if len(detail) == 1:
            return compact_validation_errors(detail[0])
        return [compact_validation_errors(item) for item in detail]
    if isinstance(detail, Mapping):
        return {str(key): compact_validation_errors(value) for key, value in detail.items()}
    return str(detail)


def validation_error_response(errors) -> Response:  # noqa: ANN001
    return Response(
        {
            "detail": "validation_error",
            "errors": compact_validation_errors(errors),
        },
        status=status.HTTP_400_BAD_REQUEST,
    )


def candidate_payload(candidate: Candidate) -> dict:
    return {**candidate.to_payload(), "name": clean_name(candidate)}


class LocationSuggestAPIView(APIView):
    permission_classes = [permissions.AllowAny]
    throttle_classes = [LocationSuggestThrottle]

    def get(self, request):  # noqa: ANN001, ANN201
        query = str(request.query_params.get("q") or "")
        results = suggest_locations(query)
        return Response({"query": query.strip(), "results": [candidate_payload(item) for item in results]})


class LocationVariationsAPIView(APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request):  # noqa: ANN001, ANN201
        query = str(request.query_params.get("q") or "").strip()
        return Response({"query": query, "variations": generate_variations(query)})


class LocationReverseAPIView(APIView):
    permission_classes = [permissions.AllowAny]
    throttle_classes = [LocationReverseThrottle]

    def get(self, request):  # noqa: ANN001, ANN201
        serializer = ReverseLookupSerializer(data=request.query_params)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)
        point = as_point(serializer.validated_data)
        try:
            place = NominatimGeocoder().reverse(point.lat, point.lon)
        except GeocoderError as exc:
            logger.warning("Reverse geocoding failed for %s,%s: %s", point.lat, point.lon, exc)
            place = None
        return Response({"result": candidate_payload(place) if place else None})


class SegmentPricingAPIView(APIView):
    permission_classes = [permissions.AllowAny]

    def post(self, request):  # noqa: ANN001, ANN201
        serializer = SegmentPricingSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        origin, destination = serializer.endpoints()
        try:
            result = allocate_segment_prices(
                total_price=serializer.validated_data["total_price"],
                origin=origin,
                destination=destination,
                stopovers=serializer.waypoints(),
                route_distance_km=serializer.validated_data["route_distance_km"],
            )
        except InvalidPricingInput as exc:
            return validation_error_response({exc.field or "non_field_errors": [str(exc)]})
        return Response(result.to_payload(), status=status.HTTP_200_OK)


class PriceRecommendationAPIView(APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request):  # noqa: ANN001, ANN201
        serializer = PriceRecommendationSerializer(data=request.query_params)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)
        try:
            recommendation = recommend_price(serializer.validated_data["distance_m"])
        except InvalidPricingInput as exc:
            return validation_error_response({exc.field or "non_field_errors": [str(exc)]})
        return Response(recommendation.to_payload())


class RouteOptionsAPIView(APIView):
    permission_classes = [permissions.AllowAny]
    throttle_classes = [RouteLookupThrottle]

    def post(self, request):  # noqa: ANN001, ANN201
        serializer = RouteRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)
        data = serializer.validated_data

        routes = OsrmRouter().routes(as_point(data["origin"]), as_point(data["destination"]), data["alternatives"])
        payload = {"routes": [route.to_payload() for route in routes]}
        if data["include_stopovers"] and routes:
            stopovers = suggest_stopovers(routes[0].geometry, max_stopovers=data["max_stopovers"])
            payload["stopovers"] = [item.to_payload() for item in stopovers]
        return Response(payload)


class TripMatchAPIView(APIView):
    permission_classes = [permissions.AllowAny]

    def post(self, request):  # noqa: ANN001, ANN201
        serializer = TripMatchSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)
        data = serializer.validated_data

        match = match_trip_within_radius(
            as_point(data["trip_pickup"]),
            as_point(data["trip_dropoff"]),
            as_point(data["search_pickup"]),
            as_point(data["search_dropoff"]),
            radius_km=data["radius_km"],
        )
        payload = {
            "match_score": round(match.match_score, 2),
            "pickup_distance_km": match.pickup_distance_km,
            "dropoff_distance_km": match.dropoff_distance_km,
            "is_within_radius": match.is_within_radius,
        }
        if data["trip_location"] and data["search_term"]:
            payload["text_match"] = match_trip_by_text(data["trip_location"], data["search_term"])
        return Response(payload)

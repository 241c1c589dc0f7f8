from __future__ import annotations

from rest_framework import serializers

from rides.services.trip_matching import DEFAULT_RADIUS_KM, MAX_RADIUS_KM
from rides.services.types import Point, Waypoint


def as_point(data: dict) -> Point:
    return Point(data["lat"], data["lon"])


class PointSerializer(serializers.Serializer):
    lat = serializers.FloatField(min_value=-90, max_value=90)
    lon = serializers.FloatField(min_value=-180, max_value=180)


class StopoverSerializer(PointSerializer):
    id = serializers.CharField(max_length=64)
    name = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    order = serializers.IntegerField()


class ReverseLookupSerializer(PointSerializer):
    pass


class SegmentPricingSerializer(serializers.Serializer):
    total_price = serializers.FloatField()
    route_distance_km = serializers.FloatField()
    origin = PointSerializer()
    destination = PointSerializer()
    stopovers = StopoverSerializer(many=True, required=False, default=list)

    def validate_stopovers(self, value):  # noqa: ANN001, ANN201
        ids = [item["id"] for item in value]
        if len(ids) != len(set(ids)):
            raise serializers.ValidationError("Stopover ids must be unique.")
        orders = [item["order"] for item in value]
        if len(orders) != len(set(orders)):
            raise serializers.ValidationError("Stopover order values must be unique.")
        return value

    def waypoints(self) -> list[Waypoint]:
        return [
            Waypoint(id=item["id"], name=item.get("name", ""), lat=item["lat"], lon=item["lon"], order=item["order"])
            for item in self.validated_data["stopovers"]
        ]

    def endpoints(self) -> tuple[Point, Point]:
        return as_point(self.validated_data["origin"]), as_point(self.validated_data["destination"])


class PriceRecommendationSerializer(serializers.Serializer):
    distance_m = serializers.FloatField(min_value=0)


class RouteRequestSerializer(serializers.Serializer):
    origin = PointSerializer()
    destination = PointSerializer()
    alternatives = serializers.IntegerField(min_value=0, max_value=3, required=False, default=3)
    include_stopovers = serializers.BooleanField(required=False, default=False)
    max_stopovers = serializers.IntegerField(min_value=1, max_value=10, required=False, default=5)


class TripMatchSerializer(serializers.Serializer):
    trip_pickup = PointSerializer()
    trip_dropoff = PointSerializer()
    search_pickup = PointSerializer()
    search_dropoff = PointSerializer()
    radius_km = serializers.FloatField(min_value=0.1, max_value=MAX_RADIUS_KM, required=False, default=DEFAULT_RADIUS_KM)
    trip_location = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    search_term = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")

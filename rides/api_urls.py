from django.urls import path

from rides import api_views

app_name = "rides-api"

urlpatterns = [
    path("locations/suggest", api_views.LocationSuggestAPIView.as_view(), name="locations-suggest"),
    path("locations/variations", api_views.LocationVariationsAPIView.as_view(), name="locations-variations"),
    path("locations/reverse", api_views.LocationReverseAPIView.as_view(), name="locations-reverse"),
    path("pricing/segments", api_views.SegmentPricingAPIView.as_view(), name="pricing-segments"),
    path("pricing/recommendation", api_views.PriceRecommendationAPIView.as_view(), name="pricing-recommendation"),
    path("routes", api_views.RouteOptionsAPIView.as_view(), name="routes"),
    path("trips/match", api_views.TripMatchAPIView.as_view(), name="trips-match"),
]

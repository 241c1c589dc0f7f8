from django.urls import include, path

from rides import api_views

urlpatterns = [
    path("healthz/", api_views.healthz, name="healthz"),
    path("api/", include("rides.api_urls")),
]

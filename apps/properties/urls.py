"""URL routing for the properties domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import PropertyAvailabilityView, PropertyViewSet

router = DefaultRouter()
router.register(r"", PropertyViewSet, basename="property")

urlpatterns = [
    path("", include(router.urls)),
    path(
        "<int:property_id>/availability/",
        PropertyAvailabilityView.as_view(),
        name="property-availability",
    ),
]

"""Property API views."""

from __future__ import annotations

from django.db import transaction  # type: ignore
from django.shortcuts import get_object_or_404  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.filters import OrderingFilter, SearchFilter  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.bookings.services import InvalidDateRangeError, PropertyNotFoundError, ledger

from .filters import PropertyFilterSet
from .models import Property
from .serializers import (
    AvailabilityQuerySerializer,
    AvailabilityUpdateSerializer,
    PropertySerializer,
)


class IsStaffOrReadOnly(permissions.BasePermission):
    """Anyone may browse; only staff may change listings."""

    def has_permission(self, request, view):  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        user = request.user
        return bool(user and user.is_authenticated and user.is_staff)


class PropertyViewSet(viewsets.ModelViewSet):
    """Viewset for browsing and managing listings."""

    queryset = Property.objects.all()
    serializer_class = PropertySerializer
    permission_classes = [IsStaffOrReadOnly]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    filterset_class = PropertyFilterSet
    search_fields = ["title", "location", "description"]
    ordering_fields = [
        "price_per_night",
        "created_at",
        "bedrooms",
    ]


class PropertyAvailabilityView(APIView):
    """Calendar of a property: public read, staff edit."""

    def get_permissions(self):  # type: ignore
        if self.request.method in permissions.SAFE_METHODS:
            return [permissions.AllowAny()]
        return [permissions.IsAdminUser()]

    def get(self, request, property_id):  # type: ignore
        property_obj = get_object_or_404(Property, pk=property_id)
        query = AvailabilityQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        payload = {
            "property_id": property_obj.id,
            "is_bookable": property_obj.is_bookable,
            "unavailable_dates": sorted(ledger.compute_unavailable_dates(property_obj.pk)),
        }

        check_in = query.validated_data.get("check_in")
        check_out = query.validated_data.get("check_out")
        if check_in and check_out:
            payload["check_in"] = check_in.isoformat()
            payload["check_out"] = check_out.isoformat()
            payload["is_available"] = ledger.is_range_available(property_obj.pk, check_in, check_out)
        return Response(payload)

    def put(self, request, property_id):  # type: ignore
        serializer = AvailabilityUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            with transaction.atomic():
                property_obj = ledger.get_property(property_id, lock=True)
                if "is_bookable" in data:
                    property_obj.is_bookable = data["is_bookable"]
                    property_obj.save(update_fields=["is_bookable", "updated_at"])
                result = ledger.set_date_overrides(property_obj.pk, data.get("dates", []))
        except PropertyNotFoundError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_404_NOT_FOUND)
        except InvalidDateRangeError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(
            {
                "success": True,
                "property_id": property_obj.id,
                "is_bookable": property_obj.is_bookable,
                "applied": result.applied,
                "skipped": result.skipped,
            }
        )

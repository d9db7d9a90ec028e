"""API views for managing reviews."""

from __future__ import annotations

import logging

from django.db.models import Avg  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.bookings.models import Booking

from .filters import ReviewFilterSet
from .models import Review
from .serializers import ReviewCreateSerializer, ReviewModerationSerializer, ReviewSerializer

logger = logging.getLogger(__name__)


def average_rating(property_id) -> float | None:
    """Mean approved rating for a property, one decimal place."""
    value = Review.objects.filter(
        property_id=property_id,
        status=Review.Status.APPROVED,
    ).aggregate(avg=Avg("rating"))["avg"]
    if value is None:
        return None
    return round(float(value), 1)


class ReviewViewSet(viewsets.ModelViewSet):
    """Public review feed plus staff moderation."""

    queryset = Review.objects.select_related("property").all()
    filterset_class = ReviewFilterSet
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    def get_permissions(self):  # type: ignore
        if self.action in {"list", "retrieve", "create"}:
            return [permissions.AllowAny()]
        return [permissions.IsAdminUser()]

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return ReviewCreateSerializer
        if self.action == "partial_update":
            return ReviewModerationSerializer
        return ReviewSerializer

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        if getattr(self.request.user, "is_staff", False):
            return qs

        # Anonymous visitors only see published reviews
        return qs.filter(status=Review.Status.APPROVED)

    def list(self, request, *args, **kwargs):  # type: ignore
        # ReviewFilterSet has already rejected a malformed or unknown property
        response = super().list(request, *args, **kwargs)
        property_id = request.query_params.get("property")
        if property_id and isinstance(response.data, dict):
            response.data["avg_rating"] = average_rating(property_id)
        return response

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        is_verified_stay = False
        reference = data.get("booking_reference")
        if reference:
            is_verified_stay = Booking.objects.filter(
                reference=reference,
                email__iexact=data["email"],
                property=data["property"],
                payment_status=Booking.PaymentStatus.COMPLETED,
            ).exists()

        review = serializer.save(
            is_verified_stay=is_verified_stay,
            status=Review.Status.APPROVED if is_verified_stay else Review.Status.PENDING,
        )
        logger.info(
            f"Review {review.id} for property {review.property_id} created "
            f"({'verified stay' if is_verified_stay else 'pending moderation'})"
        )

        payload = {
            "success": True,
            "review": ReviewSerializer(review, context=self.get_serializer_context()).data,
            "message": (
                "Thank you for your review! It has been published."
                if is_verified_stay
                else "Thank you for your review! It will be published after moderation."
            ),
        }
        return Response(payload, status=status.HTTP_201_CREATED)

    def partial_update(self, request, *args, **kwargs):  # type: ignore
        review = self.get_object()
        serializer = self.get_serializer(review, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(ReviewSerializer(review, context=self.get_serializer_context()).data)

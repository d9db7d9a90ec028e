"""API views for analytics.

Provides the dashboard counters shown to site administrators: listings,
bookings by payment status, revenue from paid stays and the moderation
backlog.
"""

from __future__ import annotations

from decimal import Decimal

from django.db import models  # type: ignore
from rest_framework.permissions import IsAdminUser  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.bookings.models import Booking
from apps.properties.models import Property
from apps.reviews.models import Review


class OverviewAnalyticsView(APIView):
    """Return general statistics for the site."""

    permission_classes = [IsAdminUser]

    def get(self, request, format=None):  # type: ignore
        status_counts = {value: 0 for value in Booking.PaymentStatus.values}
        for row in Booking.objects.values("payment_status").annotate(total=models.Count("id")):
            status_counts[row["payment_status"]] = row["total"]

        paid_qs = Booking.blocking()
        total_revenue = paid_qs.aggregate(total=models.Sum("total_amount")).get("total") or Decimal("0")
        avg_rating = (
            Review.objects.filter(status=Review.Status.APPROVED)
            .aggregate(avg=models.Avg("rating"))
            .get("avg")
        )

        return Response(
            {
                "properties": Property.objects.count(),
                "bookable_properties": Property.objects.filter(is_bookable=True).count(),
                "bookings": sum(status_counts.values()),
                "bookings_by_status": status_counts,
                "revenue": total_revenue,
                "pending_reviews": Review.objects.filter(status=Review.Status.PENDING).count(),
                "avg_rating": round(avg_rating, 1) if avg_rating is not None else None,
            }
        )

"""Tests for the review API."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.properties.models import Property
from apps.reviews.models import Review

User = get_user_model()


class ReviewAPITests(APITestCase):
    def setUp(self) -> None:
        self.staff = User.objects.create_user(
            username="moderator",
            email="moderator@example.com",
            password="ModeratorPass123",
            is_staff=True,
        )
        self.property = Property.objects.create(
            title="Port Harcourt Flat",
            description="Two bedroom flat.",
            thumbnail="/images/ph.jpg",
            price_per_night=Decimal("40000.00"),
            location="Port Harcourt",
        )
        self.booking = Booking.objects.create(
            property=self.property,
            reference="GHA_STAY01",
            name="Ngozi",
            email="ngozi@example.com",
            phone="+2348088888888",
            check_in=date(2025, 5, 1),
            check_out=date(2025, 5, 4),
            payment_status=Booking.PaymentStatus.COMPLETED,
        )
        self.list_url = reverse("review-list")

    def _payload(self, **overrides) -> dict[str, object]:
        data = {
            "property": self.property.id,
            "name": "Ngozi",
            "email": "ngozi@example.com",
            "rating": 5,
            "comment": "Clean and quiet.",
        }
        data.update(overrides)
        return data

    def test_verified_stay_is_published(self) -> None:
        response = self.client.post(
            self.list_url,
            self._payload(booking_reference="GHA_STAY01", email="NGOZI@example.com"),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertTrue(response.data["review"]["is_verified_stay"])
        self.assertEqual(response.data["review"]["status"], Review.Status.APPROVED)

    def test_unverified_review_waits_for_moderation(self) -> None:
        wrong_email = self.client.post(
            self.list_url,
            self._payload(booking_reference="GHA_STAY01", email="someone@example.com"),
            format="json",
        )
        no_reference = self.client.post(self.list_url, self._payload(), format="json")

        for response in (wrong_email, no_reference):
            self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
            self.assertFalse(response.data["review"]["is_verified_stay"])
            self.assertEqual(response.data["review"]["status"], Review.Status.PENDING)

    def test_unpaid_booking_does_not_verify(self) -> None:
        self.booking.payment_status = Booking.PaymentStatus.PENDING
        self.booking.save(update_fields=["payment_status"])

        response = self.client.post(
            self.list_url, self._payload(booking_reference="GHA_STAY01"), format="json"
        )
        self.assertEqual(response.data["review"]["status"], Review.Status.PENDING)

    def test_rating_bounds(self) -> None:
        for rating in (0, 6):
            response = self.client.post(self.list_url, self._payload(rating=rating), format="json")
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)

    def test_public_sees_only_approved_with_average(self) -> None:
        Review.objects.create(property=self.property, name="A", email="a@example.com", rating=5, comment="Great", status=Review.Status.APPROVED)
        Review.objects.create(property=self.property, name="B", email="b@example.com", rating=4, comment="Good", status=Review.Status.APPROVED)
        Review.objects.create(property=self.property, name="C", email="c@example.com", rating=1, comment="Spam", status=Review.Status.PENDING)

        response = self.client.get(self.list_url, {"property": self.property.id})

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["count"], 2)
        self.assertEqual(response.data["avg_rating"], 4.5)

    def test_average_is_null_without_approved_reviews(self) -> None:
        response = self.client.get(self.list_url, {"property": self.property.id})
        self.assertIsNone(response.data["avg_rating"])

    def test_malformed_or_unknown_property_filter_is_rejected(self) -> None:
        malformed = self.client.get(self.list_url, {"property": "abc"})
        unknown = self.client.get(self.list_url, {"property": 999999})

        self.assertEqual(malformed.status_code, status.HTTP_400_BAD_REQUEST, malformed.data)
        self.assertIn("property", malformed.data)
        self.assertEqual(unknown.status_code, status.HTTP_400_BAD_REQUEST, unknown.data)

    def test_status_filter_is_ignored_for_the_public(self) -> None:
        Review.objects.create(property=self.property, name="A", email="a@example.com", rating=5, comment="Great", status=Review.Status.APPROVED)
        Review.objects.create(property=self.property, name="C", email="c@example.com", rating=1, comment="Spam", status=Review.Status.PENDING)

        response = self.client.get(self.list_url, {"status": "pending"})

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["count"], 1)

    def test_staff_sees_everything_and_filters_by_status(self) -> None:
        Review.objects.create(property=self.property, name="A", email="a@example.com", rating=5, comment="Great", status=Review.Status.APPROVED)
        Review.objects.create(property=self.property, name="C", email="c@example.com", rating=1, comment="Spam", status=Review.Status.PENDING)
        self.client.force_authenticate(self.staff)

        everything = self.client.get(self.list_url)
        pending = self.client.get(self.list_url, {"status": "pending"})

        self.assertEqual(everything.data["count"], 2)
        self.assertEqual(pending.data["count"], 1)

    def test_moderation_is_staff_only(self) -> None:
        review = Review.objects.create(property=self.property, name="C", email="c@example.com", rating=3, comment="Ok")
        detail_url = reverse("review-detail", args=[review.id])

        anonymous = self.client.patch(detail_url, {"status": "approved"}, format="json")
        self.assertIn(anonymous.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

        self.client.force_authenticate(self.staff)
        approved = self.client.patch(detail_url, {"status": "approved"}, format="json")
        self.assertEqual(approved.status_code, status.HTTP_200_OK, approved.data)
        self.assertEqual(approved.data["status"], Review.Status.APPROVED)

        invalid = self.client.patch(detail_url, {"status": "published"}, format="json")
        self.assertEqual(invalid.status_code, status.HTTP_400_BAD_REQUEST, invalid.data)

        deleted = self.client.delete(detail_url)
        self.assertEqual(deleted.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Review.objects.filter(id=review.id).exists())

"""Tests for the property availability calendar endpoint."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.properties.models import DateAvailabilityOverride, Property

User = get_user_model()


class PropertyAvailabilityAPITests(APITestCase):
    def setUp(self) -> None:
        self.staff = User.objects.create_user(
            username="calendar-admin",
            email="calendar@example.com",
            password="CalendarPass123",
            is_staff=True,
        )
        self.property = Property.objects.create(
            title="Abuja Maitama Villa",
            description="Quiet villa.",
            thumbnail="/images/maitama.jpg",
            price_per_night=Decimal("200000.00"),
            location="Maitama, Abuja",
        )
        Booking.objects.create(
            property=self.property,
            name="Ifeoma",
            email="ifeoma@example.com",
            phone="+2348044444444",
            check_in=date(2025, 6, 1),
            check_out=date(2025, 6, 3),
            payment_status=Booking.PaymentStatus.COMPLETED,
        )
        self.url = reverse("property-availability", args=[self.property.id])

    def test_public_calendar_lists_booked_days(self) -> None:
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["property_id"], self.property.id)
        self.assertTrue(response.data["is_bookable"])
        self.assertEqual(response.data["unavailable_dates"], ["2025-06-01", "2025-06-02"])
        self.assertNotIn("is_available", response.data)

    def test_range_check(self) -> None:
        busy = self.client.get(self.url, {"check_in": "2025-06-03", "check_out": "2025-06-05"})
        free = self.client.get(self.url, {"check_in": "2025-06-10", "check_out": "2025-06-12"})

        self.assertFalse(busy.data["is_available"])
        self.assertTrue(free.data["is_available"])

    def test_invalid_range_is_rejected(self) -> None:
        reversed_range = self.client.get(self.url, {"check_in": "2025-06-05", "check_out": "2025-06-01"})
        half_range = self.client.get(self.url, {"check_in": "2025-06-05"})

        self.assertEqual(reversed_range.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(half_range.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_property_is_404(self) -> None:
        response = self.client.get(reverse("property-availability", args=[999999]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_update_requires_staff(self) -> None:
        response = self.client.put(self.url, {"is_bookable": False}, format="json")
        self.assertIn(
            response.status_code,
            (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN),
        )

    def test_staff_updates_overrides_and_bad_dates_are_skipped(self) -> None:
        self.client.force_authenticate(self.staff)

        response = self.client.put(
            self.url,
            {
                "dates": [
                    {"date": "2025-07-01", "is_available": False},
                    {"date": "31/07/2025", "is_available": False},
                    {"date": "2025-07-02", "is_available": True},
                ]
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertTrue(response.data["success"])
        self.assertEqual(response.data["applied"], ["2025-07-01", "2025-07-02"])
        self.assertEqual(response.data["skipped"], ["31/07/2025"])
        self.assertEqual(DateAvailabilityOverride.objects.filter(property=self.property).count(), 2)

        calendar = self.client.get(self.url)
        self.assertIn("2025-07-01", calendar.data["unavailable_dates"])
        self.assertNotIn("2025-07-02", calendar.data["unavailable_dates"])

    def test_staff_can_switch_off_bookings(self) -> None:
        self.client.force_authenticate(self.staff)

        response = self.client.put(self.url, {"is_bookable": False}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertFalse(response.data["is_bookable"])
        check = self.client.get(self.url, {"check_in": "2025-09-01", "check_out": "2025-09-02"})
        self.assertFalse(check.data["is_available"])

    def test_update_unknown_property_is_404(self) -> None:
        self.client.force_authenticate(self.staff)
        response = self.client.put(
            reverse("property-availability", args=[999999]),
            {"is_bookable": True},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

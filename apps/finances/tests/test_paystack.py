"""Tests for Paystack verification and webhook handling."""

from __future__ import annotations

import hashlib
import hmac
import json
from datetime import date
from decimal import Decimal
from unittest import mock

import requests
from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.bookings.services import complete_booking_payment, ledger
from apps.finances import paystack_service
from apps.finances.models import PaymentTransaction
from apps.properties.models import Property

SECRET = "sk_test_secret"


def sign(body: bytes, secret: str = SECRET) -> str:
    return hmac.new(secret.encode(), body, hashlib.sha512).hexdigest()


def gateway_response(reference: str, gateway_status: str = "success", amount: int = 18000000):
    response = mock.Mock()
    response.raise_for_status.return_value = None
    response.json.return_value = {
        "status": True,
        "message": "Verification successful",
        "data": {"reference": reference, "status": gateway_status, "amount": amount},
    }
    return response


class PaystackServiceTests(TestCase):
    @override_settings(PAYSTACK_SECRET_KEY=SECRET)
    def test_signature_check(self) -> None:
        body = b'{"event":"charge.success"}'
        self.assertTrue(paystack_service.verify_webhook_signature(body, sign(body)))
        self.assertFalse(paystack_service.verify_webhook_signature(body, sign(body, "other")))
        self.assertFalse(paystack_service.verify_webhook_signature(body, None))

    @override_settings(PAYSTACK_SECRET_KEY="")
    def test_signature_fails_without_secret(self) -> None:
        body = b"{}"
        self.assertFalse(paystack_service.verify_webhook_signature(body, sign(body, "")))

    def test_is_successful(self) -> None:
        self.assertTrue(paystack_service.is_successful({"status": True, "data": {"status": "success"}}))
        self.assertFalse(paystack_service.is_successful({"status": True, "data": {"status": "failed"}}))
        self.assertFalse(paystack_service.is_successful({"status": False}))

    @override_settings(
        PAYSTACK_SECRET_KEY=SECRET,
        PAYSTACK_BASE_URL="https://api.paystack.co/",
        PAYSTACK_TIMEOUT=7,
    )
    def test_verify_transaction_calls_gateway(self) -> None:
        with mock.patch("apps.finances.paystack_service.requests.get") as mocked_get:
            mocked_get.return_value = gateway_response("GHA_ABC")
            result = paystack_service.verify_transaction("GHA_ABC")

        self.assertTrue(paystack_service.is_successful(result))
        mocked_get.assert_called_once_with(
            "https://api.paystack.co/transaction/verify/GHA_ABC",
            headers={"Authorization": f"Bearer {SECRET}", "Accept": "application/json"},
            timeout=7,
        )

    @override_settings(PAYSTACK_SECRET_KEY=SECRET)
    def test_network_errors_are_wrapped(self) -> None:
        with mock.patch(
            "apps.finances.paystack_service.requests.get",
            side_effect=requests.exceptions.ConnectTimeout("timed out"),
        ):
            with self.assertRaises(paystack_service.PaystackError):
                paystack_service.verify_transaction("GHA_ABC")


@override_settings(PAYSTACK_SECRET_KEY=SECRET)
class PaystackEndpointTests(APITestCase):
    def setUp(self) -> None:
        self.property = Property.objects.create(
            title="Banana Island Residence",
            description="Waterfront residence.",
            thumbnail="/images/banana.jpg",
            price_per_night=Decimal("90000.00"),
            location="Banana Island, Lagos",
        )
        self.booking = Booking.objects.create(
            property=self.property,
            reference="GHA_TEST01",
            name="Emeka",
            email="emeka@example.com",
            phone="+2348055555555",
            check_in=date(2025, 10, 1),
            check_out=date(2025, 10, 3),
            total_amount=Decimal("180000.00"),
        )
        self.webhook_url = reverse("paystack-webhook")

    def _post_webhook(self, payload, signature: str | None = "auto"):
        body = json.dumps(payload).encode() if not isinstance(payload, bytes) else payload
        headers = {}
        if signature == "auto":
            headers["HTTP_X_PAYSTACK_SIGNATURE"] = sign(body)
        elif signature is not None:
            headers["HTTP_X_PAYSTACK_SIGNATURE"] = signature
        return self.client.generic("POST", self.webhook_url, body, content_type="application/json", **headers)

    def _charge_success(self, reference: str = "GHA_TEST01") -> dict:
        return {"event": "charge.success", "data": {"reference": reference, "status": "success", "amount": 18000000}}

    def test_webhook_requires_signature(self) -> None:
        missing = self._post_webhook(self._charge_success(), signature=None)
        invalid = self._post_webhook(self._charge_success(), signature="deadbeef")

        self.assertEqual(missing.status_code, 401)
        self.assertEqual(invalid.status_code, 401)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.payment_status, Booking.PaymentStatus.PENDING)

    def test_webhook_rejects_bad_json(self) -> None:
        response = self._post_webhook(b"not json")
        self.assertEqual(response.status_code, 400)

    def test_charge_success_completes_booking(self) -> None:
        response = self._post_webhook(self._charge_success())

        self.assertEqual(response.status_code, 200, response.content)
        self.assertFalse(response.json()["already_processed"])
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.payment_status, Booking.PaymentStatus.COMPLETED)
        self.assertEqual(
            ledger.compute_unavailable_dates(self.property.pk),
            {"2025-10-01", "2025-10-02"},
        )
        self.assertTrue(
            PaymentTransaction.objects.filter(
                booking=self.booking,
                event=PaymentTransaction.Event.CHARGE_SUCCESS,
            ).exists()
        )

    def test_duplicate_delivery_is_a_no_op(self) -> None:
        self._post_webhook(self._charge_success())
        paid_at = Booking.objects.get(pk=self.booking.pk).paid_at

        response = self._post_webhook(self._charge_success())

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["already_processed"])
        self.assertEqual(Booking.objects.get(pk=self.booking.pk).paid_at, paid_at)

    def test_unknown_reference_is_404(self) -> None:
        response = self._post_webhook(self._charge_success("GHA_NOPE"))
        self.assertEqual(response.status_code, 404)

    def test_other_events_are_acknowledged(self) -> None:
        response = self._post_webhook({"event": "transfer.success", "data": {"reference": "GHA_TEST01"}})

        self.assertEqual(response.status_code, 200)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.payment_status, Booking.PaymentStatus.PENDING)

    def test_conflicting_payment_is_refused(self) -> None:
        rival = Booking.objects.create(
            property=self.property,
            name="Rival",
            email="rival@example.com",
            phone="+2348066666666",
            check_in=date(2025, 10, 2),
            check_out=date(2025, 10, 4),
        )
        complete_booking_payment(rival.reference)

        response = self._post_webhook(self._charge_success())

        self.assertEqual(response.status_code, 409)
        self.booking.refresh_from_db()
        self.assertFalse(self.booking.is_active)

    def test_verify_endpoint_completes_booking(self) -> None:
        with mock.patch(
            "apps.finances.paystack_service.requests.get",
            return_value=gateway_response("GHA_TEST01"),
        ):
            response = self.client.get(reverse("paystack-verify", args=["GHA_TEST01"]))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertTrue(response.data["verified"])
        self.assertEqual(response.data["payment_status"], Booking.PaymentStatus.COMPLETED)
        self.assertEqual(
            PaymentTransaction.objects.filter(event=PaymentTransaction.Event.VERIFY).count(),
            1,
        )

    def test_verify_after_webhook_is_idempotent(self) -> None:
        self._post_webhook(self._charge_success())

        with mock.patch(
            "apps.finances.paystack_service.requests.get",
            return_value=gateway_response("GHA_TEST01"),
        ):
            response = self.client.get(reverse("paystack-verify", args=["GHA_TEST01"]))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertTrue(response.data["already_processed"])

    def test_failed_payment_is_not_completed(self) -> None:
        with mock.patch(
            "apps.finances.paystack_service.requests.get",
            return_value=gateway_response("GHA_TEST01", gateway_status="failed"),
        ):
            response = self.client.get(reverse("paystack-verify", args=["GHA_TEST01"]))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.payment_status, Booking.PaymentStatus.PENDING)

    def test_gateway_outage_is_502(self) -> None:
        with mock.patch(
            "apps.finances.paystack_service.requests.get",
            side_effect=requests.exceptions.ConnectionError("down"),
        ):
            response = self.client.get(reverse("paystack-verify", args=["GHA_TEST01"]))

        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY, response.data)

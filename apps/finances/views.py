"""API views for payment confirmation.

Two paths confirm a booking payment: the guest's browser asks us to verify
a reference right after checkout, and Paystack delivers a signed webhook.
Both end in the same completion step, so whichever arrives second is a
no-op.
"""

from __future__ import annotations

import json
import logging
from decimal import Decimal
from typing import Any

from django.http import JsonResponse  # type: ignore
from django.views.decorators.csrf import csrf_exempt  # type: ignore
from django.views.decorators.http import require_POST  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.bookings.models import Booking
from apps.bookings.services import BookingConflictError, complete_booking_payment

from . import paystack_service
from .models import PaymentTransaction
from .paystack_service import PaystackError
from .serializers import PaymentTransactionSerializer

logger = logging.getLogger(__name__)


def _record(reference: str, event: str, status_value: str, payload: dict[str, Any]) -> PaymentTransaction:
    return PaymentTransaction.objects.create(
        booking=Booking.objects.filter(reference=reference).first(),
        reference=reference,
        event=event,
        status=status_value,
        payload=payload,
    )


def _check_amount(booking: Booking, data: dict[str, Any]) -> None:
    amount = data.get("amount")
    if amount is None:
        return
    expected = int(booking.total_amount * Decimal(100))
    try:
        paid = int(amount)
    except (TypeError, ValueError):
        paid = None
    if paid != expected:
        logger.warning(
            f"Amount mismatch for booking {booking.reference}: "
            f"paid {amount} kobo, expected {expected}"
        )


class PaymentTransactionViewSet(viewsets.ReadOnlyModelViewSet):
    """Gateway audit log for staff."""

    queryset = PaymentTransaction.objects.select_related("booking").all()
    serializer_class = PaymentTransactionSerializer
    permission_classes = [permissions.IsAdminUser]
    filterset_fields = ["event", "status", "reference"]


class PaystackVerifyView(APIView):
    """Verify a reference with Paystack and complete the booking on success."""

    permission_classes = [permissions.AllowAny]

    def get(self, request, reference: str):  # type: ignore
        try:
            result = paystack_service.verify_transaction(reference)
        except PaystackError as exc:
            _record(reference, PaymentTransaction.Event.VERIFY, "error", {"error": str(exc)})
            return Response({"detail": str(exc)}, status=status.HTTP_502_BAD_GATEWAY)

        data = result.get("data") or {}
        gateway_status = data.get("status", "")
        _record(reference, PaymentTransaction.Event.VERIFY, gateway_status, result)

        if not paystack_service.is_successful(result):
            return Response(
                {
                    "reference": reference,
                    "verified": False,
                    "gateway_status": gateway_status,
                    "detail": result.get("message") or "Payment verification failed.",
                },
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            completion = complete_booking_payment(reference, source="verify")
        except Booking.DoesNotExist:
            return Response({"detail": "Booking not found."}, status=status.HTTP_404_NOT_FOUND)
        except BookingConflictError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)

        if completion.newly_completed:
            _check_amount(completion.booking, data)

        return Response(
            {
                "reference": reference,
                "verified": True,
                "gateway_status": gateway_status,
                "payment_status": completion.booking.payment_status,
                "already_processed": not completion.newly_completed,
            }
        )


@csrf_exempt
@require_POST
def paystack_webhook(request):
    """Handle Paystack event deliveries."""
    signature = request.headers.get("X-Paystack-Signature")
    if not signature:
        logger.warning("Paystack webhook without signature rejected")
        return JsonResponse({"status": "error", "message": "Missing signature"}, status=401)

    if not paystack_service.verify_webhook_signature(request.body, signature):
        logger.warning("Paystack webhook with invalid signature rejected")
        return JsonResponse({"status": "error", "message": "Invalid signature"}, status=401)

    try:
        event = json.loads(request.body)
    except (ValueError, UnicodeDecodeError):
        return JsonResponse({"status": "error", "message": "Invalid JSON"}, status=400)
    if not isinstance(event, dict):
        return JsonResponse({"status": "error", "message": "Invalid payload"}, status=400)

    event_name = event.get("event", "")
    data = event.get("data") or {}
    reference = str(data.get("reference") or "")

    if event_name != PaymentTransaction.Event.CHARGE_SUCCESS:
        logger.info(f"Paystack webhook event {event_name or '-'} acknowledged without action")
        if reference:
            _record(reference, PaymentTransaction.Event.OTHER, str(data.get("status", "")), event)
        return JsonResponse({"status": "success", "message": "Event not processed"}, status=200)

    if not reference:
        return JsonResponse({"status": "error", "message": "reference is required"}, status=400)

    _record(reference, PaymentTransaction.Event.CHARGE_SUCCESS, str(data.get("status", "")), event)

    try:
        completion = complete_booking_payment(reference, source="webhook")
    except Booking.DoesNotExist:
        logger.error(f"Paystack webhook for unknown booking {reference}")
        return JsonResponse({"status": "error", "message": "Booking not found"}, status=404)
    except BookingConflictError as exc:
        return JsonResponse({"status": "error", "message": str(exc)}, status=409)

    if completion.newly_completed:
        _check_amount(completion.booking, data)

    return JsonResponse(
        {
            "status": "success",
            "reference": reference,
            "already_processed": not completion.newly_completed,
        },
        status=200,
    )

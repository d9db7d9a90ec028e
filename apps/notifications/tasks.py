"""Celery tasks for booking notifications."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from apps.bookings.models import Booking

from .services import send_admin_booking_alert, send_booking_confirmation_email

logger = logging.getLogger(__name__)


@shared_task(name="notifications.send_booking_notifications")
def send_booking_notifications(booking_id: int) -> dict[str, bool]:
    """Email the guest and the administrators about a paid booking."""
    try:
        booking = Booking.objects.select_related("property").get(id=booking_id)
    except Booking.DoesNotExist:
        logger.error(f"Booking {booking_id} not found for confirmation notification")
        return {"guest": False, "admins": False}

    result = {
        "guest": send_booking_confirmation_email(booking),
        "admins": send_admin_booking_alert(booking),
    }
    logger.info(f"[NOTIFICATION] Booking confirmed notifications for {booking.reference}: {result}")
    return result

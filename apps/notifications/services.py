"""Notification services for sending booking emails."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore

if TYPE_CHECKING:  # pragma: no cover
    from apps.bookings.models import Booking

logger = logging.getLogger(__name__)


def send_email_notification(recipient_list: list[str], subject: str, message: str) -> bool:
    """
    Send a plain-text email.

    Args:
        recipient_list: addresses to deliver to
        subject: email subject
        message: plain-text body

    Returns:
        bool: True when the message was handed to the mail backend
    """
    if not recipient_list:
        logger.warning(f"No recipients for email: {subject}")
        return False

    try:
        send_mail(
            subject=subject,
            message=message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=recipient_list,
            fail_silently=False,
        )
    except Exception as e:
        logger.error(f"Failed to send email to {', '.join(recipient_list)}: {e}", exc_info=True)
        return False

    logger.info(f"Email sent successfully to {', '.join(recipient_list)}: {subject}")
    return True


def _stay_summary(booking: "Booking") -> str:
    return (
        f"Property: {booking.property.title}\n"
        f"Location: {booking.property.location}\n"
        f"Check-in: {booking.check_in:%d %b %Y}\n"
        f"Check-out: {booking.check_out:%d %b %Y}\n"
        f"Nights: {booking.nights}\n"
        f"Guests: {booking.guests}\n"
        f"Total paid: {booking.currency} {booking.total_amount:,.2f}\n"
        f"Reference: {booking.reference}\n"
    )


def send_booking_confirmation_email(booking: "Booking") -> bool:
    """Confirmation to the guest."""
    subject = f"Booking {booking.reference} confirmed"
    message = (
        f"Hello {booking.name},\n\n"
        f"Your payment was received and your stay is confirmed.\n\n"
        f"{_stay_summary(booking)}"
    )
    return send_email_notification([booking.email], subject, message)


def send_admin_booking_alert(booking: "Booking") -> bool:
    """New paid booking alert to the configured administrators."""
    recipients = list(getattr(settings, "BOOKING_NOTIFICATION_RECIPIENTS", []))
    subject = f"New booking: {booking.property.title} ({booking.reference})"
    message = (
        f"A new booking has been paid.\n\n"
        f"Guest: {booking.name}\n"
        f"Email: {booking.email}\n"
        f"Phone: {booking.phone}\n\n"
        f"{_stay_summary(booking)}"
    )
    return send_email_notification(recipients, subject, message)

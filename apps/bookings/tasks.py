"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging
from datetime import timedelta

from celery import shared_task  # type: ignore
from django.conf import settings  # type: ignore
from django.db import transaction  # type: ignore
from django.utils import timezone  # type: ignore

from .models import Booking
from .services import ledger

logger = logging.getLogger(__name__)


def _consume(booking: Booking) -> bool:
    consumed = ledger.mark_range_unavailable(
        booking.property_id,
        booking.check_in,
        booking.check_out,
        booking_reference=booking.reference,
    )
    if consumed:
        booking.mark_dates_consumed()
    return consumed


@shared_task(
    bind=True,
    name="bookings.consume_booking_dates",
    max_retries=5,
    default_retry_delay=60,
)
def consume_booking_dates(self, booking_id: int) -> bool:
    """Write a paid booking's nights into the calendar, retrying on failure."""
    try:
        booking = Booking.objects.get(pk=booking_id)
    except Booking.DoesNotExist:
        logger.error(f"Booking {booking_id} not found for calendar write")
        return False

    if not booking.is_blocking or booking.dates_consumed_at is not None:
        return True

    if _consume(booking):
        logger.info(f"Calendar updated for booking {booking.reference} on retry")
        return True

    logger.error(
        f"Calendar write for booking {booking.reference} failed "
        f"(attempt {self.request.retries + 1})"
    )
    raise self.retry()


# ============================================================================
# PERIODIC TASKS (run by Celery Beat)
# ============================================================================

@shared_task(name="bookings.reconcile_booking_overrides")
def reconcile_booking_overrides() -> dict[str, int]:
    """
    Repair paid bookings whose nights never reached the calendar.

    Returns:
        dict: {"repaired": ..., "failed": ...}
    """
    repaired = 0
    failed = 0

    outstanding = Booking.blocking().filter(dates_consumed_at__isnull=True)
    for booking in outstanding:
        if _consume(booking):
            repaired += 1
        else:
            failed += 1

    if repaired or failed:
        logger.info(f"Reconciled booking overrides: {repaired} repaired, {failed} still failing")

    return {"repaired": repaired, "failed": failed}


@shared_task(name="bookings.expire_stale_pending_bookings")
def expire_stale_pending_bookings() -> dict[str, int]:
    """
    Fail pending bookings whose payment never arrived.

    A booking older than BOOKING_PENDING_TTL_MINUTES that is still pending
    becomes failed and inactive. Pending bookings never held any nights,
    so the calendar is untouched.

    Returns:
        dict: {"expired": number of bookings failed}
    """
    ttl = timedelta(minutes=getattr(settings, "BOOKING_PENDING_TTL_MINUTES", 60))
    cutoff = timezone.now() - ttl

    with transaction.atomic():
        expired_count = Booking.objects.filter(
            payment_status=Booking.PaymentStatus.PENDING,
            is_active=True,
            created_at__lte=cutoff,
        ).update(
            payment_status=Booking.PaymentStatus.FAILED,
            is_active=False,
            updated_at=timezone.now(),
        )

    if expired_count > 0:
        logger.info(f"Expired {expired_count} pending bookings")

    return {"expired": expired_count}

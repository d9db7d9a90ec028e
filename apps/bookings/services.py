"""Availability ledger and booking workflows.

A property's calendar has two sources of truth: per-day overrides stored on
the property and the nights consumed by completed bookings. The
``AvailabilityLedger`` merges them so booking creation, payment confirmation
and the admin calendar editor all share one set of rules.

Per-day precedence, evaluated in order:

1. ``Property.is_bookable`` off -> unavailable.
2. A completed, active booking covers the day -> unavailable.
3. An explicit override exists -> its ``is_available`` value.
4. Otherwise available.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone as dt_timezone
from decimal import Decimal
from typing import Any, Iterable, Mapping

from django.db import DatabaseError, transaction  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.dateparse import parse_date, parse_datetime  # type: ignore

from apps.properties.models import DateAvailabilityOverride, Property
from shared.domain.value_objects import DateRange

from .models import Booking

logger = logging.getLogger(__name__)


class InvalidDateRangeError(ValueError):
    """Raised when check-in is missing, unparseable or not before check-out."""


class InvalidDateError(InvalidDateRangeError):
    """Raised when a value cannot be read as a calendar day."""


class PropertyNotFoundError(LookupError):
    """Raised for an unknown property id; never treated as available."""


class BookingConflictError(Exception):
    """Raised when a property is busy for requested dates."""


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def normalize_day(value: Any) -> date:
    """Return the day-key for a date, datetime or ISO string.

    Aware datetimes are converted to UTC before the time of day is dropped,
    so ``2025-06-01T23:30:00-02:00`` lands on ``2025-06-02``.
    """
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            value = value.astimezone(dt_timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            parsed_dt = parse_datetime(text)
        except ValueError:
            parsed_dt = None
        if parsed_dt is not None:
            return normalize_day(parsed_dt)
        try:
            parsed = parse_date(text)
        except ValueError:
            parsed = None
        if parsed is not None:
            return parsed
    raise InvalidDateError(f"Not a calendar date: {value!r}")


def validate_range(check_in: Any, check_out: Any) -> DateRange:
    """Normalize both ends and reject empty or reversed stays."""
    if check_in in (None, "") or check_out in (None, ""):
        raise InvalidDateRangeError("Check-in and check-out dates are required.")
    start = normalize_day(check_in)
    end = normalize_day(check_out)
    if start >= end:
        raise InvalidDateRangeError("Check-out must be after check-in.")
    return DateRange(start, end)


def expand_range(start: Any, end_exclusive: Any) -> list[date]:
    """Every night from ``start`` up to, not including, ``end_exclusive``.

    Returns an empty list for an empty or reversed range.
    """
    start_day = normalize_day(start)
    end_day = normalize_day(end_exclusive)
    if start_day >= end_day:
        return []
    return list(DateRange(start_day, end_day).days())


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in {"", "0", "false", "no", "off"}
    return bool(value)


@dataclass
class OverrideResult:
    """Outcome of a bulk override write."""

    applied: list[str] = field(default_factory=list)
    skipped: list[Any] = field(default_factory=list)


class AvailabilityLedger:
    """Answers availability questions for a property and records consumed nights."""

    expand_range = staticmethod(expand_range)

    def get_property(self, property_id: Any, *, lock: bool = False) -> Property:
        if isinstance(property_id, Property):
            property_id = property_id.pk
        try:
            queryset = Property.objects.filter(pk=property_id)
            if lock:
                queryset = _lock_queryset_if_possible(queryset)
            property_obj = queryset.first()
        except (TypeError, ValueError):
            property_obj = None
        if property_obj is None:
            raise PropertyNotFoundError(f"Property {property_id!r} not found")
        return property_obj

    def is_stay_available(
        self,
        property_obj: Property,
        stay: DateRange,
        *,
        exclude_reference: str | None = None,
    ) -> bool:
        if not property_obj.is_bookable:
            return False

        # Both ends inclusive: a stay starting on another's check-out day clashes.
        conflicts = Booking.blocking().filter(
            property=property_obj,
            check_in__lte=stay.end_date,
            check_out__gte=stay.start_date,
        )
        if exclude_reference:
            conflicts = conflicts.exclude(reference=exclude_reference)
        if conflicts.exists():
            return False

        blocked_days = DateAvailabilityOverride.objects.filter(
            property=property_obj,
            date__gte=stay.start_date,
            date__lt=stay.end_date,
            is_available=False,
        )
        return not blocked_days.exists()

    def is_range_available(
        self,
        property_id: Any,
        check_in: Any,
        check_out: Any,
        *,
        exclude_reference: str | None = None,
    ) -> bool:
        """Whether ``[check_in, check_out)`` can be booked. Read-only."""
        stay = validate_range(check_in, check_out)
        property_obj = self.get_property(property_id)
        return self.is_stay_available(property_obj, stay, exclude_reference=exclude_reference)

    def is_day_available(self, property_id: Any, day: Any) -> bool:
        day = normalize_day(day)
        property_obj = self.get_property(property_id)
        if not property_obj.is_bookable:
            return False
        covered = Booking.blocking().filter(
            property=property_obj,
            check_in__lte=day,
            check_out__gt=day,
        )
        if covered.exists():
            return False
        override = DateAvailabilityOverride.objects.filter(property=property_obj, date=day).first()
        if override is not None:
            return override.is_available
        return True

    def _upsert(
        self,
        property_obj: Property,
        day: date,
        is_available: bool,
        *,
        source: str,
        booking_reference: str = "",
    ) -> None:
        DateAvailabilityOverride.objects.update_or_create(
            property=property_obj,
            date=day,
            defaults={
                "is_available": is_available,
                "source": source,
                "booking_reference": booking_reference,
            },
        )

    def mark_range_unavailable(
        self,
        property_id: Any,
        check_in: Any,
        check_out: Any,
        *,
        booking_reference: str = "",
    ) -> bool:
        """Write every night of the stay as unavailable.

        Returns False instead of raising so a paid booking is never rolled
        back because of a calendar write.
        """
        try:
            days = list(validate_range(check_in, check_out).days())
            property_obj = self.get_property(property_id)
            with transaction.atomic():
                for day in days:
                    self._upsert(
                        property_obj,
                        day,
                        False,
                        source=DateAvailabilityOverride.Source.BOOKING,
                        booking_reference=booking_reference,
                    )
        except (InvalidDateRangeError, PropertyNotFoundError) as exc:
            logger.error(
                f"Cannot mark {check_in}..{check_out} unavailable "
                f"for property {getattr(property_id, 'pk', property_id)}: {exc}"
            )
            return False
        except DatabaseError as exc:
            logger.error(
                f"Database error marking {check_in}..{check_out} unavailable "
                f"for property {getattr(property_id, 'pk', property_id)}: {exc}",
                exc_info=True,
            )
            return False

        logger.info(
            f"Marked {len(days)} night(s) unavailable for property {property_obj.pk} "
            f"(booking {booking_reference or '-'})"
        )
        return True

    def set_date_overrides(
        self,
        property_id: Any,
        overrides: Iterable[Mapping[str, Any]],
    ) -> OverrideResult:
        """Upsert explicit per-day flags; unreadable entries are skipped."""
        property_obj = self.get_property(property_id)
        result = OverrideResult()

        with transaction.atomic():
            for entry in overrides:
                raw_date = entry.get("date") if isinstance(entry, Mapping) else None
                try:
                    day = normalize_day(raw_date)
                except InvalidDateError:
                    logger.warning(
                        f"Skipping override with invalid date {raw_date!r} "
                        f"for property {property_obj.pk}"
                    )
                    result.skipped.append(raw_date)
                    continue
                if entry.get("is_available") in (None, ""):
                    logger.warning(
                        f"Skipping override for {day} without is_available "
                        f"for property {property_obj.pk}"
                    )
                    result.skipped.append(raw_date)
                    continue

                self._upsert(
                    property_obj,
                    day,
                    _as_bool(entry.get("is_available")),
                    source=DateAvailabilityOverride.Source.MANUAL,
                )
                result.applied.append(day.isoformat())

        logger.info(
            f"Applied {len(result.applied)} override(s), skipped {len(result.skipped)}, "
            f"for property {property_obj.pk}"
        )
        return result

    def compute_unavailable_dates(self, property_id: Any) -> set[str]:
        """ISO ``YYYY-MM-DD`` keys of every booked or blocked day."""
        property_obj = self.get_property(property_id)
        days: set[str] = set()

        stays = Booking.blocking().filter(property=property_obj).values_list("check_in", "check_out")
        for check_in, check_out in stays:
            days.update(day.isoformat() for day in self.expand_range(check_in, check_out))

        blocked = DateAvailabilityOverride.objects.filter(
            property=property_obj,
            is_available=False,
        ).values_list("date", flat=True)
        days.update(day.isoformat() for day in blocked)
        return days


ledger = AvailabilityLedger()


# ============================================================================
# BOOKING WORKFLOWS
# ============================================================================

def calculate_total_amount(price_per_night: Decimal, stay: DateRange) -> Decimal:
    """Nightly price times nights, charging at least one night."""
    nights = max(1, len(stay))
    return (Decimal(price_per_night) * nights).quantize(Decimal("0.01"))


def create_booking(
    property_id: Any,
    *,
    name: str,
    email: str,
    phone: str,
    check_in: Any,
    check_out: Any,
    guests: int = 1,
    reference: str | None = None,
) -> Booking:
    """Create a pending booking after checking the calendar under the property lock."""
    stay = validate_range(check_in, check_out)

    with transaction.atomic():
        property_obj = ledger.get_property(property_id, lock=True)
        if not ledger.is_stay_available(property_obj, stay):
            raise BookingConflictError("Property is not available for the selected dates.")

        booking = Booking.objects.create(
            property=property_obj,
            reference=reference or Booking.generate_reference(),
            name=name,
            email=email,
            phone=phone,
            check_in=stay.start_date,
            check_out=stay.end_date,
            guests=guests,
            total_amount=calculate_total_amount(property_obj.price_per_night, stay),
            currency=property_obj.currency,
        )

    logger.info(f"Booking {booking.reference} created for property {property_obj.pk} ({stay})")
    return booking


@dataclass
class PaymentCompletion:
    booking: Booking
    newly_completed: bool
    dates_consumed: bool


def _queue_date_consumption(booking_id: int) -> None:
    from .tasks import consume_booking_dates  # local import to avoid circular

    try:
        consume_booking_dates.delay(booking_id)
    except Exception:
        logger.error(f"Could not queue calendar retry for booking {booking_id}", exc_info=True)


def _queue_notifications(booking_id: int) -> None:
    from apps.notifications.tasks import send_booking_notifications

    try:
        send_booking_notifications.delay(booking_id)
    except Exception:
        logger.error(f"Could not queue notifications for booking {booking_id}", exc_info=True)


def complete_booking_payment(reference: str, *, source: str = "verify") -> PaymentCompletion:
    """Mark a booking paid and consume its nights.

    Shared by the payment webhook and the synchronous verification path.
    A second confirmation for the same reference is a no-op.
    """
    conflict = False

    with transaction.atomic():
        booking = _lock_queryset_if_possible(
            Booking.objects.filter(reference=reference)
        ).first()
        if booking is None:
            raise Booking.DoesNotExist(f"No booking with reference {reference!r}")

        if booking.payment_status == Booking.PaymentStatus.COMPLETED:
            logger.info(f"Booking {reference} already completed, ignoring {source} confirmation")
            return PaymentCompletion(
                booking=booking,
                newly_completed=False,
                dates_consumed=booking.dates_consumed_at is not None,
            )

        property_obj = ledger.get_property(booking.property_id, lock=True)
        stay = DateRange(booking.check_in, booking.check_out)

        # Expired bookings never held dates, so a late payment may still claim them.
        expired = booking.payment_status == Booking.PaymentStatus.FAILED
        withdrawn = not booking.is_active and not expired

        if withdrawn or not ledger.is_stay_available(
            property_obj, stay, exclude_reference=reference
        ):
            booking.cancel()
            conflict = True
        else:
            if expired:
                logger.warning(f"Booking {reference} expired before payment arrived, reviving it")
            booking.mark_completed()
            dates_consumed = ledger.mark_range_unavailable(
                property_obj,
                booking.check_in,
                booking.check_out,
                booking_reference=reference,
            )
            if dates_consumed:
                booking.mark_dates_consumed()
            else:
                logger.error(
                    f"Booking {reference} is paid but nights {stay} were not written "
                    f"for property {property_obj.pk}; queued for retry"
                )
                transaction.on_commit(lambda: _queue_date_consumption(booking.pk))
            transaction.on_commit(lambda: _queue_notifications(booking.pk))

    if conflict:
        logger.error(
            f"Payment {reference} ({source}) received for dates no longer available "
            f"at property {booking.property_id}; booking deactivated, refund required"
        )
        raise BookingConflictError("Property is no longer available for the booked dates.")

    logger.info(f"Booking {reference} completed via {source}")
    return PaymentCompletion(booking=booking, newly_completed=True, dates_consumed=dates_consumed)


def cancel_booking(booking: Booking) -> Booking:
    """Soft-cancel a booking. Calendar overrides it wrote are left in place."""
    booking.cancel()
    logger.info(f"Booking {booking.reference} cancelled")
    return booking

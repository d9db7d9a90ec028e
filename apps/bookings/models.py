"""Booking domain models."""

from __future__ import annotations

import builtins
import secrets
from decimal import Decimal

from django.core.exceptions import ValidationError  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Booking(models.Model):
    """A guest's stay at a property, paid through the payment gateway."""

    REFERENCE_PREFIX = "GHA_"

    class PaymentStatus(models.TextChoices):
        PENDING = "pending", _("Awaiting payment")
        COMPLETED = "completed", _("Paid")
        FAILED = "failed", _("Payment failed")
        REFUNDED = "refunded", _("Refunded")

    property = models.ForeignKey(
        "properties.Property",
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    reference = models.CharField(
        max_length=64,
        unique=True,
        help_text=_("External reference, also the payment idempotency key."),
    )
    name = models.CharField(max_length=255)
    email = models.EmailField()
    phone = models.CharField(max_length=32)
    check_in = models.DateField()
    check_out = models.DateField()
    guests = models.PositiveSmallIntegerField(default=1, validators=[MinValueValidator(1)])
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )
    is_active = models.BooleanField(
        default=True,
        help_text=_("Cleared when the booking is cancelled or refunded."),
    )
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=3, default="NGN")
    paid_at = models.DateTimeField(null=True, blank=True)
    dates_consumed_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text=_("When the stay's nights were written into the availability calendar."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(check_out__gt=models.F("check_in")),
                name="booking_valid_dates",
            ),
            models.CheckConstraint(
                condition=models.Q(guests__gte=1),
                name="booking_positive_guests",
            ),
        ]
        indexes = [
            models.Index(fields=["property", "check_in", "check_out"]),
            models.Index(fields=["payment_status"]),
        ]

    def __str__(self) -> str:
        return f"Booking {self.reference} for {self.property_id}"

    def clean(self) -> None:
        if self.check_in and self.check_out and self.check_in >= self.check_out:
            raise ValidationError(_("Check-out must be after check-in."))
        if self.guests is not None and self.guests < 1:
            raise ValidationError(_("At least one guest is required."))

    def save(self, *args, **kwargs):  # type: ignore
        if self._state.adding and not self.reference:
            self.reference = self.generate_reference()
        super().save(*args, **kwargs)

    @classmethod
    def generate_reference(cls) -> str:
        return f"{cls.REFERENCE_PREFIX}{secrets.token_hex(6).upper()}"

    @classmethod
    def blocking(cls):
        """Bookings that consume calendar days: paid and not cancelled."""
        return cls.objects.filter(
            is_active=True,
            payment_status=cls.PaymentStatus.COMPLETED,
        )

    @builtins.property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days

    @builtins.property
    def is_blocking(self) -> bool:
        return self.is_active and self.payment_status == self.PaymentStatus.COMPLETED

    def mark_completed(self) -> None:
        self.payment_status = self.PaymentStatus.COMPLETED
        self.is_active = True
        self.paid_at = timezone.now()
        self.save(update_fields=["payment_status", "is_active", "paid_at", "updated_at"])

    def mark_dates_consumed(self) -> None:
        self.dates_consumed_at = timezone.now()
        self.save(update_fields=["dates_consumed_at", "updated_at"])

    def cancel(self) -> None:
        self.is_active = False
        self.save(update_fields=["is_active", "updated_at"])

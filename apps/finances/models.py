"""Payment records for bookings."""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class PaymentTransaction(models.Model):
    """One interaction with the payment gateway: a verification or a webhook event."""

    class Event(models.TextChoices):
        VERIFY = "verify", _("Verification request")
        CHARGE_SUCCESS = "charge.success", _("Charge succeeded")
        OTHER = "other", _("Other webhook event")

    booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="transactions",
    )
    reference = models.CharField(max_length=64, db_index=True)
    event = models.CharField(max_length=50, choices=Event.choices)
    status = models.CharField(max_length=30, blank=True, help_text=_("Gateway or processing status"))
    payload = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Payment transaction")
        verbose_name_plural = _("Payment transactions")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.event} {self.reference} ({self.status or '-'})"

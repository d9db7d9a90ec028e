"""Property domain models.

Holds the short-let listings and their availability calendar: at most one
override row per calendar day of a property.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.text import slugify  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Property(models.Model):
    """A listing offered for short-let booking."""

    title = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True, blank=True)
    description = models.TextField()
    thumbnail = models.CharField(max_length=500)
    price_per_night = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    currency = models.CharField(max_length=3, default="NGN")
    location = models.CharField(max_length=255)
    images = models.JSONField(default=list, blank=True)
    features = models.JSONField(default=list, blank=True)
    airbnb_link = models.URLField(blank=True)
    bedrooms = models.PositiveSmallIntegerField(default=1)
    bathrooms = models.PositiveSmallIntegerField(default=1)
    size = models.CharField(max_length=50, blank=True)
    property_type = models.CharField(max_length=50, blank=True)
    is_bookable = models.BooleanField(
        default=True,
        help_text=_("Master switch: when off, no date can be booked."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Property")
        verbose_name_plural = _("Properties")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["is_bookable"]),
            models.Index(fields=["location"]),
        ]

    def __str__(self) -> str:
        return self.title

    def save(self, *args, **kwargs):  # type: ignore
        if not self.slug:
            base_slug = slugify(self.title)[:200] or "property"
            candidate = base_slug
            counter = 1
            while self.__class__.objects.filter(slug=candidate).exclude(pk=self.pk).exists():
                counter += 1
                candidate = f"{base_slug}-{counter}"
            self.slug = candidate
        super().save(*args, **kwargs)


class DateAvailabilityOverride(models.Model):
    """Explicit availability flag for a single calendar day of a property."""

    class Source(models.TextChoices):
        MANUAL = "manual", _("Set by an administrator")
        BOOKING = "booking", _("Consumed by a completed booking")

    property = models.ForeignKey(
        Property,
        on_delete=models.CASCADE,
        related_name="availability",
    )
    date = models.DateField()
    is_available = models.BooleanField(default=True)
    source = models.CharField(
        max_length=20,
        choices=Source.choices,
        default=Source.MANUAL,
    )
    booking_reference = models.CharField(
        max_length=64,
        blank=True,
        help_text=_("Reference of the booking that last wrote this day."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Availability override")
        verbose_name_plural = _("Availability overrides")
        ordering = ["date"]
        constraints = [
            models.UniqueConstraint(
                fields=["property", "date"],
                name="availability_override_one_per_day",
            ),
        ]
        indexes = [
            models.Index(fields=["property", "is_available"]),
        ]

    def __str__(self) -> str:
        state = "available" if self.is_available else "unavailable"
        return f"{self.property_id}: {self.date.isoformat()} ({state})"

"""Models for the review domain.

Defines the ``Review`` entity representing feedback and ratings submitted
by guests for properties. Reviews backed by a paid booking with the same
email are published straight away; everything else waits for moderation.
"""

from __future__ import annotations

from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Review(models.Model):
    """Represents a review left by a guest for a property."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Awaiting moderation")
        APPROVED = "approved", _("Published")
        REJECTED = "rejected", _("Rejected")

    property = models.ForeignKey(
        "properties.Property", on_delete=models.CASCADE, related_name="reviews"
    )
    name = models.CharField(max_length=255)
    email = models.EmailField()
    rating = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)],
        help_text=_("Rating from 1 to 5"),
    )
    comment = models.TextField()
    booking_reference = models.CharField(
        max_length=64,
        blank=True,
        help_text=_("Reference of the stay being reviewed"),
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    is_verified_stay = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["property", "-created_at"]),
            models.Index(fields=["status"]),
            models.Index(fields=["email"]),
        ]

    def __str__(self) -> str:
        return f"Review by {self.name} for property {self.property_id} (Rating: {self.rating})"

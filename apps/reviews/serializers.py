"""Serializers for reviews.

Guests submit reviews anonymously with their name and email; moderation
only ever changes the status.
"""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Review


class ReviewCreateSerializer(serializers.ModelSerializer):
    """Serializer for creating a new review."""

    class Meta:
        model = Review
        fields = [
            "property",
            "name",
            "email",
            "rating",
            "comment",
            "booking_reference",
        ]
        extra_kwargs = {
            "booking_reference": {"required": False, "allow_blank": True},
        }

    def validate_rating(self, value: int) -> int:  # type: ignore
        if value < 1 or value > 5:
            raise serializers.ValidationError("Rating must be between 1 and 5.")
        return value


class ReviewModerationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Review
        fields = ["status"]


class ReviewSerializer(serializers.ModelSerializer):
    """Read serializer for reviews."""

    property_id = serializers.ReadOnlyField(source="property.id")
    property_title = serializers.ReadOnlyField(source="property.title")

    class Meta:
        model = Review
        fields = [
            "id",
            "property_id",
            "property_title",
            "name",
            "rating",
            "comment",
            "booking_reference",
            "status",
            "is_verified_stay",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

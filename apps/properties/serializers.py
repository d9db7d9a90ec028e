"""Serializers for the properties domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Property


def _validate_string_list(value, field_name: str) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise serializers.ValidationError(f"{field_name} must be a list of strings.")
    return value


class PropertySerializer(serializers.ModelSerializer):
    class Meta:
        model = Property
        fields = [
            "id",
            "title",
            "slug",
            "description",
            "thumbnail",
            "price_per_night",
            "currency",
            "location",
            "images",
            "features",
            "airbnb_link",
            "bedrooms",
            "bathrooms",
            "size",
            "property_type",
            "is_bookable",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["slug", "created_at", "updated_at"]

    def validate_images(self, value):  # type: ignore
        return _validate_string_list(value, "images")

    def validate_features(self, value):  # type: ignore
        return _validate_string_list(value, "features")


class AvailabilityQuerySerializer(serializers.Serializer):
    """Optional stay to check alongside the calendar."""

    check_in = serializers.DateField(required=False)
    check_out = serializers.DateField(required=False)

    def validate(self, attrs):  # type: ignore
        check_in = attrs.get("check_in")
        check_out = attrs.get("check_out")
        if (check_in is None) != (check_out is None):
            raise serializers.ValidationError("Provide both check_in and check_out.")
        if check_in and check_out and check_in >= check_out:
            raise serializers.ValidationError("Check-out must be after check-in.")
        return attrs


class AvailabilityUpdateSerializer(serializers.Serializer):
    """Admin calendar edit. Individual dates are validated by the ledger."""

    is_bookable = serializers.BooleanField(required=False)
    dates = serializers.ListField(child=serializers.DictField(), required=False)

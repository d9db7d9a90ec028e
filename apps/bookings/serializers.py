"""Serializers for the booking domain."""

from __future__ import annotations

from datetime import date

from rest_framework import serializers  # type: ignore

from apps.properties.models import Property

from .models import Booking
from .services import BookingConflictError, InvalidDateRangeError, create_booking


class BookingCreateSerializer(serializers.ModelSerializer):
    """Guest checkout: creates a pending booking awaiting payment."""

    property = serializers.PrimaryKeyRelatedField(queryset=Property.objects.all())
    check_in = serializers.DateField()
    check_out = serializers.DateField()
    guests = serializers.IntegerField(min_value=1, default=1)
    reference = serializers.CharField(max_length=64, required=False, allow_blank=False)

    class Meta:
        model = Booking
        fields = [
            "property",
            "reference",
            "name",
            "email",
            "phone",
            "check_in",
            "check_out",
            "guests",
        ]

    def validate_reference(self, value: str) -> str:
        if Booking.objects.filter(reference=value).exists():
            raise serializers.ValidationError("A booking with this reference already exists.")
        return value

    def validate(self, attrs):  # type: ignore
        check_in: date = attrs["check_in"]
        check_out: date = attrs["check_out"]
        if check_in >= check_out:
            raise serializers.ValidationError("Check-out must be after check-in.")
        return attrs

    def create(self, validated_data):  # type: ignore
        validated = dict(validated_data)
        property_obj = validated.pop("property")
        try:
            return create_booking(property_obj.pk, **validated)
        except (BookingConflictError, InvalidDateRangeError) as exc:
            raise serializers.ValidationError({"non_field_errors": [str(exc)]})


class BookingSerializer(serializers.ModelSerializer):
    """Full booking representation."""

    property_id = serializers.ReadOnlyField(source="property.id")
    property_title = serializers.ReadOnlyField(source="property.title")
    nights = serializers.ReadOnlyField()

    class Meta:
        model = Booking
        fields = [
            "id",
            "reference",
            "property_id",
            "property_title",
            "name",
            "email",
            "phone",
            "check_in",
            "check_out",
            "nights",
            "guests",
            "payment_status",
            "is_active",
            "total_amount",
            "currency",
            "paid_at",
            "dates_consumed_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

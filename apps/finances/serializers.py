"""Serializers for payment records."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import PaymentTransaction


class PaymentTransactionSerializer(serializers.ModelSerializer):
    booking_reference = serializers.ReadOnlyField(source="booking.reference")

    class Meta:
        model = PaymentTransaction
        fields = [
            "id",
            "booking",
            "booking_reference",
            "reference",
            "event",
            "status",
            "payload",
            "created_at",
        ]
        read_only_fields = fields

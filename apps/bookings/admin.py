"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "reference",
        "property",
        "name",
        "email",
        "payment_status",
        "is_active",
        "check_in",
        "check_out",
        "total_amount",
        "created_at",
    )
    list_filter = ("payment_status", "is_active", "check_in", "check_out")
    search_fields = ("reference", "property__title", "name", "email")
    readonly_fields = (
        "reference",
        "total_amount",
        "paid_at",
        "dates_consumed_at",
        "created_at",
        "updated_at",
    )

"""Admin registrations for properties domain."""

from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import DateAvailabilityOverride, Property


class DateAvailabilityOverrideInline(admin.TabularInline):
    model = DateAvailabilityOverride
    extra = 0
    fields = ("date", "is_available", "source", "booking_reference")
    readonly_fields = ("source", "booking_reference")


@admin.register(Property)
class PropertyAdmin(admin.ModelAdmin):
    list_display = (
        "title",
        "location",
        "property_type",
        "price_per_night",
        "bedrooms",
        "is_bookable",
    )
    list_filter = ("is_bookable", "property_type", "location")
    search_fields = ("title", "location")
    prepopulated_fields = {"slug": ("title",)}
    inlines = (DateAvailabilityOverrideInline,)
    readonly_fields = ("created_at", "updated_at")


@admin.register(DateAvailabilityOverride)
class DateAvailabilityOverrideAdmin(admin.ModelAdmin):
    list_display = ("property", "date", "is_available", "source", "booking_reference")
    list_filter = ("is_available", "source")
    search_fields = ("property__title", "booking_reference")
    date_hierarchy = "date"

"""Admin registration for reviews."""

from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import Review


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ("property", "name", "rating", "status", "is_verified_stay", "created_at")
    list_filter = ("status", "is_verified_stay", "rating")
    search_fields = ("property__title", "name", "email", "booking_reference")
    actions = ("approve", "reject")

    @admin.action(description="Approve selected reviews")
    def approve(self, request, queryset):  # type: ignore
        queryset.update(status=Review.Status.APPROVED)

    @admin.action(description="Reject selected reviews")
    def reject(self, request, queryset):  # type: ignore
        queryset.update(status=Review.Status.REJECTED)

"""Admin registration for payment records."""

from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import PaymentTransaction


@admin.register(PaymentTransaction)
class PaymentTransactionAdmin(admin.ModelAdmin):
    list_display = ("reference", "event", "status", "booking", "created_at")
    list_filter = ("event", "status")
    search_fields = ("reference", "booking__email")
    readonly_fields = ("booking", "reference", "event", "status", "payload", "created_at")

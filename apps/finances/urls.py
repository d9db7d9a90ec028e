"""URL routing for the finance domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import PaymentTransactionViewSet, PaystackVerifyView, paystack_webhook

router = DefaultRouter()
router.register(r"transactions", PaymentTransactionViewSet, basename="payment-transaction")

urlpatterns = [
    path("", include(router.urls)),
    path(
        "paystack/verify/<str:reference>/",
        PaystackVerifyView.as_view(),
        name="paystack-verify",
    ),
    path("paystack/webhook/", paystack_webhook, name="paystack-webhook"),
]

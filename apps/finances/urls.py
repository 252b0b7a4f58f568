"""URL routing for the finance domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import PaymentEventViewSet, PaymentIntentView, PaymentWebhookView

router = DefaultRouter()
router.register(r"events", PaymentEventViewSet, basename="payment-event")

urlpatterns = [
    path("payment-intents/", PaymentIntentView.as_view(), name="payment-intent"),
    path("webhook/", PaymentWebhookView.as_view(), name="payment-webhook"),
    path("", include(router.urls)),
]

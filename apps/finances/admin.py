"""Admin registration for payment events."""

from __future__ import annotations

from django.contrib import admin

from .models import PaymentEvent


@admin.register(PaymentEvent)
class PaymentEventAdmin(admin.ModelAdmin):
    list_display = ("event_id", "event_type", "payment_intent_id", "booking", "outcome", "received_at")
    list_filter = ("event_type", "outcome")
    search_fields = ("event_id", "payment_intent_id", "booking__booking_code")
    readonly_fields = ("event_id", "event_type", "payment_intent_id", "booking", "outcome", "payload", "received_at")

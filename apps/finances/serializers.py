"""Serializers for the finance domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.bookings.serializers import StayInputSerializer

from .models import PaymentEvent


class PaymentEventSerializer(serializers.ModelSerializer):
    booking_code = serializers.ReadOnlyField(source="booking.booking_code")

    class Meta:
        model = PaymentEvent
        fields = [
            "id",
            "event_id",
            "event_type",
            "payment_intent_id",
            "booking",
            "booking_code",
            "outcome",
            "payload",
            "received_at",
        ]
        read_only_fields = fields


class PaymentIntentSerializer(StayInputSerializer):
    """Stay to be paid for; the amount is always computed server-side."""

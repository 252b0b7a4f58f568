"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.hotels.models import Room
from apps.users.serializers import UserShortSerializer

from .models import Booking


class StayInputSerializer(serializers.Serializer):
    """Stay parameters shared by booking creation and payment intents."""

    hotel = serializers.IntegerField(min_value=1)
    check_in = serializers.DateField()
    check_out = serializers.DateField()
    adults = serializers.IntegerField(min_value=1, default=1)
    children = serializers.IntegerField(min_value=0, default=0)
    room_type = serializers.ChoiceField(choices=Room.RoomType.choices, required=False, allow_blank=True)
    room_number = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate(self, attrs):  # type: ignore
        if not attrs.get("room_type") and not attrs.get("room_number"):
            raise serializers.ValidationError({"room_type": "Room type or room number is required."})
        return attrs


class BookingCreateSerializer(StayInputSerializer):
    """Booking request from a guest."""

    total_price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    payment_intent_id = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)


class BookingSerializer(serializers.ModelSerializer):
    guest = UserShortSerializer(read_only=True)
    hotel_name = serializers.ReadOnlyField(source="hotel.name")
    net_revenue = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = Booking
        fields = [
            "id",
            "booking_code",
            "guest",
            "hotel",
            "hotel_name",
            "room_number",
            "room_type",
            "check_in",
            "check_out",
            "adults",
            "children",
            "total_price",
            "payment_intent_id",
            "status",
            "payment_status",
            "refunded_amount",
            "refund_status",
            "refund_reason",
            "refund_requested_amount",
            "refund_requested_at",
            "refund_admin_notes",
            "refund_processed_at",
            "net_revenue",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class AvailabilityQuerySerializer(serializers.Serializer):
    hotel = serializers.IntegerField(min_value=1)
    room_number = serializers.CharField()
    check_in = serializers.DateField()
    check_out = serializers.DateField()


class BookingReasonSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class RefundRequestSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)


class RefundDecisionSerializer(serializers.Serializer):
    refund_type = serializers.ChoiceField(choices=["full", "partial"], default="full")
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    admin_notes = serializers.CharField(required=False, allow_blank=True, default="")


class RefundRejectSerializer(serializers.Serializer):
    admin_notes = serializers.CharField(required=False, allow_blank=True, default="")

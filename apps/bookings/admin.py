"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "booking_code",
        "hotel",
        "room_number",
        "guest",
        "status",
        "payment_status",
        "refund_status",
        "check_in",
        "check_out",
        "total_price",
        "refunded_amount",
        "created_at",
    )
    list_filter = ("status", "payment_status", "refund_status", "check_in", "check_out")
    search_fields = ("booking_code", "hotel__name", "guest__email", "payment_intent_id")
    readonly_fields = (
        "booking_code",
        "created_at",
        "updated_at",
        "total_price",
        "refunded_amount",
        "refund_processed_at",
        "refund_processed_by",
    )

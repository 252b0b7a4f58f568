"""Admin registration for the hotel catalog."""

from __future__ import annotations

from django.contrib import admin

from .models import Hotel, Room


class RoomInline(admin.TabularInline):
    model = Room
    extra = 0
    fields = ("number", "room_type", "status", "price", "max_guests")


@admin.register(Hotel)
class HotelAdmin(admin.ModelAdmin):
    list_display = ("name", "city", "country", "base_price", "average_rating", "total_reviews", "popularity")
    list_filter = ("country", "city")
    search_fields = ("name", "city", "country")
    readonly_fields = ("average_rating", "total_reviews", "popularity", "created_at", "updated_at")
    inlines = [RoomInline]

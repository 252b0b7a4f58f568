"""Serializers for the hotel catalog."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Hotel, Room


class RoomSerializer(serializers.ModelSerializer):
    nightly_price = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)

    class Meta:
        model = Room
        fields = ["id", "number", "room_type", "status", "price", "nightly_price", "max_guests", "images"]
        read_only_fields = ["id", "nightly_price"]


class RoomWriteSerializer(serializers.ModelSerializer):
    """Room fields accepted by the add/update room endpoints."""

    class Meta:
        model = Room
        fields = ["number", "room_type", "status", "price", "max_guests", "images"]
        # Uniqueness is checked by the hotel room operations
        validators: list = []


class HotelSerializer(serializers.ModelSerializer):
    rooms = RoomSerializer(many=True, read_only=True)

    class Meta:
        model = Hotel
        fields = [
            "id",
            "name",
            "description",
            "base_price",
            "amenities",
            "address",
            "city",
            "country",
            "latitude",
            "longitude",
            "images",
            "average_rating",
            "total_reviews",
            "popularity",
            "rooms",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "average_rating",
            "total_reviews",
            "popularity",
            "rooms",
            "created_at",
            "updated_at",
        ]

    def validate_amenities(self, value):  # type: ignore
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise serializers.ValidationError("Amenities must be a list of strings.")
        return value


class HotelListSerializer(serializers.ModelSerializer):
    rooms_count = serializers.IntegerField(source="rooms.count", read_only=True)

    class Meta:
        model = Hotel
        fields = [
            "id",
            "name",
            "city",
            "country",
            "base_price",
            "amenities",
            "images",
            "average_rating",
            "total_reviews",
            "popularity",
            "rooms_count",
        ]
        read_only_fields = fields


class StayQuerySerializer(serializers.Serializer):
    check_in = serializers.DateField()
    check_out = serializers.DateField()
    room_type = serializers.ChoiceField(choices=Room.RoomType.choices, required=False)

"""Serializers for reviews."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.users.serializers import UserShortSerializer

from .models import Review


class ReviewSerializer(serializers.ModelSerializer):
    user = UserShortSerializer(read_only=True)

    class Meta:
        model = Review
        fields = ['id', 'user', 'hotel', 'rating', 'comment', 'created_at', 'updated_at']
        read_only_fields = ['id', 'user', 'created_at', 'updated_at']
        validators: list = []

    def validate(self, attrs):  # type: ignore
        request = self.context.get('request')
        hotel = attrs.get('hotel')
        if self.instance is None and request is not None and hotel is not None:
            if Review.objects.filter(user=request.user, hotel=hotel).exists():
                raise serializers.ValidationError({'hotel': 'You have already reviewed this hotel.'})
        if self.instance is not None and hotel is not None and hotel.pk != self.instance.hotel_id:
            raise serializers.ValidationError({'hotel': 'The reviewed hotel cannot be changed.'})
        return attrs

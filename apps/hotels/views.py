"""Hotel catalog API views."""

from __future__ import annotations

import logging

from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.filters import OrderingFilter  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.bookings.services import list_available_rooms
from apps.users.permissions import IsAdminOrReadOnly, IsAdminRole

from .filters import HotelFilterSet
from .models import Hotel
from .serializers import (
    HotelListSerializer,
    HotelSerializer,
    RoomSerializer,
    RoomWriteSerializer,
    StayQuerySerializer,
)

logger = logging.getLogger(__name__)


class HotelViewSet(viewsets.ModelViewSet):
    """Public hotel catalog; administrators manage hotels and their rooms."""

    queryset = Hotel.objects.prefetch_related("rooms").all()
    permission_classes = [IsAdminOrReadOnly]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = HotelFilterSet
    ordering_fields = ["popularity", "average_rating", "base_price", "created_at", "name"]

    def get_serializer_class(self):  # type: ignore
        if self.action == "list":
            return HotelListSerializer
        return HotelSerializer

    @action(detail=True, methods=["get"], url_path="available-rooms")
    def available_rooms(self, request, pk=None):  # type: ignore
        hotel: Hotel = self.get_object()  # type: ignore
        serializer = StayQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        rooms = list_available_rooms(hotel, data["check_in"], data["check_out"], room_type=data.get("room_type"))
        return Response(
            {
                "hotel": hotel.pk,
                "check_in": data["check_in"],
                "check_out": data["check_out"],
                "rooms": RoomSerializer(rooms, many=True).data,
            }
        )

    @action(detail=True, methods=["post"], url_path="rooms", permission_classes=[IsAdminRole])
    def add_room(self, request, pk=None):  # type: ignore
        hotel: Hotel = self.get_object()  # type: ignore
        serializer = RoomWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        fields = dict(serializer.validated_data)
        room = hotel.add_room(fields.pop("number"), **fields)
        return Response(RoomSerializer(room).data, status=status.HTTP_201_CREATED)

    @action(
        detail=True,
        methods=["patch", "delete"],
        url_path=r"rooms/(?P<number>[^/]+)",
        permission_classes=[IsAdminRole],
    )
    def room_detail(self, request, pk=None, number=None):  # type: ignore
        hotel: Hotel = self.get_object()  # type: ignore
        if request.method == "DELETE":
            hotel.remove_room(number)
            return Response(status=status.HTTP_204_NO_CONTENT)

        serializer = RoomWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        room = hotel.update_room(number, **serializer.validated_data)
        return Response(RoomSerializer(room).data)

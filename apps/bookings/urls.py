"""URL routing for bookings.

Besides the collection and detail routes the router exposes the booking
actions: ``cancel``, ``approve``, ``reject``, ``request-refund``,
``refund``, ``reject-refund`` and the collection level
``check-availability``, ``auto-complete`` and ``refund-requests``.
"""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import BookingViewSet

router = DefaultRouter()
router.register(r"", BookingViewSet, basename="booking")

urlpatterns = [
    path("", include(router.urls)),
]

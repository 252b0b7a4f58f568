"""API views for managing reviews."""

from __future__ import annotations

from rest_framework import permissions, viewsets  # type: ignore

from apps.users.permissions import is_admin_user

from .models import Review
from .serializers import ReviewSerializer


class IsReviewerOrAdmin(permissions.BasePermission):
    """Allow guests to manage their reviews and admins to manage all."""

    def has_object_permission(self, request, view, obj: Review) -> bool:  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        user = request.user
        if not user.is_authenticated:
            return False
        if is_admin_user(user):
            return True
        return obj.user_id == user.id


class ReviewViewSet(viewsets.ModelViewSet):
    """Viewset for creating, retrieving and deleting reviews."""

    queryset = Review.objects.select_related('hotel', 'user').all()
    serializer_class = ReviewSerializer
    permission_classes = [permissions.IsAuthenticatedOrReadOnly, IsReviewerOrAdmin]

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        hotel_id = self.request.query_params.get('hotel')
        if hotel_id:
            qs = qs.filter(hotel_id=hotel_id)
        return qs

    def perform_create(self, serializer):  # type: ignore
        serializer.save(user=self.request.user)

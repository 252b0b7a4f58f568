"""Models for the review domain.

Defines the ``Review`` entity representing feedback and ratings
submitted by guests for hotels. Each review includes a numerical
rating, an optional comment and timestamps. One user can leave at most
one review per hotel.
"""

from __future__ import annotations

from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore


class Review(models.Model):
    """Represents a review left by a guest for a hotel."""

    user = models.ForeignKey(
        'users.CustomUser', on_delete=models.CASCADE, related_name='reviews'
    )
    hotel = models.ForeignKey(
        'hotels.Hotel', on_delete=models.CASCADE, related_name='reviews'
    )
    rating = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)],
        help_text='Rating from 1 to 5'
    )
    comment = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['user', 'hotel'], name='one_review_per_user_per_hotel'),
        ]
        indexes = [
            models.Index(fields=['hotel', '-created_at'], name='review_hotel_recent_idx'),
        ]

    def __str__(self) -> str:
        return f"Review by {self.user_id} for hotel {self.hotel_id} (Rating: {self.rating})"

"""Model signal handlers keeping hotel ratings in sync with reviews."""

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from .models import Review


@receiver([post_save, post_delete], sender=Review)
def refresh_hotel_rating(sender, instance, **kwargs):
    """Recompute rating, review count and popularity of the reviewed hotel."""
    from apps.hotels.models import Hotel

    hotel = Hotel.objects.filter(pk=instance.hotel_id).first()
    if hotel is not None:
        hotel.refresh_rating()

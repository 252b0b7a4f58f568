"""Admin registration for reviews."""

from django.contrib import admin

from .models import Review


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ('hotel', 'user', 'rating', 'created_at')
    list_filter = ('rating',)
    search_fields = ('hotel__name', 'user__email', 'comment')

"""URL routing for analytics endpoints."""

from django.urls import path  # type: ignore

from .views import RevenueAnalyticsView


urlpatterns = [
    # Do not prefix with 'analytics/' here; the namespace is defined in config.urls
    path('revenue/', RevenueAnalyticsView.as_view(), name='analytics-revenue'),
]

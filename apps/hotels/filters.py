"""FilterSet definitions for hotel search and listing."""

from __future__ import annotations

import django_filters  # type: ignore
from django.db.models import Q  # type: ignore

from .models import Hotel


class HotelFilterSet(django_filters.FilterSet):
    """FilterSet for Hotel with the filters used by the public catalog."""

    search = django_filters.CharFilter(method="filter_search")
    city = django_filters.CharFilter(field_name="city", lookup_expr="icontains")
    country = django_filters.CharFilter(field_name="country", lookup_expr="icontains")
    price_min = django_filters.NumberFilter(field_name="base_price", lookup_expr="gte")
    price_max = django_filters.NumberFilter(field_name="base_price", lookup_expr="lte")
    min_rating = django_filters.NumberFilter(field_name="average_rating", lookup_expr="gte")

    # CSV of amenity names, requires all selected amenities
    amenities = django_filters.CharFilter(method="filter_amenities")

    class Meta:
        model = Hotel
        fields = ["city", "country"]

    def filter_search(self, queryset, name, value):  # type: ignore
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value)
            | Q(description__icontains=value)
            | Q(city__icontains=value)
            | Q(country__icontains=value)
        )

    def filter_amenities(self, queryset, name, value):  # type: ignore
        wanted = [item.strip().lower() for item in str(value).split(",") if item.strip()]
        if not wanted:
            return queryset
        # JSON containment is not portable across backends, filter in Python
        matching_ids = [
            hotel.pk
            for hotel in queryset.only("id", "amenities")
            if set(wanted) <= {str(a).lower() for a in (hotel.amenities or [])}
        ]
        return queryset.filter(pk__in=matching_ids)

"""API views for analytics.

Provides the admin revenue report. Revenue figures are net of refunds.
"""

from __future__ import annotations

from rest_framework import serializers  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.users.permissions import IsAdminRole

from .services import revenue_report


class RevenueQuerySerializer(serializers.Serializer):
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)


class RevenueAnalyticsView(APIView):
    """Net revenue totals and per-hotel breakdown."""

    permission_classes = [IsAdminRole]

    def get(self, request, format=None):  # type: ignore
        query = RevenueQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        report = revenue_report(query.validated_data.get("date_from"), query.validated_data.get("date_to"))
        return Response(report)

"""API URL configuration."""
from __future__ import annotations

from django.urls import path

from backend.api.views import LiveConditionsView

urlpatterns = [
    path("stations/<int:station_id>/live", LiveConditionsView.as_view(), name="live-conditions"),
]

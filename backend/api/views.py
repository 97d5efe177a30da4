"""REST API views for live station conditions."""
from __future__ import annotations

from datetime import timedelta
from functools import lru_cache
from typing import Optional

from asgiref.sync import async_to_sync
from django.conf import settings
from django.core.cache import caches
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from spotlive.entities import LiveConditions
from spotlive.services.live_conditions import LiveConditionsOrchestrator
from spotlive.sources import ConditionsSourceRegistry, RequestConfig, default_sources
from spotlive.staleness import StalenessEvaluator


CACHE_KEY_TEMPLATE = "live:{station_id}"


@lru_cache(maxsize=1)
def get_live_conditions_service() -> LiveConditionsOrchestrator:
    request_config = RequestConfig(timeout=settings.LIVE_CONDITIONS_TIMEOUT)
    evaluator = StalenessEvaluator(
        stale_after=timedelta(minutes=settings.LIVE_CONDITIONS_STALE_AFTER_MINUTES),
        station_timezone=settings.LIVE_CONDITIONS_STATION_TIMEZONE,
    )
    return LiveConditionsOrchestrator(
        ConditionsSourceRegistry(default_sources(request_config=request_config)),
        evaluator,
        default_timeout=settings.LIVE_CONDITIONS_TIMEOUT,
    )


def _serialize_conditions(station_id: int, conditions: Optional[LiveConditions]) -> dict:
    return {
        "station_id": station_id,
        "conditions": conditions.as_dict() if conditions is not None else None,
    }


def fetch_live_payload(station_id: int) -> dict:
    """Return the serialized live reading, going through the cache first."""
    cache = caches[settings.LIVE_CONDITIONS_CACHE_ALIAS]
    cache_key = CACHE_KEY_TEMPLATE.format(station_id=station_id)
    cached = cache.get(cache_key)
    if cached is not None:
        return cached

    conditions = async_to_sync(get_live_conditions_service().fetch)(station_id)
    payload = _serialize_conditions(station_id, conditions)
    if conditions is not None:
        cache.set(cache_key, payload, settings.LIVE_CONDITIONS_CACHE_TIMEOUT)
    return payload


class LiveConditionsView(APIView):
    """Provide the live reading for a station, if any source has one."""

    def get(self, request, station_id: int, *args, **kwargs):  # noqa: D401
        """Return the live conditions snapshot for the station."""
        if station_id <= 0:
            return Response({"detail": "station_id must be a positive integer"}, status=status.HTTP_400_BAD_REQUEST)
        return Response(fetch_live_payload(station_id), status=status.HTTP_200_OK)

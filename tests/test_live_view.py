from __future__ import annotations

import io

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import Client

from backend.api import views
from spotlive.entities import LiveConditions
from spotlive.services.live_conditions import LiveConditionsOrchestrator


READING = LiveConditions(
    timestamp="2025-06-15 13:55:00",
    wind_speed=17,
    gust_speed=22,
    wind_direction="NW",
    temperature=19,
)


class _StubService:
    def __init__(self, result) -> None:
        self.result = result
        self.calls = []

    async def fetch(self, station_id: int, clock=None):
        self.calls.append(station_id)
        return self.result


@pytest.fixture()
def service(monkeypatch, live_cache):
    stub = _StubService(READING)
    monkeypatch.setattr(views, "get_live_conditions_service", lambda: stub)
    return stub


def test_live_endpoint_returns_payload(service) -> None:
    client = Client()
    response = client.get("/api/stations/859182/live")

    assert response.status_code == 200
    assert response.json() == {
        "station_id": 859182,
        "conditions": {
            "timestamp": "2025-06-15 13:55:00",
            "wind_speed": 17,
            "gust_speed": 22,
            "wind_direction": "NW",
            "temperature": 19,
        },
    }
    assert service.calls == [859182]


def test_live_endpoint_caches_readings(service) -> None:
    client = Client()
    client.get("/api/stations/859182/live")
    client.get("/api/stations/859182/live")

    assert service.calls == [859182]


def test_live_endpoint_without_reading(service) -> None:
    service.result = None
    client = Client()

    first = client.get("/api/stations/1/live")
    client.get("/api/stations/1/live")

    assert first.status_code == 200
    assert first.json() == {"station_id": 1, "conditions": None}
    assert service.calls == [1, 1]


def test_live_endpoint_rejects_station_zero(service) -> None:
    response = Client().get("/api/stations/0/live")

    assert response.status_code == 400
    assert "detail" in response.json()
    assert service.calls == []


def test_live_endpoint_requires_numeric_station(service) -> None:
    response = Client().get("/api/stations/abc/live")

    assert response.status_code == 404


def test_service_is_built_from_settings() -> None:
    views.get_live_conditions_service.cache_clear()
    try:
        service = views.get_live_conditions_service()
    finally:
        views.get_live_conditions_service.cache_clear()

    assert isinstance(service, LiveConditionsOrchestrator)
    assert len(service.registry) == 10
    assert service.evaluator.stale_after_minutes == 60
    assert service.default_timeout == 10.0
    assert all(source.timeout == 10.0 for source in service.registry)


def test_live_fetch_command_prints_payload(service) -> None:
    out = io.StringIO()

    call_command("live_fetch", station=859182, stdout=out)

    assert '"wind_direction": "NW"' in out.getvalue()
    assert service.calls == [859182]


def test_live_fetch_command_requires_station(service) -> None:
    with pytest.raises(CommandError):
        call_command("live_fetch")


def test_live_fetch_command_reports_missing_reading(service) -> None:
    service.result = None
    out, err = io.StringIO(), io.StringIO()

    call_command("live_fetch", station=726, stdout=out, stderr=err)

    assert '"conditions": null' in out.getvalue()
    assert "No live conditions" in err.getvalue()

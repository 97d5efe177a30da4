from __future__ import annotations

import asyncio
from datetime import datetime, timedelta
from typing import Optional

import pytest

from spotlive.entities import LiveConditions
from spotlive.services.live_conditions import LiveConditionsOrchestrator
from spotlive.sources import (
    ConditionsSourceRegistry,
    KiteridersSource,
    PayloadError,
    ScpodoSource,
    SourceError,
)


STATION = 859182
NOW = datetime(2025, 6, 15, 14, 0, 0)


def reading(age: timedelta, wind: int = 15) -> LiveConditions:
    return LiveConditions(
        timestamp=(NOW - age).strftime("%Y-%m-%d %H:%M:%S"),
        wind_speed=wind,
        gust_speed=wind + 5,
        wind_direction="W",
        temperature=21,
    )


FRESH = reading(timedelta(minutes=5), wind=12)
STALE = reading(timedelta(hours=3), wind=20)
FALLBACK = reading(timedelta(minutes=10), wind=14)


class StubSource:
    def __init__(
        self,
        name: str,
        *,
        value: Optional[LiveConditions] = None,
        error: Optional[Exception] = None,
        fallback: bool = False,
        stations=(STATION,),
        delay: float = 0.0,
        timeout: float = 1.0,
    ) -> None:
        self.name = name
        self.value = value
        self.error = error
        self.fallback = fallback
        self.stations = set(stations)
        self.delay = delay
        self.timeout = timeout
        self.calls = 0

    def matches(self, station_id: int) -> bool:
        return station_id in self.stations

    async def fetch(self, station_id: int) -> Optional[LiveConditions]:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.value


class ExplodingSource(StubSource):
    async def fetch(self, station_id: int) -> Optional[LiveConditions]:
        self.calls += 1
        raise AssertionError(f"{self.name} must not be invoked")


def orchestrator(*sources) -> LiveConditionsOrchestrator:
    return LiveConditionsOrchestrator(ConditionsSourceRegistry(sources), clock=lambda: NOW)


def fetch(service: LiveConditionsOrchestrator, station_id: int = STATION, clock=None):
    return asyncio.run(service.fetch(station_id, clock))


def test_unknown_station_yields_nothing():
    service = orchestrator(StubSource("primary", value=FRESH))

    assert fetch(service, station_id=1) is None


def test_fallback_alone_never_answers():
    backup = StubSource("backup", value=FALLBACK, fallback=True)
    service = orchestrator(backup)

    assert fetch(service) is None
    assert backup.calls == 0


def test_fresh_primary_is_returned_without_touching_fallback():
    primary = StubSource("primary", value=FRESH)
    backup = ExplodingSource("backup", fallback=True)
    service = orchestrator(primary, backup)

    assert fetch(service) == FRESH
    assert primary.calls == 1
    assert backup.calls == 0


def test_stale_primary_defers_to_fallback_value():
    primary = StubSource("primary", value=STALE)
    backup = StubSource("backup", value=FALLBACK, fallback=True)
    service = orchestrator(primary, backup)

    assert fetch(service) == FALLBACK
    assert (primary.calls, backup.calls) == (1, 1)


@pytest.mark.parametrize("backup_kwargs", [{"error": SourceError("HTTP 500")}, {"value": None}])
def test_stale_primary_is_kept_when_fallback_fails(backup_kwargs):
    primary = StubSource("primary", value=STALE)
    backup = StubSource("backup", fallback=True, **backup_kwargs)
    service = orchestrator(primary, backup)

    assert fetch(service) == STALE
    assert backup.calls == 1


def test_stale_primary_is_kept_without_fallback():
    service = orchestrator(StubSource("primary", value=STALE))

    assert fetch(service) == STALE


@pytest.mark.parametrize("primary_kwargs", [{"error": SourceError("unreachable")}, {"error": PayloadError("garbled")}, {"value": None}])
def test_failed_primary_defers_to_fallback_value(primary_kwargs):
    primary = StubSource("primary", **primary_kwargs)
    backup = StubSource("backup", value=FALLBACK, fallback=True)
    service = orchestrator(primary, backup)

    assert fetch(service) == FALLBACK


@pytest.mark.parametrize("primary_kwargs", [{"error": SourceError("unreachable")}, {"value": None}])
def test_failed_primary_without_fallback_yields_nothing(primary_kwargs):
    service = orchestrator(StubSource("primary", **primary_kwargs))

    assert fetch(service) is None


def test_everything_failing_yields_nothing():
    primary = StubSource("primary", error=SourceError("HTTP 502"))
    backup = StubSource("backup", error=SourceError("HTTP 503"), fallback=True)
    service = orchestrator(primary, backup)

    assert fetch(service) is None


def test_fallback_value_is_not_staleness_checked():
    old_backup = reading(timedelta(days=2), wind=9)
    primary = StubSource("primary", value=STALE)
    backup = StubSource("backup", value=old_backup, fallback=True)
    service = orchestrator(primary, backup)

    assert fetch(service) == old_backup


def test_only_first_matching_sources_are_used():
    primary = StubSource("primary", error=SourceError("down"))
    second = ExplodingSource("second")
    backup = StubSource("backup", value=FALLBACK, fallback=True)
    second_backup = ExplodingSource("second-backup", fallback=True)
    service = orchestrator(primary, second, backup, second_backup)

    assert fetch(service) == FALLBACK
    assert second.calls == 0
    assert second_backup.calls == 0


def test_slow_primary_times_out_into_fallback():
    primary = StubSource("primary", value=FRESH, delay=1.0, timeout=0.05)
    backup = StubSource("backup", value=FALLBACK, fallback=True)
    service = orchestrator(primary, backup)

    assert fetch(service) == FALLBACK


def test_fallback_starts_after_primary_outcome():
    order = []

    class Recording(StubSource):
        async def fetch(self, station_id):
            order.append(f"{self.name}:start")
            result = await super().fetch(station_id)
            order.append(f"{self.name}:end")
            return result

    primary = Recording("primary", value=STALE, delay=0.01)
    backup = Recording("backup", value=FALLBACK, fallback=True)
    service = orchestrator(primary, backup)

    fetch(service)

    assert order == ["primary:start", "primary:end", "backup:start", "backup:end"]


def test_explicit_clock_overrides_default():
    primary = StubSource("primary", value=FRESH)
    backup = StubSource("backup", value=FALLBACK, fallback=True)
    service = orchestrator(primary, backup)

    later = lambda: NOW + timedelta(hours=2)  # noqa: E731

    assert fetch(service, clock=later) == FALLBACK


def test_malformed_clock_raises_before_fetching():
    primary = StubSource("primary", value=FRESH)
    service = orchestrator(primary)

    with pytest.raises(TypeError):
        fetch(service, clock="now")
    assert primary.calls == 0


@pytest.mark.parametrize(
    "primary_kwargs",
    [{"error": SourceError("down")}, {"value": None}],
    ids=["primary-error", "primary-empty"],
)
def test_clock_returning_non_datetime_raises_on_every_path(primary_kwargs):
    primary = StubSource("primary", **primary_kwargs)
    service = orchestrator(primary)

    with pytest.raises(TypeError):
        fetch(service, clock=lambda: "2025-06-15 14:00")
    assert primary.calls == 0


def test_clock_is_read_once_per_request():
    reads = []

    def clock():
        reads.append(NOW)
        return NOW

    primary = StubSource("primary", value=STALE)
    backup = StubSource("backup", value=None, fallback=True)

    assert fetch(orchestrator(primary, backup), clock=clock) == STALE
    assert len(reads) == 1


def test_unexpected_errors_propagate():
    service = orchestrator(StubSource("primary", error=RuntimeError("bug")))

    with pytest.raises(RuntimeError, match="bug"):
        fetch(service)


def test_fetch_can_be_cancelled():
    primary = StubSource("primary", value=FRESH, delay=5.0, timeout=10.0)
    service = orchestrator(primary)

    async def scenario():
        task = asyncio.create_task(service.fetch(STATION))
        await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())
    assert primary.calls == 1


def test_concurrent_requests_are_independent():
    fresh = StubSource("fresh", value=FRESH, stations=(1,), delay=0.02)
    stale = StubSource("stale", value=STALE, stations=(2,), delay=0.01)
    backup = StubSource("backup", value=FALLBACK, fallback=True, stations=(2,))
    service = orchestrator(fresh, stale, backup)

    async def scenario():
        return await asyncio.gather(service.fetch(1), service.fetch(2), service.fetch(3))

    assert asyncio.run(scenario()) == [FRESH, FALLBACK, None]


# End to end through the HTTP sources -----------------------------------------
def kiteriders_page(date: str, time: str) -> str:
    return (
        "<table>\n<tr><th>Datum</th></tr>\n"
        f"<tr><td>{date}</td><td>{time}</td><td>NW</td><td>-</td><td>21.4kn</td><td>-</td><td>27.0kn</td><td>18.2 &deg;C</td></tr>\n"
        "</table>"
    )


def scpodo_payload(timestamp: str) -> str:
    return (
        '[{"windDirCurDe": "NNW", "windSpeedCur": "16.6", "windSpeedGusts": "22.1", '
        f'"tempOutCur": "19.4", "DateTime": "{timestamp}"}}]'
    )


def test_day_old_primary_is_replaced_by_recent_fallback(http):
    http.get(KiteridersSource.url, text=kiteriders_page("14.06.2025", "13:00"))
    http.get(ScpodoSource.url, text=scpodo_payload("2025-06-15 13:55:00"))

    async def call(client):
        registry = ConditionsSourceRegistry([KiteridersSource(client=client), ScpodoSource(client=client)])
        return await LiveConditionsOrchestrator(registry).fetch(STATION, lambda: NOW)

    result = http.run(call)

    assert result == LiveConditions(
        timestamp="2025-06-15 13:55:00",
        wind_speed=17,
        gust_speed=22,
        wind_direction="NW",
        temperature=19,
    )
    assert http.calls == [KiteridersSource.url, ScpodoSource.url]


def test_fresh_primary_page_skips_fallback_request(http):
    http.get(KiteridersSource.url, text=kiteriders_page("15.06.2025", "13:50"))
    http.get(ScpodoSource.url, text=scpodo_payload("2025-06-15 13:55:00"))

    async def call(client):
        registry = ConditionsSourceRegistry([KiteridersSource(client=client), ScpodoSource(client=client)])
        return await LiveConditionsOrchestrator(registry).fetch(STATION, lambda: NOW)

    result = http.run(call)

    assert result.timestamp == "15.06.2025 13:50"
    assert result.wind_speed == 21
    assert http.calls == [KiteridersSource.url]


def test_broken_primary_page_falls_back(http):
    http.get(KiteridersSource.url, status_code=500, text="oops")
    http.get(ScpodoSource.url, text=scpodo_payload("2025-06-15 13:55:00"))

    async def call(client):
        registry = ConditionsSourceRegistry([KiteridersSource(client=client), ScpodoSource(client=client)])
        return await LiveConditionsOrchestrator(registry).fetch(STATION, lambda: NOW)

    assert http.run(call).timestamp == "2025-06-15 13:55:00"

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from .base import ConditionsSource, PayloadError, degrees_to_cardinal, round_half_up
from ..entities import LiveConditions


class PuckSource(ConditionsSource):
    """Molo Puck station, read from its Cumulus gauges JSON."""

    name = "puck"
    url = "https://www.wiatrkadyny.pl/puck/realtimegauges.txt"
    station_id = 48009
    payload_errors = ConditionsSource.payload_errors + (TypeError,)
    station_timezone = ZoneInfo("Europe/Warsaw")

    def matches(self, station_id: int) -> bool:
        return station_id == self.station_id

    def url_for(self, station_id: int) -> str:
        return self.url

    def parse(self, body: str) -> Optional[LiveConditions]:
        data = json.loads(body)
        if not isinstance(data, dict):
            raise PayloadError("expected a JSON object")
        return LiveConditions(
            timestamp=self._local_timestamp(data["timeUTC"]),
            wind_speed=round_half_up(float(data["wspeed"])),
            gust_speed=round_half_up(float(data["wgust"])),
            wind_direction=degrees_to_cardinal(float(data["bearing"])),
            temperature=round_half_up(float(data["temp"])),
        )

    def _local_timestamp(self, value: str) -> str:
        # "2025,7,1,6,12,8" -> year, month, day, hour, minute, second in UTC
        parts = [int(part) for part in value.split(",")]
        if len(parts) != 6:
            raise PayloadError(f"unexpected timeUTC value {value!r}")
        moment = datetime(*parts, tzinfo=timezone.utc)
        return moment.astimezone(self.station_timezone).strftime("%Y-%m-%d %H:%M:%S")


__all__ = ["PuckSource"]

from __future__ import annotations

import json
from typing import Optional

from .base import ConditionsSource, PayloadError, normalize_direction, round_half_up
from ..entities import LiveConditions


GERMAN_DIRECTIONS = {
    "N": "N",
    "NO": "NE",
    "NNO": "NE",
    "O": "E",
    "ONO": "E",
    "SO": "SE",
    "OSO": "SE",
    "SSO": "SE",
    "S": "S",
    "SW": "SW",
    "SSW": "SW",
    "WSW": "SW",
    "W": "W",
    "WNW": "W",
    "NW": "NW",
    "NNW": "NW",
}


def normalize_german_direction(raw: str) -> str:
    return GERMAN_DIRECTIONS.get(raw.strip().upper()) or normalize_direction(raw)


class ScpodoSource(ConditionsSource):
    """Backup station for Podersdorf am See run by scpodo.at.

    Consulted only when the kiteriders.at reading is missing or stale.
    """

    name = "scpodo"
    fallback = True
    url = "https://scpodo.at/wind.php"
    station_id = 859182
    payload_errors = ConditionsSource.payload_errors + (TypeError,)

    def matches(self, station_id: int) -> bool:
        return station_id == self.station_id

    def url_for(self, station_id: int) -> str:
        return self.url

    def parse(self, body: str) -> Optional[LiveConditions]:
        readings = json.loads(body)
        if not isinstance(readings, list) or not readings:
            raise PayloadError("no readings in payload")
        latest = readings[0]
        return LiveConditions(
            timestamp=latest["DateTime"],
            wind_speed=round_half_up(float(latest["windSpeedCur"])),
            gust_speed=round_half_up(float(latest["windSpeedGusts"])),
            wind_direction=normalize_german_direction(latest["windDirCurDe"]),
            temperature=round_half_up(float(latest["tempOutCur"])),
        )


__all__ = ["ScpodoSource", "normalize_german_direction"]

from __future__ import annotations

import re
from typing import Optional, Pattern

from .base import MS_TO_KNOTS, ConditionsSource, PayloadError, degrees_to_cardinal, round_half_up
from ..entities import LiveConditions


TIMESTAMP_PATTERN = re.compile(r"padding-top:10px.*?>(\d{4}-\d{2}-\d{2}\s+\d{2}:\d{2})")
TEMPERATURE_PATTERN = re.compile(r"font-size: 16px;'>(-?\d+)&deg;C")
WIND_SPEED_PATTERN = re.compile(r"wind_speed\.png.*?padding-right: 10px;'>(\d+\.\d+)\s+m/s")
WIND_DIRECTION_PATTERN = re.compile(r"wind_rose\.png.*?padding-right: 10px;'>(\d+)\s+&deg;")


class TurawaSource(ConditionsSource):
    """Turawa Lake, scraped from the airmax.pl camera widget.

    The widget reports no gusts, so ``gust_speed`` is always zero.
    """

    name = "turawa"
    url = "https://airmax.pl/kamery/turawa"
    station_id = 726

    def matches(self, station_id: int) -> bool:
        return station_id == self.station_id

    def url_for(self, station_id: int) -> str:
        return self.url

    def parse(self, body: str) -> Optional[LiveConditions]:
        wind_ms = float(_extract(body, WIND_SPEED_PATTERN, "wind speed"))
        return LiveConditions(
            timestamp=_extract(body, TIMESTAMP_PATTERN, "timestamp"),
            wind_speed=round_half_up(wind_ms * MS_TO_KNOTS),
            gust_speed=0,
            wind_direction=degrees_to_cardinal(int(_extract(body, WIND_DIRECTION_PATTERN, "wind direction"))),
            temperature=round_half_up(float(_extract(body, TEMPERATURE_PATTERN, "temperature"))),
        )


def _extract(body: str, pattern: Pattern[str], field: str) -> str:
    match = pattern.search(body)
    if not match:
        raise PayloadError(f"could not extract {field}")
    return match.group(1)


__all__ = ["TurawaSource"]

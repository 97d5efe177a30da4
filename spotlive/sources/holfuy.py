from __future__ import annotations

import re
from typing import List, Optional, Pattern
from zoneinfo import ZoneInfo

from .base import MS_TO_KNOTS, ConditionsSource, PayloadError, degrees_to_cardinal, normalize_direction, round_half_up
from ..entities import LiveConditions


SPEED_ROW = re.compile(r">Speed</td>(.*?)</tr>", re.DOTALL | re.IGNORECASE)
GUST_ROW = re.compile(r">Gust.*?</td>(.*?)</tr>", re.DOTALL | re.IGNORECASE)
TEMPERATURE_ROW = re.compile(r">Temp\..*?</td>(.*?)</tr>", re.DOTALL | re.IGNORECASE)
NUMBER_CELL = re.compile(r"<td[^>]*>(-?[0-9.]+)</td>")


class HolfuySource(ConditionsSource):
    """Base for stations read from the 15-minute table of a holfuy.com page.

    Each row lists readings oldest first, so the last cell is the newest one.
    The page carries no reading time, the fetch time is used instead.
    """

    station_id = 0
    holfuy_id = 0
    station_timezone = ZoneInfo("Europe/Warsaw")
    # conversion from the page's speed unit to knots
    speed_factor = 1.0

    @property
    def url(self) -> str:
        return f"https://holfuy.com/en/weather/{self.holfuy_id}"

    def matches(self, station_id: int) -> bool:
        return station_id == self.station_id

    def url_for(self, station_id: int) -> str:
        return self.url

    def parse(self, body: str) -> Optional[LiveConditions]:
        html = re.sub(r"\s+", " ", body)
        return LiveConditions(
            timestamp=self.captured_at(self.station_timezone),
            wind_speed=round_half_up(self._last_number(html, SPEED_ROW, "speed") * self.speed_factor),
            gust_speed=round_half_up(self._last_number(html, GUST_ROW, "gust") * self.speed_factor),
            wind_direction=self.direction(html),
            temperature=round_half_up(self._last_number(html, TEMPERATURE_ROW, "temperature")),
        )

    def direction(self, html: str) -> str:
        raise NotImplementedError

    def _last_number(self, html: str, row: Pattern[str], field: str) -> float:
        return float(_last_cell(html, row, NUMBER_CELL, field))


class MBSource(HolfuySource):
    """Góra Żar (MB), Holfuy station 1612. Speeds are published in m/s."""

    name = "mb"
    station_id = 1068590
    holfuy_id = 1612
    speed_factor = MS_TO_KNOTS

    DIRECTION_ROW = re.compile(r">Direction<br>.*?Deg\..*?</td>(.*?)</tr>", re.DOTALL | re.IGNORECASE)
    # "NE<br>34°"
    DIRECTION_CELL = re.compile(r"<td>[A-Z]+<br>(\d+)(?:°|&deg;|&#176;)</td>")

    def direction(self, html: str) -> str:
        return degrees_to_cardinal(int(_last_cell(html, self.DIRECTION_ROW, self.DIRECTION_CELL, "direction")))


class SvenceleSource(HolfuySource):
    """Švenčelė lagoon, Holfuy station 1515. Speeds are published in knots."""

    name = "svencele"
    station_id = 1025272
    holfuy_id = 1515
    station_timezone = ZoneInfo("Europe/Vilnius")

    # the text row; the arrow row above it has a styled header cell
    DIRECTION_ROW = re.compile(r'<td class="h_header">Direction</td>(.*?)</tr>', re.DOTALL | re.IGNORECASE)
    DIRECTION_CELL = re.compile(r"<td[^>]*>([A-Z]+)</td>")

    def direction(self, html: str) -> str:
        return normalize_direction(_last_cell(html, self.DIRECTION_ROW, self.DIRECTION_CELL, "direction"))


def _last_cell(html: str, row: Pattern[str], cell: Pattern[str], field: str) -> str:
    match = row.search(html)
    if not match:
        raise PayloadError(f"no {field} row")
    values: List[str] = cell.findall(match.group(1))
    if not values:
        raise PayloadError(f"no {field} values")
    return values[-1]


__all__ = ["HolfuySource", "MBSource", "SvenceleSource"]

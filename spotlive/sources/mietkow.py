from __future__ import annotations

import re
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from .base import TIMESTAMP_FORMAT, ConditionsSource, PayloadError, degrees_to_cardinal, round_half_up
from ..entities import LiveConditions


# "12 knt (Max 18)"
WIND_PATTERN = re.compile(
    r'<td class="label"[^>]*>Wiatr</td>\s*<td class="data"[^>]*>(\d+)\s*knt\s*\(Max\s*(\d+)\)',
    re.IGNORECASE,
)
# the first arrow on the page points along the current wind
DIRECTION_PATTERN = re.compile(r"transform:rotate\(calc\(([0-9.]+)deg\s*-\s*180deg\)", re.IGNORECASE)
TEMPERATURE_PATTERN = re.compile(
    r'<td class="label">Temperatura</td>\s*<td class="data">([0-9,.-]+)&#176;C</td>',
    re.IGNORECASE,
)
UPDATED_PATTERN = re.compile(r'<span id="lastupdate_value">([^<]+)</span>', re.IGNORECASE)
# "17-sty-2026 17:22:24"
UPDATED_VALUE = re.compile(r"(\d{1,2})-(\w+)-(\d{4}) (\d{2}):(\d{2}):(\d{2})")

POLISH_MONTHS = {
    "sty": 1,
    "lut": 2,
    "mar": 3,
    "kwi": 4,
    "maj": 5,
    "cze": 6,
    "lip": 7,
    "sie": 8,
    "wrz": 9,
    "paź": 10,
    "lis": 11,
    "gru": 12,
}


class MietkowSource(ConditionsSource):
    """Mietków reservoir, read from the station's weewx page."""

    name = "mietkow"
    url = "https://frog01-21064.wykr.es/weewx/inx.html"
    station_id = 304
    station_timezone = ZoneInfo("Europe/Warsaw")

    def matches(self, station_id: int) -> bool:
        return station_id == self.station_id

    def url_for(self, station_id: int) -> str:
        return self.url

    def parse(self, body: str) -> Optional[LiveConditions]:
        wind = WIND_PATTERN.search(body)
        if not wind:
            raise PayloadError("could not extract wind")
        direction = DIRECTION_PATTERN.search(body)
        if not direction:
            raise PayloadError("could not extract wind direction")
        temperature = TEMPERATURE_PATTERN.search(body)
        if not temperature:
            raise PayloadError("could not extract temperature")
        return LiveConditions(
            timestamp=self._timestamp(body),
            wind_speed=int(wind.group(1)),
            gust_speed=int(wind.group(2)),
            wind_direction=degrees_to_cardinal(round_half_up(float(direction.group(1)))),
            temperature=round_half_up(float(temperature.group(1).replace(",", "."))),
        )

    def _timestamp(self, body: str) -> str:
        match = UPDATED_PATTERN.search(body)
        updated = parse_polish_timestamp(match.group(1)) if match else None
        if updated is None:
            self._log.debug("No readable update time on the page, using fetch time")
            return self.captured_at(self.station_timezone)
        return updated.strftime(TIMESTAMP_FORMAT)


def parse_polish_timestamp(value: str) -> Optional[datetime]:
    """Parse ``dd-mmm-yyyy HH:MM:SS`` with Polish month abbreviations."""
    match = UPDATED_VALUE.fullmatch(value.strip())
    if not match:
        return None
    day, month, year, hour, minute, second = match.groups()
    month_number = POLISH_MONTHS.get(month.lower())
    if month_number is None:
        return None
    try:
        return datetime(int(year), month_number, int(day), int(hour), int(minute), int(second))
    except ValueError:
        return None


__all__ = ["MietkowSource", "parse_polish_timestamp"]

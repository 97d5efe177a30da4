from __future__ import annotations

import re
from datetime import datetime
from typing import List, Optional
from zoneinfo import ZoneInfo

from .base import TIMESTAMP_FORMAT, ConditionsSource, PayloadError, normalize_direction, round_half_up
from ..entities import LiveConditions


TIME_PATTERN = re.compile(r"<td>(\d{2}:\d{2})</td>")
# wind and gusts are the first and second "kntN" cell classes of a row
KNOTS_PATTERN = re.compile(r'<td class="[^"]*knt(\d+)"[^>]*>')
DIRECTION_PATTERN = re.compile(r'<strong><span title="\d+">([A-Z]+)</span></strong>')
TEMPERATURE_PATTERN = re.compile(r'<td class="mobile-hidden">(-?[\d.]+) &deg;C</td>')


class ElMedanoSource(ConditionsSource):
    """El Médano, read from the Cabezo station table on bergfex.

    Rows carry only a local time of day. It is dated with the current Canary
    day and reported in Madrid time, matching the other Spanish spots.
    """

    name = "elmedano"
    url = "https://cabezo.bergfex.at/wetterstation/"
    station_id = 207008
    local_timezone = ZoneInfo("Atlantic/Canary")
    station_timezone = ZoneInfo("Europe/Madrid")

    def matches(self, station_id: int) -> bool:
        return station_id == self.station_id

    def url_for(self, station_id: int) -> str:
        return self.url

    def parse(self, body: str) -> Optional[LiveConditions]:
        row = _newest_row(body)
        time = TIME_PATTERN.search(row)
        if not time:
            raise PayloadError("time not found in data row")
        knots = KNOTS_PATTERN.findall(row)
        if len(knots) < 2:
            raise PayloadError("wind or gusts not found in data row")
        direction = DIRECTION_PATTERN.search(row)
        if not direction:
            raise PayloadError("wind direction not found in data row")
        temperature = TEMPERATURE_PATTERN.search(row)
        if not temperature:
            raise PayloadError("temperature not found in data row")
        return LiveConditions(
            timestamp=self._timestamp(time.group(1)),
            wind_speed=int(knots[0]),
            gust_speed=int(knots[1]),
            wind_direction=normalize_direction(direction.group(1)),
            temperature=round_half_up(float(temperature.group(1))),
        )

    def _timestamp(self, time_of_day: str) -> str:
        today = self.clock().astimezone(self.local_timezone).date()
        clock_time = datetime.strptime(time_of_day, "%H:%M").time()
        local = datetime.combine(today, clock_time, tzinfo=self.local_timezone)
        return local.astimezone(self.station_timezone).strftime(TIMESTAMP_FORMAT)


def _newest_row(body: str) -> str:
    # the first <tr> holds the headers, the second one the latest reading
    rows_seen = 0
    collected: List[str] = []
    for line in body.splitlines():
        stripped = line.strip()
        if stripped.startswith("<tr"):
            rows_seen += 1
        if rows_seen == 2:
            collected.append(line)
            if stripped.endswith("</tr>"):
                return "\n".join(collected)
    raise PayloadError("no data row found")


__all__ = ["ElMedanoSource"]

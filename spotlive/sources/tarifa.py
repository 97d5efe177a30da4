from __future__ import annotations

import html
import json
import re
from datetime import datetime
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

from .base import MS_TO_KNOTS, ConditionsSource, PayloadError, degrees_to_cardinal, round_half_up
from ..entities import LiveConditions


# const hourly_weather_forecast = JSON.parse(("{&quot;hours&quot;:[...]}").replaceAll(...))
FORECAST_PATTERN = re.compile(r'const\s+hourly_weather_forecast\s*=\s*JSON\.parse\(\("(.+?)"\)')


class TarifaArteVidaSource(ConditionsSource):
    """Tarifa (Arte Vida), read from the WeatherFlow widget on spotfav.com.

    The widget embeds hourly entries with values in m/s. The entry closest to
    the current time is used and stamped with the fetch time.
    """

    name = "tarifa"
    url = "https://www.spotfav.com/public/meteo/weatherflow-4eee927b185476763900001b/update/"
    station_id = 48775
    station_timezone = ZoneInfo("Europe/Madrid")
    payload_errors = ConditionsSource.payload_errors + (TypeError,)

    def matches(self, station_id: int) -> bool:
        return station_id == self.station_id

    def url_for(self, station_id: int) -> str:
        return self.url

    def parse(self, body: str) -> Optional[LiveConditions]:
        match = FORECAST_PATTERN.search(body)
        if not match:
            raise PayloadError("hourly_weather_forecast not found")
        data = json.loads(html.unescape(match.group(1)))
        hours = data.get("hours") if isinstance(data, dict) else None
        hours = [entry for entry in hours or () if isinstance(entry, dict)]
        if not hours:
            raise PayloadError("no hours in forecast data")
        entry = self._current_entry(hours)
        return LiveConditions(
            timestamp=self.captured_at(self.station_timezone),
            wind_speed=round_half_up(_value(entry, "windSpeed") * MS_TO_KNOTS),
            gust_speed=round_half_up(_value(entry, "gust") * MS_TO_KNOTS),
            wind_direction=degrees_to_cardinal(int(_value(entry, "windDirection"))),
            temperature=round_half_up(_value(entry, "airTemperature")),
        )

    def _current_entry(self, hours: List[Dict[str, Any]]) -> Dict[str, Any]:
        now = self.clock().astimezone(self.station_timezone).replace(tzinfo=None)
        best, best_gap = None, None
        for entry in hours:
            moment = _entry_time(entry, self.station_timezone)
            if moment is None:
                continue
            gap = abs((moment - now).total_seconds())
            if best_gap is None or gap < best_gap:
                best, best_gap = entry, gap
        return best if best is not None else hours[0]


def _entry_time(entry: Dict[str, Any], zone: ZoneInfo) -> Optional[datetime]:
    try:
        moment = datetime.fromisoformat(entry["time"])
    except (KeyError, TypeError, ValueError):
        return None
    if moment.tzinfo is not None:
        moment = moment.astimezone(zone).replace(tzinfo=None)
    return moment


def _value(entry: Dict[str, Any], field: str) -> float:
    # values are nested per model, "sg" is the one shown on the widget
    nested = entry.get(field)
    if not isinstance(nested, dict) or "sg" not in nested:
        raise PayloadError(f"{field} not found in forecast data")
    return float(nested["sg"])


__all__ = ["TarifaArteVidaSource"]

from __future__ import annotations

from typing import Dict, Optional

from .base import ConditionsSource, PayloadError, normalize_direction, round_half_up
from ..entities import LiveConditions


# Cumulus "realtime" dump: one line of whitespace separated fields
_DATE, _TIME, _TEMPERATURE, _WIND, _GUST, _DIRECTION = 0, 1, 2, 5, 6, 11
_MIN_TOKENS = _DIRECTION + 1


class WiatrKadynySource(ConditionsSource):
    """Stations around the Puck Bay published by wiatrkadyny.pl."""

    name = "wiatrkadyny"

    STATION_URLS: Dict[int, str] = {
        126330: "https://www.wiatrkadyny.pl/wiatrkadyny.txt",
        509469: "https://www.wiatrkadyny.pl/kuznica/wiatrkadyny.txt",
        500760: "https://www.wiatrkadyny.pl/draga/wiatrkadyny.txt",
        4165: "https://www.wiatrkadyny.pl/rewa/wiatrkadyny.txt",
    }

    def matches(self, station_id: int) -> bool:
        return station_id in self.STATION_URLS

    def url_for(self, station_id: int) -> str:
        return self.STATION_URLS[station_id]

    def parse(self, body: str) -> Optional[LiveConditions]:
        parts = body.split()
        if len(parts) < _MIN_TOKENS:
            raise PayloadError(f"expected at least {_MIN_TOKENS} fields, got {len(parts)}")
        return LiveConditions(
            timestamp=f"{parts[_DATE]} {parts[_TIME]}",
            wind_speed=round_half_up(float(parts[_WIND])),
            gust_speed=round_half_up(float(parts[_GUST])),
            wind_direction=normalize_direction(parts[_DIRECTION]),
            temperature=round_half_up(float(parts[_TEMPERATURE])),
        )


__all__ = ["WiatrKadynySource"]

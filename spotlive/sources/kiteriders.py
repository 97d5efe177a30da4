from __future__ import annotations

import re
from typing import List, Optional

from .base import ConditionsSource, PayloadError, normalize_direction, round_half_up
from ..entities import LiveConditions


_TAG = re.compile(r"<[^>]*>")

# cell offsets within the newest row of the knots table
_DATE, _TIME, _DIRECTION, _WIND, _GUST, _TEMPERATURE = 0, 1, 2, 4, 6, 7


class KiteridersSource(ConditionsSource):
    """Podersdorf am See, read from the kiteriders.at knots table."""

    name = "kiteriders"
    url = "https://www.kiteriders.at/wind/weatherstat_kn.html"
    station_id = 859182

    def matches(self, station_id: int) -> bool:
        return station_id == self.station_id

    def url_for(self, station_id: int) -> str:
        return self.url

    def parse(self, body: str) -> Optional[LiveConditions]:
        cells = self._data_cells(body)
        if len(cells) <= _TEMPERATURE:
            raise PayloadError(f"expected at least {_TEMPERATURE + 1} cells, got {len(cells)}")
        return LiveConditions(
            timestamp=f"{cells[_DATE]} {cells[_TIME]}",
            wind_speed=round_half_up(_knots(cells[_WIND])),
            gust_speed=round_half_up(_knots(cells[_GUST])),
            wind_direction=normalize_direction(cells[_DIRECTION]),
            temperature=round_half_up(float(cells[_TEMPERATURE].split()[0])),
        )

    def _data_cells(self, body: str) -> List[str]:
        # the first row holds the headers, the second one the latest reading
        rows = [line for line in body.splitlines() if line.strip().startswith("<tr")]
        if len(rows) < 2:
            raise PayloadError("no data row found")
        return [_text(cell) for cell in rows[1].split("</td>")]


def _text(cell: str) -> str:
    return _TAG.sub("", cell).replace("&nbsp;", "").strip()


def _knots(value: str) -> float:
    return float(value.replace("kn", "").strip())


__all__ = ["KiteridersSource"]

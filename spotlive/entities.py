from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class LiveConditions:
    """A single live reading taken from a station.

    Values are normalized so sources are interchangeable:
    - wind and gust speed in whole knots
    - wind direction as one of the eight compass letters
    - temperature in whole degrees Celsius

    ``timestamp`` is the station's own time text, kept exactly as captured.
    """

    timestamp: Optional[str]
    wind_speed: int
    gust_speed: int
    wind_direction: str
    temperature: int

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = ["LiveConditions"]

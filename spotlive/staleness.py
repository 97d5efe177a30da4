from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Callable, Optional, Sequence
from zoneinfo import ZoneInfo

from .entities import LiveConditions


logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

TIMESTAMP_FORMATS: Sequence[str] = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%d.%m.%Y %H:%M",
    "%d/%m/%y %H:%M:%S",
)

DEFAULT_STALE_AFTER = timedelta(minutes=60)
DEFAULT_STATION_TIMEZONE = "Europe/Warsaw"


def system_clock() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a station time string using the first format that fits."""
    if value is None or not value.strip():
        return None
    text = value.strip()
    for fmt in TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


class StalenessEvaluator:
    """Decide whether a reading is too old to be shown as live.

    Station clocks report local wall time without a zone, so readings are
    interpreted in ``station_timezone``. Age is counted in whole minutes and a
    reading is stale once it reaches ``stale_after``.
    """

    def __init__(
        self,
        stale_after: timedelta = DEFAULT_STALE_AFTER,
        station_timezone: tzinfo | str = DEFAULT_STATION_TIMEZONE,
    ) -> None:
        if stale_after <= timedelta(0):
            raise ValueError("stale_after must be positive")
        self.stale_after = stale_after
        if isinstance(station_timezone, str):
            station_timezone = ZoneInfo(station_timezone)
        self.station_timezone = station_timezone

    @property
    def stale_after_minutes(self) -> int:
        return int(self.stale_after.total_seconds() // 60)

    def is_stale(self, reading: Optional[LiveConditions], clock: Clock) -> bool:
        return self.is_stale_at(reading, self.now(clock))

    def is_stale_at(self, reading: Optional[LiveConditions], now: datetime) -> bool:
        """Same as :meth:`is_stale` for an instant already read from a clock."""
        if reading is None:
            return True
        reading_time = parse_timestamp(reading.timestamp)
        if reading_time is None:
            logger.debug("Unrecognized station timestamp %r", reading.timestamp)
            return True
        reading_time = reading_time.replace(tzinfo=self.station_timezone)
        return self.age_minutes(reading_time, now) >= self.stale_after_minutes

    @staticmethod
    def age_minutes(reading_time: datetime, now: datetime) -> int:
        # aware values sharing one zone subtract on the wall clock, so compare in UTC
        elapsed = now.astimezone(timezone.utc) - reading_time.astimezone(timezone.utc)
        # truncates toward zero, so readings from the future count as fresh
        return int(elapsed.total_seconds() / 60)

    def now(self, clock: Clock) -> datetime:
        """Read ``clock`` and express the result in station time."""
        if not callable(clock):
            raise TypeError("clock must be a callable returning a datetime")
        now = clock()
        if not isinstance(now, datetime):
            raise TypeError(f"clock returned {type(now).__name__}, expected datetime")
        if now.tzinfo is None:
            return now.replace(tzinfo=self.station_timezone)
        return now.astimezone(self.station_timezone)


__all__ = [
    "Clock",
    "DEFAULT_STALE_AFTER",
    "DEFAULT_STATION_TIMEZONE",
    "StalenessEvaluator",
    "TIMESTAMP_FORMATS",
    "parse_timestamp",
    "system_clock",
]

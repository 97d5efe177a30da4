from __future__ import annotations

import logging
import math
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import tzinfo
from typing import AsyncIterator, Optional, Sequence, Tuple, Type

import httpx

from ..entities import LiveConditions
from ..staleness import Clock, system_clock


COMPASS_POINTS: Sequence[str] = ("N", "NE", "E", "SE", "S", "SW", "W", "NW")

_INTERCARDINALS = {
    "NNE": "NE",
    "ENE": "NE",
    "ESE": "SE",
    "SSE": "SE",
    "SSW": "SW",
    "WSW": "SW",
    "WNW": "NW",
    "NNW": "NW",
}

MS_TO_KNOTS = 1.94384

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class SourceError(RuntimeError):
    """Base live source error."""


class PayloadError(SourceError):
    """Raised when a source answers with data that cannot be parsed."""


@dataclass
class RequestConfig:
    timeout: float = 10.0
    user_agent: str = "spotlive/1.0"


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def degrees_to_cardinal(degrees: float) -> str:
    normalized = float(degrees) % 360
    return COMPASS_POINTS[round_half_up(normalized / 45) % len(COMPASS_POINTS)]


def normalize_direction(raw: str) -> str:
    """Reduce a provider direction token to one of the eight compass letters.

    Numeric tokens are read as bearings in degrees.
    """
    token = raw.strip().upper()
    if token in COMPASS_POINTS:
        return token
    if token in _INTERCARDINALS:
        return _INTERCARDINALS[token]
    try:
        return degrees_to_cardinal(float(token))
    except ValueError:
        pass
    for direction in COMPASS_POINTS:
        if token.startswith(direction):
            return direction
    return "N"


class ConditionsSource:
    """Base class for live station sources fetched over HTTP.

    Subclasses declare which stations they serve, where each station's data
    lives and how the raw payload maps onto :class:`LiveConditions`.
    """

    name = "source"
    fallback = False
    # exceptions from parse() that mean the payload, not the code, is broken
    payload_errors: Tuple[Type[Exception], ...] = (ValueError, IndexError, KeyError)

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        request_config: Optional[RequestConfig] = None,
        clock: Clock = system_clock,
    ) -> None:
        self.client = client
        self.request_config = request_config or RequestConfig()
        self.clock = clock
        self._log = logging.getLogger(self.__class__.__name__)

    @property
    def timeout(self) -> float:
        return self.request_config.timeout

    # Strategy contract --------------------------------------------------
    def matches(self, station_id: int) -> bool:
        raise NotImplementedError

    def url_for(self, station_id: int) -> str:
        raise NotImplementedError

    def parse(self, body: str) -> Optional[LiveConditions]:
        raise NotImplementedError

    async def fetch(self, station_id: int) -> Optional[LiveConditions]:
        body = await self._get_text(self.url_for(station_id))
        try:
            return self.parse(body)
        except PayloadError:
            raise
        except self.payload_errors as exc:
            self._log.error("Failed to parse payload for station %s: %s", station_id, exc)
            raise PayloadError(f"unparsable payload: {exc}") from exc

    def captured_at(self, zone: tzinfo) -> str:
        """Stamp for pages that carry no reading time of their own."""
        return self.clock().astimezone(zone).strftime(TIMESTAMP_FORMAT)

    # HTTP helpers -------------------------------------------------------
    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self.client is not None:
            yield self.client
            return
        async with httpx.AsyncClient(follow_redirects=True) as client:
            yield client

    def _handle_response(self, response: httpx.Response) -> str:
        if not response.is_success:
            self._log.error("Source returned %s for %s", response.status_code, response.url)
            raise SourceError(f"HTTP {response.status_code}")
        body = response.text
        if not body.strip():
            self._log.warning("Source returned an empty body for %s", response.url)
            raise SourceError("empty payload")
        return body

    async def _get_text(self, url: str) -> str:
        headers = {"User-Agent": self.request_config.user_agent}
        try:
            async with self._client() as client:
                response = await client.get(url, headers=headers, timeout=self.request_config.timeout)
        except httpx.TimeoutException as exc:
            self._log.error("Request to %s timed out", url)
            raise SourceError("timeout") from exc
        except httpx.HTTPError as exc:
            self._log.error("Request to %s failed: %s", url, exc)
            raise SourceError("request failed") from exc
        return self._handle_response(response)

    def __repr__(self) -> str:
        role = "fallback" if self.fallback else "primary"
        return f"<{self.__class__.__name__} {self.name} ({role})>"


__all__ = [
    "COMPASS_POINTS",
    "ConditionsSource",
    "MS_TO_KNOTS",
    "PayloadError",
    "RequestConfig",
    "SourceError",
    "TIMESTAMP_FORMAT",
    "degrees_to_cardinal",
    "normalize_direction",
    "round_half_up",
]

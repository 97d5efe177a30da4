from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import Awaitable, Callable, Optional

from ..entities import LiveConditions
from ..sources.base import ConditionsSource, SourceError
from ..sources.registry import ConditionsSourceRegistry
from ..staleness import Clock, StalenessEvaluator, system_clock


FetchCall = Callable[[], Awaitable[Optional[LiveConditions]]]


class LiveConditionsOrchestrator:
    """Pick the live reading to show for a station.

    The first matching primary source is asked first. Its reading is returned
    as long as it is fresh. Otherwise the first matching fallback source is
    asked, and a stale primary reading is kept as the answer of last resort.
    Source failures never reach the caller, they degrade to ``None``.
    """

    DEFAULT_TIMEOUT = 10.0

    def __init__(
        self,
        registry: ConditionsSourceRegistry,
        evaluator: Optional[StalenessEvaluator] = None,
        *,
        clock: Clock = system_clock,
        default_timeout: float = DEFAULT_TIMEOUT,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.registry = registry
        self.evaluator = evaluator or StalenessEvaluator()
        self.clock = clock
        self.default_timeout = default_timeout
        self._log = logger or logging.getLogger(self.__class__.__name__)

    # Public API ---------------------------------------------------------
    async def fetch(self, station_id: int, clock: Optional[Clock] = None) -> Optional[LiveConditions]:
        # read once up front so a broken clock fails on every path
        now = self.evaluator.now(clock or self.clock)

        selection = self.registry.partition(station_id)
        primary = selection.first_primary
        if primary is None:
            return None

        stale_primary: Optional[LiveConditions] = None
        reading = await self._attempt(primary, partial(primary.fetch, station_id))
        if reading is not None:
            if not self.evaluator.is_stale_at(reading, now):
                return reading
            self._log.info("Reading from %s for station %s is stale (%s)", primary.name, station_id, reading.timestamp)
            stale_primary = reading

        fallback = selection.first_fallback
        if fallback is None:
            return stale_primary

        reading = await self._attempt(fallback, partial(fallback.fetch, station_id))
        if reading is not None:
            return reading
        return stale_primary

    # Helpers ------------------------------------------------------------
    async def _attempt(self, source: ConditionsSource, call: FetchCall) -> Optional[LiveConditions]:
        timeout = getattr(source, "timeout", None) or self.default_timeout
        try:
            return await asyncio.wait_for(call(), timeout)
        except asyncio.TimeoutError:
            self._log.warning("Source %s timed out after %ss", source.name, timeout)
        except SourceError as exc:
            self._log.warning("Source %s failed: %s", source.name, exc)
        return None


__all__ = ["LiveConditionsOrchestrator", "system_clock"]

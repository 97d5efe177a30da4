"""Live station readings for wind-sport spots."""
from __future__ import annotations

from .entities import LiveConditions
from .services.live_conditions import LiveConditionsOrchestrator
from .sources import ConditionsSource, ConditionsSourceRegistry, SourceError, default_sources
from .staleness import StalenessEvaluator

__all__ = [
    "ConditionsSource",
    "ConditionsSourceRegistry",
    "LiveConditions",
    "LiveConditionsOrchestrator",
    "SourceError",
    "StalenessEvaluator",
    "default_sources",
]

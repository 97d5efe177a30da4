from __future__ import annotations

from typing import List, Optional

import httpx

from ..staleness import Clock, system_clock
from .base import (
    ConditionsSource,
    PayloadError,
    RequestConfig,
    SourceError,
    degrees_to_cardinal,
    normalize_direction,
    round_half_up,
)
from .elmedano import ElMedanoSource
from .holfuy import HolfuySource, MBSource, SvenceleSource
from .kiteriders import KiteridersSource
from .mietkow import MietkowSource
from .puck import PuckSource
from .registry import ConditionsSourceRegistry, SourceSelection
from .scpodo import ScpodoSource
from .tarifa import TarifaArteVidaSource
from .turawa import TurawaSource
from .wiatrkadyny import WiatrKadynySource


def default_sources(
    client: Optional[httpx.AsyncClient] = None,
    request_config: Optional[RequestConfig] = None,
    clock: Optional[Clock] = None,
) -> List[ConditionsSource]:
    """All known sources in registration order."""
    classes = (
        WiatrKadynySource,
        KiteridersSource,
        ScpodoSource,
        TurawaSource,
        PuckSource,
        MBSource,
        SvenceleSource,
        MietkowSource,
        ElMedanoSource,
        TarifaArteVidaSource,
    )
    return [cls(client=client, request_config=request_config, clock=clock or system_clock) for cls in classes]


__all__ = [
    "ConditionsSource",
    "ConditionsSourceRegistry",
    "ElMedanoSource",
    "HolfuySource",
    "KiteridersSource",
    "MBSource",
    "MietkowSource",
    "PayloadError",
    "PuckSource",
    "RequestConfig",
    "ScpodoSource",
    "SourceError",
    "SourceSelection",
    "SvenceleSource",
    "TarifaArteVidaSource",
    "TurawaSource",
    "WiatrKadynySource",
    "default_sources",
    "degrees_to_cardinal",
    "normalize_direction",
    "round_half_up",
]

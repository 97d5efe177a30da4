from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple

from .base import ConditionsSource


@dataclass(frozen=True)
class SourceSelection:
    primary: Tuple[ConditionsSource, ...] = ()
    fallback: Tuple[ConditionsSource, ...] = ()

    @property
    def first_primary(self) -> Optional[ConditionsSource]:
        return self.primary[0] if self.primary else None

    @property
    def first_fallback(self) -> Optional[ConditionsSource]:
        return self.fallback[0] if self.fallback else None


class ConditionsSourceRegistry:
    """Ordered collection of live sources.

    Matching only consults each source's ``matches`` predicate, so it never
    triggers network activity.
    """

    def __init__(self, sources: Iterable[ConditionsSource] = ()) -> None:
        self._sources: List[ConditionsSource] = list(sources)

    def register(self, source: ConditionsSource) -> None:
        self._sources.append(source)

    def partition(self, station_id: int) -> SourceSelection:
        matching = [source for source in self._sources if source.matches(station_id)]
        return SourceSelection(
            primary=tuple(source for source in matching if not source.fallback),
            fallback=tuple(source for source in matching if source.fallback),
        )

    def __iter__(self) -> Iterator[ConditionsSource]:
        return iter(self._sources)

    def __len__(self) -> int:
        return len(self._sources)


__all__ = ["ConditionsSourceRegistry", "SourceSelection"]

"""Country-name index over the drinks statistics."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

from .models import DrinkAttrs, StatisticRecord


_LOGGER = logging.getLogger("drinksmap.country_index")


def normalize_country_name(name: str) -> str:
    """Join key shared by both datasets.

    Upper-casing is the only normalization. Names that differ in accents or
    spelling between the boundary and statistics sources stay unmatched.
    """
    return name.upper()


class CountryIndex:
    """Lookup from normalized country name to `DrinkAttrs`, plus the litres maximum."""

    def __init__(self, entries: Mapping[str, DrinkAttrs], max_litres: float) -> None:
        self._entries = MappingProxyType(dict(entries))
        self.max_litres = max_litres

    @classmethod
    def build(cls, records: Iterable[StatisticRecord]) -> CountryIndex:
        entries: dict[str, DrinkAttrs] = {}
        max_litres = 0.0
        for record in records:
            key = normalize_country_name(record.country)
            if key in entries:
                _LOGGER.debug("Duplicate statistics row for %s; keeping the later one", key)
            attrs = DrinkAttrs.from_record(record)
            entries[key] = attrs
            if attrs.litres > max_litres:
                max_litres = attrs.litres
        return cls(entries, max_litres)

    def get(self, name: str) -> DrinkAttrs | None:
        return self._entries.get(normalize_country_name(name))

    def litres_for(self, name: str) -> float:
        """Litres used for colouring; a missing country colours as 0."""
        attrs = self.get(name)
        return attrs.litres if attrs is not None else 0.0

    def keys(self) -> Iterable[str]:
        return self._entries.keys()

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and normalize_country_name(name) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

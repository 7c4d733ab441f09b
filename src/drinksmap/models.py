"""Domain models shared across pipeline modules."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from typing import Any, Mapping


STATISTIC_NUMERIC_FIELDS = (
    "beer_servings",
    "spirit_servings",
    "wine_servings",
    "total_litres_of_pure_alcohol",
)


def _require_str(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Expected non-empty string for '{field_name}'")
    return value.strip()


def coerce_count(value: Any) -> float | None:
    """Coerce a raw numeric field; `None` when it is not a finite non-negative number."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number < 0:
        return None
    return number


@dataclass(frozen=True, slots=True)
class CountryFeature:
    """Named country boundary from the geometry source."""

    name: str
    geometry: Any


@dataclass(frozen=True, slots=True)
class StatisticRecord:
    """One row of the per-country drinks table."""

    country: str
    beer_servings: float
    spirit_servings: float
    wine_servings: float
    total_litres_of_pure_alcohol: float

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> StatisticRecord:
        """Build a record, raising `ValueError` on any field that is not a usable number."""
        country = _require_str(data.get("country"), "country")
        values: dict[str, float] = {}
        for field_name in STATISTIC_NUMERIC_FIELDS:
            number = coerce_count(data.get(field_name))
            if number is None:
                raise ValueError(
                    f"Expected non-negative number for '{field_name}' of '{country}', "
                    f"got {data.get(field_name)!r}"
                )
            values[field_name] = number
        return cls(country=country, **values)


@dataclass(frozen=True, slots=True)
class DrinkAttrs:
    """Per-country values carried by the country index."""

    litres: float
    beer: float
    spirit: float
    wine: float

    @classmethod
    def from_record(cls, record: StatisticRecord) -> DrinkAttrs:
        return cls(
            litres=record.total_litres_of_pure_alcohol,
            beer=record.beer_servings,
            spirit=record.spirit_servings,
            wine=record.wine_servings,
        )


@dataclass(frozen=True, slots=True)
class ShapeStyle:
    """Stroke and opacity of a drawn country."""

    opacity: float
    stroke: str
    stroke_width: float


class ShapeState(str, enum.Enum):
    NORMAL = "normal"
    HOVERED = "hovered"


@dataclass(slots=True)
class DrawnShape:
    """Rendered representation of one country feature."""

    name: str
    geometry: Any
    fill: str
    style: ShapeStyle
    state: ShapeState = ShapeState.NORMAL
    z_order: int = 0


@dataclass(frozen=True, slots=True)
class TooltipContent:
    title: str
    lines: tuple[str, ...]
    available: bool

    @property
    def text(self) -> str:
        return "\n".join((self.title, *self.lines))


@dataclass(slots=True)
class TooltipState:
    visible: bool = False
    content: TooltipContent | None = None
    position: tuple[float, float] | None = None


@dataclass(slots=True)
class HoverFocus:
    """The single hovered shape and the tooltip that goes with it."""

    focus: str | None = None
    tooltip: TooltipState = field(default_factory=TooltipState)

    @property
    def is_idle(self) -> bool:
        return self.focus is None

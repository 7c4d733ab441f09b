"""Key-based join of country features onto drawn shapes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Iterator, Sequence

from .country_index import CountryIndex
from .encoder import ColorEncoder
from .models import CountryFeature, DrawnShape, ShapeState, ShapeStyle


_LOGGER = logging.getLogger("drinksmap.binder")

ProjectFn = Callable[[Any], Any]


@dataclass(frozen=True, slots=True)
class JoinResult:
    entered: tuple[str, ...] = ()
    updated: tuple[str, ...] = ()
    exited: tuple[str, ...] = ()


class ShapeLayer:
    """Drawn shapes keyed by country name, iterated in draw order."""

    def __init__(self, base_style: ShapeStyle) -> None:
        self.base_style = base_style
        self._shapes: dict[str, DrawnShape] = {}

    def join(
        self,
        features: Iterable[CountryFeature],
        *,
        encoder: ColorEncoder,
        index: CountryIndex,
        projector: ProjectFn,
    ) -> JoinResult:
        """Enter new names, update existing ones in place, remove names no longer present."""
        incoming = _project_by_name(features, projector)
        entered: list[str] = []
        updated: list[str] = []
        for name, geometry in incoming.items():
            fill = encoder.encode(index.litres_for(name))
            shape = self._shapes.get(name)
            if shape is None:
                self._shapes[name] = DrawnShape(
                    name=name,
                    geometry=geometry,
                    fill=fill,
                    style=self.base_style,
                    state=ShapeState.NORMAL,
                    z_order=len(self._shapes),
                )
                entered.append(name)
            else:
                shape.geometry = geometry
                shape.fill = fill
                updated.append(name)
        exited = [name for name in self._shapes if name not in incoming]
        for name in exited:
            del self._shapes[name]
        if exited:
            self._renumber(list(self))
        return JoinResult(entered=tuple(entered), updated=tuple(updated), exited=tuple(exited))

    def get(self, name: str) -> DrawnShape | None:
        return self._shapes.get(name)

    def raise_shape(self, name: str) -> bool:
        shape = self._shapes.get(name)
        if shape is None:
            return False
        if shape.z_order != len(self._shapes) - 1:
            self._renumber([other for other in self if other is not shape] + [shape])
        return True

    def names(self) -> tuple[str, ...]:
        return tuple(shape.name for shape in self)

    def __contains__(self, name: object) -> bool:
        return name in self._shapes

    def __iter__(self) -> Iterator[DrawnShape]:
        return iter(sorted(self._shapes.values(), key=lambda shape: shape.z_order))

    def __len__(self) -> int:
        return len(self._shapes)

    def _renumber(self, ordered: Sequence[DrawnShape]) -> None:
        """Z orders stay dense in `0..len(layer) - 1`."""
        for z, shape in enumerate(ordered):
            shape.z_order = z


def bind(
    features: Sequence[CountryFeature],
    encoder: ColorEncoder,
    index: CountryIndex,
    *,
    projector: ProjectFn,
    base_style: ShapeStyle,
) -> ShapeLayer:
    """Create the shape layer for the initial, one-off render."""
    layer = ShapeLayer(base_style)
    result = layer.join(features, encoder=encoder, index=index, projector=projector)
    missing = sum(1 for name in result.entered if name not in index)
    _LOGGER.info(
        "Bound %d shapes (%d with statistics, %d without)",
        len(result.entered),
        len(result.entered) - missing,
        missing,
    )
    return layer


def _project_by_name(features: Iterable[CountryFeature], projector: ProjectFn) -> dict[str, Any]:
    """Boundaries arrive dissolved per name from the loader; a repeated name keeps the later one."""
    out: dict[str, Any] = {}
    for feature in features:
        if feature.name in out:
            _LOGGER.warning("Duplicate feature name %s; keeping the later boundary", feature.name)
        out[feature.name] = projector(feature.geometry)
    return out

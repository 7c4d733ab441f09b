"""Natural Earth projection fitted to the drawing canvas."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from .config import CanvasConfig, ProjectionConfig


class Projector:
    """Maps lon/lat geometry to canvas coordinates (origin top-left, y down).

    `crs` projects onto a unit sphere by default; `scale` converts those units
    into canvas pixels and the result is centred on the canvas. Longitude and
    latitude are read on the geographic CRS underlying `crs`, so a unit sphere
    target is never paired with an Earth ellipsoid source.
    """

    def __init__(self, *, crs: str, scale: float, width: float, height: float) -> None:
        self.crs = crs
        self.scale = float(scale)
        self.translate = (float(width) / 2.0, float(height) / 2.0)
        self._transformer = _build_transformer(crs)

    @classmethod
    def from_config(cls, projection: ProjectionConfig, canvas: CanvasConfig) -> Projector:
        return cls(
            crs=projection.crs,
            scale=projection.scale,
            width=canvas.width,
            height=canvas.height,
        )

    def project_point(self, lon: float, lat: float) -> tuple[float, float]:
        x, y = self._to_canvas(float(lon), float(lat))
        return (float(x), float(y))

    def __call__(self, geometry: Any) -> Any:
        if geometry is None or bool(getattr(geometry, "is_empty", False)):
            return geometry
        shapely_transform = _require_shapely_transform()
        return shapely_transform(self._to_canvas, geometry)

    def _to_canvas(self, lon: Any, lat: Any, z: Any = None) -> tuple[Any, Any]:
        x, y = self._transformer.transform(lon, lat)
        tx, ty = self.translate
        return (tx + self.scale * x, ty - self.scale * y)


@lru_cache(maxsize=8)
def _build_transformer(crs: str) -> Any:
    try:
        from pyproj import CRS, Transformer
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("pyproj is required for map projection") from exc
    target = CRS.from_user_input(crs)
    source = target.geodetic_crs
    if source is None:
        raise ValueError(f"Projection '{crs}' has no geographic base CRS")
    return Transformer.from_crs(source, target, always_xy=True)


def _require_shapely_transform() -> Any:
    try:
        from shapely.ops import transform
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("shapely is required for geometry projection") from exc
    return transform

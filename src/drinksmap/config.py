"""Typed configuration loader for `config.yaml`."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, cast

import yaml

from .models import ShapeStyle
from .util import is_url


_EASINGS = {"linear", "sqrt", "cubic"}
_EMPTY: Mapping[str, Any] = {}


def _mapping(value: Any, field_name: str) -> Mapping[str, Any]:
    if value is None:
        return _EMPTY
    if not isinstance(value, Mapping):
        raise ValueError(f"Expected mapping for '{field_name}'")
    return cast(Mapping[str, Any], value)


def _str(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Expected non-empty string for '{field_name}'")
    return value.strip()


def _int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Expected integer for '{field_name}'")
    return value


def _float(value: Any, field_name: str) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    raise ValueError(f"Expected float for '{field_name}'")


def _unit_float(value: Any, field_name: str) -> float:
    number = _float(value, field_name)
    if number < 0.0 or number > 1.0:
        raise ValueError(f"'{field_name}' must be between 0 and 1")
    return number


def _location_from_cfg(value: Any, field_name: str, root_dir: Path) -> str:
    """Resolve a local path against the config directory; URLs pass through."""
    raw = _str(value, field_name)
    if is_url(raw):
        return raw
    p = Path(raw)
    return str(p if p.is_absolute() else root_dir / p)


def _path_from_cfg(value: Any, field_name: str, root_dir: Path) -> Path:
    raw = _str(value, field_name)
    p = Path(raw)
    return p if p.is_absolute() else root_dir / p


@dataclass(frozen=True, slots=True)
class PathsConfig:
    geometry: str
    statistics: str
    output_dir: Path
    logs_dir: Path

    @property
    def build_directories(self) -> tuple[Path, ...]:
        return (self.output_dir, self.logs_dir)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], root_dir: Path) -> PathsConfig:
        return cls(
            geometry=_location_from_cfg(raw.get("geometry"), "paths.geometry", root_dir),
            statistics=_location_from_cfg(raw.get("statistics"), "paths.statistics", root_dir),
            output_dir=_path_from_cfg(raw.get("output_dir", "build"), "paths.output_dir", root_dir),
            logs_dir=_path_from_cfg(raw.get("logs_dir", "build/logs"), "paths.logs_dir", root_dir),
        )


@dataclass(frozen=True, slots=True)
class SourcesConfig:
    request_timeout_s: int
    user_agent: str
    name_column: str | None

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> SourcesConfig:
        request_timeout_s = _int(raw.get("request_timeout_s", 30), "sources.request_timeout_s")
        if request_timeout_s <= 0:
            raise ValueError("sources.request_timeout_s must be > 0")
        name_column_raw = raw.get("name_column")
        return cls(
            request_timeout_s=request_timeout_s,
            user_agent=_str(raw.get("user_agent", "drinks-map/0.1"), "sources.user_agent"),
            name_column=(
                _str(name_column_raw, "sources.name_column") if name_column_raw is not None else None
            ),
        )


@dataclass(frozen=True, slots=True)
class CanvasConfig:
    width: int
    height: int
    padding: int
    dpi: int
    background: str
    format: str

    @property
    def view_box(self) -> tuple[float, float, float, float]:
        """(min_x, min_y, width, height) of the drawing area including padding."""
        return (
            float(-self.padding),
            float(-self.padding),
            float(self.width + 2 * self.padding),
            float(self.height + 2 * self.padding),
        )

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> CanvasConfig:
        width = _int(raw.get("width", 960), "canvas.width")
        height = _int(raw.get("height", 460), "canvas.height")
        padding = _int(raw.get("padding", 20), "canvas.padding")
        dpi = _int(raw.get("dpi", 100), "canvas.dpi")
        if width <= 0 or height <= 0:
            raise ValueError("canvas.width and canvas.height must be > 0")
        if padding < 0:
            raise ValueError("canvas.padding must be >= 0")
        if dpi <= 0:
            raise ValueError("canvas.dpi must be > 0")
        fmt = _str(raw.get("format", "png"), "canvas.format").casefold()
        allowed = {"png", "svg", "pdf"}
        if fmt not in allowed:
            raise ValueError("canvas.format must be one of: " + ", ".join(sorted(allowed)))
        return cls(
            width=width,
            height=height,
            padding=padding,
            dpi=dpi,
            background=_str(raw.get("background", "white"), "canvas.background"),
            format=fmt,
        )


@dataclass(frozen=True, slots=True)
class ProjectionConfig:
    crs: str
    scale: float

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> ProjectionConfig:
        scale = _float(raw.get("scale", 175.295), "projection.scale")
        if scale <= 0:
            raise ValueError("projection.scale must be > 0")
        return cls(
            crs=_str(raw.get("crs", "+proj=natearth +R=1 +no_defs"), "projection.crs"),
            scale=scale,
        )


@dataclass(frozen=True, slots=True)
class ColorConfig:
    ramp: str
    range_min: float
    range_max: float

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> ColorConfig:
        range_min = _unit_float(raw.get("range_min", 0.1), "color.range_min")
        range_max = _unit_float(raw.get("range_max", 1.0), "color.range_max")
        if range_min > range_max:
            raise ValueError("color.range_min cannot be greater than color.range_max")
        return cls(
            ramp=_str(raw.get("ramp", "BuGn"), "color.ramp"),
            range_min=range_min,
            range_max=range_max,
        )


def _style_from_mapping(
    raw: Mapping[str, Any],
    field_name: str,
    *,
    default: ShapeStyle,
) -> ShapeStyle:
    stroke_width = _float(raw.get("stroke_width", default.stroke_width), f"{field_name}.stroke_width")
    if stroke_width < 0:
        raise ValueError(f"{field_name}.stroke_width must be >= 0")
    return ShapeStyle(
        opacity=_unit_float(raw.get("opacity", default.opacity), f"{field_name}.opacity"),
        stroke=_str(raw.get("stroke", default.stroke), f"{field_name}.stroke"),
        stroke_width=stroke_width,
    )


BASE_STYLE = ShapeStyle(opacity=0.8, stroke="white", stroke_width=0.5)
HOVER_STYLE = ShapeStyle(opacity=1.0, stroke="orange", stroke_width=1.5)


@dataclass(frozen=True, slots=True)
class StyleConfig:
    base: ShapeStyle
    hover: ShapeStyle

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> StyleConfig:
        return cls(
            base=_style_from_mapping(
                _mapping(raw.get("base"), "style.base"), "style.base", default=BASE_STYLE
            ),
            hover=_style_from_mapping(
                _mapping(raw.get("hover"), "style.hover"), "style.hover", default=HOVER_STYLE
            ),
        )


@dataclass(frozen=True, slots=True)
class TransitionsConfig:
    enter_ms: int
    enter_ease: str
    leave_ms: int
    leave_ease: str

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> TransitionsConfig:
        enter_ms = _int(raw.get("enter_ms", 400), "transitions.enter_ms")
        leave_ms = _int(raw.get("leave_ms", 500), "transitions.leave_ms")
        if enter_ms < 0 or leave_ms < 0:
            raise ValueError("transitions durations must be >= 0")
        enter_ease = _str(raw.get("enter_ease", "sqrt"), "transitions.enter_ease").casefold()
        leave_ease = _str(raw.get("leave_ease", "cubic"), "transitions.leave_ease").casefold()
        for name, value in (("enter_ease", enter_ease), ("leave_ease", leave_ease)):
            if value not in _EASINGS:
                raise ValueError(
                    f"transitions.{name} must be one of: " + ", ".join(sorted(_EASINGS))
                )
        return cls(enter_ms=enter_ms, enter_ease=enter_ease, leave_ms=leave_ms, leave_ease=leave_ease)


@dataclass(frozen=True, slots=True)
class TooltipConfig:
    offset_px: tuple[float, float]
    background: str
    text_color: str
    alpha: float
    font_size: int

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> TooltipConfig:
        offset_raw = raw.get("offset_px", [10, 10])
        if not isinstance(offset_raw, list) or len(offset_raw) != 2:
            raise ValueError("Expected [dx, dy] list for 'tooltip.offset_px'")
        return cls(
            offset_px=(
                _float(offset_raw[0], "tooltip.offset_px[0]"),
                _float(offset_raw[1], "tooltip.offset_px[1]"),
            ),
            background=_str(raw.get("background", "black"), "tooltip.background"),
            text_color=_str(raw.get("text_color", "white"), "tooltip.text_color"),
            alpha=_unit_float(raw.get("alpha", 0.7), "tooltip.alpha"),
            font_size=_int(raw.get("font_size", 9), "tooltip.font_size"),
        )


@dataclass(frozen=True, slots=True)
class AppConfig:
    source_path: Path
    paths: PathsConfig
    sources: SourcesConfig
    canvas: CanvasConfig
    projection: ProjectionConfig
    color: ColorConfig
    style: StyleConfig
    transitions: TransitionsConfig
    tooltip: TooltipConfig

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], source_path: Path) -> AppConfig:
        root_dir = source_path.parent.resolve()
        return cls(
            source_path=source_path.resolve(),
            paths=PathsConfig.from_mapping(_mapping(raw.get("paths"), "paths"), root_dir),
            sources=SourcesConfig.from_mapping(_mapping(raw.get("sources"), "sources")),
            canvas=CanvasConfig.from_mapping(_mapping(raw.get("canvas"), "canvas")),
            projection=ProjectionConfig.from_mapping(_mapping(raw.get("projection"), "projection")),
            color=ColorConfig.from_mapping(_mapping(raw.get("color"), "color")),
            style=StyleConfig.from_mapping(_mapping(raw.get("style"), "style")),
            transitions=TransitionsConfig.from_mapping(
                _mapping(raw.get("transitions"), "transitions")
            ),
            tooltip=TooltipConfig.from_mapping(_mapping(raw.get("tooltip"), "tooltip")),
        )


def load_config(path: str | Path) -> AppConfig:
    """Load and validate the YAML config file into typed settings."""
    cfg_path = Path(path).resolve()
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)
    if not isinstance(raw, Mapping):
        raise ValueError("Top-level config must be a YAML mapping")
    return AppConfig.from_mapping(cast(Mapping[str, Any], raw), cfg_path)

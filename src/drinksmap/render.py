"""Matplotlib rendering surface: static export and interactive hover viewer."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Sequence

from .binder import ShapeLayer
from .config import AppConfig, CanvasConfig, TooltipConfig
from .models import DrawnShape, TooltipContent
from .pipeline import ChoroplethMap, load_choropleth
from .util import format_name_list


_LOGGER = logging.getLogger("drinksmap.render")

_FRAME_INTERVAL_MS = 16


@dataclass(slots=True)
class RenderReport:
    output_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    infos: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)

    def add_info(self, msg: str) -> None:
        self.infos.append(msg)


class MapRenderer:
    """Draws a shape layer onto matplotlib axes laid out like an SVG viewBox."""

    def __init__(self, canvas: CanvasConfig) -> None:
        self.canvas = canvas

    def create_figure(self, plt: Any) -> tuple[Any, Any]:
        _, _, box_w, box_h = self.canvas.view_box
        dpi = self.canvas.dpi
        fig = plt.figure(figsize=(box_w / dpi, box_h / dpi), dpi=dpi)
        ax = fig.add_axes((0.0, 0.0, 1.0, 1.0))
        self._configure_axes(fig, ax)
        return (fig, ax)

    def draw_layer(self, ax: Any, layer: ShapeLayer) -> dict[str, Any]:
        PathPatch = _require_path_patch()
        patches: dict[str, Any] = {}
        for shape in layer:
            path = geometry_to_path(shape.geometry)
            if path is None:
                _LOGGER.debug("Skipping %s: no drawable rings", shape.name)
                continue
            patch = PathPatch(path, joinstyle="round")
            ax.add_patch(patch)
            patches[shape.name] = patch
            self.apply_shape_style(patch, shape)
        return patches

    def apply_shape_style(self, patch: Any, shape: DrawnShape) -> None:
        patch.set_facecolor(shape.fill)
        patch.set_edgecolor(shape.style.stroke)
        patch.set_linewidth(self.px_to_points(shape.style.stroke_width))
        patch.set_alpha(shape.style.opacity)
        patch.set_zorder(shape.z_order + 1)

    def px_to_points(self, px: float) -> float:
        return px * 72.0 / self.canvas.dpi

    def render(self, layer: ShapeLayer, output_path: Path) -> list[str]:
        """Write the layer to `output_path`; returns names of shapes with nothing to draw."""
        plt = _require_pyplot(interactive=False)
        fig, ax = self.create_figure(plt)
        try:
            patches = self.draw_layer(ax, layer)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            fig.savefig(
                output_path,
                dpi=self.canvas.dpi,
                format=self.canvas.format,
                transparent=self.canvas.background.casefold() == "transparent",
            )
            return [shape.name for shape in layer if shape.name not in patches]
        finally:
            plt.close(fig)

    def _configure_axes(self, fig: Any, ax: Any) -> None:
        min_x, min_y, box_w, box_h = self.canvas.view_box
        ax.set_xlim(min_x, min_x + box_w)
        ax.set_ylim(min_y + box_h, min_y)
        ax.set_aspect("equal", adjustable="datalim")
        ax.set_axis_off()
        background = self.canvas.background
        if background.casefold() == "transparent":
            fig.patch.set_alpha(0.0)
            ax.set_facecolor((1.0, 1.0, 1.0, 0.0))
        else:
            fig.patch.set_facecolor(background)
            ax.set_facecolor(background)


class MatplotlibTooltip:
    """Floating annotation used as the tooltip surface."""

    def __init__(self, ax: Any, cfg: TooltipConfig) -> None:
        self._annotation = ax.annotate(
            "",
            xy=(0.0, 0.0),
            xycoords="data",
            ha="left",
            va="top",
            fontsize=cfg.font_size,
            color=cfg.text_color,
            bbox={
                "boxstyle": "round,pad=0.6",
                "facecolor": cfg.background,
                "edgecolor": "none",
                "alpha": cfg.alpha,
            },
            zorder=10_000,
            annotation_clip=False,
        )
        self._annotation.set_visible(False)

    @property
    def artist(self) -> Any:
        return self._annotation

    def show(self, content: TooltipContent, position: tuple[float, float] | None) -> None:
        self._annotation.set_text(content.text)
        if position is None:
            # Placed on the first pointer move.
            return
        self._annotation.xy = position
        self._annotation.set_visible(True)

    def hide(self) -> None:
        self._annotation.set_visible(False)


class InteractiveMapView:
    """Routes matplotlib pointer events into the interaction controller."""

    def __init__(
        self,
        choropleth: ChoroplethMap,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.choropleth = choropleth
        self.renderer = MapRenderer(choropleth.cfg.canvas)
        self.clock = clock
        self._plt = _require_pyplot(interactive=True)
        self.fig, self.ax = self.renderer.create_figure(self._plt)
        self.patches = self.renderer.draw_layer(self.ax, choropleth.layer)
        self.tooltip = MatplotlibTooltip(self.ax, choropleth.cfg.tooltip)
        choropleth.controller.tooltip_surface = self.tooltip
        self._timer = self.fig.canvas.new_timer(interval=_FRAME_INTERVAL_MS)
        self._timer.add_callback(self._on_frame)
        self._timer_running = False
        self.fig.canvas.mpl_connect("motion_notify_event", self._on_motion)
        self.fig.canvas.mpl_connect("axes_leave_event", self._on_pointer_out)
        self.fig.canvas.mpl_connect("figure_leave_event", self._on_pointer_out)

    def show(self) -> None:
        self._plt.show()

    def hit_test(self, x: float, y: float) -> str | None:
        """Topmost shape containing the canvas point, holes excluded."""
        contains_xy = _require_contains_xy()
        for shape in reversed(list(self.choropleth.layer)):
            if shape.name not in self.patches:
                continue
            if bool(contains_xy(shape.geometry, x, y)):
                return shape.name
        return None

    def _on_motion(self, event: Any) -> None:
        controller = self.choropleth.controller
        now = self.clock()
        hit = None
        if event.inaxes is self.ax and event.xdata is not None and event.ydata is not None:
            hit = self.hit_test(float(event.xdata), float(event.ydata))
        if hit != controller.focus:
            if controller.focus is not None:
                controller.pointer_leave(controller.focus, now)
            if hit is not None:
                controller.pointer_enter(hit, now)
        if hit is not None:
            controller.pointer_move((float(event.xdata), float(event.ydata)))
        self._sync(now)

    def _on_pointer_out(self, event: Any) -> None:
        controller = self.choropleth.controller
        if controller.focus is None:
            return
        now = self.clock()
        controller.pointer_leave(controller.focus, now)
        self._sync(now)

    def _on_frame(self) -> None:
        self._sync(self.clock())

    def _sync(self, now: float) -> None:
        running = self.choropleth.controller.tick(now)
        for shape in self.choropleth.layer:
            patch = self.patches.get(shape.name)
            if patch is not None:
                self.renderer.apply_shape_style(patch, shape)
        if running and not self._timer_running:
            self._timer.start()
            self._timer_running = True
        elif not running and self._timer_running:
            self._timer.stop()
            self._timer_running = False
        self.fig.canvas.draw_idle()


def geometry_to_path(geometry: Any) -> Any | None:
    """Compound matplotlib path with holes wound opposite to their shells."""
    Path = _require_mpl_path()
    vertices: list[tuple[float, float]] = []
    codes: list[int] = []
    for ring in _iter_linear_rings(geometry):
        if len(ring) < 4:
            continue
        vertices.extend(ring)
        codes.append(Path.MOVETO)
        codes.extend([Path.LINETO] * (len(ring) - 2))
        codes.append(Path.CLOSEPOLY)
    if not vertices:
        return None
    return Path(vertices, codes)


def _iter_linear_rings(geometry: Any) -> Sequence[Sequence[tuple[float, float]]]:
    if geometry is None or bool(getattr(geometry, "is_empty", False)):
        return []
    geom_type = getattr(geometry, "geom_type", "")
    if geom_type == "Polygon":
        polygon = _require_orient()(geometry, sign=1.0)
        exterior = [(float(x), float(y)) for x, y in polygon.exterior.coords]
        rings: list[Sequence[tuple[float, float]]] = [exterior]
        for interior in polygon.interiors:
            rings.append([(float(x), float(y)) for x, y in interior.coords])
        return rings

    if geom_type in {"MultiPolygon", "GeometryCollection"}:
        rings = []
        for part in geometry.geoms:
            rings.extend(_iter_linear_rings(part))
        return rings

    return []


def run_render(cfg: AppConfig, *, output_path: Path | None = None) -> RenderReport:
    """Load sources, bind and write the static map."""
    target = output_path or cfg.paths.output_dir / f"drinks_map.{cfg.canvas.format}"
    report = RenderReport(output_path=target)
    try:
        choropleth = load_choropleth(cfg)
    except Exception as exc:
        report.add_error(str(exc))
        return report
    report.add_info(
        f"Bound {len(choropleth.layer)} shapes against {len(choropleth.index)} statistic rows "
        f"(max litres {choropleth.index.max_litres:g})"
    )
    try:
        undrawn = MapRenderer(cfg.canvas).render(choropleth.layer, target)
    except Exception as exc:
        report.add_error(f"Failed writing map to {target}: {exc}")
        return report
    if undrawn:
        report.add_warning(
            f"Skipped {len(undrawn)} shapes with no drawable rings: "
            + format_name_list(sorted(undrawn))
        )
    report.add_info(f"Map written to {target}")
    return report


def format_render_lines(report: RenderReport) -> Sequence[str]:
    lines: list[str] = []
    lines.extend(f"[INFO] {msg}" for msg in report.infos)
    lines.extend(f"[WARN] {msg}" for msg in report.warnings)
    lines.extend(f"[ERROR] {msg}" for msg in report.errors)
    return lines


def _require_pyplot(*, interactive: bool) -> Any:
    try:
        import matplotlib

        if not interactive:
            matplotlib.use("Agg", force=False)
        import matplotlib.pyplot as plt
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("matplotlib is required for map rendering") from exc
    return plt


def _require_path_patch() -> Any:
    try:
        from matplotlib.patches import PathPatch
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("matplotlib is required for map rendering") from exc
    return PathPatch


def _require_mpl_path() -> Any:
    try:
        from matplotlib.path import Path
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("matplotlib is required for map rendering") from exc
    return Path


def _require_contains_xy() -> Any:
    try:
        from shapely import contains_xy
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("shapely is required for hit testing") from exc
    return contains_xy


def _require_orient() -> Any:
    try:
        from shapely.geometry.polygon import orient
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("shapely is required for ring orientation") from exc
    return orient

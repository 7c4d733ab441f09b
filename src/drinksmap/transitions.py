"""Eased style transitions for drawn shapes."""

from __future__ import annotations

import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable

from .models import ShapeStyle


Easing = Callable[[float], float]


def ease_linear(t: float) -> float:
    return t


def ease_sqrt(t: float) -> float:
    return math.sqrt(t)


def ease_cubic_in_out(t: float) -> float:
    t *= 2.0
    if t <= 1.0:
        return t * t * t / 2.0
    t -= 2.0
    return (t * t * t + 2.0) / 2.0


EASINGS: dict[str, Easing] = {
    "linear": ease_linear,
    "sqrt": ease_sqrt,
    "cubic": ease_cubic_in_out,
}


def resolve_easing(name: str) -> Easing:
    try:
        return EASINGS[name.casefold()]
    except KeyError as exc:
        raise ValueError(f"Unknown easing '{name}'") from exc


def interpolate_style(start: ShapeStyle, end: ShapeStyle, k: float) -> ShapeStyle:
    if k <= 0.0:
        return start
    if k >= 1.0:
        return end
    return ShapeStyle(
        opacity=start.opacity + (end.opacity - start.opacity) * k,
        stroke=_interpolate_color(start.stroke, end.stroke, k),
        stroke_width=start.stroke_width + (end.stroke_width - start.stroke_width) * k,
    )


@dataclass(frozen=True, slots=True)
class StyleTransition:
    """One shape's move from `start` to `end` over `duration_s`."""

    start: ShapeStyle
    end: ShapeStyle
    started_at: float
    duration_s: float
    easing: Easing

    def progress(self, now: float) -> float:
        if self.duration_s <= 0.0:
            return 1.0
        t = (now - self.started_at) / self.duration_s
        return min(max(t, 0.0), 1.0)

    def style_at(self, now: float) -> ShapeStyle:
        t = self.progress(now)
        return interpolate_style(self.start, self.end, self.easing(t))

    def finished(self, now: float) -> bool:
        return self.progress(now) >= 1.0


def _interpolate_color(start: str, end: str, k: float) -> str:
    if start == end:
        return start
    to_rgb, to_hex = _require_color_helpers()
    r0, g0, b0 = to_rgb(start)
    r1, g1, b1 = to_rgb(end)
    return str(
        to_hex(
            (
                r0 + (r1 - r0) * k,
                g0 + (g1 - g0) * k,
                b0 + (b1 - b0) * k,
            )
        )
    )


@lru_cache(maxsize=1)
def _require_color_helpers() -> tuple[Any, Any]:
    try:
        from matplotlib.colors import to_hex, to_rgb
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("matplotlib is required for colour interpolation") from exc
    return (to_rgb, to_hex)

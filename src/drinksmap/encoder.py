"""Square-root intensity scale feeding a sequential colour ramp."""

from __future__ import annotations

import math
from functools import lru_cache
from typing import Any


class SqrtScale:
    """Maps `[0, domain_max]` onto `[range_min, range_max]` through a square root."""

    def __init__(self, domain_max: float, range_min: float = 0.1, range_max: float = 1.0) -> None:
        if range_min > range_max:
            raise ValueError("range_min cannot be greater than range_max")
        self.domain_max = _sanitize(domain_max)
        self.range_min = float(range_min)
        self.range_max = float(range_max)

    @property
    def collapsed(self) -> bool:
        return self.domain_max <= 0.0

    def __call__(self, value: Any) -> float:
        if self.collapsed:
            return self.range_min
        clamped = min(_sanitize(value), self.domain_max)
        t = math.sqrt(clamped / self.domain_max)
        return self.range_min + (self.range_max - self.range_min) * t


class ColorEncoder:
    """Value to hex colour; pure, memoized per instance."""

    def __init__(self, scale: SqrtScale, ramp: str = "BuGn") -> None:
        self.scale = scale
        self.ramp = ramp
        self._cmap = _resolve_colormap(ramp)
        self._encode_cached = lru_cache(maxsize=1024)(self._encode_uncached)

    @classmethod
    def build(
        cls,
        max_value: float,
        *,
        ramp: str = "BuGn",
        range_min: float = 0.1,
        range_max: float = 1.0,
    ) -> ColorEncoder:
        return cls(SqrtScale(max_value, range_min=range_min, range_max=range_max), ramp=ramp)

    def intensity(self, value: Any) -> float:
        return self.scale(value)

    def encode(self, value: Any) -> str:
        return self._encode_cached(_sanitize(value))

    def _encode_uncached(self, value: float) -> str:
        to_hex = _require_to_hex()
        return str(to_hex(self._cmap(self.scale(value)), keep_alpha=False))


def _sanitize(value: Any) -> float:
    """Invalid or negative input colours as zero."""
    if isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number) or number < 0.0:
        return 0.0
    return number


def _resolve_colormap(name: str) -> Any:
    try:
        from matplotlib import colormaps
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("matplotlib is required for colour ramps") from exc
    try:
        return colormaps[name]
    except KeyError as exc:
        raise ValueError(f"Unknown colour ramp '{name}'") from exc


@lru_cache(maxsize=1)
def _require_to_hex() -> Any:
    try:
        from matplotlib.colors import to_hex
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("matplotlib is required for colour conversion") from exc
    return to_hex

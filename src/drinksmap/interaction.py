"""Hover focus state machine and tooltip content."""

from __future__ import annotations

import logging
from typing import Protocol

from .binder import ShapeLayer
from .config import AppConfig
from .country_index import CountryIndex
from .models import DrinkAttrs, HoverFocus, ShapeState, ShapeStyle, TooltipContent
from .transitions import Easing, StyleTransition, ease_cubic_in_out, ease_sqrt, resolve_easing


_LOGGER = logging.getLogger("drinksmap.interaction")

DATA_NOT_AVAILABLE = "Data not available."


class TooltipSurface(Protocol):
    def show(self, content: TooltipContent, position: tuple[float, float] | None) -> None: ...

    def hide(self) -> None: ...


def format_amount(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def build_tooltip_content(name: str, attrs: DrinkAttrs | None) -> TooltipContent:
    title = f"Country: {name}"
    if attrs is None:
        return TooltipContent(title=title, lines=(DATA_NOT_AVAILABLE,), available=False)
    return TooltipContent(
        title=title,
        lines=(
            f"Total litres pure alcohol: {format_amount(attrs.litres)}",
            f"Beer servings: {format_amount(attrs.beer)}",
            f"Wine servings: {format_amount(attrs.wine)}",
            f"Spirit servings: {format_amount(attrs.spirit)}",
        ),
        available=True,
    )


class InteractionController:
    """Owns the hover focus and drives shape highlighting.

    States are `Idle` (`focus is None`) and `Hovering(name)`. Callers pass the
    current time in seconds; nothing here reads a clock.
    """

    def __init__(
        self,
        layer: ShapeLayer,
        index: CountryIndex,
        *,
        hover_style: ShapeStyle,
        enter_duration_s: float = 0.4,
        enter_easing: Easing = ease_sqrt,
        leave_duration_s: float = 0.5,
        leave_easing: Easing = ease_cubic_in_out,
        tooltip_offset: tuple[float, float] = (10.0, 10.0),
        tooltip_surface: TooltipSurface | None = None,
    ) -> None:
        self.layer = layer
        self.index = index
        self.base_style = layer.base_style
        self.hover_style = hover_style
        self.enter_duration_s = enter_duration_s
        self.enter_easing = enter_easing
        self.leave_duration_s = leave_duration_s
        self.leave_easing = leave_easing
        self.tooltip_offset = tooltip_offset
        self.tooltip_surface = tooltip_surface
        self.hover = HoverFocus()
        self._transitions: dict[str, StyleTransition] = {}

    @classmethod
    def from_config(
        cls,
        cfg: AppConfig,
        layer: ShapeLayer,
        index: CountryIndex,
        *,
        tooltip_surface: TooltipSurface | None = None,
    ) -> InteractionController:
        return cls(
            layer,
            index,
            hover_style=cfg.style.hover,
            enter_duration_s=cfg.transitions.enter_ms / 1000.0,
            enter_easing=resolve_easing(cfg.transitions.enter_ease),
            leave_duration_s=cfg.transitions.leave_ms / 1000.0,
            leave_easing=resolve_easing(cfg.transitions.leave_ease),
            tooltip_offset=cfg.tooltip.offset_px,
            tooltip_surface=tooltip_surface,
        )

    @property
    def focus(self) -> str | None:
        return self.hover.focus

    @property
    def active_transitions(self) -> tuple[str, ...]:
        return tuple(self._transitions)

    def pointer_enter(
        self,
        name: str,
        now: float,
        position: tuple[float, float] | None = None,
    ) -> None:
        shape = self.layer.get(name)
        if shape is None:
            _LOGGER.debug("Ignoring pointer enter on unknown shape %s", name)
            return
        previous = self.hover.focus
        if previous is not None and previous != name:
            self._release(previous, now)

        self.layer.raise_shape(name)
        shape.state = ShapeState.HOVERED
        self._start_transition(name, self.hover_style, now, self.enter_duration_s, self.enter_easing)

        content = build_tooltip_content(name, self.index.get(name))
        self.hover.focus = name
        self.hover.tooltip.visible = True
        self.hover.tooltip.content = content
        if position is not None:
            self.hover.tooltip.position = self._offset(position)
        if self.tooltip_surface is not None:
            self.tooltip_surface.show(content, self.hover.tooltip.position)

    def pointer_move(self, position: tuple[float, float]) -> None:
        if self.hover.focus is None or self.hover.tooltip.content is None:
            return
        self.hover.tooltip.position = self._offset(position)
        if self.tooltip_surface is not None:
            self.tooltip_surface.show(self.hover.tooltip.content, self.hover.tooltip.position)

    def pointer_leave(self, name: str, now: float) -> None:
        if self.hover.focus != name:
            return
        self._release(name, now)

    def tick(self, now: float) -> bool:
        """Apply in-flight transitions; True while any is still running."""
        for name, transition in list(self._transitions.items()):
            shape = self.layer.get(name)
            if shape is None:
                del self._transitions[name]
                continue
            shape.style = transition.style_at(now)
            if transition.finished(now):
                del self._transitions[name]
        return bool(self._transitions)

    def _release(self, name: str, now: float) -> None:
        self.hover.focus = None
        self.hover.tooltip.visible = False
        self.hover.tooltip.content = None
        self.hover.tooltip.position = None
        if self.tooltip_surface is not None:
            self.tooltip_surface.hide()
        shape = self.layer.get(name)
        if shape is None:
            return
        shape.state = ShapeState.NORMAL
        self._start_transition(name, self.base_style, now, self.leave_duration_s, self.leave_easing)

    def _start_transition(
        self,
        name: str,
        target: ShapeStyle,
        now: float,
        duration_s: float,
        easing: Easing,
    ) -> None:
        shape = self.layer.get(name)
        if shape is None:
            return
        in_flight = self._transitions.get(name)
        if in_flight is not None:
            shape.style = in_flight.style_at(now)
        self._transitions[name] = StyleTransition(
            start=shape.style,
            end=target,
            started_at=now,
            duration_s=duration_s,
            easing=easing,
        )
        if duration_s <= 0.0:
            shape.style = target
            del self._transitions[name]

    def _offset(self, position: tuple[float, float]) -> tuple[float, float]:
        dx, dy = self.tooltip_offset
        return (float(position[0]) + dx, float(position[1]) + dy)

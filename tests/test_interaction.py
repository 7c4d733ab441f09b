from __future__ import annotations

import pytest

from drinksmap.binder import bind
from drinksmap.config import BASE_STYLE, HOVER_STYLE
from drinksmap.country_index import CountryIndex
from drinksmap.encoder import ColorEncoder
from drinksmap.interaction import (
    DATA_NOT_AVAILABLE,
    InteractionController,
    build_tooltip_content,
    format_amount,
)
from drinksmap.models import DrinkAttrs, ShapeState

from conftest import identity, make_feature, make_record


class RecordingTooltip:
    def __init__(self):
        self.calls = []

    def show(self, content, position):
        self.calls.append(("show", content, position))

    def hide(self):
        self.calls.append(("hide",))


@pytest.fixture
def controller():
    index = CountryIndex.build(
        [
            make_record("Algeria", beer=25, spirit=0, wine=14, litres=0.7),
            make_record("Namibia", beer=376, spirit=3, wine=1, litres=6.8),
        ]
    )
    layer = bind(
        [make_feature("Algeria"), make_feature("Namibia", 20), make_feature("Wonderland", 40)],
        ColorEncoder.build(index.max_litres),
        index,
        projector=identity,
        base_style=BASE_STYLE,
    )
    return InteractionController(
        layer,
        index,
        hover_style=HOVER_STYLE,
        tooltip_surface=RecordingTooltip(),
    )


def test_initial_state_is_idle(controller):
    assert controller.focus is None
    assert controller.hover.is_idle
    assert not controller.hover.tooltip.visible


def test_enter_highlights_raises_and_shows_tooltip(controller):
    controller.pointer_enter("Algeria", now=0.0)
    assert controller.focus == "Algeria"
    shape = controller.layer.get("Algeria")
    assert shape.state is ShapeState.HOVERED
    assert controller.layer.names()[-1] == "Algeria"
    tooltip = controller.hover.tooltip
    assert tooltip.visible
    assert tooltip.content.available
    assert tooltip.content.title == "Country: Algeria"
    assert "Beer servings: 25" in tooltip.content.lines
    assert "Total litres pure alcohol: 0.7" in tooltip.content.lines

    controller.tick(0.1)
    assert BASE_STYLE.opacity < shape.style.opacity < HOVER_STYLE.opacity
    assert controller.tick(0.4) is False
    assert shape.style == HOVER_STYLE


def test_move_tracks_pointer_with_offset_immediately(controller):
    controller.pointer_enter("Namibia", now=0.0)
    controller.pointer_move((100.0, 50.0))
    assert controller.hover.tooltip.position == (110.0, 60.0)
    controller.pointer_move((101.0, 52.0))
    assert controller.hover.tooltip.position == (111.0, 62.0)
    assert controller.tooltip_surface.calls[-1][2] == (111.0, 62.0)


def test_move_while_idle_is_ignored(controller):
    controller.pointer_move((10.0, 10.0))
    assert controller.hover.tooltip.position is None
    assert controller.tooltip_surface.calls == []


def test_leave_hides_tooltip_and_reverts_style(controller):
    controller.pointer_enter("Algeria", now=0.0)
    controller.tick(1.0)
    controller.pointer_leave("Algeria", now=1.0)
    assert controller.focus is None
    assert not controller.hover.tooltip.visible
    assert controller.tooltip_surface.calls[-1] == ("hide",)
    shape = controller.layer.get("Algeria")
    assert shape.state is ShapeState.NORMAL
    controller.tick(1.25)
    assert BASE_STYLE.opacity < shape.style.opacity < HOVER_STYLE.opacity
    controller.tick(1.5)
    assert shape.style == BASE_STYLE


def test_enter_move_leave_enter_sequence_ends_on_second_shape(controller):
    controller.pointer_enter("Algeria", now=0.0)
    controller.pointer_move((5.0, 5.0))
    controller.pointer_leave("Algeria", now=0.2)
    controller.pointer_enter("Namibia", now=0.3)
    controller.tick(2.0)

    assert controller.focus == "Namibia"
    assert controller.hover.tooltip.content.title == "Country: Namibia"
    assert all("Algeria" not in line for line in controller.hover.tooltip.content.lines)
    assert controller.layer.get("Algeria").style == BASE_STYLE
    assert controller.layer.get("Algeria").state is ShapeState.NORMAL
    assert controller.layer.get("Namibia").style == HOVER_STYLE


def test_missing_statistics_show_not_available(controller):
    controller.pointer_enter("Wonderland", now=0.0)
    content = controller.hover.tooltip.content
    assert content.available is False
    assert content.lines == (DATA_NOT_AVAILABLE,)
    assert not any("0" in line for line in content.lines)


def test_leave_for_other_shape_is_ignored(controller):
    controller.pointer_enter("Algeria", now=0.0)
    controller.pointer_leave("Namibia", now=0.1)
    assert controller.focus == "Algeria"
    assert controller.hover.tooltip.visible


def test_leave_while_idle_is_ignored(controller):
    controller.pointer_leave("Algeria", now=0.0)
    assert controller.focus is None
    assert controller.active_transitions == ()


def test_unknown_shape_events_are_ignored(controller):
    controller.pointer_enter("Narnia", now=0.0)
    assert controller.focus is None
    controller.pointer_enter("Algeria", now=0.0)
    controller.pointer_enter("Narnia", now=0.1)
    assert controller.focus == "Algeria"


def test_enter_without_leave_releases_previous_focus(controller):
    controller.pointer_enter("Algeria", now=0.0)
    controller.pointer_enter("Namibia", now=0.1)
    assert controller.focus == "Namibia"
    hovered = [shape.name for shape in controller.layer if shape.state is ShapeState.HOVERED]
    assert hovered == ["Namibia"]
    controller.tick(5.0)
    assert controller.layer.get("Algeria").style == BASE_STYLE


def test_new_transition_supersedes_in_flight_one(controller):
    controller.pointer_enter("Algeria", now=0.0)
    controller.pointer_leave("Algeria", now=0.1)
    shape = controller.layer.get("Algeria")
    midway = shape.style
    assert BASE_STYLE.opacity < midway.opacity < HOVER_STYLE.opacity

    controller.tick(0.1)
    assert shape.style.opacity == pytest.approx(midway.opacity)
    controller.tick(0.6)
    assert shape.style == BASE_STYLE
    assert controller.active_transitions == ()


def test_transitions_of_different_shapes_are_independent(controller):
    controller.pointer_enter("Algeria", now=0.0)
    controller.pointer_leave("Algeria", now=0.4)
    controller.pointer_enter("Namibia", now=0.5)
    assert set(controller.active_transitions) == {"Algeria", "Namibia"}
    controller.tick(1.0)
    assert controller.layer.get("Namibia").style == HOVER_STYLE
    assert controller.layer.get("Algeria").style == BASE_STYLE


def test_enter_with_position_places_tooltip(controller):
    controller.pointer_enter("Algeria", now=0.0, position=(1.0, 2.0))
    assert controller.hover.tooltip.position == (11.0, 12.0)
    assert controller.tooltip_surface.calls[-1][0] == "show"


def test_tooltip_content_formatting():
    content = build_tooltip_content("France", DrinkAttrs(litres=11.8, beer=127, spirit=151, wine=370))
    assert content.text.splitlines() == [
        "Country: France",
        "Total litres pure alcohol: 11.8",
        "Beer servings: 127",
        "Wine servings: 370",
        "Spirit servings: 151",
    ]
    assert format_amount(0.0) == "0"

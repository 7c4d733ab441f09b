from __future__ import annotations

from drinksmap.binder import ShapeLayer, bind
from drinksmap.config import BASE_STYLE
from drinksmap.country_index import CountryIndex
from drinksmap.encoder import ColorEncoder
from drinksmap.models import CountryFeature, ShapeState

from conftest import identity, make_feature, make_record


def _bind(features, records):
    index = CountryIndex.build(records)
    encoder = ColorEncoder.build(index.max_litres)
    layer = bind(features, encoder, index, projector=identity, base_style=BASE_STYLE)
    return layer, encoder, index


def test_fill_comes_from_statistic_or_zero():
    layer, encoder, _ = _bind(
        [make_feature("France"), make_feature("Atlantis", 20)],
        [make_record("FRANCE", litres=11.8), make_record("Belarus", litres=14.4)],
    )
    assert layer.get("France").fill == encoder.encode(11.8)
    assert layer.get("Atlantis").fill == encoder.encode(0)


def test_shapes_start_in_normal_state_with_base_style():
    layer, _, _ = _bind([make_feature("Peru"), make_feature("Chile", 20)], [])
    assert len(layer) == 2
    for shape in layer:
        assert shape.state is ShapeState.NORMAL
        assert shape.style == BASE_STYLE
    assert layer.names() == ("Peru", "Chile")


def test_projector_is_applied_to_each_boundary():
    calls = []

    def project(geometry):
        calls.append(geometry)
        return "projected"

    index = CountryIndex.build([])
    layer = bind(
        [make_feature("Peru")],
        ColorEncoder.build(0),
        index,
        projector=project,
        base_style=BASE_STYLE,
    )
    assert len(calls) == 1
    assert layer.get("Peru").geometry == "projected"


def test_join_is_keyed_by_name_not_position():
    index = CountryIndex.build([make_record("Peru", litres=6.1), make_record("Chile", litres=7.6)])
    encoder = ColorEncoder.build(index.max_litres)
    layer = ShapeLayer(BASE_STYLE)
    first = layer.join(
        [make_feature("Peru"), make_feature("Chile", 20)],
        encoder=encoder,
        index=index,
        projector=identity,
    )
    assert first.entered == ("Peru", "Chile")
    peru = layer.get("Peru")

    second = layer.join(
        [make_feature("Bolivia", 40), make_feature("Peru", 5)],
        encoder=encoder,
        index=index,
        projector=identity,
    )
    assert second.entered == ("Bolivia",)
    assert second.updated == ("Peru",)
    assert second.exited == ("Chile",)
    assert layer.get("Peru") is peru
    assert layer.get("Peru").geometry.bounds[0] == 5
    assert "Chile" not in layer


def test_raise_shape_moves_to_top_of_draw_order():
    layer, _, _ = _bind(
        [make_feature("A"), make_feature("B", 20), make_feature("C", 40)],
        [],
    )
    assert layer.raise_shape("A")
    assert layer.names() == ("B", "C", "A")
    assert layer.raise_shape("A")
    assert layer.names() == ("B", "C", "A")
    assert not layer.raise_shape("Missing")


def test_repeated_feature_name_keeps_later_boundary():
    layer, _, _ = _bind(
        [make_feature("Norway"), make_feature("Norway", 50)],
        [],
    )
    assert len(layer) == 1
    assert layer.get("Norway").geometry.bounds[0] == 50


def test_repeated_raises_keep_z_order_dense():
    layer, _, _ = _bind([make_feature("A"), make_feature("B", 20), make_feature("C", 40)], [])
    for _ in range(500):
        layer.raise_shape("A")
        layer.raise_shape("B")
    assert sorted(shape.z_order for shape in layer) == [0, 1, 2]
    assert layer.names() == ("C", "A", "B")


def test_exits_close_gaps_in_z_order():
    index = CountryIndex.build([])
    encoder = ColorEncoder.build(0)
    layer = ShapeLayer(BASE_STYLE)
    layer.join(
        [make_feature("A"), make_feature("B", 20), make_feature("C", 40)],
        encoder=encoder,
        index=index,
        projector=identity,
    )
    layer.join(
        [make_feature("C", 40), make_feature("D", 60)],
        encoder=encoder,
        index=index,
        projector=identity,
    )
    assert layer.names() == ("C", "D")
    assert [shape.z_order for shape in layer] == [0, 1]


def test_feature_name_keeps_source_spelling():
    layer, encoder, _ = _bind(
        [CountryFeature(name="algeria", geometry=make_feature("x").geometry)],
        [make_record("ALGERIA", litres=0.7)],
    )
    assert layer.get("algeria").fill == encoder.encode(0.7)
    assert layer.get("ALGERIA") is None

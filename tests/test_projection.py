from __future__ import annotations

import pytest
from shapely.geometry import box

from drinksmap.projection import Projector


@pytest.fixture
def projector():
    return Projector(crs="+proj=natearth +R=1 +no_defs", scale=175.295, width=960, height=460)


def test_origin_maps_to_canvas_centre(projector):
    x, y = projector.project_point(0.0, 0.0)
    assert x == pytest.approx(480.0)
    assert y == pytest.approx(230.0)


def test_north_is_up_and_east_is_right(projector):
    _, north_y = projector.project_point(0.0, 45.0)
    _, south_y = projector.project_point(0.0, -45.0)
    east_x, _ = projector.project_point(90.0, 0.0)
    assert north_y < 230.0 < south_y
    assert east_x > 480.0


def test_world_spans_the_canvas_width(projector):
    west, _ = projector.project_point(-180.0, 0.0)
    east, _ = projector.project_point(180.0, 0.0)
    _, top = projector.project_point(0.0, 90.0)
    _, bottom = projector.project_point(0.0, -90.0)
    assert west < 480.0 < east
    assert east - west == pytest.approx(960.0, rel=0.01)
    assert top < 230.0 < bottom


def test_geometry_projection_keeps_type(projector):
    projected = projector(box(-10, -10, 10, 10))
    assert projected.geom_type == "Polygon"
    min_x, min_y, max_x, max_y = projected.bounds
    assert min_x < 480.0 < max_x
    assert min_y < 230.0 < max_y


def test_empty_and_missing_geometry_pass_through(projector):
    assert projector(None) is None


def test_default_config_projection_builds(make_config):
    cfg = make_config()
    projector = Projector.from_config(cfg.projection, cfg.canvas)
    x, y = projector.project_point(0.0, 0.0)
    assert x == pytest.approx(cfg.canvas.width / 2)
    assert y == pytest.approx(cfg.canvas.height / 2)


def test_earth_based_projection_is_accepted():
    projector = Projector(crs="EPSG:3857", scale=1e-5, width=960, height=460)
    x, y = projector.project_point(0.0, 0.0)
    assert x == pytest.approx(480.0)
    assert y == pytest.approx(230.0)
    east_x, _ = projector.project_point(10.0, 0.0)
    assert east_x > 480.0

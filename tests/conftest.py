from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from shapely.geometry import box

from drinksmap.config import AppConfig
from drinksmap.models import CountryFeature, StatisticRecord


def identity(geometry: Any) -> Any:
    return geometry


def make_record(
    country: str,
    *,
    beer: float = 0,
    spirit: float = 0,
    wine: float = 0,
    litres: float = 0,
) -> StatisticRecord:
    return StatisticRecord(
        country=country,
        beer_servings=float(beer),
        spirit_servings=float(spirit),
        wine_servings=float(wine),
        total_litres_of_pure_alcohol=float(litres),
    )


def make_feature(name: str, x: float = 0.0, y: float = 0.0, size: float = 10.0) -> CountryFeature:
    return CountryFeature(name=name, geometry=box(x, y, x + size, y + size))


def write_geojson(path: Path, features: list[tuple[str | None, list[list[float]]]]) -> Path:
    payload = {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {"name": name},
                "geometry": {"type": "Polygon", "coordinates": [ring]},
            }
            for name, ring in features
        ],
    }
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def square_ring(x: float, y: float, size: float = 5.0) -> list[list[float]]:
    return [[x, y], [x + size, y], [x + size, y + size], [x, y + size], [x, y]]


@pytest.fixture
def make_config(tmp_path: Path):
    def _make(extra: dict[str, Any] | None = None, **paths: str) -> AppConfig:
        raw: dict[str, Any] = {
            "paths": {
                "geometry": paths.get("geometry", "countries.geojson"),
                "statistics": paths.get("statistics", "drinks.json"),
                "output_dir": "build",
                "logs_dir": "build/logs",
            }
        }
        if extra:
            raw.update(extra)
        return AppConfig.from_mapping(raw, tmp_path / "config.yaml")

    return _make

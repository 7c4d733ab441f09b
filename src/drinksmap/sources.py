"""Geometry and statistics source loading."""

from __future__ import annotations

import io
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence
from urllib.parse import urlparse

import requests

from .config import AppConfig, SourcesConfig
from .models import STATISTIC_NUMERIC_FIELDS, CountryFeature, StatisticRecord, coerce_count
from .util import is_url


_LOGGER = logging.getLogger("drinksmap.sources")


class DataLoadError(RuntimeError):
    """A geometry or statistics source could not be loaded or parsed."""

    def __init__(self, source: str, location: str, cause: Exception) -> None:
        super().__init__(f"Failed loading {source} source '{location}': {cause}")
        self.source = source
        self.location = location
        self.cause = cause


class HttpFetcher:
    """Small `requests` wrapper shared by both sources."""

    def __init__(self, cfg: SourcesConfig, session: requests.Session | None = None) -> None:
        self.cfg = cfg
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": cfg.user_agent})

    def get_bytes(self, url: str) -> bytes:
        _LOGGER.info("Fetching %s", url)
        response = self._session.get(url, timeout=self.cfg.request_timeout_s)
        response.raise_for_status()
        return response.content


def _read_location(location: str, fetcher: HttpFetcher) -> bytes:
    if is_url(location):
        return fetcher.get_bytes(location)
    path = Path(location)
    if not path.exists():
        raise FileNotFoundError(f"Source file not found: {path}")
    return path.read_bytes()


def _location_suffix(location: str) -> str:
    if is_url(location):
        return Path(urlparse(location).path).suffix.casefold()
    return Path(location).suffix.casefold()


def _first_existing_column(columns: Iterable[str], candidates: Sequence[str]) -> str | None:
    existing = {str(col).lower(): str(col) for col in columns}
    for candidate in candidates:
        match = existing.get(candidate.lower())
        if match:
            return match
    return None


class GeometrySource:
    """Country boundaries read through GeoPandas."""

    NAME_COLUMNS = ("name", "NAME", "ADMIN", "NAME_LONG", "admin", "name_long", "NAME_EN")

    def __init__(self, location: str, fetcher: HttpFetcher, *, name_column: str | None = None) -> None:
        self.location = location
        self.fetcher = fetcher
        self.name_column = name_column

    def load(self) -> list[CountryFeature]:
        gpd = _require_geopandas()
        if is_url(self.location):
            frame = gpd.read_file(io.BytesIO(_read_location(self.location, self.fetcher)))
        else:
            path = Path(self.location)
            if not path.exists():
                raise FileNotFoundError(f"Geometry file not found: {path}")
            frame = gpd.read_file(path)
        if frame.crs is not None and not frame.crs.equals("EPSG:4326"):
            frame = frame.to_crs("EPSG:4326")
        return self.features_from_frame(frame)

    def features_from_frame(self, frame: Any) -> list[CountryFeature]:
        name_col = self._detect_name_column(frame.columns)
        grouped: dict[str, list[Any]] = {}
        skipped = 0
        for name_val, geometry in zip(frame[name_col].tolist(), frame.geometry.tolist()):
            name = name_val.strip() if isinstance(name_val, str) else ""
            if not name or geometry is None or geometry.is_empty:
                skipped += 1
                continue
            grouped.setdefault(name, []).append(geometry)
        if skipped:
            _LOGGER.warning("Skipped %d boundary rows without a name or geometry", skipped)

        features: list[CountryFeature] = []
        for name, geometries in grouped.items():
            if len(geometries) > 1:
                _LOGGER.debug("Dissolving %d boundary rows named %s", len(geometries), name)
                geometry = _require_unary_union()(geometries)
            else:
                geometry = geometries[0]
            features.append(CountryFeature(name=name, geometry=geometry))
        _LOGGER.info(
            "Loaded %d country features from %s (name column %s)",
            len(features),
            self.location,
            name_col,
        )
        return features

    def _detect_name_column(self, columns: Iterable[str]) -> str:
        candidates = (self.name_column,) if self.name_column else self.NAME_COLUMNS
        name_col = _first_existing_column(columns, candidates)
        if name_col is None:
            cols = ", ".join(str(c) for c in columns)
            raise ValueError(
                "Could not detect country name column in boundary data. "
                f"Available columns: {cols}"
            )
        return name_col


class StatisticsSource:
    """Per-country drinks records from a JSON list or a CSV table."""

    def __init__(self, location: str, fetcher: HttpFetcher) -> None:
        self.location = location
        self.fetcher = fetcher

    def load(self) -> list[StatisticRecord]:
        payload = _read_location(self.location, self.fetcher)
        if _location_suffix(self.location) == ".csv":
            rows = _rows_from_csv(payload)
        else:
            rows = _rows_from_json(payload)
        records = records_from_rows(rows)
        _LOGGER.info("Loaded %d statistic records from %s", len(records), self.location)
        return records


def _rows_from_json(payload: bytes) -> list[Mapping[str, Any]]:
    raw = json.loads(payload.decode("utf-8"))
    if not isinstance(raw, list):
        raise ValueError("Expected a JSON list of statistic records")
    return [item for item in raw if isinstance(item, Mapping)]


def _rows_from_csv(payload: bytes) -> list[Mapping[str, Any]]:
    pd = _require_pandas()
    frame = pd.read_csv(io.BytesIO(payload), dtype=str, keep_default_na=False)
    return frame.to_dict(orient="records")


def records_from_rows(rows: Iterable[Mapping[str, Any]]) -> list[StatisticRecord]:
    """Build records, zeroing numeric fields that cannot be read as counts."""
    records: list[StatisticRecord] = []
    for idx, row in enumerate(rows):
        country = row.get("country")
        if not isinstance(country, str) or not country.strip():
            _LOGGER.warning("Skipping statistics row %d without a country name", idx)
            continue
        cleaned: dict[str, Any] = {"country": country}
        for field_name in STATISTIC_NUMERIC_FIELDS:
            number = coerce_count(row.get(field_name))
            if number is None:
                _LOGGER.warning(
                    "Invalid %s=%r for %s; using 0",
                    field_name,
                    row.get(field_name),
                    country.strip(),
                )
                number = 0.0
            cleaned[field_name] = number
        records.append(StatisticRecord.from_mapping(cleaned))
    return records


@dataclass(frozen=True, slots=True)
class LoadedInputs:
    features: list[CountryFeature]
    records: list[StatisticRecord]


def load_inputs(cfg: AppConfig, *, session: requests.Session | None = None) -> LoadedInputs:
    """Load both sources; either failing fails the whole load."""
    fetcher = HttpFetcher(cfg.sources, session=session)
    geometry_source = GeometrySource(
        cfg.paths.geometry,
        fetcher,
        name_column=cfg.sources.name_column,
    )
    statistics_source = StatisticsSource(cfg.paths.statistics, fetcher)
    try:
        features = geometry_source.load()
    except Exception as exc:
        raise DataLoadError("geometry", cfg.paths.geometry, exc) from exc
    try:
        records = statistics_source.load()
    except Exception as exc:
        raise DataLoadError("statistics", cfg.paths.statistics, exc) from exc
    return LoadedInputs(features=features, records=records)


def _require_geopandas() -> Any:
    try:
        import geopandas as gpd
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("geopandas is required for boundary data loading") from exc
    return gpd


def _require_pandas() -> Any:
    try:
        import pandas as pd
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("pandas is required for CSV statistics loading") from exc
    return pd


def _require_unary_union() -> Any:
    try:
        from shapely.ops import unary_union
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("shapely is required for geometry union") from exc
    return unary_union

"""Join coverage report between boundary names and statistics rows."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

from .country_index import CountryIndex, normalize_country_name
from .models import CountryFeature
from .util import format_name_list


@dataclass(slots=True)
class JoinReport:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    infos: list[str] = field(default_factory=list)
    matched: list[str] = field(default_factory=list)
    shapes_without_data: list[str] = field(default_factory=list)
    rows_without_shape: list[str] = field(default_factory=list)
    max_litres: float = 0.0

    @property
    def ok(self) -> bool:
        return not self.errors

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)

    def add_info(self, msg: str) -> None:
        self.infos.append(msg)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "max_litres": self.max_litres,
            "matched": sorted(self.matched),
            "shapes_without_data": sorted(self.shapes_without_data),
            "rows_without_shape": sorted(self.rows_without_shape),
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "infos": list(self.infos),
        }


def build_join_report(features: Sequence[CountryFeature], index: CountryIndex) -> JoinReport:
    """Compare shape names against index keys using the same case-folded join key."""
    report = JoinReport(max_litres=index.max_litres)
    if not features:
        report.add_error("Boundary source contains no country features.")
    if len(index) == 0:
        report.add_warning("Statistics source contains no records; every country renders as no data.")

    feature_keys: set[str] = set()
    for feature in features:
        feature_keys.add(normalize_country_name(feature.name))
        if feature.name in index:
            report.matched.append(feature.name)
        else:
            report.shapes_without_data.append(feature.name)
    report.rows_without_shape = sorted(key for key in index.keys() if key not in feature_keys)

    report.add_info(
        "Join summary: "
        f"shapes={len(features)}, "
        f"statistic_rows={len(index)}, "
        f"matched={len(report.matched)}, "
        f"shapes_without_data={len(report.shapes_without_data)}, "
        f"rows_without_shape={len(report.rows_without_shape)}, "
        f"max_litres={index.max_litres:g}"
    )
    if report.shapes_without_data:
        report.add_warning(
            "Countries drawn without statistics: "
            + format_name_list(sorted(report.shapes_without_data))
        )
    if report.rows_without_shape:
        report.add_warning(
            "Statistics rows with no matching boundary: "
            + format_name_list(report.rows_without_shape)
        )
    return report


def format_report_lines(report: JoinReport) -> Iterable[str]:
    for info in report.infos:
        yield f"[INFO] {info}"
    for warning in report.warnings:
        yield f"[WARN] {warning}"
    for error in report.errors:
        yield f"[ERROR] {error}"
    if report.ok:
        yield "[OK] Join check completed with no errors."

"""CLI entrypoint for the drinks choropleth."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

from .config import AppConfig, load_config
from .country_index import CountryIndex
from .pipeline import load_choropleth
from .render import InteractiveMapView, format_render_lines, run_render
from .sources import DataLoadError, load_inputs
from .util import ensure_directories, setup_logging, write_json
from .validate import build_join_report, format_report_lines

LOGGER = logging.getLogger("drinksmap.cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="drinksmap",
        description="World map of alcohol consumption per country.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_common(p: argparse.ArgumentParser) -> None:
        p.add_argument("--config", default="config.yaml", help="Path to YAML config.")
        p.add_argument("--verbose", action="store_true", help="Enable debug logs.")

    render_p = subparsers.add_parser("render", help="Write the map to an image file.")
    add_common(render_p)
    render_p.add_argument(
        "--output",
        default=None,
        help="Output file. Defaults to <output_dir>/drinks_map.<format>.",
    )

    show_p = subparsers.add_parser("show", help="Open the interactive map with hover tooltips.")
    add_common(show_p)

    validate_p = subparsers.add_parser(
        "validate",
        help="Report which countries join between the boundary and statistics sources.",
    )
    add_common(validate_p)
    validate_p.add_argument(
        "--json",
        default=None,
        help="Also write the join report as JSON to this path.",
    )

    return parser


def _load_and_setup(args: argparse.Namespace) -> AppConfig:
    cfg = load_config(args.config)
    setup_logging(cfg.paths.logs_dir / "drinksmap.log", verbose=args.verbose)
    ensure_directories(cfg.paths.build_directories)
    return cfg


def _run_render(cfg: AppConfig, *, output: str | None) -> int:
    report = run_render(cfg, output_path=Path(output) if output else None)
    for line in format_render_lines(report):
        LOGGER.info(line)
    return 0 if report.ok else 1


def _run_show(cfg: AppConfig) -> int:
    try:
        choropleth = load_choropleth(cfg)
    except DataLoadError as exc:
        LOGGER.error("%s", exc)
        return 1
    view = InteractiveMapView(choropleth)
    LOGGER.info("Opening interactive map with %d shapes.", len(choropleth.layer))
    view.show()
    return 0


def _run_validate(cfg: AppConfig, *, json_path: str | None) -> int:
    try:
        inputs = load_inputs(cfg)
    except DataLoadError as exc:
        LOGGER.error("%s", exc)
        return 1
    report = build_join_report(inputs.features, CountryIndex.build(inputs.records))
    for line in format_report_lines(report):
        LOGGER.info(line)
    if json_path:
        write_json(Path(json_path), report.to_dict())
        LOGGER.info("Join report written to %s", json_path)
    return 0 if report.ok else 1


def _dispatch(args: argparse.Namespace) -> int:
    cfg = _load_and_setup(args)
    command = str(args.command)
    if command == "render":
        return _run_render(cfg, output=args.output)
    if command == "show":
        return _run_show(cfg)
    if command == "validate":
        return _run_validate(cfg, json_path=args.json)
    raise ValueError(f"Unknown command: {command}")


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    return _dispatch(args)


if __name__ == "__main__":
    raise SystemExit(main())

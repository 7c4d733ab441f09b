"""Assembly of index, encoder, binder and interaction controller."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import requests

from .binder import ProjectFn, ShapeLayer, bind
from .config import AppConfig
from .country_index import CountryIndex
from .encoder import ColorEncoder
from .interaction import InteractionController, TooltipSurface
from .models import CountryFeature, StatisticRecord
from .projection import Projector
from .sources import load_inputs


_LOGGER = logging.getLogger("drinksmap.pipeline")


@dataclass(slots=True)
class ChoroplethMap:
    cfg: AppConfig
    features: Sequence[CountryFeature]
    index: CountryIndex
    encoder: ColorEncoder
    layer: ShapeLayer
    controller: InteractionController


def build_choropleth(
    cfg: AppConfig,
    features: Sequence[CountryFeature],
    records: Sequence[StatisticRecord],
    *,
    projector: ProjectFn | None = None,
    tooltip_surface: TooltipSurface | None = None,
) -> ChoroplethMap:
    index = CountryIndex.build(records)
    _LOGGER.info("Indexed %d countries; max litres %.2f", len(index), index.max_litres)
    encoder = ColorEncoder.build(
        index.max_litres,
        ramp=cfg.color.ramp,
        range_min=cfg.color.range_min,
        range_max=cfg.color.range_max,
    )
    project = projector if projector is not None else Projector.from_config(cfg.projection, cfg.canvas)
    layer = bind(features, encoder, index, projector=project, base_style=cfg.style.base)
    controller = InteractionController.from_config(cfg, layer, index, tooltip_surface=tooltip_surface)
    return ChoroplethMap(
        cfg=cfg,
        features=features,
        index=index,
        encoder=encoder,
        layer=layer,
        controller=controller,
    )


def load_choropleth(cfg: AppConfig, *, session: requests.Session | None = None) -> ChoroplethMap:
    """Load both sources, then bind; nothing is bound if either load fails."""
    inputs = load_inputs(cfg, session=session)
    return build_choropleth(cfg, inputs.features, inputs.records)
